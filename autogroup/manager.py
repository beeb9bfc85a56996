from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence
import zlib

from .attributes import AttributeAggregator
from .cache import CanceledSummaryCache
from .callback import GroupingCallback
from .config import GroupingConfig
from .icons import IconProvider
from .models import (
    AggregateGroup,
    CachedSummary,
    FullyQualifiedGroupKey,
    GroupMember,
    NotificationChannel,
    NotificationView,
)
from .sections import Section, SectionClassifier
from .tracker import NotificationGroupTracker, SparseGroup, has_live_children, has_summary


def summary_id_for(scope: FullyQualifiedGroupKey) -> int:
    return zlib.crc32(str(scope).encode("utf-8")) & 0x7FFFFFFF


def _member(view: NotificationView) -> GroupMember:
    return GroupMember(key=view.key, attributes=view.attributes(), original_group=view.group_key)


class AggregateGroupManager:
    """Forms, maintains and dissolves aggregate groups for one host.

    The manager is not thread-safe. The host must deliver events from a single
    serialized stream, and callback operations are emitted synchronously in
    the order they must be applied.
    """

    def __init__(
        self,
        callback: GroupingCallback,
        config: GroupingConfig | None = None,
        icon_provider: IconProvider | None = None,
    ) -> None:
        self._callback = callback
        self._config = config or GroupingConfig()
        self._capabilities = self._config.capabilities
        self._classifier = SectionClassifier(self._capabilities)
        self._aggregator = AttributeAggregator(icon_provider)
        self._tracker = NotificationGroupTracker()
        self._cache = CanceledSummaryCache(callback)
        self._logger = logging.getLogger(__name__)

    @property
    def tracker(self) -> NotificationGroupTracker:
        return self._tracker

    def full_aggregate_group_key(self, view: NotificationView) -> str | None:
        scope = self._scope_for(view)
        if scope is None:
            return None
        return str(scope)

    def on_notification_posted(self, view: NotificationView) -> bool:
        """Handle a post of a notification without an app group.

        Returns True when the caller must fold the notification into the
        aggregate group itself instead of waiting for ``add_auto_group``.
        """
        if view.is_app_group:
            self._ungroup_on_app_grouped(view)
            return False

        section = self._classifier.classify(view)
        if not section.groupable:
            if self._detach(view.key):
                self._callback.remove_auto_group(view.key)
            return False

        scope = section.scope(view.user_id, view.package)
        current = self._tracker.tracked_scope(view.key)
        if current is not None and current != scope:
            self._logger.debug("Notification %s moved from %s to %s", view.key, current, scope)
            if self._detach(view.key):
                self._callback.remove_auto_group(view.key)

        return self._group_ungrouped(
            view, scope, fold_trigger=self._capabilities.check_autogroup_before_post
        )

    def on_notification_posted_with_delay(
        self,
        view: NotificationView,
        notifications: Sequence[NotificationView],
        summary_by_group: Mapping[str, NotificationView],
    ) -> None:
        if not view.is_app_group or view.is_canceled:
            return
        if self._tracker.is_aggregated(view):
            return

        section = self._classifier.classify(view)
        if not section.groupable:
            return
        scope = section.scope(view.user_id, view.package)

        if section.is_bundle and not view.is_group_summary and self._regroups_on_classification:
            self._bundle(view, scope)
            return

        if view.is_group_summary:
            if not has_live_children(view, notifications):
                self._group_ungrouped(view, scope, fold_trigger=False)
                return
            self._tracker.remove_ungrouped(view.key)
        else:
            if not has_summary(view, summary_by_group):
                self._group_ungrouped(view, scope, fold_trigger=False)
                return
            self._tracker.remove_ungrouped(summary_by_group[str(view.full_group_key)].key)

        if self._capabilities.force_group_singletons:
            self._group_sparse_groups(view, section, scope, notifications, summary_by_group)

    def on_notification_removed(
        self,
        view: NotificationView,
        notifications: Sequence[NotificationView],
        sending_delete: bool = True,
    ) -> None:
        """Forget a removed notification.

        ``sending_delete`` is set when the host fires delete intents for this
        removal. Only such removals forward the delete intent of a canceled
        app summary whose last child is gone.
        """
        self._tracker.remove_ungrouped(view.key)
        group = self._tracker.remove_member(view.key)
        if group is not None:
            self._after_member_removed(group)
        if sending_delete:
            self._maybe_clear_canceled_summary(view, notifications)

    def on_grouped_notification_removed_with_delay(
        self,
        view: NotificationView,
        notifications: Sequence[NotificationView],
        summary_by_group: Mapping[str, NotificationView],
    ) -> None:
        if view.is_canceled:
            return
        self.on_notification_posted_with_delay(view, notifications, summary_by_group)

    def on_group_summary_added(
        self, summary: NotificationView, notifications: Sequence[NotificationView]
    ) -> None:
        group_key = summary.full_group_key
        if group_key is None:
            return
        for view in notifications:
            if view.key == summary.key or view.full_group_key != group_key:
                continue
            if self._tracker.remove_ungrouped(view.key) is not None:
                self._logger.debug("Notification %s left the ungrouped pool", view.key)

    def on_channel_updated(
        self,
        user_id: int,
        package: str,
        channel: NotificationChannel,
        notifications: Sequence[NotificationView],
        summary_by_group: Mapping[str, NotificationView],
    ) -> None:
        moved: dict[FullyQualifiedGroupKey, list[NotificationView]] = {}
        previously_aggregated: set[str] = set()
        touched: dict[FullyQualifiedGroupKey, AggregateGroup] = {}
        to_bundle: list[tuple[NotificationView, FullyQualifiedGroupKey]] = []
        to_reevaluate: list[NotificationView] = []

        for view in notifications:
            if view.user_id != user_id or view.package != package:
                continue
            if view.channel_id != channel.id or view.is_canceled:
                continue
            view.importance = channel.importance
            view.is_important_conversation = channel.is_important_conversation
            section = self._classifier.classify(view)
            new_scope = section.scope(user_id, package) if section.groupable else None
            old_scope = self._tracker.tracked_scope(view.key)

            if old_scope is None:
                if new_scope is not None and self._should_bundle(view, section):
                    to_bundle.append((view, new_scope))
                elif new_scope is not None and view.is_app_group:
                    to_reevaluate.append(view)
                continue
            if old_scope == new_scope:
                continue

            self._tracker.remove_ungrouped(view.key)
            group = self._tracker.remove_member(view.key)
            if group is not None:
                touched[group.scope] = group
                previously_aggregated.add(view.key)

            if new_scope is None:
                if view.key in previously_aggregated:
                    self._callback.remove_auto_group(view.key)
                continue
            if self._should_bundle(view, section):
                self._cancel_summary_on_classification(view)
            moved.setdefault(new_scope, []).append(view)

        for group in touched.values():
            self._after_member_removed(group)
        for scope, views in moved.items():
            self._regroup(scope, views, previously_aggregated)
        for view, scope in to_bundle:
            self._bundle(view, scope)
        for view in to_reevaluate:
            self.on_notification_posted_with_delay(view, notifications, summary_by_group)

        if moved or touched or to_bundle:
            self._logger.info(
                "Channel %s of %s updated; regrouped %s notifications",
                channel.id,
                package,
                sum(len(views) for views in moved.values()) + len(to_bundle),
            )

    def on_notification_classified(self, view: NotificationView) -> None:
        if not self._regroups_on_classification or view.is_canceled:
            return
        section = self._classifier.classify(view)
        new_scope = section.scope(view.user_id, view.package) if section.groupable else None

        if new_scope is not None and section.is_bundle:
            self._bundle(view, new_scope)
            return

        old_scope = self._tracker.tracked_scope(view.key)
        if old_scope is None or old_scope == new_scope:
            return
        self._move(view, new_scope)

    def on_notification_unbundled(self, view: NotificationView, had_original_summary: bool) -> None:
        if had_original_summary:
            self._detach(view.key)
            self._logger.debug("Notification %s returned to its app group", view.key)
            return

        new_scope = self._scope_for(view)
        if self._tracker.tracked_scope(view.key) == new_scope and new_scope is not None:
            return
        self._move(view, new_scope)

    def maybe_cancel_group_children_for_canceled_summary(
        self, package: str, tag: str | None, id: int, user_id: int, reason: int
    ) -> bool:
        return self._cache.on_app_cancel_summary(package, tag, id, user_id, reason)

    def find_canceled_summary(
        self, package: str, tag: str | None, id: int, user_id: int
    ) -> CachedSummary | None:
        return self._cache.find(package, tag, id, user_id)

    @property
    def _regroups_on_classification(self) -> bool:
        return self._capabilities.classification and self._capabilities.regroup_on_classification

    def _scope_for(self, view: NotificationView) -> FullyQualifiedGroupKey | None:
        section = self._classifier.classify(view)
        if not section.groupable:
            return None
        return section.scope(view.user_id, view.package)

    def _should_bundle(self, view: NotificationView, section: Section) -> bool:
        return (
            section.is_bundle
            and view.is_app_group
            and not view.is_group_summary
            and self._regroups_on_classification
        )

    def _ungroup_on_app_grouped(self, view: NotificationView) -> None:
        # Only notifications that joined while ungrouped leave when the app groups them.
        pooled = self._tracker.pooled_member(view.key)
        if pooled is not None and pooled.original_group is None:
            self._tracker.remove_ungrouped(view.key)
        member = self._tracker.member(view.key)
        if member is not None and member.original_group is None:
            self._detach(view.key)
            self._callback.remove_auto_group(view.key)

    def _group_ungrouped(
        self, view: NotificationView, scope: FullyQualifiedGroupKey, fold_trigger: bool
    ) -> bool:
        group = self._tracker.aggregate(scope)
        if group is not None:
            self._tracker.add_member(scope, _member(view))
            grouped = self._attach(group, view.key, fold_trigger)
            self._update_summary(group)
            return grouped

        count = self._tracker.add_ungrouped(scope, _member(view))
        if count < self._config.autogroup_at_count:
            self._logger.debug("%s has %s ungrouped notifications", scope, count)
            return False

        members = self._tracker.take_ungrouped(scope)
        self._create_group(scope, view.key, members, fold_key=view.key if fold_trigger else None)
        return fold_trigger

    def _group_sparse_groups(
        self,
        view: NotificationView,
        section: Section,
        scope: FullyQualifiedGroupKey,
        notifications: Sequence[NotificationView],
        summary_by_group: Mapping[str, NotificationView],
    ) -> None:
        sparse = self._tracker.sparse_groups(
            scope,
            lambda other: self._classifier.classify(other) is section,
            notifications,
            summary_by_group,
            self._config.autogroup_singletons_at_count,
        )

        group = self._tracker.aggregate(scope)
        if group is not None:
            target = sparse.get(str(view.full_group_key))
            if target is None:
                return
            for child in target.children:
                self._tracker.add_member(scope, _member(child))
                self._callback.add_auto_group(child.key, str(scope), True)
            self._cancel_sparse_summaries([target])
            self._update_summary(group)
            return

        if len(sparse) < self._config.autogroup_singletons_at_count:
            return

        children = [child for sparse_group in sparse.values() for child in sparse_group.children]
        members = self._tracker.take_ungrouped(scope)
        members.extend(_member(child) for child in children)
        triggering_key = children[0].key if view.is_group_summary else view.key
        self._create_group(scope, triggering_key, members, singleton=True)
        self._cancel_sparse_summaries(sparse.values())

    def _cancel_sparse_summaries(self, groups: Iterable[SparseGroup]) -> None:
        for sparse_group in groups:
            self._logger.info(
                "Canceled app summary %s of sparse group %s",
                sparse_group.summary.key,
                sparse_group.group_key,
            )
            self._tracker.remove_ungrouped(sparse_group.summary.key)
            self._callback.remove_app_provided_summary(sparse_group.summary.key)
            self._cache.record(CachedSummary.from_summary(sparse_group.summary))

    def _cancel_summary_on_classification(self, view: NotificationView) -> None:
        summary = self._callback.remove_app_provided_summary_on_classification(
            view.key, str(view.full_group_key)
        )
        if summary is not None:
            self._tracker.remove_ungrouped(summary.key)
            self._cache.record(CachedSummary.from_summary(summary))

    def _bundle(self, view: NotificationView, scope: FullyQualifiedGroupKey) -> None:
        if self._tracker.tracked_scope(view.key) == scope:
            return
        was_aggregated = self._detach(view.key)
        if view.is_app_group and not view.is_group_summary:
            self._cancel_summary_on_classification(view)
        self._regroup(scope, [view], {view.key} if was_aggregated else set())

    def _move(self, view: NotificationView, new_scope: FullyQualifiedGroupKey | None) -> None:
        was_aggregated = self._detach(view.key)
        if new_scope is None:
            if was_aggregated:
                self._callback.remove_auto_group(view.key)
            return
        self._regroup(new_scope, [view], {view.key} if was_aggregated else set())

    def _regroup(
        self,
        scope: FullyQualifiedGroupKey,
        views: list[NotificationView],
        previously_aggregated: set[str],
    ) -> None:
        group = self._tracker.aggregate(scope)
        if group is not None:
            for view in views:
                self._tracker.add_member(scope, _member(view))
                self._callback.add_auto_group(view.key, str(scope), True)
            self._update_summary(group)
            return

        moved_keys = {view.key for view in views}
        pooled = [member for member in self._tracker.take_ungrouped(scope) if member.key not in moved_keys]
        members = [_member(view) for view in views] + pooled
        if len(members) >= self._config.autogroup_at_count:
            self._create_group(scope, views[0].key, members)
            return

        for member in pooled + members[: len(views)]:
            self._tracker.add_ungrouped(scope, member)
        for view in views:
            if view.key in previously_aggregated:
                self._callback.remove_auto_group(view.key)

    def _create_group(
        self,
        scope: FullyQualifiedGroupKey,
        triggering_key: str,
        members: list[GroupMember],
        fold_key: str | None = None,
        singleton: bool = False,
    ) -> AggregateGroup:
        group = self._tracker.create_aggregate(scope, triggering_key, singleton=singleton)
        for member in members:
            self._tracker.add_member(scope, member)
        group.attributes = self._aggregator.aggregate(scope.package, group.member_attributes())

        self._logger.info(
            "Created aggregate group %s with %s notifications (triggered by %s)",
            scope,
            len(group.members),
            triggering_key,
        )
        self._callback.add_auto_group_summary(
            scope.user_id,
            scope.package,
            triggering_key,
            str(scope),
            summary_id_for(scope),
            group.attributes,
        )
        for key in group.members:
            if key != fold_key:
                self._callback.add_auto_group(key, str(scope), True)
        return group

    def _attach(self, group: AggregateGroup, key: str, fold: bool) -> bool:
        if fold:
            return True
        self._callback.add_auto_group(key, str(group.scope), True)
        return False

    def _detach(self, key: str) -> bool:
        self._tracker.remove_ungrouped(key)
        group = self._tracker.remove_member(key)
        if group is None:
            return False
        self._after_member_removed(group)
        return True

    def _after_member_removed(self, group: AggregateGroup) -> None:
        if group.members:
            self._update_summary(group)
            return
        self._tracker.drop_aggregate(group.scope)
        self._logger.info("Removed empty aggregate group %s", group.scope)
        self._callback.remove_auto_group_summary(
            group.scope.user_id, group.scope.package, str(group.scope)
        )

    def _update_summary(self, group: AggregateGroup) -> None:
        attributes = self._aggregator.aggregate(group.scope.package, group.member_attributes())
        if attributes == group.attributes:
            return
        group.attributes = attributes
        self._logger.debug("Updated summary of %s", group.scope)
        self._callback.update_autogroup_summary(
            group.scope.user_id, group.scope.package, str(group.scope), attributes
        )

    def _maybe_clear_canceled_summary(
        self, view: NotificationView, notifications: Sequence[NotificationView]
    ) -> None:
        if view.group_key is None or view.is_group_summary:
            return
        cached = self._cache.find_by_group(view.user_id, view.package, view.group_key)
        if cached is None:
            return
        for other in notifications:
            if other.key == view.key or other.is_group_summary or other.is_canceled:
                continue
            if other.full_group_key == view.full_group_key:
                return
        self._cache.on_last_child_removed(cached)
