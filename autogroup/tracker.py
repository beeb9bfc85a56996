from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence

from .models import AggregateGroup, FullyQualifiedGroupKey, GroupMember, NotificationView


@dataclass
class SparseGroup:
    group_key: str
    summary: NotificationView
    children: list[NotificationView] = field(default_factory=list)


class NotificationGroupTracker:
    """Per-scope bookkeeping for ungrouped pools and aggregate groups.

    A notification key is tracked in at most one place: the ungrouped pool of
    one scope, or the membership of one aggregate group. Moving a key into an
    aggregate removes it from any pool.
    """

    def __init__(self) -> None:
        self._ungrouped: dict[FullyQualifiedGroupKey, dict[str, GroupMember]] = {}
        self._aggregates: dict[FullyQualifiedGroupKey, AggregateGroup] = {}
        self._pool_scopes: dict[str, FullyQualifiedGroupKey] = {}
        self._member_scopes: dict[str, FullyQualifiedGroupKey] = {}

    def add_ungrouped(self, scope: FullyQualifiedGroupKey, member: GroupMember) -> int:
        previous = self._pool_scopes.get(member.key)
        if previous is not None and previous != scope:
            self.remove_ungrouped(member.key)
        pool = self._ungrouped.setdefault(scope, {})
        pool[member.key] = member
        self._pool_scopes[member.key] = scope
        return len(pool)

    def remove_ungrouped(self, key: str) -> FullyQualifiedGroupKey | None:
        scope = self._pool_scopes.pop(key, None)
        if scope is None:
            return None
        pool = self._ungrouped.get(scope, {})
        pool.pop(key, None)
        if not pool:
            self._ungrouped.pop(scope, None)
        return scope

    def ungrouped(self, scope: FullyQualifiedGroupKey) -> list[GroupMember]:
        """Inspection helper: the members currently pooled under ``scope``."""
        return list(self._ungrouped.get(scope, {}).values())

    def take_ungrouped(self, scope: FullyQualifiedGroupKey) -> list[GroupMember]:
        pool = self._ungrouped.pop(scope, {})
        for key in pool:
            self._pool_scopes.pop(key, None)
        return list(pool.values())

    def aggregate(self, scope: FullyQualifiedGroupKey) -> AggregateGroup | None:
        return self._aggregates.get(scope)

    def create_aggregate(
        self, scope: FullyQualifiedGroupKey, triggering_key: str, singleton: bool = False
    ) -> AggregateGroup:
        group = AggregateGroup(scope=scope, triggering_key=triggering_key, singleton=singleton)
        self._aggregates[scope] = group
        return group

    def add_member(self, scope: FullyQualifiedGroupKey, member: GroupMember) -> AggregateGroup:
        group = self._aggregates[scope]
        current = self._member_scopes.get(member.key)
        if current is not None and current != scope:
            self.remove_member(member.key)
        self.remove_ungrouped(member.key)
        group.members[member.key] = member
        self._member_scopes[member.key] = scope
        return group

    def remove_member(self, key: str) -> AggregateGroup | None:
        scope = self._member_scopes.pop(key, None)
        if scope is None:
            return None
        group = self._aggregates.get(scope)
        if group is None:
            return None
        group.members.pop(key, None)
        return group

    def drop_aggregate(self, scope: FullyQualifiedGroupKey) -> None:
        group = self._aggregates.pop(scope, None)
        if group is None:
            return
        for key in group.members:
            self._member_scopes.pop(key, None)

    def member(self, key: str) -> GroupMember | None:
        scope = self._member_scopes.get(key)
        if scope is None:
            return None
        return self._aggregates[scope].members.get(key)

    def pooled_member(self, key: str) -> GroupMember | None:
        scope = self._pool_scopes.get(key)
        if scope is None:
            return None
        return self._ungrouped[scope].get(key)

    def scope_of(self, key: str) -> FullyQualifiedGroupKey | None:
        """Inspection helper: the aggregate group ``key`` belongs to, if any."""
        return self._member_scopes.get(key)

    def pool_scope_of(self, key: str) -> FullyQualifiedGroupKey | None:
        """Inspection helper: the ungrouped pool holding ``key``, if any."""
        return self._pool_scopes.get(key)

    def tracked_scope(self, key: str) -> FullyQualifiedGroupKey | None:
        return self._member_scopes.get(key) or self._pool_scopes.get(key)

    def is_aggregated(self, view: NotificationView) -> bool:
        return view.key in self._member_scopes or view.is_aggregated

    def sparse_groups(
        self,
        scope: FullyQualifiedGroupKey,
        in_section: Callable[[NotificationView], bool],
        notifications: Sequence[NotificationView],
        summary_by_group: Mapping[str, NotificationView],
        max_children: int,
    ) -> dict[str, SparseGroup]:
        """App groups in the scope's package whose summary guards too few children.

        A group qualifies when its summary is known and it has at least one
        but fewer than ``max_children`` live children, none of them aggregated
        already and all of them in the trigger's section.
        """
        children_by_group: dict[str, list[NotificationView]] = {}
        excluded: set[str] = set()
        for view in notifications:
            if view.user_id != scope.user_id or view.package != scope.package:
                continue
            if not view.is_app_group or view.is_group_summary or view.is_canceled:
                continue
            if self.is_aggregated(view):
                continue
            group_key = str(view.full_group_key)
            if not in_section(view):
                excluded.add(group_key)
                continue
            children_by_group.setdefault(group_key, []).append(view)

        sparse: dict[str, SparseGroup] = {}
        for group_key, children in children_by_group.items():
            if group_key in excluded:
                continue
            summary = summary_by_group.get(group_key)
            if summary is None:
                continue
            if len(children) >= max_children:
                continue
            sparse[group_key] = SparseGroup(group_key=group_key, summary=summary, children=children)
        return sparse


def has_live_children(summary: NotificationView, notifications: Sequence[NotificationView]) -> bool:
    group_key = summary.full_group_key
    for view in notifications:
        if view.key == summary.key or view.is_group_summary or view.is_canceled:
            continue
        if view.full_group_key == group_key:
            return True
    return False


def has_summary(view: NotificationView, summary_by_group: Mapping[str, NotificationView]) -> bool:
    return str(view.full_group_key) in summary_by_group
