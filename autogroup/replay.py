from __future__ import annotations

from dataclasses import dataclass, field, fields
import logging
from typing import Any

import yaml

from .callback import GroupingCallback
from .config import expand_env, require_dict
from .flags import Importance, parse_flags
from .manager import AggregateGroupManager
from .models import Icon, NotificationAttributes, NotificationChannel, NotificationView


# Reason code the platform reports for an app-initiated cancel.
REASON_APP_CANCEL = 8

EVENT_TYPES = {
    "post",
    "post_delayed",
    "remove",
    "channel_update",
    "classify",
    "unbundle",
    "cancel_summary",
}

_VIEW_FIELDS = {item.name for item in fields(NotificationView)}


@dataclass
class HostEvent:
    operation: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class ScenarioEvent:
    type: str
    data: dict[str, Any]


class ReplayHost(GroupingCallback):
    """In-memory host that applies grouping callbacks to its live notifications."""

    def __init__(self) -> None:
        self.notifications: dict[str, NotificationView] = {}
        self.autogroup_summaries: dict[str, NotificationAttributes] = {}
        self.events: list[HostEvent] = []
        self._pending_removals: list[NotificationView] = []
        self._logger = logging.getLogger(__name__)

    def snapshot(self) -> list[NotificationView]:
        return list(self.notifications.values())

    def summaries_by_group(self) -> dict[str, NotificationView]:
        return {
            str(view.full_group_key): view
            for view in self.notifications.values()
            if view.is_group_summary and view.is_app_group and not view.is_canceled
        }

    def take_pending_removals(self) -> list[NotificationView]:
        pending, self._pending_removals = self._pending_removals, []
        return pending

    def add_auto_group_summary(
        self,
        user_id: int,
        package: str,
        triggering_key: str,
        group_key: str,
        summary_id: int,
        attributes: NotificationAttributes,
    ) -> None:
        self.autogroup_summaries[group_key] = attributes
        self._record(
            "add_auto_group_summary",
            user_id=user_id,
            package=package,
            triggering_key=triggering_key,
            group_key=group_key,
            summary_id=summary_id,
            attributes=attributes,
        )

    def add_auto_group(self, key: str, group_key: str, requires_sort: bool) -> None:
        view = self.notifications.get(key)
        if view is not None:
            view.override_group_key = group_key
        self._record("add_auto_group", key=key, group_key=group_key, requires_sort=requires_sort)

    def update_autogroup_summary(
        self, user_id: int, package: str, group_key: str, attributes: NotificationAttributes
    ) -> None:
        self.autogroup_summaries[group_key] = attributes
        self._record(
            "update_autogroup_summary",
            user_id=user_id,
            package=package,
            group_key=group_key,
            attributes=attributes,
        )

    def remove_auto_group(self, key: str) -> None:
        view = self.notifications.get(key)
        if view is not None:
            view.override_group_key = None
        self._record("remove_auto_group", key=key)

    def remove_auto_group_summary(self, user_id: int, package: str, group_key: str) -> None:
        self.autogroup_summaries.pop(group_key, None)
        self._record(
            "remove_auto_group_summary", user_id=user_id, package=package, group_key=group_key
        )

    def remove_app_provided_summary(self, key: str) -> None:
        self.notifications.pop(key, None)
        self._record("remove_app_provided_summary", key=key)

    def remove_app_provided_summary_on_classification(
        self, key: str, original_group_key: str
    ) -> NotificationView | None:
        self._record(
            "remove_app_provided_summary_on_classification",
            key=key,
            original_group_key=original_group_key,
        )
        summary = self.summaries_by_group().get(original_group_key)
        if summary is None:
            return None
        self.notifications.pop(summary.key, None)
        return summary

    def remove_notification_from_canceled_group(
        self, user_id: int, package: str, group_name: str, reason: int
    ) -> None:
        self._record(
            "remove_notification_from_canceled_group",
            user_id=user_id,
            package=package,
            group_name=group_name,
            reason=reason,
        )
        for view in list(self.notifications.values()):
            if view.user_id == user_id and view.package == package and view.group_key == group_name:
                self.notifications.pop(view.key)
                self._pending_removals.append(view)

    def send_app_provided_summary_delete_intent(self, package: str, intent: Any) -> None:
        self._record("send_app_provided_summary_delete_intent", package=package, intent=intent)

    def _record(self, operation: str, **payload: Any) -> None:
        self._logger.debug("Host event %s %s", operation, payload)
        self.events.append(HostEvent(operation=operation, payload=payload))


def view_from_mapping(raw: dict[str, Any]) -> NotificationView:
    if not isinstance(raw, dict):
        raise ValueError("notification must be a mapping")
    unknown = sorted(str(name) for name in raw if name not in _VIEW_FIELDS)
    if unknown:
        raise ValueError(f"notification has unknown fields: {', '.join(unknown)}")
    if not raw.get("key") or not raw.get("package"):
        raise ValueError("notification must include key and package")

    values = dict(raw)
    values["flags"] = parse_flags(values.get("flags"))
    if "icon" in values:
        values["icon"] = _parse_icon(values["icon"], str(values["package"]))
    return NotificationView(**values)


def _parse_icon(value: Any, package: str) -> Icon | None:
    if value is None:
        return None
    if isinstance(value, str):
        icon_package, _, resource = value.rpartition("/")
        return Icon(package=icon_package or package, resource=resource)
    data = require_dict(value, "notification.icon")
    if "resource" not in data:
        raise ValueError("notification.icon must include resource")
    return Icon(package=str(data.get("package", package)), resource=str(data["resource"]))


def load_scenario(path: str) -> list[ScenarioEvent]:
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or []

    data = expand_env(raw)
    if not isinstance(data, list):
        raise ValueError("Scenario root must be a list of events")

    events: list[ScenarioEvent] = []
    for entry in data:
        if not isinstance(entry, dict):
            raise ValueError("scenario events must be mappings")
        event_type = entry.get("type")
        if event_type not in EVENT_TYPES:
            raise ValueError(f"unknown scenario event type: {event_type}")
        events.append(
            ScenarioEvent(
                type=str(event_type),
                data={key: value for key, value in entry.items() if key != "type"},
            )
        )
    return events


def run_scenario(
    manager: AggregateGroupManager, host: ReplayHost, events: list[ScenarioEvent]
) -> list[HostEvent]:
    """Drive the manager with scenario events, returning the host events emitted."""
    start = len(host.events)
    for event in events:
        _apply_event(manager, host, event)
        for removed in host.take_pending_removals():
            manager.on_notification_removed(removed, host.snapshot())
    return host.events[start:]


def _apply_event(manager: AggregateGroupManager, host: ReplayHost, event: ScenarioEvent) -> None:
    data = event.data
    if event.type == "post":
        view = view_from_mapping(require_dict(data.get("notification"), "notification"))
        _post(manager, host, view)
    elif event.type == "post_delayed":
        view = _lookup(host, data)
        manager.on_notification_posted_with_delay(
            view, host.snapshot(), host.summaries_by_group()
        )
    elif event.type == "remove":
        _remove(manager, host, _lookup(host, data), bool(data.get("sending_delete", True)))
    elif event.type == "channel_update":
        _update_channel(manager, host, data)
    elif event.type == "classify":
        view = _lookup(host, data)
        _retarget(view, data)
        manager.on_notification_classified(view)
    elif event.type == "unbundle":
        view = _lookup(host, data)
        _retarget(view, data)
        had_summary = str(view.full_group_key) in host.summaries_by_group()
        manager.on_notification_unbundled(view, had_summary)
    elif event.type == "cancel_summary":
        _cancel_summary(manager, host, data)


def _post(manager: AggregateGroupManager, host: ReplayHost, view: NotificationView) -> None:
    previous = host.notifications.get(view.key)
    if previous is not None and view.override_group_key is None:
        view.override_group_key = previous.override_group_key
    host.notifications[view.key] = view

    if manager.on_notification_posted(view):
        view.override_group_key = manager.full_aggregate_group_key(view)
    if view.is_group_summary:
        manager.on_group_summary_added(view, host.snapshot())
    manager.on_notification_posted_with_delay(view, host.snapshot(), host.summaries_by_group())


def _remove(
    manager: AggregateGroupManager,
    host: ReplayHost,
    view: NotificationView,
    sending_delete: bool = True,
) -> None:
    host.notifications.pop(view.key, None)
    manager.on_notification_removed(view, host.snapshot(), sending_delete=sending_delete)
    if view.is_app_group and not view.is_group_summary:
        summary = host.summaries_by_group().get(str(view.full_group_key))
        if summary is not None:
            manager.on_grouped_notification_removed_with_delay(
                summary, host.snapshot(), host.summaries_by_group()
            )


def _update_channel(manager: AggregateGroupManager, host: ReplayHost, data: dict[str, Any]) -> None:
    channel_raw = require_dict(data.get("channel"), "channel")
    if not channel_raw.get("id"):
        raise ValueError("channel must include id")
    channel = NotificationChannel(
        id=str(channel_raw["id"]),
        importance=int(channel_raw.get("importance", Importance.DEFAULT)),
        is_important_conversation=bool(channel_raw.get("is_important_conversation", False)),
    )
    manager.on_channel_updated(
        int(data.get("user_id", 0)),
        str(data.get("package", "")),
        channel,
        host.snapshot(),
        host.summaries_by_group(),
    )


def _cancel_summary(manager: AggregateGroupManager, host: ReplayHost, data: dict[str, Any]) -> None:
    package = str(data.get("package", ""))
    tag = data.get("tag")
    id = int(data.get("id", 0))
    user_id = int(data.get("user_id", 0))
    reason = int(data.get("reason", REASON_APP_CANCEL))
    if manager.maybe_cancel_group_children_for_canceled_summary(package, tag, id, user_id, reason):
        return
    for view in host.snapshot():
        if (view.package, view.tag, view.id, view.user_id) == (package, tag, id, user_id):
            _remove(manager, host, view)


def _lookup(host: ReplayHost, data: dict[str, Any]) -> NotificationView:
    key = data.get("key")
    view = host.notifications.get(str(key))
    if view is None:
        raise ValueError(f"unknown notification key: {key}")
    return view


def _retarget(view: NotificationView, data: dict[str, Any]) -> None:
    if "channel_id" in data:
        view.channel_id = str(data["channel_id"])
    if "importance" in data:
        view.importance = int(data["importance"])
