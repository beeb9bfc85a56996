from __future__ import annotations

from typing import Iterable

from .flags import BASE_FLAGS, COLOR_DEFAULT, GroupAlertBehavior, NotificationFlags, Visibility
from .icons import IconProvider, get_monochrome_app_icon
from .models import NotificationAttributes


def get_autogroup_summary_flags(children: Iterable[NotificationAttributes]) -> NotificationFlags:
    flags = BASE_FLAGS
    all_auto_cancel = True
    has_children = False
    for child in children:
        has_children = True
        child_flags = NotificationFlags(child.flags)
        if child_flags.has_ongoing:
            flags |= NotificationFlags.ONGOING_EVENT
            if child_flags.has_no_clear:
                flags |= NotificationFlags.NO_CLEAR
        if not child_flags.has_auto_cancel:
            all_auto_cancel = False
    if has_children and all_auto_cancel:
        flags |= NotificationFlags.AUTO_CANCEL
    return flags


class AttributeAggregator:
    """Computes the attributes of a synthesized summary from its members.

    Only the channel id depends on member order (first member wins); every
    other field is a function of the member set.
    """

    def __init__(self, icon_provider: IconProvider | None = None) -> None:
        self._icon_provider = icon_provider

    def aggregate(
        self, package: str, children: list[NotificationAttributes]
    ) -> NotificationAttributes:
        icon, color = self._icon_and_color(package, children)
        return NotificationAttributes(
            flags=get_autogroup_summary_flags(children),
            icon=icon,
            icon_color=color,
            visibility=_visibility(children),
            group_alert_behavior=_group_alert_behavior(children),
            channel_id=children[0].channel_id if children else None,
        )

    def _icon_and_color(self, package: str, children: list[NotificationAttributes]):
        if children:
            first = children[0]
            shared = first.icon is not None and all(
                first.icon.same_as(child.icon) and child.icon_color == first.icon_color
                for child in children
            )
            if shared:
                return first.icon, first.icon_color
        return get_monochrome_app_icon(self._icon_provider, package), COLOR_DEFAULT


def _visibility(children: list[NotificationAttributes]) -> int:
    if any(child.visibility == Visibility.PUBLIC for child in children):
        return Visibility.PUBLIC
    return Visibility.PRIVATE


def _group_alert_behavior(children: list[NotificationAttributes]) -> int:
    if any(child.group_alert_behavior != GroupAlertBehavior.SUMMARY for child in children):
        return GroupAlertBehavior.CHILDREN
    return GroupAlertBehavior.SUMMARY
