from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .flags import COLOR_DEFAULT, GroupAlertBehavior, Importance, NotificationFlags, Visibility


AGGREGATE_GROUP_KEY = "Aggregate_"
DEFAULT_CHANNEL_ID = "miscellaneous"

PROMOTIONS_ID = "android.app.promotions"
NEWS_ID = "android.app.news"
SOCIAL_MEDIA_ID = "android.app.social"
RECS_ID = "android.app.recs"
BUNDLE_CHANNEL_IDS = {PROMOTIONS_ID, NEWS_ID, SOCIAL_MEDIA_ID, RECS_ID}


@dataclass(frozen=True)
class Icon:
    package: str
    resource: str

    def same_as(self, other: Icon | None) -> bool:
        if other is None:
            return False
        return self.package == other.package and self.resource == other.resource


@dataclass(frozen=True)
class NotificationAttributes:
    flags: NotificationFlags
    icon: Icon | None
    icon_color: int
    visibility: int
    group_alert_behavior: int
    channel_id: str | None


@dataclass(frozen=True)
class FullyQualifiedGroupKey:
    user_id: int
    package: str
    group_name: str

    def __str__(self) -> str:
        return get_full_aggregate_group_key(self.package, self.group_name, self.user_id)

    @property
    def is_aggregate(self) -> bool:
        return self.group_name.startswith(AGGREGATE_GROUP_KEY)


def get_full_aggregate_group_key(package: str, group_name: str, user_id: int) -> str:
    return f"{user_id}|{package}|g:{group_name}"


def is_aggregate_group_key(value: str | None) -> bool:
    if not value:
        return False
    _, _, group_name = value.partition("|g:")
    return group_name.startswith(AGGREGATE_GROUP_KEY)


@dataclass
class NotificationChannel:
    id: str
    importance: int = Importance.DEFAULT
    is_important_conversation: bool = False


@dataclass
class NotificationView:
    """Snapshot of a host notification, limited to what grouping decisions read."""

    key: str
    package: str
    user_id: int = 0
    id: int = 0
    tag: str | None = None
    channel_id: str = DEFAULT_CHANNEL_ID
    importance: int = Importance.DEFAULT
    group_key: str | None = None
    override_group_key: str | None = None
    is_group_summary: bool = False
    is_canceled: bool = False
    is_conversation: bool = False
    is_important_conversation: bool = False
    is_call_style: bool = False
    is_media: bool = False
    flags: NotificationFlags = NotificationFlags.NONE
    icon: Icon | None = None
    icon_color: int = COLOR_DEFAULT
    visibility: int = Visibility.PRIVATE
    group_alert_behavior: int = GroupAlertBehavior.ALL
    delete_intent: Any = None

    @property
    def is_app_group(self) -> bool:
        return self.group_key is not None

    @property
    def full_group_key(self) -> FullyQualifiedGroupKey | None:
        if self.group_key is None:
            return None
        return FullyQualifiedGroupKey(self.user_id, self.package, self.group_key)

    @property
    def is_aggregated(self) -> bool:
        return is_aggregate_group_key(self.override_group_key)

    def attributes(self) -> NotificationAttributes:
        return NotificationAttributes(
            flags=NotificationFlags(self.flags),
            icon=self.icon,
            icon_color=self.icon_color,
            visibility=self.visibility,
            group_alert_behavior=self.group_alert_behavior,
            channel_id=self.channel_id,
        )


@dataclass
class GroupMember:
    key: str
    attributes: NotificationAttributes
    original_group: str | None = None


@dataclass
class AggregateGroup:
    scope: FullyQualifiedGroupKey
    triggering_key: str
    singleton: bool = False
    members: dict[str, GroupMember] = field(default_factory=dict)
    attributes: NotificationAttributes | None = None

    def member_attributes(self) -> list[NotificationAttributes]:
        return [member.attributes for member in self.members.values()]


@dataclass(frozen=True)
class CachedSummary:
    key: str
    package: str
    tag: str | None
    id: int
    user_id: int
    original_group_key: str
    delete_intent: Any = None

    @classmethod
    def from_summary(cls, summary: NotificationView) -> CachedSummary:
        return cls(
            key=summary.key,
            package=summary.package,
            tag=summary.tag,
            id=summary.id,
            user_id=summary.user_id,
            original_group_key=summary.group_key or "",
            delete_intent=summary.delete_intent,
        )
