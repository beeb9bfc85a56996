from __future__ import annotations

from enum import IntEnum, IntFlag


COLOR_DEFAULT = 0


class NotificationFlags(IntFlag):
    NONE = 0
    ONGOING_EVENT = 0x2
    INSISTENT = 0x4
    ONLY_ALERT_ONCE = 0x8
    AUTO_CANCEL = 0x10
    NO_CLEAR = 0x20
    FOREGROUND_SERVICE = 0x40
    HIGH_PRIORITY = 0x80
    LOCAL_ONLY = 0x100
    GROUP_SUMMARY = 0x200
    AUTOGROUP_SUMMARY = 0x400
    CAN_COLORIZE = 0x800
    BUBBLE = 0x1000

    @property
    def has_ongoing(self) -> bool:
        return bool(self & NotificationFlags.ONGOING_EVENT)

    @property
    def has_auto_cancel(self) -> bool:
        return bool(self & NotificationFlags.AUTO_CANCEL)

    @property
    def has_no_clear(self) -> bool:
        return bool(self & NotificationFlags.NO_CLEAR)

    @property
    def has_foreground_service(self) -> bool:
        return bool(self & NotificationFlags.FOREGROUND_SERVICE)

    @property
    def has_can_colorize(self) -> bool:
        return bool(self & NotificationFlags.CAN_COLORIZE)

    @property
    def is_colorized_foreground_service(self) -> bool:
        return self.has_foreground_service and self.has_can_colorize


BASE_FLAGS = (
    NotificationFlags.AUTOGROUP_SUMMARY
    | NotificationFlags.GROUP_SUMMARY
    | NotificationFlags.LOCAL_ONLY
)


class Importance(IntEnum):
    NONE = 0
    MIN = 1
    LOW = 2
    DEFAULT = 3
    HIGH = 4
    MAX = 5


class Visibility(IntEnum):
    SECRET = -1
    PRIVATE = 0
    PUBLIC = 1


class GroupAlertBehavior(IntEnum):
    ALL = 0
    SUMMARY = 1
    CHILDREN = 2


def parse_flags(value: object) -> NotificationFlags:
    """Accept an int bitmask or a list of flag names such as ["ONGOING_EVENT"]."""
    if value is None:
        return NotificationFlags.NONE
    if isinstance(value, bool):
        raise ValueError("flags must be an integer or a list of flag names")
    if isinstance(value, int):
        return NotificationFlags(value)
    if isinstance(value, list):
        flags = NotificationFlags.NONE
        for name in value:
            normalized = str(name).upper()
            if normalized not in NotificationFlags.__members__:
                raise ValueError(f"unknown notification flag: {name}")
            flags |= NotificationFlags[normalized]
        return flags
    raise ValueError("flags must be an integer or a list of flag names")
