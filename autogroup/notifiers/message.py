from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models import Icon, NotificationAttributes
from ..replay import HostEvent


@dataclass
class EventMessage:
    operation: str
    payload: dict[str, Any] = field(default_factory=dict)

    def as_json(self) -> dict[str, Any]:
        return {"operation": self.operation, "payload": self.payload}


def build_event_message(event: HostEvent) -> EventMessage:
    return EventMessage(
        operation=event.operation,
        payload={key: _jsonable(value) for key, value in event.payload.items()},
    )


def _jsonable(value: Any) -> Any:
    if isinstance(value, NotificationAttributes):
        return {
            "flags": int(value.flags),
            "icon": _icon_text(value.icon),
            "icon_color": value.icon_color,
            "visibility": int(value.visibility),
            "group_alert_behavior": int(value.group_alert_behavior),
            "channel_id": value.channel_id,
        }
    if isinstance(value, Icon):
        return _icon_text(value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def _icon_text(icon: Icon | None) -> str | None:
    if icon is None:
        return None
    return f"{icon.package}/{icon.resource}"
