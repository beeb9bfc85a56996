from .base import BaseNotifier
from .factory import build_notifiers
from .message import EventMessage, build_event_message
from .webhook import WebhookNotifier, WebhookSettings

__all__ = [
    "BaseNotifier",
    "EventMessage",
    "WebhookNotifier",
    "WebhookSettings",
    "build_event_message",
    "build_notifiers",
]
