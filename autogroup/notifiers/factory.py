from __future__ import annotations

import logging
from typing import Any

from .base import BaseNotifier
from .webhook import WebhookNotifier, WebhookSettings
from ..callback import GroupingCallback
from ..config import Config


OPERATIONS = frozenset(GroupingCallback.__abstractmethods__)


def build_notifiers(config: Config) -> list[BaseNotifier]:
    logger = logging.getLogger(__name__)
    notifiers: list[BaseNotifier] = []
    for target in config.notifications.targets:
        notifier = _build_target(target.type, target.settings, config)
        if notifier:
            notifiers.append(notifier)
        else:
            logger.warning("Skipping notify target of type %s", target.type)
    return notifiers


def _build_target(target_type: str, settings: dict[str, Any], config: Config) -> BaseNotifier | None:
    if target_type.lower() != "webhook":
        return None
    url = _normalize_url(settings.get("url"))
    if not url:
        return None
    return WebhookNotifier(
        WebhookSettings(
            url=url,
            headers={str(k): str(v) for k, v in (settings.get("headers") or {}).items()},
            timeout_seconds=config.settings.request_timeout_seconds,
            user_agent=config.settings.user_agent,
            operations=_parse_operations(settings.get("operations")),
        )
    )


def _parse_operations(value: Any) -> frozenset[str] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError("notify.operations must be a list")
    unknown = sorted(str(name) for name in value if name not in OPERATIONS)
    if unknown:
        raise ValueError(f"notify.operations has unknown entries: {', '.join(unknown)}")
    return frozenset(value)


def _normalize_url(value: Any) -> str | None:
    if not value or not isinstance(value, str):
        return None
    if "${" in value:
        return None
    if not value.startswith(("http://", "https://")):
        return None
    return value
