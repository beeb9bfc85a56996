from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


AUTOGROUP_AT_COUNT = 7
AUTOGROUP_SINGLETONS_AT_COUNT = 2


@dataclass
class Capabilities:
    force_group_conversations: bool = False
    force_group_singletons: bool = True
    classification: bool = False
    regroup_on_classification: bool = True
    sort_section_by_time: bool = False
    check_autogroup_before_post: bool = True


@dataclass
class GroupingConfig:
    autogroup_at_count: int = AUTOGROUP_AT_COUNT
    autogroup_singletons_at_count: int = AUTOGROUP_SINGLETONS_AT_COUNT
    capabilities: Capabilities = field(default_factory=Capabilities)


@dataclass
class NotifierTarget:
    type: str
    settings: dict[str, Any]


@dataclass
class NotificationConfig:
    targets: list[NotifierTarget]


@dataclass
class Settings:
    request_timeout_seconds: int
    user_agent: str


@dataclass
class Config:
    grouping: GroupingConfig
    icons: dict[str, str]
    notifications: NotificationConfig
    settings: Settings


def expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: expand_env(val) for key, val in value.items()}
    return value


def require_dict(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping")
    return value


def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    data = expand_env(raw)
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")

    grouping = load_grouping(require_dict(data.get("grouping"), "grouping"))
    icons = {
        str(package): str(resource)
        for package, resource in require_dict(data.get("icons"), "icons").items()
    }
    notifications = _load_notifications(data)

    settings_raw = require_dict(data.get("settings"), "settings")
    settings = Settings(
        request_timeout_seconds=int(settings_raw.get("request_timeout_seconds", 20)),
        user_agent=str(settings_raw.get("user_agent", "autogroup/0.1")),
    )

    return Config(
        grouping=grouping,
        icons=icons,
        notifications=notifications,
        settings=settings,
    )


def load_grouping(raw: dict[str, Any]) -> GroupingConfig:
    at_count = int(raw.get("autogroup_at_count", AUTOGROUP_AT_COUNT))
    if at_count < 2:
        raise ValueError("grouping.autogroup_at_count must be >= 2")
    singletons_at_count = int(
        raw.get("autogroup_singletons_at_count", AUTOGROUP_SINGLETONS_AT_COUNT)
    )
    if singletons_at_count < 1:
        raise ValueError("grouping.autogroup_singletons_at_count must be >= 1")

    capabilities = _load_capabilities(
        require_dict(raw.get("capabilities"), "grouping.capabilities")
    )
    return GroupingConfig(
        autogroup_at_count=at_count,
        autogroup_singletons_at_count=singletons_at_count,
        capabilities=capabilities,
    )


def _load_capabilities(raw: dict[str, Any]) -> Capabilities:
    defaults = Capabilities()
    known = set(vars(defaults))
    unknown = sorted(str(name) for name in raw if name not in known)
    if unknown:
        raise ValueError(f"grouping.capabilities has unknown entries: {', '.join(unknown)}")
    values = {name: bool(raw.get(name, getattr(defaults, name))) for name in known}
    return Capabilities(**values)


def _load_notifications(data: dict[str, Any]) -> NotificationConfig:
    targets: list[NotifierTarget] = []

    notify_raw = data.get("notify", [])
    if notify_raw:
        if not isinstance(notify_raw, list):
            raise ValueError("notify must be a list")
        for entry in notify_raw:
            if not isinstance(entry, dict):
                raise ValueError("notify entries must be mappings")
            target_type = entry.get("type")
            if not target_type:
                raise ValueError("notify entries must include type")
            settings = {k: v for k, v in entry.items() if k != "type"}
            targets.append(NotifierTarget(type=str(target_type), settings=settings))

    return NotificationConfig(targets=targets)
