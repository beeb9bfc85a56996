from __future__ import annotations

from abc import ABC, abstractmethod

from .models import Icon


FALLBACK_SUMMARY_ICON = Icon(package="android", resource="ic_notification_summary_auto")


class IconProvider(ABC):
    @abstractmethod
    def monochrome_icon(self, package: str) -> Icon | None:
        """Return the app's monochrome icon, or None if it has no adaptive icon."""
        raise NotImplementedError


class StaticIconProvider(IconProvider):
    def __init__(self, resources: dict[str, str] | None = None) -> None:
        self._resources = dict(resources or {})

    def monochrome_icon(self, package: str) -> Icon | None:
        resource = self._resources.get(package)
        if not resource:
            return None
        return Icon(package=package, resource=resource)


def get_monochrome_app_icon(provider: IconProvider | None, package: str) -> Icon:
    if provider is not None:
        icon = provider.monochrome_icon(package)
        if icon is not None:
            return icon
    return FALLBACK_SUMMARY_ICON
