from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .models import NotificationAttributes, NotificationView


class GroupingCallback(ABC):
    """Operations the host applies on behalf of the grouping engine.

    The engine invokes these synchronously from inside its own calls, in the
    order the host must apply them.
    """

    @abstractmethod
    def add_auto_group_summary(
        self,
        user_id: int,
        package: str,
        triggering_key: str,
        group_key: str,
        summary_id: int,
        attributes: NotificationAttributes,
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_auto_group(self, key: str, group_key: str, requires_sort: bool) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_autogroup_summary(
        self, user_id: int, package: str, group_key: str, attributes: NotificationAttributes
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_auto_group(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_auto_group_summary(self, user_id: int, package: str, group_key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_app_provided_summary(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_app_provided_summary_on_classification(
        self, key: str, original_group_key: str
    ) -> NotificationView | None:
        """Cancel the app summary of a classified child.

        Returns the canceled summary when this call removed it, so it can be
        cached for later cleanup.
        """
        raise NotImplementedError

    @abstractmethod
    def remove_notification_from_canceled_group(
        self, user_id: int, package: str, group_name: str, reason: int
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def send_app_provided_summary_delete_intent(self, package: str, intent: Any) -> None:
        raise NotImplementedError
