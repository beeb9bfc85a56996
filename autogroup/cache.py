from __future__ import annotations

import logging

from .callback import GroupingCallback
from .models import CachedSummary


SummaryId = tuple[str, str | None, int, int]


class CanceledSummaryCache:
    """App summaries the engine canceled on the app's behalf.

    Entries live until the app cancels the original summary or the last real
    child of the original group is removed.
    """

    def __init__(self, callback: GroupingCallback) -> None:
        self._callback = callback
        self._entries: dict[SummaryId, CachedSummary] = {}
        self._logger = logging.getLogger(__name__)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, summary: CachedSummary) -> None:
        self._entries[_summary_id(summary.package, summary.tag, summary.id, summary.user_id)] = summary
        self._logger.debug("Cached canceled summary %s", summary.key)

    def find(self, package: str, tag: str | None, id: int, user_id: int) -> CachedSummary | None:
        return self._entries.get(_summary_id(package, tag, id, user_id))

    def find_by_group(self, user_id: int, package: str, group_name: str) -> CachedSummary | None:
        for summary in self._entries.values():
            if (
                summary.user_id == user_id
                and summary.package == package
                and summary.original_group_key == group_name
            ):
                return summary
        return None

    def purge(self, package: str, tag: str | None, id: int, user_id: int) -> CachedSummary | None:
        return self._entries.pop(_summary_id(package, tag, id, user_id), None)

    def on_app_cancel_summary(
        self, package: str, tag: str | None, id: int, user_id: int, reason: int
    ) -> bool:
        summary = self.purge(package, tag, id, user_id)
        if summary is None:
            return False
        self._logger.info(
            "App canceled summary %s; removing children of group %s",
            summary.key,
            summary.original_group_key,
        )
        # Purged first so child removals reported during the cascade find no entry.
        self._callback.remove_notification_from_canceled_group(
            user_id, package, summary.original_group_key, reason
        )
        return True

    def on_last_child_removed(self, summary: CachedSummary) -> None:
        if summary.delete_intent is not None:
            self._callback.send_app_provided_summary_delete_intent(
                summary.package, summary.delete_intent
            )
        self.purge(summary.package, summary.tag, summary.id, summary.user_id)
        self._logger.debug("Purged canceled summary %s", summary.key)


def _summary_id(package: str, tag: str | None, id: int, user_id: int) -> SummaryId:
    return (package, tag, id, user_id)
