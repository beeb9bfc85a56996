from __future__ import annotations

from enum import Enum

from .config import Capabilities
from .flags import Importance, NotificationFlags
from .models import (
    AGGREGATE_GROUP_KEY,
    NEWS_ID,
    PROMOTIONS_ID,
    RECS_ID,
    SOCIAL_MEDIA_ID,
    FullyQualifiedGroupKey,
    NotificationView,
)


class Section(Enum):
    ALERTING = "AlertingSection"
    SILENT = "SilentSection"
    PEOPLE = "PeopleSection"
    PEOPLE_ALERTING = "PeopleSection(alerting)"
    PEOPLE_SILENT = "PeopleSection(silent)"
    PEOPLE_PRIORITY = "PeopleSection(priority)"
    PROMOTIONS = "PromotionsSection"
    NEWS = "NewsSection"
    SOCIAL = "SocialSection"
    RECS = "RecsSection"
    NOT_GROUPABLE = "NotGroupable"

    @property
    def groupable(self) -> bool:
        return self is not Section.NOT_GROUPABLE

    @property
    def is_bundle(self) -> bool:
        return self in BUNDLE_SECTIONS.values()

    @property
    def aggregate_group_name(self) -> str:
        return AGGREGATE_GROUP_KEY + self.value

    def scope(self, user_id: int, package: str) -> FullyQualifiedGroupKey:
        return FullyQualifiedGroupKey(user_id, package, self.aggregate_group_name)


BUNDLE_SECTIONS = {
    PROMOTIONS_ID: Section.PROMOTIONS,
    NEWS_ID: Section.NEWS,
    SOCIAL_MEDIA_ID: Section.SOCIAL,
    RECS_ID: Section.RECS,
}


class SectionClassifier:
    """Maps a notification to the section its aggregate group lives in.

    Rules are evaluated in order: notifications that must stay visible on their
    own (calls, media, colorized foreground services and, unless conversation
    force grouping is enabled, conversations) are not groupable; conversations
    go to a People section; low importance bundle channels go to their bundle
    section when classification is enabled; everything else splits on
    importance into Alerting and Silent.
    """

    def __init__(self, capabilities: Capabilities) -> None:
        self._capabilities = capabilities

    def classify(self, view: NotificationView) -> Section:
        if _is_always_ungrouped(view):
            return Section.NOT_GROUPABLE
        if view.is_conversation:
            if not self._capabilities.force_group_conversations:
                return Section.NOT_GROUPABLE
            return self._people_section(view)
        if self._capabilities.classification and view.channel_id in BUNDLE_SECTIONS:
            if view.importance <= Importance.LOW:
                return BUNDLE_SECTIONS[view.channel_id]
            return Section.ALERTING
        if view.importance >= Importance.DEFAULT:
            return Section.ALERTING
        return Section.SILENT

    def _people_section(self, view: NotificationView) -> Section:
        if view.is_important_conversation:
            return Section.PEOPLE_PRIORITY
        if self._capabilities.sort_section_by_time:
            return Section.PEOPLE
        if view.importance >= Importance.DEFAULT:
            return Section.PEOPLE_ALERTING
        return Section.PEOPLE_SILENT


def _is_always_ungrouped(view: NotificationView) -> bool:
    if view.is_call_style or view.is_media:
        return True
    return NotificationFlags(view.flags).is_colorized_foreground_service
