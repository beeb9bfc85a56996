import unittest

from autogroup.config import Capabilities
from autogroup.flags import Importance, NotificationFlags
from autogroup.models import NEWS_ID, SOCIAL_MEDIA_ID, NotificationView
from autogroup.sections import Section, SectionClassifier


def _make_view(**kwargs) -> NotificationView:
    values = {"key": "0|com.example.app|1|null|10001", "package": "com.example.app"}
    values.update(kwargs)
    return NotificationView(**values)


class SectionClassifierTests(unittest.TestCase):
    def test_importance_splits_alerting_and_silent(self) -> None:
        classifier = SectionClassifier(Capabilities())
        self.assertIs(classifier.classify(_make_view(importance=Importance.DEFAULT)), Section.ALERTING)
        self.assertIs(classifier.classify(_make_view(importance=Importance.HIGH)), Section.ALERTING)
        self.assertIs(classifier.classify(_make_view(importance=Importance.LOW)), Section.SILENT)
        self.assertIs(classifier.classify(_make_view(importance=Importance.MIN)), Section.SILENT)

    def test_calls_media_and_colorized_services_are_not_groupable(self) -> None:
        classifier = SectionClassifier(Capabilities())
        colorized = NotificationFlags.FOREGROUND_SERVICE | NotificationFlags.CAN_COLORIZE
        self.assertIs(classifier.classify(_make_view(is_call_style=True)), Section.NOT_GROUPABLE)
        self.assertIs(classifier.classify(_make_view(is_media=True)), Section.NOT_GROUPABLE)
        self.assertIs(classifier.classify(_make_view(flags=colorized)), Section.NOT_GROUPABLE)

    def test_plain_foreground_service_is_groupable(self) -> None:
        classifier = SectionClassifier(Capabilities())
        view = _make_view(flags=NotificationFlags.FOREGROUND_SERVICE)
        self.assertIs(classifier.classify(view), Section.ALERTING)

    def test_conversations_need_force_grouping(self) -> None:
        view = _make_view(is_conversation=True)
        self.assertIs(SectionClassifier(Capabilities()).classify(view), Section.NOT_GROUPABLE)

    def test_forced_conversations_use_people_sections(self) -> None:
        classifier = SectionClassifier(Capabilities(force_group_conversations=True))
        self.assertIs(
            classifier.classify(_make_view(is_conversation=True, is_important_conversation=True)),
            Section.PEOPLE_PRIORITY,
        )
        self.assertIs(classifier.classify(_make_view(is_conversation=True)), Section.PEOPLE_ALERTING)
        self.assertIs(
            classifier.classify(_make_view(is_conversation=True, importance=Importance.LOW)),
            Section.PEOPLE_SILENT,
        )

    def test_sort_by_time_collapses_people_sections(self) -> None:
        classifier = SectionClassifier(
            Capabilities(force_group_conversations=True, sort_section_by_time=True)
        )
        self.assertIs(classifier.classify(_make_view(is_conversation=True)), Section.PEOPLE)
        self.assertIs(
            classifier.classify(_make_view(is_conversation=True, is_important_conversation=True)),
            Section.PEOPLE_PRIORITY,
        )

    def test_bundle_channels_with_classification(self) -> None:
        classifier = SectionClassifier(Capabilities(classification=True))
        social = _make_view(channel_id=SOCIAL_MEDIA_ID, importance=Importance.LOW)
        news = _make_view(channel_id=NEWS_ID, importance=Importance.MIN)
        loud = _make_view(channel_id=SOCIAL_MEDIA_ID, importance=Importance.DEFAULT)
        self.assertIs(classifier.classify(social), Section.SOCIAL)
        self.assertIs(classifier.classify(news), Section.NEWS)
        self.assertIs(classifier.classify(loud), Section.ALERTING)

    def test_bundle_channels_without_classification(self) -> None:
        classifier = SectionClassifier(Capabilities())
        view = _make_view(channel_id=SOCIAL_MEDIA_ID, importance=Importance.LOW)
        self.assertIs(classifier.classify(view), Section.SILENT)

    def test_scope_names_the_aggregate_group(self) -> None:
        scope = Section.ALERTING.scope(0, "pkg")
        self.assertEqual(str(scope), "0|pkg|g:Aggregate_AlertingSection")
        self.assertTrue(scope.is_aggregate)
        self.assertTrue(Section.SOCIAL.is_bundle)
        self.assertFalse(Section.SILENT.is_bundle)
        self.assertFalse(Section.NOT_GROUPABLE.groupable)


if __name__ == "__main__":
    unittest.main()
