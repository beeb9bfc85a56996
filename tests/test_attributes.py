import unittest

from autogroup.attributes import AttributeAggregator, get_autogroup_summary_flags
from autogroup.flags import (
    BASE_FLAGS,
    COLOR_DEFAULT,
    GroupAlertBehavior,
    NotificationFlags,
    Visibility,
)
from autogroup.icons import FALLBACK_SUMMARY_ICON, StaticIconProvider
from autogroup.models import Icon, NotificationAttributes


PKG = "com.example.app"
SMALL_ICON = Icon(PKG, "ic_stat_small")


def _make_attrs(
    flags: NotificationFlags = NotificationFlags.NONE,
    icon: Icon | None = SMALL_ICON,
    icon_color: int = COLOR_DEFAULT,
    visibility: int = Visibility.PRIVATE,
    group_alert_behavior: int = GroupAlertBehavior.ALL,
    channel_id: str = "channel",
) -> NotificationAttributes:
    return NotificationAttributes(
        flags=flags,
        icon=icon,
        icon_color=icon_color,
        visibility=visibility,
        group_alert_behavior=group_alert_behavior,
        channel_id=channel_id,
    )


class SummaryFlagsTests(unittest.TestCase):
    def test_base_flags_without_children(self) -> None:
        self.assertEqual(get_autogroup_summary_flags([]), BASE_FLAGS)

    def test_auto_cancel_requires_every_child(self) -> None:
        auto_cancel = _make_attrs(flags=NotificationFlags.AUTO_CANCEL)
        plain = _make_attrs()
        self.assertEqual(
            get_autogroup_summary_flags([auto_cancel, auto_cancel]),
            BASE_FLAGS | NotificationFlags.AUTO_CANCEL,
        )
        self.assertEqual(get_autogroup_summary_flags([auto_cancel, plain]), BASE_FLAGS)

    def test_ongoing_child_makes_summary_ongoing(self) -> None:
        flags = get_autogroup_summary_flags([_make_attrs(), _make_attrs(flags=NotificationFlags.ONGOING_EVENT)])
        self.assertEqual(flags, BASE_FLAGS | NotificationFlags.ONGOING_EVENT)

    def test_no_clear_only_from_ongoing_children(self) -> None:
        ongoing_no_clear = _make_attrs(
            flags=NotificationFlags.ONGOING_EVENT | NotificationFlags.NO_CLEAR
        )
        no_clear = _make_attrs(flags=NotificationFlags.NO_CLEAR)
        self.assertTrue(get_autogroup_summary_flags([ongoing_no_clear]).has_no_clear)
        self.assertFalse(get_autogroup_summary_flags([no_clear]).has_no_clear)


class AttributeAggregatorTests(unittest.TestCase):
    def test_shared_icon_and_color_are_kept(self) -> None:
        aggregator = AttributeAggregator()
        children = [_make_attrs(icon_color=0xFF00FF), _make_attrs(icon_color=0xFF00FF)]
        result = aggregator.aggregate(PKG, children)
        self.assertEqual(result.icon, SMALL_ICON)
        self.assertEqual(result.icon_color, 0xFF00FF)

    def test_mixed_icons_use_monochrome_app_icon(self) -> None:
        aggregator = AttributeAggregator(StaticIconProvider({PKG: "ic_monochrome"}))
        children = [_make_attrs(), _make_attrs(icon=Icon(PKG, "ic_other"))]
        result = aggregator.aggregate(PKG, children)
        self.assertEqual(result.icon, Icon(PKG, "ic_monochrome"))
        self.assertEqual(result.icon_color, COLOR_DEFAULT)

    def test_mixed_colors_use_default_color(self) -> None:
        aggregator = AttributeAggregator(StaticIconProvider({PKG: "ic_monochrome"}))
        children = [_make_attrs(icon_color=1), _make_attrs(icon_color=2)]
        result = aggregator.aggregate(PKG, children)
        self.assertEqual(result.icon, Icon(PKG, "ic_monochrome"))
        self.assertEqual(result.icon_color, COLOR_DEFAULT)

    def test_missing_monochrome_icon_falls_back(self) -> None:
        aggregator = AttributeAggregator(StaticIconProvider({}))
        children = [_make_attrs(), _make_attrs(icon=None)]
        result = aggregator.aggregate(PKG, children)
        self.assertEqual(result.icon, FALLBACK_SUMMARY_ICON)

    def test_visibility_is_public_when_any_child_is(self) -> None:
        aggregator = AttributeAggregator()
        public = aggregator.aggregate(
            PKG, [_make_attrs(visibility=Visibility.SECRET), _make_attrs(visibility=Visibility.PUBLIC)]
        )
        private = aggregator.aggregate(
            PKG, [_make_attrs(visibility=Visibility.SECRET), _make_attrs(visibility=Visibility.PRIVATE)]
        )
        self.assertEqual(public.visibility, Visibility.PUBLIC)
        self.assertEqual(private.visibility, Visibility.PRIVATE)

    def test_group_alert_behavior(self) -> None:
        aggregator = AttributeAggregator()
        summary_only = aggregator.aggregate(
            PKG,
            [
                _make_attrs(group_alert_behavior=GroupAlertBehavior.SUMMARY),
                _make_attrs(group_alert_behavior=GroupAlertBehavior.SUMMARY),
            ],
        )
        mixed = aggregator.aggregate(
            PKG,
            [
                _make_attrs(group_alert_behavior=GroupAlertBehavior.SUMMARY),
                _make_attrs(group_alert_behavior=GroupAlertBehavior.ALL),
            ],
        )
        self.assertEqual(summary_only.group_alert_behavior, GroupAlertBehavior.SUMMARY)
        self.assertEqual(mixed.group_alert_behavior, GroupAlertBehavior.CHILDREN)

    def test_channel_comes_from_first_child(self) -> None:
        aggregator = AttributeAggregator()
        result = aggregator.aggregate(PKG, [_make_attrs(channel_id="first"), _make_attrs(channel_id="second")])
        self.assertEqual(result.channel_id, "first")


if __name__ == "__main__":
    unittest.main()
