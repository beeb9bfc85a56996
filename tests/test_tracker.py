import unittest

from autogroup.flags import Importance
from autogroup.models import GroupMember, NotificationView
from autogroup.sections import Section
from autogroup.tracker import NotificationGroupTracker, has_live_children, has_summary


PKG = "com.example.app"
ALERTING = Section.ALERTING.scope(0, PKG)
SILENT = Section.SILENT.scope(0, PKG)


def _make_view(key: str, **kwargs) -> NotificationView:
    return NotificationView(key=key, package=PKG, **kwargs)


def _make_member(key: str, original_group: str | None = None) -> GroupMember:
    return GroupMember(key=key, attributes=_make_view(key).attributes(), original_group=original_group)


class TrackerTests(unittest.TestCase):
    def test_pool_counts_distinct_keys(self) -> None:
        tracker = NotificationGroupTracker()
        self.assertEqual(tracker.add_ungrouped(ALERTING, _make_member("a")), 1)
        self.assertEqual(tracker.add_ungrouped(ALERTING, _make_member("b")), 2)
        self.assertEqual(tracker.add_ungrouped(ALERTING, _make_member("a")), 2)

    def test_key_moves_between_pools(self) -> None:
        tracker = NotificationGroupTracker()
        tracker.add_ungrouped(ALERTING, _make_member("a"))
        tracker.add_ungrouped(SILENT, _make_member("a"))
        self.assertEqual(tracker.ungrouped(ALERTING), [])
        self.assertEqual(tracker.pool_scope_of("a"), SILENT)

    def test_take_ungrouped_empties_pool(self) -> None:
        tracker = NotificationGroupTracker()
        tracker.add_ungrouped(ALERTING, _make_member("a"))
        tracker.add_ungrouped(ALERTING, _make_member("b"))
        taken = tracker.take_ungrouped(ALERTING)
        self.assertEqual([member.key for member in taken], ["a", "b"])
        self.assertIsNone(tracker.tracked_scope("a"))

    def test_membership_leaves_pool(self) -> None:
        tracker = NotificationGroupTracker()
        tracker.add_ungrouped(ALERTING, _make_member("a"))
        tracker.create_aggregate(ALERTING, "a")
        tracker.add_member(ALERTING, _make_member("a"))
        self.assertIsNone(tracker.pool_scope_of("a"))
        self.assertEqual(tracker.scope_of("a"), ALERTING)
        self.assertTrue(tracker.is_aggregated(_make_view("a")))

    def test_member_moves_between_aggregates(self) -> None:
        tracker = NotificationGroupTracker()
        alerting = tracker.create_aggregate(ALERTING, "a")
        silent = tracker.create_aggregate(SILENT, "b")
        tracker.add_member(ALERTING, _make_member("a"))
        tracker.add_member(SILENT, _make_member("a"))
        self.assertEqual(alerting.members, {})
        self.assertEqual(list(silent.members), ["a"])

    def test_remove_and_drop(self) -> None:
        tracker = NotificationGroupTracker()
        group = tracker.create_aggregate(ALERTING, "a")
        tracker.add_member(ALERTING, _make_member("a"))
        tracker.add_member(ALERTING, _make_member("b"))
        self.assertIs(tracker.remove_member("a"), group)
        self.assertIsNone(tracker.remove_member("a"))
        tracker.drop_aggregate(ALERTING)
        self.assertIsNone(tracker.aggregate(ALERTING))
        self.assertIsNone(tracker.scope_of("b"))

    def test_override_key_counts_as_aggregated(self) -> None:
        tracker = NotificationGroupTracker()
        view = _make_view("a", override_group_key=str(ALERTING))
        self.assertTrue(tracker.is_aggregated(view))
        self.assertFalse(tracker.is_aggregated(_make_view("b", override_group_key="0|pkg|g:app")))


class SparseGroupTests(unittest.TestCase):
    def _group(self, name: str, children: int, **child_kwargs) -> list[NotificationView]:
        views = [_make_view(f"summary-{name}", group_key=name, is_group_summary=True)]
        for index in range(children):
            views.append(_make_view(f"{name}-{index}", group_key=name, **child_kwargs))
        return views

    def _summaries(self, views: list[NotificationView]) -> dict[str, NotificationView]:
        return {str(view.full_group_key): view for view in views if view.is_group_summary}

    def test_groups_below_limit_are_sparse(self) -> None:
        views = self._group("g0", 1) + self._group("g1", 1) + self._group("g2", 2)
        sparse = NotificationGroupTracker().sparse_groups(
            ALERTING, lambda view: True, views, self._summaries(views), 2
        )
        self.assertEqual(sorted(sparse), [f"0|{PKG}|g:g0", f"0|{PKG}|g:g1"])
        self.assertEqual([child.key for child in sparse[f"0|{PKG}|g:g0"].children], ["g0-0"])

    def test_group_without_summary_is_not_sparse(self) -> None:
        views = self._group("g0", 1)
        sparse = NotificationGroupTracker().sparse_groups(ALERTING, lambda view: True, views, {}, 2)
        self.assertEqual(sparse, {})

    def test_group_with_child_in_other_section_is_not_sparse(self) -> None:
        views = self._group("g0", 1) + [_make_view("g0-quiet", group_key="g0", importance=Importance.LOW)]
        sparse = NotificationGroupTracker().sparse_groups(
            ALERTING,
            lambda view: view.importance >= Importance.DEFAULT,
            views,
            self._summaries(views),
            5,
        )
        self.assertEqual(sparse, {})

    def test_canceled_and_aggregated_children_are_skipped(self) -> None:
        views = self._group("g0", 1, is_canceled=True) + self._group(
            "g1", 1, override_group_key=str(ALERTING)
        )
        sparse = NotificationGroupTracker().sparse_groups(
            ALERTING, lambda view: True, views, self._summaries(views), 2
        )
        self.assertEqual(sparse, {})


class HelperTests(unittest.TestCase):
    def test_has_live_children(self) -> None:
        summary = _make_view("s", group_key="g", is_group_summary=True)
        child = _make_view("c", group_key="g")
        canceled = _make_view("x", group_key="g", is_canceled=True)
        self.assertTrue(has_live_children(summary, [summary, child]))
        self.assertFalse(has_live_children(summary, [summary, canceled]))

    def test_has_summary(self) -> None:
        child = _make_view("c", group_key="g")
        self.assertTrue(has_summary(child, {f"0|{PKG}|g:g": _make_view("s")}))
        self.assertFalse(has_summary(child, {}))


if __name__ == "__main__":
    unittest.main()
