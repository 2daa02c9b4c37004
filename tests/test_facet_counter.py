from __future__ import annotations

import unittest
from datetime import datetime, timedelta

from facetfilter.engine.facet_counter import FacetCounter
from facetfilter.engine.filter_engine import FilterEngine
from facetfilter.engine.predicates import Memberships
from facetfilter.model.date_filter import FixedClock
from facetfilter.model.facet_counts import UnknownDimensionError
from facetfilter.model.filter_state import GROUP_LIFECYCLE, FilterState
from facetfilter.model.item import Item, PackageStatus
from facetfilter.service.size_buckets import SizeBucketClassifier


NOW = datetime(2024, 1, 15, 12, 0)


def _four_items():
    return [
        Item(key="a1", creator="A", status=PackageStatus.LOADED),
        Item(key="a2", creator="A", status=PackageStatus.MISSING),
        Item(key="b1", creator="B", status=PackageStatus.LOADED),
        Item(key="b2", creator="B", status=PackageStatus.LOADED, is_duplicate=True),
    ]


class FlatCountsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = FilterEngine(clock=FixedClock(NOW))
        self.counter = FacetCounter(self.engine)
        self.catalog = _four_items()

    def test_creator_selection_scenario(self) -> None:
        state = FilterState()
        state.set_selection("creator", ["A"])
        filtered = self.engine.filter(self.catalog, state)
        self.assertEqual(len(filtered), 2)

        counts = self.counter.count(self.catalog, state, filtered).as_dict()
        self.assertEqual(counts["creator"], {"A": 2, "B": 0})
        self.assertEqual(counts["status"]["Loaded"], 1)
        self.assertEqual(counts["status"]["Missing"], 1)
        self.assertEqual(counts["status"]["Duplicate"], 0)

    def test_status_row_order(self) -> None:
        counts = self.counter.count(self.catalog, FilterState())
        self.assertEqual(
            [fc.value for fc in counts.status],
            [
                "Loaded",
                "Missing",
                "Duplicate",
                "Unoptimized",
                "Latest",
                "Old",
                "No Dependencies",
                "No Dependents",
                "Local",
            ],
        )

    def test_single_value_dimension_partitions_filtered_set(self) -> None:
        state = FilterState()
        state.set_selection("status", ["Loaded"])
        filtered = self.engine.filter(self.catalog, state)
        counts = self.counter.count(self.catalog, state, filtered)
        lifecycle = [fc.count for fc in counts.status if fc.group == GROUP_LIFECYCLE]
        self.assertEqual(sum(lifecycle), len(filtered))
        self.assertEqual(sum(fc.count for fc in counts.creator), len(filtered))

    def test_multi_value_dimension_can_exceed_filtered_size(self) -> None:
        catalog = [
            Item(key="x", categories=frozenset({"Scenes", "Looks"})),
            Item(key="y", categories=frozenset({"Looks"})),
        ]
        counts = self.counter.count(catalog, FilterState())
        self.assertEqual(counts.as_dict()["category"], {"Looks": 2, "Scenes": 1})
        self.assertGreaterEqual(sum(fc.count for fc in counts.category), len(catalog))

    def test_date_counts_use_injected_clock(self) -> None:
        catalog = [
            Item(key="today", modified_date=NOW - timedelta(hours=1)),
            Item(key="days", modified_date=NOW - timedelta(days=3)),
            Item(key="weeks", modified_date=NOW - timedelta(days=10)),
            Item(key="months", modified_date=NOW - timedelta(days=100)),
            Item(key="undated"),
        ]
        counts = self.counter.count(catalog, FilterState()).as_dict()["date"]
        self.assertEqual(
            counts,
            {
                "AllTime": 5,
                "Today": 1,
                "PastWeek": 2,
                "PastMonth": 3,
                "Past3Months": 3,
                "PastYear": 4,
                "CustomRange": 0,
            },
        )

    def test_damaged_rows_count_whole_catalog(self) -> None:
        state = FilterState()
        state.set_selection("creator", ["A"])
        self.assertEqual(self.counter.count(self.catalog, state).as_dict()["damaged"], {"All": 4, "Valid": 4})
        catalog = self.catalog + [Item(key="bad", is_damaged=True)]
        self.assertEqual(
            self.counter.count(catalog, state).as_dict()["damaged"],
            {"All": 5, "Damaged": 1, "Valid": 4},
        )

    def test_membership_rows_need_a_lookup(self) -> None:
        self.assertNotIn("Favorites", self.counter.count(self.catalog, FilterState()).as_dict()["status"])
        engine = FilterEngine(
            memberships=Memberships(favorites={"a1", "b1"}, auto_install=set()),
            clock=FixedClock(NOW),
        )
        status = FacetCounter(engine).count(self.catalog, FilterState()).as_dict()["status"]
        self.assertEqual(status["Favorites"], 2)
        self.assertEqual(status["AutoInstall"], 0)

    def test_size_buckets_follow_classifier_order(self) -> None:
        classifier = SizeBucketClassifier([("Small", 1000), ("Medium", 100000), ("Large", None)])
        engine = FilterEngine(size_classifier=classifier, clock=FixedClock(NOW))
        catalog = [Item(key="big", file_size_bytes=500000), Item(key="small", file_size_bytes=10)]
        rows = FacetCounter(engine).count(catalog, FilterState()).file_size
        self.assertEqual([(fc.value, fc.count) for fc in rows], [("Small", 1), ("Large", 1)])

    def test_unknown_dimension(self) -> None:
        counts = self.counter.count(self.catalog, FilterState())
        with self.assertRaises(UnknownDimensionError):
            counts.for_dimension("colour")


class RepeatedRunTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = FilterEngine(clock=FixedClock(NOW))
        self.counter = FacetCounter(self.engine)
        self.catalog = _four_items() + [
            Item(key="c1", creator="C", categories=frozenset({"Scenes", "Looks"}), modified_date=NOW),
        ]

    def _assert_repeatable(self, state: FilterState) -> None:
        before = state.copy()
        first_filtered = self.engine.filter(self.catalog, state)
        first = self.counter.count(self.catalog, state).as_dict()
        second_filtered = self.engine.filter(self.catalog, state)
        second = self.counter.count(self.catalog, state).as_dict()
        self.assertEqual(first_filtered, second_filtered)
        self.assertEqual(first, second)
        self.assertEqual(state, before)

    def test_flat_runs_are_identical(self) -> None:
        state = FilterState()
        state.set_selection("creator", ["A", "C"])
        state.set_selection("status", ["Loaded", "Latest"])
        self._assert_repeatable(state)

    def test_cascading_runs_are_identical(self) -> None:
        state = FilterState(cascade_mode=True)
        state.set_selection("creator", ["B", "C"])
        state.set_selection("category", ["Looks"])
        state.set_selection("date", ["Today"])
        self._assert_repeatable(state)


class CascadingCountsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = FilterEngine(clock=FixedClock(NOW))
        self.counter = FacetCounter(self.engine)
        self.catalog = _four_items()

    def test_active_dimensions_hide_unselected_values(self) -> None:
        state = FilterState(cascade_mode=True)
        state.set_selection("creator", ["A"])
        counts = self.counter.count(self.catalog, state).as_dict()
        self.assertEqual(counts["creator"], {"A": 2})
        self.assertEqual(counts["status"]["Loaded"], 1)
        self.assertEqual(counts["status"]["Missing"], 1)

    def test_selected_value_with_zero_count_stays_visible(self) -> None:
        state = FilterState(cascade_mode=True)
        state.set_selection("creator", ["A"])
        state.set_selection("status", ["Duplicate"])
        counts = self.counter.count(self.catalog, state).as_dict()
        self.assertEqual(counts["status"], {"Duplicate": 0})
        self.assertEqual(counts["creator"], {"A": 0})

    def test_damaged_list_is_never_hidden(self) -> None:
        state = FilterState(cascade_mode=True)
        state.set_selection("damaged", ["Valid"])
        counts = self.counter.count(self.catalog, state).as_dict()
        self.assertEqual(counts["damaged"], {"All": 4, "Valid": 4})


if __name__ == "__main__":
    unittest.main()
