from __future__ import annotations

import unittest

from facetfilter.model.date_filter import DateFilterType
from facetfilter.model.facet_counts import UnknownDimensionError
from facetfilter.model.filter_state import DamagedFilter, FilterState
from facetfilter.model.item import Item, PackageStatus


class FilterStateTestCase(unittest.TestCase):
    def test_status_names_are_routed(self) -> None:
        state = FilterState()
        state.set_selection(
            "status",
            ["Loaded", "Duplicates", "Optimized", "Old", "No Dependents", "No Dependencies",
             "Favorites", "AutoInstall", "Local"],
        )
        self.assertEqual(state.statuses, {"Loaded"})
        self.assertTrue(state.filter_duplicates)
        self.assertTrue(state.filter_no_dependents)
        self.assertTrue(state.filter_no_dependencies)
        self.assertEqual(state.optimization_statuses, {"Optimized"})
        self.assertEqual(state.version_statuses, {"Old"})
        self.assertEqual(state.favorite_statuses, {"Favorites"})
        self.assertEqual(state.auto_install_statuses, {"AutoInstall"})
        self.assertEqual(state.package_types, {"Local"})
        self.assertIn("Duplicate", state.selection_for("status"))

        state.set_selection("status", [])
        self.assertFalse(state.has_active_selection("status"))
        self.assertFalse(state.filter_duplicates)

    def test_radio_dimensions(self) -> None:
        state = FilterState()
        state.set_selection("date", ["PastMonth"])
        state.set_selection("damaged", ["Damaged"])
        self.assertIs(state.date_filter.filter_type, DateFilterType.PAST_MONTH)
        self.assertIs(state.damaged_filter, DamagedFilter.DAMAGED_ONLY)
        self.assertEqual(state.selection_for("date"), {"PastMonth"})
        state.set_selection("date", [])
        state.set_selection("damaged", [])
        self.assertTrue(state.is_empty())

    def test_blank_values_are_dropped(self) -> None:
        state = FilterState()
        state.set_selection("creator", ["Alice", "", "  "])
        self.assertEqual(state.creators, {"Alice"})

    def test_copy_is_independent(self) -> None:
        state = FilterState(cascade_mode=True)
        state.set_selection("creator", ["Alice"])
        state.set_selection("status", ["Old"])
        state.date_filter.filter_type = DateFilterType.TODAY
        dup = state.copy()
        state.creators.add("Bob")
        state.version_statuses.clear()
        state.date_filter.clear()
        self.assertEqual(dup.creators, {"Alice"})
        self.assertEqual(dup.version_statuses, {"Old"})
        self.assertTrue(dup.date_filter.is_active())
        self.assertTrue(dup.cascade_mode)

    def test_unknown_dimension(self) -> None:
        with self.assertRaises(UnknownDimensionError):
            FilterState().selection_for("colour")
        with self.assertRaises(KeyError):
            FilterState().set_selection("colour", ["red"])


class ItemTestCase(unittest.TestCase):
    def test_from_dict(self) -> None:
        item = Item.from_dict(
            {
                "key": "Alice.Scene.1",
                "status": "missing",
                "categories": ["Scenes", ""],
                "modified_date": "2024-01-15T10:00:00",
                "external_destination_name": "Archive",
            }
        )
        self.assertEqual(item.name, "Alice.Scene.1")
        self.assertIs(item.status, PackageStatus.MISSING)
        self.assertEqual(item.categories, frozenset({"Scenes"}))
        self.assertTrue(item.is_external)
        self.assertEqual(item.effective_date.hour, 10)

    def test_unknown_status(self) -> None:
        self.assertIs(PackageStatus.parse("whatever"), PackageStatus.UNKNOWN)
        self.assertIs(PackageStatus.parse(None), PackageStatus.UNKNOWN)


if __name__ == "__main__":
    unittest.main()
