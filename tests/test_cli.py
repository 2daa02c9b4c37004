from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from facetfilter.cli import app


ITEMS = [
    {"key": "a1", "name": "Forest", "creator": "A", "status": "Loaded"},
    {"key": "a2", "name": "City", "creator": "A", "status": "Missing"},
    {"key": "b1", "name": "Beach", "creator": "B", "status": "Loaded"},
    {"key": "b2", "name": "Beach Copy", "creator": "B", "status": "Loaded", "is_duplicate": True},
]


class InspectCommandTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self._tmpdir.name)
        self.config = self.root / "none.toml"
        self.runner = CliRunner()

    def tearDown(self) -> None:
        self._tmpdir.cleanup()

    def _catalog(self, data) -> Path:
        path = self.root / "catalog.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def _inspect(self, *args: str):
        return self.runner.invoke(app, ["inspect", *args, "--config", str(self.config)])

    def test_creator_selection(self) -> None:
        result = self._inspect(str(self._catalog(ITEMS)), "--creator", "A")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("2 of 4 items", result.output)
        self.assertIn(" * A (2)", result.output)
        self.assertIn("   B (0)", result.output)
        self.assertIn("   Duplicates (0)", result.output)
        self.assertIn("[Creator: A]", result.output)

    def test_cascade_and_items(self) -> None:
        result = self._inspect(str(self._catalog(ITEMS)), "--status", "Duplicates", "--cascade", "--items")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("1 of 4 items", result.output)
        self.assertIn(" * Duplicates (1)", result.output)
        self.assertNotIn("Loaded (", result.output)
        self.assertTrue(result.output.rstrip().endswith("b2"))

    def test_membership_catalog(self) -> None:
        data = {"items": ITEMS, "favorites": ["a1", "b1"], "playlists": {"Evening": ["a2"]}}
        result = self._inspect(str(self._catalog(data)), "--status", "Favorites")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("2 of 4 items", result.output)
        self.assertIn("Evening (0)", result.output)

    def test_missing_catalog_fails(self) -> None:
        result = self._inspect(str(self.root / "nope.json"))
        self.assertNotEqual(result.exit_code, 0)


if __name__ == "__main__":
    unittest.main()
