"""
Tests for the command-line arrangement run
"""

import contextlib
import io
import os
import tempfile
import unittest
import sys
from pathlib import Path

import yaml

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from main import run_arrangement
from smart_seating.config_loader import load_config


CONFIG = {
    "grid": {"rows": 2, "cols": 3},
    "students": ["Judy", "Alice", "Bob"],
    "seats": [
        {"row": 1, "col": 1, "student": "Judy", "fixed": True},
        {"row": 2, "col": 3, "disabled": True},
    ],
    "optimization": {"random_seed": 3, "min_iterations": 500, "iterations_per_student": 10},
}


class TestRunArrangement(unittest.TestCase):
    """Test a full run writing into a scratch directory"""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = Path(self.temp_dir.name)
        self.cwd = os.getcwd()
        os.chdir(self.dir)

        self.config_path = self.dir / "config.yaml"
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(CONFIG, f)

    def tearDown(self):
        os.chdir(self.cwd)
        self.temp_dir.cleanup()

    def run_quietly(self, **kwargs):
        with contextlib.redirect_stdout(io.StringIO()):
            return run_arrangement(str(self.config_path), save_plots=False,
                                   show_summary=False, output_name="run", **kwargs)

    def test_configured_roster_keeps_fixed_seat(self):
        """Test the fixed student stays put without an imported roster"""
        grid, result = self.run_quietly()

        self.assertEqual(grid.find_student("Judy").row, 0)
        self.assertEqual(grid.find_student("Judy").col, 0)
        self.assertEqual(sorted(grid.occupied_positions().values()), ["Alice", "Bob", "Judy"])
        self.assertTrue((self.dir / "output" / "run.csv").exists())
        self.assertTrue((self.dir / "output" / "run.xlsx").exists())

    def test_imported_roster_replaces_fixed_occupant(self):
        """Test a fixed student missing from the imported roster is not kept"""
        roster_path = self.dir / "class.csv"
        roster_path.write_text("Zed\nYan\nXu\n", encoding="utf-8")

        grid, result = self.run_quietly(roster_path=str(roster_path),
                                        save_config_path=str(self.dir / "saved.yaml"))

        self.assertEqual(sorted(grid.occupied_positions().values()), ["Xu", "Yan", "Zed"])
        self.assertEqual(len(result.layout), 3)

        with open(self.dir / "output" / "run.csv", newline='', encoding='utf-8') as f:
            self.assertNotIn("Judy", f.read())
        saved = load_config(self.dir / "saved.yaml")
        self.assertNotIn("Judy", [s["name"] for s in saved["students"]])
        self.assertNotIn("Judy", [s.get("student") for s in saved["seats"]])


if __name__ == '__main__':
    unittest.main()
