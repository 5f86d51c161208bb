"""
Tests for running the optimizer in the background
"""

import unittest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from smart_seating.annealing import AnnealingSchedule, InvalidInputError, SeatingOptimizer
from smart_seating.background import start_optimization
from smart_seating.data_models import SeatingProblem, SeatPosition, Student


def make_problem(num_students, cols):
    students = [Student(f"S{i}") for i in range(num_students)]
    return SeatingProblem(
        rows=1, cols=cols, roster=students, movable_students=students,
        movable_positions=[SeatPosition(0, c) for c in range(cols)],
    )


class TestStartOptimization(unittest.TestCase):
    """Test the background handle"""

    def test_result_and_progress(self):
        """Test the run completes and its progress can be drained"""
        problem = make_problem(3, 5)
        optimizer = SeatingOptimizer(1, 5, rng=3,
                                     schedule=AnnealingSchedule(min_iterations=1000))
        handle = start_optimization(optimizer, problem)

        result = handle.result(timeout=60)

        self.assertTrue(handle.done())
        self.assertFalse(result.cancelled)
        self.assertEqual(len(result.layout), 3)
        updates = handle.progress_updates()
        self.assertEqual(updates[-1], 100.0)
        self.assertEqual(handle.last_progress, 100.0)
        self.assertEqual(handle.progress_updates(), [])

    def test_cancel(self):
        """Test a cancelled run still yields a complete layout"""
        problem = make_problem(4, 6)
        optimizer = SeatingOptimizer(1, 6, rng=1,
                                     schedule=AnnealingSchedule(min_iterations=10000000))
        handle = start_optimization(optimizer, problem)
        handle.cancel()

        result = handle.result(timeout=60)

        self.assertTrue(handle.cancel_requested)
        self.assertTrue(result.cancelled)
        self.assertLess(result.iterations, result.max_iterations)
        self.assertEqual(len(result.layout), 4)

    def test_invalid_input_propagates(self):
        """Test optimizer errors surface from result()"""
        handle = start_optimization(SeatingOptimizer(1, 2, rng=1), make_problem(3, 2))
        with self.assertRaises(InvalidInputError):
            handle.result(timeout=60)
        self.assertEqual(handle.progress_updates(), [])


if __name__ == '__main__':
    unittest.main()
