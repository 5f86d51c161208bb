"""
Tests for the seating cost model
"""

import unittest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from smart_seating.cost_model import (
    CostBreakdown, CostEvaluator, CostWeights, calculate_cost, row_factors
)
from smart_seating.data_models import EMPTY, Layout, SeatPosition, Student, StudentTable


def P(row, col):
    return SeatPosition(row, col)


class TestRowFactors(unittest.TestCase):
    """Test row factor computation"""

    def test_three_rows(self):
        """Test factors run from front to back"""
        self.assertEqual(row_factors(0, 3), (0.0, 1.0))
        self.assertEqual(row_factors(1, 3), (0.5, 0.5))
        self.assertEqual(row_factors(2, 3), (1.0, 0.0))

    def test_single_row_is_degenerate(self):
        """Test factors vanish on a single-row grid"""
        self.assertEqual(row_factors(0, 1), (0.0, 0.0))


class TestPositionalBias(unittest.TestCase):
    """Test height and importance terms"""

    def test_positive_height_uses_reverse_factor(self):
        """Test positive height weight costs most in the front row"""
        tall = Student("T", height_weight=1.0)
        self.assertAlmostEqual(calculate_cost({P(0, 0): tall}, 3, 3), 50.0)
        self.assertAlmostEqual(calculate_cost({P(1, 0): tall}, 3, 3), 25.0)
        self.assertAlmostEqual(calculate_cost({P(2, 0): tall}, 3, 3), 0.0)

    def test_negative_height_uses_row_factor(self):
        """Test negative height weight costs most in the back row"""
        short = Student("S", height_weight=-2.0)
        self.assertAlmostEqual(calculate_cost({P(0, 0): short}, 3, 3), 0.0)
        self.assertAlmostEqual(calculate_cost({P(2, 0): short}, 3, 3), 100.0)

    def test_importance_only_when_positive(self):
        """Test importance weight biases toward the front"""
        important = Student("I", importance_weight=1.0)
        ignored = Student("N", importance_weight=-3.0)
        self.assertAlmostEqual(calculate_cost({P(2, 0): important}, 3, 3), 60.0)
        self.assertAlmostEqual(calculate_cost({P(0, 0): important}, 3, 3), 0.0)
        self.assertAlmostEqual(calculate_cost({P(2, 0): ignored}, 3, 3), 0.0)

    def test_height_and_importance_add_up(self):
        """Test both bias terms accumulate"""
        student = Student("X", height_weight=-1.0, importance_weight=2.0)
        self.assertAlmostEqual(calculate_cost({P(4, 1): student}, 5, 2), 50.0 + 120.0)

    def test_single_row_grid_has_no_bias(self):
        """Test degenerate grids contribute no positional cost"""
        student = Student("X", height_weight=3.0, importance_weight=3.0)
        self.assertEqual(calculate_cost({P(0, 2): student}, 1, 4), 0.0)


class TestAvoidance(unittest.TestCase):
    """Test avoidance penalty boundaries"""

    def setUp(self):
        self.a = Student("A", avoid_names={"B"})
        self.b = Student("B")

    def test_distance_one(self):
        """Test adjacent seats cost 500"""
        self.assertEqual(calculate_cost({P(0, 0): self.a, P(0, 1): self.b}, 1, 5), 500.0)
        self.assertEqual(calculate_cost({P(0, 0): self.a, P(1, 0): self.b}, 2, 5), 500.0)

    def test_distance_two(self):
        """Test seats two apart cost 100"""
        self.assertEqual(calculate_cost({P(0, 0): self.a, P(0, 2): self.b}, 1, 5), 100.0)
        self.assertEqual(calculate_cost({P(0, 0): self.a, P(1, 1): self.b}, 1, 5), 100.0)

    def test_distance_three_or_more(self):
        """Test seats three or more apart cost nothing"""
        self.assertEqual(calculate_cost({P(0, 0): self.a, P(0, 3): self.b}, 1, 5), 0.0)
        self.assertEqual(calculate_cost({P(0, 0): self.a, P(0, 4): self.b}, 1, 5), 0.0)

    def test_distance_zero_penalty(self):
        """Test the penalty for coinciding seats"""
        evaluator = CostEvaluator(StudentTable([self.a, self.b]), 1, 5)
        self.assertEqual(evaluator.avoidance_penalty(0), 500.0)

    def test_mutual_avoidance_counts_per_student(self):
        """Test each student listing the other adds a penalty"""
        a = Student("A", avoid_names={"B"})
        b = Student("B", avoid_names={"A"})
        self.assertEqual(calculate_cost({P(0, 0): a, P(0, 1): b}, 1, 5), 1000.0)
        self.assertEqual(calculate_cost({P(0, 0): a, P(0, 2): b}, 1, 5), 200.0)
        self.assertEqual(calculate_cost({P(0, 0): a, P(0, 3): b}, 1, 5), 0.0)

    def test_absent_names_are_ignored(self):
        """Test avoiding someone not in the layout costs nothing"""
        a = Student("A", avoid_names={"Nobody"})
        self.assertEqual(calculate_cost({P(0, 0): a}, 1, 5), 0.0)


class TestPreferenceAndArea(unittest.TestCase):
    """Test preference distance and preferred area terms"""

    def test_preference_grows_with_squared_distance(self):
        """Test larger distance to a preferred student costs more"""
        a = Student("A", prefer_names={"B"})
        b = Student("B")
        self.assertEqual(calculate_cost({P(0, 0): a, P(0, 1): b}, 1, 5), 10.0)
        self.assertEqual(calculate_cost({P(0, 0): a, P(0, 3): b}, 1, 5), 90.0)
        self.assertEqual(calculate_cost({P(0, 0): a, P(2, 2): b}, 1, 5), 160.0)

    def test_outside_preferred_area(self):
        """Test a flat penalty outside the area and none inside"""
        student = Student("A", prefer_area="1,1-2,2")
        self.assertEqual(calculate_cost({P(1, 1): student}, 1, 5), 0.0)
        self.assertEqual(calculate_cost({P(0, 2): student}, 1, 5), 150.0)

    def test_malformed_area_is_unconstrained(self):
        """Test bad area strings never add cost"""
        student = Student("A", prefer_area="front row please")
        self.assertEqual(calculate_cost({P(0, 4): student}, 1, 5), 0.0)

    def test_custom_weights(self):
        """Test configured weights replace the defaults"""
        weights = CostWeights(avoid_adjacent=7.0, area=3.0)
        a = Student("A", avoid_names={"B"}, prefer_area="1,1")
        b = Student("B")
        self.assertEqual(calculate_cost({P(0, 1): a, P(0, 2): b}, 1, 5, weights), 10.0)


class TestCostEvaluator(unittest.TestCase):
    """Test evaluator invariants"""

    def setUp(self):
        self.students = [
            Student("A", height_weight=1.0, avoid_names={"B"}, prefer_names={"C"}),
            Student("B", importance_weight=2.0, prefer_area="1,1-1,4"),
            Student("C", height_weight=-0.5, avoid_names={"A"}),
            Student("D", prefer_names={"A", "B"}),
        ]
        self.table = StudentTable(self.students)
        self.evaluator = CostEvaluator(self.table, 3, 4)
        self.layout = {
            P(0, 0): self.students[0],
            P(1, 2): self.students[1],
            P(0, 1): self.students[2],
            P(2, 3): self.students[3],
        }

    def test_cost_is_deterministic(self):
        """Test repeated evaluation gives identical results"""
        self.assertEqual(self.evaluator.cost(self.layout), self.evaluator.cost(self.layout))
        self.assertEqual(calculate_cost(self.layout, 3, 4), calculate_cost(self.layout, 3, 4))

    def test_cost_is_order_independent(self):
        """Test occupant visiting order does not matter"""
        reversed_layout = dict(reversed(list(self.layout.items())))
        self.assertAlmostEqual(self.evaluator.cost(self.layout),
                               self.evaluator.cost(reversed_layout))

    def test_breakdown_matches_total(self):
        """Test per-term totals add up to the cost"""
        breakdown = self.evaluator.breakdown(self.layout)
        self.assertIsInstance(breakdown, CostBreakdown)
        self.assertAlmostEqual(breakdown.total, self.evaluator.cost(self.layout))
        self.assertGreater(breakdown.avoidance, 0)
        self.assertGreater(breakdown.preference, 0)
        self.assertEqual(breakdown.area, 150.0)

    def test_seat_costs_sum_to_total(self):
        """Test per-seat contributions add up to the cost"""
        seat_costs = self.evaluator.seat_costs(self.layout)
        self.assertEqual(set(seat_costs), set(self.layout))
        self.assertAlmostEqual(sum(seat_costs.values()), self.evaluator.cost(self.layout))

    def test_no_op_swaps_keep_cost(self):
        """Test swapping a slot with itself or two empty slots"""
        positions = (P(0, 0), P(0, 1), P(1, 2), P(2, 3), P(2, 0))
        layout = Layout(positions=positions, slots=[0, 2, 1, EMPTY, EMPTY])
        baseline = self.evaluator.cost_of_positions(layout.position_by_index())

        for i, j in [(0, 0), (2, 2), (3, 4), (4, 3)]:
            with self.subTest(i=i, j=j):
                swapped = layout.swapped(i, j)
                self.assertEqual(self.evaluator.cost_of_positions(swapped.position_by_index()),
                                 baseline)

    def test_unknown_student_rejected(self):
        """Test a layout student missing from the table"""
        with self.assertRaises(KeyError):
            self.evaluator.cost({P(0, 0): Student("Z")})


if __name__ == '__main__':
    unittest.main()
