"""
Seating cost model.

The cost of a full layout (movable plus fixed occupants) is the sum over every
occupied seat of four terms:

- positional bias from the height and importance weights,
- avoidance penalties for listed students sitting close by,
- preference penalties growing with the squared distance to listed students,
- a flat penalty for sitting outside the preferred area.

The cost is recomputed from scratch on every call and does not depend on the
order in which occupants are visited.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Mapping, Optional, Tuple

from .area_parser import AreaBounds, parse_preferred_area
from .data_models import SeatPosition, Student, StudentTable, manhattan_distance


@dataclass
class CostWeights:
    """Weights of the cost terms"""
    avoid_adjacent: float = 500.0  # distance <= 1
    avoid_near: float = 100.0      # distance == 2
    prefer_distance: float = 10.0  # multiplied by distance squared
    height: float = 50.0
    importance: float = 60.0
    area: float = 150.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class CostBreakdown:
    """Per-term totals of a layout cost"""
    positional: float = 0.0
    avoidance: float = 0.0
    preference: float = 0.0
    area: float = 0.0

    @property
    def total(self) -> float:
        return self.positional + self.avoidance + self.preference + self.area


def row_factors(row: int, rows: int) -> Tuple[float, float]:
    """
    Return (row_factor, reverse_row_factor) for a row.

    Both are 0 on a single-row grid.
    """
    if rows <= 1:
        return 0.0, 0.0
    return row / (rows - 1), (rows - 1 - row) / (rows - 1)


class CostEvaluator:
    """
    Evaluates layouts of the students in a StudentTable.

    Names in avoid/prefer lists and preferred areas are resolved once when the
    evaluator is built; evaluation itself is a pure function of the layout.
    """

    def __init__(self,
                 table: StudentTable,
                 rows: int,
                 cols: int,
                 weights: Optional[CostWeights] = None):
        """
        Initialize evaluator

        Args:
            table: Snapshot of every student that may appear in a layout
            rows: Number of grid rows
            cols: Number of grid columns
            weights: Cost term weights (defaults to CostWeights())
        """
        self.table = table
        self.rows = rows
        self.cols = cols
        self.weights = weights or CostWeights()

        self._avoid: List[Tuple[int, ...]] = []
        self._prefer: List[Tuple[int, ...]] = []
        self._areas: List[Optional[AreaBounds]] = []
        for student in table:
            self._avoid.append(self._resolve(student.avoid_names))
            self._prefer.append(self._resolve(student.prefer_names))
            self._areas.append(parse_preferred_area(student.prefer_area))

    def _resolve(self, names) -> Tuple[int, ...]:
        indices = (self.table.index_of(name) for name in sorted(names))
        return tuple(idx for idx in indices if idx is not None)

    def positional_bias(self, student: Student, row: int) -> float:
        """Height and importance bias of a student sitting in a row"""
        row_factor, reverse_row_factor = row_factors(row, self.rows)
        if student.height_weight > 0:
            bias = student.height_weight * reverse_row_factor * self.weights.height
        else:
            bias = abs(student.height_weight) * row_factor * self.weights.height
        if student.importance_weight > 0:
            bias += student.importance_weight * row_factor * self.weights.importance
        return bias

    def avoidance_penalty(self, distance: int) -> float:
        if distance <= 1:
            return self.weights.avoid_adjacent
        if distance == 2:
            return self.weights.avoid_near
        return 0.0

    def preference_penalty(self, distance: int) -> float:
        return distance * distance * self.weights.prefer_distance

    def _add_student_terms(self,
                           idx: int,
                           position: SeatPosition,
                           position_by_index: Mapping[int, SeatPosition],
                           result: CostBreakdown) -> None:
        student = self.table[idx]
        result.positional += self.positional_bias(student, position.row)

        for other in self._avoid[idx]:
            other_position = position_by_index.get(other)
            if other_position is not None:
                result.avoidance += self.avoidance_penalty(
                    manhattan_distance(position, other_position)
                )

        for other in self._prefer[idx]:
            other_position = position_by_index.get(other)
            if other_position is not None:
                result.preference += self.preference_penalty(
                    manhattan_distance(position, other_position)
                )

        area = self._areas[idx]
        if area is not None and not area.contains(position):
            result.area += self.weights.area

    def breakdown_of_positions(self, position_by_index: Mapping[int, SeatPosition]) -> CostBreakdown:
        """
        Cost terms of a layout given as student index -> position.

        Args:
            position_by_index: Position of every placed student

        Returns:
            CostBreakdown with per-term totals
        """
        result = CostBreakdown()
        for idx, position in position_by_index.items():
            self._add_student_terms(idx, position, position_by_index, result)
        return result

    def cost_of_positions(self, position_by_index: Mapping[int, SeatPosition]) -> float:
        """Total cost of a layout given as student index -> position"""
        return self.breakdown_of_positions(position_by_index).total

    def _indices_of(self, layout: Mapping[SeatPosition, Student]) -> Dict[int, SeatPosition]:
        position_by_index = {}
        for position, student in layout.items():
            idx = self.table.index_of(student.name)
            if idx is None:
                raise KeyError(f"Student {student.name!r} is not part of this evaluator")
            position_by_index[idx] = position
        return position_by_index

    def breakdown(self, layout: Mapping[SeatPosition, Student]) -> CostBreakdown:
        """Cost terms of a full position -> student layout"""
        return self.breakdown_of_positions(self._indices_of(layout))

    def cost(self, layout: Mapping[SeatPosition, Student]) -> float:
        """Total cost of a full position -> student layout"""
        return self.breakdown(layout).total

    def seat_costs(self, layout: Mapping[SeatPosition, Student]) -> Dict[SeatPosition, float]:
        """Contribution of each occupied seat to the total cost"""
        position_by_index = self._indices_of(layout)
        costs = {}
        for idx, position in position_by_index.items():
            terms = CostBreakdown()
            self._add_student_terms(idx, position, position_by_index, terms)
            costs[position] = terms.total
        return costs


def calculate_cost(layout: Mapping[SeatPosition, Student],
                   rows: int,
                   cols: int,
                   weights: Optional[CostWeights] = None) -> float:
    """
    Cost of a full layout.

    Avoid/prefer names that do not appear in the layout are ignored.

    Args:
        layout: Every occupied position with its student
        rows: Number of grid rows
        cols: Number of grid columns
        weights: Optional cost weights

    Returns:
        Scalar cost (lower is better)
    """
    evaluator = CostEvaluator(StudentTable(layout.values()), rows, cols, weights)
    return evaluator.cost(layout)
