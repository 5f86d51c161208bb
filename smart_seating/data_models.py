"""
Data models for the seating engine.

Core data structures representing students, seats, seat positions and the
index-based layout manipulated by the annealing search.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple


# Marker for an unoccupied slot in a Layout
EMPTY = -1


@dataclass(frozen=True)
class SeatPosition:
    """Zero-indexed grid coordinate of a seat (row 0 is the front)"""
    row: int
    col: int

    def __iter__(self) -> Iterator[int]:
        """Allow unpacking as tuple"""
        yield self.row
        yield self.col

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


def manhattan_distance(a: SeatPosition, b: SeatPosition) -> int:
    """Manhattan distance between two seats"""
    return abs(a.row - b.row) + abs(a.col - b.col)


@dataclass(frozen=True)
class Student:
    """
    A student taking part in an optimization run.

    Attributes:
        name: Unique name of the student (uniqueness is up to the caller)
        height_weight: Positive values cost more the closer the student sits
            to the front row, negative values the closer to the back row
        importance_weight: Positive values cost more the further back the
            student sits; zero or negative values are ignored
        avoid_names: Names of students that should sit far away
        prefer_names: Names of students that should sit close by
        prefer_area: Preferred area string such as "1,1-2,4" (may be empty)
    """
    name: str
    height_weight: float = 0.0
    importance_weight: float = 0.0
    avoid_names: FrozenSet[str] = frozenset()
    prefer_names: FrozenSet[str] = frozenset()
    prefer_area: str = ""

    def __post_init__(self):
        """Normalize name collections to frozensets."""
        if not isinstance(self.avoid_names, frozenset):
            object.__setattr__(self, "avoid_names", frozenset(self.avoid_names or ()))
        if not isinstance(self.prefer_names, frozenset):
            object.__setattr__(self, "prefer_names", frozenset(self.prefer_names or ()))
        if self.prefer_area is None:
            object.__setattr__(self, "prefer_area", "")


@dataclass
class Seat:
    """A single seat of the grid"""
    position: SeatPosition
    fixed: bool = False
    disabled: bool = False
    occupant: Optional[str] = None

    @property
    def is_movable(self) -> bool:
        """Seat may receive any non-fixed occupant during a search"""
        return not self.disabled and not (self.fixed and self.occupant is not None)


class StudentTable:
    """
    Immutable snapshot of the students of one optimization run.

    Students are addressed by their stable index into the table, so layouts
    never hold references to Student objects.
    """

    def __init__(self, students: Iterable[Student]):
        self._students: Tuple[Student, ...] = tuple(students)
        self._index: Dict[str, int] = {}
        for idx, student in enumerate(self._students):
            # First occurrence wins; duplicate names are a caller error
            self._index.setdefault(student.name, idx)

    def __len__(self) -> int:
        return len(self._students)

    def __getitem__(self, idx: int) -> Student:
        return self._students[idx]

    def __iter__(self) -> Iterator[Student]:
        return iter(self._students)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def index_of(self, name: str) -> Optional[int]:
        """Index of the student with this name, or None if unknown"""
        return self._index.get(name)


@dataclass
class Layout:
    """
    Assignment of student indices to the movable positions of a run.

    Attributes:
        positions: Movable positions, in the order used by the search
        slots: Student index per position (EMPTY for an unoccupied seat)
    """
    positions: Tuple[SeatPosition, ...]
    slots: List[int] = field(default_factory=list)

    def __post_init__(self):
        self.positions = tuple(self.positions)
        if not self.slots:
            self.slots = [EMPTY] * len(self.positions)
        if len(self.slots) != len(self.positions):
            raise ValueError(
                f"Layout has {len(self.slots)} slots for {len(self.positions)} positions"
            )

    def copy(self) -> "Layout":
        """Copy sharing the (immutable) positions tuple"""
        return Layout(positions=self.positions, slots=self.slots.copy())

    def swapped(self, i: int, j: int) -> "Layout":
        """
        Copy of this layout with the occupants of slots i and j exchanged.

        Either occupant may be EMPTY; i == j yields an unchanged copy.
        """
        candidate = self.copy()
        candidate.slots[i], candidate.slots[j] = candidate.slots[j], candidate.slots[i]
        return candidate

    def occupied(self) -> Iterator[Tuple[SeatPosition, int]]:
        """Iterate over (position, student index) for occupied slots"""
        for position, idx in zip(self.positions, self.slots):
            if idx != EMPTY:
                yield position, idx

    def position_by_index(self) -> Dict[int, SeatPosition]:
        """Mapping student index -> position for occupied slots"""
        return {idx: position for position, idx in self.occupied()}

    def to_mapping(self, table: StudentTable) -> Dict[SeatPosition, Student]:
        """Resolve indices against the student table"""
        return {position: table[idx] for position, idx in self.occupied()}

    def occupied_count(self) -> int:
        return sum(1 for idx in self.slots if idx != EMPTY)


@dataclass
class SeatingProblem:
    """
    Inputs of one optimization run, as partitioned from a seat grid.

    Attributes:
        rows: Number of grid rows (used by the positional bias terms)
        cols: Number of grid columns
        roster: Every student known to the run (used to resolve fixed names)
        movable_students: Students the search may place
        movable_positions: Seats the search may fill
        fixed_assignments: Pinned student name -> position
    """
    rows: int
    cols: int
    roster: Sequence[Student]
    movable_students: List[Student]
    movable_positions: List[SeatPosition]
    fixed_assignments: Dict[str, SeatPosition] = field(default_factory=dict)

    def capacity_ok(self) -> bool:
        return len(self.movable_positions) >= len(self.movable_students)
