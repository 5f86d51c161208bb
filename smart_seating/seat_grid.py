"""
Seat grid state.

Holds the rows x cols seats with their fixed/disabled flags and occupants,
partitions them into the inputs of an optimization run and writes the result
back.
"""

import logging
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from .data_models import Seat, SeatPosition, SeatingProblem, Student

logger = logging.getLogger(__name__)


class SeatGrid:
    """Rectangular grid of seats, row-major, row 0 at the front"""

    def __init__(self, rows: int, cols: int):
        self.rows = max(1, rows)
        self.cols = max(1, cols)
        self._seats: Dict[SeatPosition, Seat] = {
            position: Seat(position) for position in self.positions()
        }

    def positions(self) -> Iterator[SeatPosition]:
        """All positions in row-major order"""
        for r in range(self.rows):
            for c in range(self.cols):
                yield SeatPosition(r, c)

    def __iter__(self) -> Iterator[Seat]:
        for position in self.positions():
            yield self._seats[position]

    def __contains__(self, position: SeatPosition) -> bool:
        return position in self._seats

    def seat(self, position: SeatPosition) -> Seat:
        try:
            return self._seats[position]
        except KeyError:
            raise IndexError(f"Seat {position} is outside the {self.rows}x{self.cols} grid") from None

    def set_fixed(self, position: SeatPosition, fixed: bool = True) -> None:
        self.seat(position).fixed = fixed

    def set_disabled(self, position: SeatPosition, disabled: bool = True) -> None:
        """Disable a seat; a disabled seat loses its occupant"""
        seat = self.seat(position)
        seat.disabled = disabled
        if disabled:
            seat.occupant = None

    def find_student(self, name: str) -> Optional[SeatPosition]:
        for seat in self:
            if seat.occupant == name:
                return seat.position
        return None

    def assign(self, name: str, position: SeatPosition) -> None:
        """
        Seat a student, moving them if they already sit elsewhere.

        Raises:
            ValueError: If the seat is disabled
        """
        seat = self.seat(position)
        if seat.disabled:
            raise ValueError(f"Seat {position} is disabled")
        previous = self.find_student(name)
        if previous is not None and previous != position:
            self._seats[previous].occupant = None
        seat.occupant = name

    def clear(self, position: SeatPosition) -> None:
        self.seat(position).occupant = None

    def first_available_seat(self) -> Optional[SeatPosition]:
        for seat in self:
            if not seat.disabled and not seat.fixed and seat.occupant is None:
                return seat.position
        return None

    def occupied_positions(self) -> Dict[SeatPosition, str]:
        return {seat.position: seat.occupant for seat in self if seat.occupant is not None}

    def resize(self, rows: int, cols: int) -> None:
        """Change the grid size, keeping seats that still fit"""
        old_seats = self._seats
        self.rows = max(1, rows)
        self.cols = max(1, cols)
        self._seats = {}
        for position in self.positions():
            self._seats[position] = old_seats.get(position) or Seat(position)
        dropped = [seat.occupant for position, seat in old_seats.items()
                   if position not in self._seats and seat.occupant is not None]
        if dropped:
            logger.info("Resize to %dx%d unseated %d students", self.rows, self.cols, len(dropped))

    def place_all(self, roster: Sequence[Student]) -> List[str]:
        """
        Seat the roster in row-major order.

        Fixed seats keep occupants that are on the roster; every other seat is
        cleared first, so students missing from the roster lose their seat even
        when it is fixed. Disabled seats are skipped.

        Returns:
            Names of students left without a seat
        """
        names = {student.name for student in roster}
        fixed_names = set()
        dropped = []
        for seat in self:
            if seat.fixed and seat.occupant in names:
                fixed_names.add(seat.occupant)
                continue
            if seat.fixed and seat.occupant is not None:
                dropped.append(seat.occupant)
            seat.occupant = None
        if dropped:
            logger.info("Unseated fixed students missing from the roster: %s", ", ".join(dropped))

        queue = [student.name for student in roster if student.name not in fixed_names]
        for seat in self:
            if not queue:
                break
            if seat.disabled or seat.fixed:
                continue
            seat.occupant = queue.pop(0)
        if queue:
            logger.warning("%d students could not be seated", len(queue))
        return queue

    def partition(self, roster: Sequence[Student]) -> SeatingProblem:
        """
        Split the grid into the inputs of an optimization run.

        Disabled seats are skipped; fixed occupied seats become fixed
        assignments; every other seat is movable. Movable students are the
        occupants of movable seats followed by roster students seated nowhere.
        Occupant names missing from the roster are left out.
        """
        by_name = {student.name: student for student in roster}
        movable_students: List[Student] = []
        movable_positions: List[SeatPosition] = []
        fixed_assignments: Dict[str, SeatPosition] = {}
        seated = set()

        for seat in self:
            if seat.disabled:
                continue
            if seat.fixed and seat.occupant is not None:
                fixed_assignments[seat.occupant] = seat.position
                seated.add(seat.occupant)
            else:
                movable_positions.append(seat.position)
                if seat.occupant is not None:
                    seated.add(seat.occupant)
                    student = by_name.get(seat.occupant)
                    if student is not None:
                        movable_students.append(student)

        movable_students.extend(s for s in roster if s.name not in seated)

        return SeatingProblem(
            rows=self.rows,
            cols=self.cols,
            roster=list(roster),
            movable_students=movable_students,
            movable_positions=movable_positions,
            fixed_assignments=fixed_assignments,
        )

    def apply_layout(self, layout: Mapping[SeatPosition, Student]) -> None:
        """Replace every non-fixed occupant with the optimized layout"""
        for seat in self:
            if not seat.fixed:
                seat.occupant = None
        for position, student in layout.items():
            if position in self._seats:
                self._seats[position].occupant = student.name

    def summary(self) -> Dict[str, int]:
        seats = list(self)
        return {
            "total": len(seats),
            "occupied": sum(1 for s in seats if s.occupant is not None),
            "fixed": sum(1 for s in seats if s.fixed),
            "disabled": sum(1 for s in seats if s.disabled),
            "available": sum(1 for s in seats if not s.disabled and s.occupant is None),
        }
