"""
Simulated annealing seat optimizer.

Implements the search that minimizes the seating cost: random initial
placement, swap neighbourhood over the movable seats, Metropolis acceptance,
geometric cooling and best-so-far tracking with progress reporting and
cooperative cancellation.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from .cost_model import CostEvaluator, CostWeights
from .data_models import (
    Layout, SeatPosition, SeatingProblem, Student, StudentTable
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
RandomSource = Union[None, int, np.random.Generator]


class InvalidInputError(ValueError):
    """Raised when the optimizer is invoked with inputs it cannot search"""
    pass


@dataclass
class AnnealingSchedule:
    """Temperature schedule and iteration budget"""
    initial_temperature: float = 10000.0
    cooling_rate: float = 0.9995
    min_iterations: int = 20000
    iterations_per_student: int = 2000

    def __post_init__(self):
        if self.initial_temperature <= 0:
            raise ValueError("initial_temperature must be positive")
        if not 0 < self.cooling_rate <= 1:
            raise ValueError("cooling_rate must be in (0, 1]")
        if self.min_iterations < 0 or self.iterations_per_student < 0:
            raise ValueError("Iteration counts must be non-negative")

    def iteration_budget(self, num_students: int) -> int:
        return max(self.min_iterations, num_students * self.iterations_per_student)


@dataclass
class OptimizationResult:
    """
    Result of one optimization run.

    Attributes:
        layout: Best layout found (movable positions only)
        best_cost: Cost of the best layout merged with the fixed assignments
        initial_cost: Cost of the random initial layout
        iterations: Iterations actually performed
        max_iterations: Iteration budget of the run
        cancelled: True if the run was stopped before exhausting its budget
        best_cost_history: Best cost at every progress report
        elapsed_seconds: Wall time of the search
        seed: Seed of the generator, when the run created it from a seed
    """
    layout: Dict[SeatPosition, Student] = field(default_factory=dict)
    best_cost: float = 0.0
    initial_cost: float = 0.0
    iterations: int = 0
    max_iterations: int = 0
    cancelled: bool = False
    best_cost_history: List[float] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: Optional[int] = None

    @property
    def improvement(self) -> float:
        return self.initial_cost - self.best_cost


def make_rng(random_source: RandomSource = None) -> np.random.Generator:
    """Build a numpy Generator from a seed, or pass a Generator through"""
    if isinstance(random_source, np.random.Generator):
        return random_source
    return np.random.default_rng(random_source)


def accept_move(current_cost: float,
                candidate_cost: float,
                temperature: float,
                rng: np.random.Generator) -> bool:
    """
    Metropolis acceptance criterion.

    Improving moves are always accepted; worsening moves with probability
    exp(-delta / temperature). A temperature of zero rejects every
    worsening move.
    """
    if candidate_cost < current_cost:
        return True
    if temperature <= 0:
        return False
    return math.exp((current_cost - candidate_cost) / temperature) > rng.random()


class SeatingOptimizer:
    """Simulated annealing over the movable seats of a grid"""

    def __init__(self,
                 rows: int,
                 cols: int,
                 weights: Optional[CostWeights] = None,
                 schedule: Optional[AnnealingSchedule] = None,
                 rng: RandomSource = None):
        """
        Initialize optimizer

        Args:
            rows: Number of grid rows
            cols: Number of grid columns
            weights: Cost term weights
            schedule: Annealing schedule (defaults to AnnealingSchedule())
            rng: numpy Generator, or a seed to build one from
        """
        if rows < 1 or cols < 1:
            raise InvalidInputError(f"Grid must have at least one row and column, got {rows}x{cols}")

        self.rows = rows
        self.cols = cols
        self.weights = weights or CostWeights()
        self.schedule = schedule or AnnealingSchedule()
        self.seed = None if isinstance(rng, np.random.Generator) else rng
        self.rng = make_rng(rng)

    def solve(self,
              problem: SeatingProblem,
              progress_callback: Optional[ProgressCallback] = None,
              cancel_event: Optional[threading.Event] = None) -> OptimizationResult:
        """Optimize a SeatingProblem partitioned from a seat grid"""
        return self.optimize(
            problem.movable_students,
            problem.movable_positions,
            problem.fixed_assignments,
            roster=problem.roster,
            progress_callback=progress_callback,
            cancel_event=cancel_event,
        )

    def _build_table(self,
                     movable_students: Sequence[Student],
                     fixed_assignments: Mapping[str, SeatPosition],
                     roster: Optional[Sequence[Student]]):
        """
        Snapshot movable students (indices 0..n-1) followed by fixed students.

        Returns:
            Tuple of (StudentTable, fixed student index -> position)
        """
        known = {}
        for student in list(roster or []) + list(movable_students):
            known.setdefault(student.name, student)

        students = list(movable_students)
        fixed_positions = {}
        for name, position in fixed_assignments.items():
            student = known.get(name)
            if student is None:
                logger.warning("Fixed assignment for unknown student %r at %s ignored", name, position)
                continue
            fixed_positions[len(students)] = position
            students.append(student)
        return StudentTable(students), fixed_positions

    def optimize(self,
                 movable_students: Sequence[Student],
                 movable_positions: Sequence[SeatPosition],
                 fixed_assignments: Optional[Mapping[str, SeatPosition]] = None,
                 roster: Optional[Sequence[Student]] = None,
                 progress_callback: Optional[ProgressCallback] = None,
                 cancel_event: Optional[threading.Event] = None) -> OptimizationResult:
        """
        Search for a low-cost assignment of students to movable positions.

        Args:
            movable_students: Students to place
            movable_positions: Distinct seats the students may occupy
            fixed_assignments: Pinned student name -> position (disjoint from
                the movable positions); included in the cost, never moved
            roster: Students used to resolve fixed names (defaults to the
                movable students)
            progress_callback: Called with a percentage in [0, 100] about
                every 1% of the iteration budget
            cancel_event: Checked once per iteration; when set, the search
                stops and returns the best layout found so far

        Returns:
            OptimizationResult holding the best layout

        Raises:
            InvalidInputError: If there are more students than positions
        """
        fixed_assignments = fixed_assignments or {}
        if len(movable_positions) < len(movable_students):
            raise InvalidInputError(
                f"Not enough movable seats: {len(movable_students)} students "
                f"for {len(movable_positions)} positions"
            )

        table, fixed_positions = self._build_table(movable_students, fixed_assignments, roster)
        evaluator = CostEvaluator(table, self.rows, self.cols, self.weights)
        num_students = len(movable_students)

        def full_cost(layout: Layout) -> float:
            position_by_index = dict(fixed_positions)
            position_by_index.update(layout.position_by_index())
            return evaluator.cost_of_positions(position_by_index)

        start_time = time.time()

        # Random permutation of the students onto the first positions
        current = Layout(positions=tuple(movable_positions))
        for slot, idx in enumerate(self.rng.permutation(num_students)):
            current.slots[slot] = int(idx)

        current_cost = full_cost(current)
        best = current.copy()
        best_cost = current_cost
        result = OptimizationResult(initial_cost=current_cost, seed=self.seed)

        max_iterations = self.schedule.iteration_budget(num_students)
        result.max_iterations = max_iterations
        num_positions = len(current.positions)

        logger.info(
            "Annealing %d students over %d seats (%d fixed), %d iterations, seed %s, initial cost %.2f",
            num_students, num_positions, len(fixed_positions), max_iterations, self.seed, current_cost
        )

        if num_students == 0:
            max_iterations = 0

        report_every = max(1, max_iterations // 100)
        temperature = self.schedule.initial_temperature
        iteration = 0

        while iteration < max_iterations:
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                break

            # Two independent draws; equal indices give a no-op candidate
            i = int(self.rng.integers(num_positions))
            j = int(self.rng.integers(num_positions))
            candidate = current.swapped(i, j)
            candidate_cost = full_cost(candidate)

            if accept_move(current_cost, candidate_cost, temperature, self.rng):
                current = candidate
                current_cost = candidate_cost

            if current_cost < best_cost:
                best = current.copy()
                best_cost = current_cost

            temperature *= self.schedule.cooling_rate

            if iteration % report_every == 0:
                percent = iteration / max_iterations * 100
                result.best_cost_history.append(best_cost)
                logger.debug("Progress %.0f%%: T=%.4g current=%.2f best=%.2f",
                             percent, temperature, current_cost, best_cost)
                if progress_callback is not None:
                    progress_callback(percent)

            iteration += 1

        result.iterations = iteration
        if not result.cancelled:
            result.best_cost_history.append(best_cost)
            if progress_callback is not None:
                progress_callback(100.0)

        result.layout = best.to_mapping(table)
        result.best_cost = best_cost
        result.elapsed_seconds = time.time() - start_time

        logger.info(
            "Annealing %s after %d/%d iterations in %.2fs: best cost %.2f (initial %.2f)",
            "cancelled" if result.cancelled else "finished",
            result.iterations, result.max_iterations, result.elapsed_seconds,
            best_cost, result.initial_cost
        )
        return result


def optimize(movable_students: Sequence[Student],
             movable_positions: Sequence[SeatPosition],
             fixed_assignments: Optional[Mapping[str, SeatPosition]],
             rows: int,
             cols: int,
             roster: Optional[Sequence[Student]] = None,
             rng: RandomSource = None,
             schedule: Optional[AnnealingSchedule] = None,
             weights: Optional[CostWeights] = None,
             progress_callback: Optional[ProgressCallback] = None,
             cancel_event: Optional[threading.Event] = None) -> OptimizationResult:
    """
    Convenience wrapper running a single SeatingOptimizer.

    See SeatingOptimizer.optimize for the meaning of the arguments.
    """
    optimizer = SeatingOptimizer(rows, cols, weights=weights, schedule=schedule, rng=rng)
    return optimizer.optimize(
        movable_students,
        movable_positions,
        fixed_assignments,
        roster=roster,
        progress_callback=progress_callback,
        cancel_event=cancel_event,
    )
