"""
Smart Seating - Seat Assignment Optimizer

Assigns students to the seats of a classroom grid by simulated annealing over
a preference-weighted cost (front/back bias, students to avoid or sit near,
preferred areas), honouring fixed and disabled seats.
"""

__version__ = "1.0.0"
__author__ = "Smart Seating Team"

# Export main classes for easy importing
from .data_models import (
    EMPTY,
    Layout,
    Seat,
    SeatingProblem,
    SeatPosition,
    Student,
    StudentTable,
    manhattan_distance,
)
from .area_parser import AreaBounds, parse_preferred_area
from .cost_model import CostBreakdown, CostEvaluator, CostWeights, calculate_cost
from .annealing import (
    AnnealingSchedule,
    InvalidInputError,
    OptimizationResult,
    SeatingOptimizer,
    optimize,
)
from .background import OptimizationHandle, start_optimization
from .seat_grid import SeatGrid
from .config_loader import ConfigurationError, load_config, save_config
from .io_utils import export_assignments_csv, export_layout_csv, import_roster_csv

__all__ = [
    'EMPTY',
    'Layout',
    'Seat',
    'SeatingProblem',
    'SeatPosition',
    'Student',
    'StudentTable',
    'manhattan_distance',
    'AreaBounds',
    'parse_preferred_area',
    'CostBreakdown',
    'CostEvaluator',
    'CostWeights',
    'calculate_cost',
    'AnnealingSchedule',
    'InvalidInputError',
    'OptimizationResult',
    'SeatingOptimizer',
    'optimize',
    'OptimizationHandle',
    'start_optimization',
    'SeatGrid',
    'ConfigurationError',
    'load_config',
    'save_config',
    'export_assignments_csv',
    'export_layout_csv',
    'import_roster_csv',
]
