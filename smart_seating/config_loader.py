"""
Configuration Loading System

Loads YAML seating configuration files and converts them to the data
structures of the seating engine: the seat grid, the roster, the annealing
schedule and the cost weights. Seat coordinates in the file are 1-indexed,
like the preferred area strings.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from .annealing import AnnealingSchedule
from .cost_model import CostWeights
from .data_models import SeatPosition, Student
from .seat_grid import SeatGrid

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 10
DEFAULT_COLS = 10


class ConfigurationError(Exception):
    """Raised when configuration is invalid"""
    pass


def load_config(config_path: Union[str, Path] = "config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")
    return config


def _name_list(value: Any) -> List[str]:
    """Accept a list of names or a comma separated string"""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(name).strip() for name in value if str(name).strip()]


def create_roster_from_config(config: Dict[str, Any]) -> List[Student]:
    """Create the student roster from configuration"""
    roster = []
    seen = set()
    for entry in config.get("students") or []:
        if isinstance(entry, str):
            entry = {"name": entry}
        name = str(entry.get("name", "")).strip()
        if not name:
            raise ConfigurationError(f"Student entry without a name: {entry}")
        if name in seen:
            raise ConfigurationError(f"Duplicate student name: {name}")
        seen.add(name)

        try:
            roster.append(Student(
                name=name,
                height_weight=float(entry.get("height_weight", 0.0) or 0.0),
                importance_weight=float(entry.get("importance_weight", 0.0) or 0.0),
                avoid_names=_name_list(entry.get("avoid")),
                prefer_names=_name_list(entry.get("prefer")),
                prefer_area=str(entry.get("prefer_area") or ""),
            ))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid weights for student {name}: {e}")
    return roster


def create_seat_grid_from_config(config: Dict[str, Any],
                                 roster: Optional[Sequence[Student]] = None) -> SeatGrid:
    """
    Create the seat grid from configuration

    Seats outside the grid are dropped and occupants that are not on the
    roster are ignored.
    """
    grid_config = config.get("grid") or {}
    rows = grid_config.get("rows", DEFAULT_ROWS)
    cols = grid_config.get("cols", DEFAULT_COLS)
    rows = rows if isinstance(rows, int) and rows > 0 else DEFAULT_ROWS
    cols = cols if isinstance(cols, int) and cols > 0 else DEFAULT_COLS
    grid = SeatGrid(rows, cols)

    if roster is None:
        roster = create_roster_from_config(config)
    names = {student.name for student in roster}

    for seat_config in config.get("seats") or []:
        try:
            position = SeatPosition(int(seat_config["row"]) - 1, int(seat_config["col"]) - 1)
        except (KeyError, TypeError, ValueError):
            raise ConfigurationError(f"Seat entry needs integer 'row' and 'col': {seat_config}")
        if position not in grid:
            logger.warning("Seat %s outside %dx%d grid dropped", seat_config, rows, cols)
            continue

        seat = grid.seat(position)
        seat.fixed = bool(seat_config.get("fixed", False))
        seat.disabled = bool(seat_config.get("disabled", False))
        student = seat_config.get("student")
        if student and not seat.disabled:
            if student in names:
                grid.assign(student, position)
            else:
                logger.warning("Seat %s names unknown student %r", seat_config, student)
    return grid


def resolve_random_seed(seed: Any) -> int:
    """Turn a configured seed (int, digit string, None or 'random') into an int"""
    if seed is None or seed == "random":
        seed = int(time.time() * 1000000) % 2147483647
        logger.info("Using random seed: %d", seed)
        return seed
    if isinstance(seed, str) and seed.isdigit():
        return int(seed)
    if isinstance(seed, int):
        return seed
    raise ConfigurationError(f"Invalid random_seed: {seed!r}")


def create_schedule_from_config(config: Dict[str, Any]) -> AnnealingSchedule:
    """Create the annealing schedule from the optimization section"""
    optimization_config = config.get("optimization") or {}
    defaults = AnnealingSchedule()
    try:
        return AnnealingSchedule(
            initial_temperature=float(optimization_config.get(
                "initial_temperature", defaults.initial_temperature)),
            cooling_rate=float(optimization_config.get("cooling_rate", defaults.cooling_rate)),
            min_iterations=int(optimization_config.get("min_iterations", defaults.min_iterations)),
            iterations_per_student=int(optimization_config.get(
                "iterations_per_student", defaults.iterations_per_student)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid optimization settings: {e}")


def create_weights_from_config(config: Dict[str, Any]) -> CostWeights:
    """Create the cost weights, defaulting any that are not configured"""
    weights_config = config.get("weights") or {}
    known = CostWeights().to_dict()
    unknown = set(weights_config) - set(known)
    if unknown:
        raise ConfigurationError(f"Unknown cost weights: {', '.join(sorted(unknown))}")
    try:
        return CostWeights(**{key: float(value) for key, value in weights_config.items()})
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid cost weights: {e}")


def get_optimization_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get optimization configuration"""
    return config.get("optimization") or {}


def get_visualization_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get visualization configuration"""
    return config.get("visualization") or {}


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of issues

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    grid_config = config.get("grid")
    if grid_config is None:
        issues.append("Missing required section: grid")
    else:
        for key in ("rows", "cols"):
            value = grid_config.get(key, 0)
            if not isinstance(value, int) or value <= 0:
                issues.append(f"Grid {key} must be a positive integer")

    students = config.get("students") or []
    names = []
    for entry in students:
        name = entry if isinstance(entry, str) else (entry or {}).get("name")
        if not name:
            issues.append("Student entry without a name")
        else:
            names.append(str(name).strip())
    duplicates = sorted({n for n in names if names.count(n) > 1})
    for name in duplicates:
        issues.append(f"Duplicate student name: {name}")

    known = set(names)
    for entry in students:
        if isinstance(entry, str) or not entry:
            continue
        for key in ("avoid", "prefer"):
            for other in _name_list(entry.get(key)):
                if other not in known:
                    issues.append(f"Student {entry.get('name')} {key}s unknown student {other}")

    # Capacity: every student needs a non-disabled seat
    rows = (grid_config or {}).get("rows", 0)
    cols = (grid_config or {}).get("cols", 0)
    if isinstance(rows, int) and isinstance(cols, int) and rows > 0 and cols > 0:
        disabled = sum(1 for seat in config.get("seats") or []
                       if isinstance(seat, dict) and seat.get("disabled"))
        if len(names) > rows * cols - disabled:
            issues.append(
                f"{len(names)} students do not fit in {rows * cols - disabled} usable seats"
            )

    try:
        create_schedule_from_config(config)
        create_weights_from_config(config)
    except ConfigurationError as e:
        issues.append(str(e))

    return issues


def save_config(config_path: Union[str, Path],
                grid: SeatGrid,
                roster: Sequence[Student],
                extra: Optional[Dict[str, Any]] = None) -> Path:
    """
    Save the grid state and roster as a YAML configuration

    Every seat that is occupied, fixed or disabled is written so the file
    reloads to the same grid.

    Args:
        config_path: Destination file
        grid: Seat grid to save
        roster: Students to save
        extra: Additional top-level sections (optimization, weights, ...)

    Returns:
        Path to the written file
    """
    config: Dict[str, Any] = {
        "grid": {"rows": grid.rows, "cols": grid.cols},
        "students": [
            {
                "name": s.name,
                "height_weight": s.height_weight,
                "importance_weight": s.importance_weight,
                "avoid": sorted(s.avoid_names),
                "prefer": sorted(s.prefer_names),
                "prefer_area": s.prefer_area,
            }
            for s in roster
        ],
        "seats": [],
    }
    for seat in grid:
        if seat.occupant is None and not seat.fixed and not seat.disabled:
            continue
        entry: Dict[str, Any] = {"row": seat.position.row + 1, "col": seat.position.col + 1}
        if seat.occupant is not None:
            entry["student"] = seat.occupant
        if seat.fixed:
            entry["fixed"] = True
        if seat.disabled:
            entry["disabled"] = True
        config["seats"].append(entry)
    if extra:
        config.update(extra)

    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return path


def print_config_summary(config_path: Union[str, Path] = "config.yaml"):
    """Print a summary of the configuration"""
    try:
        config = load_config(config_path)

        print("=" * 50)
        print("CONFIGURATION SUMMARY")
        print("=" * 50)

        grid_config = config.get("grid") or {}
        print(f"Grid Size: {grid_config.get('rows', 'N/A')} x {grid_config.get('cols', 'N/A')}")

        students = config.get("students") or []
        seats = config.get("seats") or []
        print(f"Students: {len(students)}")
        print(f"Fixed seats: {sum(1 for s in seats if s.get('fixed'))}")
        print(f"Disabled seats: {sum(1 for s in seats if s.get('disabled'))}")

        opt_config = get_optimization_config(config)
        print(f"\nRandom seed: {opt_config.get('random_seed', 'random')}")
        print(f"Cooling rate: {opt_config.get('cooling_rate', AnnealingSchedule.cooling_rate)}")

        issues = validate_config(config)
        if issues:
            print(f"\nValidation Issues ({len(issues)}):")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print("\nConfiguration is valid")

        print("=" * 50)

    except ConfigurationError as e:
        print(f"Configuration Error: {e}")
