"""
I/O utilities for the seating engine.

Handles roster import and seat layout export as CSV or Excel workbooks.
"""

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Union

import pandas as pd

from .data_models import Student
from .seat_grid import SeatGrid

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = ('.xlsx', '.xlsm')


def _unique_names(values: Iterable) -> List[str]:
    """Trimmed names in order, skipping blanks and repeats"""
    names: List[str] = []
    for value in values:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            continue
        value = str(value).strip()
        if value and value not in names:
            names.append(value)
    return names


def import_roster_csv(csv_path: Union[str, Path], column: int = 0) -> List[Student]:
    """
    Load a roster from a CSV file with one student name per row.

    CSV format:
        name
        Alice
        Bob
        ...

    A first-row header reading exactly "name" (lower case) is skipped; any
    other first cell, "Name" included, is a student. Blank and repeated names
    are skipped.

    Args:
        csv_path: Path to CSV file
        column: Zero-based column holding the names

    Returns:
        Students in file order, with default weights

    Raises:
        FileNotFoundError: If CSV file doesn't exist
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    values = []
    with open(csv_path, 'r', newline='', encoding='utf-8-sig') as f:
        for line_number, row in enumerate(csv.reader(f)):
            if column >= len(row):
                continue
            if line_number == 0 and row[column].strip() == "name":
                continue
            values.append(row[column])

    names = _unique_names(values)
    logger.info("Imported %d students from %s", len(names), csv_path)
    return [Student(name=name) for name in names]


def import_roster_excel(excel_path: Union[str, Path], column: int = 0) -> List[Student]:
    """
    Load a roster from the first worksheet of an Excel workbook.

    Every non-empty cell of the column is a student name; there is no header
    row. Blank and repeated names are skipped.

    Args:
        excel_path: Path to .xlsx file
        column: Zero-based column holding the names

    Returns:
        Students in sheet order, with default weights

    Raises:
        FileNotFoundError: If the workbook doesn't exist
    """
    excel_path = Path(excel_path)

    if not excel_path.exists():
        raise FileNotFoundError(f"Excel file not found: {excel_path}")

    df = pd.read_excel(excel_path, sheet_name=0, header=None, dtype=str)
    if column >= df.shape[1]:
        names = []
    else:
        names = _unique_names(df.iloc[:, column])

    logger.info("Imported %d students from %s", len(names), excel_path)
    return [Student(name=name) for name in names]


def import_roster(path: Union[str, Path], column: int = 0) -> List[Student]:
    """Load a roster, picking Excel or CSV from the file extension"""
    if Path(path).suffix.lower() in EXCEL_SUFFIXES:
        return import_roster_excel(path, column)
    return import_roster_csv(path, column)


def _prepare_output(output_path: Union[str, Path], overwrite: bool) -> Path:
    output_path = Path(output_path)
    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def _layout_rows(grid: SeatGrid) -> List[List[str]]:
    """Occupant names per seat row, empty string for a free seat"""
    return [
        [grid.seat(position).occupant or "" for position in grid.positions() if position.row == r]
        for r in range(grid.rows)
    ]


def export_layout_csv(grid: SeatGrid,
                      output_path: Union[str, Path],
                      overwrite: bool = True) -> Path:
    """
    Export the grid as a seating chart: one CSV row per seat row, each cell
    holding the occupant name (empty for a free seat).

    Returns:
        Path to saved CSV file
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerows(_layout_rows(grid))

    return output_path


def export_layout_excel(grid: SeatGrid,
                        output_path: Union[str, Path],
                        overwrite: bool = True,
                        sheet_name: str = "Seating") -> Path:
    """
    Export the grid as a seating chart workbook, one sheet row per seat row
    starting at cell A1, without header or index.

    Returns:
        Path to saved .xlsx file
    """
    output_path = _prepare_output(output_path, overwrite)

    df = pd.DataFrame(_layout_rows(grid))
    df.to_excel(output_path, sheet_name=sheet_name, header=False, index=False, engine='openpyxl')

    return output_path


def export_assignments_csv(grid: SeatGrid,
                           output_path: Union[str, Path],
                           overwrite: bool = True) -> Path:
    """
    Export every seat in long format.

    CSV format (1-indexed coordinates):
        row,col,student,fixed,disabled
        1,1,Alice,1,0
        1,2,,0,1

    Returns:
        Path to saved CSV file
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(['row', 'col', 'student', 'fixed', 'disabled'])
        for seat in grid:
            writer.writerow([
                seat.position.row + 1,
                seat.position.col + 1,
                seat.occupant or "",
                int(seat.fixed),
                int(seat.disabled),
            ])

    return output_path
