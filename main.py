#!/usr/bin/env python3
"""
Smart Seating - Seat Assignment Optimizer

Main entry point for the seating optimizer.
Loads a seating configuration, runs the annealing search in the background
while reporting progress, and exports the resulting seating chart.
"""

import sys
import argparse
import logging
import time
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

from smart_seating.annealing import SeatingOptimizer
from smart_seating.background import start_optimization
from smart_seating.config_loader import (
    load_config,
    print_config_summary,
    create_roster_from_config,
    create_seat_grid_from_config,
    create_schedule_from_config,
    create_weights_from_config,
    get_optimization_config,
    get_visualization_config,
    resolve_random_seed,
    save_config,
)
from smart_seating.cost_model import CostEvaluator
from smart_seating.data_models import StudentTable
from smart_seating.io_utils import (
    export_assignments_csv,
    export_layout_csv,
    export_layout_excel,
    import_roster,
)


def print_cost_report(grid, roster, weights):
    """Print the cost breakdown of the grid's current occupants"""
    by_name = {student.name: student for student in roster}
    layout = {position: by_name[name]
              for position, name in grid.occupied_positions().items() if name in by_name}
    evaluator = CostEvaluator(StudentTable(layout.values()), grid.rows, grid.cols, weights)
    breakdown = evaluator.breakdown(layout)

    print("\nCost Breakdown:")
    print(f"  Positional bias: {breakdown.positional:10.2f}")
    print(f"  Avoidance:       {breakdown.avoidance:10.2f}")
    print(f"  Preference:      {breakdown.preference:10.2f}")
    print(f"  Preferred area:  {breakdown.area:10.2f}")
    print(f"  Total:           {breakdown.total:10.2f}")


def print_grid(grid):
    """Print the seating chart as text, front row first"""
    width = max([len(name) for name in grid.occupied_positions().values()] + [3])
    for r in range(grid.rows):
        cells = []
        for position in grid.positions():
            if position.row != r:
                continue
            seat = grid.seat(position)
            if seat.disabled:
                label = "###"
            else:
                label = seat.occupant or "."
                if seat.fixed:
                    label += "*"
            cells.append(label.ljust(width + 1))
        print("  " + " ".join(cells))


def run_arrangement(config_path="config.yaml", roster_path=None, seed=None,
                    output_name=None, save_plots=True, breakdown=False,
                    save_config_path=None, show_summary=True):
    """Run the seating optimization and export the results"""
    if show_summary:
        print("=" * 60)
        print("SMART SEATING")
        print("=" * 60)
        print_config_summary(config_path)

    config = load_config(config_path)
    roster = create_roster_from_config(config)
    grid = create_seat_grid_from_config(config, roster)

    if roster_path:
        print(f"\nImporting roster from: {roster_path}")
        roster = import_roster(roster_path)
        unplaced = grid.place_all(roster)
        print(f"  Imported {len(roster)} students")
        if unplaced:
            print(f"  {len(unplaced)} students do not fit the available seats")

    schedule = create_schedule_from_config(config)
    weights = create_weights_from_config(config)
    if seed is None:
        seed = resolve_random_seed(get_optimization_config(config).get("random_seed"))
    print(f"\nRandom seed: {seed}")

    problem = grid.partition(roster)
    if not problem.movable_students:
        print("No students to arrange.")
        return grid, None
    print(f"Arranging {len(problem.movable_students)} students over "
          f"{len(problem.movable_positions)} seats "
          f"({len(problem.fixed_assignments)} fixed)")

    optimizer = SeatingOptimizer(grid.rows, grid.cols, weights=weights, schedule=schedule, rng=seed)

    start_time = time.time()
    handle = start_optimization(optimizer, problem)
    try:
        while not handle.done():
            handle.progress_updates()
            print(f"\r  Progress: {handle.last_progress:5.1f}%", end="", flush=True)
            time.sleep(0.2)
    except KeyboardInterrupt:
        print("\n  Cancelling, keeping the best layout found so far...")
        handle.cancel()
    result = handle.result()
    print(f"\r  Progress: {100.0 if not result.cancelled else handle.last_progress:5.1f}%")

    elapsed_time = time.time() - start_time
    print(f"Optimization completed in {elapsed_time:.3f} seconds")

    grid.apply_layout(result.layout)

    print(f"\nResults Summary:")
    print(f"  Iterations: {result.iterations}/{result.max_iterations}")
    print(f"  Initial cost: {result.initial_cost:.2f}")
    print(f"  Best cost: {result.best_cost:.2f}")
    if result.cancelled:
        print("  Run was cancelled")
    print()
    print_grid(grid)

    if breakdown:
        print_cost_report(grid, roster, weights)

    # Always generate CSV and Excel output
    if output_name is None:
        timestamp = int(time.time())
        output_name = f"seating_{timestamp}"

    print(f"\nExporting seating chart as '{output_name}.csv'...")
    try:
        chart_path = export_layout_csv(grid, f"output/{output_name}.csv")
        seats_path = export_assignments_csv(grid, f"output/{output_name}_seats.csv")
        print(f"  ✓ CSV: {chart_path}")
        print(f"  ✓ CSV: {seats_path}")
    except OSError as e:
        print(f"  ✗ CSV: Failed - {e}")

    try:
        excel_path = export_layout_excel(grid, f"output/{output_name}.xlsx")
        print(f"  ✓ Excel: {excel_path}")
    except (OSError, ValueError) as e:
        print(f"  ✗ Excel: Failed - {e}")

    if save_plots:
        print(f"\nGenerating seating chart image...")
        try:
            from smart_seating.visualization import SeatingChartVisualizer

            vis_config = get_visualization_config(config)
            visualizer = SeatingChartVisualizer(grid, roster, weights)
            plot_path = visualizer.save_seating_chart(
                f"output/{output_name}_chart.png",
                figsize=tuple(vis_config.get('figure_size', [12, 8])),
                dpi=vis_config.get('dpi', 150),
                title=f"Seating Chart (cost {result.best_cost:.1f})",
                include_heatmap=breakdown,
            )
            print(f"  ✓ Plot: {plot_path}")
        except Exception as e:
            print(f"  ✗ Plot: Failed - {e}")

    if save_config_path:
        extra = {key: config[key] for key in ("optimization", "weights", "visualization") if key in config}
        path = save_config(save_config_path, grid, roster, extra)
        print(f"\nSaved configuration to: {path}")

    return grid, result


def main():
    """Main entry point with command-line argument parsing"""
    parser = argparse.ArgumentParser(
        description="Smart Seating - Seat Assignment Optimizer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 main.py                               # Optimize config.yaml (CSV, Excel + chart image)
  python3 main.py --breakdown                   # Also print the cost breakdown
  python3 main.py --roster students.csv         # Replace the roster with a CSV name list
  python3 main.py --roster class.xlsx           # ...or the first column of a workbook
  python3 main.py --seed 42 -n class_3b         # Reproducible run, custom file names
  python3 main.py --save-config arranged.yaml   # Save the arranged grid as a new config
        """
    )

    parser.add_argument(
        '--config', '-c',
        default='config.yaml',
        help='Configuration file path (default: config.yaml)'
    )

    parser.add_argument(
        '--roster', '-r',
        metavar='FILE',
        help='CSV or .xlsx file with one student name per row (replaces the configured roster)'
    )

    parser.add_argument(
        '--seed', '-s',
        type=int,
        help='Random seed (overrides optimization.random_seed)'
    )

    parser.add_argument(
        '--output-name', '-n',
        type=str,
        metavar='NAME',
        help='Base name for output files (default: seating_TIMESTAMP)'
    )

    parser.add_argument(
        '--no-plot',
        action='store_true',
        help='Skip the seating chart image'
    )

    parser.add_argument(
        '--breakdown', '-b',
        action='store_true',
        help='Print the per-term cost breakdown'
    )

    parser.add_argument(
        '--save-config',
        metavar='PATH',
        help='Save the arranged grid and roster as a YAML configuration'
    )

    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: WARNING)'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        run_arrangement(
            args.config,
            roster_path=args.roster,
            seed=args.seed,
            output_name=args.output_name,
            save_plots=not args.no_plot,
            breakdown=args.breakdown,
            save_config_path=args.save_config,
        )
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
