"""
Seating chart visualization

Draws the seat grid with its occupants and per-seat cost, and exports the
chart as an image.
"""

from typing import Dict, Optional, Sequence, Tuple

import matplotlib
import matplotlib.pyplot as plt
import matplotlib.patches as patches
import numpy as np

from .cost_model import CostEvaluator, CostWeights
from .data_models import SeatPosition, Student, StudentTable
from .seat_grid import SeatGrid


class SeatingChartVisualizer:
    """Visualization of a seat grid, row 1 (the front) at the top"""

    def __init__(self,
                 grid: SeatGrid,
                 roster: Sequence[Student],
                 weights: Optional[CostWeights] = None):
        self.grid = grid
        self.roster = list(roster)
        self.weights = weights
        self.seat_colors = {
            "normal": "#e8f1fb",
            "fixed": "#ffe0a3",
            "disabled": "#c8c8c8",
            "empty": "white",
        }

    def _seat_state(self, seat) -> str:
        if seat.disabled:
            return "disabled"
        if seat.fixed:
            return "fixed"
        if seat.occupant is None:
            return "empty"
        return "normal"

    def seat_cost_grid(self) -> np.ndarray:
        """rows x cols array of each seat's contribution to the cost"""
        by_name = {student.name: student for student in self.roster}
        layout: Dict[SeatPosition, Student] = {
            position: by_name[name]
            for position, name in self.grid.occupied_positions().items()
            if name in by_name
        }
        costs = np.zeros((self.grid.rows, self.grid.cols))
        if not layout:
            return costs

        evaluator = CostEvaluator(StudentTable(layout.values()),
                                  self.grid.rows, self.grid.cols, self.weights)
        for position, value in evaluator.seat_costs(layout).items():
            costs[position.row, position.col] = value
        return costs

    def plot_seating_chart(self, ax: plt.Axes = None, title: Optional[str] = None):
        """Plot every seat as a labelled rectangle coloured by state"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(max(6, self.grid.cols * 1.4), max(4, self.grid.rows * 0.8)))

        for seat in self.grid:
            row, col = seat.position
            state = self._seat_state(seat)
            rect = patches.FancyBboxPatch(
                (col + 0.05, row + 0.1), 0.9, 0.8,
                boxstyle="round,pad=0.02",
                facecolor=self.seat_colors[state],
                edgecolor="black" if state != "disabled" else "gray",
                linewidth=1.0,
            )
            ax.add_patch(rect)
            if seat.occupant:
                ax.text(col + 0.5, row + 0.5, seat.occupant,
                        ha='center', va='center', fontsize=8)

        ax.set_xlim(0, self.grid.cols)
        ax.set_ylim(0, self.grid.rows)
        ax.invert_yaxis()
        ax.set_aspect("equal")
        ax.set_xticks([c + 0.5 for c in range(self.grid.cols)])
        ax.set_xticklabels([str(c + 1) for c in range(self.grid.cols)])
        ax.set_yticks([r + 0.5 for r in range(self.grid.rows)])
        ax.set_yticklabels([str(r + 1) for r in range(self.grid.rows)])
        ax.set_xlabel("Column")
        ax.set_ylabel("Row (front at top)")
        ax.set_title(title or "Seating Chart")

        legend_handles = [
            patches.Patch(facecolor=color, edgecolor="black", label=state)
            for state, color in self.seat_colors.items()
        ]
        ax.legend(handles=legend_handles, bbox_to_anchor=(1.02, 1), loc='upper left')
        return ax

    def plot_cost_heatmap(self, ax: plt.Axes = None):
        """Plot per-seat cost contributions"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(8, 6))

        costs = self.seat_cost_grid()
        im = ax.imshow(costs, cmap='YlOrRd', aspect='equal')
        plt.colorbar(im, ax=ax, label='Cost')
        ax.set_xticks(range(self.grid.cols))
        ax.set_xticklabels([str(c + 1) for c in range(self.grid.cols)])
        ax.set_yticks(range(self.grid.rows))
        ax.set_yticklabels([str(r + 1) for r in range(self.grid.rows)])
        ax.set_title("Cost per Seat")
        return ax

    def save_seating_chart(self,
                           save_path: str,
                           figsize: Tuple[float, float] = (12, 8),
                           dpi: int = 150,
                           title: Optional[str] = None,
                           include_heatmap: bool = False) -> str:
        """
        Render the chart to an image file

        Args:
            save_path: Output path (format from extension, e.g. .png)
            figsize: Figure size (width, height)
            dpi: Resolution
            title: Optional chart title
            include_heatmap: Add the per-seat cost panel

        Returns:
            The save path
        """
        # Non-interactive backend avoids display issues
        matplotlib.use('Agg')

        if include_heatmap:
            fig, (ax_chart, ax_heat) = plt.subplots(
                1, 2, figsize=figsize, gridspec_kw={'width_ratios': [2, 1]}
            )
            self.plot_seating_chart(ax_chart, title)
            self.plot_cost_heatmap(ax_heat)
        else:
            fig, ax_chart = plt.subplots(figsize=figsize)
            self.plot_seating_chart(ax_chart, title)

        plt.tight_layout()
        fig.savefig(save_path, dpi=dpi, bbox_inches='tight')
        plt.close(fig)
        return save_path
