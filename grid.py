# grid.py
"""
Builds the grid of cells and holds the per-stone animation state.

This module defines the Gravel class, the container for every stone in the
artwork. Cell coordinates are fixed at creation; the mutable stone state
(offset, rotation, velocity, phase counter) is kept in parallel NumPy arrays
so the animator can update the whole grid in one pass.
"""
import logging
import numpy as np
from utils import fail_config

# --- Data Contracts ---
#
# build_cells(rows: int, cols: int) -> np.ndarray:
#   - Outputs: A read-only int32 array of shape (rows * cols, 2) holding
#     (col, row) pairs in row-major order.
#   - Raises: ConfigurationError if rows or cols is not a positive integer.
#
# class Gravel:
#   - __init__(self, rows: int, cols: int):
#     - Side Effects: Allocates the stone state arrays.
#     - Invariants:
#       - self.cells has shape (N, 2) and is never written to.
#       - self.offsets and self.velocities have shape (N, 2), float64.
#       - self.rotations and self.rot_velocities have shape (N,), float64.
#       - self.cycles has shape (N,), int64, and is never negative.
#       - N == rows * cols for the lifetime of the object.
#
#   - snapshot(self) -> np.ndarray:
#     - Outputs: A copy of shape (N, 3): offset.x, offset.y, rotation.


def _check_dimension(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        fail_config(
            f"Configuration error: grid {name} must be a positive integer, got {value!r}."
        )


def build_cells(rows: int, cols: int) -> np.ndarray:
    """Returns every (col, row) pair of a rows x cols grid, row by row."""
    _check_dimension("rows", rows)
    _check_dimension("cols", cols)
    row_idx, col_idx = np.divmod(np.arange(rows * cols), cols)
    cells = np.column_stack((col_idx, row_idx)).astype(np.int32)
    cells.flags.writeable = False
    return cells


class Gravel:
    """
    All stones of the artwork: fixed cell coordinates plus animation state.
    """
    def __init__(self, rows: int, cols: int):
        """
        Args:
            rows (int): Number of grid rows.
            cols (int): Number of grid columns.
        """
        self.cells = build_cells(rows, cols)
        self.rows = int(rows)
        self.cols = int(cols)
        self.stone_count = self.rows * self.cols

        self.offsets = np.zeros((self.stone_count, 2), dtype=np.float64)
        self.rotations = np.zeros(self.stone_count, dtype=np.float64)
        self.velocities = np.zeros((self.stone_count, 2), dtype=np.float64)
        self.rot_velocities = np.zeros(self.stone_count, dtype=np.float64)
        self.cycles = np.zeros(self.stone_count, dtype=np.int64)

        logging.info(f"Gravel initialized with {self.stone_count} stones ({self.rows} rows x {self.cols} cols).")
        logging.debug(
            f"Stone state arrays created. "
            f"Offsets shape: {self.offsets.shape}, "
            f"Rotations shape: {self.rotations.shape}, "
            f"Cycles shape: {self.cycles.shape}"
        )

    @property
    def row_indices(self) -> np.ndarray:
        return self.cells[:, 1]

    def snapshot(self) -> np.ndarray:
        """Current (offset.x, offset.y, rotation) of every stone."""
        return np.column_stack((self.offsets, self.rotations))

    def in_transition(self) -> np.ndarray:
        """Mask of stones whose current phase carries a non-zero velocity."""
        moving = np.any(self.velocities != 0.0, axis=1) | (self.rot_velocities != 0.0)
        return moving & (self.cycles > 0)
