# animator.py
"""
Advances the stones of the artwork.

This module defines the Animator class, which owns the Gravel and moves it
forward in one of two ways:

* animated mode: every stone alternates between resting (dwell) and gliding
  linearly toward a freshly sampled target (transition). The generator is
  advanced continuously, tick after tick.
* static mode: all offsets are recomputed from scratch from a stored seed,
  so the picture is a pure function of (seed, adjustment).

Both modes sample targets the same way: the further down a row is, the
larger its random displacement and rotation.
"""
import logging
import numpy as np
from typing import Any, Dict, Optional, Tuple
from numba import jit

from grid import Gravel
from constants import (
    ANIMATED_OFFSET_BOUND, CYCLE_MAX, CYCLE_MIN, MODES, ROTATION_BOUND,
    STATIC_OFFSET_BOUND
)
from utils import fail_config

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from controls import Adjustment, ControlState

# --- Data Contracts ---
#
# sample_transition_targets(rows, n_rows, adjustment, rng, offset_bound)
#     -> Tuple[np.ndarray, np.ndarray]:
#   - Inputs:
#     - rows: int array (N,), the row of each stone.
#     - n_rows: int, total number of grid rows.
#     - adjustment: the current Adjustment.
#     - rng: the generator to draw from.
#     - offset_bound: half-width k of the offset range.
#   - Outputs: target offsets (N, 2) and target rotations (N,).
#   - Invariants: row 0 always yields exactly zero targets.
#
# static_arrangement(rows, n_rows, seed, adjustment, offset_bound)
#     -> Tuple[np.ndarray, np.ndarray]:
#   - Outputs: offsets (N, 2) and rotations (N,), bit-identical for
#     identical inputs.
#
# class Animator:
#   - __init__(self, gravel: Gravel, params: Dict[str, Any], rng=None):
#     - Inputs:
#       - params: The "simulation_parameters" section of config.json.
#         - "mode": "animated" | "static" (default "animated")
#         - "offset_bound": float >= 0 or null for the mode's default
#         - "animation_seed": int or null
#     - Raises: ConfigurationError for an unknown mode or a bad bound.
#
#   - advance(self, adjustment, motion) -> None:
#     - Side Effects: Moves every stone by exactly one tick.
#     - Invariants: A stone with cycles == 0 picks a new phase and does not
#       move this tick; any other stone moves one velocity step and its
#       counter drops by exactly one.
#
#   - compose(self, seed, adjustment) -> None:
#     - Side Effects: Overwrites offsets and rotations with the static
#       arrangement; zeroes velocities and counters.


@jit(nopython=True)
def _advance_numba(
    offsets, rotations, velocities, rot_velocities, cycles,
    draws, target_offsets, target_rotations, durations, motion
):
    """
    Numba-jitted per-stone phase update.

    All random quantities are drawn beforehand, one per stone, so this
    kernel only decides which of them a stone consumes.
    """
    stone_count = offsets.shape[0]
    for i in range(stone_count):
        if cycles[i] == 0:
            if draws[i] > motion:
                # Dwell: hold the current pose.
                velocities[i, 0] = 0.0
                velocities[i, 1] = 0.0
                rot_velocities[i] = 0.0
                cycles[i] = durations[i]
            else:
                # Transition: glide to the target over `duration` ticks.
                duration = durations[i]
                velocities[i, 0] = (target_offsets[i, 0] - offsets[i, 0]) / duration
                velocities[i, 1] = (target_offsets[i, 1] - offsets[i, 1]) / duration
                rot_velocities[i] = (target_rotations[i] - rotations[i]) / duration
                cycles[i] = duration
        else:
            offsets[i, 0] += velocities[i, 0]
            offsets[i, 1] += velocities[i, 1]
            rotations[i] += rot_velocities[i]
            cycles[i] -= 1


def sample_transition_targets(
    rows: np.ndarray,
    n_rows: int,
    adjustment: "Adjustment",
    rng: np.random.Generator,
    offset_bound: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Draws a target offset and rotation for every stone.

    The row factor grows linearly from 0 at the top row, which gives the
    artwork its "more rubble toward the bottom" look.
    """
    factor = np.asarray(rows, dtype=np.float64) / n_rows
    disp_factor = factor * adjustment.displacement_gain
    rot_factor = factor * adjustment.rotation_gain
    stone_count = factor.shape[0]
    offsets = disp_factor[:, np.newaxis] * rng.uniform(-offset_bound, offset_bound, size=(stone_count, 2))
    rotations = rot_factor * rng.uniform(-ROTATION_BOUND, ROTATION_BOUND, size=stone_count)
    return offsets, rotations


def static_arrangement(
    rows: np.ndarray,
    n_rows: int,
    seed: int,
    adjustment: "Adjustment",
    offset_bound: float = STATIC_OFFSET_BOUND,
) -> Tuple[np.ndarray, np.ndarray]:
    """Offsets and rotations of the static artwork for a given seed."""
    rng = np.random.default_rng(seed)
    return sample_transition_targets(rows, n_rows, adjustment, rng, offset_bound)


class Animator:
    """
    Drives the Gravel in animated or static mode.
    """
    def __init__(self, gravel: Gravel, params: Dict[str, Any], rng: Optional[np.random.Generator] = None):
        """
        Args:
            gravel (Gravel): The stones to animate.
            params (Dict[str, Any]): Simulation parameters from config.
            rng (np.random.Generator): Optional generator for animated mode.
        """
        self.gravel = gravel
        self.mode = params.get('mode', 'animated')
        if self.mode not in MODES:
            fail_config(f"Configuration error: unknown mode {self.mode!r}. Expected one of {MODES}.")

        default_bound = ANIMATED_OFFSET_BOUND if self.mode == 'animated' else STATIC_OFFSET_BOUND
        offset_bound = params.get('offset_bound')
        if offset_bound is None:
            offset_bound = default_bound
        if isinstance(offset_bound, bool) or not isinstance(offset_bound, (int, float)) or offset_bound < 0:
            fail_config(f"Configuration error: offset_bound must be a non-negative number, got {offset_bound!r}.")
        self.offset_bound = float(offset_bound)

        # Animated mode draws from one generator for the whole run; static
        # mode builds its own from the seed on every compose.
        self.rng = rng if rng is not None else np.random.default_rng(params.get('animation_seed'))
        self.tick_count = 0

        logging.info(f"Animator initialized in {self.mode} mode with offset bound {self.offset_bound}.")

    def advance(self, adjustment: "Adjustment", motion: float) -> None:
        """
        Executes one tick of animated mode.
        """
        gravel = self.gravel
        n = gravel.stone_count

        draws = self.rng.random(n)
        target_offsets, target_rotations = sample_transition_targets(
            gravel.row_indices, gravel.rows, adjustment, self.rng, self.offset_bound
        )
        durations = self.rng.integers(CYCLE_MIN, CYCLE_MAX, size=n, dtype=np.int64)

        _advance_numba(
            gravel.offsets, gravel.rotations, gravel.velocities, gravel.rot_velocities, gravel.cycles,
            draws, target_offsets, target_rotations, durations, float(motion)
        )
        self.tick_count += 1

    def compose(self, seed: int, adjustment: "Adjustment") -> None:
        """
        Lays out the static artwork for `seed`.
        """
        gravel = self.gravel
        offsets, rotations = static_arrangement(
            gravel.row_indices, gravel.rows, seed, adjustment, self.offset_bound
        )
        gravel.offsets[:] = offsets
        gravel.rotations[:] = rotations
        gravel.velocities.fill(0.0)
        gravel.rot_velocities.fill(0.0)
        gravel.cycles.fill(0)
        self.tick_count += 1

    def step(self, controls: "ControlState") -> None:
        """Runs one tick in the configured mode, reading the current controls."""
        if self.mode == 'animated':
            self.advance(controls.adjustment, controls.motion)
        else:
            self.compose(controls.seed, controls.adjustment)
