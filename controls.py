# controls.py
"""
Input commands and the state they act on.

The control state owns the adjustment gains, the motion probability, the
static-mode seed and the pending frame-capture request. User input (keys,
sliders, buttons) is translated into command objects by the visualizer and
applied here between simulation ticks.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import numpy as np

from constants import (
    DEFAULT_DISPLACEMENT_GAIN, DEFAULT_MOTION, DEFAULT_ROTATION_GAIN,
    GAIN_STEP, SEED_MAX
)
from utils import fail_config

# --- Data Contracts ---
#
# class Adjustment:
#   - displacement_gain: float >= 0, scales sampled offsets.
#   - rotation_gain: float >= 0, scales sampled rotations.
#
# class ControlState:
#   - __init__(self, params: Dict[str, Any], rng: Optional[np.random.Generator] = None):
#     - Inputs:
#       - params: The "simulation_parameters" section of config.json.
#         - "displacement_gain": float >= 0 (default 1.0)
#         - "rotation_gain": float >= 0 (default 1.0)
#         - "motion": float in [0, 1] (default 0.5)
#         - "seed": int in [0, SEED_MAX) or null for a random one
#       - rng: Generator used for reseeding. A fresh one if omitted.
#     - Raises: ConfigurationError for out-of-range values.
#
# apply_command(state: ControlState, command: Command) -> None:
#   - Side Effects: Mutates state. Gains never drop below 0, motion stays
#     in [0, 1], the seed stays in [0, SEED_MAX).
#   - Raises: TypeError for an object that is not a known command.


@dataclass
class Adjustment:
    displacement_gain: float = DEFAULT_DISPLACEMENT_GAIN
    rotation_gain: float = DEFAULT_ROTATION_GAIN


# --- Commands ---

@dataclass(frozen=True)
class IncreaseDisplacement:
    pass


@dataclass(frozen=True)
class DecreaseDisplacement:
    pass


@dataclass(frozen=True)
class IncreaseRotation:
    pass


@dataclass(frozen=True)
class DecreaseRotation:
    pass


@dataclass(frozen=True)
class SetDisplacement:
    value: float


@dataclass(frozen=True)
class SetRotation:
    value: float


@dataclass(frozen=True)
class SetMotion:
    value: float


@dataclass(frozen=True)
class Reseed:
    pass


@dataclass(frozen=True)
class SetSeed:
    value: int


@dataclass(frozen=True)
class CaptureFrame:
    pass


Command = Union[
    IncreaseDisplacement, DecreaseDisplacement, IncreaseRotation, DecreaseRotation,
    SetDisplacement, SetRotation, SetMotion, Reseed, SetSeed, CaptureFrame,
]


def _as_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        fail_config(f"Configuration error: {name} must be a number, got {value!r}.")
    return float(value)


class ControlState:
    """
    The externally adjustable parameters of the artwork.
    """
    def __init__(self, params: Dict[str, Any], rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

        displacement_gain = _as_number(
            "displacement_gain", params.get('displacement_gain', DEFAULT_DISPLACEMENT_GAIN)
        )
        rotation_gain = _as_number("rotation_gain", params.get('rotation_gain', DEFAULT_ROTATION_GAIN))
        if displacement_gain < 0 or rotation_gain < 0:
            fail_config(
                f"Configuration error: gains must be non-negative, got "
                f"displacement_gain={displacement_gain}, rotation_gain={rotation_gain}."
            )
        self.adjustment = Adjustment(displacement_gain, rotation_gain)

        self.motion = _as_number("motion", params.get('motion', DEFAULT_MOTION))
        if not 0.0 <= self.motion <= 1.0:
            fail_config(f"Configuration error: motion must lie in [0, 1], got {self.motion}.")

        seed = params.get('seed')
        if seed is None:
            self.seed = self._random_seed()
        else:
            if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or not 0 <= seed < SEED_MAX:
                fail_config(f"Configuration error: seed must be an integer in [0, {SEED_MAX}), got {seed!r}.")
            self.seed = int(seed)

        self.capture_requested = False

        logging.info(
            f"Controls initialized: displacement gain {self.adjustment.displacement_gain:.2f}, "
            f"rotation gain {self.adjustment.rotation_gain:.2f}, motion {self.motion:.2f}, seed {self.seed}."
        )

    def _random_seed(self) -> int:
        return int(self.rng.integers(0, SEED_MAX))

    def take_capture_request(self) -> bool:
        """Returns True once per CaptureFrame command."""
        requested = self.capture_requested
        self.capture_requested = False
        return requested


def apply_command(state: ControlState, command: Command) -> None:
    """
    Applies a single input command to the control state.
    """
    adj = state.adjustment
    if isinstance(command, IncreaseDisplacement):
        adj.displacement_gain += GAIN_STEP
    elif isinstance(command, DecreaseDisplacement):
        adj.displacement_gain = max(0.0, adj.displacement_gain - GAIN_STEP)
    elif isinstance(command, IncreaseRotation):
        adj.rotation_gain += GAIN_STEP
    elif isinstance(command, DecreaseRotation):
        adj.rotation_gain = max(0.0, adj.rotation_gain - GAIN_STEP)
    elif isinstance(command, SetDisplacement):
        adj.displacement_gain = max(0.0, float(command.value))
    elif isinstance(command, SetRotation):
        adj.rotation_gain = max(0.0, float(command.value))
    elif isinstance(command, SetMotion):
        state.motion = float(np.clip(command.value, 0.0, 1.0))
    elif isinstance(command, Reseed):
        state.seed = state._random_seed()
    elif isinstance(command, SetSeed):
        state.seed = int(np.clip(command.value, 0, SEED_MAX - 1))
    elif isinstance(command, CaptureFrame):
        state.capture_requested = True
    else:
        raise TypeError(f"Unknown control command: {command!r}")

    # Slider drags emit a command per mouse motion event.
    level = logging.DEBUG if isinstance(command, (SetDisplacement, SetRotation, SetMotion)) else logging.INFO
    logging.log(
        level,
        f"Applied {type(command).__name__}: displacement gain {adj.displacement_gain:.2f}, "
        f"rotation gain {adj.rotation_gain:.2f}, motion {state.motion:.2f}, seed {state.seed}."
    )
