"""Tests for the controls module."""

import numpy as np
import pytest

from constants import SEED_MAX
from controls import (
    Adjustment, CaptureFrame, ControlState, DecreaseDisplacement, DecreaseRotation,
    IncreaseDisplacement, IncreaseRotation, Reseed, SetDisplacement, SetMotion,
    SetRotation, SetSeed, apply_command
)
from utils import ConfigurationError


def _state(**params) -> ControlState:
    return ControlState(params, rng=np.random.default_rng(0))


class TestControlStateInit:
    def test_defaults(self) -> None:
        state = _state()
        assert state.adjustment == Adjustment(1.0, 1.0)
        assert state.motion == 0.5
        assert 0 <= state.seed < SEED_MAX
        assert state.capture_requested is False

    def test_values_from_config(self) -> None:
        state = _state(displacement_gain=2, rotation_gain=0.5, motion=1.0, seed=17)
        assert state.adjustment == Adjustment(2.0, 0.5)
        assert state.motion == 1.0
        assert state.seed == 17

    @pytest.mark.parametrize("params", [
        {"motion": 1.5},
        {"motion": -0.1},
        {"motion": "lots"},
        {"displacement_gain": -1.0},
        {"rotation_gain": -0.2},
        {"seed": SEED_MAX},
        {"seed": -3},
        {"seed": 1.5},
    ])
    def test_rejects_bad_configuration(self, params) -> None:
        with pytest.raises(ConfigurationError):
            _state(**params)


class TestApplyCommand:
    def test_increase_gains(self) -> None:
        state = _state()
        apply_command(state, IncreaseDisplacement())
        apply_command(state, IncreaseRotation())
        apply_command(state, IncreaseRotation())
        assert state.adjustment.displacement_gain == pytest.approx(1.1)
        assert state.adjustment.rotation_gain == pytest.approx(1.2)

    def test_decrease_never_goes_negative(self) -> None:
        state = _state(displacement_gain=0.35, rotation_gain=1.0)
        for _ in range(25):
            apply_command(state, DecreaseDisplacement())
            apply_command(state, DecreaseRotation())
            assert state.adjustment.displacement_gain >= 0.0
            assert state.adjustment.rotation_gain >= 0.0
        assert state.adjustment.displacement_gain == 0.0
        assert state.adjustment.rotation_gain == 0.0

    def test_slider_values(self) -> None:
        state = _state()
        apply_command(state, SetDisplacement(3.25))
        apply_command(state, SetRotation(-2.0))
        assert state.adjustment.displacement_gain == 3.25
        assert state.adjustment.rotation_gain == 0.0

    @pytest.mark.parametrize("value, expected", [(0.25, 0.25), (1.7, 1.0), (-0.3, 0.0)])
    def test_set_motion_is_clamped(self, value, expected) -> None:
        state = _state()
        apply_command(state, SetMotion(value))
        assert state.motion == expected

    def test_reseed_draws_from_range(self) -> None:
        state = _state(seed=5)
        seeds = set()
        for _ in range(20):
            apply_command(state, Reseed())
            assert 0 <= state.seed < SEED_MAX
            seeds.add(state.seed)
        assert len(seeds) > 1

    @pytest.mark.parametrize("value, expected", [(10, 10), (-1, 0), (SEED_MAX, SEED_MAX - 1)])
    def test_set_seed_is_clamped(self, value, expected) -> None:
        state = _state(seed=0)
        apply_command(state, SetSeed(value))
        assert state.seed == expected

    def test_capture_request_is_taken_once(self) -> None:
        state = _state()
        apply_command(state, CaptureFrame())
        assert state.take_capture_request() is True
        assert state.take_capture_request() is False

    def test_capture_leaves_parameters_alone(self) -> None:
        state = _state(seed=3)
        apply_command(state, CaptureFrame())
        assert state.adjustment == Adjustment()
        assert state.motion == 0.5
        assert state.seed == 3

    def test_unknown_command(self) -> None:
        with pytest.raises(TypeError):
            apply_command(_state(), "reseed")

    def test_commands_are_logged(self, caplog) -> None:
        state = _state()
        with caplog.at_level("INFO"):
            apply_command(state, IncreaseDisplacement())
        assert "IncreaseDisplacement" in caplog.text
