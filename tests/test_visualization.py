"""Tests for the visualization module (headless Pygame)."""

import math

import numpy as np
import pygame
import pytest

from constants import MARGIN, SEED_MAX, SIZE
from controls import ControlState, DecreaseRotation, IncreaseDisplacement
from grid import Gravel
from visualization import KEY_BINDINGS, Slider, Visualizer, stone_outlines


@pytest.fixture
def make_visualizer(tmp_path):
    created = []

    def factory(mode="animated", **kwargs):
        kwargs.setdefault("capture_file", str(tmp_path / "captures" / "frame.png"))
        vis = Visualizer(mode, **kwargs)
        created.append(vis)
        return vis

    yield factory
    for vis in created:
        vis.close()


def _controls(**params) -> ControlState:
    params.setdefault("seed", 10)
    return ControlState(params, rng=np.random.default_rng(0))


class TestStoneOutlines:
    def test_resting_stone_fills_its_cell(self) -> None:
        gravel = Gravel(2, 3)
        corners = stone_outlines(gravel)
        assert corners.shape == (6, 4, 2)
        expected = [[MARGIN, MARGIN], [MARGIN + SIZE, MARGIN],
                    [MARGIN + SIZE, MARGIN + SIZE], [MARGIN, MARGIN + SIZE]]
        np.testing.assert_allclose(corners[0], expected)
        # Last stone: col 2, row 1.
        np.testing.assert_allclose(corners[5].mean(axis=0), [MARGIN + 2.5 * SIZE, MARGIN + 1.5 * SIZE])

    def test_offset_is_in_cell_units(self) -> None:
        gravel = Gravel(1, 1)
        gravel.offsets[0] = (0.5, -1.0)
        centre = stone_outlines(gravel)[0].mean(axis=0)
        np.testing.assert_allclose(centre, [MARGIN + SIZE, MARGIN - 0.5 * SIZE])

    def test_reads_pose_from_snapshot(self) -> None:
        class ShiftedGravel(Gravel):
            def snapshot(self) -> np.ndarray:
                state = super().snapshot()
                state[:, 0] += 1.0
                return state

        centre = stone_outlines(ShiftedGravel(1, 1))[0].mean(axis=0)
        np.testing.assert_allclose(centre, [MARGIN + 1.5 * SIZE, MARGIN + 0.5 * SIZE])

    def test_rotation_keeps_shape_and_centre(self) -> None:
        gravel = Gravel(3, 3)
        gravel.rotations[:] = np.linspace(-math.pi / 4, math.pi / 4, 9)
        corners = stone_outlines(gravel)
        sides = np.linalg.norm(np.roll(corners, -1, axis=1) - corners, axis=2)
        np.testing.assert_allclose(sides, SIZE)
        resting = stone_outlines(Gravel(3, 3))
        np.testing.assert_allclose(corners.mean(axis=1), resting.mean(axis=1))

    def test_quarter_turn_maps_square_onto_itself(self) -> None:
        gravel = Gravel(1, 1)
        gravel.rotations[0] = math.pi / 2
        turned = {tuple(np.round(c, 9)) for c in stone_outlines(gravel)[0]}
        resting = {tuple(np.round(c, 9)) for c in stone_outlines(Gravel(1, 1))[0]}
        assert turned == resting


class TestSlider:
    def test_value_at_is_clamped(self) -> None:
        slider = Slider("Gain", pygame.Rect(100, 0, 200, 8), 0.0, 5.0, lambda c: 0.0, float)
        assert slider.value_at(100) == 0.0
        assert slider.value_at(200) == 2.5
        assert slider.value_at(300) == 5.0
        assert slider.value_at(20) == 0.0
        assert slider.value_at(900) == 5.0

    def test_handle_x_inverts_value_at(self) -> None:
        slider = Slider("Motion", pygame.Rect(10, 0, 100, 8), 0.0, 1.0, lambda c: 0.0, float)
        assert slider.handle_x(0.25) == 35
        assert slider.value_at(slider.handle_x(0.6)) == pytest.approx(0.6)
        assert slider.handle_x(3.0) == 110


def test_key_bindings_cover_arrows_and_vim_keys() -> None:
    assert KEY_BINDINGS[pygame.K_UP] is KEY_BINDINGS[pygame.K_k] is IncreaseDisplacement
    assert KEY_BINDINGS[pygame.K_LEFT] is KEY_BINDINGS[pygame.K_h] is DecreaseRotation
    assert pygame.K_ESCAPE not in KEY_BINDINGS


class TestVisualizer:
    def test_draw_counts_frames(self, make_visualizer) -> None:
        vis = make_visualizer()
        assert vis.handle_events(_controls()) is True
        vis.draw(Gravel(22, 12), _controls())
        assert vis.frame_count == 1

    def test_stones_are_drawn_on_snow(self, make_visualizer) -> None:
        vis = make_visualizer()
        vis.render_art(Gravel(22, 12))
        assert tuple(vis.art_surface.get_at((MARGIN + SIZE // 2, MARGIN)))[:3] == (0, 0, 0)
        assert tuple(vis.art_surface.get_at((MARGIN + SIZE // 2, MARGIN + SIZE // 2)))[:3] == (255, 250, 250)

    def test_key_press_becomes_command(self, make_visualizer) -> None:
        vis = make_visualizer()
        controls = _controls()
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_UP))
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_h))
        assert vis.handle_events(controls) is True
        assert controls.adjustment.displacement_gain == pytest.approx(1.1)
        assert controls.adjustment.rotation_gain == pytest.approx(0.9)

    def test_quit_and_escape_stop_the_loop(self, make_visualizer) -> None:
        vis = make_visualizer()
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        assert vis.handle_events(_controls()) is False
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE))
        assert vis.handle_events(_controls()) is False

    def test_first_frame_does_not_block_in_wait_mode(self, make_visualizer) -> None:
        vis = make_visualizer("static")
        pygame.event.clear()
        assert vis.handle_events(_controls(), wait=True) is True

    def test_capture_writes_png(self, make_visualizer, tmp_path) -> None:
        vis = make_visualizer()
        controls = _controls()
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_s))
        vis.handle_events(controls)
        vis.draw(Gravel(22, 12), controls)
        saved = tmp_path / "captures" / "frame.png"
        assert saved.exists()
        assert pygame.image.load(str(saved)).get_size() == (vis.art_width, vis.art_height)
        assert controls.capture_requested is False

    def test_slider_drag_sets_gain(self, make_visualizer) -> None:
        vis = make_visualizer()
        controls = _controls()
        slider = vis.sliders[0]
        assert slider.label == "Displacement"
        pygame.event.post(pygame.event.Event(
            pygame.MOUSEBUTTONDOWN, button=1, pos=(slider.rect.centerx, slider.rect.centery)
        ))
        vis.handle_events(controls)
        assert controls.adjustment.displacement_gain == pytest.approx(2.5)

        pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, pos=(slider.rect.right, slider.rect.centery)))
        pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(slider.rect.right, 0)))
        pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, pos=(slider.rect.left, 0)))
        vis.handle_events(controls)
        assert controls.adjustment.displacement_gain == pytest.approx(5.0)
        assert vis.active_slider is None

    def test_motion_slider_only_when_animated(self, make_visualizer) -> None:
        animated = make_visualizer("animated")
        assert [s.label for s in animated.sliders] == ["Displacement", "Rotation", "Motion"]
        assert animated.randomize_button_rect is None
        static = make_visualizer("static")
        assert [s.label for s in static.sliders] == ["Displacement", "Rotation"]
        assert static.randomize_button_rect is not None

    def test_randomize_button_reseeds(self, make_visualizer) -> None:
        vis = make_visualizer("static")
        controls = _controls(seed=10)
        pygame.event.post(pygame.event.Event(
            pygame.MOUSEBUTTONDOWN, button=1, pos=vis.randomize_button_rect.center
        ))
        vis.handle_events(controls)
        assert controls.seed != 10
        assert 0 <= controls.seed < SEED_MAX

    def test_window_fits_grid(self, make_visualizer) -> None:
        vis = make_visualizer(rows=4, cols=5)
        assert (vis.art_width, vis.art_height) == (5 * SIZE + 2 * MARGIN, 4 * SIZE + 2 * MARGIN)
        assert vis.art_surface.get_size() == (vis.art_width, vis.art_height)
