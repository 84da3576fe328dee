# visualization.py
"""
Renders the gravel with Pygame and hosts the control panel.
"""
import logging
import os
import pygame
import numpy as np
from grid import Gravel
from controls import (
    CaptureFrame, Command, ControlState, DecreaseDisplacement, DecreaseRotation,
    IncreaseDisplacement, IncreaseRotation, Reseed, SetDisplacement, SetMotion,
    SetRotation, SetSeed, apply_command
)
from constants import (
    BACKGROUND_COLOR, COLS, DEFAULT_CAPTURE_FILE, FPS,
    GAIN_SLIDER_MAX, LINE_WIDTH, MARGIN, ROWS, SIZE, STONE_COLOR,
    UI_BACKGROUND_ALPHA, UI_PANEL_WIDTH
)
from typing import Callable, Dict, List, Optional, Tuple

# --- Data Contracts ---
#
# stone_outlines(gravel: Gravel, size: float, margin: float) -> np.ndarray:
#   - Outputs: Array of shape (N, 4, 2) with the pixel corners of every
#     stone, translated by its offset and rotated about its centre.
#
# class Slider:
#   - value_at(self, x: int) -> float: The slider value under screen x,
#     clamped to [low, high].
#   - handle_x(self, value: float) -> int: Inverse of value_at.
#
# class Visualizer:
#   - __init__(self, mode: str, rows: int = ROWS, cols: int = COLS,
#              fullscreen: bool = False, capture_file: str = DEFAULT_CAPTURE_FILE):
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - handle_events(self, controls: ControlState, wait: bool = False) -> bool:
#     - Inputs:
#       - controls: The control state user input is applied to.
#       - wait: Block until an input event arrives. Ignored before the
#         first frame has been drawn.
#     - Outputs:
#       - bool: False if the user has quit, True otherwise.
#     - Side Effects: Applies input commands to `controls`.
#
#   - draw(self, gravel: Gravel, controls: ControlState, wait: bool = False) -> None:
#     - Inputs:
#       - gravel: The stones to render, read through `gravel.snapshot()`.
#       - controls: The control state shown in the panel.
#       - wait: Skip the frame-rate limiter.
#     - Side Effects: Renders the artwork and the panel, writes a PNG when
#       a capture was requested.

KEY_BINDINGS: Dict[int, Callable[[], Command]] = {
    pygame.K_UP: IncreaseDisplacement,
    pygame.K_k: IncreaseDisplacement,
    pygame.K_DOWN: DecreaseDisplacement,
    pygame.K_j: DecreaseDisplacement,
    pygame.K_RIGHT: IncreaseRotation,
    pygame.K_l: IncreaseRotation,
    pygame.K_LEFT: DecreaseRotation,
    pygame.K_h: DecreaseRotation,
    pygame.K_r: Reseed,
    pygame.K_s: CaptureFrame,
}

HELP_LINES = [
    "Up / K      displacement +",
    "Down / J    displacement -",
    "Right / L   rotation +",
    "Left / H    rotation -",
    "R           new seed",
    "S           save frame",
    "Esc         quit",
]

# Corners of a unit square centred on the origin, clockwise in screen space.
_UNIT_SQUARE = np.array([[-0.5, -0.5], [0.5, -0.5], [0.5, 0.5], [-0.5, 0.5]])


def stone_outlines(gravel: Gravel, size: float = SIZE, margin: float = MARGIN) -> np.ndarray:
    """Pixel-space corners of every stone, shape (N, 4, 2)."""
    state = gravel.snapshot()
    offsets, rotations = state[:, :2], state[:, 2]
    cos = np.cos(rotations)[:, np.newaxis]
    sin = np.sin(rotations)[:, np.newaxis]
    cx = _UNIT_SQUARE[np.newaxis, :, 0]
    cy = _UNIT_SQUARE[np.newaxis, :, 1]
    rotated = np.stack((cx * cos - cy * sin, cx * sin + cy * cos), axis=-1)

    centers = (gravel.cells + 0.5 + offsets) * size + margin
    return centers[:, np.newaxis, :] + rotated * size


class Slider:
    """A horizontal slider mapped onto [low, high]."""
    def __init__(self, label: str, rect: pygame.Rect, low: float, high: float,
                 read: Callable[[ControlState], float], command: Callable[[float], Command]):
        self.label = label
        self.rect = rect
        self.low = low
        self.high = high
        self.read = read
        self.command = command

    def value_at(self, x: int) -> float:
        fraction = (x - self.rect.left) / max(self.rect.width, 1)
        fraction = min(max(fraction, 0.0), 1.0)
        return self.low + fraction * (self.high - self.low)

    def handle_x(self, value: float) -> int:
        fraction = (value - self.low) / (self.high - self.low)
        fraction = min(max(fraction, 0.0), 1.0)
        return int(round(self.rect.left + fraction * self.rect.width))


class Visualizer:
    """
    Renders the gravel and provides the interactive control panel.
    """
    def __init__(self, mode: str, rows: int = ROWS, cols: int = COLS,
                 fullscreen: bool = False, capture_file: str = DEFAULT_CAPTURE_FILE):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()
        pygame.font.init()

        self.mode = mode
        self.capture_file = capture_file
        self.art_width = cols * SIZE + 2 * MARGIN
        self.art_height = rows * SIZE + 2 * MARGIN
        panel_min_height = 420

        if fullscreen:
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width = self.art_width + UI_PANEL_WIDTH
            height = max(self.art_height, panel_min_height)
            self.screen = pygame.display.set_mode((width, height))

        # The artwork is centred in the area left of the panel.
        self.panel_x = width - UI_PANEL_WIDTH
        self.art_pos = (
            max((self.panel_x - self.art_width) // 2, 0),
            max((height - self.art_height) // 2, 0),
        )
        self.art_surface = pygame.Surface((self.art_width, self.art_height))
        self.ui_panel_surface = pygame.Surface((UI_PANEL_WIDTH, height), pygame.SRCALPHA)
        self.ui_panel_surface.fill((40, 40, 40, UI_BACKGROUND_ALPHA))

        pygame.display.set_caption("Schotter")
        self.clock = pygame.time.Clock()
        self.stroke_width = max(1, int(round(LINE_WIDTH * SIZE)))
        self.frame_count = 0

        try:
            self.font_title = pygame.font.SysFont("Segoe UI", 16, bold=True)
            self.font_main = pygame.font.SysFont("Segoe UI", 14)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default font.")
            self.font_title = pygame.font.Font(None, 20)
            self.font_main = pygame.font.Font(None, 18)

        # --- Panel layout ---
        inner_x = self.panel_x + 20
        inner_width = UI_PANEL_WIDTH - 40
        current_y = 50
        self.sliders: List[Slider] = []
        slider_specs = [
            ("Displacement", 0.0, GAIN_SLIDER_MAX,
             lambda c: c.adjustment.displacement_gain, SetDisplacement),
            ("Rotation", 0.0, GAIN_SLIDER_MAX,
             lambda c: c.adjustment.rotation_gain, SetRotation),
        ]
        if mode == 'animated':
            slider_specs.append(("Motion", 0.0, 1.0, lambda c: c.motion, SetMotion))
        for label, low, high, read, command in slider_specs:
            rect = pygame.Rect(inner_x, current_y + 22, inner_width, 8)
            self.sliders.append(Slider(label, rect, low, high, read, command))
            current_y += 50
        self.active_slider: Optional[Slider] = None

        # Seed controls only matter for the static artwork.
        self.randomize_button_rect: Optional[pygame.Rect] = None
        self.seed_box_rect: Optional[pygame.Rect] = None
        if mode == 'static':
            self.randomize_button_rect = pygame.Rect(inner_x, current_y, inner_width // 2 - 5, 30)
            self.seed_box_rect = pygame.Rect(inner_x + inner_width // 2 + 5, current_y, inner_width // 2 - 5, 30)
            current_y += 45
        self.help_y = current_y + 10

        # --- UI Color Palette ---
        self.button_color = (80, 80, 80)
        self.button_hover_color = (110, 110, 110)
        self.track_color = (90, 90, 90)
        self.fill_color = (200, 200, 200)
        self.text_color_title = (255, 255, 255)
        self.text_color_key = (200, 200, 200)

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}), {mode} mode.")

    def _commands_for_event(self, event: pygame.event.Event, controls: ControlState) -> List[Command]:
        """Translates one Pygame event into control commands."""
        if event.type == pygame.KEYDOWN and event.key in KEY_BINDINGS:
            return [KEY_BINDINGS[event.key]()]

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for slider in self.sliders:
                if slider.rect.inflate(0, 16).collidepoint(event.pos):
                    self.active_slider = slider
                    return [slider.command(slider.value_at(event.pos[0]))]
            if self.randomize_button_rect and self.randomize_button_rect.collidepoint(event.pos):
                return [Reseed()]

        if event.type == pygame.MOUSEMOTION and self.active_slider is not None:
            return [self.active_slider.command(self.active_slider.value_at(event.pos[0]))]

        if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.active_slider = None

        if event.type == pygame.MOUSEWHEEL and self.seed_box_rect is not None:
            if self.seed_box_rect.collidepoint(pygame.mouse.get_pos()):
                # event.y is 1 for scroll up, -1 for scroll down
                return [SetSeed(controls.seed + event.y)]

        return []

    def handle_events(self, controls: ControlState, wait: bool = False) -> bool:
        """
        Applies pending input to the controls.

        Returns:
            bool: False if the program should exit, True otherwise.
        """
        # The first frame is drawn straight away even when waiting for input.
        wait = wait and self.frame_count > 0
        events = pygame.event.get()
        if wait and not events:
            events = [pygame.event.wait()]

        for event in events:
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return False
            for command in self._commands_for_event(event, controls):
                apply_command(controls, command)
        return True

    def render_art(self, gravel: Gravel) -> None:
        """Draws every stone onto the art surface."""
        self.art_surface.fill(BACKGROUND_COLOR)
        for corners in stone_outlines(gravel):
            pygame.draw.polygon(self.art_surface, STONE_COLOR, corners.tolist(), self.stroke_width)

    def capture(self) -> str:
        """Saves the art surface to the capture file and returns its path."""
        capture_dir = os.path.dirname(self.capture_file)
        if capture_dir:
            os.makedirs(capture_dir, exist_ok=True)
        pygame.image.save(self.art_surface, self.capture_file)
        logging.info(f"Frame {self.frame_count} captured to {self.capture_file}.")
        return self.capture_file

    def _draw_slider(self, slider: Slider, controls: ControlState):
        value = slider.read(controls)
        label_surf = self.font_main.render(f"{slider.label}: {value:.2f}", True, self.text_color_key)
        self.screen.blit(label_surf, (slider.rect.left, slider.rect.top - 20))

        pygame.draw.rect(self.screen, self.track_color, slider.rect, border_radius=4)
        handle_x = slider.handle_x(value)
        filled = pygame.Rect(slider.rect.left, slider.rect.top, handle_x - slider.rect.left, slider.rect.height)
        pygame.draw.rect(self.screen, self.fill_color, filled, border_radius=4)
        pygame.draw.circle(self.screen, self.text_color_title, (handle_x, slider.rect.centery), 7)

    def _draw_seed_controls(self, controls: ControlState, mouse_pos: Tuple[int, int]):
        is_hovered = self.randomize_button_rect.collidepoint(mouse_pos)
        color = self.button_hover_color if is_hovered else self.button_color
        pygame.draw.rect(self.screen, color, self.randomize_button_rect, border_radius=5)
        text_surf = self.font_main.render("Randomize", True, self.text_color_title)
        self.screen.blit(text_surf, text_surf.get_rect(center=self.randomize_button_rect.center))

        pygame.draw.rect(self.screen, self.button_color, self.seed_box_rect, 1, border_radius=5)
        seed_surf = self.font_main.render(f"Seed {controls.seed}", True, self.text_color_title)
        self.screen.blit(seed_surf, seed_surf.get_rect(center=self.seed_box_rect.center))

    def _draw_panel(self, controls: ControlState):
        self.screen.blit(self.ui_panel_surface, (self.panel_x, 0))
        title_surf = self.font_title.render("Schotter Control Panel", True, self.text_color_title)
        self.screen.blit(title_surf, (self.panel_x + 20, 14))

        for slider in self.sliders:
            self._draw_slider(slider, controls)
        if self.randomize_button_rect is not None:
            self._draw_seed_controls(controls, pygame.mouse.get_pos())

        line_y = self.help_y
        for line in HELP_LINES:
            surf = self.font_main.render(line, True, self.text_color_key)
            self.screen.blit(surf, (self.panel_x + 20, line_y))
            line_y += self.font_main.get_linesize()

    def draw(self, gravel: Gravel, controls: ControlState, wait: bool = False) -> None:
        """Draws the artwork and the control panel."""
        self.render_art(gravel)
        if controls.take_capture_request():
            self.capture()

        self.screen.fill(BACKGROUND_COLOR)
        self.screen.blit(self.art_surface, self.art_pos)
        self._draw_panel(controls)

        pygame.display.flip()
        self.frame_count += 1
        if not wait:
            self.clock.tick(FPS)

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
