# constants.py
"""
Application-level constants.

These values are static and do not change between runs. They cover the
grid geometry of the artwork, rendering properties, and the sampling ranges
used by the stone animator. Anything a user is expected to tweak per run
lives in `config.json` instead.
"""
import math

# Grid geometry (in cells)
ROWS = 22
COLS = 12

# Rendering settings
# Pixel size of one cell and the blank margin around the artwork.
SIZE = 30
MARGIN = 35
# Stroke width of a stone outline, in cell units.
LINE_WIDTH = 0.06
UI_PANEL_WIDTH = 260
FPS = 60
BACKGROUND_COLOR = (255, 250, 250) # Snow
STONE_COLOR = (0, 0, 0) # Black
UI_BACKGROUND_ALPHA = 235

# --- Sampling ranges ---
# Half-width of the uniform range a target offset is drawn from, before the
# row factor and displacement gain are applied. The static sketch and the
# animated sketch use different scales; both are kept.
STATIC_OFFSET_BOUND = 0.5
ANIMATED_OFFSET_BOUND = 5.5
# Half-width of the uniform range a target rotation is drawn from (radians).
ROTATION_BOUND = math.pi / 4
# Phase durations are drawn from [CYCLE_MIN, CYCLE_MAX) ticks.
CYCLE_MIN = 50
CYCLE_MAX = 300

# --- Controls ---
GAIN_STEP = 0.1
GAIN_SLIDER_MAX = 5.0
# Seeds are drawn from [0, SEED_MAX).
SEED_MAX = 1_000_000

# --- Defaults used when config.json omits a value ---
DEFAULT_DISPLACEMENT_GAIN = 1.0
DEFAULT_ROTATION_GAIN = 1.0
DEFAULT_MOTION = 0.5
DEFAULT_CAPTURE_FILE = "schotter.png"

MODES = ("animated", "static")
LOOP_MODES = ("refresh", "wait")

# --- Logging defaults used when config.json has no "logging" section ---
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = "logs/schotter.log"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 5
DEFAULT_LOG_THROTTLE_STEPS = 300
