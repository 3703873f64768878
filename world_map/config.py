# world_map/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the world
map. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC MAP.
Instead, pass a configuration dictionary to the component that needs it
(TerrainSampler, ViewportController, SkyColorEngine, ...).
================================================================================
"""

# --- Map Asset ---
DEFAULT_MAP_PATH = "globe.svg"
# Used when the document carries neither width/height nor a viewBox.
DEFAULT_IMAGE_WIDTH = 352.0
DEFAULT_IMAGE_HEIGHT = 178.0

# Inkscape stores layer names in its own namespace.
INKSCAPE_NAMESPACE = "http://www.inkscape.org/namespaces/inkscape"
CONTINENTS_PATH_ID = "path1"
CONTINENTS_LAYER_LABEL = "Continents"
ICONS_LAYER_LABEL = "Icons"
TERRAINS_LAYER_LABEL = "Terrains"
ICON_LABEL_PREFIX = "icon_"

# Fill for the continents silhouette when the path does not declare one.
DEFAULT_LAND_COLOR = (40, 40, 40)

# --- Path Flattening ---
# Number of line segments each curve or arc is split into.
CURVE_SEGMENTS = 16
# Upper bound on (points x edges) evaluated at once by the inside test.
CONTAINS_CHUNK_CELLS = 2_000_000

# --- Terrain Sampling ---
# Monte-Carlo samples used to estimate the area of each path.
AREA_SAMPLE_COUNT = 1000
# Rejection sampling gives up on a path after this many tries.
MAX_SAMPLING_ATTEMPTS = 5000
# Rejection samples are drawn in batches of this size.
SAMPLING_BATCH_SIZE = 500
# None means a fresh, non-deterministic seed on every load.
DEFAULT_SAMPLING_SEED = None

# --- Viewport & Camera ---
MIN_SCALE = 1.0   # Can't zoom out further than the full usable height
MAX_SCALE = 51.0
ZOOM_IN_FACTOR = 1.1
ZOOM_OUT_FACTOR = 0.9
# The header floats above the map; the globe is fitted to the space below it.
HEADER_HEIGHT_PX = 80
# Ignore pinch gestures whose distance change is smaller than this.
PINCH_THRESHOLD = 0.002

# --- Momentum (velocities in pixels per millisecond) ---
MOMENTUM_START_SPEED = 0.1
MOMENTUM_STOP_SPEED = 0.01
MOMENTUM_FRICTION = 0.95
# Fixed step length of one animation frame (~60 fps).
MOMENTUM_FRAME_MS = 16.0

# --- Terrain Icons ---
ICON_SIZE = 3.0
# Icons are authored in a frame roughly this many units across.
ICON_REFERENCE_SIZE = 15.0
ICON_LINE_WIDTH = 1.5
# Points further than this many pixels off-canvas are not drawn.
CULL_MARGIN_PX = 8

# --- Markers ---
MARKER_RADIUS = 2.0
MARKER_FILL_COLOR = (255, 0, 0)
MARKER_STROKE_COLOR = (51, 51, 51)
MARKER_STROKE_WIDTH = 1.0
MARKER_LABEL_COLOR = (0, 0, 0)
MARKER_FONT_SIZE = 12
MARKER_FONT_NAME = "arial"
# Marker labels grow with zoom up to this size.
MARKER_MAX_FONT_SIZE = 96

# --- Canvas ---
CANVAS_CLEAR_COLOR = (255, 255, 255)

# --- Sky Colors ---
# Minimum time between two non-debounced sky color computations.
SKY_DEBOUNCE_MS = 50.0
# How far a fresh sky color moves away from the previous one per update.
SKY_EASING_FACTOR = 0.25
# Shifts the prime meridian westward; empirically closer to real zones.
MERIDIAN_SHIFT_DEGREES = 30.0
DEGREES_PER_TIMEZONE = 15.0
MIN_TIMEZONE_OFFSET = -12
MAX_TIMEZONE_OFFSET = 14

# --- Header ---
HEADER_TRANSITION_SECONDS = 0.8
HEADER_TITLE = "World Map"
HEADER_TEXT_COLOR_LIGHT = (245, 245, 245)
HEADER_TEXT_COLOR_DARK = (20, 20, 20)
# Above this lightness (percent) the header switches to dark text.
HEADER_DARK_TEXT_LIGHTNESS = 55.0
