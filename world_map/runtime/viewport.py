# world_map/runtime/viewport.py

"""
================================================================================
VIEWPORT
================================================================================
Pan, zoom and momentum for the world map, independent of Pygame.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Overrides for the camera defaults ('min_scale',
      'max_scale', 'header_height', 'friction', ...).
    - state (ViewportState, optional): The record to mutate. The controller
      passes the same instance to every handler; nothing here copies it.
- Public Methods:
    - set_canvas_size(w, h), set_image_size(w, h), layout()
    - begin_drag(x, y, t), drag_to(x, y, t), end_drag()
    - momentum_step(), zoom_at(x, y, zoom_in)
    - project(lng, lat), screen_to_lnglat(x, y), center_longitude()
- Invariants:
    - min_scale <= scale <= max_scale.
    - Once the image size is known, offset_y is always within the bounds
      returned by vertical_bounds().
    - offset_x is never clamped; drawing wraps it.
================================================================================
"""
import enum
import math
from dataclasses import dataclass

from .. import config as DEFAULTS


class InteractionMode(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    MOMENTUM = "momentum"


class ViewportState:
    """The single mutable record describing the current view."""

    def __init__(self, min_scale: float = DEFAULTS.MIN_SCALE, max_scale: float = DEFAULTS.MAX_SCALE):
        self.scale = min_scale
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.is_dragging = False
        self.last_pointer_x = 0.0
        self.last_pointer_y = 0.0
        self.last_event_time = 0.0
        self.velocity_x = 0.0
        self.velocity_y = 0.0
        self.is_momentum_active = False

    @property
    def mode(self) -> InteractionMode:
        if self.is_dragging:
            return InteractionMode.DRAGGING
        if self.is_momentum_active:
            return InteractionMode.MOMENTUM
        return InteractionMode.IDLE

    @property
    def speed(self) -> float:
        return math.hypot(self.velocity_x, self.velocity_y)


@dataclass(frozen=True)
class GlobeLayout:
    """Where the globe image sits on the canvas for the current scale."""
    fit_scale: float
    pixel_scale: float
    scaled_width: float
    scaled_height: float
    globe_y: float

    def copy_origins(self, offset_x: float, offset_y: float, canvas_width: float) -> list:
        """Top-left corners of every horizontal copy needed to cover the canvas."""
        base_x = offset_x % self.scaled_width
        copies = math.ceil(canvas_width / self.scaled_width) + 2
        top = self.globe_y + offset_y
        return [(i * self.scaled_width + base_x, top) for i in range(-1, copies)]


class ViewportController:
    """Applies drag, momentum and zoom to a ViewportState."""

    def __init__(self, config: dict = None, state: ViewportState = None):
        config = config or {}
        self.header_height = config.get('header_height', DEFAULTS.HEADER_HEIGHT_PX)
        self.zoom_in_factor = config.get('zoom_in_factor', DEFAULTS.ZOOM_IN_FACTOR)
        self.zoom_out_factor = config.get('zoom_out_factor', DEFAULTS.ZOOM_OUT_FACTOR)
        self.momentum_start_speed = config.get('momentum_start_speed', DEFAULTS.MOMENTUM_START_SPEED)
        self.momentum_stop_speed = config.get('momentum_stop_speed', DEFAULTS.MOMENTUM_STOP_SPEED)
        self.friction = config.get('friction', DEFAULTS.MOMENTUM_FRICTION)
        self.frame_ms = config.get('frame_ms', DEFAULTS.MOMENTUM_FRAME_MS)

        self.state = state or ViewportState(
            min_scale=config.get('min_scale', DEFAULTS.MIN_SCALE),
            max_scale=config.get('max_scale', DEFAULTS.MAX_SCALE),
        )
        self.canvas_width = 0
        self.canvas_height = 0
        self.image_width = None
        self.image_height = None

    # --- Geometry ---
    def set_canvas_size(self, width: int, height: int):
        self.canvas_width = width
        self.canvas_height = height
        self.constrain_vertical_pan()

    def set_image_size(self, width: float, height: float):
        self.image_width = width
        self.image_height = height
        self.constrain_vertical_pan()

    def layout(self, scale: float = None) -> GlobeLayout | None:
        """Globe placement for `scale` (the current scale by default), or None if unknown."""
        if not self.image_width or not self.image_height or self.canvas_height <= 0:
            return None
        scale = self.state.scale if scale is None else scale
        usable_height = self.canvas_height - self.header_height
        if usable_height <= 0:
            usable_height = self.canvas_height
        fit_scale = usable_height / self.image_height
        pixel_scale = fit_scale * scale
        scaled_height = self.image_height * pixel_scale
        return GlobeLayout(
            fit_scale=fit_scale,
            pixel_scale=pixel_scale,
            scaled_width=self.image_width * pixel_scale,
            scaled_height=scaled_height,
            globe_y=(self.canvas_height - scaled_height) / 2,
        )

    def vertical_bounds(self) -> tuple | None:
        """Allowed (min, max) offset_y; (0, 0) whenever the globe fits the canvas."""
        layout = self.layout()
        if layout is None:
            return None
        if layout.scaled_height <= self.canvas_height:
            return 0.0, 0.0
        # Bottom edge at the canvas bottom, top edge at the canvas top.
        return self.canvas_height - (layout.globe_y + layout.scaled_height), -layout.globe_y

    def constrain_vertical_pan(self):
        bounds = self.vertical_bounds()
        if bounds is None:
            return
        min_offset, max_offset = bounds
        self.state.offset_y = max(min_offset, min(max_offset, self.state.offset_y))

    # --- Dragging ---
    def begin_drag(self, x: float, y: float, timestamp_ms: float):
        state = self.state
        self.stop_momentum()
        state.is_dragging = True
        state.last_pointer_x = x
        state.last_pointer_y = y
        state.last_event_time = timestamp_ms

    def drag_to(self, x: float, y: float, timestamp_ms: float) -> bool:
        """Moves the map with the pointer. Returns False when not dragging."""
        state = self.state
        if not state.is_dragging:
            return False

        delta_time = timestamp_ms - state.last_event_time
        dx = x - state.last_pointer_x
        dy = y - state.last_pointer_y
        if delta_time > 0:
            # Pixels per millisecond
            state.velocity_x = dx / delta_time
            state.velocity_y = dy / delta_time

        state.offset_x += dx
        state.offset_y += dy
        state.last_pointer_x = x
        state.last_pointer_y = y
        state.last_event_time = timestamp_ms
        self.constrain_vertical_pan()
        return True

    def end_drag(self) -> bool:
        """Releases the drag. Returns True if momentum should start."""
        state = self.state
        if not state.is_dragging:
            return False
        state.is_dragging = False
        if abs(state.velocity_x) > self.momentum_start_speed or abs(state.velocity_y) > self.momentum_start_speed:
            state.is_momentum_active = True
            return True
        return False

    # --- Momentum ---
    def stop_momentum(self):
        self.state.is_momentum_active = False
        self.state.velocity_x = 0.0
        self.state.velocity_y = 0.0

    def momentum_step(self) -> bool:
        """Advances one frame of inertial motion. Returns True while it should continue."""
        state = self.state
        if not state.is_momentum_active:
            return False

        state.offset_x += state.velocity_x * self.frame_ms
        state.offset_y += state.velocity_y * self.frame_ms
        state.velocity_x *= self.friction
        state.velocity_y *= self.friction
        self.constrain_vertical_pan()

        if abs(state.velocity_x) > self.momentum_stop_speed or abs(state.velocity_y) > self.momentum_stop_speed:
            return True
        self.stop_momentum()
        return False

    # --- Zoom ---
    def zoom_at(self, x: float, y: float, zoom_in: bool) -> bool:
        """Cursor-anchored zoom. Returns False when the image size is not known yet."""
        return self.zoom_by(self.zoom_in_factor if zoom_in else self.zoom_out_factor, x, y)

    def zoom_by(self, factor: float, x: float, y: float) -> bool:
        state = self.state
        old_layout = self.layout()
        if old_layout is None:
            return False

        new_scale = min(max(state.scale * factor, state.min_scale), state.max_scale)
        new_layout = self.layout(new_scale)

        # The world point under the cursor before the zoom...
        world_x = (x - state.offset_x) / old_layout.pixel_scale
        world_y = (y - old_layout.globe_y - state.offset_y) / old_layout.pixel_scale

        # ...stays under the cursor after it.
        state.offset_x = x - world_x * new_layout.pixel_scale
        state.offset_y = y - new_layout.globe_y - world_y * new_layout.pixel_scale
        state.scale = new_scale
        self.constrain_vertical_pan()
        return True

    # --- Projection ---
    def project(self, longitude: float, latitude: float) -> tuple:
        """Equirectangular projection into source-image pixels."""
        x = (longitude + 180) * (self.image_width / 360)
        y = (90 - latitude) * (self.image_height / 180)
        return x, y

    def image_to_screen(self, image_x: float, image_y: float) -> tuple | None:
        """Screen position of an image point on the primary (unwrapped) copy."""
        layout = self.layout()
        if layout is None:
            return None
        return (
            self.state.offset_x + image_x * layout.pixel_scale,
            layout.globe_y + self.state.offset_y + image_y * layout.pixel_scale,
        )

    def screen_to_lnglat(self, x: float, y: float) -> tuple | None:
        """Inverse projection of a screen point; longitude wraps into [-180, 180)."""
        layout = self.layout()
        if layout is None:
            return None
        image_x = ((x - self.state.offset_x) / layout.pixel_scale) % self.image_width
        image_y = (y - layout.globe_y - self.state.offset_y) / layout.pixel_scale
        longitude = image_x / self.image_width * 360 - 180
        latitude = 90 - image_y / self.image_height * 180
        return longitude, latitude

    def center_longitude(self) -> float:
        lnglat = self.screen_to_lnglat(self.canvas_width / 2, self.canvas_height / 2)
        return lnglat[0] if lnglat is not None else 0.0
