# world_map/runtime/renderer.py

"""
================================================================================
MAP RENDERER
================================================================================
Draws the map onto a pygame Surface: the continents backdrop repeated
horizontally, the sampled terrain icons, and any retained markers.

Data Contract:
---------------
- Inputs (on initialization):
    - viewport (ViewportController): Source of the current layout and offsets.
    - config (dict): Overrides for icon and marker defaults.
- Public Methods:
    - set_asset(asset): Builds the backdrop surface for a MapAsset.
    - draw(screen, markers): Clears the canvas and draws one frame.
- Invariants:
    - Without a backdrop, draw() only clears the canvas.
    - Only the part of the backdrop that is on screen is ever scaled.
================================================================================
"""
import logging
import math
from dataclasses import dataclass

import numpy as np
import pygame

from .. import config as DEFAULTS
from ..terrain import TerrainCategory


@dataclass(frozen=True)
class Marker:
    """A labelled location retained by the controller."""
    longitude: float
    latitude: float
    label: str


def build_backdrop_surface(mask: np.ndarray, color: tuple) -> pygame.Surface:
    """Turns a boolean (h, w) land mask into a transparent RGBA surface."""
    height, width = mask.shape
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[mask] = (color[0], color[1], color[2], 255)
    return pygame.image.frombytes(pixels.tobytes(), (width, height), "RGBA")


class MapRenderer:
    """Renders a MapAsset through a ViewportController."""

    def __init__(self, viewport, config: dict = None):
        self.logger = logging.getLogger(__name__)
        self.viewport = viewport
        config = config or {}
        self.settings = {
            'icon_size': config.get('icon_size', DEFAULTS.ICON_SIZE),
            'icon_reference_size': config.get('icon_reference_size', DEFAULTS.ICON_REFERENCE_SIZE),
            'icon_line_width': config.get('icon_line_width', DEFAULTS.ICON_LINE_WIDTH),
            'cull_margin': config.get('cull_margin', DEFAULTS.CULL_MARGIN_PX),
            'clear_color': tuple(config.get('clear_color', DEFAULTS.CANVAS_CLEAR_COLOR)),
            'marker_font_name': config.get('marker_font_name', DEFAULTS.MARKER_FONT_NAME),
        }
        # Nearest-neighbor scaling unless explicitly turned on.
        self.smoothing = False

        self.asset = None
        self.backdrop = None
        self._point_arrays = {}
        self._outlines = {}
        self._font_cache = {}

    # --- Asset ---
    def set_asset(self, asset):
        self.asset = asset
        self.backdrop = None
        self._point_arrays = {}
        self._outlines = {}
        if asset is None or not asset.has_backdrop:
            self.logger.warning("Map asset has no backdrop; map drawing is disabled.")
            return

        self.backdrop = build_backdrop_surface(asset.backdrop_mask, asset.land_color)
        for category in TerrainCategory.in_draw_order():
            points = asset.points_for(category)
            if points:
                self._point_arrays[category] = np.array([(p.x, p.y) for p in points], dtype=float)
        for category, icon in asset.icons.items():
            self._outlines[category] = icon.outline(
                self.settings['icon_size'], self.settings['icon_reference_size']
            )
        self.logger.info(f"Backdrop ready ({self.backdrop.get_width()}x{self.backdrop.get_height()}).")

    # --- Drawing ---
    def draw(self, screen: pygame.Surface, markers=()) -> bool:
        """Draws one frame. Returns False when there was nothing to draw."""
        screen.fill(self.settings['clear_color'])
        if self.backdrop is None:
            return False
        layout = self.viewport.layout()
        if layout is None or layout.scaled_width <= 0:
            return False

        state = self.viewport.state
        origins = layout.copy_origins(state.offset_x, state.offset_y, screen.get_width())
        for origin in origins:
            self._draw_backdrop_copy(screen, origin, layout.pixel_scale)
            self._draw_terrain(screen, origin, layout.pixel_scale)
        for marker in markers:
            # Position on the primary copy, then shifted onto every other copy.
            anchor_x, anchor_y = self.viewport.image_to_screen(*self.viewport.project(marker.longitude, marker.latitude))
            for origin in origins:
                position = (anchor_x + origin[0] - state.offset_x, anchor_y)
                self._draw_marker(screen, position, layout.pixel_scale, marker)
        return True

    def _draw_backdrop_copy(self, screen: pygame.Surface, origin: tuple, pixel_scale: float):
        """Scales and blits only the visible part of one backdrop copy."""
        ox, oy = origin
        screen_w, screen_h = screen.get_size()
        source_w, source_h = self.backdrop.get_size()

        # Visible part of the copy in source pixels.
        left = max(0, math.floor((0 - ox) / pixel_scale))
        top = max(0, math.floor((0 - oy) / pixel_scale))
        right = min(source_w, math.ceil((screen_w - ox) / pixel_scale))
        bottom = min(source_h, math.ceil((screen_h - oy) / pixel_scale))
        if right <= left or bottom <= top:
            return

        source = self.backdrop.subsurface(pygame.Rect(left, top, right - left, bottom - top))
        target_size = (
            max(1, math.ceil((right - left) * pixel_scale)),
            max(1, math.ceil((bottom - top) * pixel_scale)),
        )
        if self.smoothing:
            scaled = pygame.transform.smoothscale(source, target_size)
        else:
            scaled = pygame.transform.scale(source, target_size)
        screen.blit(scaled, (round(ox + left * pixel_scale), round(oy + top * pixel_scale)))

    def _draw_terrain(self, screen: pygame.Surface, origin: tuple, pixel_scale: float):
        ox, oy = origin
        screen_w, screen_h = screen.get_size()
        icon_extent = self.settings['icon_size'] * pixel_scale
        margin = self.settings['cull_margin'] + icon_extent
        line_width = max(1, round(
            self.settings['icon_line_width'] * self.settings['icon_size']
            / self.settings['icon_reference_size'] * pixel_scale
        ))
        radius = max(1, round(icon_extent / 2))

        for category in TerrainCategory.in_draw_order():
            points = self._point_arrays.get(category)
            if points is None:
                continue
            screen_points = points * pixel_scale + (ox, oy)
            visible = (
                (screen_points[:, 0] >= -margin) & (screen_points[:, 0] <= screen_w + margin)
                & (screen_points[:, 1] >= -margin) & (screen_points[:, 1] <= screen_h + margin)
            )
            outline = self._outlines.get(category)
            for sx, sy in screen_points[visible]:
                if outline is None:
                    pygame.draw.circle(screen, category.fill_color, (round(sx), round(sy)), radius)
                    continue
                for subpath in outline:
                    if len(subpath) < 2:
                        continue
                    pygame.draw.lines(screen, category.stroke_color, False,
                                      (subpath * pixel_scale + (sx, sy)).tolist(), line_width)

    def _marker_font(self, size: int) -> pygame.font.Font:
        if size not in self._font_cache:
            if not pygame.font.get_init():
                pygame.font.init()
            try:
                self._font_cache[size] = pygame.font.SysFont(self.settings['marker_font_name'], size)
            except pygame.error:
                self._font_cache[size] = pygame.font.Font(None, size)
        return self._font_cache[size]

    def _draw_marker(self, screen: pygame.Surface, position: tuple, pixel_scale: float, marker: Marker):
        x, y = position
        screen_w, screen_h = screen.get_size()
        if x < -screen_w or x > 2 * screen_w or y < -screen_h or y > 2 * screen_h:
            return

        radius = max(1, round(DEFAULTS.MARKER_RADIUS * pixel_scale))
        stroke = max(1, round(DEFAULTS.MARKER_STROKE_WIDTH * pixel_scale))
        center = (round(x), round(y))
        pygame.draw.circle(screen, DEFAULTS.MARKER_FILL_COLOR, center, radius)
        pygame.draw.circle(screen, DEFAULTS.MARKER_STROKE_COLOR, center, radius, stroke)

        if marker.label:
            size = min(DEFAULTS.MARKER_MAX_FONT_SIZE, max(1, round(DEFAULTS.MARKER_FONT_SIZE * pixel_scale)))
            text = self._marker_font(size).render(marker.label, True, DEFAULTS.MARKER_LABEL_COLOR)
            # Left edge just right of the point, vertically centered.
            label_x = round(x + DEFAULTS.MARKER_RADIUS * pixel_scale)
            screen.blit(text, (label_x, round(y - text.get_height() / 2)))
