# world_map/terrain.py

"""
================================================================================
TERRAIN CATEGORIES
================================================================================
The closed set of terrain categories shown on the map, and the immutable
records produced for them by the sampler.

Each category carries everything the sampler and renderer need to know
about it: the layer label in the source document, the icon key, its colors,
the default point budget and its drawing order.
================================================================================
"""
import enum
from dataclasses import dataclass

from . import config as DEFAULTS
from .svg_path import PathGeometry


class TerrainCategory(enum.Enum):
    # (layer label, icon key, stroke color, fallback fill color, budget, draw order)
    FOREST = ("Forest", "tree", (34, 139, 34), (0, 128, 0), 200, 5)
    CITY = ("City", "city", (139, 0, 0), (255, 255, 0), 60, 6)
    MOUNTAIN = ("Mountain", "mountain", (139, 69, 19), (165, 42, 42), 120, 4)
    ICE = ("Ice", "ice", (135, 206, 235), (0, 255, 255), 40, 2)
    DESERT = ("Desert", "desert", (218, 165, 32), (255, 165, 0), 70, 3)
    SPACE = ("Space", "space", (147, 112, 219), (128, 0, 128), 50, 0)
    OCEAN = ("Ocean", "ocean", (0, 102, 204), (0, 0, 255), 90, 1)

    def __init__(self, label, icon_key, stroke_color, fill_color, default_budget, draw_order):
        self.label = label
        self.icon_key = icon_key
        self.stroke_color = stroke_color
        self.fill_color = fill_color
        self.default_budget = default_budget
        self.draw_order = draw_order

    @classmethod
    def in_draw_order(cls) -> list:
        """Bottom to top: space, ocean, ice, desert, mountain, forest, city."""
        return sorted(cls, key=lambda category: category.draw_order)

    @classmethod
    def from_icon_key(cls, icon_key: str):
        for category in cls:
            if category.icon_key == icon_key:
                return category
        return None


@dataclass(frozen=True)
class TerrainPoint:
    """A sampled marker position in source-image pixel space."""
    x: float
    y: float
    category: TerrainCategory


@dataclass(frozen=True)
class IconDescriptor:
    """Vector glyph for one category, with its bounding-box center."""
    category: TerrainCategory
    geometry: PathGeometry
    center: tuple

    def outline(self, size: float = DEFAULTS.ICON_SIZE,
                reference_size: float = DEFAULTS.ICON_REFERENCE_SIZE) -> list:
        """Subpaths centered on the origin and scaled to `size` image pixels."""
        factor = size / reference_size
        cx, cy = self.center
        return self.geometry.translated(-cx * factor, -cy * factor, factor)
