# world_map/__init__.py

# Backend pieces of the world map: SVG loading, terrain sampling and colors.
# Everything that needs a display lives in `world_map.runtime`.

from .colors import ColorFormatError, interpolate
from .sampler import MapAsset, TerrainSampler
from .svg_path import PathGeometry, PathSyntaxError, parse_path
from .terrain import IconDescriptor, TerrainCategory, TerrainPoint

__all__ = [
    "ColorFormatError", "interpolate", "MapAsset", "TerrainSampler",
    "PathGeometry", "PathSyntaxError", "parse_path",
    "IconDescriptor", "TerrainCategory", "TerrainPoint",
]
