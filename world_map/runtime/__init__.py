# world_map/runtime/__init__.py

# This file makes the 'runtime' directory a Python package.
# It also defines the public API of the interactive map.

from .controller import MapController
from .events import EventDispatcher, Subscription
from .header import HeaderBar
from .renderer import MapRenderer, Marker
from .scheduler import FrameScheduler, ScheduledTask
from .sky_colors import SkyColorEngine, SkyColors, timezone_from_longitude
from .viewport import GlobeLayout, InteractionMode, ViewportController, ViewportState

__all__ = [
    "MapController", "EventDispatcher", "Subscription", "HeaderBar",
    "MapRenderer", "Marker", "FrameScheduler", "ScheduledTask",
    "SkyColorEngine", "SkyColors", "timezone_from_longitude",
    "GlobeLayout", "InteractionMode", "ViewportController", "ViewportState",
]
