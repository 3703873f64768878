# world_map/runtime/sky_colors.py

"""
================================================================================
SKY COLORS
================================================================================
This module maps a longitude to a local time of day and turns that time into
a smoothly interpolated sky color for the header and page background.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Overrides for 'debounce_ms' and 'easing_factor'.
    - header (HeaderBar, optional): Receives colors from apply_colors().
    - clock (callable, optional): Returns the caller's aware wall-clock time.
    - time_source (callable, optional): Monotonic time in milliseconds.
- Public Methods:
    - timezone_from_longitude(lng), local_hour(offset)
    - get_sky_colors(lng), get_smooth_sky_colors(lng, previous)
    - reset_debounce(), apply_colors(result)
- Side Effects: apply_colors() starts a header transition and logs changes.
- Invariants: timezone offsets are integers in [-12, 14] and depend only on
  the longitude modulo 360.
================================================================================
"""
import logging
import math
import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from .. import colors
from .. import config as DEFAULTS

# Use a forward reference for the type hint to avoid circular imports.
if TYPE_CHECKING:
    from .header import HeaderBar


@dataclass(frozen=True)
class SkyColorEntry:
    hour: int
    header: str
    background: str
    name: str


@dataclass(frozen=True)
class SkyColors:
    """Result of one sky color query."""
    header_color: str
    background_color: str
    timezone_offset: int
    local_hour: float
    time_name: str


def _entry(hour, color, name):
    return SkyColorEntry(hour, color, color, name)


# One entry per hour, a smooth day-night cycle.
SKY_COLOR_TABLE = (
    # Midnight to 6 AM - night
    _entry(0, "#0A0A0F", "Deep Night"),
    _entry(1, "#0A0A0F", "Late Night"),
    _entry(2, "#0F0F1A", "Night"),
    _entry(3, "#0F0F1A", "Early Night"),
    _entry(4, "#1A0F0A", "Pre-Dawn"),
    _entry(5, "#2A1A0A", "Early Dawn"),
    # 6 AM to 12 PM - sunrise and morning
    _entry(6, "#3A2A1A", "Dawn"),
    _entry(7, "#5A3A2A", "Early Sunrise"),
    _entry(8, "#8A5A3A", "Sunrise"),
    _entry(9, "#B0D0E0", "Early Morning"),
    _entry(10, "#A0C0D0", "Morning"),
    _entry(11, "#90B0C0", "Late Morning"),
    # 12 PM to 6 PM - day
    _entry(12, "#E8F4FD", "Noon"),
    _entry(13, "#D0E8FD", "Early Afternoon"),
    _entry(14, "#B8DCFD", "Afternoon"),
    _entry(15, "#A0D0FD", "Late Afternoon"),
    _entry(16, "#88C4FD", "Golden Hour"),
    _entry(17, "#FFE6CC", "Late Golden Hour"),
    # 6 PM to midnight - sunset and evening
    _entry(18, "#FFE6D6", "Sunset"),
    _entry(19, "#FFE6D6", "Dusk"),
    _entry(20, "#2A1A0A", "Early Evening"),
    _entry(21, "#1A0F0A", "Evening"),
    _entry(22, "#0F0F1A", "Late Evening"),
    _entry(23, "#0A0A0F", "Night"),
)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def _local_now() -> datetime:
    return datetime.now().astimezone()


def timezone_from_longitude(longitude: float) -> int:
    """Approximate UTC offset, in whole hours, for a longitude."""
    if not math.isfinite(longitude):
        raise ValueError(f"Longitude must be finite, got {longitude!r}")

    # Half-open [-180, 180) so that 180 and -180 share a zone.
    wrapped = (longitude + 180) % 360 - 180

    adjusted = (wrapped + DEFAULTS.MERIDIAN_SHIFT_DEGREES) / DEFAULTS.DEGREES_PER_TIMEZONE
    # Halves round up (toward +inf).
    offset = math.floor(adjusted + 0.5)
    return max(DEFAULTS.MIN_TIMEZONE_OFFSET, min(DEFAULTS.MAX_TIMEZONE_OFFSET, offset))


class SkyColorEngine:
    """Computes debounced, eased sky colors for the map's center longitude."""

    def __init__(self, config: dict = None, header: 'HeaderBar' = None,
                 clock: Callable[[], datetime] = _local_now,
                 time_source: Callable[[], float] = _monotonic_ms):
        config = config or {}
        self.logger = logging.getLogger(__name__)
        self.sky_colors = SKY_COLOR_TABLE
        self.update_interval_ms = config.get('debounce_ms', DEFAULTS.SKY_DEBOUNCE_MS)
        self.easing_factor = config.get('easing_factor', DEFAULTS.SKY_EASING_FACTOR)
        self.header = header
        self.clock = clock
        self.time_source = time_source

        self.last_update_time = None
        self.last_applied_colors = None

    def timezone_from_longitude(self, longitude: float) -> int:
        return timezone_from_longitude(longitude)

    def local_hour(self, timezone_offset: float) -> float:
        """Fractional hour of day, in [0, 24), at the given UTC offset."""
        now = self.clock()
        user_hour = now.hour + now.minute / 60 + now.second / 3600
        utc_offset = now.utcoffset()
        user_offset_hours = utc_offset.total_seconds() / 3600 if utc_offset is not None else 0.0
        return (user_hour - user_offset_hours + timezone_offset) % 24

    def get_sky_colors(self, longitude: float) -> SkyColors:
        timezone_offset = self.timezone_from_longitude(longitude)
        local_hour = self.local_hour(timezone_offset)

        hour1 = int(math.floor(local_hour)) % 24
        hour2 = (hour1 + 1) % 24
        factor = local_hour - math.floor(local_hour)
        color1 = self.sky_colors[hour1]
        color2 = self.sky_colors[hour2]

        return SkyColors(
            header_color=colors.interpolate(color1.header, color2.header, factor),
            background_color=colors.interpolate(color1.background, color2.background, factor),
            timezone_offset=timezone_offset,
            local_hour=local_hour,
            time_name=color1.name,
        )

    def get_smooth_sky_colors(self, longitude: float, last_colors: SkyColors = None) -> SkyColors:
        """
        Debounced and eased variant of get_sky_colors().

        Within the debounce interval the previous result is returned as is.
        Otherwise a fresh result is blended away from the previous one so
        that the header never snaps to a new color.
        """
        now = self.time_source()
        if self.last_update_time is not None and now - self.last_update_time < self.update_interval_ms:
            return last_colors or self.get_sky_colors(longitude)

        new_colors = self.get_sky_colors(longitude)
        self.last_update_time = now

        if last_colors is not None:
            new_colors = replace(
                new_colors,
                header_color=colors.interpolate(
                    last_colors.header_color, new_colors.header_color, self.easing_factor
                ),
                background_color=colors.interpolate(
                    last_colors.background_color, new_colors.background_color, self.easing_factor
                ),
            )
        return new_colors

    def reset_debounce(self):
        """Forces the next smooth query to recompute (call when a gesture ends)."""
        self.last_update_time = None

    def apply_colors(self, sky_colors: SkyColors):
        """Eases the header region toward the result's header color."""
        if self.header is not None:
            self.header.transition_to(sky_colors.header_color)
            self.header.set_status(sky_colors)

        # The page background stays static.
        if self.last_applied_colors is None or self.last_applied_colors.header_color != sky_colors.header_color:
            self.logger.debug(
                f"Timezone: {sky_colors.timezone_offset}, Local hour: {sky_colors.local_hour:.2f}, "
                f"Time: {sky_colors.time_name}, Header: {sky_colors.header_color}"
            )
            self.last_applied_colors = sky_colors
