# world_map/runtime/header.py

"""
================================================================================
HEADER BAR
================================================================================
The strip floating over the top of the map. Its background follows the sky
color of the map's center longitude, easing toward each new color instead of
switching instantly. Pointer presses inside it never reach the map.
================================================================================
"""
import pygame

from .. import colors
from .. import config as DEFAULTS


def _ease_out(t: float) -> float:
    """Cubic ease-out on [0, 1]."""
    t = min(1.0, max(0.0, t))
    return 1 - (1 - t) ** 3


class HeaderBar:
    """Draws the header and animates its background color."""

    def __init__(self, height: int = DEFAULTS.HEADER_HEIGHT_PX, title: str = DEFAULTS.HEADER_TITLE,
                 color: str = "#0a0a0f"):
        self.height = height
        self.title = title
        self.status_text = ""
        self.transition_duration = DEFAULTS.HEADER_TRANSITION_SECONDS

        self._start_color = color
        self._target_color = color
        self._elapsed = 0.0
        self.current_color = color

        self._title_font = None
        self._status_font = None

    def contains(self, pos: tuple) -> bool:
        return 0 <= pos[1] < self.height

    def transition_to(self, color: str, duration: float = None):
        """Starts easing from the current color toward `color`."""
        if color == self._target_color:
            return
        self._start_color = self.current_color
        self._target_color = color
        self._elapsed = 0.0
        if duration is not None:
            self.transition_duration = duration
        if self.transition_duration <= 0:
            self.current_color = color

    def set_status(self, sky_colors):
        hours = int(sky_colors.local_hour)
        minutes = int((sky_colors.local_hour - hours) * 60)
        self.status_text = (
            f"{hours:02d}:{minutes:02d} {sky_colors.time_name} "
            f"(UTC{sky_colors.timezone_offset:+d})"
        )

    def update(self, dt_seconds: float):
        if self.current_color == self._target_color:
            return
        self._elapsed += dt_seconds
        t = self._elapsed / self.transition_duration if self.transition_duration > 0 else 1.0
        if t >= 1.0:
            self.current_color = self._target_color
        else:
            self.current_color = colors.interpolate_rgb(self._start_color, self._target_color, _ease_out(t))

    @property
    def is_transitioning(self) -> bool:
        return self.current_color != self._target_color

    def _text_color(self) -> tuple:
        hsl = colors.hex_to_hsl(self.current_color)
        if hsl is not None and hsl[2] > DEFAULTS.HEADER_DARK_TEXT_LIGHTNESS:
            return DEFAULTS.HEADER_TEXT_COLOR_DARK
        return DEFAULTS.HEADER_TEXT_COLOR_LIGHT

    def _fonts(self):
        if self._title_font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._title_font = pygame.font.Font(None, 36)
            self._status_font = pygame.font.Font(None, 22)
        return self._title_font, self._status_font

    def draw(self, screen: pygame.Surface):
        width = screen.get_width()
        pygame.draw.rect(screen, pygame.Color(self.current_color), (0, 0, width, self.height))

        title_font, status_font = self._fonts()
        text_color = self._text_color()
        title = title_font.render(self.title, True, text_color)
        screen.blit(title, (16, (self.height - title.get_height()) // 2))
        if self.status_text:
            status = status_font.render(self.status_text, True, text_color)
            screen.blit(status, (width - status.get_width() - 16, (self.height - status.get_height()) // 2))
