"""Tests for the header bar."""

import pygame

from world_map.runtime.header import HeaderBar


class TestHeaderBar:
    """Hit testing and the eased color transition."""

    def test_contains(self):
        header = HeaderBar(height=80)
        assert header.contains((10, 0))
        assert header.contains((10, 79))
        assert not header.contains((10, 80))

    def test_transition_reaches_the_target(self):
        header = HeaderBar(color="#000000")
        header.transition_to("#ffffff", duration=1.0)
        header.update(0.5)
        assert header.current_color not in ("#000000", "#ffffff")
        header.update(0.6)
        assert header.current_color == "#ffffff"
        assert not header.is_transitioning

    def test_ease_out_moves_fast_first(self):
        header = HeaderBar(color="#000000")
        header.transition_to("#ffffff", duration=1.0)
        header.update(0.5)
        # 1 - 0.5 ** 3 of the way there.
        assert header.current_color == "#dfdfdf"

    def test_zero_duration_snaps(self):
        header = HeaderBar(color="#000000")
        header.transition_to("#102030", duration=0)
        assert header.current_color == "#102030"

    def test_draw_fills_the_strip(self):
        screen = pygame.Surface((320, 200))
        header = HeaderBar(height=40, color="#102030")
        header.draw(screen)
        assert tuple(screen.get_at((160, 2)))[:3] == (0x10, 0x20, 0x30)
        assert tuple(screen.get_at((160, 100)))[:3] == (0, 0, 0)
