"""Tests for drawing the map onto an off-screen surface."""

import numpy as np
import pygame
import pytest

from world_map.runtime.renderer import MapRenderer, Marker, build_backdrop_surface
from world_map.runtime.viewport import ViewportController
from world_map.sampler import MapAsset

WHITE = (255, 255, 255)
LAND = (0x33, 0x66, 0x33)


@pytest.fixture
def viewport(asset):
    # 150 px tall canvas minus the 80 px header fits the 50 px map at 1.4x.
    controller = ViewportController()
    controller.set_canvas_size(200, 150)
    controller.set_image_size(asset.image_width, asset.image_height)
    return controller


@pytest.fixture
def renderer(viewport, asset):
    renderer = MapRenderer(viewport)
    renderer.set_asset(asset)
    return renderer


def pixel(surface, pos):
    return tuple(surface.get_at(pos))[:3]


def count_color(surface, color):
    pixels = pygame.surfarray.array3d(surface)
    return int(np.all(pixels == color, axis=-1).sum())


class TestBackdrop:
    """Mask to surface conversion."""

    def test_build_backdrop_surface(self):
        mask = np.array([[True, False, False], [False, False, True]])
        surface = build_backdrop_surface(mask, (10, 20, 30))
        assert surface.get_size() == (3, 2)
        assert tuple(surface.get_at((0, 0))) == (10, 20, 30, 255)
        assert surface.get_at((1, 0)).a == 0
        assert tuple(surface.get_at((2, 1))) == (10, 20, 30, 255)


class TestMapRenderer:
    """Frames drawn through the viewport."""

    def test_draws_land_and_clears_elsewhere(self, renderer):
        screen = pygame.Surface((200, 150))
        assert renderer.draw(screen)
        assert pixel(screen, (70, 75)) == LAND
        assert pixel(screen, (5, 5)) == WHITE

    def test_terrain_icons_and_fallback_circles(self, renderer):
        screen = pygame.Surface((200, 150))
        renderer.draw(screen)
        # Forest has an icon glyph, City falls back to filled circles.
        assert count_color(screen, (34, 139, 34)) > 0
        assert count_color(screen, (255, 255, 0)) > 0

    def test_marker_is_drawn(self, renderer):
        screen = pygame.Surface((200, 150))
        renderer.draw(screen, [Marker(0.0, 0.0, "")])
        assert pixel(screen, (70, 75)) == (255, 0, 0)

    def test_marker_repeats_on_wrapped_copies(self, renderer):
        # lng -170 sits 10/360 of the way across: 100 * 10/360 * 1.4 ~= 3.9 px.
        screen = pygame.Surface((200, 150))
        renderer.draw(screen, [Marker(-170.0, 0.0, "")])
        assert pixel(screen, (4, 75)) == (255, 0, 0)
        # The next copy starts one scaled map width (140 px) to the right.
        assert pixel(screen, (144, 75)) == (255, 0, 0)

    def test_marker_label_is_rendered(self, renderer):
        screen = pygame.Surface((200, 150))
        renderer.draw(screen, [Marker(0.0, 0.0, "Null Island")])
        assert count_color(screen, (0, 0, 0)) > 0

    def test_nothing_to_draw_without_asset(self, viewport):
        renderer = MapRenderer(viewport)
        screen = pygame.Surface((200, 150))
        assert not renderer.draw(screen)
        assert pixel(screen, (70, 75)) == WHITE

    def test_empty_asset_disables_drawing(self, viewport):
        renderer = MapRenderer(viewport)
        renderer.set_asset(MapAsset.empty())
        assert renderer.backdrop is None
        assert not renderer.draw(pygame.Surface((200, 150)))

    def test_smoothing_is_off_by_default(self, renderer):
        assert renderer.smoothing is False
        renderer.smoothing = True
        screen = pygame.Surface((200, 150))
        assert renderer.draw(screen)
        assert pixel(screen, (70, 75)) == LAND

    def test_only_the_visible_part_is_scaled(self, renderer, viewport, monkeypatch):
        sizes = []
        original_scale = pygame.transform.scale

        def recording_scale(surface, size):
            sizes.append(size)
            return original_scale(surface, size)

        monkeypatch.setattr(pygame.transform, "scale", recording_scale)
        viewport.state.scale = viewport.state.max_scale
        viewport.constrain_vertical_pan()
        pixel_scale = viewport.layout().pixel_scale

        assert renderer.draw(pygame.Surface((200, 150)))
        assert sizes
        for width, height in sizes:
            assert width <= 200 + 2 * pixel_scale + 1
            assert height <= 150 + 2 * pixel_scale + 1
