"""Shared fixtures for the world map tests."""

import logging
import os

# pygame must never open a real window during tests.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from world_map.sampler import TerrainSampler


MINIMAL_SVG = """<svg xmlns="http://www.w3.org/2000/svg"
     xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"
     width="100" height="50" viewBox="0 0 100 50">
  <g inkscape:label="Continents" id="layer_continents">
    <path id="path1" d="M 10 10 L 90 10 L 90 40 L 10 40 Z" style="fill:#336633;stroke:none"/>
  </g>
  <g inkscape:label="Icons" id="layer_icons">
    <path inkscape:label="icon_tree" id="icon_tree" d="M 0 0 L 15 15 M 15 0 L 0 15"/>
  </g>
  <g inkscape:label="Forest" id="layer_forest">
    <path id="forest_1" d="M 20 20 L 40 20 L 40 30 L 20 30 Z"/>
  </g>
  <g inkscape:label="Terrains" id="layer_terrains">
    <g inkscape:label="City" id="layer_city">
      <path id="city_1" d="M 60 15 L 80 15 L 80 35 L 60 35 Z"/>
    </g>
  </g>
  <g inkscape:label="Labels" id="layer_labels">
    <path id="decoration" d="M 0 0 L 5 5"/>
  </g>
</svg>
"""


@pytest.fixture(scope="session", autouse=True)
def pygame_headless():
    """Initialise pygame once with the dummy video driver."""
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture
def logger():
    return logging.getLogger("world_map.tests")


@pytest.fixture
def minimal_svg():
    return MINIMAL_SVG


@pytest.fixture
def sampler(logger):
    """A seeded sampler with small budgets for the minimal document."""
    return TerrainSampler(config={"seed": 7, "budgets": {"Forest": 10, "City": 5}}, logger=logger)


@pytest.fixture
def asset(sampler, minimal_svg):
    return sampler.load_string(minimal_svg)
