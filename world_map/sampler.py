# world_map/sampler.py

"""
================================================================================
SVG TERRAIN SAMPLER
================================================================================
This module turns a labelled vector map document into everything the map
renderer needs: randomly placed terrain points for each category, the icon
glyphs used to draw them, and a minimal backdrop containing only the
continents silhouette.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Overrides for the defaults in `world_map.config`.
      Recognised keys: 'seed', 'budgets' ({label: count}), 'area_samples',
      'max_attempts', 'curve_segments', 'continents_path_id'.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - MapAsset: immutable result of one load.
- Side Effects: Logs messages using the provided logger.
- Invariants:
    - Every generated point passes the inside test of the path it came from.
    - Sampling a path never takes more than `max_attempts` draws.
    - A document that cannot be read or parsed yields MapAsset.empty().
================================================================================
"""
import logging
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

import numpy as np

from . import colors
from . import config as DEFAULTS
from .svg_path import PathGeometry, PathSyntaxError, parse_path, rasterize
from .terrain import IconDescriptor, TerrainCategory, TerrainPoint

_LABEL_ATTRIBUTE = f"{{{DEFAULTS.INKSCAPE_NAMESPACE}}}label"
_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_STYLE_FILL = re.compile(r"(?:^|;)\s*fill\s*:\s*([^;]+)")


@dataclass(frozen=True, eq=False)
class MapAsset:
    """Result of loading a map document. Never mutated after creation."""
    image_width: float
    image_height: float
    continents: PathGeometry | None = None
    icons: dict = field(default_factory=dict)
    points: dict = field(default_factory=dict)
    # Purged SVG text for export; drawing uses backdrop_mask.
    backdrop_document: str | None = None
    backdrop_mask: np.ndarray | None = None
    land_color: tuple = DEFAULTS.DEFAULT_LAND_COLOR

    @classmethod
    def empty(cls) -> "MapAsset":
        return cls(DEFAULTS.DEFAULT_IMAGE_WIDTH, DEFAULTS.DEFAULT_IMAGE_HEIGHT)

    @property
    def has_backdrop(self) -> bool:
        return self.backdrop_mask is not None

    def points_for(self, category: TerrainCategory) -> tuple:
        return self.points.get(category, ())

    def point_count(self) -> int:
        return sum(len(points) for points in self.points.values())


# --- Element helpers ---
def _local_name(tag) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _label(element: ET.Element) -> str | None:
    return element.get(_LABEL_ATTRIBUTE)


def _groups(element: ET.Element):
    return (e for e in element.iter() if _local_name(e.tag) == "g")


def _paths(element: ET.Element):
    return (e for e in element.iter() if _local_name(e.tag) == "path")


def _parse_length(value: str | None) -> float | None:
    if not value:
        return None
    match = _LEADING_NUMBER.match(value)
    if not match or value.strip().endswith("%"):
        return None
    length = float(match.group(1))
    return length if length > 0 else None


def document_size(root: ET.Element) -> tuple:
    """Width and height from the root attributes, then the viewBox, then defaults."""
    width = _parse_length(root.get("width"))
    height = _parse_length(root.get("height"))
    view_box = root.get("viewBox")
    if (width is None or height is None) and view_box:
        parts = [p for p in re.split(r"[\s,]+", view_box.strip()) if p]
        if len(parts) == 4:
            try:
                width = width or float(parts[2])
                height = height or float(parts[3])
            except ValueError:
                pass
    return width or DEFAULTS.DEFAULT_IMAGE_WIDTH, height or DEFAULTS.DEFAULT_IMAGE_HEIGHT


class TerrainSampler:
    """
    Loads a map document and samples terrain points for every category.
    This class is backend-only and does not handle any visualization.
    """

    def __init__(self, config: dict, logger: logging.Logger):
        """
        Initializes the sampler.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
        """
        self.logger = logger
        self.user_config = config or {}

        # --- Consolidate Configuration ---
        budgets = self.user_config.get('budgets', {})
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SAMPLING_SEED),
            'area_samples': self.user_config.get('area_samples', DEFAULTS.AREA_SAMPLE_COUNT),
            'max_attempts': self.user_config.get('max_attempts', DEFAULTS.MAX_SAMPLING_ATTEMPTS),
            'batch_size': self.user_config.get('batch_size', DEFAULTS.SAMPLING_BATCH_SIZE),
            'curve_segments': self.user_config.get('curve_segments', DEFAULTS.CURVE_SEGMENTS),
            'continents_path_id': self.user_config.get('continents_path_id', DEFAULTS.CONTINENTS_PATH_ID),
            'budgets': {
                category: int(budgets.get(category.label, category.default_budget))
                for category in TerrainCategory
            },
        }
        self.rng = np.random.default_rng(self.settings['seed'])

    # --- Public API ---
    def load(self, path: str) -> MapAsset:
        """Reads and samples a document from disk. Failures yield an empty asset."""
        self.logger.info(f"Loading map document: '{path}'")
        try:
            tree = ET.parse(path)
        except (OSError, ET.ParseError) as e:
            self.logger.error(f"Failed to load map document '{path}': {e}")
            return MapAsset.empty()
        return self.sample_document(tree.getroot())

    def load_string(self, text: str) -> MapAsset:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            self.logger.error(f"Failed to parse map document: {e}")
            return MapAsset.empty()
        return self.sample_document(root)

    def sample_document(self, root: ET.Element) -> MapAsset:
        """
        Extracts icons and the continents path, samples every category, then
        purges the document down to the backdrop. The root is modified in place.
        """
        try:
            return self._sample_document(root)
        except (ValueError, TypeError) as e:
            self.logger.exception(f"Failed to process map document: {e}")
            return MapAsset.empty()

    def _sample_document(self, root: ET.Element) -> MapAsset:
        requested_points = sum(self.settings['budgets'].values())
        width, height = document_size(root)
        self.logger.debug(f"Document size: {width}x{height}")

        continents_element = self._find_continents_path(root)
        continents = self._safe_parse(continents_element) if continents_element is not None else None
        if continents is None:
            self.logger.warning(f"Continents path '{self.settings['continents_path_id']}' not found.")

        icons, icon_elements = self._extract_icons(root)

        points = {}
        for category in TerrainCategory.in_draw_order():
            layer = self.find_category_layer(root, category.label)
            if layer is None:
                self.logger.warning(f"Could not find layer: {category.label}")
                continue
            points[category] = tuple(self._sample_layer(layer, category, width, height))
            self.logger.info(f"Generated {len(points[category])} {category.label} points.")

        self.logger.debug(f"Requested {requested_points} points in total.")

        backdrop_document = self._purge(root, continents_element, icon_elements)
        mask = rasterize(continents, math.ceil(width), math.ceil(height)) if continents is not None else None

        return MapAsset(
            image_width=width,
            image_height=height,
            continents=continents,
            icons=icons,
            points=points,
            backdrop_document=backdrop_document,
            backdrop_mask=mask,
            land_color=self._fill_color(continents_element),
        )

    # --- Layer lookup ---
    @staticmethod
    def find_layer(root: ET.Element, label: str) -> ET.Element | None:
        for group in _groups(root):
            if _label(group) == label:
                return group
        return None

    @staticmethod
    def find_category_layer(root: ET.Element, label: str) -> ET.Element | None:
        """The first group with the label anywhere in the document, else one under the Terrains umbrella."""
        layer = TerrainSampler.find_layer(root, label)
        if layer is not None:
            return layer
        umbrella = TerrainSampler.find_layer(root, DEFAULTS.TERRAINS_LAYER_LABEL)
        if umbrella is not None:
            for group in _groups(umbrella):
                if group is not umbrella and _label(group) == label:
                    return group
        return None

    def _find_continents_path(self, root: ET.Element) -> ET.Element | None:
        for path in _paths(root):
            if path.get("id") == self.settings['continents_path_id']:
                return path
        return None

    def _extract_icons(self, root: ET.Element) -> tuple:
        icons = {}
        elements = []
        layer = self.find_layer(root, DEFAULTS.ICONS_LAYER_LABEL)
        if layer is None:
            self.logger.warning("No Icons layer found; terrain points will be drawn as circles.")
            return icons, elements

        for path in _paths(layer):
            label = _label(path) or path.get("id") or ""
            if not label.startswith(DEFAULTS.ICON_LABEL_PREFIX):
                continue
            elements.append(path)
            category = TerrainCategory.from_icon_key(label[len(DEFAULTS.ICON_LABEL_PREFIX):])
            geometry = self._safe_parse(path)
            if category is None or geometry is None or geometry.is_empty:
                continue
            icons[category] = IconDescriptor(category, geometry, geometry.center)
        self.logger.info(f"Loaded {len(icons)} terrain icons.")
        return icons, elements

    def _safe_parse(self, element: ET.Element) -> PathGeometry | None:
        d = element.get("d")
        if not d:
            return None
        try:
            return parse_path(d, self.settings['curve_segments'])
        except PathSyntaxError as e:
            self.logger.error(f"Skipping path '{element.get('id')}' with malformed data: {e}")
            return None

    # --- Sampling ---
    def _sampling_box(self, geometry: PathGeometry, width: float, height: float) -> tuple:
        x, y, w, h = geometry.bbox
        if w == 0 or h == 0:
            return 0.0, 0.0, width, height
        return x, y, w, h

    def _uniform_points(self, box: tuple, count: int) -> np.ndarray:
        x, y, w, h = box
        return np.column_stack([
            x + self.rng.random(count) * w,
            y + self.rng.random(count) * h,
        ])

    def estimate_area(self, geometry: PathGeometry, width: float, height: float) -> float:
        """Monte-Carlo area: inside fraction of uniform samples times the box area."""
        box = self._sampling_box(geometry, width, height)
        samples = self.settings['area_samples']
        inside = geometry.contains(self._uniform_points(box, samples))
        return box[2] * box[3] * (np.count_nonzero(inside) / samples)

    def allocate(self, areas: list, budget: int) -> list:
        """Points per path, proportional to area and never less than one."""
        total = sum(areas)
        allocations = []
        for area in areas:
            proportion = area / total if total > 0 else 1 / len(areas)
            allocations.append(max(1, math.floor(budget * proportion)))
        return allocations

    def sample_path(self, geometry: PathGeometry, count: int, width: float, height: float) -> np.ndarray:
        """Rejection-samples up to `count` points inside the geometry."""
        box = self._sampling_box(geometry, width, height)
        accepted = []
        found = 0
        attempts = 0
        max_attempts = self.settings['max_attempts']
        while found < count and attempts < max_attempts:
            batch = min(self.settings['batch_size'], max_attempts - attempts)
            candidates = self._uniform_points(box, batch)
            inside = np.flatnonzero(geometry.contains(candidates))
            if len(inside) > count - found:
                # Attempts stop at the draw that met the allocation.
                inside = inside[:count - found]
                attempts += int(inside[-1]) + 1
            else:
                attempts += batch
            accepted.append(candidates[inside])
            found += len(inside)
        return np.vstack(accepted) if accepted else np.empty((0, 2))

    def _sample_layer(self, layer: ET.Element, category: TerrainCategory, width: float, height: float) -> list:
        path_elements = list(_paths(layer))
        if not path_elements:
            return []

        geometries = [self._safe_parse(element) for element in path_elements]
        areas = [
            self.estimate_area(geometry, width, height) if geometry is not None and not geometry.is_empty else 0.0
            for geometry in geometries
        ]
        allocations = self.allocate(areas, self.settings['budgets'][category])

        points = []
        for geometry, allocation in zip(geometries, allocations):
            if geometry is None or geometry.is_empty:
                continue
            sampled = self.sample_path(geometry, allocation, width, height)
            if len(sampled) < allocation:
                self.logger.debug(
                    f"{category.label}: placed {len(sampled)}/{allocation} points before giving up."
                )
            points.extend(TerrainPoint(float(x), float(y), category) for x, y in sampled)
        return points

    # --- Backdrop ---
    def _purge(self, root: ET.Element, continents: ET.Element | None, icon_elements: list) -> str:
        """Removes everything except the continents path and the icon paths."""
        keep_labels = {DEFAULTS.ICONS_LAYER_LABEL, DEFAULTS.CONTINENTS_LAYER_LABEL}
        parents = {child: parent for parent in root.iter() for child in parent}

        kept_paths = set(map(id, icon_elements))
        if continents is not None:
            kept_paths.add(id(continents))

        def contains_kept_path(group):
            return any(id(e) in kept_paths for e in group.iter())

        for group in list(_groups(root)):
            if group not in parents:
                continue
            if _label(group) in keep_labels or contains_kept_path(group):
                continue
            parents[group].remove(group)
            parents.pop(group)

        parents = {child: parent for parent in root.iter() for child in parent}
        for path in list(_paths(root)):
            if id(path) not in kept_paths and path in parents:
                parents[path].remove(path)
        return ET.tostring(root, encoding="unicode")

    def _fill_color(self, element: ET.Element | None) -> tuple:
        if element is None:
            return DEFAULTS.DEFAULT_LAND_COLOR
        fill = element.get("fill")
        style_match = _STYLE_FILL.search(element.get("style") or "")
        if style_match:
            fill = style_match.group(1).strip()
        if fill:
            try:
                return colors.parse_rgb(fill)
            except colors.ColorFormatError:
                self.logger.debug(f"Unsupported continents fill '{fill}', using default land color.")
        return DEFAULTS.DEFAULT_LAND_COLOR
