# world_map/svg_path.py

"""
================================================================================
SVG PATH GEOMETRY
================================================================================
This module reads the SVG path mini-language (the `d` attribute) and turns it
into flattened polylines that can be hit-tested and rasterized with NumPy.

Data Contract:
---------------
- Inputs:
    - d (str): Path data using any of M, L, H, V, C, S, Q, T, A, Z in their
      absolute (upper case) and relative (lower case) forms.
- Outputs:
    - PathGeometry: one (N, 2) float array per subpath plus closed flags.
- Invariants:
    - Hit-testing and rasterizing use the non-zero winding rule and treat
      every subpath as implicitly closed, which is how a fill behaves.
    - Curves and arcs are approximated with a fixed number of segments.
================================================================================
"""
import math
import re

import numpy as np

from . import config as DEFAULTS

_COMMAND_CHARS = "MmLlHhVvCcSsQqTtAaZz"
_NUMBER_PATTERN = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_SEPARATOR_PATTERN = re.compile(r"[\s,]*")


class PathSyntaxError(ValueError):
    """Raised for path data that does not follow the SVG path grammar."""


class PathGeometry:
    """Flattened path: a list of subpath polylines in document coordinates."""

    def __init__(self, subpaths: list, closed: list):
        self.subpaths = subpaths
        self.closed = closed
        self._edges = None

    @property
    def is_empty(self) -> bool:
        return not any(len(subpath) for subpath in self.subpaths)

    @property
    def bbox(self) -> tuple:
        """Bounding box as (x, y, width, height); all zeros when empty."""
        if self.is_empty:
            return 0.0, 0.0, 0.0, 0.0
        vertices = np.vstack([s for s in self.subpaths if len(s)])
        min_x, min_y = vertices.min(axis=0)
        max_x, max_y = vertices.max(axis=0)
        return float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y)

    @property
    def center(self) -> tuple:
        x, y, w, h = self.bbox
        return x + w / 2, y + h / 2

    def edges(self) -> np.ndarray:
        """All fill edges as an (E, 4) array of x0, y0, x1, y1."""
        if self._edges is None:
            parts = []
            for subpath in self.subpaths:
                if len(subpath) < 2:
                    continue
                ends = np.roll(subpath, -1, axis=0)
                parts.append(np.hstack([subpath, ends]))
            self._edges = np.vstack(parts) if parts else np.empty((0, 4))
        return self._edges

    def contains(self, points, chunk_cells: int = DEFAULTS.CONTAINS_CHUNK_CELLS) -> np.ndarray:
        """
        Point-in-path test for an (M, 2) array of points.

        Work is split into chunks so that at most `chunk_cells` point/edge
        pairs are evaluated at once.
        """
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        edges = self.edges()
        result = np.zeros(len(points), dtype=bool)
        if len(edges) == 0 or len(points) == 0:
            return result

        x0, y0, x1, y1 = (edges[:, i][np.newaxis, :] for i in range(4))
        rows = max(1, chunk_cells // len(edges))
        for start in range(0, len(points), rows):
            px = points[start:start + rows, 0:1]
            py = points[start:start + rows, 1:2]
            is_left = (x1 - x0) * (py - y0) - (px - x0) * (y1 - y0)
            upward = (y0 <= py) & (py < y1) & (is_left > 0)
            downward = (y1 <= py) & (py < y0) & (is_left < 0)
            winding = upward.sum(axis=1) - downward.sum(axis=1)
            result[start:start + rows] = winding != 0
        return result

    def translated(self, dx: float, dy: float, scale: float = 1.0) -> list:
        """Returns the subpaths as new arrays, scaled about the origin then shifted."""
        return [subpath * scale + (dx, dy) for subpath in self.subpaths]


class _PathScanner:
    """Reads commands, numbers and arc flags from path data."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def _skip_separators(self):
        self.pos = _SEPARATOR_PATTERN.match(self.text, self.pos).end()

    def at_end(self) -> bool:
        self._skip_separators()
        return self.pos >= len(self.text)

    def peek_command(self) -> str | None:
        self._skip_separators()
        if self.pos < len(self.text) and self.text[self.pos] in _COMMAND_CHARS:
            return self.text[self.pos]
        return None

    def read_command(self) -> str:
        command = self.peek_command()
        if command is None:
            raise PathSyntaxError(f"Expected a path command at offset {self.pos}")
        self.pos += 1
        return command

    def read_number(self) -> float:
        self._skip_separators()
        match = _NUMBER_PATTERN.match(self.text, self.pos)
        if not match:
            raise PathSyntaxError(f"Expected a number at offset {self.pos}")
        self.pos = match.end()
        return float(match.group())

    def read_flag(self) -> bool:
        self._skip_separators()
        if self.pos >= len(self.text) or self.text[self.pos] not in "01":
            raise PathSyntaxError(f"Expected an arc flag at offset {self.pos}")
        flag = self.text[self.pos] == "1"
        self.pos += 1
        return flag


class _PathBuilder:
    """Accumulates flattened subpaths while the parser walks the commands."""

    def __init__(self, segments: int):
        self.segments = max(1, int(segments))
        self.subpaths = []
        self.closed = []
        self.x = 0.0
        self.y = 0.0
        self._start = (0.0, 0.0)
        self._points = None
        # Kind and position of the previous curve's last control point,
        # needed to reflect it for S and T.
        self.last_kind = None
        self.last_control = None

    def _append(self, points):
        if self._points is None:
            self._points = [np.array([[self.x, self.y]])]
        self._points.append(np.asarray(points, dtype=float).reshape(-1, 2))
        self.x, self.y = self._points[-1][-1]

    def _finish(self, closed: bool):
        if self._points is not None:
            self.subpaths.append(np.vstack(self._points))
            self.closed.append(closed)
        self._points = None

    def move_to(self, x: float, y: float):
        self._finish(closed=False)
        self.x, self.y = x, y
        self._start = (x, y)
        self._points = [np.array([[x, y]])]
        self.last_kind = None

    def line_to(self, x: float, y: float):
        self._append([x, y])
        self.last_kind = None

    def cubic_to(self, c1: tuple, c2: tuple, end: tuple):
        t = np.linspace(0.0, 1.0, self.segments + 1)[1:, np.newaxis]
        p0 = np.array([self.x, self.y])
        points = ((1 - t) ** 3) * p0 + 3 * ((1 - t) ** 2) * t * np.array(c1) \
            + 3 * (1 - t) * (t ** 2) * np.array(c2) + (t ** 3) * np.array(end)
        points[-1] = end
        self._append(points)
        self.last_kind, self.last_control = "C", c2

    def quad_to(self, c: tuple, end: tuple):
        t = np.linspace(0.0, 1.0, self.segments + 1)[1:, np.newaxis]
        p0 = np.array([self.x, self.y])
        points = ((1 - t) ** 2) * p0 + 2 * (1 - t) * t * np.array(c) + (t ** 2) * np.array(end)
        points[-1] = end
        self._append(points)
        self.last_kind, self.last_control = "Q", c

    def reflected_control(self, kind: str) -> tuple:
        """Control point for a smooth curve: the reflection of the previous one, or the current point."""
        if self.last_kind == kind:
            return 2 * self.x - self.last_control[0], 2 * self.y - self.last_control[1]
        return self.x, self.y

    def arc_to(self, rx, ry, rotation, large_arc, sweep, x, y):
        points = _flatten_arc(self.x, self.y, rx, ry, rotation, large_arc, sweep, x, y, self.segments)
        if len(points):
            self._append(points)
        self.last_kind = None

    def close(self):
        if self._points is not None:
            self._finish(closed=True)
        self.x, self.y = self._start
        self.last_kind = None

    def geometry(self) -> PathGeometry:
        self._finish(closed=False)
        return PathGeometry(self.subpaths, self.closed)


def _vector_angle(ux, uy, vx, vy) -> float:
    return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)


def _flatten_arc(x1, y1, rx, ry, rotation, large_arc, sweep, x2, y2, segments) -> np.ndarray:
    """Endpoint-to-center arc conversion (SVG implementation notes, F.6.5)."""
    if (x1, y1) == (x2, y2):
        return np.empty((0, 2))
    rx, ry = abs(rx), abs(ry)
    if rx == 0 or ry == 0:
        return np.array([[x2, y2]])

    phi = math.radians(rotation % 360)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    dx2, dy2 = (x1 - x2) / 2, (y1 - y2) / 2
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    # Scale radii up when they cannot span the endpoints.
    radii_check = (x1p ** 2) / (rx ** 2) + (y1p ** 2) / (ry ** 2)
    if radii_check > 1:
        rx *= math.sqrt(radii_check)
        ry *= math.sqrt(radii_check)

    numerator = rx ** 2 * ry ** 2 - rx ** 2 * y1p ** 2 - ry ** 2 * x1p ** 2
    denominator = rx ** 2 * y1p ** 2 + ry ** 2 * x1p ** 2
    coefficient = math.sqrt(max(0.0, numerator / denominator)) if denominator else 0.0
    if large_arc == sweep:
        coefficient = -coefficient
    cxp = coefficient * rx * y1p / ry
    cyp = -coefficient * ry * x1p / rx
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    ux, uy = (x1p - cxp) / rx, (y1p - cyp) / ry
    vx, vy = (-x1p - cxp) / rx, (-y1p - cyp) / ry
    theta1 = _vector_angle(1.0, 0.0, ux, uy)
    delta = _vector_angle(ux, uy, vx, vy)
    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi

    t = theta1 + delta * np.linspace(0.0, 1.0, segments + 1)[1:]
    xs = cx + rx * cos_phi * np.cos(t) - ry * sin_phi * np.sin(t)
    ys = cy + rx * sin_phi * np.cos(t) + ry * cos_phi * np.sin(t)
    points = np.column_stack([xs, ys])
    points[-1] = (x2, y2)
    return points


def parse_path(d: str, segments: int = DEFAULTS.CURVE_SEGMENTS) -> PathGeometry:
    """
    Parses SVG path data into a flattened PathGeometry.

    Raises:
        PathSyntaxError: if the data is not valid path syntax.
    """
    scanner = _PathScanner(d or "")
    builder = _PathBuilder(segments)
    command = None

    while not scanner.at_end():
        if scanner.peek_command():
            is_first = command is None
            command = scanner.read_command()
            if is_first and command not in "Mm":
                raise PathSyntaxError("Path data must begin with a moveto command")
        elif command is None or command in "Zz":
            raise PathSyntaxError(f"Unexpected data at offset {scanner.pos}")

        upper = command.upper()
        relative = command.islower()
        ox, oy = (builder.x, builder.y) if relative else (0.0, 0.0)

        if upper == "Z":
            builder.close()
        elif upper == "M":
            builder.move_to(scanner.read_number() + ox, scanner.read_number() + oy)
            # Further coordinate pairs are implicit linetos.
            command = "l" if relative else "L"
        elif upper == "L":
            builder.line_to(scanner.read_number() + ox, scanner.read_number() + oy)
        elif upper == "H":
            builder.line_to(scanner.read_number() + ox, builder.y)
        elif upper == "V":
            builder.line_to(builder.x, scanner.read_number() + oy)
        elif upper == "C":
            c1 = (scanner.read_number() + ox, scanner.read_number() + oy)
            c2 = (scanner.read_number() + ox, scanner.read_number() + oy)
            end = (scanner.read_number() + ox, scanner.read_number() + oy)
            builder.cubic_to(c1, c2, end)
        elif upper == "S":
            c1 = builder.reflected_control("C")
            c2 = (scanner.read_number() + ox, scanner.read_number() + oy)
            end = (scanner.read_number() + ox, scanner.read_number() + oy)
            builder.cubic_to(c1, c2, end)
        elif upper == "Q":
            c = (scanner.read_number() + ox, scanner.read_number() + oy)
            end = (scanner.read_number() + ox, scanner.read_number() + oy)
            builder.quad_to(c, end)
        elif upper == "T":
            c = builder.reflected_control("Q")
            end = (scanner.read_number() + ox, scanner.read_number() + oy)
            builder.quad_to(c, end)
        elif upper == "A":
            rx = scanner.read_number()
            ry = scanner.read_number()
            rotation = scanner.read_number()
            large_arc = scanner.read_flag()
            sweep = scanner.read_flag()
            x = scanner.read_number() + ox
            y = scanner.read_number() + oy
            builder.arc_to(rx, ry, rotation, large_arc, sweep, x, y)

    return builder.geometry()


def rasterize(geometry: PathGeometry, width: int, height: int) -> np.ndarray:
    """
    Scanline fill of a geometry at pixel centers.

    Returns:
        np.ndarray: Boolean mask of shape (height, width).
    """
    width, height = int(width), int(height)
    mask = np.zeros((height, width), dtype=bool)
    edges = geometry.edges()
    if len(edges) == 0 or width <= 0 or height <= 0:
        return mask

    x0, y0, x1, y1 = edges.T
    pixel_x = np.arange(width) + 0.5
    for row in range(height):
        py = row + 0.5
        upward = (y0 <= py) & (py < y1)
        downward = (y1 <= py) & (py < y0)
        crossing = upward | downward
        if not np.any(crossing):
            continue
        cx0, cy0, cx1, cy1 = x0[crossing], y0[crossing], x1[crossing], y1[crossing]
        xs = cx0 + (py - cy0) * (cx1 - cx0) / (cy1 - cy0)
        directions = np.where(upward[crossing], 1, -1)

        order = np.argsort(xs)
        xs = xs[order]
        # Winding at a pixel is the sum of directions of crossings to its right.
        suffix = np.append(np.cumsum(directions[order][::-1])[::-1], 0)
        winding = suffix[np.searchsorted(xs, pixel_x, side="right")]
        mask[row] = winding != 0
    return mask
