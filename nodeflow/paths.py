"""Cubic curves of connections, their hit strokes and arrow heads."""

from __future__ import annotations

import math
from bisect import bisect_left
from dataclasses import dataclass, field
from functools import cached_property

from nodeflow.connection_graphics import ConnectionItem
from nodeflow.geometry import Point
from nodeflow.graph_model import PortType

_SAMPLES = 256
STROKE_WIDTH = 10.0


@dataclass(frozen=True)
class CubicPath:
    """A cubic Bezier curve from start to end."""

    start: Point
    c1: Point
    c2: Point
    end: Point

    def point_at_percent(self, t: float) -> Point:
        if not 0.0 <= t <= 1.0:
            raise ValueError(f"percent must lie in [0, 1]: {t}")
        u = 1.0 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        return Point(
            a * self.start.x + b * self.c1.x + c * self.c2.x + d * self.end.x,
            a * self.start.y + b * self.c1.y + c * self.c2.y + d * self.end.y,
        )

    @cached_property
    def _cumulative(self) -> list[float]:
        points = [self.point_at_percent(i / _SAMPLES) for i in range(_SAMPLES + 1)]
        lengths = [0.0]
        for previous, current in zip(points, points[1:]):
            lengths.append(lengths[-1] + math.hypot(current.x - previous.x, current.y - previous.y))
        return lengths

    def length(self) -> float:
        return self._cumulative[-1]

    def percent_at_length(self, length: float) -> float:
        """Curve parameter at which the arc length from the start reaches length."""
        cumulative = self._cumulative
        if length <= 0:
            return 0.0
        if length >= cumulative[-1]:
            return 1.0
        i = bisect_left(cumulative, length)
        low, high = cumulative[i - 1], cumulative[i]
        fraction = (length - low) / (high - low) if high > low else 0.0
        return (i - 1 + fraction) / _SAMPLES


@dataclass(frozen=True)
class Stroke:
    """A polyline widened to a band, used to tell whether a point hits a connection."""

    points: tuple[Point, ...]
    width: float = field(default=STROKE_WIDTH)

    def contains(self, point: Point) -> bool:
        half = self.width / 2.0
        return any(
            _segment_distance(point, a, b) <= half for a, b in zip(self.points, self.points[1:])
        )


def _segment_distance(p: Point, a: Point, b: Point) -> float:
    ab = b - a
    denominator = ab.dot(ab)
    t = 0.0 if denominator == 0 else max(0.0, min(1.0, (p - a).dot(ab) / denominator))
    closest = a + ab * t
    return math.hypot(p.x - closest.x, p.y - closest.y)


def cubic_path(connection: ConnectionItem) -> CubicPath:
    """The curve from the connection's output end to its input end."""
    c1, c2 = connection.points_c1c2()
    return CubicPath(
        connection.end_point(PortType.OUT), c1, c2, connection.end_point(PortType.IN)
    )


def painter_stroke(connection: ConnectionItem, segments: int = 20) -> Stroke:
    """A band around the connection's curve approximated by line segments."""
    if segments < 1:
        raise ValueError("at least one segment is needed")
    cubic = cubic_path(connection)
    points = [connection.end_point(PortType.OUT)]
    points.extend(cubic.point_at_percent((i + 1) / segments) for i in range(segments))
    return Stroke(tuple(points))


def create_arrow_poly(
    path: CubicPath, radius: float, arrow_size: float, draw_in: bool
) -> tuple[Point, Point, Point]:
    """Triangle of an arrow head at the input end (draw_in) or the output end."""
    total = path.length()
    if draw_in:
        start_percent = path.percent_at_length(total - radius - arrow_size)
        end_percent = path.percent_at_length(total - radius)
    else:
        start_percent = path.percent_at_length(radius + arrow_size)
        end_percent = path.percent_at_length(radius)
    head_start = path.point_at_percent(start_percent)
    head_end = path.point_at_percent(end_percent)
    dx = head_end.x - head_start.x
    dy = head_end.y - head_start.y
    normal = Point(dy, -dx)
    return head_end, head_start + normal * 0.4, head_start - normal * 0.4