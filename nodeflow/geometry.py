"""Plane geometry primitives and the layout of nodes and their ports."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from nodeflow.graph_model import (
    INVALID_PORT_INDEX,
    AbstractGraphModel,
    NodeId,
    NodeRole,
    PortIndex,
    PortRole,
    PortType,
)


@dataclass(frozen=True)
class Point:
    """A point or vector in the plane."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y)

    def dot(self, other: "Point") -> float:
        return self.x * other.x + self.y * other.y


@dataclass(frozen=True)
class Size:
    """Width and height of a node."""

    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle given by its top-left corner and extent."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_points(cls, top_left: Point, bottom_right: Point) -> "Rect":
        return cls(top_left.x, top_left.y, bottom_right.x - top_left.x, bottom_right.y - top_left.y)

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def is_null(self) -> bool:
        return self.width == 0 and self.height == 0

    def contains(self, point: Point) -> bool:
        r = self.normalized()
        return r.left <= point.x <= r.right and r.top <= point.y <= r.bottom

    def normalized(self) -> "Rect":
        """Return the same area with non-negative width and height."""
        x, width = (self.x + self.width, -self.width) if self.width < 0 else (self.x, self.width)
        y, height = (self.y + self.height, -self.height) if self.height < 0 else (self.y, self.height)
        return Rect(x, y, width, height)

    def united(self, other: "Rect") -> "Rect":
        """Smallest rectangle holding both; a null rectangle contributes nothing."""
        if self.is_null():
            return other
        if other.is_null():
            return self
        a, b = self.normalized(), other.normalized()
        left = min(a.left, b.left)
        top = min(a.top, b.top)
        return Rect(left, top, max(a.right, b.right) - left, max(a.bottom, b.bottom) - top)

    def margins_added(self, left: float, top: float, right: float, bottom: float) -> "Rect":
        return Rect(self.x - left, self.y - top, self.width + left + right, self.height + top + bottom)


@dataclass(frozen=True)
class FontMetrics:
    """Metrics of a fixed-width font used to lay out captions."""

    char_width: int = 7
    height: int = 14

    def horizontal_advance(self, text: str) -> int:
        return len(text) * self.char_width

    def bounding_rect(self, text: str) -> Rect:
        if not text:
            return Rect()
        return Rect(0, 0, self.horizontal_advance(text), self.height)


DEFAULT_FONT_METRICS = FontMetrics(7, 14)
DEFAULT_BOLD_FONT_METRICS = FontMetrics(8, 14)


class AbstractNodeGeometry(ABC):
    """Places ports and captions of the nodes held by a graph model."""

    def __init__(self, graph_model: AbstractGraphModel, connection_point_diameter: float = 8.0):
        self.graph_model = graph_model
        self.connection_point_diameter = connection_point_diameter

    @abstractmethod
    def size(self, node_id: NodeId) -> Size:
        """Return the node's size."""

    @abstractmethod
    def port_position(self, node_id: NodeId, port_type: PortType, port_index: PortIndex) -> Point:
        """Return a port's position in node coordinates."""

    def bounding_rect(self, node_id: NodeId) -> Rect:
        """The node's rectangle grown by a fifth of its size on every side."""
        s = self.size(node_id)
        width_margin = int(s.width * 0.20)
        height_margin = int(s.height * 0.20)
        return Rect(0, 0, s.width, s.height).margins_added(
            width_margin, height_margin, width_margin, height_margin
        )

    def port_scene_position(
        self, node_id: NodeId, port_type: PortType, port_index: PortIndex, offset: Point
    ) -> Point:
        """Port position translated by the node's scene offset."""
        return self.port_position(node_id, port_type, port_index) + offset

    def check_port_hit(
        self, node_id: NodeId, port_type: PortType, node_point: Point
    ) -> PortIndex | None:
        """Index of the first port close to node_point, or None."""
        if port_type is PortType.NONE:
            return INVALID_PORT_INDEX
        tolerance = 2.0 * self.connection_point_diameter
        role = NodeRole.OUT_PORT_COUNT if port_type is PortType.OUT else NodeRole.IN_PORT_COUNT
        count = int(self.graph_model.node_data(node_id, role) or 0)
        for port_index in range(count):
            diff = self.port_position(node_id, port_type, port_index) - node_point
            if math.sqrt(diff.dot(diff)) < tolerance:
                return port_index
        return INVALID_PORT_INDEX


class HorizontalNodeGeometry(AbstractNodeGeometry):
    """Inputs on the left edge, outputs on the right, caption on top."""

    def __init__(
        self,
        graph_model: AbstractGraphModel,
        font_metrics: FontMetrics = DEFAULT_FONT_METRICS,
        bold_font_metrics: FontMetrics = DEFAULT_BOLD_FONT_METRICS,
        connection_point_diameter: float = 8.0,
    ) -> None:
        super().__init__(graph_model, connection_point_diameter)
        self.font_metrics = font_metrics
        self.bold_font_metrics = bold_font_metrics
        self.port_size = font_metrics.height
        self.port_spacing = 10

    def _embedded_widget(self, node_id: NodeId) -> Any:
        if not self.graph_model.node_data(node_id, NodeRole.WIDGET_EMBEDDABLE):
            return None
        return self.graph_model.node_data(node_id, NodeRole.WIDGET)

    def size(self, node_id: NodeId) -> Size:
        value = self.graph_model.node_data(node_id, NodeRole.SIZE)
        if not value:
            return Size()
        width, height = value
        return Size(int(width), int(height))

    def recompute_size(self, node_id: NodeId) -> None:
        """Compute the node's size from its ports, caption and widget and store it."""
        height = self.max_vertical_ports_extent(node_id)
        widget = self._embedded_widget(node_id)
        if widget is not None:
            height = max(height, int(widget.height))
        caption = self.caption_rect(node_id)
        height += int(caption.height)
        height += 2 * self.port_spacing

        width = (
            self.max_ports_text_advance(node_id, PortType.IN)
            + self.max_ports_text_advance(node_id, PortType.OUT)
            + 4 * self.port_spacing
        )
        if widget is not None:
            width += int(widget.width)
        width = max(width, int(caption.width) + 2 * self.port_spacing)
        self.graph_model.set_node_data(node_id, NodeRole.SIZE, (width, height))

    def port_position(self, node_id: NodeId, port_type: PortType, port_index: PortIndex) -> Point:
        step = self.port_size + self.port_spacing
        total_height = (
            self.caption_rect(node_id).height + self.port_spacing + step * port_index + step / 2.0
        )
        if port_type is PortType.IN:
            return Point(0.0, total_height)
        if port_type is PortType.OUT:
            return Point(float(self.size(node_id).width), total_height)
        return Point()

    def port_text_position(
        self, node_id: NodeId, port_type: PortType, port_index: PortIndex
    ) -> Point:
        p = self.port_position(node_id, port_type, port_index)
        rect = self.port_text_rect(node_id, port_type, port_index)
        y = p.y + rect.height / 4.0
        if port_type is PortType.IN:
            return Point(float(self.port_spacing), y)
        if port_type is PortType.OUT:
            return Point(self.size(node_id).width - self.port_spacing - rect.width, y)
        return Point(p.x, y)

    def caption_rect(self, node_id: NodeId) -> Rect:
        if not self.graph_model.node_data(node_id, NodeRole.CAPTION_VISIBLE):
            return Rect()
        name = self.graph_model.node_data(node_id, NodeRole.CAPTION) or ""
        return self.bold_font_metrics.bounding_rect(str(name))

    def caption_position(self, node_id: NodeId) -> Point:
        caption = self.caption_rect(node_id)
        return Point(
            0.5 * (self.size(node_id).width - caption.width),
            0.5 * self.port_spacing + caption.height,
        )

    def widget_position(self, node_id: NodeId) -> Point:
        """Top-left of the embedded widget; expanding widgets sit right under the caption."""
        widget = self._embedded_widget(node_id)
        if widget is None:
            return Point()
        caption_height = int(self.caption_rect(node_id).height * 2)
        x = 2.0 * self.port_spacing + self.max_ports_text_advance(node_id, PortType.IN)
        if getattr(widget, "expanding", False):
            return Point(x, float(caption_height))
        return Point(x, (caption_height + self.size(node_id).height - widget.height) / 2.0)

    def resize_handle_rect(self, node_id: NodeId) -> Rect:
        s = self.size(node_id)
        return Rect(s.width - self.port_spacing, s.height - self.port_spacing, 7, 7)

    def _port_caption(self, node_id: NodeId, port_type: PortType, port_index: PortIndex) -> str:
        if self.graph_model.port_data(node_id, port_type, port_index, PortRole.CAPTION_VISIBLE):
            return str(
                self.graph_model.port_data(node_id, port_type, port_index, PortRole.CAPTION) or ""
            )
        return ""

    def port_text_rect(self, node_id: NodeId, port_type: PortType, port_index: PortIndex) -> Rect:
        return self.font_metrics.bounding_rect(self._port_caption(node_id, port_type, port_index))

    def max_vertical_ports_extent(self, node_id: NodeId) -> int:
        n_in = int(self.graph_model.node_data(node_id, NodeRole.IN_PORT_COUNT) or 0)
        n_out = int(self.graph_model.node_data(node_id, NodeRole.OUT_PORT_COUNT) or 0)
        return (self.port_size + self.port_spacing) * max(n_in, n_out)

    def max_ports_text_advance(self, node_id: NodeId, port_type: PortType) -> int:
        role = NodeRole.OUT_PORT_COUNT if port_type is PortType.OUT else NodeRole.IN_PORT_COUNT
        count = int(self.graph_model.node_data(node_id, role) or 0)
        return max(
            (
                self.font_metrics.horizontal_advance(self._port_caption(node_id, port_type, i))
                for i in range(count)
            ),
            default=0,
        )