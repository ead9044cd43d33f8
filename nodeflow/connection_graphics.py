"""Scene-side state and geometry of a connection between two node ports."""

from __future__ import annotations

import enum
from typing import Any, Protocol

from nodeflow.connection_style import current_connection_style
from nodeflow.geometry import AbstractNodeGeometry, Point, Rect
from nodeflow.graph_model import (
    INVALID_NODE_ID,
    AbstractGraphModel,
    ConnectionId,
    NodeId,
    PortType,
    get_node_id,
    get_port_index,
    opposite_port,
)

_DEFAULT_OFFSET = 200.0


class Orientation(enum.Enum):
    """Direction in which data flows across the scene."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class _Scene(Protocol):
    graph_model: AbstractGraphModel
    node_geometry: AbstractNodeGeometry
    orientation: Orientation

    def node_item(self, node_id: NodeId) -> Any: ...


class ConnectionState:
    """Hover state of a connection and the node it was last dragged over."""

    def __init__(self, item: "ConnectionItem") -> None:
        self._item = item
        self.hovered = False
        self.last_hovered_node: NodeId | None = INVALID_NODE_ID

    def required_port(self) -> PortType:
        """The side still missing its node, or NONE when complete."""
        cid = self._item.connection_id
        if cid.out_node_id is INVALID_NODE_ID:
            return PortType.OUT
        if cid.in_node_id is INVALID_NODE_ID:
            return PortType.IN
        return PortType.NONE

    def requires_port(self) -> bool:
        cid = self._item.connection_id
        return cid.out_node_id is INVALID_NODE_ID or cid.in_node_id is INVALID_NODE_ID

    def set_last_hovered_node(self, node_id: NodeId) -> None:
        self.last_hovered_node = node_id

    def reset_last_hovered_node(self) -> None:
        """Refresh the last hovered node and forget it."""
        if self.last_hovered_node is not INVALID_NODE_ID:
            node = self._item.scene.node_item(self.last_hovered_node)
            if node is not None:
                node.update()
        self.last_hovered_node = INVALID_NODE_ID


class ConnectionItem:
    """A connection placed in a scene; end points are relative to its position."""

    def __init__(self, scene: _Scene, connection_id: ConnectionId) -> None:
        self.scene = scene
        self.connection_id = connection_id
        self.graph_model = scene.graph_model
        self.state = ConnectionState(self)
        self.pos = Point()
        self.z_value = -1.0
        self.selected = False
        self._out = Point()
        self._in = Point()
        self.initialize_position()

    @property
    def out(self) -> Point:
        return self._out

    @property
    def in_(self) -> Point:
        return self._in

    def initialize_position(self) -> None:
        """Move a draft connection onto the port it hangs from, then place both ends."""
        required = self.state.required_port()
        if required is not PortType.NONE:
            attached = opposite_port(required)
            node_id = get_node_id(attached, self.connection_id)
            node = self.scene.node_item(node_id)
            if node is not None:
                self.pos = self.scene.node_geometry.port_scene_position(
                    node_id, attached, get_port_index(attached, self.connection_id), node.pos
                )
        self.move()

    def end_point(self, port_type: PortType) -> Point:
        if port_type is PortType.NONE:
            raise ValueError("a connection has no end point of port type NONE")
        return self._out if port_type is PortType.OUT else self._in

    def set_end_point(self, port_type: PortType, point: Point) -> None:
        if port_type is PortType.IN:
            self._in = point
        else:
            self._out = point

    def move(self) -> None:
        """Snap each attached end onto its node's port."""
        for port_type in (PortType.OUT, PortType.IN):
            node_id = get_node_id(port_type, self.connection_id)
            if node_id is INVALID_NODE_ID:
                continue
            node = self.scene.node_item(node_id)
            if node is None:
                continue
            scene_pos = self.scene.node_geometry.port_scene_position(
                node_id, port_type, get_port_index(port_type, self.connection_id), node.pos
            )
            self.set_end_point(port_type, scene_pos - self.pos)

    def bounding_rect(self) -> Rect:
        """Rectangle holding both ends and both control points, padded for the end circles."""
        c1, c2 = self.points_c1c2()
        common = (
            Rect.from_points(self._out, self._in)
            .normalized()
            .united(Rect.from_points(c1, c2).normalized())
        )
        diam = current_connection_style().point_diameter
        return Rect(common.x - diam, common.y - diam, common.width + 3 * diam, common.height + 3 * diam)

    def points_c1c2(self) -> tuple[Point, Point]:
        if self.scene.orientation is Orientation.VERTICAL:
            return self.points_c1c2_vertical()
        return self.points_c1c2_horizontal()

    def points_c1c2_horizontal(self) -> tuple[Point, Point]:
        x_distance = self._in.x - self._out.x
        horizontal = min(_DEFAULT_OFFSET, abs(x_distance))
        vertical = 0.0
        ratio = 0.5
        if x_distance <= 0:
            y_distance = self._in.y - self._out.y + 20
            direction = -1.0 if y_distance < 0 else 1.0
            vertical = min(_DEFAULT_OFFSET, abs(y_distance)) * direction
            ratio = 1.0
        horizontal *= ratio
        return (
            Point(self._out.x + horizontal, self._out.y + vertical),
            Point(self._in.x - horizontal, self._in.y - vertical),
        )

    def points_c1c2_vertical(self) -> tuple[Point, Point]:
        y_distance = self._in.y - self._out.y
        vertical = min(_DEFAULT_OFFSET, abs(y_distance))
        horizontal = 0.0
        ratio = 0.5
        if y_distance <= 0:
            x_distance = self._in.x - self._out.x + 20
            direction = -1.0 if x_distance < 0 else 1.0
            horizontal = min(_DEFAULT_OFFSET, abs(x_distance)) * direction
            ratio = 1.0
        vertical *= ratio
        return (
            Point(self._out.x + horizontal, self._out.y + vertical),
            Point(self._in.x - horizontal, self._in.y - vertical),
        )