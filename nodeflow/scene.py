"""Scenes that mirror a graph model with node and connection items."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

from nodeflow.connection_graphics import ConnectionItem, Orientation
from nodeflow.data_flow_model import DataFlowGraphModel
from nodeflow.geometry import HorizontalNodeGeometry, Point
from nodeflow.graph_model import (
    AbstractGraphModel,
    ConnectionId,
    NodeId,
    NodeRole,
    PortType,
    Signal,
    get_node_id,
)

GeometryFactory = Callable[[AbstractGraphModel, Orientation], HorizontalNodeGeometry]

FLOW_SUFFIX = ".flow"


def _default_geometry(model: AbstractGraphModel, orientation: Orientation) -> HorizontalNodeGeometry:
    return HorizontalNodeGeometry(model)


def _position_of(model: AbstractGraphModel, node_id: NodeId) -> Point:
    value = model.node_data(node_id, NodeRole.POSITION)
    if not value:
        return Point()
    x, y = value
    return Point(float(x), float(y))


class NodeItem:
    """A node placed in a scene."""

    def __init__(self, scene: "BasicScene", node_id: NodeId) -> None:
        self.scene = scene
        self.node_id = node_id
        self.selected = False
        self.update_count = 0
        self.pos = _position_of(scene.graph_model, node_id)
        scene.node_geometry.recompute_size(node_id)

    def update(self) -> None:
        """Mark the item as needing a repaint."""
        self.update_count += 1

    def move_connections(self) -> None:
        """Re-anchor every connection attached to this node."""
        for connection_id in self.scene.graph_model.all_connection_ids(self.node_id):
            item = self.scene.connection_item(connection_id)
            if item is not None:
                item.move()


class BasicScene:
    """Keeps one item per node and per connection of a graph model in sync with it."""

    def __init__(
        self,
        graph_model: AbstractGraphModel,
        geometry_factory: GeometryFactory | None = None,
    ) -> None:
        self.graph_model = graph_model
        self._geometry_factory = geometry_factory or _default_geometry
        self.orientation = Orientation.HORIZONTAL
        self.node_geometry = self._geometry_factory(graph_model, self.orientation)
        self._node_items: dict[NodeId, NodeItem] = {}
        self._connection_items: dict[ConnectionId, ConnectionItem] = {}
        self._draft: ConnectionItem | None = None
        self._node_drag = False

        self.modified = Signal()
        self.node_moved = Signal()
        self.node_clicked = Signal()

        graph_model.connection_created.connect(self.on_connection_created)
        graph_model.connection_deleted.connect(self.on_connection_deleted)
        graph_model.node_created.connect(self.on_node_created)
        graph_model.node_deleted.connect(self.on_node_deleted)
        graph_model.node_position_updated.connect(self.on_node_position_updated)
        graph_model.node_updated.connect(self.on_node_updated)
        graph_model.model_reset.connect(self.on_model_reset)
        self.node_clicked.connect(self.on_node_clicked)

        self.traverse_graph_and_populate()

    @property
    def draft_connection(self) -> ConnectionItem | None:
        return self._draft

    def node_items(self) -> dict[NodeId, NodeItem]:
        return dict(self._node_items)

    def connection_items(self) -> dict[ConnectionId, ConnectionItem]:
        return dict(self._connection_items)

    def node_item(self, node_id: NodeId) -> NodeItem | None:
        return self._node_items.get(node_id)

    def connection_item(self, connection_id: ConnectionId) -> ConnectionItem | None:
        return self._connection_items.get(connection_id)

    def set_orientation(self, orientation: Orientation) -> None:
        """Switch the flow direction and rebuild all items."""
        if orientation is self.orientation:
            return
        self.orientation = orientation
        self.node_geometry = self._geometry_factory(self.graph_model, orientation)
        self.on_model_reset()

    def make_draft_connection(self, connection_id: ConnectionId) -> ConnectionItem:
        """Start a connection that has only one end attached."""
        self._draft = ConnectionItem(self, connection_id)
        return self._draft

    def reset_draft_connection(self) -> None:
        self._draft = None

    def clear_scene(self) -> None:
        """Delete every node from the model."""
        for node_id in list(self.graph_model.all_node_ids()):
            self.graph_model.delete_node(node_id)

    def traverse_graph_and_populate(self) -> None:
        """Create items for all nodes, then for all their output connections."""
        node_ids = sorted(self.graph_model.all_node_ids())
        for node_id in node_ids:
            self._node_items[node_id] = NodeItem(self, node_id)
        for node_id in node_ids:
            count = int(self.graph_model.node_data(node_id, NodeRole.OUT_PORT_COUNT) or 0)
            for port_index in range(count):
                for cid in self.graph_model.connections(node_id, PortType.OUT, port_index):
                    self._connection_items[cid] = ConnectionItem(self, cid)

    def _update_attached_node(self, connection_id: ConnectionId, port_type: PortType) -> None:
        node = self.node_item(get_node_id(port_type, connection_id))
        if node is not None:
            node.update()

    def on_connection_created(self, connection_id: ConnectionId) -> None:
        self._connection_items[connection_id] = ConnectionItem(self, connection_id)
        self._update_attached_node(connection_id, PortType.OUT)
        self._update_attached_node(connection_id, PortType.IN)
        self.modified.emit(self)

    def on_connection_deleted(self, connection_id: ConnectionId) -> None:
        self._connection_items.pop(connection_id, None)
        if self._draft is not None and self._draft.connection_id == connection_id:
            self._draft = None
        self._update_attached_node(connection_id, PortType.OUT)
        self._update_attached_node(connection_id, PortType.IN)
        self.modified.emit(self)

    def on_node_created(self, node_id: NodeId) -> None:
        self._node_items[node_id] = NodeItem(self, node_id)
        self.modified.emit(self)

    def on_node_deleted(self, node_id: NodeId) -> None:
        if self._node_items.pop(node_id, None) is not None:
            self.modified.emit(self)

    def on_node_position_updated(self, node_id: NodeId) -> None:
        node = self.node_item(node_id)
        if node is None:
            return
        node.pos = _position_of(self.graph_model, node_id)
        node.update()
        node.move_connections()
        self._node_drag = True

    def on_node_updated(self, node_id: NodeId) -> None:
        node = self.node_item(node_id)
        if node is None:
            return
        self.node_geometry.recompute_size(node_id)
        node.update()
        node.move_connections()

    def on_node_clicked(self, node_id: NodeId) -> None:
        """Report a finished drag as a node move."""
        if self._node_drag:
            self.node_moved.emit(node_id, _position_of(self.graph_model, node_id))
            self.modified.emit(self)
        self._node_drag = False

    def on_model_reset(self) -> None:
        self._connection_items.clear()
        self._node_items.clear()
        self._draft = None
        self.traverse_graph_and_populate()


class DataFlowScene(BasicScene):
    """A scene over a data-flow model, with model lookup and file storage."""

    def __init__(
        self,
        graph_model: DataFlowGraphModel,
        geometry_factory: GeometryFactory | None = None,
    ) -> None:
        super().__init__(graph_model, geometry_factory)
        self.scene_loaded = Signal()
        graph_model.in_port_data_was_set.connect(
            lambda node_id, port_type, port_index: self.on_node_updated(node_id)
        )

    def selected_nodes(self) -> list[NodeId]:
        return [node_id for node_id, item in sorted(self._node_items.items()) if item.selected]

    def filter_models(self, text: str) -> dict[str, list[str]]:
        """Registered model names containing text, case-insensitively, by category."""
        registry = self.graph_model.registry
        associations = registry.registered_models_category_association()
        needle = text.casefold()
        result: dict[str, list[str]] = {}
        for category in registry.categories():
            names = sorted(
                name
                for name, owner in associations.items()
                if owner == category and needle in name.casefold()
            )
            if names:
                result[category] = names
        return result

    def save(self, path: str | Path) -> Path:
        """Write the model as JSON; a '.flow' suffix is added when missing."""
        target = Path(path)
        if not target.name.lower().endswith("flow"):
            target = target.with_name(target.name + FLOW_SUFFIX)
        target.write_text(json.dumps(self.graph_model.save(), indent=4), encoding="utf-8")
        return target

    def load(self, path: str | Path) -> bool:
        """Replace the scene's contents with a saved file; False if it does not exist."""
        source = Path(path)
        if not source.is_file():
            return False
        text = source.read_text(encoding="utf-8")
        self.clear_scene()
        try:
            document = json.loads(text)
        except ValueError:
            document = {}
        if not isinstance(document, dict):
            document = {}
        self.graph_model.load(document)
        self.scene_loaded.emit()
        return True