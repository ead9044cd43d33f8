"""A minimal in-memory graph model with fixed ports."""

from __future__ import annotations

from typing import Any

from nodeflow.graph_model import (
    AbstractGraphModel,
    ConnectionId,
    ConnectionPolicy,
    NodeGeometryData,
    NodeId,
    NodeRole,
    PortIndex,
    PortRole,
    PortType,
    get_node_id,
    get_port_index,
)


class SimpleGraphModel(AbstractGraphModel):
    """Nodes with five inputs and three outputs, connected freely."""

    IN_PORTS = 5
    OUT_PORTS = 3

    def __init__(self) -> None:
        super().__init__()
        self._node_ids: set[NodeId] = set()
        self._connectivity: set[ConnectionId] = set()
        self._geometry: dict[NodeId, NodeGeometryData] = {}
        self._next_node_id: NodeId = 0

    def _new_node_id(self) -> NodeId:
        node_id = self._next_node_id
        self._next_node_id += 1
        return node_id

    def all_node_ids(self) -> set[NodeId]:
        return set(self._node_ids)

    def all_connection_ids(self, node_id: NodeId) -> set[ConnectionId]:
        return {
            cid for cid in self._connectivity if node_id in (cid.in_node_id, cid.out_node_id)
        }

    def connections(
        self, node_id: NodeId, port_type: PortType, port_index: PortIndex
    ) -> set[ConnectionId]:
        return {
            cid
            for cid in self._connectivity
            if get_node_id(port_type, cid) == node_id
            and get_port_index(port_type, cid) == port_index
        }

    def connection_exists(self, connection_id: ConnectionId) -> bool:
        return connection_id in self._connectivity

    def add_node(self, node_type: str = "") -> NodeId:
        node_id = self._new_node_id()
        self._node_ids.add(node_id)
        self.node_created.emit(node_id)
        return node_id

    def connection_possible(self, connection_id: ConnectionId) -> bool:
        return connection_id not in self._connectivity

    def add_connection(self, connection_id: ConnectionId) -> None:
        self._connectivity.add(connection_id)
        self.connection_created.emit(connection_id)

    def node_exists(self, node_id: NodeId) -> bool:
        return node_id in self._node_ids

    def node_data(self, node_id: NodeId, role: NodeRole) -> Any:
        geometry = self._geometry.get(node_id, NodeGeometryData())
        values = {
            NodeRole.TYPE: "Default Node Type",
            NodeRole.POSITION: geometry.pos,
            NodeRole.SIZE: geometry.size,
            NodeRole.CAPTION_VISIBLE: True,
            NodeRole.CAPTION: "Node",
            NodeRole.IN_PORT_COUNT: self.IN_PORTS,
            NodeRole.OUT_PORT_COUNT: self.OUT_PORTS,
            NodeRole.WIDGET_EMBEDDABLE: True,
        }
        return values.get(role)

    def set_node_data(self, node_id: NodeId, role: NodeRole, value: Any) -> bool:
        if role is NodeRole.POSITION:
            x, y = value
            self._geometry.setdefault(node_id, NodeGeometryData()).pos = (float(x), float(y))
            self.node_position_updated.emit(node_id)
            return True
        if role is NodeRole.SIZE:
            width, height = value
            self._geometry.setdefault(node_id, NodeGeometryData()).size = (int(width), int(height))
            return True
        return False

    def port_data(
        self, node_id: NodeId, port_type: PortType, port_index: PortIndex, role: PortRole
    ) -> Any:
        if role is PortRole.CONNECTION_POLICY:
            return ConnectionPolicy.ONE
        if role is PortRole.CAPTION_VISIBLE:
            return True
        if role is PortRole.CAPTION:
            return "Port In" if port_type is PortType.IN else "Port Out"
        return None

    def set_port_data(
        self,
        node_id: NodeId,
        port_type: PortType,
        port_index: PortIndex,
        value: Any,
        role: PortRole = PortRole.DATA,
    ) -> bool:
        return False

    def delete_connection(self, connection_id: ConnectionId) -> bool:
        if connection_id not in self._connectivity:
            return False
        self._connectivity.remove(connection_id)
        self.connection_deleted.emit(connection_id)
        return True

    def delete_node(self, node_id: NodeId) -> bool:
        for connection_id in self.all_connection_ids(node_id):
            self.delete_connection(connection_id)
        self._node_ids.discard(node_id)
        self._geometry.pop(node_id, None)
        self.node_deleted.emit(node_id)
        return True

    def save_node(self, node_id: NodeId) -> dict[str, Any]:
        x, y = self.node_data(node_id, NodeRole.POSITION)
        return {"id": node_id, "position": {"x": x, "y": y}}

    def load_node(self, node_json: dict[str, Any]) -> None:
        """Create a node from saved data, keeping its id."""
        node_id = int(node_json.get("id", 0))
        self._next_node_id = max(node_id + 1, self._next_node_id)
        self._node_ids.add(node_id)
        self.node_created.emit(node_id)
        position = node_json.get("position", {})
        self.set_node_data(
            node_id,
            NodeRole.POSITION,
            (float(position.get("x", 0.0)), float(position.get("y", 0.0))),
        )