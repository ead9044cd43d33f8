"""A graph model whose nodes are delegate models passing data along connections."""

from __future__ import annotations

from typing import Any

from nodeflow.delegate import NodeDelegateModel, NodeDelegateModelRegistry
from nodeflow.graph_model import (
    AbstractGraphModel,
    ConnectionId,
    NodeFlag,
    NodeGeometryData,
    NodeId,
    NodeRole,
    PortIndex,
    PortRole,
    PortType,
    Signal,
    get_node_id,
    get_port_index,
)


def _sort_key(connection_id: ConnectionId) -> tuple:
    return (
        connection_id.out_node_id,
        connection_id.out_port_index,
        connection_id.in_node_id,
        connection_id.in_port_index,
    )


class DataFlowGraphModel(AbstractGraphModel):
    """Nodes created from a registry; output data flows into connected inputs."""

    def __init__(self, registry: NodeDelegateModelRegistry) -> None:
        super().__init__()
        self.in_port_data_was_set = Signal()
        self._registry = registry
        self._models: dict[NodeId, NodeDelegateModel] = {}
        self._connectivity: set[ConnectionId] = set()
        self._geometry: dict[NodeId, NodeGeometryData] = {}
        self._next_node_id: NodeId = 0

    @property
    def registry(self) -> NodeDelegateModelRegistry:
        return self._registry

    def delegate_model(self, node_id: NodeId) -> NodeDelegateModel | None:
        """Return the delegate behind a node, or None."""
        return self._models.get(node_id)

    def _new_node_id(self) -> NodeId:
        node_id = self._next_node_id
        self._next_node_id += 1
        return node_id

    def _attach(self, node_id: NodeId, model: NodeDelegateModel) -> None:
        model.data_updated.connect(
            lambda port_index: self._on_out_port_data_updated(node_id, port_index)
        )
        model.ports_about_to_be_deleted.connect(
            lambda port_type, first, last: self.ports_about_to_be_deleted(
                node_id, port_type, first, last
            )
        )
        model.ports_deleted.connect(self.ports_deleted)
        model.ports_about_to_be_inserted.connect(
            lambda port_type, first, last: self.ports_about_to_be_inserted(
                node_id, port_type, first, last
            )
        )
        model.ports_inserted.connect(self.ports_inserted)

    def all_node_ids(self) -> set[NodeId]:
        return set(self._models)

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

    def add_node(self, node_type: str = "") -> NodeId | None:
        """Create a node of a registered type; None if the type is unknown."""
        model = self._registry.create(node_type)
        if model is None:
            return None
        node_id = self._new_node_id()
        self._attach(node_id, model)
        self._models[node_id] = model
        self.node_created.emit(node_id)
        return node_id

    def connection_possible(self, connection_id: ConnectionId) -> bool:
        """Both ends carry the same data type and neither port is full."""

        def type_id(port_type: PortType) -> str:
            data_type = self.port_data(
                get_node_id(port_type, connection_id),
                port_type,
                get_port_index(port_type, connection_id),
                PortRole.DATA_TYPE,
            )
            return data_type.id if data_type is not None else ""

        def vacant(port_type: PortType) -> bool:
            node_id = get_node_id(port_type, connection_id)
            port_index = get_port_index(port_type, connection_id)
            if not self.connections(node_id, port_type, port_index):
                return True
            policy = self.port_data(node_id, port_type, port_index, PortRole.CONNECTION_POLICY)
            return policy is not None and policy.value == "many"

        return (
            type_id(PortType.OUT) == type_id(PortType.IN)
            and vacant(PortType.OUT)
            and vacant(PortType.IN)
        )

    def add_connection(self, connection_id: ConnectionId) -> None:
        self._connectivity.add(connection_id)
        self._send_connection_creation(connection_id)
        data = self.port_data(
            connection_id.out_node_id, PortType.OUT, connection_id.out_port_index, PortRole.DATA
        )
        self.set_port_data(
            connection_id.in_node_id, PortType.IN, connection_id.in_port_index, data, PortRole.DATA
        )

    def _send_connection_creation(self, connection_id: ConnectionId) -> None:
        self.connection_created.emit(connection_id)
        model_in = self._models.get(connection_id.in_node_id)
        model_out = self._models.get(connection_id.out_node_id)
        if model_in is not None and model_out is not None:
            model_in.input_connection_created(connection_id)
            model_out.output_connection_created(connection_id)

    def _send_connection_deletion(self, connection_id: ConnectionId) -> None:
        self.connection_deleted.emit(connection_id)
        model_in = self._models.get(connection_id.in_node_id)
        model_out = self._models.get(connection_id.out_node_id)
        if model_in is not None and model_out is not None:
            model_in.input_connection_deleted(connection_id)
            model_out.output_connection_deleted(connection_id)

    def node_exists(self, node_id: NodeId) -> bool:
        return node_id in self._models

    def node_data(self, node_id: NodeId, role: NodeRole) -> Any:
        model = self._models.get(node_id)
        if model is None:
            return None
        if role is NodeRole.TYPE:
            return model.name
        if role is NodeRole.POSITION:
            return self._geometry.setdefault(node_id, NodeGeometryData()).pos
        if role is NodeRole.SIZE:
            return self._geometry.setdefault(node_id, NodeGeometryData()).size
        if role is NodeRole.CAPTION_VISIBLE:
            return model.caption_visible if model.widget_embeddable else True
        if role is NodeRole.CAPTION:
            return model.caption
        if role is NodeRole.INTERNAL_DATA:
            return {"internal-data": model.save()}
        if role is NodeRole.IN_PORT_COUNT:
            return model.n_ports(PortType.IN)
        if role is NodeRole.OUT_PORT_COUNT:
            return model.n_ports(PortType.OUT)
        if role is NodeRole.WIDGET_EMBEDDABLE:
            return model.widget_embeddable
        if role is NodeRole.WIDGET:
            return model.embedded_widget()
        return None

    def node_flags(self, node_id: NodeId) -> NodeFlag:
        model = self._models.get(node_id)
        if model is not None and model.widget_embeddable and model.resizable:
            return NodeFlag.RESIZABLE
        return NodeFlag.NO_FLAGS

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
        if role is NodeRole.WIDGET_EMBEDDABLE:
            model = self._models.get(node_id)
            if model is None:
                return False
            model.widget_embeddable = bool(value)
            model.embedded_widget_size_updated()
            self.node_updated.emit(node_id)
            return True
        return False

    def port_data(
        self, node_id: NodeId, port_type: PortType, port_index: PortIndex, role: PortRole
    ) -> Any:
        model = self._models.get(node_id)
        if model is None:
            return None
        if role is PortRole.DATA:
            return model.out_data(port_index) if port_type is PortType.OUT else None
        if role is PortRole.DATA_TYPE:
            return model.data_type(port_type, port_index)
        if role is PortRole.CONNECTION_POLICY:
            return model.port_connection_policy(port_type, port_index)
        if role is PortRole.CAPTION_VISIBLE:
            return model.port_caption_visible(port_type, port_index)
        if role is PortRole.CAPTION:
            return model.port_caption(port_type, port_index)
        return None

    def set_port_data(
        self,
        node_id: NodeId,
        port_type: PortType,
        port_index: PortIndex,
        value: Any,
        role: PortRole = PortRole.DATA,
    ) -> bool:
        """Deliver data to an input port; never reports acceptance."""
        model = self._models.get(node_id)
        if model is None:
            return False
        if role is PortRole.DATA and port_type is PortType.IN:
            model.set_in_data(value, port_index)
            self.in_port_data_was_set.emit(node_id, port_type, port_index)
        return False

    def delete_connection(self, connection_id: ConnectionId) -> bool:
        if connection_id not in self._connectivity:
            return False
        self._connectivity.remove(connection_id)
        self._send_connection_deletion(connection_id)
        self._propagate_empty_data_to(connection_id.in_node_id, connection_id.in_port_index)
        return True

    def delete_node(self, node_id: NodeId) -> bool:
        for connection_id in self.all_connection_ids(node_id):
            self.delete_connection(connection_id)
        self._geometry.pop(node_id, None)
        self._models.pop(node_id, None)
        self.node_deleted.emit(node_id)
        return True

    def save_node(self, node_id: NodeId) -> dict[str, Any]:
        model = self._models[node_id]
        x, y = self.node_data(node_id, NodeRole.POSITION)
        return {
            "id": node_id,
            "internal-data": model.save(),
            "position": {"x": x, "y": y},
        }

    def save(self) -> dict[str, Any]:
        """Serialise all nodes and connections."""
        return {
            "nodes": [self.save_node(node_id) for node_id in sorted(self._models)],
            "connections": [cid.to_json() for cid in sorted(self._connectivity, key=_sort_key)],
        }

    def load_node(self, node_json: dict[str, Any]) -> None:
        """Recreate a node with its saved id, position and internal data."""
        node_id = int(node_json.get("id", 0))
        self._next_node_id = max(self._next_node_id, node_id + 1)
        internal = node_json.get("internal-data") or {}
        model_name = str(internal.get("model-name", ""))
        model = self._registry.create(model_name)
        if model is None:
            raise LookupError(f"No registered model with name {model_name}")
        self._attach(node_id, model)
        self._models[node_id] = model
        self.node_created.emit(node_id)
        position = node_json.get("position") or {}
        self.set_node_data(
            node_id,
            NodeRole.POSITION,
            (float(position.get("x", 0.0)), float(position.get("y", 0.0))),
        )
        model.load(internal)

    def load(self, document: dict[str, Any]) -> None:
        for node_json in document.get("nodes", []):
            self.load_node(node_json)
        for connection_json in document.get("connections", []):
            self.add_connection(ConnectionId.from_json(connection_json))

    def _on_out_port_data_updated(self, node_id: NodeId, port_index: PortIndex) -> None:
        data = self.port_data(node_id, PortType.OUT, port_index, PortRole.DATA)
        for cid in self.connections(node_id, PortType.OUT, port_index):
            self.set_port_data(cid.in_node_id, PortType.IN, cid.in_port_index, data, PortRole.DATA)

    def _propagate_empty_data_to(self, node_id: NodeId, port_index: PortIndex) -> None:
        self.set_port_data(node_id, PortType.IN, port_index, None, PortRole.DATA)