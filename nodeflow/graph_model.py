"""Core graph model vocabulary: identifiers, roles, signals and the abstract model."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Callable

NodeId = int
PortIndex = int

INVALID_NODE_ID = None
INVALID_PORT_INDEX = None


class PortType(enum.Enum):
    """Side of a node a port lives on."""

    IN = "in"
    OUT = "out"
    NONE = "none"


class NodeRole(enum.Enum):
    """Kinds of node data a model can be queried for."""

    TYPE = enum.auto()
    POSITION = enum.auto()
    SIZE = enum.auto()
    CAPTION_VISIBLE = enum.auto()
    CAPTION = enum.auto()
    STYLE = enum.auto()
    INTERNAL_DATA = enum.auto()
    IN_PORT_COUNT = enum.auto()
    OUT_PORT_COUNT = enum.auto()
    WIDGET_EMBEDDABLE = enum.auto()
    WIDGET = enum.auto()


class PortRole(enum.Enum):
    """Kinds of port data a model can be queried for."""

    DATA = enum.auto()
    DATA_TYPE = enum.auto()
    CONNECTION_POLICY = enum.auto()
    CAPTION_VISIBLE = enum.auto()
    CAPTION = enum.auto()


class ConnectionPolicy(enum.Enum):
    """How many connections a port accepts."""

    ONE = "one"
    MANY = "many"


class NodeFlag(enum.Flag):
    """Behavioural flags of a node."""

    NO_FLAGS = 0
    RESIZABLE = 1
    LOCKED = 2


@dataclass(frozen=True)
class ConnectionId:
    """Identifies a connection by both of its ends."""

    out_node_id: NodeId | None
    out_port_index: PortIndex | None
    in_node_id: NodeId | None
    in_port_index: PortIndex | None

    def to_json(self) -> dict[str, Any]:
        return {
            "outNodeId": self.out_node_id,
            "outPortIndex": self.out_port_index,
            "inNodeId": self.in_node_id,
            "inPortIndex": self.in_port_index,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ConnectionId":
        return cls(
            int(data["outNodeId"]),
            int(data["outPortIndex"]),
            int(data["inNodeId"]),
            int(data["inPortIndex"]),
        )


@dataclass
class NodeGeometryData:
    """Size and position a model keeps for each node."""

    size: tuple[int, int] = (0, 0)
    pos: tuple[float, float] = (0.0, 0.0)


def get_node_id(port_type: PortType, connection_id: ConnectionId) -> NodeId | None:
    if port_type is PortType.OUT:
        return connection_id.out_node_id
    if port_type is PortType.IN:
        return connection_id.in_node_id
    return INVALID_NODE_ID


def get_port_index(port_type: PortType, connection_id: ConnectionId) -> PortIndex | None:
    if port_type is PortType.OUT:
        return connection_id.out_port_index
    if port_type is PortType.IN:
        return connection_id.in_port_index
    return INVALID_PORT_INDEX


def opposite_port(port_type: PortType) -> PortType:
    if port_type is PortType.IN:
        return PortType.OUT
    if port_type is PortType.OUT:
        return PortType.IN
    return PortType.NONE


def make_incomplete_connection_id(
    connection_id: ConnectionId, port_type_to_erase: PortType
) -> ConnectionId:
    """Return the id with the given side erased."""
    if port_type_to_erase is PortType.OUT:
        return replace(connection_id, out_node_id=INVALID_NODE_ID, out_port_index=INVALID_PORT_INDEX)
    if port_type_to_erase is PortType.IN:
        return replace(connection_id, in_node_id=INVALID_NODE_ID, in_port_index=INVALID_PORT_INDEX)
    return connection_id


def make_complete_connection_id(
    connection_id: ConnectionId, node_id: NodeId, port_index: PortIndex
) -> ConnectionId:
    """Fill the missing side of an incomplete id."""
    if connection_id.out_node_id is INVALID_NODE_ID:
        return replace(connection_id, out_node_id=node_id, out_port_index=port_index)
    return replace(connection_id, in_node_id=node_id, in_port_index=port_index)


class Signal:
    """A list of callbacks invoked together."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        self._slots.remove(slot)

    def emit(self, *args: Any) -> None:
        for slot in list(self._slots):
            slot(*args)


class AbstractGraphModel(ABC):
    """Interface every graph model implements, plus dynamic-port bookkeeping."""

    def __init__(self) -> None:
        self.connection_created = Signal()
        self.connection_deleted = Signal()
        self.node_created = Signal()
        self.node_deleted = Signal()
        self.node_updated = Signal()
        self.node_flags_updated = Signal()
        self.node_position_updated = Signal()
        self.model_reset = Signal()
        self._shifted_connections: list[ConnectionId] = []

    @abstractmethod
    def all_node_ids(self) -> set[NodeId]:
        """Return the ids of all nodes."""

    @abstractmethod
    def all_connection_ids(self, node_id: NodeId) -> set[ConnectionId]:
        """Return every connection touching the node."""

    @abstractmethod
    def connections(
        self, node_id: NodeId, port_type: PortType, port_index: PortIndex
    ) -> set[ConnectionId]:
        """Return the connections attached to one port."""

    @abstractmethod
    def connection_exists(self, connection_id: ConnectionId) -> bool:
        """Tell whether the connection is in the graph."""

    @abstractmethod
    def add_node(self, node_type: str = "") -> NodeId | None:
        """Create a node and return its id."""

    @abstractmethod
    def connection_possible(self, connection_id: ConnectionId) -> bool:
        """Tell whether the connection may be created."""

    @abstractmethod
    def add_connection(self, connection_id: ConnectionId) -> None:
        """Insert the connection."""

    @abstractmethod
    def node_exists(self, node_id: NodeId) -> bool:
        """Tell whether the node is in the graph."""

    @abstractmethod
    def node_data(self, node_id: NodeId, role: NodeRole) -> Any:
        """Return node data for the role."""

    @abstractmethod
    def set_node_data(self, node_id: NodeId, role: NodeRole, value: Any) -> bool:
        """Store node data for the role; return whether it was accepted."""

    def node_flags(self, node_id: NodeId) -> NodeFlag:
        return NodeFlag.NO_FLAGS

    @abstractmethod
    def port_data(
        self, node_id: NodeId, port_type: PortType, port_index: PortIndex, role: PortRole
    ) -> Any:
        """Return port data for the role."""

    @abstractmethod
    def set_port_data(
        self,
        node_id: NodeId,
        port_type: PortType,
        port_index: PortIndex,
        value: Any,
        role: PortRole = PortRole.DATA,
    ) -> bool:
        """Store port data for the role; return whether it was accepted."""

    @abstractmethod
    def delete_connection(self, connection_id: ConnectionId) -> bool:
        """Remove the connection; return whether it existed."""

    @abstractmethod
    def delete_node(self, node_id: NodeId) -> bool:
        """Remove the node and its connections."""

    def save_node(self, node_id: NodeId) -> dict[str, Any]:
        return {}

    def load_node(self, node_json: dict[str, Any]) -> None:
        return None

    def _port_count(self, node_id: NodeId, port_type: PortType) -> int:
        role = NodeRole.IN_PORT_COUNT if port_type is PortType.IN else NodeRole.OUT_PORT_COUNT
        return int(self.node_data(node_id, role) or 0)

    def _shift_connections(
        self, node_id: NodeId, port_type: PortType, ports: range, offset: int
    ) -> None:
        for port_index in ports:
            for connection_id in list(self.connections(node_id, port_type, port_index)):
                shifted = make_complete_connection_id(
                    make_incomplete_connection_id(connection_id, port_type),
                    node_id,
                    port_index + offset,
                )
                self._shifted_connections.append(shifted)
                self.delete_connection(connection_id)

    def ports_about_to_be_deleted(
        self, node_id: NodeId, port_type: PortType, first: int, last: int
    ) -> None:
        """Drop connections on removed ports and detach those that must shift down."""
        self._shifted_connections.clear()
        port_count = self._port_count(node_id, port_type)
        if first > port_count - 1 or last < first:
            return
        clamped_last = min(last, port_count - 1)
        for port_index in range(first, clamped_last + 1):
            for connection_id in list(self.connections(node_id, port_type, port_index)):
                self.delete_connection(connection_id)
        removed = clamped_last - first + 1
        self._shift_connections(node_id, port_type, range(clamped_last + 1, port_count), -removed)

    def ports_deleted(self) -> None:
        """Restore the shifted connections after ports were removed."""
        for connection_id in self._shifted_connections:
            self.add_connection(connection_id)
        self._shifted_connections.clear()

    def ports_about_to_be_inserted(
        self, node_id: NodeId, port_type: PortType, first: int, last: int
    ) -> None:
        """Detach connections that must shift up to make room for new ports."""
        self._shifted_connections.clear()
        port_count = self._port_count(node_id, port_type)
        if first > port_count or last < first:
            return
        added = last - first + 1
        self._shift_connections(node_id, port_type, range(first, port_count), added)

    def ports_inserted(self) -> None:
        """Restore the shifted connections after ports were inserted."""
        for connection_id in self._shifted_connections:
            self.add_connection(connection_id)
        self._shifted_connections.clear()