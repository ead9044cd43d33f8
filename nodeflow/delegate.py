"""Node data, per-node delegate models and the registry that creates them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from nodeflow.graph_model import ConnectionId, ConnectionPolicy, PortIndex, PortType, Signal

DEFAULT_CATEGORY = "Nodes"


@dataclass(frozen=True)
class NodeDataType:
    """Identifies the kind of data travelling through a port."""

    id: str
    name: str


class NodeData(ABC):
    """A piece of data passed from an output port to input ports."""

    @abstractmethod
    def type(self) -> NodeDataType:
        """Return the data type of this value."""


class NodeDelegateModel(ABC):
    """Behaviour of one node: its ports, the data they carry and its state."""

    name: str = ""
    caption: str = ""
    caption_visible: bool = True
    resizable: bool = False

    def __init__(self) -> None:
        self.widget_embeddable = True
        self.widget: Any = None
        self.port_captions: dict[tuple[PortType, PortIndex], str] = {}
        self.loaded_state: dict[str, Any] = {}
        self.input_connections: set[ConnectionId] = set()
        self.output_connections: set[ConnectionId] = set()
        self.data_updated = Signal()
        self.ports_about_to_be_deleted = Signal()
        self.ports_deleted = Signal()
        self.ports_about_to_be_inserted = Signal()
        self.ports_inserted = Signal()
        self.widget_size_changed = Signal()

    @abstractmethod
    def n_ports(self, port_type: PortType) -> int:
        """Return the number of ports of the given side."""

    @abstractmethod
    def data_type(self, port_type: PortType, port_index: PortIndex) -> NodeDataType:
        """Return the data type carried by a port."""

    @abstractmethod
    def out_data(self, port_index: PortIndex) -> NodeData | None:
        """Return the data currently on an output port."""

    @abstractmethod
    def set_in_data(self, data: NodeData | None, port_index: PortIndex) -> None:
        """Receive data on an input port; None means the input was cleared."""

    def port_caption(self, port_type: PortType, port_index: PortIndex) -> str:
        """Return the caption assigned to a port, or an empty string."""
        return self.port_captions.get((port_type, port_index), "")

    def port_caption_visible(self, port_type: PortType, port_index: PortIndex) -> bool:
        """A port caption is shown only when one has been assigned."""
        return (port_type, port_index) in self.port_captions

    def port_connection_policy(
        self, port_type: PortType, port_index: PortIndex
    ) -> ConnectionPolicy:
        """Outputs accept many connections, inputs only one."""
        return ConnectionPolicy.MANY if port_type is PortType.OUT else ConnectionPolicy.ONE

    def save(self) -> dict[str, Any]:
        return {"model-name": self.name}

    def load(self, data: dict[str, Any]) -> None:
        """Keep a copy of the internal data the node was restored from."""
        self.loaded_state = dict(data)

    def embedded_widget(self) -> Any:
        """Return the widget shown inside the node, if any."""
        return self.widget

    def input_connection_created(self, connection_id: ConnectionId) -> None:
        self.input_connections.add(connection_id)

    def output_connection_created(self, connection_id: ConnectionId) -> None:
        self.output_connections.add(connection_id)

    def input_connection_deleted(self, connection_id: ConnectionId) -> None:
        self.input_connections.discard(connection_id)

    def output_connection_deleted(self, connection_id: ConnectionId) -> None:
        self.output_connections.discard(connection_id)

    def embedded_widget_size_updated(self) -> None:
        """Announce that the embedded widget changed its size."""
        self.widget_size_changed.emit()


class NodeDelegateModelRegistry:
    """Maps model names to factories and categories."""

    def __init__(self) -> None:
        self._creators: dict[str, Callable[[], NodeDelegateModel]] = {}
        self._categories: set[str] = set()
        self._associations: dict[str, str] = {}

    def register_model(
        self, factory: Callable[[], NodeDelegateModel], category: str = DEFAULT_CATEGORY
    ) -> None:
        """Register a factory under its model's name; a name already known is ignored."""
        name = factory().name
        if name in self._creators:
            return
        self._creators[name] = factory
        self._categories.add(category)
        self._associations[name] = category

    def create(self, model_name: str) -> NodeDelegateModel | None:
        factory = self._creators.get(model_name)
        return factory() if factory is not None else None

    def categories(self) -> list[str]:
        return sorted(self._categories)

    def registered_models_category_association(self) -> dict[str, str]:
        return dict(self._associations)