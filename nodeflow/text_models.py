"""Text-carrying node models: a source of text and a display of it."""

from __future__ import annotations

from dataclasses import dataclass

from nodeflow.delegate import NodeData, NodeDataType, NodeDelegateModel, NodeDelegateModelRegistry
from nodeflow.graph_model import PortIndex, PortType

TEXT_TYPE = NodeDataType("text", "Text")


@dataclass
class TextData(NodeData):
    """A string travelling through the graph."""

    text: str = ""

    def type(self) -> NodeDataType:
        return TEXT_TYPE


class TextSourceDataModel(NodeDelegateModel):
    """One output port carrying the text entered by the user."""

    name = "TextSourceDataModel"
    caption = "Text Source"
    caption_visible = False

    def __init__(self) -> None:
        super().__init__()
        self.text = "Default Text"

    def n_ports(self, port_type: PortType) -> int:
        if port_type is PortType.IN:
            return 0
        if port_type is PortType.OUT:
            return 1
        return 1

    def data_type(self, port_type: PortType, port_index: PortIndex) -> NodeDataType:
        return TextData().type()

    def out_data(self, port_index: PortIndex) -> TextData:
        return TextData(self.text)

    def set_in_data(self, data: NodeData | None, port_index: PortIndex) -> None:
        return None

    def on_text_edited(self, text: str) -> None:
        """Take the edited text and announce new output data."""
        self.text = text
        self.data_updated.emit(0)


class TextDisplayDataModel(NodeDelegateModel):
    """One input port whose text is shown in a label."""

    name = "TextDisplayDataModel"
    caption = "Text Display"
    caption_visible = False

    def __init__(self) -> None:
        super().__init__()
        self.label = "Resulting Text"
        self.input_text = ""

    def n_ports(self, port_type: PortType) -> int:
        if port_type is PortType.IN:
            return 1
        if port_type is PortType.OUT:
            return 0
        return 1

    def data_type(self, port_type: PortType, port_index: PortIndex) -> NodeDataType:
        return TextData().type()

    def out_data(self, port_index: PortIndex) -> None:
        return None

    def set_in_data(self, data: NodeData | None, port_index: PortIndex) -> None:
        self.input_text = data.text if isinstance(data, TextData) else ""
        self.label = self.input_text


def register_text_models() -> NodeDelegateModelRegistry:
    """Build a registry holding the text source and display models."""
    registry = NodeDelegateModelRegistry()
    registry.register_model(TextSourceDataModel)
    registry.register_model(TextDisplayDataModel)
    return registry