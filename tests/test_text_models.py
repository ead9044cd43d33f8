from nodeflow.data_flow_model import DataFlowGraphModel
from nodeflow.graph_model import ConnectionId, NodeRole, PortType
from nodeflow.text_models import (
    TextData,
    TextDisplayDataModel,
    TextSourceDataModel,
    register_text_models,
)


def test_text_data_type():
    data_type = TextData("abc").type()
    assert data_type.id == "text"
    assert data_type.name == "Text"


def test_source_ports():
    model = TextSourceDataModel()
    assert model.n_ports(PortType.IN) == 0
    assert model.n_ports(PortType.OUT) == 1
    assert model.n_ports(PortType.NONE) == 1
    assert model.data_type(PortType.OUT, 0) == TextData().type()


def test_display_ports():
    model = TextDisplayDataModel()
    assert model.n_ports(PortType.IN) == 1
    assert model.n_ports(PortType.OUT) == 0
    assert model.n_ports(PortType.NONE) == 1
    assert model.out_data(0) is None


def test_source_default_output():
    assert TextSourceDataModel().out_data(0) == TextData("Default Text")


def test_source_text_edit_emits():
    model = TextSourceDataModel()
    updates = []
    model.data_updated.connect(updates.append)
    model.on_text_edited("hello")
    assert updates == [0]
    assert model.out_data(0).text == "hello"


def test_source_ignores_input():
    model = TextSourceDataModel()
    model.set_in_data(TextData("other"), 0)
    assert model.out_data(0).text == "Default Text"


def test_display_set_in_data():
    model = TextDisplayDataModel()
    assert model.label == "Resulting Text"
    model.set_in_data(TextData("shown"), 0)
    assert model.label == "shown"
    model.set_in_data(None, 0)
    assert model.label == ""


def test_captions():
    assert TextSourceDataModel().caption == "Text Source"
    assert TextDisplayDataModel().caption == "Text Display"


def test_registry_holds_both():
    registry = register_text_models()
    assert set(registry.registered_models_category_association()) == {
        "TextSourceDataModel",
        "TextDisplayDataModel",
    }
    assert isinstance(registry.create("TextDisplayDataModel"), TextDisplayDataModel)


def test_text_flows_through_graph():
    graph = DataFlowGraphModel(register_text_models())
    src = graph.add_node("TextSourceDataModel")
    dst = graph.add_node("TextDisplayDataModel")
    graph.add_connection(ConnectionId(src, 0, dst, 0))
    display = graph.delegate_model(dst)
    assert display.label == "Default Text"
    graph.delegate_model(src).on_text_edited("typed")
    assert display.label == "typed"
    assert graph.node_data(dst, NodeRole.CAPTION_VISIBLE) is False