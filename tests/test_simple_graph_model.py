import pytest

from nodeflow.graph_model import ConnectionId, ConnectionPolicy, NodeRole, PortRole, PortType
from nodeflow.simple_graph_model import SimpleGraphModel


@pytest.fixture
def linked():
    model = SimpleGraphModel()
    first = model.add_node()
    second = model.add_node()
    cid = ConnectionId(first, 0, second, 0)
    model.add_connection(cid)
    return model, first, second, cid


def test_add_node_ids_are_sequential():
    model = SimpleGraphModel()
    assert [model.add_node(), model.add_node()] == [0, 1]
    assert model.all_node_ids() == {0, 1}


def test_node_data_fixed_values():
    model = SimpleGraphModel()
    node = model.add_node()
    assert model.node_data(node, NodeRole.IN_PORT_COUNT) == 5
    assert model.node_data(node, NodeRole.OUT_PORT_COUNT) == 3
    assert model.node_data(node, NodeRole.CAPTION) == "Node"
    assert model.node_data(node, NodeRole.TYPE) == "Default Node Type"


def test_port_data_values():
    model = SimpleGraphModel()
    node = model.add_node()
    assert model.port_data(node, PortType.IN, 0, PortRole.CAPTION) == "Port In"
    assert model.port_data(node, PortType.OUT, 0, PortRole.CAPTION) == "Port Out"
    assert model.port_data(node, PortType.IN, 0, PortRole.CONNECTION_POLICY) is ConnectionPolicy.ONE
    assert model.set_port_data(node, PortType.IN, 0, "x", PortRole.DATA) is False


def test_connection_possible_only_once(linked):
    model, first, second, cid = linked
    assert model.connection_exists(cid)
    assert not model.connection_possible(cid)
    assert model.connection_possible(ConnectionId(first, 1, second, 1))


def test_connections_by_port(linked):
    model, first, second, cid = linked
    assert model.connections(first, PortType.OUT, 0) == {cid}
    assert model.connections(second, PortType.IN, 0) == {cid}
    assert model.connections(second, PortType.OUT, 0) == set()


def test_delete_node_removes_connections(linked):
    model, first, second, cid = linked
    deleted = []
    model.connection_deleted.connect(deleted.append)
    assert model.delete_node(first) is True
    assert deleted == [cid]
    assert not model.node_exists(first)
    assert model.all_connection_ids(second) == set()


def test_delete_missing_connection(linked):
    model, first, second, cid = linked
    assert model.delete_connection(cid) is True
    assert model.delete_connection(cid) is False


def test_set_position_emits_and_stores():
    model = SimpleGraphModel()
    node = model.add_node()
    moved = []
    model.node_position_updated.connect(moved.append)
    assert model.set_node_data(node, NodeRole.POSITION, (3, 4)) is True
    assert model.node_data(node, NodeRole.POSITION) == (3.0, 4.0)
    assert moved == [node]
    assert model.set_node_data(node, NodeRole.CAPTION, "x") is False


def test_save_load_round_trip():
    model = SimpleGraphModel()
    node = model.add_node()
    model.set_node_data(node, NodeRole.POSITION, (300, 300))
    saved = model.save_node(node)
    other = SimpleGraphModel()
    other.load_node(saved)
    assert other.save_node(node) == saved


def test_load_node_advances_next_id():
    model = SimpleGraphModel()
    model.load_node({"id": 7, "position": {"x": 1.0, "y": 2.0}})
    assert model.node_exists(7)
    assert model.add_node() == 8