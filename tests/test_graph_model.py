import pytest

from nodeflow.graph_model import (
    INVALID_NODE_ID,
    AbstractGraphModel,
    ConnectionId,
    NodeFlag,
    NodeRole,
    PortRole,
    PortType,
    Signal,
    get_node_id,
    get_port_index,
    make_complete_connection_id,
    make_incomplete_connection_id,
    opposite_port,
)


class _PortModel(AbstractGraphModel):
    def __init__(self):
        super().__init__()
        self.nodes = {}
        self.links = set()

    def all_node_ids(self):
        return set(self.nodes)

    def all_connection_ids(self, node_id):
        return {c for c in self.links if node_id in (c.in_node_id, c.out_node_id)}

    def connections(self, node_id, port_type, port_index):
        return {
            c
            for c in self.links
            if get_node_id(port_type, c) == node_id and get_port_index(port_type, c) == port_index
        }

    def connection_exists(self, connection_id):
        return connection_id in self.links

    def add_node(self, node_type=""):
        node_id = len(self.nodes)
        self.nodes[node_id] = {"in": 0, "out": 0}
        return node_id

    def connection_possible(self, connection_id):
        return connection_id not in self.links

    def add_connection(self, connection_id):
        self.links.add(connection_id)
        self.connection_created.emit(connection_id)

    def node_exists(self, node_id):
        return node_id in self.nodes

    def node_data(self, node_id, role):
        if role is NodeRole.IN_PORT_COUNT:
            return self.nodes[node_id]["in"]
        if role is NodeRole.OUT_PORT_COUNT:
            return self.nodes[node_id]["out"]
        return None

    def set_node_data(self, node_id, role, value):
        return False

    def port_data(self, node_id, port_type, port_index, role):
        return None

    def set_port_data(self, node_id, port_type, port_index, value, role=PortRole.DATA):
        return False

    def delete_connection(self, connection_id):
        if connection_id in self.links:
            self.links.remove(connection_id)
            self.connection_deleted.emit(connection_id)
            return True
        return False

    def delete_node(self, node_id):
        for c in self.all_connection_ids(node_id):
            self.delete_connection(c)
        del self.nodes[node_id]
        return True


@pytest.fixture
def fan_out():
    model = _PortModel()
    a = model.add_node()
    b = model.add_node()
    model.nodes[a]["out"] = 1
    model.nodes[b]["in"] = 3
    for i in range(3):
        model.add_connection(ConnectionId(a, 0, b, i))
    return model, a, b


def test_connection_id_json_round_trip():
    cid = ConnectionId(1, 2, 3, 4)
    assert ConnectionId.from_json(cid.to_json()) == cid


def test_connection_id_json_keys():
    data = ConnectionId(1, 2, 3, 4).to_json()
    assert data == {"outNodeId": 1, "outPortIndex": 2, "inNodeId": 3, "inPortIndex": 4}


def test_get_node_and_port_index():
    cid = ConnectionId(1, 2, 3, 4)
    assert get_node_id(PortType.OUT, cid) == 1
    assert get_node_id(PortType.IN, cid) == 3
    assert get_port_index(PortType.OUT, cid) == 2
    assert get_port_index(PortType.IN, cid) == 4
    assert get_node_id(PortType.NONE, cid) is INVALID_NODE_ID


def test_opposite_port():
    assert opposite_port(PortType.IN) is PortType.OUT
    assert opposite_port(PortType.OUT) is PortType.IN
    assert opposite_port(PortType.NONE) is PortType.NONE


def test_incomplete_then_complete_round_trip():
    cid = ConnectionId(1, 2, 3, 4)
    for side in (PortType.IN, PortType.OUT):
        partial = make_incomplete_connection_id(cid, side)
        assert get_node_id(side, partial) is INVALID_NODE_ID
        node = get_node_id(side, cid)
        index = get_port_index(side, cid)
        assert make_complete_connection_id(partial, node, index) == cid


def test_signal_emit_and_disconnect():
    received = []
    signal = Signal()
    signal.connect(received.append)
    signal.emit(5)
    signal.disconnect(received.append)
    signal.emit(6)
    assert received == [5]


def test_signal_disconnect_unknown_raises():
    with pytest.raises(ValueError):
        Signal().disconnect(print)


def test_default_node_flags_and_save():
    model = _PortModel()
    node = model.add_node()
    assert AbstractGraphModel.node_flags(model, node) == NodeFlag.NO_FLAGS
    assert AbstractGraphModel.save_node(model, node) == {}


def test_abstract_model_cannot_be_instantiated():
    with pytest.raises(TypeError):
        AbstractGraphModel()


def test_ports_deleted_shifts_later_connections(fan_out):
    model, a, b = fan_out
    model.ports_about_to_be_deleted(b, PortType.IN, 1, 1)
    model.nodes[b]["in"] = 2
    model.ports_deleted()
    assert model.links == {ConnectionId(a, 0, b, 0), ConnectionId(a, 0, b, 1)}


def test_ports_deleted_range_clamped(fan_out):
    model, a, b = fan_out
    model.ports_about_to_be_deleted(b, PortType.IN, 1, 10)
    model.ports_deleted()
    assert model.links == {ConnectionId(a, 0, b, 0)}


def test_ports_delete_out_of_range_is_noop(fan_out):
    model, a, b = fan_out
    before = set(model.links)
    model.ports_about_to_be_deleted(b, PortType.IN, 5, 6)
    model.ports_deleted()
    assert model.links == before


def test_ports_inserted_shifts_connections_up(fan_out):
    model, a, b = fan_out
    model.ports_about_to_be_inserted(b, PortType.IN, 1, 2)
    model.nodes[b]["in"] = 5
    model.ports_inserted()
    assert model.links == {
        ConnectionId(a, 0, b, 0),
        ConnectionId(a, 0, b, 3),
        ConnectionId(a, 0, b, 4),
    }


def test_ports_insert_with_reversed_range_is_noop(fan_out):
    model, a, b = fan_out
    before = set(model.links)
    model.ports_about_to_be_inserted(b, PortType.IN, 2, 1)
    model.ports_inserted()
    assert model.links == before