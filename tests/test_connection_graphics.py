import pytest

from nodeflow.connection_graphics import ConnectionItem, Orientation
from nodeflow.connection_style import current_connection_style
from nodeflow.geometry import HorizontalNodeGeometry, Point
from nodeflow.graph_model import ConnectionId, NodeRole, PortType
from nodeflow.simple_graph_model import SimpleGraphModel


class FakeNode:
    def __init__(self, pos):
        self.pos = pos
        self.updates = 0

    def update(self):
        self.updates += 1


class FakeScene:
    def __init__(self, orientation=Orientation.HORIZONTAL):
        self.graph_model = SimpleGraphModel()
        self.node_geometry = HorizontalNodeGeometry(self.graph_model)
        self.orientation = orientation
        self.nodes = {}

    def add(self, x, y):
        node_id = self.graph_model.add_node()
        self.graph_model.set_node_data(node_id, NodeRole.POSITION, (x, y))
        self.node_geometry.recompute_size(node_id)
        self.nodes[node_id] = FakeNode(Point(float(x), float(y)))
        return node_id

    def node_item(self, node_id):
        return self.nodes.get(node_id)


@pytest.fixture
def scene():
    return FakeScene()


def test_complete_connection_ends_on_ports(scene):
    a = scene.add(0, 0)
    b = scene.add(300, 300)
    item = ConnectionItem(scene, ConnectionId(a, 0, b, 1))
    geometry = scene.node_geometry
    assert item.pos == Point()
    assert item.end_point(PortType.OUT) == geometry.port_scene_position(
        a, PortType.OUT, 0, scene.nodes[a].pos
    )
    assert item.end_point(PortType.IN) == geometry.port_scene_position(
        b, PortType.IN, 1, scene.nodes[b].pos
    )
    assert item.state.required_port() is PortType.NONE
    assert not item.state.requires_port()


def test_draft_connection_positioned_at_attached_port(scene):
    a = scene.add(50, 60)
    item = ConnectionItem(scene, ConnectionId(a, 2, None, None))
    assert item.state.required_port() is PortType.IN
    assert item.state.requires_port()
    assert item.pos == scene.node_geometry.port_scene_position(
        a, PortType.OUT, 2, scene.nodes[a].pos
    )
    assert item.end_point(PortType.OUT) == Point()
    assert item.end_point(PortType.IN) == Point()


def test_draft_missing_out_requires_out(scene):
    b = scene.add(0, 0)
    item = ConnectionItem(scene, ConnectionId(None, None, b, 0))
    assert item.state.required_port() is PortType.OUT


def test_move_follows_node(scene):
    a = scene.add(0, 0)
    b = scene.add(300, 0)
    item = ConnectionItem(scene, ConnectionId(a, 0, b, 0))
    before = item.end_point(PortType.IN)
    scene.nodes[b].pos = scene.nodes[b].pos + Point(10.0, 25.0)
    item.move()
    assert item.end_point(PortType.IN) - before == Point(10.0, 25.0)


def test_end_point_none_raises(scene):
    a = scene.add(0, 0)
    item = ConnectionItem(scene, ConnectionId(a, 0, None, None))
    with pytest.raises(ValueError):
        item.end_point(PortType.NONE)


def test_set_end_point(scene):
    a = scene.add(0, 0)
    item = ConnectionItem(scene, ConnectionId(a, 0, None, None))
    item.set_end_point(PortType.IN, Point(7.0, 8.0))
    assert item.end_point(PortType.IN) == Point(7.0, 8.0)
    item.set_end_point(PortType.OUT, Point(1.0, 2.0))
    assert item.end_point(PortType.OUT) == Point(1.0, 2.0)


def _free_item(scene, out, inp):
    a = scene.add(0, 0)
    item = ConnectionItem(scene, ConnectionId(a, 0, None, None))
    item.pos = Point()
    item.set_end_point(PortType.OUT, out)
    item.set_end_point(PortType.IN, inp)
    return item


def test_horizontal_forward_control_points_symmetric(scene):
    item = _free_item(scene, Point(0.0, 0.0), Point(100.0, 40.0))
    c1, c2 = item.points_c1c2_horizontal()
    assert c1.y == item.out.y and c2.y == item.in_.y
    assert c1.x - item.out.x == item.in_.x - c2.x
    assert c1.x > item.out.x


def test_horizontal_offset_capped(scene):
    item = _free_item(scene, Point(0.0, 0.0), Point(1000.0, 0.0))
    c1, _ = item.points_c1c2_horizontal()
    assert c1.x == 100.0


def test_horizontal_backward_bends_vertically(scene):
    item = _free_item(scene, Point(100.0, 0.0), Point(0.0, 0.0))
    c1, c2 = item.points_c1c2_horizontal()
    assert c1 == Point(200.0, 20.0)
    assert c2 == Point(-100.0, -20.0)


def test_vertical_mirrors_horizontal(scene):
    item = _free_item(scene, Point(3.0, 5.0), Point(-40.0, 90.0))
    swapped = _free_item(scene, Point(5.0, 3.0), Point(90.0, -40.0))
    v1, v2 = item.points_c1c2_vertical()
    h1, h2 = swapped.points_c1c2_horizontal()
    assert (v1.x, v1.y) == (h1.y, h1.x)
    assert (v2.x, v2.y) == (h2.y, h2.x)


def test_points_c1c2_follows_orientation():
    scene = FakeScene(Orientation.VERTICAL)
    item = _free_item(scene, Point(0.0, 0.0), Point(30.0, 70.0))
    assert item.points_c1c2() == item.points_c1c2_vertical()
    scene.orientation = Orientation.HORIZONTAL
    assert item.points_c1c2() == item.points_c1c2_horizontal()


def test_bounding_rect_contains_ends_and_controls(scene):
    item = _free_item(scene, Point(100.0, 10.0), Point(-20.0, 60.0))
    rect = item.bounding_rect()
    diam = current_connection_style().point_diameter
    for p in (item.out, item.in_, *item.points_c1c2()):
        assert rect.contains(p)
    assert rect.left <= min(item.out.x, item.in_.x) - diam
    assert rect.bottom >= max(item.out.y, item.in_.y) + 2 * diam


def test_reset_last_hovered_node_updates_node(scene):
    a = scene.add(0, 0)
    b = scene.add(100, 0)
    item = ConnectionItem(scene, ConnectionId(a, 0, None, None))
    item.state.set_last_hovered_node(b)
    assert item.state.last_hovered_node == b
    item.state.reset_last_hovered_node()
    assert scene.nodes[b].updates == 1
    assert item.state.last_hovered_node is None
    item.state.reset_last_hovered_node()
    assert scene.nodes[b].updates == 1