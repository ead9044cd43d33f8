# nodeflow

`nodeflow` is the model layer of a node-based data-flow editor. It has no
dependencies beyond the standard library.

## What is in it

- `nodeflow.graph_model`: the shared vocabulary. This covers the enums
  `PortType`, `NodeRole`, `PortRole`, `ConnectionPolicy` and `NodeFlag`, and
  `ConnectionId` with `to_json` and `from_json`. Helpers such as
  `get_node_id`, `get_port_index`, `opposite_port`,
  `make_incomplete_connection_id` and `make_complete_connection_id` work on
  these types. A minimal `Signal` holds callbacks. The module also defines the
  abstract `AbstractGraphModel`. When a node's ports are inserted or removed,
  the model detaches the connections that must shift
  (`ports_about_to_be_inserted` / `ports_about_to_be_deleted`) and restores
  them at their new indices (`ports_inserted` / `ports_deleted`).
- `nodeflow.simple_graph_model`: `SimpleGraphModel`, an in-memory graph in
  which every node has five inputs and three outputs. It allows any
  connection that is not already present.
- `nodeflow.delegate`: covers `NodeDataType`, `NodeData`,
  `NodeDelegateModel` (ports, data, captions, connection policy, save/load)
  and `NodeDelegateModelRegistry`. The registry maps model names to factories
  and categories.
- `nodeflow.data_flow_model`: `DataFlowGraphModel` holds one delegate model
  per node. Adding a connection moves the output's data to the input.
  Deleting one clears the input. When a delegate emits `data_updated`, the
  new data goes to every connected input. A connection is possible only when
  both ends carry the same data type id and neither port is full (inputs
  accept one connection, outputs many). `save()` / `load()` round-trip the
  graph as a JSON-ready dict. Loading a node whose model name is not
  registered raises `LookupError`.
- `nodeflow.text_models`: a worked example made of `TextData`,
  `TextSourceDataModel` (one output; `on_text_edited` changes its text) and
  `TextDisplayDataModel` (one input). `register_text_models()` builds a
  registry that holds both.
- `nodeflow.connection_style`: `Color` (hex and named colours, HSL,
  `darker`) and `ConnectionStyle` (`load_json`, `load_json_text`, `to_json`,
  `normal_color_for` for a stable per-type colour). A shared style is read
  with `current_connection_style()` and replaced with
  `set_connection_style(json_text)`.
- `nodeflow.geometry`: provides `Point`, `Size`, `Rect`, a fixed-width
  `FontMetrics`, `AbstractNodeGeometry` (bounding rect, port scene position,
  `check_port_hit`) and `HorizontalNodeGeometry`. That class computes node
  sizes, port and port-text positions, caption rectangles, the widget
  position and the resize handle.
- `nodeflow.connection_graphics`: contains `Orientation`, `ConnectionState`
  (required port, hover, last hovered node) and `ConnectionItem`. Its end
  points snap to node ports. It also computes the curve's control points
  (`points_c1c2`) and its bounding rectangle.
- `nodeflow.scene`: `BasicScene` keeps one `NodeItem` per node and one
  `ConnectionItem` per connection, in step with the model's signals. It
  also supports draft connections and emits `modified` and `node_moved`.
  `DataFlowScene` adds `selected_nodes`, `filter_models` (registered model
  names by category, filtered case-insensitively) and file storage.
  `save(path)` writes JSON and adds `.flow` when the name does not end in
  `flow`. `load(path)` clears the scene and reads the file back; it returns
  `False` when the file does not exist.
- `nodeflow.paths`: `CubicPath` (`point_at_percent`, `length`,
  `percent_at_length`), `cubic_path`, `painter_stroke` (a `Stroke` band for
  hit tests) and `create_arrow_poly` (an arrow-head triangle).

## Installation

```
pip install .
```

Running the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from nodeflow.data_flow_model import DataFlowGraphModel
from nodeflow.graph_model import ConnectionId, NodeRole
from nodeflow.scene import DataFlowScene
from nodeflow.text_models import register_text_models

model = DataFlowGraphModel(register_text_models())
scene = DataFlowScene(model)

source = model.add_node("TextSourceDataModel")
display = model.add_node("TextDisplayDataModel")
model.set_node_data(source, NodeRole.POSITION, (0.0, 0.0))
model.set_node_data(display, NodeRole.POSITION, (300.0, 0.0))

model.add_connection(ConnectionId(source, 0, display, 0))
print(model.delegate_model(display).input_text)   # "Default Text"

model.delegate_model(source).on_text_edited("hello")
print(model.delegate_model(display).input_text)   # "hello"

document = model.save()          # {"nodes": [...], "connections": [...]}
path = scene.save("graph")       # writes graph.flow

restored = DataFlowGraphModel(register_text_models())
restored.load(document)
```

Models report changes through `Signal` objects, for example
`model.node_created.connect(callback)`. Scenes subscribe to these signals.

## What it does not do

- It draws nothing. There is no window, canvas or painter. Scene items hold
  positions, selection flags and repaint counts, and the path functions
  return geometry for a renderer to use.
- It has no interactive editing: no mouse or keyboard handling, no context
  menus and no undo history.
- Only horizontal node layout is provided. `BasicScene.set_orientation`
  switches the connection curve between horizontal and vertical. By default,
  however, nodes keep `HorizontalNodeGeometry` unless a different
  `geometry_factory` is passed to the scene.
- It has no command-line program.