"""
app.py — Shortest-Path Visualizer Flask App
=============================================
The web server that hosts one TimelineController per browser session.

Routes:
  GET  /                       – minimal UI (canvas + controls)
  GET  /api/algorithms         – registry cards
  POST /api/graph/generate     – random graph for the selected algorithm
  POST /api/graph/load         – load a graph from JSON
  POST /api/graph/node         – add a node at (x, y)
  DELETE /api/graph/node/<id>  – delete a node (ids renumber, source follows)
  POST /api/graph/edge         – add a directed edge (source, target, weight)
  DELETE /api/graph/edge/<id>  – delete an edge by its "s-t" id
  POST /api/config/algo        – select algorithm (resets the run)
  POST /api/config/source      – select source node (resets the run)
  POST /api/config/speed       – preset / slider level / raw interval
  POST /api/run/start          – begin auto-replay
  POST /api/run/pause          – pause auto-replay
  POST /api/run/resume         – resume auto-replay
  POST /api/run/reset          – discard the run
  POST /api/step/next          – step forward
  POST /api/step/prev          – step backward
  POST /api/step/skip          – skip to the next significant step
  POST /api/step/goto          – jump to step N
  POST /api/tick               – auto-replay heartbeat (client timer)
  GET  /api/state              – current state + SVG
  GET  /api/answer             – final shortest-path view (View mode, pauses the run;
                                 ?destination=N keeps only the path to N)

State management:
  The Flask session cookie only carries an opaque id.  Controllers live
  in-process in `_controllers`, keyed by that id.  At most MAX_SESSIONS
  controllers are kept; the least recently used one is dropped first.
  Every response is the controller snapshot plus the rendered SVG.
  Graph edits reset the run.

  The client drives auto-replay: it polls /api/tick with the `tickToken`
  it last saw; a pause or reset invalidates the token.

Errors:
  GraphError and unknown algorithm keys are ValueErrors; they come back as
  400 {"error": "..."}.  Out-of-range navigation is not an error, it
  returns the unchanged state.
"""

import math
import secrets
from collections import OrderedDict
from numbers import Real
from typing import Optional

from flask import Flask, jsonify, render_template_string, request, session

from spviz.algorithms import list_algorithms
from spviz.config import (
    GENERATION_DEFAULTS,
    PLAYBACK_DEFAULTS,
    SPEED_PRESETS,
    AppConfig,
    GenerationParams,
    speed_from_slider,
)
from spviz.engine import TimelineController, ViewState
from spviz.graph import Graph, GraphError, generate_random_graph
from spviz.logging import get_logger, level_from_name, set_global_log_level
from spviz.ui import render_canvas

logger = get_logger(__name__)

CONFIG = AppConfig.from_env()
set_global_log_level(level_from_name(CONFIG.log_level))

app = Flask(__name__)
app.secret_key = CONFIG.secret_key or secrets.token_hex(32)

# least recently used first
_controllers: "OrderedDict[str, TimelineController]" = OrderedDict()
MAX_SESSIONS = CONFIG.max_sessions


# ---------------------------------------------------------------------------
# Session Helpers
# ---------------------------------------------------------------------------
def _new_controller() -> TimelineController:
    generated = generate_random_graph(
        GENERATION_DEFAULTS, PLAYBACK_DEFAULTS.default_algorithm, seed=42
    )
    return TimelineController(
        graph=generated.graph,
        source_id=generated.source_id,
        algorithm=PLAYBACK_DEFAULTS.default_algorithm,
        interval=PLAYBACK_DEFAULTS.interval,
    )


def get_controller() -> TimelineController:
    """The controller bound to this browser session (created on first use)."""
    sid = session.get("sid")
    if sid is not None and sid in _controllers:
        _controllers.move_to_end(sid)
        return _controllers[sid]

    sid = secrets.token_hex(16)
    session["sid"] = sid
    _controllers[sid] = _new_controller()
    logger.info("New session %s", sid[:8])
    while len(_controllers) > max(1, MAX_SESSIONS):
        evicted, _ = _controllers.popitem(last=False)
        logger.info("Evicted idle session %s", evicted[:8])
    return _controllers[sid]


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _state(ctl: TimelineController, view: Optional[ViewState] = None, **extra) -> dict:
    data = ctl.snapshot()
    if view is not None:
        data["view"] = view.to_dict()
    data["svg"] = render_canvas(ctl.graph, view or ctl.view, source_id=ctl.source_id)
    data["graph"] = ctl.graph.to_dict()
    data["algorithmInfo"] = ctl.algorithm_info.to_dict()
    data.update(extra)
    return data


def _int_field(data: dict, key: str, default: Optional[int] = None) -> int:
    value = data.get(key, default)
    if isinstance(value, bool):
        raise GraphError(f"'{key}' must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise GraphError(f"'{key}' must be an integer, got {value!r}") from exc


def _float_field(data: dict, key: str, default: Optional[float] = None) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
        raise GraphError(f"'{key}' must be a finite number, got {value!r}")
    return float(value)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
@app.errorhandler(ValueError)
def handle_value_error(exc: ValueError):
    logger.warning("Rejected %s %s: %s", request.method, request.path, exc)
    return jsonify({"error": str(exc)}), 400


# ---------------------------------------------------------------------------
# Main UI Route
# ---------------------------------------------------------------------------
@app.route("/")
def index():
    ctl = get_controller()
    svg = render_canvas(ctl.graph, ctl.view, source_id=ctl.source_id)
    return render_template_string(
        INDEX_TEMPLATE,
        svg=svg,
        algorithms=list_algorithms(),
        selected=ctl.algorithm,
        nodes=ctl.graph.nodes,
        source_id=ctl.source_id,
        presets=SPEED_PRESETS,
    )


@app.route("/api/algorithms")
def api_algorithms():
    return jsonify([info.to_dict() for info in list_algorithms()])


# ---------------------------------------------------------------------------
# API: Graph
# ---------------------------------------------------------------------------
@app.route("/api/graph/generate", methods=["POST"])
def api_graph_generate():
    ctl = get_controller()
    data = _body()
    algorithm = data.get("algorithm", ctl.algorithm)
    try:
        params = GenerationParams.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise GraphError(f"invalid generation parameters: {exc}") from exc
    seed = data.get("seed")
    if seed is not None:
        seed = _int_field(data, "seed")

    generated = generate_random_graph(params, algorithm, seed=seed)
    ctl.load(generated.graph, generated.source_id, algorithm)
    return jsonify(_state(ctl, hasNegativeCycle=generated.has_negative_cycle))


@app.route("/api/graph/load", methods=["POST"])
def api_graph_load():
    ctl = get_controller()
    data = _body()
    try:
        graph = Graph.from_dict(data.get("graph") or {})
    except (KeyError, TypeError, ValueError) as exc:
        raise GraphError(f"malformed graph: {exc}") from exc

    source = _int_field(data, "source", 0)
    if graph.node_count():
        graph.validate(source)
    ctl.load(graph, source, data.get("algorithm"))
    return jsonify(_state(ctl))


@app.route("/api/graph/node", methods=["POST"])
def api_graph_add_node():
    ctl = get_controller()
    data = _body()
    node = ctl.add_node(_float_field(data, "x", 0.0), _float_field(data, "y", 0.0))
    return jsonify(_state(ctl, nodeId=node.id))


@app.route("/api/graph/node/<int:node_id>", methods=["DELETE"])
def api_graph_remove_node(node_id: int):
    ctl = get_controller()
    ctl.remove_node(node_id)
    return jsonify(_state(ctl))


@app.route("/api/graph/edge", methods=["POST"])
def api_graph_add_edge():
    ctl = get_controller()
    data = _body()
    edge = ctl.add_edge(
        _int_field(data, "source"), _int_field(data, "target"), data.get("weight", 1)
    )
    return jsonify(_state(ctl, edgeId=edge.id))


@app.route("/api/graph/edge/<edge_id>", methods=["DELETE"])
def api_graph_remove_edge(edge_id: str):
    ctl = get_controller()
    ctl.remove_edge(edge_id)
    return jsonify(_state(ctl))


# ---------------------------------------------------------------------------
# API: Config Changes
# ---------------------------------------------------------------------------
@app.route("/api/config/algo", methods=["POST"])
def api_config_algo():
    ctl = get_controller()
    ctl.set_algorithm(_body().get("algo_key", PLAYBACK_DEFAULTS.default_algorithm))
    return jsonify(_state(ctl))


@app.route("/api/config/source", methods=["POST"])
def api_config_source():
    ctl = get_controller()
    ctl.set_source(_int_field(_body(), "source"))
    return jsonify(_state(ctl))


@app.route("/api/config/speed", methods=["POST"])
def api_config_speed():
    ctl = get_controller()
    data = _body()
    if "speed" in data:
        ctl.set_speed(str(data["speed"]))
    elif "level" in data:
        ctl.set_interval(speed_from_slider(_int_field(data, "level")))
    elif "interval" in data:
        try:
            ctl.set_interval(float(data["interval"]))
        except (TypeError, ValueError) as exc:
            raise GraphError(f"'interval' must be a number, got {data['interval']!r}") from exc
    return jsonify(_state(ctl))


# ---------------------------------------------------------------------------
# API: Run Lifecycle
# ---------------------------------------------------------------------------
@app.route("/api/run/start", methods=["POST"])
def api_run_start():
    ctl = get_controller()
    ctl.start()
    return jsonify(_state(ctl))


@app.route("/api/run/pause", methods=["POST"])
def api_run_pause():
    ctl = get_controller()
    ctl.pause()
    return jsonify(_state(ctl))


@app.route("/api/run/resume", methods=["POST"])
def api_run_resume():
    ctl = get_controller()
    ctl.resume()
    return jsonify(_state(ctl))


@app.route("/api/run/reset", methods=["POST"])
def api_run_reset():
    ctl = get_controller()
    ctl.reset()
    return jsonify(_state(ctl))


# ---------------------------------------------------------------------------
# API: Step Navigation
# ---------------------------------------------------------------------------
@app.route("/api/step/next", methods=["POST"])
def api_step_next():
    ctl = get_controller()
    applied = ctl.step_forward()
    return jsonify(_state(ctl, applied=applied))


@app.route("/api/step/prev", methods=["POST"])
def api_step_prev():
    ctl = get_controller()
    applied = ctl.step_backward()
    return jsonify(_state(ctl, applied=applied))


@app.route("/api/step/skip", methods=["POST"])
def api_step_skip():
    ctl = get_controller()
    skipped = ctl.skip_to_next_event()
    return jsonify(_state(ctl, skipped=skipped))


@app.route("/api/step/goto", methods=["POST"])
def api_step_goto():
    ctl = get_controller()
    applied = ctl.jump_to(_int_field(_body(), "index", 0))
    return jsonify(_state(ctl, applied=applied))


@app.route("/api/tick", methods=["POST"])
def api_tick():
    ctl = get_controller()
    data = _body()
    token = _int_field(data, "token") if data.get("token") is not None else None
    applied = ctl.tick(token=token)
    return jsonify(_state(ctl, applied=applied))


# ---------------------------------------------------------------------------
# API: Read-only
# ---------------------------------------------------------------------------
@app.route("/api/state")
def api_state():
    return jsonify(_state(get_controller()))


@app.route("/api/answer")
def api_answer():
    ctl = get_controller()
    destination = request.args.get("destination", type=int)
    # View mode freezes the replay
    ctl.pause()
    return jsonify(_state(ctl, view=ctl.final_view(destination)))


# ---------------------------------------------------------------------------
# HTML Template
# ---------------------------------------------------------------------------
INDEX_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Shortest-Path Visualizer</title>
  <style>
    body { background: #0d1117; color: #e6edf3; font-family: 'DM Sans', sans-serif; margin: 24px; }
    button, select, input { background: #161b22; color: #e6edf3; border: 1px solid #30363d;
                            border-radius: 6px; padding: 6px 12px; margin-right: 4px; }
    #editor { margin-top: 8px; }
    #edge-weight { width: 5em; }
    .hint { color: #7d8590; }
    #explanation { color: #7d8590; min-height: 1.5em; margin-top: 12px; }
  </style>
</head>
<body>
  <div id="controls">
    <select id="algo">
      {% for a in algorithms %}
      <option value="{{ a.key }}" {% if a.key == selected %}selected{% endif %}>{{ a.label }}</option>
      {% endfor %}
    </select>
    <select id="source">
      {% for n in nodes %}
      <option value="{{ n.id }}" {% if n.id == source_id %}selected{% endif %}>{{ n.label }}</option>
      {% endfor %}
    </select>
    <select id="speed">
      {% for name in presets %}
      <option value="{{ name }}" {% if name == 'medium' %}selected{% endif %}>{{ name }}</option>
      {% endfor %}
    </select>
    <button data-api="/api/graph/generate">Generate</button>
    <button id="play">Play / Pause</button>
    <button data-api="/api/step/prev">Back</button>
    <button data-api="/api/step/next">Next</button>
    <button data-api="/api/step/skip">Skip</button>
    <button data-api="/api/run/reset">Reset</button>
    <select id="destination">
      <option value="">all destinations</option>
      {% for n in nodes %}
      <option value="{{ n.id }}">{{ n.label }}</option>
      {% endfor %}
    </select>
    <button id="answer">Show answer</button>
  </div>
  <div id="editor">
    <select id="edge-from"></select>
    <select id="edge-to"></select>
    <input id="edge-weight" type="number" value="1" step="any">
    <button id="add-edge">Add edge</button>
    <button id="remove-edge">Delete edge</button>
    <button id="remove-node">Delete node (from)</button>
    <span class="hint">Click empty canvas to add a node.</span>
  </div>
  <div id="canvas">{{ svg | safe }}</div>
  <div id="explanation"></div>

  <script>
    let state = null;
    let timer = null;

    async function call(url, body, method) {
      const res = await fetch(url, {
        method: method || 'POST',
        headers: {'Content-Type': 'application/json'},
        body: method === 'GET' ? undefined : JSON.stringify(body || {}),
      });
      const data = await res.json();
      if (!res.ok) { alert(data.error); return null; }
      show(data);
      return data;
    }

    function fillNodes(id, nodes, head) {
      const select = document.getElementById(id);
      const keep = select.value;
      select.innerHTML = head + nodes.map(n => `<option value="${n.id}">${n.label}</option>`).join('');
      if ([...select.options].some(o => o.value === keep)) select.value = keep;
    }

    function show(data) {
      state = data;
      document.getElementById('canvas').innerHTML = data.svg;
      document.getElementById('explanation').textContent = data.message || data.view.explanation;
      document.getElementById('source').innerHTML = data.graph.nodes.map(n =>
        `<option value="${n.id}" ${n.id === data.source ? 'selected' : ''}>${n.label}</option>`).join('');
      fillNodes('destination', data.graph.nodes, '<option value="">all destinations</option>');
      fillNodes('edge-from', data.graph.nodes, '');
      fillNodes('edge-to', data.graph.nodes, '');
      document.getElementById('algo').value = data.algorithm;
      clearInterval(timer);
      if (data.state === 'running') {
        const token = data.tickToken;
        timer = setInterval(() => call('/api/tick', {token}), data.interval * 1000);
      }
    }

    document.querySelectorAll('[data-api]').forEach(btn =>
      btn.addEventListener('click', () => call(btn.dataset.api, {algorithm: state && state.algorithm})));
    document.getElementById('play').addEventListener('click', () =>
      call(state && state.state === 'running' ? '/api/run/pause' : '/api/run/start'));
    document.getElementById('answer').addEventListener('click', () => {
      const dest = document.getElementById('destination').value;
      call(dest === '' ? '/api/answer' : `/api/answer?destination=${dest}`, null, 'GET');
    });
    document.getElementById('canvas').addEventListener('click', e => {
      if (e.target.closest('.node') || e.target.closest('.edge')) return;
      const box = e.currentTarget.querySelector('svg').getBoundingClientRect();
      call('/api/graph/node', {x: e.clientX - box.left, y: e.clientY - box.top});
    });
    const edgeEnds = () => [document.getElementById('edge-from').value, document.getElementById('edge-to').value];
    document.getElementById('add-edge').addEventListener('click', () => {
      const [source, target] = edgeEnds();
      call('/api/graph/edge', {source, target, weight: Number(document.getElementById('edge-weight').value)});
    });
    document.getElementById('remove-edge').addEventListener('click', () =>
      call(`/api/graph/edge/${edgeEnds().join('-')}`, null, 'DELETE'));
    document.getElementById('remove-node').addEventListener('click', () =>
      call(`/api/graph/node/${edgeEnds()[0]}`, null, 'DELETE'));
    document.getElementById('algo').addEventListener('change', e =>
      call('/api/config/algo', {algo_key: e.target.value}));
    document.getElementById('source').addEventListener('change', e =>
      call('/api/config/source', {source: e.target.value}));
    document.getElementById('speed').addEventListener('change', e =>
      call('/api/config/speed', {speed: e.target.value}));

    call('/api/state', null, 'GET');
  </script>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    print("=" * 60)
    print("  Shortest-Path Visualizer")
    print("  Open http://localhost:5000")
    print("=" * 60)
    # controllers are not thread-safe
    app.run(debug=False, port=5000, threaded=False)
