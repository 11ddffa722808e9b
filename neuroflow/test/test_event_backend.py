import ast

from conftest import make_edge, make_node

from neuroflow.compiler import event_emitter
from neuroflow.compiler.ir import GraphSnapshot
from neuroflow.core.Types import NodeKind


def method_names(source):
    tree = ast.parse(source)
    cls = next(n for n in tree.body if isinstance(n, ast.ClassDef))
    return [f.name for f in cls.body if isinstance(f, ast.FunctionDef)]


def run_generated(source):
    namespace = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace[event_emitter.CLASS_NAME]()


class TestEventBackend:
    def test_empty_graph(self):
        source = event_emitter.emit(GraphSnapshot())
        assert "class NeuroFlowEnv:" in source
        assert method_names(source) == ["__init__", "get_state"]
        env = run_generated(source)
        assert env.get_state() == {}

    def test_header(self):
        source = event_emitter.emit(GraphSnapshot(name="my graph"))
        lines = source.splitlines()
        assert lines[0] == "# NeuroFlow Auto-Generated Logic Engine"
        assert lines[1] == "# Graph: my graph"

    def test_one_handler_per_trigger(self):
        snapshot = GraphSnapshot(nodes=[
            make_node("b1", NodeKind.ACTION, variable_name="login"),
            make_node("n1", NodeKind.NAV, variable_name="home"),
            make_node("v", NodeKind.VARIABLE, variable_name="v"),
        ])
        names = method_names(event_emitter.emit(snapshot))
        assert names == ["__init__", "get_state", "on_login_trigger", "on_home_trigger"]

    def test_unwired_trigger_is_noop(self):
        snapshot = GraphSnapshot(nodes=[make_node("b1", NodeKind.ACTION, label="Go")])
        source = event_emitter.emit(snapshot)
        assert '"""Logic triggered by Go"""' in source
        assert "        pass" in source
        env = run_generated(source)
        assert env.on_b1_trigger() is None

    def test_state_declarations(self):
        snapshot = GraphSnapshot(nodes=[
            make_node("s", NodeKind.STATE, variable_name="status", value=0, purpose="Shows\nstatus"),
            make_node("v", NodeKind.VARIABLE, variable_name="mode", value="guest"),
            make_node("m", NodeKind.MATH, custom_name="total"),
        ])
        source = event_emitter.emit(snapshot)
        assert "# UI State Variables (Mapped from Graph)" in source
        assert "self.status = 0  # Shows status" in source
        assert "self.mode = 'guest'" in source
        env = run_generated(source)
        assert env.get_state() == {"status": 0, "mode": "guest", "total": 0}

    def test_handler_runs(self, button_graph):
        from neuroflow.compiler.deserialiser import json_to_snapshot

        env = run_generated(event_emitter.emit(json_to_snapshot(button_graph)))
        assert env.get_state() == {"status": 0}
        env.on_submit_trigger()
        assert env.get_state() == {"status": 1.0}

    def test_branching_handler_runs(self):
        snapshot = GraphSnapshot(
            nodes=[
                make_node("btn", NodeKind.ACTION, custom_name="go"),
                make_node("mode", NodeKind.VARIABLE, variable_name="mode", value="admin"),
                make_node("br", NodeKind.IF_ELSE, cases=["guest", "admin"]),
                make_node("hit", NodeKind.STATE, variable_name="hit", value=0),
                make_node("five", NodeKind.VARIABLE, variable_name="five", value=5),
            ],
            edges=[
                make_edge("five", "get", "hit", "set_value"),
                make_edge("btn", "trigger", "br", "exec"),
                make_edge("mode", "get", "br", "input_val"),
                make_edge("br", "case_out_1", "hit", "set_value"),
            ],
        )
        env = run_generated(event_emitter.emit(snapshot))
        env.on_go_trigger()
        assert env.hit == 5
        env.hit = 0
        env.mode = "guest"
        env.on_go_trigger()
        assert env.hit == 0

    def test_docstring_is_escaped(self):
        snapshot = GraphSnapshot(nodes=[make_node("b", NodeKind.ACTION, label='Say "hi" \\')])
        ast.parse(event_emitter.emit(snapshot))

    def test_deterministic(self, reach_target_snapshot):
        assert event_emitter.emit(reach_target_snapshot) == event_emitter.emit(reach_target_snapshot)

    def test_reserved_member_name(self):
        snapshot = GraphSnapshot(nodes=[make_node("v", NodeKind.VARIABLE, custom_name="get_state")])
        source = event_emitter.emit(snapshot)
        assert "self.get_state_2 = 0" in source
        assert run_generated(source).get_state() == {"get_state_2": 0}

    def test_state_cannot_shadow_handler(self):
        snapshot = GraphSnapshot(
            nodes=[
                make_node("btn", NodeKind.ACTION, variable_name="start"),
                make_node("s", NodeKind.STATE, variable_name="on_start_trigger"),
            ],
            edges=[make_edge("btn", "trigger", "s", "set_value")],
        )
        source = event_emitter.emit(snapshot)
        assert "def on_start_trigger(self):" in source
        assert "self.on_start_trigger_2 = 0" in source

        env = run_generated(source)
        assert env.on_start_trigger() is None
        assert env.get_state() == {"on_start_trigger_2": 1.0}
