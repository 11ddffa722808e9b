import ast
import logging

import pytest

from conftest import make_edge, make_node

from neuroflow.compiler import sim_emitter
from neuroflow.compiler.ir import GraphSnapshot
from neuroflow.core.Types import NodeKind


def method_body(source, name):
    """Source lines of one generated method, dedented to statement level."""
    tree = ast.parse(source)
    cls = next(n for n in tree.body if isinstance(n, ast.ClassDef))
    fn = next(f for f in cls.body if isinstance(f, ast.FunctionDef) and f.name == name)
    return [ast.unparse(stmt) for stmt in fn.body]


class TestSimBackend:
    def test_reach_target_step(self, reach_target_snapshot):
        source = sim_emitter.emit(reach_target_snapshot)
        assert "import numpy as np" in source
        assert method_body(source, "step")[:3] == [
            "self.agent_pos += float(action[0])",
            "self.distance = self.agent_pos - self.target_pos",
            "reward = float(self.distance)",
        ]
        assert "        return self.get_observation(), reward, False, False, {}" in source

    def test_reach_target_observation_and_reset(self, reach_target_snapshot):
        source = sim_emitter.emit(reach_target_snapshot)
        assert "return np.array([self.target_pos], dtype=np.float32)" in source
        assert method_body(source, "reset") == [
            "self.agent_pos = 0",
            "self.target_pos = 10",
            "return self.get_observation()",
        ]
        assert method_body(source, "__init__") == [
            "self.agent_pos = 0",
            "self.target_pos = 10",
            "self.distance = 0",
        ]

    def test_reach_target_runs(self, reach_target_snapshot):
        np = pytest.importorskip("numpy")
        namespace = {}
        exec(compile(sim_emitter.emit(reach_target_snapshot), "<generated>", "exec"), namespace)
        env = namespace[sim_emitter.CLASS_NAME]()

        obs = env.reset()
        assert obs.dtype == np.float32
        assert obs.tolist() == [10.0]

        obs, reward, terminated, truncated, info = env.step([1.0])
        assert env.agent_pos == 1.0
        assert reward == -9.0
        assert (terminated, truncated, info) == (False, False, {})

        env.step([2.0])
        assert env.distance == -7.0

    def test_no_reward_node(self):
        snapshot = GraphSnapshot(nodes=[make_node("p", NodeKind.PLAYER, variable_name="x")])
        assert "reward = float(0.0)" in sim_emitter.emit(snapshot)

    def test_unwired_reward_node(self):
        snapshot = GraphSnapshot(nodes=[make_node("r", NodeKind.REWARD)])
        assert "reward = float(0.0)" in sim_emitter.emit(snapshot)

    def test_reward_sums_sources(self):
        snapshot = GraphSnapshot(
            nodes=[
                make_node("a", NodeKind.OBJECT, variable_name="a"),
                make_node("b", NodeKind.OBJECT, variable_name="b"),
                make_node("r", NodeKind.REWARD),
            ],
            edges=[
                make_edge("a", "current_value", "r", "value"),
                make_edge("b", "current_value", "r", "value"),
            ],
        )
        assert "reward = float((self.a + self.b))" in sim_emitter.emit(snapshot)

    def test_only_first_reward_is_read(self, caplog):
        snapshot = GraphSnapshot(
            nodes=[
                make_node("a", NodeKind.OBJECT, variable_name="a"),
                make_node("r1", NodeKind.REWARD),
                make_node("r2", NodeKind.REWARD),
            ],
            edges=[make_edge("a", "current_value", "r2", "value")],
        )
        with caplog.at_level(logging.WARNING, logger="neuroflow.compiler.sim_emitter"):
            source = sim_emitter.emit(snapshot)
        assert "reward = float(0.0)" in source
        assert "only 'r1' is read" in caplog.text

    def test_action_index_follows_node_order(self):
        snapshot = GraphSnapshot(nodes=[
            make_node("p1", NodeKind.PLAYER, variable_name="x"),
            make_node("o", NodeKind.OBJECT, variable_name="goal"),
            make_node("v", NodeKind.VARIABLE, variable_name="y", is_action=True),
            make_node("p2", NodeKind.PLAYER, variable_name="z", is_action=False),
        ])
        step = method_body(sim_emitter.emit(snapshot), "step")
        assert step[:2] == [
            "self.x += float(action[0])",
            "self.y += float(action[1])",
        ]

    def test_observation_flags(self):
        snapshot = GraphSnapshot(nodes=[
            make_node("o1", NodeKind.OBJECT, variable_name="a"),
            make_node("p", NodeKind.PLAYER, variable_name="b", is_observation=True),
            make_node("o2", NodeKind.OBJECT, variable_name="c", is_observation=False),
        ])
        source = sim_emitter.emit(snapshot)
        assert "np.array([self.a, self.b], dtype=np.float32)" in source

    def test_step_uses_node_array_order(self):
        snapshot = GraphSnapshot(
            nodes=[
                make_node("c", NodeKind.COMPARE, custom_name="close", operation="<"),
                make_node("m", NodeKind.MATH, custom_name="dist", operation="-"),
                make_node("p", NodeKind.PLAYER, variable_name="pos"),
            ],
            edges=[
                make_edge("m", "val", "c", "a"),
                make_edge("p", "current_value", "m", "a"),
            ],
        )
        step = method_body(sim_emitter.emit(snapshot), "step")
        assert step[1] == "self.close = 1.0 if self.dist < 0 else 0.0"
        assert step[2] == "self.dist = self.pos - 0"

    def test_if_else_in_step(self):
        snapshot = GraphSnapshot(
            nodes=[
                make_node("p", NodeKind.PLAYER, variable_name="pos"),
                make_node("br", NodeKind.IF_ELSE, cases=["3"]),
                make_node("o", NodeKind.OBJECT, variable_name="hit"),
            ],
            edges=[
                make_edge("p", "current_value", "br", "input_val"),
                make_edge("br", "case_out_0", "o", "set_value"),
            ],
        )
        source = sim_emitter.emit(snapshot)
        ast.parse(source)
        assert "        if self.pos == 3:" in source
        assert "        else:" in source

    def test_empty_graph(self):
        source = sim_emitter.emit(GraphSnapshot())
        ast.parse(source)
        assert "return np.array([], dtype=np.float32)" in source
        assert method_body(source, "__init__") == ["pass"]

    def test_reserved_hook_name(self):
        snapshot = GraphSnapshot(nodes=[make_node("v", NodeKind.VARIABLE, custom_name="step")])
        source = sim_emitter.emit(snapshot)
        assert "self.step_2 = 0" in source

    def branch_gated_snapshot(self):
        return GraphSnapshot(
            nodes=[
                make_node("p", NodeKind.PLAYER, variable_name="pos"),
                make_node("br", NodeKind.IF_ELSE, cases=["3"]),
                make_node("m", NodeKind.MATH, custom_name="bonus"),
            ],
            edges=[
                make_edge("br", "case_out_0", "m", "a"),
                make_edge("p", "current_value", "m", "b"),
                make_edge("p", "current_value", "br", "input_val"),
            ],
        )

    def test_branch_target_only_evaluated_inside_branch(self):
        source = sim_emitter.emit(self.branch_gated_snapshot())
        assert source.count("self.bonus = 0 + self.pos") == 1
        step = method_body(source, "step")
        assert step[0] == "self.pos += float(action[0])"
        assert step[1].startswith("if self.pos == 3:")
        assert len(step) == 4

    def test_untaken_branch_leaves_target_unchanged(self):
        pytest.importorskip("numpy")
        namespace = {}
        exec(compile(sim_emitter.emit(self.branch_gated_snapshot()), "<generated>", "exec"), namespace)
        env = namespace[sim_emitter.CLASS_NAME]()
        env.reset()

        env.step([1.0])
        assert env.bonus == 0
        env.step([2.0])
        assert env.bonus == 3.0

    def test_branch_only_cycle_still_evaluated(self):
        snapshot = GraphSnapshot(
            nodes=[
                make_node("b1", NodeKind.IF_ELSE),
                make_node("b2", NodeKind.IF_ELSE),
            ],
            edges=[
                make_edge("b1", "default_branch", "b2", "input_val"),
                make_edge("b2", "default_branch", "b1", "input_val"),
            ],
        )
        source = sim_emitter.emit(snapshot)
        ast.parse(source)
        assert source.count("# cycle:") == 1
