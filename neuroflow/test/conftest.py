import pytest

from neuroflow.compiler.ir import BranchCase, GraphEdge, GraphNode, GraphSnapshot
from neuroflow.core.Types import NodeKind


def make_node(node_id, kind, **kwargs):
    cases = kwargs.pop("cases", ())
    return GraphNode(
        id=node_id,
        kind=kind,
        cases=tuple(BranchCase(id=f"{node_id}_c{i}", value=v) for i, v in enumerate(cases)),
        **kwargs,
    )


def make_edge(source, source_handle, target, target_handle, edge_id=None):
    return GraphEdge(
        id=edge_id or f"{source}:{source_handle}->{target}:{target_handle}",
        source=source,
        source_handle=source_handle,
        target=target,
        target_handle=target_handle,
    )


def wire_node(node_id, node_type, **data):
    """Editor JSON node dict."""
    return {"id": node_id, "type": node_type, "data": data, "position": {"x": 0, "y": 0}}


def wire_edge(source, source_handle, target, target_handle, edge_id=None):
    return {
        "id": edge_id or f"{source}-{target}",
        "source": source,
        "sourceHandle": source_handle,
        "target": target,
        "targetHandle": target_handle,
    }


@pytest.fixture
def reach_target_snapshot():
    """Player at 0, target at 10, distance = player - target, reward = distance."""
    nodes = [
        make_node("player_1", NodeKind.PLAYER, variable_name="agent_pos", value=0),
        make_node("object_1", NodeKind.OBJECT, variable_name="target_pos", value=10),
        make_node("math_1", NodeKind.MATH, custom_name="distance", operation="-"),
        make_node("reward_1", NodeKind.REWARD),
    ]
    edges = [
        make_edge("player_1", "current_value", "math_1", "a"),
        make_edge("object_1", "current_value", "math_1", "b"),
        make_edge("math_1", "val", "reward_1", "value"),
    ]
    return GraphSnapshot(nodes=nodes, edges=edges, name="reach-target")


@pytest.fixture
def button_graph():
    """Editor JSON: a button that sets a status display."""
    return {
        "name": "button-demo",
        "nodes": [
            wire_node("btn", "ui_action", label="Submit", variableName="submit"),
            wire_node("status", "ui_state", label="Status", variableName="status", value=0),
        ],
        "edges": [wire_edge("btn", "trigger", "status", "set_value")],
    }
