import pytest

from conftest import make_edge, make_node

from neuroflow.compiler.ir import BranchCase, GraphNode, GraphSnapshot
from neuroflow.compiler.schema import KNOWN_NODE_TYPES
from neuroflow.core.Types import (
    NodeKind,
    PortDirection,
    case_port,
    default_port,
    is_valid_port,
)


class TestGraphSnapshot:
    def setup_method(self):
        self.nodes = [
            make_node("btn", NodeKind.ACTION),
            make_node("s", NodeKind.STATE),
            make_node("v", NodeKind.VARIABLE),
        ]
        self.edges = [
            make_edge("btn", "trigger", "s", "set_value", "e1"),
            make_edge("v", "get", "s", "set_value", "e2"),
            make_edge("btn", "trigger", "v", "set", "e3"),
            make_edge("ghost", "get", "v", "set", "e4"),
        ]
        self.snapshot = GraphSnapshot(nodes=self.nodes, edges=self.edges)

    def test_lists_become_tuples(self):
        assert isinstance(self.snapshot.nodes, tuple)
        assert isinstance(self.snapshot.edges, tuple)

    def test_lookup(self):
        assert self.snapshot.get_node("s") is self.nodes[1]
        assert self.snapshot.get_node("ghost") is None

    def test_edge_queries(self):
        assert [e.id for e in self.snapshot.get_outgoing("btn", "trigger")] == ["e1", "e3"]
        assert [e.id for e in self.snapshot.get_incoming("s", "set_value")] == ["e1", "e2"]
        assert [e.id for e in self.snapshot.get_incoming("v", "set")] == ["e3", "e4"]
        assert self.snapshot.get_incoming("s") == []

    def test_incoming_across_ports_keeps_edge_order(self):
        snapshot = GraphSnapshot(
            nodes=[make_node("br", NodeKind.IF_ELSE)],
            edges=[
                make_edge("a", "get", "br", "input_val", "e1"),
                make_edge("b", "get", "br", "condition", "e2"),
                make_edge("c", "get", "br", "input_val", "e3"),
            ],
        )
        incoming = snapshot.get_incoming("br", "input_val", "condition")
        assert [e.id for e in incoming] == ["e1", "e2", "e3"]

    def test_nodes_of(self):
        assert [n.id for n in self.snapshot.nodes_of(NodeKind.STATE, NodeKind.VARIABLE)] == ["s", "v"]

    def test_duplicate_node_id(self):
        with pytest.raises(ValueError, match="duplicate node id"):
            GraphSnapshot(nodes=[make_node("a", NodeKind.MATH), make_node("a", NodeKind.MATH)])

    def test_equality_ignores_index(self):
        assert GraphSnapshot(nodes=self.nodes) == GraphSnapshot(nodes=list(self.nodes))

    def test_frozen(self):
        with pytest.raises(AttributeError):
            self.snapshot.name = "other"


class TestGraphNode:
    def test_duplicate_case_id(self):
        cases = (BranchCase("c", "1"), BranchCase("c", "2"))
        with pytest.raises(ValueError, match="duplicate branch case id"):
            GraphNode(id="br", kind=NodeKind.IF_ELSE, cases=cases)

    def test_display_name(self):
        assert make_node("n", NodeKind.ACTION, custom_name="Go", label="GO BTN").display_name == "Go"
        assert make_node("n", NodeKind.ACTION, label="GO BTN").display_name == "GO BTN"
        assert make_node("n", NodeKind.ACTION).display_name == "n"

    def test_kind_default_flags(self):
        player = make_node("p", NodeKind.PLAYER)
        obj = make_node("o", NodeKind.OBJECT)
        var = make_node("v", NodeKind.VARIABLE)
        assert (player.action_flagged, player.observation_flagged) == (True, False)
        assert (obj.action_flagged, obj.observation_flagged) == (False, True)
        assert (var.action_flagged, var.observation_flagged) == (False, False)

    def test_explicit_flags_override(self):
        node = make_node("p", NodeKind.PLAYER, is_action=False, is_observation=True)
        assert node.action_flagged is False
        assert node.observation_flagged is True


class TestNodeKinds:
    def test_wire_values(self):
        assert NodeKind.from_wire("ui_action") is NodeKind.ACTION
        assert NodeKind.from_wire("if_else") is NodeKind.IF_ELSE
        assert NodeKind.from_wire("teleporter") is None
        assert "reward" in KNOWN_NODE_TYPES
        assert len(KNOWN_NODE_TYPES) == len(NodeKind)

    def test_kind_predicates(self):
        assert NodeKind.NAV.is_trigger()
        assert not NodeKind.MATH.is_trigger()

    def test_port_validity(self):
        assert is_valid_port(NodeKind.MATH, "a", PortDirection.INPUT)
        assert not is_valid_port(NodeKind.MATH, "val", PortDirection.INPUT)
        assert is_valid_port(NodeKind.IF_ELSE, "condition", PortDirection.INPUT)
        assert is_valid_port(NodeKind.IF_ELSE, case_port(1), PortDirection.OUTPUT, case_count=2)
        assert not is_valid_port(NodeKind.IF_ELSE, case_port(2), PortDirection.OUTPUT, case_count=2)
        assert not is_valid_port(NodeKind.REWARD, "value", PortDirection.OUTPUT)

    def test_default_ports(self):
        assert default_port(NodeKind.ACTION, PortDirection.OUTPUT) == "trigger"
        assert default_port(NodeKind.VARIABLE, PortDirection.INPUT) == "set"
        assert default_port(NodeKind.IF_ELSE, PortDirection.OUTPUT) == "default_branch"
        assert default_port(NodeKind.REWARD, PortDirection.OUTPUT) is None
