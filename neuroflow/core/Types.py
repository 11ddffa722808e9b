from enum import Enum, auto
from typing import Dict, Optional


class PortDirection(Enum):
    INPUT = auto()
    OUTPUT = auto()


class PortFunction(Enum):
    DATA = auto()
    CONTROL = auto()


class NodeKind(Enum):
    """
    Closed set of node kinds understood by the compiler.

    The enum value is the wire string used by the editor JSON.
    """
    # UI mapped kinds
    ACTION = "ui_action"     # Action_Button
    NAV = "ui_nav"           # Navigation_Element
    STATE = "ui_state"       # Data_Display
    MEDIA = "ui_media"       # Media_Container

    # Storage
    VARIABLE = "variable"
    OBJECT = "object"
    PLAYER = "player"

    # Logic processing
    MATH = "math"
    COMPARE = "compare"
    IF_ELSE = "if_else"
    REWARD = "reward"

    @staticmethod
    def from_wire(type_name: str) -> Optional["NodeKind"]:
        try:
            return NodeKind(type_name)
        except ValueError:
            return None

    def is_trigger(self) -> bool:
        return self in TRIGGER_KINDS


TRIGGER_KINDS = frozenset({NodeKind.ACTION, NodeKind.NAV})

ASSIGNABLE_KINDS = frozenset({
    NodeKind.STATE,
    NodeKind.MEDIA,
    NodeKind.VARIABLE,
    NodeKind.OBJECT,
    NodeKind.PLAYER,
})

# Kinds that own a state variable in every generated program.
VALUE_KINDS = ASSIGNABLE_KINDS | {NodeKind.MATH, NodeKind.COMPARE}

# Kinds re-initialised by the simulation reset() hook.
RESETTABLE_KINDS = frozenset({NodeKind.OBJECT, NodeKind.PLAYER})

# Kinds evaluated once per simulation step().
STEP_KINDS = frozenset({NodeKind.MATH, NodeKind.COMPARE, NodeKind.IF_ELSE})

MATH_OPERATORS = ("+", "-", "*", "/")
COMPARE_OPERATORS = ("==", "!=", ">", "<", ">=", "<=")


# ── Port schema ───────────────────────────────────────────────────────────────
#
# Maps kind → {port_name → {direction, function}}.
# IfElse case outputs (case_out_<index>) are dynamic: one per branch case.

_P = Dict[str, Dict[str, object]]

CASE_PORT_PREFIX = "case_out_"
DEFAULT_BRANCH_PORT = "default_branch"


def _in(function: PortFunction = PortFunction.DATA) -> Dict[str, object]:
    return {"direction": PortDirection.INPUT, "function": function}


def _out(function: PortFunction = PortFunction.DATA) -> Dict[str, object]:
    return {"direction": PortDirection.OUTPUT, "function": function}


_TRIGGER_PORTS: _P = {
    "chain_input": _in(PortFunction.CONTROL),
    "trigger":     _out(PortFunction.CONTROL),
}

_STATE_PORTS: _P = {
    "set_value":     _in(),
    "current_value": _out(),
}

_BINARY_PORTS: _P = {
    "a":   _in(),
    "b":   _in(),
    "val": _out(),
}

KIND_PORTS: Dict[NodeKind, _P] = {
    NodeKind.ACTION:   _TRIGGER_PORTS,
    NodeKind.NAV:      _TRIGGER_PORTS,
    NodeKind.STATE:    _STATE_PORTS,
    NodeKind.MEDIA:    _STATE_PORTS,
    NodeKind.OBJECT:   _STATE_PORTS,
    NodeKind.PLAYER:   _STATE_PORTS,
    NodeKind.VARIABLE: {
        "set": _in(),
        "get": _out(),
    },
    NodeKind.MATH:     _BINARY_PORTS,
    NodeKind.COMPARE:  _BINARY_PORTS,
    NodeKind.IF_ELSE:  {
        "input_val":         _in(),
        "condition":         _in(),
        "exec":              _in(PortFunction.CONTROL),
        DEFAULT_BRANCH_PORT: _out(PortFunction.CONTROL),
    },
    NodeKind.REWARD:   {
        "value": _in(),
    },
}

# Alternate spellings of the same logical input port.
PORT_ALIASES: Dict[str, tuple] = {
    "input_val": ("input_val", "condition"),
    "condition": ("input_val", "condition"),
}


def case_port(index: int) -> str:
    return f"{CASE_PORT_PREFIX}{index}"


def is_valid_port(kind: NodeKind, port_name: str, direction: PortDirection, case_count: int = 0) -> bool:
    """Check a port name against the fixed port set for *kind*."""
    port_name = PORT_ALIASES.get(port_name, (port_name,))[0]
    if kind == NodeKind.IF_ELSE and direction == PortDirection.OUTPUT:
        if port_name.startswith(CASE_PORT_PREFIX):
            suffix = port_name[len(CASE_PORT_PREFIX):]
            return suffix.isdigit() and int(suffix) < case_count
    spec = KIND_PORTS[kind].get(port_name)
    return spec is not None and spec["direction"] == direction


def default_port(kind: NodeKind, direction: PortDirection) -> Optional[str]:
    """First declared port of *kind* in *direction*; used for edges without a handle."""
    for name, spec in KIND_PORTS[kind].items():
        if spec["direction"] == direction:
            return name
    return None
