"""
Generic value nodes for visualization specifications.

A Node wraps exactly one of:
    - nothing (absent)
    - a scalar (str, int, float, bool)
    - an ordered sequence of Nodes (stored as a tuple)
    - a name -> Node mapping (stored as a read-only MappingProxyType)

ARCHITECTURAL RULE:
    Construction normalizes recursively. A Node never holds an
    unwrapped list or dict, so two Nodes built from the same raw
    input compare equal no matter how the input was nested.

Composition operators live in `vizcompose.composition`. The
`Composable` mixin only forwards the Python operators to them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple


class Composable:
    """
    Operator surface shared by every specification object.

        a * b   merge (right operand wins)
        a + b   layer (a renders below b)
        a | b   row concatenation
        a & b   column concatenation
    """

    def __mul__(self, other):
        from vizcompose.composition import merge
        return merge(self, other)

    def __add__(self, other):
        from vizcompose.composition import layer
        return layer(self, other)

    def __or__(self, other):
        from vizcompose.composition.concat import extend_row
        return extend_row(self, other)

    def __and__(self, other):
        from vizcompose.composition.concat import extend_column
        return extend_column(self, other)


def _wrap(value: Any) -> Any:
    """Normalize a raw value into the storage form of Node.value."""
    if isinstance(value, Node):
        return value.value
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Mapping):
        return MappingProxyType({str(_wrap(k)): Node(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(Node(v) for v in value)
    return value


@dataclass(frozen=True)
class Node(Composable):
    """
    Immutable, recursively normalized specification value.

    Examples:
        Node("bar")                      -> scalar
        Node({"x": {"field": "a"}})      -> mapping of mapping
        Node([{"filter": "d.a > 1"}])    -> sequence of mappings
        Node()                           -> absent

    Wrapping an existing Node is idempotent: Node(Node(x)) == Node(x).
    """

    value: Any = None

    def __post_init__(self):
        object.__setattr__(self, "value", _wrap(self.value))

    @property
    def is_absent(self) -> bool:
        return self.value is None

    @property
    def is_mapping(self) -> bool:
        return isinstance(self.value, MappingProxyType)

    @property
    def is_sequence(self) -> bool:
        return isinstance(self.value, tuple)

    def keys(self) -> Tuple[str, ...]:
        """Names of a mapping node; empty for anything else."""
        if self.is_mapping:
            return tuple(self.value.keys())
        return ()

    def get(self, name: str) -> Node:
        """Child of a mapping node, or an absent Node."""
        if self.is_mapping:
            return self.value.get(name, ABSENT)
        return ABSENT

    def items(self) -> Iterator[Tuple[str, Node]]:
        if self.is_mapping:
            yield from self.value.items()

    def __getitem__(self, key):
        if self.is_mapping:
            return self.value[key]
        if self.is_sequence:
            return self.value[key]
        raise TypeError(f"Node holding {type(self.value).__name__} is not subscriptable")

    def __iter__(self):
        if self.is_sequence:
            return iter(self.value)
        if self.is_mapping:
            return iter(self.value)
        raise TypeError(f"Node holding {type(self.value).__name__} is not iterable")

    def __len__(self) -> int:
        if self.is_sequence or self.is_mapping:
            return len(self.value)
        return 0 if self.is_absent else 1

    def __bool__(self) -> bool:
        return not self.is_absent

    def __hash__(self) -> int:
        # mapping equality ignores key order, so the hash must too
        if self.is_mapping:
            return hash(frozenset(self.value.items()))
        return hash(self.value)

    def raw(self) -> Any:
        """Unwrap back to plain Python values (dict / list / scalar / None)."""
        if self.is_mapping:
            return {k: v.raw() for k, v in self.value.items()}
        if self.is_sequence:
            return [v.raw() for v in self.value]
        return self.value


ABSENT = Node()


def node(value: Optional[Any] = None, **fields: Any) -> Node:
    """
    Build a Node from a value or from keyword fields.

        node({"a": 1}) == node(a=1)
    """
    if fields:
        if value is not None:
            raise TypeError("node() takes either a value or keyword fields, not both")
        return Node(dict(fields))
    return Node(value)


def merge_nodes(a: Node, b: Node) -> Node:
    """
    Right-biased deep merge of two Nodes.

    Mappings merge field by field over the union of names. Anything
    else is a leaf: b wins unless b is absent.
    """
    if a.is_mapping and b.is_mapping:
        merged: Dict[str, Node] = {}
        for name in list(a.value) + [k for k in b.value if k not in a.value]:
            merged[name] = merge_nodes(a.get(name), b.get(name))
        return Node(merged)
    return a if b.is_absent else b
