"""
Layer operator (a + b): ordered overlay, a renders below b.

Properties present and equal on both operands are promoted to the new
layer. A layer operand that keeps no property of its own after
promotion is spliced into the result stack; otherwise it is nested as
a single stack entry so it still renders correctly on its own.

Facet, repeat and concat views have no single z-order top and can not
be layered.
"""

from __future__ import annotations

import warnings
from typing import Any, Dict, List, Tuple

from ..canonical import canonicalize
from ..errors import GlobalPropertyConflict, LayeringError
from ..model import (
    Document,
    LayerView,
    LayoutView,
    TopLevelProperties,
    View,
)
from ..nodes import Node
from .merge import merge

# Layer-level properties a stack entry can hand up to its layer.
PROMOTABLE = tuple(n for n in LayerView.field_names() if n != "stack")


def _check_layerable(spec: Any) -> None:
    root = spec.root if isinstance(spec, Document) else spec
    if isinstance(root, LayoutView):
        raise LayeringError(
            f"multi-view layout {type(root).__name__} can not be layered"
        )


def layer(a: Any, b: Any):
    """
    Layer b on top of a.

    Raises:
        LayeringError: either operand is (or has as root) a facet,
            repeat or concat view
    """
    _check_layerable(a)
    _check_layerable(b)

    if isinstance(a, View) and isinstance(b, View):
        return layer_views(a, b)

    a, b = canonicalize(a), canonicalize(b)
    _check_layerable(a)
    _check_layerable(b)
    return _layer_documents(a, b)


def layer_views(a: View, b: View) -> LayerView:
    shared, a, b = extract_shared(a, b)
    stack: List[View] = []
    for operand in (a, b):
        if isinstance(operand, LayerView) and not operand.own_property_names():
            stack.extend(operand.stack)
        else:
            stack.append(operand)
    return LayerView.create(stack=tuple(stack), **shared)


def extract_shared(a: View, b: View) -> Tuple[Dict[str, Node], View, View]:
    """
    Split off the properties present and equal on both views.

    Returns the promoted properties and copies of both views without
    them. Values are compared structurally, never by identity.
    """
    a_names, b_names = a.field_names(), b.field_names()
    shared: Dict[str, Node] = {}
    for name in PROMOTABLE:
        if name not in a_names or name not in b_names:
            continue
        value = a.get_property(name)
        if not value.is_absent and value == b.get_property(name):
            shared[name] = value
    return shared, a.without(*shared), b.without(*shared)


def conflicting_globals(a: TopLevelProperties, b: TopLevelProperties) -> List[str]:
    """Global properties set on both sides with different values."""
    return [
        name
        for name in a.property_names()
        if name in b.property_names() and a.get_property(name) != b.get_property(name)
    ]


def _layer_documents(a: Document, b: Document) -> Document:
    conflicts = conflicting_globals(a.toplevel, b.toplevel)
    if conflicts:
        warnings.warn(
            "Layering documents with incompatible global properties "
            f"({', '.join(conflicts)}); using the values of the right operand",
            GlobalPropertyConflict,
            stacklevel=3,
        )
    return Document(
        toplevel=merge(a.toplevel, b.toplevel),
        root=layer_views(a.root, b.root),
    )
