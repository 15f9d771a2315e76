"""
Merge operator (a * b): right-biased deep merge.

The right operand wins on conflicting leaf values; an absent right
value keeps the left one. Which rule applies depends on the pair of
operand kinds; every pair is listed in `merge` and anything not listed
raises CompositionError.
"""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any

from ..canonical import canonicalize
from ..errors import CompositionError
from ..model import (
    CommonProperties,
    ConcatView,
    DataSpec,
    Document,
    LayerView,
    LayoutProperties,
    LayoutView,
    PropertyBag,
    SingleView,
    View,
)
from ..nodes import Node, merge_nodes


def _is_absent(spec: Any) -> bool:
    return spec is None or (isinstance(spec, Node) and spec.is_absent)


def merge(a: Any, b: Any):
    """
    Merge two specification objects, b taking precedence.

    Raises:
        CompositionError: layer x layer, concat x concat and other
            pairings with no single meaningful result
    """
    if _is_absent(b):
        return a
    if _is_absent(a):
        return b

    if isinstance(a, Node) and isinstance(b, Node):
        return merge_nodes(a, b)

    if isinstance(a, LayoutProperties) or isinstance(b, LayoutProperties):
        if type(a) is type(b):
            return _merge_fields(a, b)
        return _merge_layout_properties(a, b)

    if type(a) is DataSpec and type(b) is DataSpec:
        return a if b.data.is_absent else b

    if isinstance(a, PropertyBag) and type(a) is type(b):
        return _merge_fields(a, b)

    if isinstance(a, Document) and isinstance(b, Document):
        return Document(
            toplevel=merge(a.toplevel, b.toplevel),
            root=merge(a.root, b.root),
        )

    if isinstance(a, View) and isinstance(b, View):
        return merge_views(a, b)

    return merge(canonicalize(a), canonicalize(b))


def _merge_fields(a, b):
    """Field-wise merge of two records of the same type."""
    merged = {f.name: merge(getattr(a, f.name), getattr(b, f.name)) for f in fields(a)}
    return type(a)(**merged)


def merge_views(a: View, b: View) -> View:
    """The view x view part of the pair table."""
    if isinstance(a, LayerView) and isinstance(b, LayerView):
        raise CompositionError(
            "two layer views can not be merged: it is ambiguous which "
            "layer receives which properties"
        )
    if isinstance(a, ConcatView) and isinstance(b, ConcatView):
        raise CompositionError(
            f"{type(a).__name__} and {type(b).__name__} can not be merged"
        )
    if type(a) is type(b):
        return _merge_fields(a, b)

    if isinstance(a, SingleView) and isinstance(b, LayerView):
        return _single_into_layer(a, b)
    if isinstance(a, LayerView) and isinstance(b, SingleView):
        return _layer_with_single(a, b)

    plain = (SingleView, LayerView)
    if isinstance(a, LayoutView) and isinstance(b, plain):
        return _into_layout(a, b)
    if isinstance(b, LayoutView) and isinstance(a, plain):
        return _into_layout(b, a)

    raise CompositionError(
        f"{type(a).__name__} and {type(b).__name__} can not be merged"
    )


def _single_into_layer(single: SingleView, layer: LayerView) -> LayerView:
    # the mark goes to every stack entry; everything else to the layer itself
    if single.mark.mark.is_absent:
        stack = layer.stack
    else:
        mark_only = SingleView(mark=single.mark)
        # an empty layer takes the mark as its only entry
        stack = tuple(merge(mark_only, member) for member in layer.stack) or (mark_only,)
    return replace(
        layer,
        common=merge(single.common, layer.common),
        data=merge(single.data, layer.data),
        encoding=merge(single.encoding, layer.encoding),
        stack=stack,
        width=merge(single.width, layer.width),
        height=merge(single.height, layer.height),
        view=merge(single.view, layer.view),
        projection=merge(single.projection, layer.projection),
    )


def _layer_with_single(layer: LayerView, single: SingleView) -> LayerView:
    if not layer.stack:
        return replace(layer, stack=(single,))
    return replace(layer, stack=tuple(merge(member, single) for member in layer.stack))


def _into_layout(layout: LayoutView, view: View) -> LayoutView:
    """
    Merge a single or layer view into a facet, repeat or concat view.

    The view's data goes to the layout's own data. For facet and repeat
    the rest of the view merges into the inner `spec`; for concat views
    common properties go to the concat itself and the remaining
    view-level properties into every member. Either operand order gives
    the same result.
    """
    data = merge(layout.data, view.data)
    rest = view.without("data")
    if not isinstance(layout, ConcatView):
        return replace(layout, data=data, spec=merge(layout.spec, rest))

    per_member = rest.without(*CommonProperties.field_names())
    members = layout.members
    if not per_member.is_empty():
        members = tuple(merge(member, per_member) for member in members)
    return replace(
        layout,
        common=merge(layout.common, rest.common),
        data=data,
        members=members,
    )


def _merge_layout_properties(a, b):
    props, target = (a, b) if isinstance(a, LayoutProperties) else (b, a)
    if not isinstance(target, (Document, View)):
        target = canonicalize(target)
    if isinstance(target, Document):
        return replace(target, root=_merge_layout_properties(props, target.root))
    if isinstance(target, LayoutView):
        return replace(target, layout=merge(target.layout, props))
    raise CompositionError(
        f"layout properties can not be merged with {type(target).__name__}; "
        "they apply to facet, repeat and concat views only"
    )
