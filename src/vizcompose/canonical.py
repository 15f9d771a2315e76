"""
Canonicalization: coercing loose input into the most general shape.

Two jobs:
    - Build views and documents from plain mappings, choosing the view
      kind from the keys that are present (`layer`, `facet`, ...).
    - Coerce any specification object into a Document, which is what
      mixed-type merges and exporters work on.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .errors import CompositionError, MissingProperty
from .model import (
    ColumnConcatView,
    CommonProperties,
    DataSpec,
    Document,
    EncodingSpec,
    FacetView,
    GridConcatView,
    LayerView,
    LayoutProperties,
    MarkSpec,
    RepeatView,
    RowConcatView,
    SingleView,
    TopLevelProperties,
    View,
)
from .nodes import Node

# Checked in order: the first key present decides the view kind.
VIEW_KEYS = (
    ("layer", LayerView),
    ("facet", FacetView),
    ("repeat", RepeatView),
    ("concat", GridConcatView),
    ("hconcat", RowConcatView),
    ("vconcat", ColumnConcatView),
)

SCHEMA_KEY = "$schema"

# Bags that canonicalize to a single view holding them, by slot name.
_VIEW_SLOTS = {
    CommonProperties: "common",
    DataSpec: "data",
    MarkSpec: "mark",
    EncodingSpec: "encoding",
}


def _plain(mapping: Any) -> Dict[str, Any]:
    if isinstance(mapping, Node):
        if mapping.is_absent:
            return {}
        if not mapping.is_mapping:
            raise CompositionError(
                f"a scalar value ({mapping.value!r}) cannot become a specification"
            )
        return dict(mapping.items())
    return dict(mapping)


def view_type_for(mapping: Mapping[str, Any]) -> type:
    for key, view_type in VIEW_KEYS:
        if key in mapping:
            return view_type
    return SingleView


def view_from_mapping(mapping: Any) -> View:
    """
    Build a view from a mapping using external (grammar) key names.

    Nested `layer`, `spec` and `*concat` entries are converted
    recursively. Entries that are already View objects are kept as is.

    Raises:
        MissingProperty: a key that the chosen view kind does not have
    """
    if isinstance(mapping, View):
        return mapping
    if isinstance(mapping, Document):
        return mapping.root
    values = _plain(mapping)
    view_type = view_type_for(values)

    properties: Dict[str, Any] = {}
    for key, value in values.items():
        name = _internal_name(view_type, key)
        kind = view_type._CHILDREN.get(name)
        if kind == "views":
            value = tuple(view_from_mapping(v) for v in value)
        elif kind == "view":
            value = view_from_mapping(value)
        properties[name] = value
    return view_type.create(**properties)


def _internal_name(view_type: type, key: str) -> str:
    for name, alias in view_type._ALIASES.items():
        if alias == key:
            return name
    if key in view_type._ALIASES:
        # internal names are only valid under their external alias
        raise MissingProperty(key, view_type.__name__)
    return key


def spec_from_mapping(mapping: Optional[Any] = None, **properties: Any) -> Document:
    """
    Build a Document from a mapping and/or keyword properties.

        spec_from_mapping({"mark": "bar"}, title="Sales")

    Global keys (`$schema`, `background`, `padding`, `autosize`,
    `config`, `usermeta`) go to the document's TopLevelProperties, the
    rest to its root view.
    """
    values = _plain(mapping) if mapping is not None else {}
    values.update(properties)

    toplevel: Dict[str, Any] = {}
    for key in list(values):
        name = "schema" if key == SCHEMA_KEY else key
        if name in TopLevelProperties.field_names():
            toplevel[name] = values.pop(key)
    return Document(
        toplevel=TopLevelProperties.create(**toplevel),
        root=view_from_mapping(values),
    )


vlspec = spec_from_mapping


def canonicalize(spec: Any) -> Document:
    """
    Coerce any specification object into a Document.

    Raises:
        CompositionError: scalars and LayoutProperties have no view shape
        TypeError: not a specification object at all
    """
    if isinstance(spec, Document):
        return spec
    if isinstance(spec, View):
        return Document(root=spec)
    if isinstance(spec, TopLevelProperties):
        return Document(toplevel=spec)
    if isinstance(spec, LayoutProperties):
        raise CompositionError(
            "LayoutProperties only apply to facet, repeat or concat views; "
            "merge them into one of those instead"
        )
    slot = _VIEW_SLOTS.get(type(spec))
    if slot is not None:
        return Document(root=SingleView(**{slot: spec}))
    if spec is None or isinstance(spec, (Node, Mapping)):
        return spec_from_mapping(spec)
    raise TypeError(f"cannot canonicalize {type(spec).__name__}")
