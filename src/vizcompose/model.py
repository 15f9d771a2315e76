"""
Typed Specification Records

Defines the fixed-shape records that a visualization specification is
assembled from:
    - Property bags (global, common, layout, data/mark/encoding holders)
    - Views (single, layer, facet, repeat, grid/row/column concat)
    - Document (global properties + exactly one root view)

ARCHITECTURAL RULE:
    These objects:
        - Are frozen dataclasses (never mutated after construction)
        - Hold Nodes, bags, views or tuples of views, nothing raw
        - Have a FIXED field set; unknown names raise MissingProperty
        - Know nothing about merging or layering (see composition)

Property names are FLATTENED across nested bags: a SingleView has a
`title` property even though the value lives in its CommonProperties.
`get_property`, `with_property` and `create` all work on flattened names.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, ClassVar, Dict, List, Mapping, Tuple

from .errors import MissingProperty
from .nodes import ABSENT, Composable, Node


class SpecRecord(Composable):
    """
    Shared behavior of every fixed-field record.

    Subclasses declare their nested structure with class tables:
        _BAGS:     field name -> PropertyBag type stored in that slot
        _CHILDREN: field name -> "view" (one View) or "views" (tuple of Views)
        _ALIASES:  field name -> external key used when serialized
    Every other dataclass field holds a Node.
    """

    _BAGS: ClassVar[Dict[str, type]] = {}
    _CHILDREN: ClassVar[Dict[str, str]] = {}
    _ALIASES: ClassVar[Dict[str, str]] = {}

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in self._BAGS:
                value = _as_bag(self._BAGS[f.name], value)
            elif self._CHILDREN.get(f.name) == "view":
                value = self._check_child(f.name, value)
            elif self._CHILDREN.get(f.name) == "views":
                value = tuple(self._check_child(f.name, v) for v in value)
            else:
                value = Node(value)
            object.__setattr__(self, f.name, value)

    @classmethod
    def _child_types(cls, name: str) -> Tuple[type, ...]:
        return (View,)

    @classmethod
    def _check_child(cls, name: str, value: Any):
        allowed = cls._child_types(name)
        if not isinstance(value, allowed):
            kinds = ", ".join(t.__name__ for t in allowed)
            raise TypeError(
                f"{cls.__name__}.{name} accepts {kinds}, got {type(value).__name__}"
            )
        return value

    # ------------------------------------------------------------------
    # Flattened property access
    # ------------------------------------------------------------------

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        """All property names this record can hold, bags flattened."""
        names: List[str] = []
        for f in fields(cls):
            bag = cls._BAGS.get(f.name)
            candidates = bag.field_names() if bag is not None else (f.name,)
            names.extend(n for n in candidates if n not in names)
        return tuple(names)

    def property_names(self) -> Tuple[str, ...]:
        """Flattened names whose value is present (non-absent, non-empty)."""
        names: List[str] = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in self._BAGS:
                names.extend(n for n in value.property_names() if n not in names)
            elif isinstance(value, Node):
                if not value.is_absent:
                    names.append(f.name)
            elif isinstance(value, tuple):
                if value:
                    names.append(f.name)
            elif not value.is_empty():
                names.append(f.name)
        return tuple(names)

    def is_empty(self) -> bool:
        return not self.property_names()

    def get_property(self, name: str):
        """
        Value of a flattened property.

        Returns the Node (possibly absent) for plain properties, the
        View / tuple of Views for child slots.

        Raises:
            MissingProperty: name is not part of this record's field set
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in self._BAGS:
                if name in value.field_names():
                    return value.get_property(name)
            elif f.name == name:
                return value
        raise MissingProperty(name, type(self).__name__)

    def with_property(self, name: str, value: Any):
        """Copy of this record with one flattened property replaced."""
        for f in fields(self):
            bag = self._BAGS.get(f.name)
            if bag is not None:
                if name in bag.field_names():
                    inner = getattr(self, f.name).with_property(name, value)
                    return replace(self, **{f.name: inner})
            elif f.name == name:
                return replace(self, **{name: value})
        raise MissingProperty(name, type(self).__name__)

    def without(self, *names: str):
        """Copy with the given flattened properties cleared."""
        record = self
        for name in names:
            kind = self._CHILDREN.get(name)
            if kind == "views":
                empty = ()
            elif kind == "view":
                empty = SingleView()
            else:
                empty = ABSENT
            record = record.with_property(name, empty)
        return record

    @classmethod
    def create(cls, **properties: Any):
        """
        Build a record from flattened property names.

            SingleView.create(mark="bar", title="Sales")

        is SingleView(mark=MarkSpec("bar"), common=CommonProperties(title="Sales")).

        Raises:
            MissingProperty: a name outside the record's field set
        """
        direct_names = {f.name for f in fields(cls)}
        direct: Dict[str, Any] = {}
        nested: Dict[str, Dict[str, Any]] = {}
        for name, value in properties.items():
            if name in direct_names:
                direct[name] = value
                continue
            for slot, bag in cls._BAGS.items():
                if name in bag.field_names():
                    nested.setdefault(slot, {})[name] = value
                    break
            else:
                raise MissingProperty(name, cls.__name__)

        for slot, values in nested.items():
            bag = _as_bag(cls._BAGS[slot], direct.get(slot))
            for name, value in values.items():
                bag = bag.with_property(name, value)
            direct[slot] = bag
        return cls(**direct)


def _as_bag(bag_type: type, value: Any):
    """Coerce a slot value into the PropertyBag type declared for it."""
    if isinstance(value, bag_type):
        return value
    if isinstance(value, SpecRecord):
        raise TypeError(f"expected {bag_type.__name__}, got {type(value).__name__}")
    if len(fields(bag_type)) == 1:
        return bag_type(value)
    if value is None:
        return bag_type()
    if isinstance(value, Node):
        if value.is_absent:
            return bag_type()
        if value.is_mapping:
            return bag_type.create(**dict(value.items()))
    elif isinstance(value, Mapping):
        return bag_type.create(**value)
    raise TypeError(f"cannot build {bag_type.__name__} from {type(value).__name__}")


def _node() -> Any:
    return field(default_factory=Node)


# ============================================================================
# Property bags
# ============================================================================


class PropertyBag(SpecRecord):
    """Fixed set of named Nodes. Base of every bag type."""


@dataclass(frozen=True)
class TopLevelProperties(PropertyBag):
    """Properties only valid on the document root."""

    _ALIASES: ClassVar[Dict[str, str]] = {"schema": "$schema"}

    schema: Node = _node()
    background: Node = _node()
    padding: Node = _node()
    autosize: Node = _node()
    config: Node = _node()
    usermeta: Node = _node()


@dataclass(frozen=True)
class CommonProperties(PropertyBag):
    """Properties every kind of view may carry."""

    name: Node = _node()
    description: Node = _node()
    title: Node = _node()
    transform: Node = _node()
    params: Node = _node()


@dataclass(frozen=True)
class LayoutProperties(PropertyBag):
    """Arrangement of sub-views in facet, repeat and concat views."""

    align: Node = _node()
    bounds: Node = _node()
    center: Node = _node()
    spacing: Node = _node()


@dataclass(frozen=True)
class DataSpec(PropertyBag):
    """
    Data source holder.

    A data source is atomic: merging two DataSpecs replaces the whole
    value instead of merging nested fields.
    """

    data: Node = _node()


@dataclass(frozen=True)
class MarkSpec(PropertyBag):
    mark: Node = _node()


@dataclass(frozen=True)
class EncodingSpec(PropertyBag):
    encoding: Node = _node()


# ============================================================================
# Views
# ============================================================================


class View(SpecRecord):
    """A renderable shape. Concrete kinds are the dataclasses below."""


class MultiView(View):
    """A view made of several sub-views."""


class LayoutView(MultiView):
    """Facet, repeat and concat views: arranged sub-views, no single z-order."""


class ConcatView(LayoutView):
    """Grid, row and column concatenation."""


_VIEW_BAGS = {"common": CommonProperties, "data": DataSpec}


@dataclass(frozen=True)
class SingleView(View):
    """
    One mark drawn from one data source.

    Properties:
        common:     name, description, title, transform, params
        data:       DataSpec
        mark:       MarkSpec (e.g. "bar" or {"type": "bar", "tooltip": True})
        encoding:   EncodingSpec (channel -> field definition)
        width, height, view, projection: Nodes
    """

    _BAGS: ClassVar[Dict[str, type]] = dict(
        _VIEW_BAGS, mark=MarkSpec, encoding=EncodingSpec
    )

    common: CommonProperties = field(default_factory=CommonProperties)
    data: DataSpec = field(default_factory=DataSpec)
    mark: MarkSpec = field(default_factory=MarkSpec)
    encoding: EncodingSpec = field(default_factory=EncodingSpec)
    width: Node = _node()
    height: Node = _node()
    view: Node = _node()
    projection: Node = _node()


@dataclass(frozen=True)
class LayerView(MultiView):
    """
    Ordered overlay of single views and nested layers.

    The first stack entry renders at the bottom. Properties set on the
    layer itself (data, encoding, sizes, ...) are inherited by every
    entry of the stack.
    """

    _BAGS: ClassVar[Dict[str, type]] = dict(_VIEW_BAGS, encoding=EncodingSpec)
    _CHILDREN: ClassVar[Dict[str, str]] = {"stack": "views"}
    _ALIASES: ClassVar[Dict[str, str]] = {"stack": "layer"}

    common: CommonProperties = field(default_factory=CommonProperties)
    data: DataSpec = field(default_factory=DataSpec)
    encoding: EncodingSpec = field(default_factory=EncodingSpec)
    stack: Tuple[View, ...] = ()
    width: Node = _node()
    height: Node = _node()
    view: Node = _node()
    projection: Node = _node()
    resolve: Node = _node()

    @classmethod
    def _child_types(cls, name):
        return (SingleView, LayerView)

    def own_property_names(self) -> Tuple[str, ...]:
        """Present properties other than the stack itself."""
        return tuple(n for n in self.property_names() if n != "stack")


_LAYOUT_BAGS = dict(_VIEW_BAGS, layout=LayoutProperties)


@dataclass(frozen=True)
class FacetView(LayoutView):
    """Small multiples of one inner view, split by the `facet` definition."""

    _BAGS: ClassVar[Dict[str, type]] = _LAYOUT_BAGS
    _CHILDREN: ClassVar[Dict[str, str]] = {"spec": "view"}

    common: CommonProperties = field(default_factory=CommonProperties)
    layout: LayoutProperties = field(default_factory=LayoutProperties)
    data: DataSpec = field(default_factory=DataSpec)
    spec: View = field(default_factory=SingleView)
    facet: Node = _node()
    columns: Node = _node()
    resolve: Node = _node()

    @classmethod
    def _child_types(cls, name):
        return (SingleView, LayerView)


@dataclass(frozen=True)
class RepeatView(LayoutView):
    """One inner view repeated over the fields listed in `repeat`."""

    _BAGS: ClassVar[Dict[str, type]] = _LAYOUT_BAGS
    _CHILDREN: ClassVar[Dict[str, str]] = {"spec": "view"}

    common: CommonProperties = field(default_factory=CommonProperties)
    layout: LayoutProperties = field(default_factory=LayoutProperties)
    data: DataSpec = field(default_factory=DataSpec)
    spec: View = field(default_factory=SingleView)
    repeat: Node = _node()
    columns: Node = _node()
    resolve: Node = _node()

    @classmethod
    def _child_types(cls, name):
        return (SingleView, LayerView)


@dataclass(frozen=True)
class GridConcatView(ConcatView):
    """Members laid out left to right, wrapping after `columns` entries."""

    _BAGS: ClassVar[Dict[str, type]] = _LAYOUT_BAGS
    _CHILDREN: ClassVar[Dict[str, str]] = {"members": "views"}
    _ALIASES: ClassVar[Dict[str, str]] = {"members": "concat"}

    common: CommonProperties = field(default_factory=CommonProperties)
    layout: LayoutProperties = field(default_factory=LayoutProperties)
    data: DataSpec = field(default_factory=DataSpec)
    members: Tuple[View, ...] = ()
    columns: Node = _node()
    resolve: Node = _node()


@dataclass(frozen=True)
class RowConcatView(ConcatView):
    """Members side by side, left to right."""

    _BAGS: ClassVar[Dict[str, type]] = _LAYOUT_BAGS
    _CHILDREN: ClassVar[Dict[str, str]] = {"members": "views"}
    _ALIASES: ClassVar[Dict[str, str]] = {"members": "hconcat"}

    common: CommonProperties = field(default_factory=CommonProperties)
    layout: LayoutProperties = field(default_factory=LayoutProperties)
    data: DataSpec = field(default_factory=DataSpec)
    members: Tuple[View, ...] = ()
    resolve: Node = _node()


@dataclass(frozen=True)
class ColumnConcatView(ConcatView):
    """Members stacked top to bottom."""

    _BAGS: ClassVar[Dict[str, type]] = _LAYOUT_BAGS
    _CHILDREN: ClassVar[Dict[str, str]] = {"members": "views"}
    _ALIASES: ClassVar[Dict[str, str]] = {"members": "vconcat"}

    common: CommonProperties = field(default_factory=CommonProperties)
    layout: LayoutProperties = field(default_factory=LayoutProperties)
    data: DataSpec = field(default_factory=DataSpec)
    members: Tuple[View, ...] = ()
    resolve: Node = _node()


# ============================================================================
# Document
# ============================================================================


@dataclass(frozen=True)
class Document(SpecRecord):
    """
    Root container: global properties plus exactly one view.

    This is what composition ultimately produces and what an exporter
    consumes. Flattened property access reaches through to the root
    view, so `doc.get_property("mark")` reads the root's mark.
    """

    _BAGS: ClassVar[Dict[str, type]] = {"toplevel": TopLevelProperties}
    _CHILDREN: ClassVar[Dict[str, str]] = {"root": "view"}

    toplevel: TopLevelProperties = field(default_factory=TopLevelProperties)
    root: View = field(default_factory=SingleView)

    def field_names(self) -> Tuple[str, ...]:
        return TopLevelProperties.field_names() + self.root.field_names()

    def property_names(self) -> Tuple[str, ...]:
        return self.toplevel.property_names() + self.root.property_names()

    def get_property(self, name: str):
        if name in TopLevelProperties.field_names():
            return self.toplevel.get_property(name)
        if name in self.root.field_names():
            return self.root.get_property(name)
        raise MissingProperty(name, f"Document[{type(self.root).__name__}]")

    def with_property(self, name: str, value: Any) -> Document:
        if name in TopLevelProperties.field_names():
            return replace(self, toplevel=self.toplevel.with_property(name, value))
        if name in self.root.field_names():
            return replace(self, root=self.root.with_property(name, value))
        raise MissingProperty(name, f"Document[{type(self.root).__name__}]")


VIEW_TYPES: Tuple[type, ...] = (
    SingleView,
    LayerView,
    FacetView,
    RepeatView,
    GridConcatView,
    RowConcatView,
    ColumnConcatView,
)

BAG_TYPES: Tuple[type, ...] = (
    TopLevelProperties,
    CommonProperties,
    LayoutProperties,
    DataSpec,
    MarkSpec,
    EncodingSpec,
)
