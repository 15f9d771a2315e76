"""
Tests for the merge operator (a * b).

These tests verify:
    - Identity, right bias and associativity
    - Whole-value replacement of data
    - Every view pairing of the merge table
    - Illegal pairings raise CompositionError
"""

import pytest

from vizcompose.composition import merge
from vizcompose.errors import CompositionError
from vizcompose.model import (
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
)
from vizcompose.nodes import ABSENT, Node


def single(**properties):
    return SingleView.create(**properties)


class TestMergeLaws:
    """Test the algebraic properties of merge."""

    @pytest.mark.parametrize("spec", [
        Node({"a": 1}),
        MarkSpec("bar"),
        single(mark="bar"),
        LayerView(stack=[single(mark="bar")]),
        Document(root=FacetView()),
    ])
    def test_identity(self, spec):
        """S * absent == S and absent * S == S."""
        assert merge(spec, ABSENT) == spec
        assert merge(ABSENT, spec) == spec
        assert merge(spec, None) == spec

    def test_right_bias(self):
        a = single(mark="bar", title="A", width=100)
        b = single(mark="line", title=None, height=50)
        assert merge(a, b) == single(mark="line", title="A", width=100, height=50)

    def test_associative_same_type(self):
        a = single(mark="bar", encoding={"x": {"field": "a"}})
        b = single(title="T", encoding={"y": {"field": "b"}})
        c = single(mark={"type": "bar", "tooltip": True}, encoding={"x": {"type": "nominal"}})
        assert merge(merge(a, b), c) == merge(a, merge(b, c))

    def test_operator_form(self):
        a, b = single(mark="bar"), single(title="T")
        assert a * b == merge(a, b)

    def test_inputs_unchanged(self):
        a = single(mark="bar", encoding={"x": "a"})
        b = single(encoding={"y": "b"})
        merge(a, b)
        assert a == single(mark="bar", encoding={"x": "a"})
        assert b == single(encoding={"y": "b"})


class TestMergeBags:
    """Test merges of property bags."""

    def test_raw_mappings(self):
        """Scenario: {mark, encoding} * {title}."""
        a = Node({"mark": "bar", "encoding": {"x": "a"}})
        b = Node({"title": "T"})
        assert a * b == Node({"mark": "bar", "encoding": {"x": "a"}, "title": "T"})

    def test_same_type_fieldwise(self):
        a = TopLevelProperties(background="white", config={"axis": {"grid": True}})
        b = TopLevelProperties(padding=5, config={"view": {"stroke": None}})
        assert a * b == TopLevelProperties(
            background="white",
            padding=5,
            config={"axis": {"grid": True}, "view": {"stroke": None}},
        )

    def test_encoding_deep_merge(self):
        a = EncodingSpec({"x": {"field": "a"}})
        b = EncodingSpec({"x": {"type": "nominal"}})
        assert a * b == EncodingSpec({"x": {"field": "a", "type": "nominal"}})

    def test_data_replaced_whole(self):
        """A data source is atomic, never deep-merged."""
        a = DataSpec({"url": "a.json", "format": {"type": "json"}})
        b = DataSpec({"values": [{"x": 1}]})
        assert a * b == b

    def test_absent_data_keeps_left(self):
        a = DataSpec({"url": "a.json"})
        assert a * DataSpec() == a

    def test_data_inside_views_replaced_whole(self):
        a = single(data={"url": "a.json"})
        b = single(data={"values": []})
        assert (a * b).data == DataSpec({"values": []})

    def test_different_bags_become_document(self):
        result = DataSpec({"url": "u"}) * MarkSpec("bar")
        assert result == Document(root=single(data={"url": "u"}, mark="bar"))

    def test_bag_and_view(self):
        result = single(mark="bar") * CommonProperties(title="T")
        assert result == Document(root=single(mark="bar", title="T"))

    def test_mapping_and_view(self):
        result = Node({"$schema": "v5", "title": "T"}) * single(mark="bar")
        assert result == Document(
            toplevel=TopLevelProperties(schema="v5"),
            root=single(mark="bar", title="T"),
        )

    def test_scalar_and_view(self):
        with pytest.raises(CompositionError):
            Node("bar") * single(mark="bar")


class TestMergeDocuments:
    """Test document * document."""

    def test_globals_and_roots_merge(self):
        a = Document(TopLevelProperties(background="white", padding=5), single(mark="bar"))
        b = Document(TopLevelProperties(background="black"), single(title="T"))
        assert a * b == Document(
            TopLevelProperties(background="black", padding=5),
            single(mark="bar", title="T"),
        )

    def test_document_and_view(self):
        doc = Document(TopLevelProperties(background="white"), single(mark="bar"))
        assert doc * single(mark="line") == Document(
            TopLevelProperties(background="white"), single(mark="line")
        )


class TestMergeSingleAndLayer:
    """Test single * layer and layer * single."""

    def test_single_into_layer_broadcasts_mark(self):
        layer = LayerView.create(
            stack=[single(encoding={"y": "a"}), single(encoding={"y": "b"})],
            title="layer",
        )
        result = single(mark="line", title="single", width=200) * layer
        assert result == LayerView.create(
            stack=[
                single(mark="line", encoding={"y": "a"}),
                single(mark="line", encoding={"y": "b"}),
            ],
            title="layer",
            width=200,
        )

    def test_single_into_layer_member_mark_wins(self):
        layer = LayerView(stack=[single(mark="rule"), single()])
        result = single(mark="line") * layer
        assert [m.mark for m in result.stack] == [MarkSpec("rule"), MarkSpec("line")]

    def test_single_into_layer_reaches_nested_layers(self):
        inner = LayerView(stack=[single()])
        result = single(mark="point") * LayerView(stack=[inner])
        assert result.stack[0].stack[0].mark == MarkSpec("point")

    def test_single_data_and_encoding_go_to_layer(self):
        layer = LayerView.create(stack=[single(mark="bar")], encoding={"x": {"field": "a"}})
        result = single(data={"url": "u"}, encoding={"y": {"field": "b"}}) * layer
        assert result.data == DataSpec({"url": "u"})
        assert result.encoding == EncodingSpec({"x": {"field": "a"}, "y": {"field": "b"}})
        assert result.stack == (single(mark="bar"),)

    def test_layer_with_single_merges_into_each_member(self):
        layer = LayerView.create(
            stack=[single(mark="bar"), single(mark="line")],
            title="keep",
        )
        result = layer * single(encoding={"color": "c"}, title="member")
        assert result == LayerView.create(
            stack=[
                single(mark="bar", encoding={"color": "c"}, title="member"),
                single(mark="line", encoding={"color": "c"}, title="member"),
            ],
            title="keep",
        )

    def test_empty_layer_with_single(self):
        """An empty stack takes the single as its only entry."""
        layer = LayerView.create(data={"url": "a"})
        result = layer * single(mark="bar")
        assert result == LayerView.create(data={"url": "a"}, stack=[single(mark="bar")])

    def test_single_into_empty_layer(self):
        layer = LayerView.create(data={"url": "a"})
        result = single(mark="bar", title="T") * layer
        assert result == LayerView.create(
            data={"url": "a"}, title="T", stack=[single(mark="bar")]
        )

    def test_markless_single_into_empty_layer(self):
        result = single(title="T") * LayerView()
        assert result == LayerView.create(title="T")

    def test_layer_times_layer(self):
        """Scenario: layer * layer is ambiguous."""
        a = LayerView(stack=[single(mark="bar"), single(mark="line")])
        b = LayerView(stack=[single(mark="point"), single(mark="rule")])
        with pytest.raises(CompositionError):
            a * b


class TestMergeLayouts:
    """Test facet, repeat and concat views against plain views."""

    def test_single_into_facet(self):
        facet = FacetView.create(facet={"row": {"field": "g"}})
        view = single(data={"url": "u"}, mark="bar", title="T")
        result = facet * view
        assert result == FacetView.create(
            facet={"row": {"field": "g"}},
            data={"url": "u"},
            spec=single(mark="bar", title="T"),
        )

    def test_facet_merge_is_commutative(self):
        facet = RepeatView.create(repeat=["a", "b"], spec=single(mark="bar"))
        view = single(data={"url": "u"}, encoding={"x": {"field": {"repeat": "repeat"}}})
        assert facet * view == view * facet

    def test_layer_into_facet_inner_single(self):
        facet = FacetView(spec=single(mark="bar"))
        layer = LayerView(stack=[single(), single(mark="rule")])
        result = facet * layer
        assert result.spec == LayerView(stack=[single(mark="bar"), single(mark="rule")])

    def test_layer_into_facet_with_layer_inner(self):
        facet = FacetView(spec=LayerView(stack=[single()]))
        with pytest.raises(CompositionError):
            facet * LayerView(stack=[single()])

    def test_single_into_concat(self):
        concat = RowConcatView(members=[single(mark="bar"), single(mark="line")])
        base = single(
            data={"url": "u"},
            transform=[{"filter": "datum.year == 2000"}],
            width=100,
        )
        result = base * concat
        assert result == RowConcatView.create(
            members=[single(mark="bar", width=100), single(mark="line", width=100)],
            data={"url": "u"},
            transform=[{"filter": "datum.year == 2000"}],
        )
        assert result == concat * base

    def test_only_common_into_concat_keeps_members(self):
        members = (single(mark="bar"), LayerView(stack=[single()]))
        concat = GridConcatView(members=members, columns=2)
        result = concat * single(title="T")
        assert result.members == members
        assert result.common == CommonProperties(title="T")

    @pytest.mark.parametrize("a,b", [
        (RowConcatView(), RowConcatView()),
        (RowConcatView(), ColumnConcatView()),
        (GridConcatView(), ColumnConcatView()),
    ])
    def test_concat_times_concat(self, a, b):
        with pytest.raises(CompositionError):
            a * b

    def test_facet_times_facet_fieldwise(self):
        a = FacetView.create(facet={"row": {"field": "g"}}, spec=single(mark="bar"))
        b = FacetView.create(columns=3, spec=single(title="T"))
        assert a * b == FacetView.create(
            facet={"row": {"field": "g"}},
            columns=3,
            spec=single(mark="bar", title="T"),
        )

    @pytest.mark.parametrize("a,b", [
        (FacetView(), RepeatView()),
        (RepeatView(), RowConcatView()),
        (GridConcatView(), FacetView()),
    ])
    def test_unlisted_layout_pairs(self, a, b):
        with pytest.raises(CompositionError):
            a * b


class TestMergeLayoutProperties:
    """Test layout properties against views and documents."""

    def test_into_concat(self):
        concat = RowConcatView(members=[single()], layout={"align": "all"})
        result = concat * LayoutProperties(spacing=0)
        assert result.layout == LayoutProperties(align="all", spacing=0)

    def test_either_order(self):
        facet = FacetView()
        props = LayoutProperties(spacing=4)
        assert props * facet == facet * props

    def test_into_document_root(self):
        doc = Document(root=ColumnConcatView(members=[single()]))
        result = doc * LayoutProperties(center=True)
        assert result.root.layout == LayoutProperties(center=True)

    def test_into_single_rejected(self):
        with pytest.raises(CompositionError):
            single(mark="bar") * LayoutProperties(spacing=0)

    def test_into_other_bag_rejected(self):
        with pytest.raises(CompositionError):
            MarkSpec("bar") * LayoutProperties(spacing=0)
