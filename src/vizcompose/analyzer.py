"""
Spec Analyzer: read-only inventory of a composed specification.

Reports:
    - View counts by kind
    - Layer nesting depth
    - Marks and data sources in use
    - Warning flags for views that will not render as expected

IMPORTANT: This does NOT modify the specification and does NOT check
it against the full visualization grammar. It only produces a report.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from vizcompose.canonical import canonicalize
from vizcompose.model import (
    ConcatView,
    FacetView,
    LayerView,
    RepeatView,
    SingleView,
    View,
)
from vizcompose.nodes import Node


@dataclass
class SpecReport:
    """Structure report for one specification."""

    root_kind: str
    total_views: int = 0
    view_counts: Dict[str, int] = field(default_factory=dict)
    leaf_views: int = 0
    max_layer_depth: int = 0

    marks: Set[str] = field(default_factory=set)
    data_sources: List[Node] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    def add_data_source(self, data: Node) -> None:
        # list keeps first-seen order
        if data not in self.data_sources:
            self.data_sources.append(data)


def _mark_name(mark: Node) -> Optional[str]:
    if mark.is_mapping:
        mark = mark.get("type")
        if mark.is_absent:
            return None
    return str(mark.value)


def _walk(view: View, report: SpecReport, path: str, layer_depth: int, has_data: bool) -> None:
    report.total_views += 1
    report.view_counts[type(view).__name__] += 1

    data = view.get_property("data")
    if not data.is_absent:
        report.add_data_source(data)
    has_data = has_data or not data.is_absent

    if isinstance(view, SingleView):
        report.leaf_views += 1
        mark = view.get_property("mark")
        if mark.is_absent:
            report.add_warning(f"Single view without a mark at {path}")
        elif _mark_name(mark) is None:
            report.add_warning(f"Mark without a type at {path}")
        else:
            report.marks.add(_mark_name(mark))
        if not has_data:
            report.add_warning(f"No data source reaches {path}")

    elif isinstance(view, LayerView):
        layer_depth += 1
        report.max_layer_depth = max(report.max_layer_depth, layer_depth)
        if not view.stack:
            report.add_warning(f"Empty layer at {path}")
        for i, member in enumerate(view.stack):
            _walk(member, report, f"{path}.layer[{i}]", layer_depth, has_data)

    elif isinstance(view, (FacetView, RepeatView)):
        _walk(view.spec, report, f"{path}.spec", layer_depth, has_data)

    elif isinstance(view, ConcatView):
        key = view._ALIASES["members"]
        for i, member in enumerate(view.members):
            _walk(member, report, f"{path}.{key}[{i}]", layer_depth, has_data)


def analyze_spec(spec: Any) -> SpecReport:
    """
    Inventory any specification object.

    The input is canonicalized first, so bags, views and mappings are
    all accepted. Returns a SpecReport with counts and warnings.
    """
    document = canonicalize(spec)
    report = SpecReport(root_kind=type(document.root).__name__)
    report.view_counts = defaultdict(int)
    _walk(document.root, report, "root", 0, False)
    report.view_counts = dict(report.view_counts)
    return report
