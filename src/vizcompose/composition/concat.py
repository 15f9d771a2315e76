"""
Concatenation operators.

Purely structural: members are placed next to each other in order and
nothing is shared, promoted or merged between them.
"""

from __future__ import annotations

from functools import reduce
from typing import Any, Optional, Sequence

from ..canonical import canonicalize
from ..errors import CompositionError
from ..model import (
    ColumnConcatView,
    Document,
    GridConcatView,
    RowConcatView,
    View,
)
from .merge import merge


def _build(view_type: type, items: Sequence[Any], **extra: Any):
    if not items:
        raise ValueError(f"{view_type.__name__} needs at least one member")
    for item in items:
        if not isinstance(item, (View, Document)):
            raise CompositionError(
                f"{type(item).__name__} is not a view; canonicalize() it "
                "before concatenating"
            )
    if all(isinstance(item, View) for item in items):
        return view_type(members=tuple(items), **extra)

    documents = [canonicalize(item) for item in items]
    return Document(
        toplevel=reduce(merge, [d.toplevel for d in documents]),
        root=view_type(members=tuple(d.root for d in documents), **extra),
    )


def hconcat(*views: Any):
    """Place views side by side, left to right."""
    return _build(RowConcatView, views)


def vconcat(*views: Any):
    """Stack views top to bottom."""
    return _build(ColumnConcatView, views)


def concat(*views: Any, columns: Optional[int] = None):
    """Lay views out left to right, wrapping after `columns` entries."""
    return _build(GridConcatView, views, columns=columns)


def grid_concat(rows: Sequence[Sequence[Any]]):
    """
    Concatenate views given as rows of a matrix.

        grid_concat([[a, b], [c, d]]) == concat(a, b, c, d, columns=2)

    The wrap count is the length of the first row.
    """
    rows = [list(row) for row in rows]
    if not rows:
        raise ValueError("grid_concat needs at least one row")
    members = [view for row in rows for view in row]
    return concat(*members, columns=len(rows[0]))


def _is_bare(spec: Any, view_type: type) -> bool:
    return type(spec) is view_type and spec.property_names() == ("members",)


def _extend(view_type: type, a: Any, b: Any):
    # a bare concat of the same kind grows a copy of its member tuple
    if _is_bare(a, view_type) and isinstance(b, View):
        return view_type(members=a.members + (b,))
    specs = (View, Document)
    if isinstance(a, specs) and isinstance(b, specs) and Document in (type(a), type(b)):
        a, b = canonicalize(a), canonicalize(b)
        if _is_bare(a.root, view_type):
            return Document(
                toplevel=merge(a.toplevel, b.toplevel),
                root=view_type(members=a.root.members + (b.root,)),
            )
    return _build(view_type, (a, b))


def extend_row(a: Any, b: Any):
    """`a | b`"""
    return _extend(RowConcatView, a, b)


def extend_column(a: Any, b: Any):
    """`a & b`"""
    return _extend(ColumnConcatView, a, b)


__all__ = [
    "concat",
    "extend_column",
    "extend_row",
    "grid_concat",
    "hconcat",
    "vconcat",
]
