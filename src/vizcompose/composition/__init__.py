"""Composition algebra: merge (*), layer (+) and concatenation (|, &)."""

from .concat import concat, grid_concat, hconcat, vconcat
from .layering import layer
from .merge import merge

__all__ = ["concat", "grid_concat", "hconcat", "layer", "merge", "vconcat"]
