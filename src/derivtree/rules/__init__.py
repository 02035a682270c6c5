"""Rule engines: the common calculus, the STLC, and the shared conditional split."""

from .common import (
    derive_annotated,
    derive_common,
    derive_common_tree,
    split_annotation,
)
from .conditional import split_conditional
from .stlc import bind_variable, derive_stlc, derive_stlc_tree, is_abstraction

__all__ = [
    "bind_variable",
    "derive_annotated",
    "derive_common",
    "derive_common_tree",
    "derive_stlc",
    "derive_stlc_tree",
    "is_abstraction",
    "split_annotation",
    "split_conditional",
]
