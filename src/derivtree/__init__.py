"""Natural-deduction type derivations for toy arithmetic calculi and the STLC."""

from derivtree.core.errors import DerivationError, ErrorCode
from derivtree.core.proof import (
    SENTINEL,
    Derivation,
    DerivationResult,
    MatchStatus,
    render,
)
from derivtree.core.types import BOOL, NAT, UNCONSTRAINED, BaseType, TypeSignature
from derivtree.rules import derive_annotated, derive_common, derive_stlc

__version__ = "0.1.0"

__all__ = [
    "BOOL",
    "NAT",
    "SENTINEL",
    "UNCONSTRAINED",
    "BaseType",
    "Derivation",
    "DerivationError",
    "DerivationResult",
    "ErrorCode",
    "MatchStatus",
    "TypeSignature",
    "derive_annotated",
    "derive_common",
    "derive_stlc",
    "render",
]
