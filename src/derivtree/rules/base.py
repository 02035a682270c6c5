"""Pieces shared by the common and STLC rule engines."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, TypeVar

from derivtree.config import Settings, get_settings
from derivtree.core.errors import TOO_DEEP, DerivationError
from derivtree.core.proof import (
    SENTINEL,
    Derivation,
    DerivationResult,
    Judgment,
    MatchStatus,
)
from derivtree.core.types import BaseType, TypeSignature

logger = logging.getLogger(__name__)

ErrorSink = Callable[[str], None]
Conclude = Callable[[TypeSignature], Judgment]

F = TypeVar("F", bound="Frame")


@dataclass(frozen=True)
class Frame:
    """Per-call state threaded through the recursive rules."""

    settings: Settings = field(default_factory=get_settings)
    depth: int = 0

    def deeper(self: F) -> F:
        if self.depth >= self.settings.max_depth:
            raise DerivationError(TOO_DEEP, f"limit is {self.settings.max_depth}")
        return replace(self, depth=self.depth + 1)


def literal(
    rule: str,
    natural: BaseType,
    expected: TypeSignature,
    conclude: Conclude,
    *,
    shows_expected: bool = True,
) -> Derivation:
    """Axiom rule for ``true``, ``false`` and ``0``.

    An expected type other than the literal's own still yields the full step, flagged
    as mismatched. The flagged step concludes the expected (wrong) type unless
    ``shows_expected`` is off, in which case it keeps the literal's own type.
    """

    own = TypeSignature.of(natural)
    ok = expected.is_unconstrained or expected == own
    return Derivation(
        rule,
        conclude(own if ok or not shows_expected else expected),
        own,
        status=MatchStatus.of(ok),
    )


def report_failure(
    error: DerivationError, on_error: ErrorSink | None
) -> DerivationResult:
    logger.warning("derivation failed: %s", error)
    if on_error is not None:
        on_error(str(error.error))
    return SENTINEL


def finish(tree: Derivation, settings: Settings) -> DerivationResult:
    result = DerivationResult.from_tree(tree, settings)
    if tree.has_mismatch():
        logger.debug("derivation of type %s has mismatched steps", tree.type)
    return result


__all__ = [
    "ErrorSink",
    "Conclude",
    "Frame",
    "literal",
    "report_failure",
    "finish",
]
