"""Typing rules for the common arithmetic/boolean calculus.

The same rules serve both presentation modes: natural deduction, where every
conclusion carries a turnstile, and the bracket-free T-NBL mode, where it does not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from derivtree.config import Settings, get_settings
from derivtree.core.errors import (
    BRA_BALANCE,
    BRA_SYNTAX,
    BRACKETS_MISMATCH,
    EMPTY_EXPRESSION,
    EXPRESSION_TYPE,
    ISZERO_ARGUMENT,
    PRED_ARGUMENT,
    SUCC_ARGUMENT,
    UNDEFINED,
    DerivationError,
    ErrorCode,
)
from derivtree.core.proof import (
    BARE,
    SEPARATOR,
    VDASH,
    Derivation,
    DerivationResult,
    Judgment,
    MatchStatus,
)
from derivtree.core.tokens import (
    CommonToken,
    TokenKind,
    TypeAnnotation,
    tokens_latex,
)
from derivtree.core.types import BOOL, NAT, BaseType, TypeSignature
from derivtree.core.utils import bracket_balance, strip_brackets

from .base import ErrorSink, Frame, finish, literal, report_failure
from .conditional import derive_conditional

logger = logging.getLogger(__name__)

Tokens = tuple[CommonToken, ...]


@dataclass(frozen=True)
class _Frame(Frame):
    bracket_free: bool = False

    def conclude(self, tokens: Tokens, ty: TypeSignature) -> Judgment:
        turnstile = BARE if self.bracket_free else VDASH
        return Judgment(tokens_latex(tokens), ty, turnstile)


def _derive(
    tokens: Tokens, expected: TypeSignature, frame: _Frame, is_inner: bool
) -> Derivation:
    if not tokens:
        raise DerivationError(EMPTY_EXPRESSION)
    if bracket_balance(tokens) != 0:
        raise DerivationError(BRACKETS_MISMATCH, f"balance {bracket_balance(tokens)}")
    frame = frame.deeper()

    def conclude(ty: TypeSignature) -> Judgment:
        return frame.conclude(tokens, ty)

    head = tokens[0].kind
    logger.debug("common: %s against %s (depth %d)", head.value, expected, frame.depth)
    match head:
        case TokenKind.TRUE:
            return literal("T-true", BaseType.BOOL, expected, conclude)
        case TokenKind.FALSE:
            return literal("T-false", BaseType.BOOL, expected, conclude)
        case TokenKind.ZERO:
            return literal(
                "T-zero", BaseType.NAT, expected, conclude, shows_expected=False
            )
        case TokenKind.SUCC:
            return _arithmetic("T-succ", SUCC_ARGUMENT, tokens, expected, frame)
        case TokenKind.PRED:
            return _arithmetic("T-pred", PRED_ARGUMENT, tokens, expected, frame)
        case TokenKind.ISZERO:
            return _iszero(tokens, expected, frame)
        case TokenKind.IF:
            return derive_conditional(
                tokens,
                expected,
                is_inner=is_inner,
                derive_clause=lambda clause, ty, nested: _derive(
                    clause, ty, frame, nested
                ),
                conclude=conclude,
            )
        case TokenKind.LPAREN:
            return _brackets(tokens, expected, frame)
    raise DerivationError(UNDEFINED, f"cannot start with {head.value!r}")


def _arithmetic(
    rule: str,
    missing: ErrorCode,
    tokens: Tokens,
    expected: TypeSignature,
    frame: _Frame,
) -> Derivation:
    if len(tokens) < 2:
        raise DerivationError(missing)
    operand = _derive(tokens[1:], expected, frame, False)
    ok = expected == NAT or operand.type == NAT
    shown = operand.type if expected.is_unconstrained else expected
    return Derivation(
        rule,
        frame.conclude(tokens, shown),
        shown if ok else operand.type,
        (operand,),
        MatchStatus.of(ok),
    )


def _iszero(tokens: Tokens, expected: TypeSignature, frame: _Frame) -> Derivation:
    if len(tokens) < 2:
        raise DerivationError(ISZERO_ARGUMENT)
    operand = _derive(tokens[1:], NAT, frame, False)
    ok = expected.is_unconstrained or expected == BOOL
    shown = BOOL if expected.is_unconstrained else expected
    return Derivation(
        "T-iszero",
        frame.conclude(tokens, shown),
        shown,
        (operand,),
        MatchStatus.of(ok),
    )


def _brackets(tokens: Tokens, expected: TypeSignature, frame: _Frame) -> Derivation:
    if len(tokens) < 3:
        raise DerivationError(BRA_SYNTAX)
    if bracket_balance(tokens) != 0:
        raise DerivationError(BRA_BALANCE)
    inner = _derive(strip_brackets(tokens), expected, frame, False)
    shown = inner.type if expected.is_unconstrained else expected
    return Derivation("T-bra", frame.conclude(tokens, shown), shown, (inner,))


def derive_common_tree(
    tokens: Sequence[CommonToken],
    expected: TypeSignature | BaseType | None = None,
    *,
    bracket_free: bool = False,
    settings: Settings | None = None,
) -> Derivation:
    """Derive ``tokens`` and return the proof tree, raising on hard errors."""

    frame = _Frame(settings or get_settings(), bracket_free=bracket_free)
    return _derive(tuple(tokens), TypeSignature.coerce(expected), frame, False)


def derive_common(
    tokens: Sequence[CommonToken],
    expected: TypeSignature | BaseType | None = None,
    *,
    bracket_free: bool = False,
    on_error: ErrorSink | None = None,
    settings: Settings | None = None,
) -> DerivationResult:
    """Derive ``tokens`` against ``expected`` in either presentation mode.

    Hard errors are passed to ``on_error`` as their coded message and yield
    :data:`~derivtree.core.proof.SENTINEL`. Soft mismatches come back as an ordinary
    result whose mismatched steps are colour-marked in ``proof``.
    """

    settings = settings or get_settings()
    try:
        tree = derive_common_tree(
            tokens, expected, bracket_free=bracket_free, settings=settings
        )
        return finish(tree, settings)
    except DerivationError as exc:
        return report_failure(exc, on_error)


def split_annotation(tokens: Sequence[CommonToken]) -> tuple[Tokens, BaseType]:
    """Separate an input run from its trailing ``:Nat``/``:Bool`` annotation."""

    if len(tokens) < 2:
        raise DerivationError(EXPRESSION_TYPE, "expression and annotation required")
    last = tokens[-1]
    if not isinstance(last, TypeAnnotation):
        raise DerivationError(EXPRESSION_TYPE, "missing trailing type annotation")
    return tuple(tokens[:-1]), last.type


def derive_annotated(
    tokens: Sequence[CommonToken],
    *,
    bracket_free: bool = False,
    on_error: ErrorSink | None = None,
    settings: Settings | None = None,
) -> DerivationResult:
    """Derive a run as entered by the user, annotation last."""

    try:
        body, expected = split_annotation(tokens)
    except DerivationError as exc:
        return report_failure(exc, on_error)
    return derive_common(
        body,
        expected,
        bracket_free=bracket_free,
        on_error=on_error,
        settings=settings,
    )


def expression_markup(
    tokens: Sequence[CommonToken], *, bracket_free: bool = False
) -> str:
    prefix = BARE if bracket_free else VDASH
    return prefix + SEPARATOR.join(tokens_latex(tokens))


__all__ = [
    "derive_common",
    "derive_common_tree",
    "derive_annotated",
    "split_annotation",
    "expression_markup",
]
