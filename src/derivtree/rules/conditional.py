"""Clause splitting for ``if ... then ... else ...`` runs.

Both calculi split conditionals the same way; only the derivation of each clause
differs, so the split is kept free of any typing.

A clause ends at the first ``then`` (resp. ``else``). When an ``if`` shows up first,
the clause is taken to contain one whole inner conditional, whose own keyword is
skipped by cutting at the *second* occurrence of the stop keyword (see
:func:`~derivtree.core.utils.nth_occurrence_index`). Conditionals that reuse the same
keyword more than twice are not delimited correctly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

from derivtree.core.errors import (
    BRANCH_MISMATCH,
    ELSE_EMPTY,
    ELSE_MISSING,
    IF_SYNTAX,
    THEN_EMPTY,
    THEN_MISSING,
    DerivationError,
    ErrorCode,
)
from derivtree.core.proof import Derivation, Judgment, MatchStatus
from derivtree.core.tokens import Token, TokenKind
from derivtree.core.types import BOOL, NAT, TypeSignature
from derivtree.core.utils import nth_occurrence_index

T = TypeVar("T", bound=Token)


@dataclass(frozen=True)
class Clause(Generic[T]):
    tokens: tuple[T, ...]
    # True when the clause carries an inner conditional
    nested: bool = False


@dataclass(frozen=True)
class Conditional(Generic[T]):
    condition: Clause[T]
    then_branch: Clause[T]
    else_branch: Clause[T]


def _take_clause(
    run: Sequence[T], stop: TokenKind, missing: ErrorCode, empty: ErrorCode
) -> tuple[Clause[T], tuple[T, ...]]:
    clause: list[T] = []
    for index, tok in enumerate(run):
        if tok.kind is stop:
            if index == len(run) - 1:
                raise DerivationError(empty)
            return Clause(tuple(clause)), tuple(run[index + 1 :])
        if tok.kind is TokenKind.IF:
            tail = run[index:]
            boundary = nth_occurrence_index(tail, stop)
            if boundary is None:
                raise DerivationError(missing)
            if boundary == len(tail) - 1:
                raise DerivationError(empty)
            inner = (*clause, *tail[:boundary])
            return Clause(inner, nested=True), tuple(tail[boundary + 1 :])
        clause.append(tok)
    raise DerivationError(missing)


def split_conditional(tokens: Sequence[T]) -> Conditional[T]:
    """Split a conditional run into its three clauses.

    The leading ``if`` is optional. Raises :class:`DerivationError` with one of the
    ``#008`` codes when a clause is missing.
    """

    if not tokens:
        raise DerivationError(IF_SYNTAX)
    rest = tuple(tokens[1:]) if tokens[0].kind is TokenKind.IF else tuple(tokens)
    condition, rest = _take_clause(rest, TokenKind.THEN, THEN_MISSING, THEN_EMPTY)
    then_branch, rest = _take_clause(rest, TokenKind.ELSE, ELSE_MISSING, ELSE_EMPTY)
    else_branch = Clause(rest, nested=any(tok.kind is TokenKind.IF for tok in rest))
    return Conditional(condition, then_branch, else_branch)


DeriveClause = Callable[[tuple[T, ...], TypeSignature, bool], Derivation]


def derive_conditional(
    tokens: Sequence[T],
    expected: TypeSignature,
    *,
    is_inner: bool,
    derive_clause: DeriveClause[T],
    conclude: Callable[[TypeSignature], Judgment],
) -> Derivation:
    """T-if: derive the three clauses and check that the branches agree.

    ``derive_clause(tokens, expected, nested)`` derives one clause with the calling
    engine. A conditional nested in another clause may not sit in a ``Nat`` position;
    such a step is flagged rather than rejected.
    """

    parts = split_conditional(tokens)
    condition = derive_clause(parts.condition.tokens, BOOL, parts.condition.nested)
    then_branch = derive_clause(
        parts.then_branch.tokens, expected, parts.then_branch.nested
    )
    else_branch = derive_clause(
        parts.else_branch.tokens, expected, parts.else_branch.nested
    )

    if then_branch.type.head is not else_branch.type.head:
        raise DerivationError(
            BRANCH_MISMATCH, f"{then_branch.type} vs {else_branch.type}"
        )

    shown = expected
    if is_inner or expected.is_unconstrained:
        shown = then_branch.type or expected
    return Derivation(
        "T-if",
        conclude(shown),
        then_branch.type,
        (condition, then_branch, else_branch),
        MatchStatus.of(not (is_inner and expected == NAT)),
    )


__all__ = ["Clause", "Conditional", "split_conditional", "derive_conditional"]
