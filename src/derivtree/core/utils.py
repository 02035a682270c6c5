"""Structural helpers over flat token runs."""

from __future__ import annotations

from typing import Sequence, TypeVar

from .tokens import Token, TokenKind

T = TypeVar("T", bound=Token)


def bracket_balance(tokens: Sequence[Token]) -> int:
    """Return ``#'(' - #')'`` over the whole run.

    Zero only says the counts agree, not that the brackets nest properly. A positive
    result means surplus left brackets, a negative one surplus right brackets.
    """

    balance = 0
    for tok in tokens:
        if tok.kind is TokenKind.LPAREN:
            balance += 1
        elif tok.kind is TokenKind.RPAREN:
            balance -= 1
    return balance


def nth_occurrence_index(
    tokens: Sequence[Token], target: TokenKind, n: int = 2
) -> int | None:
    """Return the index of the ``n``-th token of kind ``target``, or ``None``.

    This is a plain lexical count with no notion of nesting. With the default
    ``n=2`` it finds the boundary of an outer ``then``/``else`` when exactly one inner
    conditional reuses the keyword; deeper reuse is not accounted for.
    """

    seen = 0
    for index, tok in enumerate(tokens):
        if tok.kind is target:
            seen += 1
            if seen == n:
                return index
    return None


def last_unmatched_lparen(tokens: Sequence[Token]) -> int | None:
    open_positions: list[int] = []
    for index, tok in enumerate(tokens):
        if tok.kind is TokenKind.LPAREN:
            open_positions.append(index)
        elif tok.kind is TokenKind.RPAREN and open_positions:
            open_positions.pop()
    return open_positions[-1] if open_positions else None


def strip_brackets(tokens: Sequence[T]) -> tuple[T, ...]:
    """Drop the first ``(`` from the left and the last ``)`` from the right."""

    items = list(tokens)
    left = next(
        (i for i, tok in enumerate(items) if tok.kind is TokenKind.LPAREN), None
    )
    right = next(
        (
            i
            for i in range(len(items) - 1, 0, -1)
            if items[i].kind is TokenKind.RPAREN
        ),
        None,
    )
    if left is None or right is None or right <= left:
        return tuple(items)
    del items[right]
    del items[left]
    return tuple(items)


__all__ = [
    "bracket_balance",
    "nth_occurrence_index",
    "last_unmatched_lparen",
    "strip_brackets",
]
