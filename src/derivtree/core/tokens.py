"""Token variants for the common calculus and the STLC."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence, TypeAlias

from .types import BaseType


class TokenKind(Enum):
    TRUE = "true"
    FALSE = "false"
    PRED = "pred"
    SUCC = "succ"
    ISZERO = "iszero"
    ZERO = "0"
    IF = "if"
    THEN = "then"
    ELSE = "else"
    LPAREN = "("
    RPAREN = ")"
    ANNOTATION = ":"
    VAR = "var"
    FN = "f"


KEYWORD_KINDS = frozenset(
    {
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.PRED,
        TokenKind.SUCC,
        TokenKind.ISZERO,
        TokenKind.ZERO,
        TokenKind.IF,
        TokenKind.THEN,
        TokenKind.ELSE,
        TokenKind.LPAREN,
        TokenKind.RPAREN,
    }
)


@dataclass(frozen=True)
class Keyword:
    """A literal or keyword token, shared by both calculi."""

    kind: TokenKind

    def __post_init__(self) -> None:
        if self.kind not in KEYWORD_KINDS:
            raise ValueError(f"{self.kind} is not a keyword token")

    def latex(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class TypeAnnotation:
    """Trailing ``: Nat`` / ``: Bool`` marker of a common-calculus input run."""

    type: BaseType

    @property
    def kind(self) -> TokenKind:
        return TokenKind.ANNOTATION

    def latex(self) -> str:
        return f":{self.type}"


@dataclass(frozen=True)
class Variable:
    """An STLC variable occurrence.

    ``context_type`` is only set once an enclosing abstraction has bound the name;
    ``abstracted=False`` marks a free occurrence still waiting for its binder.
    """

    name: str
    declared_type: BaseType | None
    abstracted: bool = False
    context_type: BaseType | None = None

    @property
    def kind(self) -> TokenKind:
        return TokenKind.VAR

    def latex(self) -> str:
        return self.name

    def bound(self, context_type: BaseType) -> Variable:
        return replace(self, abstracted=True, context_type=context_type)


@dataclass(frozen=True)
class OpaqueFn:
    """The function symbol ``f``; its signature is supplied by the caller."""

    @property
    def kind(self) -> TokenKind:
        return TokenKind.FN

    def latex(self) -> str:
        return "f"


CommonToken: TypeAlias = Keyword | TypeAnnotation
STLCToken: TypeAlias = Keyword | Variable | OpaqueFn
Token: TypeAlias = Keyword | TypeAnnotation | Variable | OpaqueFn

TRUE = Keyword(TokenKind.TRUE)
FALSE = Keyword(TokenKind.FALSE)
PRED = Keyword(TokenKind.PRED)
SUCC = Keyword(TokenKind.SUCC)
ISZERO = Keyword(TokenKind.ISZERO)
ZERO = Keyword(TokenKind.ZERO)
IF = Keyword(TokenKind.IF)
THEN = Keyword(TokenKind.THEN)
ELSE = Keyword(TokenKind.ELSE)
LPAREN = Keyword(TokenKind.LPAREN)
RPAREN = Keyword(TokenKind.RPAREN)
F = OpaqueFn()


def var(name: str, declared_type: BaseType | None) -> Variable:
    return Variable(name, declared_type)


def annotation(type_: BaseType) -> TypeAnnotation:
    return TypeAnnotation(type_)


def tokens_latex(tokens: Sequence[Token]) -> tuple[str, ...]:
    return tuple(tok.latex() for tok in tokens)


__all__ = [
    "TokenKind",
    "Keyword",
    "TypeAnnotation",
    "Variable",
    "OpaqueFn",
    "CommonToken",
    "STLCToken",
    "Token",
    "TRUE",
    "FALSE",
    "PRED",
    "SUCC",
    "ISZERO",
    "ZERO",
    "IF",
    "THEN",
    "ELSE",
    "LPAREN",
    "RPAREN",
    "F",
    "var",
    "annotation",
    "tokens_latex",
]
