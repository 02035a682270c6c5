"""Derivation trees and their math-markup rendering.

Rules build :class:`Derivation` nodes; nothing in the rule engines touches markup.
:func:`render` is the only place that knows about ``\\dfrac`` grouping, ``\\enspace``
separators and the colour marker pair used to flag a mismatched step.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from derivtree.config import Settings, get_settings

from .errors import EXPRESSION_TYPE, DerivationError
from .types import BaseType, TypeSignature, UNCONSTRAINED

VDASH = " \\vdash "
GAMMA_VDASH = " \\Gamma \\vdash "
BARE = " "
SEPARATOR = " \\enspace "


class MatchStatus(Enum):
    EXACT = "exact"
    MISMATCHED = "mismatched"

    @staticmethod
    def of(ok: bool) -> MatchStatus:
        return MatchStatus.EXACT if ok else MatchStatus.MISMATCHED


@dataclass(frozen=True)
class Judgment:
    """``[Γ] ⊢ [λ binders] subject : type``."""

    subject: tuple[str, ...]
    type: TypeSignature
    turnstile: str = VDASH
    binders: tuple[tuple[str, BaseType], ...] = ()

    def latex(self) -> str:
        if self.type.is_unconstrained:
            raise DerivationError(EXPRESSION_TYPE, " ".join(self.subject))
        lams = "".join(f"\\lambda {name}:{ty}. " for name, ty in self.binders)
        subject = SEPARATOR.join(self.subject)
        return f"{self.turnstile}{lams}{subject} : {self.type.latex()}"


@dataclass(frozen=True)
class Membership:
    """The context lookup premise ``name : type ∈ Γ``."""

    name: str
    type: TypeSignature
    status: MatchStatus = MatchStatus.EXACT

    def latex(self) -> str:
        return f"{self.name} : {self.type.latex()} \\in \\Gamma"


@dataclass(frozen=True)
class Derivation:
    rule: str
    conclusion: Judgment
    type: TypeSignature
    premises: tuple[Derivation | Membership, ...] = ()
    status: MatchStatus = MatchStatus.EXACT

    @property
    def mismatched(self) -> bool:
        return self.status is MatchStatus.MISMATCHED

    def walk(self) -> Iterator[Derivation | Membership]:
        yield self
        for premise in self.premises:
            if isinstance(premise, Derivation):
                yield from premise.walk()
            else:
                yield premise

    def rules(self) -> list[str]:
        return [node.rule for node in self.walk() if isinstance(node, Derivation)]

    def has_mismatch(self) -> bool:
        return any(node.status is MatchStatus.MISMATCHED for node in self.walk())


def render(node: Derivation | Membership, settings: Settings | None = None) -> str:
    """Return the markup for ``node`` and everything above it."""

    settings = settings or get_settings()

    def mark(text: str, status: MatchStatus) -> str:
        if status is MatchStatus.MISMATCHED:
            return f"{settings.error_color}{text}{settings.reset_color}"
        return text

    def fmt(n: Derivation | Membership) -> str:
        match n:
            case Membership():
                return mark(n.latex(), n.status)
            case Derivation(rule, conclusion, _, premises, status):
                above = SEPARATOR.join(fmt(p) for p in premises)
                return mark(
                    f"\\dfrac{{{above}}}{{{conclusion.latex()}}} ({rule})", status
                )
        raise TypeError(f"Cannot render unknown proof node: {n!r}")

    return fmt(node)


@dataclass(frozen=True)
class DerivationResult:
    proof: str
    type: TypeSignature
    tree: Derivation | None = None

    @property
    def failed(self) -> bool:
        return self.tree is None

    @staticmethod
    def from_tree(
        tree: Derivation, settings: Settings | None = None
    ) -> DerivationResult:
        return DerivationResult(render(tree, settings), tree.type, tree)


SENTINEL = DerivationResult(" ", UNCONSTRAINED)


__all__ = [
    "VDASH",
    "GAMMA_VDASH",
    "BARE",
    "SEPARATOR",
    "MatchStatus",
    "Judgment",
    "Membership",
    "Derivation",
    "DerivationResult",
    "SENTINEL",
    "render",
]
