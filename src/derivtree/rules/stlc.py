"""Typing rules for the simply typed lambda calculus over ``Nat`` and ``Bool``.

An expression is given as one or two operand runs. Dispatch order matters:

1. T-abs, when a free variable follows the last open bracket of either run;
2. T-app, when both runs are present;
3. otherwise the rule of the leading token of the first run.

Variables are bound by returning new token tuples (see :func:`bind_variable`); the
caller's runs are never modified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from derivtree.config import Settings, get_settings
from derivtree.core.errors import (
    ABS_NO_VARIABLE,
    ABS_NO_VARIABLE_UNARY,
    ABS_TYPE,
    APP_ERROR,
    EMPTY_EXPRESSION,
    FN_SYNTAX,
    ISZERO_ARGUMENT,
    PRED_ARGUMENT,
    STLC_BRA_BALANCE,
    STLC_BRA_SYNTAX,
    STLC_UNDEFINED,
    SUCC_ARGUMENT,
    VAR_ERROR,
    DerivationError,
    ErrorCode,
)
from derivtree.core.proof import (
    GAMMA_VDASH,
    Derivation,
    DerivationResult,
    Judgment,
    MatchStatus,
    Membership,
)
from derivtree.core.tokens import OpaqueFn, STLCToken, TokenKind, Variable, tokens_latex
from derivtree.core.types import (
    BOOL,
    NAT,
    UNCONSTRAINED,
    BaseType,
    TypeSignature,
)
from derivtree.core.utils import bracket_balance, last_unmatched_lparen, strip_brackets

from .base import ErrorSink, Frame, finish, literal, report_failure
from .conditional import derive_conditional

logger = logging.getLogger(__name__)

Tokens = tuple[STLCToken, ...]
BindingContext = Mapping[str, BaseType]


def free_variables(tokens: Sequence[STLCToken]) -> list[Variable]:
    """Unbound, typed variables in first-occurrence order, one per name."""

    seen: dict[str, Variable] = {}
    for tok in tokens:
        if (
            isinstance(tok, Variable)
            and not tok.abstracted
            and tok.declared_type is not None
            and tok.name not in seen
        ):
            seen[tok.name] = tok
    return list(seen.values())


def abstraction_candidate(tokens: Sequence[STLCToken]) -> Variable | None:
    """The first free variable at or after the innermost unclosed ``(``.

    With every bracket closed the scan starts at the last ``(``, or at the start of
    the run when there is none.
    """

    start = last_unmatched_lparen(tokens)
    if start is None:
        start = max(
            (i for i, tok in enumerate(tokens) if tok.kind is TokenKind.LPAREN),
            default=0,
        )
    for tok in tokens[start:]:
        if isinstance(tok, Variable) and not tok.abstracted:
            return tok
    return None


def is_abstraction(tokens: Sequence[STLCToken]) -> bool:
    return abstraction_candidate(tokens) is not None


def apply_bindings(tokens: Sequence[STLCToken], context: BindingContext) -> Tokens:
    """Return ``tokens`` with every variable named in ``context`` bound to its type."""

    return tuple(
        tok.bound(context[tok.name])
        if isinstance(tok, Variable) and tok.name in context
        else tok
        for tok in tokens
    )


def bind_variable(
    tokens: Sequence[STLCToken], name: str, context_type: BaseType
) -> Tokens:
    return apply_bindings(tokens, {name: context_type})


def abstract_operands(
    t1: Tokens, t2: Tokens | None, domain: BaseType
) -> tuple[Tokens, Tokens | None, Variable]:
    """Bind the abstraction candidate of ``t1`` (else ``t2``) across both runs."""

    candidate = abstraction_candidate(t1)
    if candidate is None and t2 is not None:
        candidate = abstraction_candidate(t2)
    if candidate is None:
        raise DerivationError(
            ABS_NO_VARIABLE if t2 is not None else ABS_NO_VARIABLE_UNARY
        )
    context = {candidate.name: domain}
    return (
        apply_bindings(t1, context),
        apply_bindings(t2, context) if t2 is not None else None,
        candidate,
    )


@dataclass(frozen=True)
class _Frame(Frame):
    fn_type: TypeSignature | None = None

    def conclude(
        self, t1: Tokens, t2: Tokens | None, ty: TypeSignature
    ) -> Judgment:
        run = t1 + (t2 or ())
        binders = tuple(
            (v.name, v.declared_type)
            for v in free_variables(run)
            if v.declared_type is not None
        )
        return Judgment(tokens_latex(run), ty, GAMMA_VDASH, binders)


def _derive(
    t1: Tokens,
    t2: Tokens | None,
    expected: TypeSignature,
    frame: _Frame,
    is_inner: bool,
) -> Derivation:
    frame = frame.deeper()
    if is_abstraction(t1) or (t2 and is_abstraction(t2)):
        return _abstraction(t1, t2, expected, frame)
    if t2:
        if not t1:
            raise DerivationError(APP_ERROR)
        return _application(t1, t2, expected, frame)
    if not t1:
        raise DerivationError(EMPTY_EXPRESSION)

    def conclude(ty: TypeSignature) -> Judgment:
        return frame.conclude(t1, None, ty)

    head = t1[0]
    logger.debug(
        "stlc: %s against %s (depth %d)", head.kind.value, expected, frame.depth
    )
    match head:
        case Variable():
            return _variable(head, expected)
        case OpaqueFn():
            if frame.fn_type is None:
                raise DerivationError(STLC_UNDEFINED, "f has no signature")
            return _opaque_fn(t1, expected, frame.fn_type)
    match head.kind:
        case TokenKind.TRUE:
            return literal("T-true", BaseType.BOOL, expected, conclude)
        case TokenKind.FALSE:
            return literal("T-false", BaseType.BOOL, expected, conclude)
        case TokenKind.ZERO:
            return literal(
                "T-zero", BaseType.NAT, expected, conclude, shows_expected=False
            )
        case TokenKind.SUCC:
            return _arithmetic("T-succ", SUCC_ARGUMENT, t1, expected, frame)
        case TokenKind.PRED:
            return _arithmetic("T-pred", PRED_ARGUMENT, t1, expected, frame)
        case TokenKind.ISZERO:
            return _iszero(t1, expected, frame)
        case TokenKind.IF:
            return derive_conditional(
                t1,
                expected,
                is_inner=is_inner,
                derive_clause=lambda clause, ty, nested: _derive(
                    clause, None, ty, frame, nested
                ),
                conclude=conclude,
            )
        case TokenKind.LPAREN:
            return _brackets(t1, expected, frame)
    raise DerivationError(STLC_UNDEFINED, f"cannot start with {head.kind.value!r}")


def _abstraction(
    t1: Tokens, t2: Tokens | None, expected: TypeSignature, frame: _Frame
) -> Derivation:
    if len(expected) < 2:
        raise DerivationError(ABS_TYPE, f"{expected} is not a function type")
    # The conclusion still lists the variable being bound among its binders.
    conclusion = frame.conclude(t1, t2, expected)
    domain = expected[0]
    b1, b2, bound = abstract_operands(t1, t2 or None, domain)
    logger.debug("stlc: binding %s : %s", bound.name, domain)
    body = _derive(b1, b2, expected.drop_domain(), frame, False)
    ty = body.type.prepend(domain) if body.type else expected
    return Derivation("T-abs", conclusion, ty, (body,))


def _application(
    t1: Tokens, t2: Tokens, expected: TypeSignature, frame: _Frame
) -> Derivation:
    argument = _derive(t2, None, expected, frame, False)
    domain = argument.type.head
    function_type = expected.prepend(domain) if domain and expected else expected
    function = _derive(t1, None, function_type, frame, False)
    shown = expected if expected else function.type.drop_domain()
    return Derivation(
        "T-app",
        frame.conclude(t1, t2, shown),
        UNCONSTRAINED,
        (function, argument),
    )


def _variable(tok: Variable, expected: TypeSignature) -> Derivation:
    if tok.declared_type is None:
        raise DerivationError(VAR_ERROR, tok.name)
    declared = TypeSignature.of(tok.declared_type)
    fits = expected.is_unconstrained or expected == declared
    in_context = tok.context_type is tok.declared_type
    premise = Membership(
        tok.name,
        TypeSignature.of(tok.context_type or tok.declared_type),
        MatchStatus.of(in_context or not fits),
    )
    return Derivation(
        "T-var",
        Judgment((tok.name,), declared, GAMMA_VDASH),
        declared,
        (premise,),
        MatchStatus.of(fits),
    )


def _opaque_fn(
    t1: Tokens, expected: TypeSignature, fn_type: TypeSignature
) -> Derivation:
    if len(t1) > 1:
        raise DerivationError(FN_SYNTAX, "f must stand alone")
    ok = expected.is_unconstrained or (len(expected) == 2 and expected == fn_type)
    shown = fn_type if expected.is_unconstrained else expected
    return Derivation(
        "T-var",
        Judgment(("f",), shown, GAMMA_VDASH),
        fn_type,
        (Membership("f", fn_type),),
        MatchStatus.of(ok),
    )


def _arithmetic(
    rule: str,
    missing: ErrorCode,
    t1: Tokens,
    expected: TypeSignature,
    frame: _Frame,
) -> Derivation:
    if len(t1) < 2:
        raise DerivationError(missing)
    operand = _derive(t1[1:], None, expected, frame, True)
    if expected.is_base:
        ok, shown = expected == NAT, expected
    elif expected.is_unconstrained and operand.type.is_base:
        ok, shown = operand.type == NAT, operand.type
    else:
        ok, shown = False, expected
    return Derivation(
        rule, frame.conclude(t1, None, shown), shown, (operand,), MatchStatus.of(ok)
    )


def _iszero(t1: Tokens, expected: TypeSignature, frame: _Frame) -> Derivation:
    if len(t1) < 2:
        raise DerivationError(ISZERO_ARGUMENT)
    operand = _derive(t1[1:], None, NAT, frame, False)
    if expected.is_base:
        ok, shown = expected == BOOL, expected
    elif expected.is_unconstrained:
        ok, shown = operand.type == NAT, BOOL
    else:
        ok, shown = False, expected
    return Derivation(
        "T-iszero",
        frame.conclude(t1, None, shown),
        shown,
        (operand,),
        MatchStatus.of(ok),
    )


def _brackets(t1: Tokens, expected: TypeSignature, frame: _Frame) -> Derivation:
    if len(t1) < 3:
        raise DerivationError(STLC_BRA_SYNTAX)
    if bracket_balance(t1) != 0:
        raise DerivationError(STLC_BRA_BALANCE, f"balance {bracket_balance(t1)}")
    inner = _derive(strip_brackets(t1), None, expected, frame, False)
    # Without an expected type the bracket reports what its interior inferred.
    shown = inner.type if expected.is_unconstrained else expected
    return Derivation("T-()", frame.conclude(t1, None, shown), shown, (inner,))


def derive_stlc_tree(
    t1: Sequence[STLCToken],
    t2: Sequence[STLCToken] | None = None,
    *,
    fn_type: TypeSignature | None = None,
    expected: TypeSignature | BaseType | None = None,
    is_inner: bool = False,
    settings: Settings | None = None,
) -> Derivation:
    """Derive ``t1`` (applied to ``t2`` when given) and return the proof tree.

    Raises :class:`~derivtree.core.errors.DerivationError` on hard errors.
    """

    frame = _Frame(settings or get_settings(), fn_type=fn_type)
    return _derive(
        tuple(t1),
        tuple(t2) if t2 is not None else None,
        TypeSignature.coerce(expected),
        frame,
        is_inner,
    )


def derive_stlc(
    t1: Sequence[STLCToken],
    t2: Sequence[STLCToken] | None = None,
    *,
    fn_type: TypeSignature | None = None,
    expected: TypeSignature | BaseType | None = None,
    on_error: ErrorSink | None = None,
    is_inner: bool = False,
    settings: Settings | None = None,
) -> DerivationResult:
    """Derive an STLC expression, reporting hard errors through ``on_error``.

    ``fn_type`` is the fixed signature of the opaque symbol ``f``; without it an
    ``f`` token is an undefined construct. An absent ``expected`` type puts the
    derivation in inference mode.
    """

    settings = settings or get_settings()
    try:
        tree = derive_stlc_tree(
            t1,
            t2,
            fn_type=fn_type,
            expected=expected,
            is_inner=is_inner,
            settings=settings,
        )
        return finish(tree, settings)
    except DerivationError as exc:
        return report_failure(exc, on_error)


__all__ = [
    "BindingContext",
    "free_variables",
    "abstraction_candidate",
    "is_abstraction",
    "apply_bindings",
    "bind_variable",
    "abstract_operands",
    "derive_stlc",
    "derive_stlc_tree",
]
