import pytest

from derivtree.config import Settings
from derivtree.core.errors import DerivationError
from derivtree.core.proof import SENTINEL, MatchStatus, Membership
from derivtree.core.tokens import (
    ELSE,
    F,
    IF,
    ISZERO,
    LPAREN,
    RPAREN,
    SUCC,
    THEN,
    TRUE,
    ZERO,
    Variable,
    var,
)
from derivtree.core.types import BOOL, NAT, UNCONSTRAINED, BaseType, TypeSignature
from derivtree.rules.stlc import (
    abstraction_candidate,
    apply_bindings,
    bind_variable,
    derive_stlc,
    derive_stlc_tree,
    free_variables,
    is_abstraction,
)

RED = "\\color{#ff0000}"
BLACK = "\\color{#000000}"
SETTINGS = Settings(error_color=RED, reset_color=BLACK)

NAT_TO_NAT = TypeSignature.of(BaseType.NAT, BaseType.NAT)
NAT_TO_BOOL = TypeSignature.of(BaseType.NAT, BaseType.BOOL)


def _derive(t1: list, t2: list | None = None, **kwargs):  # type: ignore[no-untyped-def]
    errors: list[str] = []
    result = derive_stlc(t1, t2, on_error=errors.append, settings=SETTINGS, **kwargs)
    return result, errors


def test_identity_abstraction() -> None:
    result, errors = _derive([var("x", BaseType.NAT)], expected=NAT_TO_NAT)
    assert errors == []
    assert result.type == NAT_TO_NAT
    assert result.tree.rules() == ["T-abs", "T-var"]
    assert result.proof == (
        "\\dfrac{\\dfrac{x : Nat \\in \\Gamma}{ \\Gamma \\vdash x : Nat} (T-var)}"
        "{ \\Gamma \\vdash \\lambda x:Nat. x : Nat \\to Nat} (T-abs)"
    )


def test_abstraction_needs_a_function_type() -> None:
    result, errors = _derive([var("x", BaseType.NAT)], expected=NAT)
    assert result is SENTINEL
    assert errors == ["Expression type error (#003.1)"]


def test_abstraction_leaves_caller_tokens_alone() -> None:
    t1 = [var("x", BaseType.NAT)]
    _derive(t1, expected=NAT_TO_NAT)
    assert t1 == [Variable("x", BaseType.NAT)]


def test_variable_with_wrong_context_type_flags_premise() -> None:
    (bound,) = bind_variable([var("x", BaseType.NAT)], "x", BaseType.BOOL)
    result, errors = _derive([bound], expected=NAT)
    assert errors == []
    premise = result.tree.premises[0]
    assert isinstance(premise, Membership)
    assert premise.type == BOOL
    assert premise.status is MatchStatus.MISMATCHED
    assert not result.tree.mismatched
    assert result.proof.startswith(f"\\dfrac{{{RED}x : Bool \\in \\Gamma{BLACK}}}")


def test_variable_against_wrong_expected_type_is_flagged() -> None:
    (bound,) = bind_variable([var("x", BaseType.NAT)], "x", BaseType.NAT)
    result, errors = _derive([bound], expected=BOOL)
    assert errors == []
    assert result.tree.rule == "T-var"
    assert result.tree.mismatched
    assert result.tree.premises[0].status is MatchStatus.EXACT
    assert result.type == NAT


def test_variable_without_expected_type_is_exact() -> None:
    (bound,) = bind_variable([var("x", BaseType.BOOL)], "x", BaseType.BOOL)
    result, errors = _derive([bound])
    assert errors == []
    assert result.type == BOOL
    assert not result.tree.has_mismatch()


def test_untyped_variable() -> None:
    result, errors = _derive([Variable("x", None, abstracted=True)], expected=NAT)
    assert result is SENTINEL
    assert errors == ["T-VAR error (#004)"]


def test_application_of_opaque_function() -> None:
    result, errors = _derive([F], [ZERO], fn_type=NAT_TO_BOOL, expected=BOOL)
    assert errors == []
    assert result.tree.rules() == ["T-app", "T-var", "T-zero"]
    assert result.type == UNCONSTRAINED
    function, argument = result.tree.premises
    assert not function.mismatched
    assert argument.mismatched
    assert function.conclusion.latex() == " \\Gamma \\vdash f : Nat \\to Bool"
    assert result.tree.conclusion.latex() == (
        " \\Gamma \\vdash f \\enspace 0 : Bool"
    )


def test_application_with_mismatched_signature() -> None:
    result, errors = _derive([F], [ZERO], fn_type=NAT_TO_NAT, expected=BOOL)
    assert errors == []
    function = result.tree.premises[0]
    assert function.mismatched
    assert result.tree.has_mismatch()
    assert RED in result.proof


def test_application_argument_is_checked_against_expected_type() -> None:
    result, errors = _derive([F], [ZERO], fn_type=NAT_TO_BOOL, expected=NAT)
    assert errors == []
    argument = result.tree.premises[1]
    assert argument.rule == "T-zero"
    assert argument.type == NAT
    assert not argument.mismatched
    assert result.tree.premises[0].mismatched


def test_application_argument_type_sets_function_domain() -> None:
    result, _ = _derive([F], [TRUE], fn_type=NAT_TO_BOOL, expected=BOOL)
    function, argument = result.tree.premises
    assert not argument.mismatched
    assert function.conclusion.type == TypeSignature.of(BaseType.BOOL, BaseType.BOOL)
    assert function.mismatched


def test_application_without_expected_type_shows_codomain() -> None:
    result, _ = _derive([F], [ZERO], fn_type=NAT_TO_BOOL)
    assert result.tree.conclusion.type == BOOL
    assert not result.tree.has_mismatch()


@pytest.mark.parametrize(
    "t1, t2, fn_type, message",
    [
        ([F], None, None, "Undefined error (#001.2)"),
        (
            [F, ZERO],
            None,
            NAT_TO_BOOL,
            "Syntax error. Expression has one or more errors. (#009)",
        ),
        ([], [ZERO], None, "T-app error (#002)"),
        ([], None, None, "Expression error (#001.1)"),
        ([THEN, ZERO], None, None, "Undefined error (#001.2)"),
        ([LPAREN, RPAREN], None, None, "T-() syntax error (#010.1)"),
        ([LPAREN, LPAREN, ZERO, RPAREN], None, None, "T-() syntax error (#010.2)"),
        ([SUCC], None, None, "SUCC argument error (#006)"),
        ([ISZERO], None, None, "IS-ZERO argument error (#005)"),
    ],
)
def test_hard_errors(t1, t2, fn_type, message) -> None:  # type: ignore[no-untyped-def]
    result, errors = _derive(t1, t2, fn_type=fn_type)
    assert result is SENTINEL
    assert errors == [message]


def test_branch_mismatch() -> None:
    result, errors = _derive([IF, TRUE, THEN, ZERO, ELSE, TRUE])
    assert result is SENTINEL
    assert len(errors) == 1
    assert errors[0].endswith("(#008.6)")


def test_bracket_infers_interior_type() -> None:
    result, errors = _derive([LPAREN, SUCC, ZERO, RPAREN])
    assert errors == []
    assert result.type == NAT
    assert result.tree.rules() == ["T-()", "T-succ", "T-zero"]
    assert result.tree.conclusion.latex() == (
        " \\Gamma \\vdash ( \\enspace succ \\enspace 0 \\enspace ) : Nat"
    )


def test_literals_without_expected_type_are_exact() -> None:
    for token, ty in ((TRUE, BOOL), (ZERO, NAT)):
        result, _ = _derive([token])
        assert result.type == ty
        assert not result.tree.has_mismatch()


def test_conditional_over_bound_variable() -> None:
    b = var("b", BaseType.BOOL)
    result, errors = _derive(
        [IF, b, THEN, ZERO, ELSE, SUCC, ZERO],
        expected=TypeSignature.of(BaseType.BOOL, BaseType.NAT),
    )
    assert errors == []
    assert result.tree.rules() == [
        "T-abs",
        "T-if",
        "T-var",
        "T-zero",
        "T-succ",
        "T-zero",
    ]
    assert not result.tree.has_mismatch()
    assert result.type == TypeSignature.of(BaseType.BOOL, BaseType.NAT)


def test_two_binders() -> None:
    b = var("b", BaseType.BOOL)
    n = var("n", BaseType.NAT)
    expected = TypeSignature.of(BaseType.BOOL, BaseType.NAT, BaseType.NAT)
    tree = derive_stlc_tree([IF, b, THEN, n, ELSE, n], expected=expected)
    assert tree.rule == "T-abs"
    assert tree.conclusion.binders == (("b", BaseType.BOOL), ("n", BaseType.NAT))
    inner = tree.premises[0]
    assert inner.rule == "T-abs"
    assert inner.conclusion.binders == (("n", BaseType.NAT),)
    assert inner.type == NAT_TO_NAT
    assert tree.type == expected
    assert not tree.has_mismatch()


def test_abstraction_candidate_in_argument_run() -> None:
    x = var("x", BaseType.NAT)
    tree = derive_stlc_tree([F], [x], fn_type=NAT_TO_BOOL, expected=NAT_TO_BOOL)
    assert tree.rule == "T-abs"
    assert tree.premises[0].rule == "T-app"


def test_tree_variant_raises() -> None:
    with pytest.raises(DerivationError, match="#003.1"):
        derive_stlc_tree([var("x", BaseType.NAT)], expected=NAT)


def test_bind_variable_returns_new_tokens() -> None:
    x = var("x", BaseType.NAT)
    tokens = (x, SUCC, x)
    bound = bind_variable(tokens, "x", BaseType.NAT)
    assert tokens == (x, SUCC, x)
    assert bound[0].abstracted and bound[2].abstracted
    assert bound[0].context_type is BaseType.NAT
    assert bound[1] is SUCC


def test_apply_bindings_leaves_other_names() -> None:
    x, y = var("x", BaseType.NAT), var("y", BaseType.BOOL)
    bound = apply_bindings([x, y], {"y": BaseType.BOOL})
    assert bound[0] is x
    assert bound[1].abstracted


def test_free_variables_in_first_occurrence_order() -> None:
    x, y = var("x", BaseType.NAT), var("y", BaseType.BOOL)
    assert free_variables([y, SUCC, x, y]) == [y, x]
    assert free_variables(bind_variable([y, x], "y", BaseType.BOOL)) == [x]


@pytest.mark.parametrize(
    "tokens, expected",
    [
        ([var("x", BaseType.NAT)], True),
        ([LPAREN, var("x", BaseType.NAT), RPAREN], True),
        ([var("x", BaseType.NAT), LPAREN, ZERO], False),
        ([var("x", BaseType.NAT), LPAREN, ZERO, RPAREN], False),
        ([LPAREN, ZERO, RPAREN, var("x", BaseType.NAT)], True),
        ([SUCC, ZERO], False),
        ([Variable("x", BaseType.NAT, abstracted=True)], False),
    ],
)
def test_is_abstraction(tokens, expected) -> None:  # type: ignore[no-untyped-def]
    assert is_abstraction(tokens) is expected


def test_candidate_is_first_free_variable_after_open_bracket() -> None:
    x, y = var("x", BaseType.NAT), var("y", BaseType.BOOL)
    assert abstraction_candidate([x, LPAREN, y, ZERO]) == y


def test_variable_before_closed_bracket_is_not_abstracted() -> None:
    x = var("x", BaseType.NAT)
    result, errors = _derive([x, LPAREN, ZERO, RPAREN], expected=NAT)
    assert errors == []
    assert result.tree.rule == "T-var"
    assert not result.tree.mismatched
    assert result.tree.premises[0].status is MatchStatus.MISMATCHED
