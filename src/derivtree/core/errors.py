"""Hard derivation errors and their stable codes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorCode:
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (#{self.code})"


@dataclass
class DerivationError(Exception):
    error: ErrorCode
    detail: str | None = None

    @property
    def code(self) -> str:
        return self.error.code

    def __str__(self) -> str:
        if self.detail is None:
            return str(self.error)
        return f"{self.error}: {self.detail}"


_IF = "IF-THEN-ELSE syntax error. Expression has one or more errors. One of them - "

EMPTY_EXPRESSION = ErrorCode("001.1", "Expression error")
EXPRESSION_TYPE = ErrorCode("001.1", "Expression type error")
BRACKETS_MISMATCH = ErrorCode("001.2", "Brackets mismatch")
UNDEFINED = ErrorCode("001.3", "Undefined error")
STLC_UNDEFINED = ErrorCode("001.2", "Undefined error")
APP_ERROR = ErrorCode("002", "T-app error")
ABS_TYPE = ErrorCode("003.1", "Expression type error")
ABS_NO_VARIABLE = ErrorCode("003.2", "T-abs type error")
ABS_NO_VARIABLE_UNARY = ErrorCode("003.3", "T-abs type error")
VAR_ERROR = ErrorCode("004", "T-VAR error")
ISZERO_ARGUMENT = ErrorCode("005", "IS-ZERO argument error")
SUCC_ARGUMENT = ErrorCode("006", "SUCC argument error")
PRED_ARGUMENT = ErrorCode("007", "PRED argument error")
IF_SYNTAX = ErrorCode("008.1", "IF-THEN-ELSE syntax error")
THEN_MISSING = ErrorCode("008.2", _IF + "THEN clause is missing")
THEN_EMPTY = ErrorCode("008.3", _IF + "THEN clause is missing")
ELSE_MISSING = ErrorCode("008.4", _IF + "ELSE clause is missing")
ELSE_EMPTY = ErrorCode("008.5", _IF + "ELSE clause is missing")
BRANCH_MISMATCH = ErrorCode(
    "008.6", _IF + "THEN and ELSE branches don't have the same type"
)
FN_SYNTAX = ErrorCode("009", "Syntax error. Expression has one or more errors.")
BRA_SYNTAX = ErrorCode("010.1", "T-BRA syntax error")
BRA_BALANCE = ErrorCode("010.2", "T-BRA syntax error")
STLC_BRA_SYNTAX = ErrorCode("010.1", "T-() syntax error")
STLC_BRA_BALANCE = ErrorCode("010.2", "T-() syntax error")
TOO_DEEP = ErrorCode("011", "Expression nesting too deep")
