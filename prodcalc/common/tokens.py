"""Token types and the operator table shared by the parser stages."""
from collections.abc import Callable as ABCCallable
from enum import Enum
import math
import operator
from typing import Callable, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from prodcalc.common.errors import DivideByZeroError


# Type alias for binary operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]


class TokenKind(str, Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    FUNCTION = "function"
    PERCENT = "percent"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"


class Token(BaseModel):
    """
    One lexical unit of an expression.

    ``text`` holds the number literal, the operator symbol or the function
    name; it is empty for percent and parentheses.
    """

    model_config = ConfigDict(frozen=True)

    kind: TokenKind = Field(..., description="Token kind")
    text: str = Field(default="", description="Literal text, operator symbol or function name")

    @classmethod
    def number(cls, text: str) -> "Token":
        return cls(kind=TokenKind.NUMBER, text=text)

    @classmethod
    def op(cls, symbol: str) -> "Token":
        return cls(kind=TokenKind.OPERATOR, text=symbol)

    @classmethod
    def function(cls, name: str) -> "Token":
        return cls(kind=TokenKind.FUNCTION, text=name)

    @classmethod
    def percent(cls) -> "Token":
        return cls(kind=TokenKind.PERCENT)

    @classmethod
    def left_paren(cls) -> "Token":
        return cls(kind=TokenKind.LEFT_PAREN)

    @classmethod
    def right_paren(cls) -> "Token":
        return cls(kind=TokenKind.RIGHT_PAREN)

    def __str__(self) -> str:
        return self.text or self.kind.value


class OperatorSpec(NamedTuple):
    precedence: int
    right_assoc: bool
    apply: OperatorFn


def _divide(a: float, b: float) -> float:
    if b == 0:
        raise DivideByZeroError()
    return a / b


def _power(a: float, b: float) -> float:
    """Power with non-finite results where math.pow would raise."""
    try:
        return math.pow(a, b)
    except ValueError:
        # zero to a negative power, or a negative base with a fractional exponent
        return math.inf if a == 0 else math.nan
    except OverflowError:
        return math.copysign(math.inf, a) if b % 2 == 1 else math.inf


# Mapping of binary operator symbols to (precedence, right associative, function)
OPERATORS: dict[str, OperatorSpec] = {
    "+": OperatorSpec(1, False, operator.add),
    "-": OperatorSpec(1, False, operator.sub),
    "*": OperatorSpec(2, False, operator.mul),
    "/": OperatorSpec(2, False, _divide),
    "^": OperatorSpec(3, True, _power),
}

# Postfix operator the converter emits after every percent sign
PERCENT_SYMBOL = "%"
