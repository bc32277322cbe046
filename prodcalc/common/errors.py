"""Errors raised while evaluating an arithmetic expression."""


class EvalError(ValueError):
    """Base class: the whole expression is rejected."""


class LexError(EvalError):
    """A character that is not part of the expression language."""

    def __init__(self, character: str):
        self.character = character
        super().__init__(f"Invalid character: {character!r}")


class MismatchedParenError(EvalError):
    def __init__(self, message: str = "Mismatched parentheses"):
        super().__init__(message)


class StackUnderflowError(EvalError):
    """An operator or percent found fewer operands than it needs."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Not enough operands for {symbol!r}")


class DivideByZeroError(EvalError):
    def __init__(self, message: str = "Divide by zero"):
        super().__init__(message)


class UnknownFunctionError(EvalError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown function: {name}")


class FunctionArgMissingError(EvalError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing argument for function {name!r}")


class MalformedExpressionError(EvalError):
    """The value stack did not end with exactly one value."""

    def __init__(self, remaining: int):
        self.remaining = remaining
        super().__init__(f"Invalid expression ({remaining} values left on the stack)")
