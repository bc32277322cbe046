"""Parse and evaluate arithmetic expressions safely."""
import math
from types import MappingProxyType
from typing import Callable, List, Mapping

from prodcalc.common.errors import (
    FunctionArgMissingError,
    LexError,
    MalformedExpressionError,
    MismatchedParenError,
    StackUnderflowError,
    UnknownFunctionError,
)
from prodcalc.common.formatting import parse_number
from prodcalc.common.logger import logger
from prodcalc.common.tokens import OPERATORS, PERCENT_SYMBOL, Token, TokenKind


FunctionFn = Callable[[float], float]

DIGITS = "0123456789"
LETTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _sqrt(x: float) -> float:
    # NaN rather than math.sqrt's ValueError for negative input
    return math.sqrt(x) if x >= 0 else math.nan


# Single-argument functions callable by name, e.g. "sqrt(9)"
FUNCTIONS: Mapping[str, FunctionFn] = MappingProxyType({
    "sqrt": _sqrt,
})


class ExpressionParser:
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - No state shared between calls, so evaluation is thread and process safe

    Algorithm:
        1. Tokenize, rewriting a unary sign as a binary one on a synthetic zero
        2. Convert to Reverse Polish Notation (RPN) using Shunting-yard
        3. Evaluate RPN using a stack

    The Shunting-yard algorithm converts an infix expression into Reverse Polish Notation (RPN), allowing safe, stack-based evaluation without parentheses.
    It handles operator precedence by temporarily storing operators on a stack and outputting them in the correct order.

    Examples:
        - Infix expression (standard notation): 3 + 4 * 2
        - Corresponding Reverse Polish Notation (RPN): 3 4 2 * +
        - Infix expression: -2 ^ 2
        - Tokens: 0 - 2 ^ 2, RPN: 0 2 2 ^ -
    """

    @staticmethod
    def tokenize(expr: str) -> List[Token]:
        """
        Split an arithmetic expression into tokens.

        Spaces are optional ("3+4*2" and "3 + 4 * 2" are equivalent).
        A "+" or "-" at the start, after "(" or after another operator is a
        sign: a Number("0") token is inserted before it, so "-5" becomes "0 - 5".

        :param str expr: Arithmetic expression as a string

        :return: List of tokens
        :rtype: List[Token]
        :raises LexError: On a character outside the expression language
        """
        tokens: List[Token] = []
        i = 0
        while i < len(expr):
            c = expr[i]
            if c.isspace():
                i += 1
                continue

            if c in DIGITS or c == ".":
                # Digits and dots are collected as-is, "1.2.3" fails at conversion
                j = i
                while j < len(expr) and (expr[j] in DIGITS or expr[j] == "."):
                    j += 1
                tokens.append(Token.number(expr[i:j]))
                i = j
                continue

            if c == "(":
                tokens.append(Token.left_paren())
            elif c == ")":
                tokens.append(Token.right_paren())
            elif c == PERCENT_SYMBOL:
                tokens.append(Token.percent())
            elif c in OPERATORS:
                prev = tokens[-1] if tokens else None
                if c in "+-" and (
                    prev is None or prev.kind in (TokenKind.LEFT_PAREN, TokenKind.OPERATOR)
                ):
                    tokens.append(Token.number("0"))
                tokens.append(Token.op(c))
            elif c in LETTERS:
                j = i
                while j < len(expr) and (expr[j] in LETTERS or expr[j] in DIGITS):
                    j += 1
                tokens.append(Token.function(expr[i:j]))
                i = j
                continue
            else:
                raise LexError(c)
            i += 1

        return tokens

    @staticmethod
    def _pops_before(top: Token, current: str) -> bool:
        """
        Whether the operator on top of the stack must be output before pushing ``current``.

        :param Token top: Top of the operator stack
        :param str current: Incoming operator symbol

        :return: True if ``top`` binds at least as tightly (strictly for right-associative ``current``)
        :rtype: bool
        """
        if top.kind is not TokenKind.OPERATOR:
            return False
        top_prec = OPERATORS[top.text].precedence
        spec = OPERATORS[current]
        if spec.right_assoc:
            return top_prec > spec.precedence
        return top_prec >= spec.precedence

    @staticmethod
    def to_rpn(tokens: List[Token]) -> List[Token]:
        """
        Convert a list of tokens into Reverse Polish Notation (RPN) using the Shunting-yard algorithm.

        Functions wait on the operator stack until their closing parenthesis.
        Percent is already in postfix position, so it goes straight to the
        output followed by a "%" operator, without any precedence comparison.

        :param List[Token] tokens: List of arithmetic tokens

        :return: List of tokens in RPN order
        :rtype: List[Token]
        :raises MismatchedParenError: If parentheses are unbalanced
        """
        output: List[Token] = []
        stack: List[Token] = []

        for token in tokens:
            if token.kind is TokenKind.NUMBER:
                # Numbers are added directly to the output
                output.append(token)
            elif token.kind is TokenKind.FUNCTION:
                stack.append(token)
            elif token.kind is TokenKind.PERCENT:
                output.append(token)
                output.append(Token.op(PERCENT_SYMBOL))
            elif token.kind is TokenKind.OPERATOR:
                while stack and ExpressionParser._pops_before(stack[-1], token.text):
                    output.append(stack.pop())
                stack.append(token)
            elif token.kind is TokenKind.LEFT_PAREN:
                stack.append(token)
            else:
                while stack and stack[-1].kind is not TokenKind.LEFT_PAREN:
                    output.append(stack.pop())
                if not stack:
                    raise MismatchedParenError("Unexpected ')'")
                stack.pop()
                # A function directly before the group applies to it
                if stack and stack[-1].kind is TokenKind.FUNCTION:
                    output.append(stack.pop())

        # Append remaining operators in reverse order (stack top first)
        while stack:
            token = stack.pop()
            if token.kind in (TokenKind.LEFT_PAREN, TokenKind.RIGHT_PAREN):
                raise MismatchedParenError("Unclosed '('")
            output.append(token)
        return output

    @staticmethod
    def eval_rpn(rpn: List[Token], functions: Mapping[str, FunctionFn] = FUNCTIONS) -> float:
        """
        Evaluate an RPN token sequence with a value stack.

        :param List[Token] rpn: Tokens in RPN order
        :param Mapping functions: Function table used for Function tokens

        :return: The single value left on the stack
        :rtype: float
        :raises StackUnderflowError: If an operator lacks operands
        :raises DivideByZeroError: If a divisor is exactly zero
        :raises FunctionArgMissingError: If a function has no argument
        :raises UnknownFunctionError: If a function is not in the table
        :raises MalformedExpressionError: If the stack does not end with one value
        """
        stack: List[float] = []
        for token in rpn:
            if token.kind is TokenKind.NUMBER:
                stack.append(parse_number(token.text))
            elif token.kind is TokenKind.OPERATOR:
                if token.text == PERCENT_SYMBOL:
                    if not stack:
                        raise StackUnderflowError(PERCENT_SYMBOL)
                    stack.append(stack.pop() / 100)
                    continue
                # Binary operator requires two operands
                if len(stack) < 2:
                    raise StackUnderflowError(token.text)
                b: float = stack.pop()
                a: float = stack.pop()
                stack.append(OPERATORS[token.text].apply(a, b))
            elif token.kind is TokenKind.FUNCTION:
                if not stack:
                    raise FunctionArgMissingError(token.text)
                fn = functions.get(token.text)
                if fn is None:
                    raise UnknownFunctionError(token.text)
                stack.append(fn(stack.pop()))
            # Percent tokens only mark the position of the "%" operator that follows

        if len(stack) != 1:
            raise MalformedExpressionError(len(stack))

        return stack[0]

    @staticmethod
    def evaluate(expr: str) -> float:
        """
        Evaluate an arithmetic expression safely.

        A blank expression evaluates to 0.

        :param str expr: Arithmetic expression string

        :return: Computed result as float, possibly NaN or infinite for invalid domains
        :rtype: float
        :raises EvalError: If expression is invalid or malformed
        """
        if not expr or not expr.strip():
            return 0.0

        tokens: List[Token] = ExpressionParser.tokenize(expr)
        rpn: List[Token] = ExpressionParser.to_rpn(tokens)
        logger.debug("RPN for %r: %s", expr, " ".join(str(t) for t in rpn))
        return ExpressionParser.eval_rpn(rpn, FUNCTIONS)


def evaluate(expr: str) -> float:
    """Evaluate an arithmetic expression, see :meth:`ExpressionParser.evaluate`."""
    return ExpressionParser.evaluate(expr)
