"""Conversion between numeric values and display strings."""
from decimal import ROUND_HALF_UP, Context, Decimal
import math


ERROR_TEXT = "Error"

# Values this close to an integer are displayed as that integer
INTEGER_TOLERANCE = 1e-12
FRACTION_DIGITS = 12

# Decimal places kept, ties rounded away from zero
FRACTION_QUANTUM = Decimal(1).scaleb(-FRACTION_DIGITS)

# Enough digits for any non-integral double plus its fraction
_CONTEXT = Context(prec=40)


def parse_number(text: str) -> float:
    """
    Convert number literal text to a float.

    The tokenizer accepts any run of digits and dots, so text such as
    ``"1.2.3"`` can reach this point; it becomes NaN and is displayed as
    ``"Error"``.

    :param str text: Number literal

    :return: Parsed value, NaN if the text is not a decimal number
    :rtype: float
    """
    try:
        return float(text)
    except ValueError:
        return math.nan


def format_number(n: float) -> str:
    """
    Render a result for display.

    :param float n: Value to render

    :return: "Error" for non-finite values, an integer string when within
        1e-12 of an integer, otherwise up to 12 decimals without trailing zeros.
        A value exactly halfway between two 12-digit decimals rounds away from zero.
    :rtype: str
    """
    if not math.isfinite(n):
        return ERROR_TEXT
    nearest = round(n)
    if abs(n - nearest) < INTEGER_TOLERANCE:
        return str(nearest)
    fixed = Decimal(n).quantize(FRACTION_QUANTUM, rounding=ROUND_HALF_UP, context=_CONTEXT)
    return f"{fixed:f}".rstrip("0").rstrip(".")
