"""Headless calculator session: expression buffer, display and history."""
import re
from typing import List, Optional

from pydantic import BaseModel, Field

from prodcalc.common.config import CalculatorConfig
from prodcalc.common.errors import EvalError
from prodcalc.common.formatting import ERROR_TEXT, format_number
from prodcalc.common.logger import logger
from prodcalc.common.models import HistoryEntry
from prodcalc.common.parser import ExpressionParser


# Trailing number, with its sign if it has one
TRAILING_NUMBER = re.compile(r"(.*?)(-?[0-9]*\.?[0-9]+)$")

# Spoken words understood by dictate(), applied in order
SPOKEN_OPERATORS = [
    (re.compile(r"times", re.IGNORECASE), "*"),
    (re.compile(r"divided by", re.IGNORECASE), "/"),
    (re.compile(r"plus", re.IGNORECASE), "+"),
    (re.compile(r"minus", re.IGNORECASE), "-"),
]

KEYBOARD_KEYS = "0123456789.+-*/()%^"


class CalculatorSession(BaseModel):
    """
    State behind a calculator keypad.

    The session owns the expression being typed and hands a copy of it to the
    engine on every evaluation. Errors while typing are ignored so that
    partial input such as "2+" does not flash an error; errors on "=" show
    "Error".
    """

    settings: CalculatorConfig = Field(default_factory=CalculatorConfig, description="Session settings")
    expression: str = Field(default="", description="Expression being typed")
    display: str = Field(default="0", description="Value currently shown")
    history: List[HistoryEntry] = Field(default_factory=list, description="Committed expressions, newest first")
    last_result: Optional[float] = Field(default=None, description="Value of the last successful '='")

    def press(self, command: str) -> str:
        """
        Apply a keypad command and return the new display.

        :param str command: "AC", "±", "%", "=" or text to append

        :return: Display after the command
        :rtype: str
        """
        try:
            if command == "AC":
                self.expression = ""
                self.display = "0"
            elif command == "±":
                self._toggle_sign()
            elif command == "%":
                self.expression += "%"
            elif command == "=":
                self._commit()
            else:
                self.expression += command
                self._live_evaluate()
        except EvalError as exc:
            logger.warning(f"Evaluation of {self.expression!r} failed: {exc}")
            self.display = ERROR_TEXT
        return self.display

    def press_key(self, key: str) -> str:
        """
        Apply a keyboard key; unknown keys are ignored.

        :param str key: Key name, e.g. "Enter", "Backspace" or "7"

        :return: Display after the key
        :rtype: str
        """
        if key == "Enter":
            return self.press("=")
        if key == "Backspace":
            self.backspace()
        elif len(key) == 1 and key in KEYBOARD_KEYS:
            return self.press(key)
        return self.display

    def backspace(self) -> str:
        self.expression = self.expression[:-1]
        return self.expression

    def dictate(self, phrase: str) -> str:
        """
        Append a spoken phrase such as "2 times 3" to the expression.

        :param str phrase: Transcribed speech

        :return: Display after the live evaluation
        :rtype: str
        """
        for pattern, symbol in SPOKEN_OPERATORS:
            phrase = pattern.sub(symbol, phrase)
        self.expression += phrase
        self._live_evaluate()
        return self.display

    def recall(self, index: int) -> HistoryEntry:
        """
        Load a history entry back into the expression and display.

        :param int index: Position in the history, 0 is the newest

        :return: The recalled entry
        :rtype: HistoryEntry
        :raises IndexError: If there is no such entry
        """
        if index < 0:
            raise IndexError(f"History index must not be negative: {index}")
        entry = self.history[index]
        self.expression = entry.expression
        self.display = entry.result
        return entry

    def clear_history(self) -> None:
        self.history.clear()

    def _toggle_sign(self) -> None:
        if not self.expression:
            self.expression = "-"
            self.display = "0"
            return
        match = TRAILING_NUMBER.match(self.expression)
        if match:
            before, last = match.groups()
            self.expression = before + (last[1:] if last.startswith("-") else "-" + last)
        else:
            self.expression = "-" + self.expression

    def _commit(self) -> None:
        value = ExpressionParser.evaluate(self.expression)
        text = format_number(value)
        self.history.insert(0, HistoryEntry(expression=self.expression, result=text))
        del self.history[self.settings.history_limit:]
        self.last_result = value
        self.expression = text
        self.display = text

    def _live_evaluate(self) -> None:
        try:
            self.display = format_number(ExpressionParser.evaluate(self.expression))
        except EvalError as exc:
            # Incomplete input while typing, keep the previous display
            logger.debug(f"Live evaluation of {self.expression!r} skipped: {exc}")
