"""Runtime configuration for the session and the batch runner."""
import os
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ENV_PREFIX = "PRODCALC_"


class CalculatorConfig(BaseModel):
    """
    Settings shared by the calculator collaborators.

    The engine itself takes no configuration: its precedence table, function
    table and formatting rule are fixed.
    """

    # Settings must not change while a session or batch is running
    model_config = ConfigDict(frozen=True)

    history_limit: int = Field(default=100, ge=1, description="Maximum number of history entries kept")
    max_workers: Optional[int] = Field(
        default=None, ge=1, description="Maximum number of concurrent batch workers (default: CPU count)"
    )
    log_level: LogLevel = Field(default="INFO", description="Logging level name")

    @classmethod
    def from_env(cls) -> "CalculatorConfig":
        """
        Build a configuration from PRODCALC_* environment variables.

        Unset variables keep their defaults.

        :return: Validated configuration
        :rtype: CalculatorConfig
        :raises pydantic.ValidationError: If a variable holds an invalid value
        """
        values = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw.upper() if name == "log_level" else raw
        return cls(**values)
