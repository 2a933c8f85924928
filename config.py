import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MAX_ITERATIONS = 100
ANSI_CLEAR_SCREEN = "\033[2J\033[H"


class InterpreterSettings(BaseModel):
    """Runtime settings for one interpreter run.

    max_iterations caps how many program lines a run may execute; the run
    fails with InfiniteLoopError when it would execute one more. It is a
    coarse guard against runaway GOTO loops, not a cycle detector.
    """
    model_config = ConfigDict(frozen=True)

    max_iterations: int = Field(DEFAULT_MAX_ITERATIONS, ge=1)
    clear_sequence: str = ANSI_CLEAR_SCREEN
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value):
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{value}'")
        return value

    @classmethod
    def from_env(cls, environ=None, **overrides):
        """Reads BASIC_MAX_ITERATIONS and BASIC_LOG_LEVEL; explicit overrides win."""
        environ = os.environ if environ is None else environ
        values = {}
        if environ.get("BASIC_MAX_ITERATIONS"):
            values["max_iterations"] = environ["BASIC_MAX_ITERATIONS"]
        if environ.get("BASIC_LOG_LEVEL"):
            values["log_level"] = environ["BASIC_LOG_LEVEL"]
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
