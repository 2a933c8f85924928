import logging
import math

from errors import UndefinedVariableError

logger = logging.getLogger(__name__)


class VariableStore:
    """Name to value map shared by the parser and the interpreter of one run.

    Numeric variables hold an int or float, string variables hold a str. A
    later declaration replaces an earlier one of the same name, whatever its
    type.
    """

    def __init__(self):
        self._values = {}

    def declare(self, name, value):
        logger.debug("declare %s = %r", name, value)
        self._values[name] = value

    def lookup(self, name, line_number=None):
        if name not in self._values:
            raise UndefinedVariableError(name, line_number)
        return self._values[name]

    def get(self, name, default=None):
        return self._values.get(name, default)

    def as_dict(self):
        return dict(self._values)

    def __contains__(self, name):
        return name in self._values

    def __len__(self):
        return len(self._values)


def to_number(text):
    """Decodes a numeric literal to int or float; returns None for anything else."""
    if not isinstance(text, str):
        return text
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    # nan and inf spellings are names, not numbers
    return number if math.isfinite(number) else None
