import logging
import re
from dataclasses import dataclass, replace
from enum import Enum, auto

logger = logging.getLogger(__name__)

# Prefixed to the token that follows the first double space of a line.
INDENT_MARKER = "\x1f"

# Runs of spaces that are not inside a double-quoted span.
SPLIT_PATTERN = re.compile(r' +(?=(?:[^"]*"[^"]*")*[^"]*$)')
QUOTED_SPAN = re.compile(r'"[^"]*"?')
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class TokenType(Enum):
    WORD = auto()
    STRING = auto()
    NUMBER = auto()
    VAR_STRING = auto()
    VAR_NUMBER = auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: object
    line: int

    @property
    def indented(self):
        return isinstance(self.value, str) and self.value.startswith(INDENT_MARKER)

    def without_marker(self):
        if not self.indented:
            return self
        return replace(self, value=self.value[len(INDENT_MARKER):])


def parse_integer(text):
    """Returns int(text) when the whole token is an integer literal, else None."""
    if INTEGER_PATTERN.fullmatch(text):
        return int(text)
    return None


class Lexer:
    def __init__(self, source):
        self.source = source

    def mark_indentation(self, line):
        """Replaces the first run of two or more spaces outside quotes with a space plus the marker."""
        line = line.rstrip(" ")
        in_quotes = False
        for pos, char in enumerate(line):
            if char == '"':
                in_quotes = not in_quotes
            elif not in_quotes and line.startswith("  ", pos):
                end = pos
                while line[end] == " ":
                    end += 1
                return line[:pos] + " " + INDENT_MARKER + line[end:]
        return line

    def split_line(self, line):
        return [part for part in SPLIT_PATTERN.split(line) if part]

    def classify(self, raw, line_number):
        number = parse_integer(raw)
        if number is not None:
            return Token(TokenType.NUMBER, number, line_number)

        if '"' in raw:
            outside_quotes = QUOTED_SPAN.sub("", raw)
            if "$" in outside_quotes:
                return Token(TokenType.VAR_STRING, self.clear(raw), line_number)
            return Token(TokenType.STRING, self.clear(raw), line_number)

        if "%" in raw:
            return Token(TokenType.VAR_NUMBER, self.clear(raw), line_number)
        if "$=" in raw:
            return Token(TokenType.VAR_STRING, self.clear(raw), line_number)
        return Token(TokenType.WORD, self.clear(raw), line_number)

    @staticmethod
    def clear(raw):
        return raw.replace('"', "").replace("'", "")

    def tokenize(self):
        token_lines = []
        for line_number, line in enumerate(self.source.split("\n"), start=1):
            line = self.mark_indentation(line.rstrip("\r"))
            token_lines.append([self.classify(raw, line_number) for raw in self.split_line(line)])

        logger.debug("lexed %d line(s)", len(token_lines))
        return token_lines


def lex(source):
    return Lexer(source).tokenize()
