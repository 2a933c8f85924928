import logging
import re

from lexer import TokenType
from basic_ast import *
from errors import (
    BasicSyntaxError,
    EmptyThenBlockError,
    LineNumberError,
    UndefinedVariableError,
    VariableTypeError,
)
from variables import VariableStore, to_number

logger = logging.getLogger(__name__)

COMPARATOR_PATTERN = re.compile(r"[=<>]+")
# Checked in this order; the first one present decides the comparison.
COMPARATORS = ("=", "<", ">")


class TokenStream:
    """Cursor over the tokens of a single line."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.pos = 0

    @property
    def current_token(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def advance(self):
        token = self.current_token
        if token is not None:
            self.pos += 1
        return token


class Parser:
    """Turns token lines into a Program.

    `self.lines`/`self.pos` is the cursor over the remaining lines. The
    top-level loop and block-THEN absorption both pull from it, so an
    `IF ... THEN` with an indented body consumes its continuation lines
    before the top-level loop sees them.
    """

    def __init__(self, token_lines, variables=None):
        self.lines = list(token_lines)
        self.pos = 0
        self.variables = variables if variables is not None else VariableStore()

    def has_lines(self):
        return self.pos < len(self.lines)

    def peek_line(self):
        return self.lines[self.pos] if self.has_lines() else None

    def next_line(self):
        line = self.lines[self.pos]
        self.pos += 1
        return line

    @staticmethod
    def is_continuation(tokens):
        return tokens is not None and len(tokens) > 1 and tokens[1].indented

    def parse_line(self, tokens):
        stream = TokenStream([token.without_marker() for token in tokens])
        record = LineRecord(number=0)

        first = stream.advance()
        if first is None:
            return record
        if first.type != TokenType.NUMBER:
            raise LineNumberError(
                f"Line number must be a number, found '{first.value}' (source line {first.line})"
            )
        record.number = first.value

        while stream.current_token is not None:
            token = stream.advance()

            if token.type == TokenType.WORD:
                statement = self.parse_statement(token, stream, record.number)
                if statement is not None:
                    record.statements.append(statement)
            elif token.type == TokenType.VAR_NUMBER:
                record.statements.append(self.declare(token, "%=", record.number))
            elif token.type == TokenType.VAR_STRING:
                record.statements.append(self.declare(token, "$=", record.number))
            else:
                logger.debug("line %s: ignoring stray %s token %r", record.number, token.type.name, token.value)

        return record

    def parse_statement(self, token, stream, line_number):
        if token.value == "PRINT":
            return self.parse_print(stream, line_number)

        elif token.value == "CLS":
            self.expect_end(stream, "CLS", line_number)
            return ClsStatement(line_number)

        elif token.value == "END":
            self.expect_end(stream, "END", line_number)
            return EndStatement(line_number)

        elif token.value == "GOTO":
            target = stream.advance()
            if target is None or target.type != TokenType.NUMBER or stream.current_token is not None:
                raise BasicSyntaxError("GOTO command must be followed only by a number.", line_number)
            return GotoStatement(target.value, line_number)

        elif token.value == "IF":
            return self.parse_if(stream, line_number)

        logger.debug("line %s: ignoring unrecognized word %r", line_number, token.value)
        return None

    def parse_print(self, stream, line_number):
        argument = stream.advance()
        if argument is None:
            raise BasicSyntaxError("PRINT command must be followed by a number/string/variable.", line_number)

        if argument.type == TokenType.WORD:
            if argument.value not in self.variables:
                raise UndefinedVariableError(argument.value, line_number)
            return PrintStatement(VariableRef(argument.value), line_number)
        if argument.type == TokenType.NUMBER:
            return PrintStatement(NumberLiteral(argument.value), line_number)
        if argument.type == TokenType.STRING:
            return PrintStatement(StringLiteral(argument.value), line_number)

        raise BasicSyntaxError("PRINT command must be followed by a number/string/variable.", line_number)

    @staticmethod
    def expect_end(stream, command, line_number):
        if stream.current_token is not None:
            raise BasicSyntaxError(f"{command} command must not be followed by anything.", line_number)

    def parse_if(self, stream, line_number):
        condition_token = stream.advance()
        if condition_token is None or condition_token.type not in (TokenType.WORD, TokenType.STRING):
            raise BasicSyntaxError("IF command must have a condition with a comparator.", line_number)
        condition = self.parse_condition(condition_token.value, line_number)

        then_token = stream.advance()
        if then_token is None or then_token.type != TokenType.WORD or then_token.value != "THEN":
            raise BasicSyntaxError("IF command must have a THEN statement.", line_number)

        target = stream.advance()
        if target is not None:
            if target.type != TokenType.NUMBER:
                raise BasicSyntaxError("THEN must be followed by a line number or an indented block.", line_number)
            return IfStatement(condition, target.value, line_number)

        block = self.parse_block()
        if not block:
            raise EmptyThenBlockError("Then statement is empty", line_number)
        return IfStatement(condition, block, line_number)

    def parse_block(self):
        block = []
        while self.is_continuation(self.peek_line()):
            block.append(self.parse_line(self.next_line()))
        return block

    @staticmethod
    def parse_condition(text, line_number):
        op = next((comparator for comparator in COMPARATORS if comparator in text), None)
        if op is None:
            raise BasicSyntaxError("IF command must have a condition with a comparator.", line_number)

        operands = COMPARATOR_PATTERN.split(text)
        if len(operands) != 2 or not all(operands):
            raise BasicSyntaxError(f"Comparison '{text}' needs exactly one operand on each side", line_number)
        return Condition(operands[0], op, operands[1])

    def declare(self, token, separator, line_number):
        parts = token.value.split(separator)
        if len(parts) != 2 or not parts[0]:
            raise BasicSyntaxError(f"Variable declaration unexpected for variable named '{parts[0]}'", line_number)

        name, raw_value = parts
        number = to_number(raw_value)
        if separator == "%=":
            if number is None:
                raise VariableTypeError(
                    f"Variable value of type NUMBER expected for variable named '{name}', got '{raw_value}'",
                    line_number,
                )
            value = number
        else:
            if number is not None:
                raise VariableTypeError(
                    f"Variable value of type STRING expected for variable named '{name}', got '{raw_value}'",
                    line_number,
                )
            value = raw_value

        self.variables.declare(name, value)
        return DeclareStatement(name, value, line_number)

    def parse_program(self):
        program = Program()
        while self.has_lines():
            record = self.parse_line(self.next_line())
            if record.statements:
                program.lines.append(record)

        logger.debug("parsed %d program line(s)", len(program.lines))
        return program


def parse(token_lines, variables=None):
    return Parser(token_lines, variables).parse_program()


class SemanticAnalyzer:
    """Reports jump targets no line defines.

    Missing targets only fail when a jump is actually taken, so these are
    warnings rather than errors.
    """

    def __init__(self, program):
        self.program = program
        self.warnings = []
        self.valid_line_numbers = set(program.line_numbers())

    def analyze(self):
        self.warnings = []
        for record in self.program.lines:
            self._check_record(record)
        return self.warnings

    def _check_record(self, record):
        for stmt in record.statements:
            if isinstance(stmt, GotoStatement):
                self._check_goto_target(stmt.target, stmt.line)
            elif isinstance(stmt, IfStatement):
                if stmt.is_block:
                    for nested in stmt.then:
                        self._check_record(nested)
                else:
                    self._check_goto_target(stmt.then, stmt.line)

    def _check_goto_target(self, target, current_line):
        if target not in self.valid_line_numbers:
            self.warnings.append(f"Line {current_line}: jump target {target} does not exist")
