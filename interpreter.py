import enum
import logging
import operator
import sys

from basic_ast import *
from config import InterpreterSettings
from errors import EndOfExecution, InfiniteLoopError, UndefinedLineError
from lexer import lex
from parser import parse
from variables import VariableStore, to_number

logger = logging.getLogger(__name__)

COMPARISONS = {
    "=": operator.eq,
    "<": operator.lt,
    ">": operator.gt,
}


class Halt(enum.Enum):
    END = "end"
    FELL_THROUGH = "fell_through"


def resolve_operand(text, variables):
    """Number literal first, then a declared variable, then the raw text."""
    number = to_number(text)
    if number is not None:
        return number
    if text in variables:
        return variables.get(text)
    return text


def compare(left, op, right):
    """Numbers compare numerically and text lexically.

    A number against text is never equal and never ordered.
    """
    if isinstance(left, str) != isinstance(right, str):
        return False
    return COMPARISONS[op](left, right)


def format_value(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Interpreter:
    def __init__(self, program, variables=None, settings=None, output=None):
        self.program = program
        self.variables = variables if variables is not None else VariableStore()
        self.settings = settings or InterpreterSettings()
        self.output = output if output is not None else sys.stdout
        self.pc = 0
        self.iterations = 0

    def _output(self, text):
        print(text, file=self.output)

    def _clear(self):
        self.output.write(self.settings.clear_sequence)
        self.output.flush()

    def _evaluate_arg(self, arg, line_number):
        if isinstance(arg, VariableRef):
            return self.variables.lookup(arg.name, line_number)
        return arg.value

    def _evaluate_condition(self, condition):
        left = resolve_operand(condition.left, self.variables)
        right = resolve_operand(condition.right, self.variables)
        return compare(left, condition.op, right)

    def execute_statements(self, statements):
        """Runs one line's statements; returns the pending jump target or None."""
        target = None
        for stmt in statements:
            if isinstance(stmt, PrintStatement):
                self._output(format_value(self._evaluate_arg(stmt.arg, stmt.line)))

            elif isinstance(stmt, ClsStatement):
                self._clear()

            elif isinstance(stmt, EndStatement):
                raise EndOfExecution(stmt.line)

            elif isinstance(stmt, GotoStatement):
                target = stmt.target

            elif isinstance(stmt, DeclareStatement):
                # already stored while parsing
                pass

            elif isinstance(stmt, IfStatement):
                if not self._evaluate_condition(stmt.condition):
                    continue
                if stmt.is_block:
                    for nested in stmt.then:
                        nested_target = self.execute_statements(nested.statements)
                        if nested_target is not None:
                            target = nested_target
                else:
                    target = stmt.then

            else:
                raise TypeError(f"Unknown statement {stmt!r}")
        return target

    def _jump(self, target, line_number):
        index = self.program.index_of(target)
        if index is None:
            raise UndefinedLineError(target, line_number)
        logger.debug("line %s: jump to %s", line_number, target)
        return index

    def run(self):
        try:
            while self.pc < len(self.program.lines):
                record = self.program.lines[self.pc]
                if self.iterations >= self.settings.max_iterations:
                    raise InfiniteLoopError(self.settings.max_iterations, record.number)
                self.iterations += 1

                target = self.execute_statements(record.statements)
                if target is not None:
                    self.pc = self._jump(target, record.number)
                else:
                    self.pc += 1
        except EndOfExecution as end:
            logger.debug("END reached at line %s", end.line_number)
            return Halt.END

        logger.debug("ran off the end of the program after %d line(s)", self.iterations)
        return Halt.FELL_THROUGH


def execute(program, variables=None, settings=None, output=None):
    return Interpreter(program, variables, settings, output).run()


def run_source(source, settings=None, output=None, variables=None):
    """Lexes, parses and runs `source` with a fresh variable store."""
    variables = variables if variables is not None else VariableStore()
    program = parse(lex(source), variables)
    return execute(program, variables, settings, output)
