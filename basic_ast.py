from dataclasses import dataclass, field
from typing import List, Union


@dataclass(frozen=True)
class NumberLiteral:
    value: Union[int, float]


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class VariableRef:
    name: str


@dataclass(frozen=True)
class Condition:
    """Comparison kept as source text; operands are resolved when executed."""
    left: str
    op: str
    right: str

    def __str__(self):
        return f"{self.left}{self.op}{self.right}"


@dataclass
class PrintStatement:
    arg: Union[NumberLiteral, StringLiteral, VariableRef]
    line: int


@dataclass
class ClsStatement:
    line: int


@dataclass
class EndStatement:
    line: int


@dataclass
class GotoStatement:
    target: int
    line: int


@dataclass
class DeclareStatement:
    """Marks a declaration line. The value is stored while parsing; running it does nothing."""
    name: str
    value: Union[int, float, str]
    line: int


@dataclass
class IfStatement:
    condition: Condition
    then: Union[int, List["LineRecord"]]
    line: int

    @property
    def is_block(self):
        return isinstance(self.then, list)


Statement = Union[PrintStatement, ClsStatement, EndStatement, GotoStatement, IfStatement, DeclareStatement]


@dataclass
class LineRecord:
    number: int
    statements: List[Statement] = field(default_factory=list)


@dataclass
class Program:
    lines: List[LineRecord] = field(default_factory=list)

    def index_of(self, number):
        """Index of the first line labelled `number`, or None."""
        for idx, record in enumerate(self.lines):
            if record.number == number:
                return idx
        return None

    def line_numbers(self):
        return [record.number for record in self.lines]
