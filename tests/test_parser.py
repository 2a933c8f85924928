"""Tests for the parser: per-command grammar, declarations and block-THEN."""

import pytest

from basic_ast import (
    ClsStatement,
    Condition,
    DeclareStatement,
    EndStatement,
    GotoStatement,
    IfStatement,
    LineRecord,
    NumberLiteral,
    PrintStatement,
    StringLiteral,
    VariableRef,
)
from errors import (
    BasicSyntaxError,
    EmptyThenBlockError,
    LineNumberError,
    UndefinedVariableError,
    VariableTypeError,
)
from lexer import lex
from parser import Parser, SemanticAnalyzer, parse
from variables import VariableStore


def parse_source(source, variables=None):
    return parse(lex(source), variables if variables is not None else VariableStore())


class TestLines:
    def test_line_numbers_kept_in_source_order(self):
        program = parse_source("30 END\n10 CLS\n20 GOTO 30")
        assert program.line_numbers() == [30, 10, 20]

    def test_non_numeric_first_token(self):
        with pytest.raises(LineNumberError):
            parse_source("PRINT 5")

    def test_lines_without_statements_are_dropped(self):
        program = parse_source("10 REM\n\n20 END")
        assert program.line_numbers() == [20]

    def test_declaration_lines_are_kept_as_jump_targets(self):
        program = parse_source("10 X%=1\n20 GOTO 10")
        assert program.lines[0].statements == [DeclareStatement("X", 1, 10)]

    def test_unknown_word_is_ignored(self):
        program = parse_source("10 REM HELLO\n20 END")
        assert program.line_numbers() == [20]

    def test_several_statements_on_one_line(self):
        program = parse_source("10 PRINT 1 PRINT 2 GOTO 10")
        assert program.lines[0].statements == [
            PrintStatement(NumberLiteral(1), 10),
            PrintStatement(NumberLiteral(2), 10),
            GotoStatement(10, 10),
        ]


class TestPrint:
    def test_literals(self):
        program = parse_source('10 PRINT 5\n20 PRINT "HI"')
        assert program.lines[0].statements == [PrintStatement(NumberLiteral(5), 10)]
        assert program.lines[1].statements == [PrintStatement(StringLiteral("HI"), 20)]

    def test_declared_variable(self):
        program = parse_source("10 X%=5\n20 PRINT X")
        assert program.lines[1].statements == [PrintStatement(VariableRef("X"), 20)]

    def test_undeclared_variable(self):
        with pytest.raises(UndefinedVariableError) as info:
            parse_source("10 PRINT X")
        assert info.value.name == "X"
        assert info.value.line_number == 10

    def test_missing_argument(self):
        with pytest.raises(BasicSyntaxError):
            parse_source("10 PRINT")

    def test_declaration_is_not_a_print_argument(self):
        with pytest.raises(BasicSyntaxError):
            parse_source("10 PRINT X%=5")


class TestCommandsWithoutArguments:
    def test_cls_and_end(self):
        program = parse_source("10 CLS\n20 END")
        assert program.lines[0].statements == [ClsStatement(10)]
        assert program.lines[1].statements == [EndStatement(20)]

    @pytest.mark.parametrize("source", ["10 CLS 5", "10 END NOW"])
    def test_trailing_token(self, source):
        with pytest.raises(BasicSyntaxError):
            parse_source(source)


class TestGoto:
    def test_goto(self):
        program = parse_source("10 GOTO 99")
        assert program.lines[0].statements == [GotoStatement(99, 10)]

    @pytest.mark.parametrize("source", ["10 GOTO", "10 GOTO TEN", "10 GOTO 20 30", '10 GOTO "20"'])
    def test_bad_target(self, source):
        with pytest.raises(BasicSyntaxError):
            parse_source(source)

    def test_target_is_not_checked_while_parsing(self):
        assert parse_source("10 GOTO 500").line_numbers() == [10]


class TestDeclarations:
    def test_number_and_string(self):
        variables = VariableStore()
        parse_source('10 X%=5\n20 Y$=HELLO\n30 Z$="A B"', variables)
        assert variables.as_dict() == {"X": 5, "Y": "HELLO", "Z": "A B"}

    def test_later_declaration_overwrites_regardless_of_type(self):
        variables = VariableStore()
        parse_source("10 X%=5\n20 X$=FIVE", variables)
        assert variables.get("X") == "FIVE"

    def test_decimal_number(self):
        variables = VariableStore()
        parse_source("10 X%=2.5", variables)
        assert variables.get("X") == 2.5

    def test_non_numeric_value_with_number_sigil(self):
        with pytest.raises(VariableTypeError):
            parse_source("10 X%=ABC")

    def test_numeric_value_with_string_sigil(self):
        with pytest.raises(VariableTypeError):
            parse_source("10 Y$=5")

    def test_empty_number_value(self):
        with pytest.raises(VariableTypeError):
            parse_source("10 X%=")

    def test_empty_string_value(self):
        variables = VariableStore()
        parse_source("10 Y$=", variables)
        assert variables.get("Y") == ""

    def test_malformed_declaration(self):
        with pytest.raises(BasicSyntaxError):
            parse_source("10 X%5")

    def test_declarations_take_effect_while_parsing(self):
        variables = VariableStore()
        parser = Parser(lex("10 X%=1\n20 PRINT X"), variables)
        parser.parse_line(parser.next_line())
        assert variables.get("X") == 1


class TestIf:
    def test_single_line_target(self):
        program = parse_source("10 X%=5\n20 IF X=5 THEN 30\n30 END")
        assert program.lines[1].statements == [IfStatement(Condition("X", "=", "5"), 30, 20)]

    @pytest.mark.parametrize("text,op", [("A<B", "<"), ("A>B", ">"), ("A==B", "="), ("A<=B", "="), ("A>=B", "="), ("A<>B", "<")])
    def test_comparators(self, text, op):
        program = parse_source(f"10 IF {text} THEN 10")
        assert program.lines[0].statements[0].condition == Condition("A", op, "B")

    def test_equals_wins_over_order_in_compound_comparator(self):
        program = parse_source("10 IF X=<5 THEN 10")
        assert program.lines[0].statements[0].condition == Condition("X", "=", "5")

    def test_quoted_condition(self):
        program = parse_source('10 IF "A"="B" THEN 10')
        assert program.lines[0].statements[0].condition == Condition("A", "=", "B")

    @pytest.mark.parametrize(
        "source",
        [
            "10 IF X THEN 10",
            "10 IF 5 THEN 10",
            "10 IF",
            "10 IF X=5 30",
            "10 IF X=5",
            "10 IF X=5 ELSE 30",
            "10 IF X=5 THEN HERE",
            "10 IF X=5=6 THEN 10",
            "10 IF =5 THEN 10",
        ],
    )
    def test_syntax_errors(self, source):
        with pytest.raises(BasicSyntaxError):
            parse_source(source)

    def test_block_absorbs_indented_lines(self):
        source = '10 X%=1\n20 IF X=1 THEN\n30  PRINT "A"\n40  GOTO 60\n50 END\n60 END'
        program = parse_source(source)

        assert program.line_numbers() == [10, 20, 50, 60]
        statement = program.lines[1].statements[0]
        assert statement.is_block
        assert statement.then == [
            LineRecord(30, [PrintStatement(StringLiteral("A"), 30)]),
            LineRecord(40, [GotoStatement(60, 40)]),
        ]

    def test_block_declarations_happen_while_parsing(self):
        variables = VariableStore()
        parse_source("10 IF A=B THEN\n20  Z%=3\n30 END", variables)
        assert variables.get("Z") == 3

    def test_nested_block(self):
        source = "10 IF A=A THEN\n20  IF B=B THEN 40\n30  PRINT 1\n40 END"
        program = parse_source(source)
        block = program.lines[0].statements[0].then
        assert [record.number for record in block] == [20, 30]
        assert block[0].statements == [IfStatement(Condition("B", "=", "B"), 40, 20)]

    def test_empty_block(self):
        with pytest.raises(EmptyThenBlockError) as info:
            parse_source("10 IF A=B THEN\n20 END")
        assert info.value.line_number == 10

    def test_empty_block_at_end_of_source(self):
        with pytest.raises(EmptyThenBlockError):
            parse_source("10 IF A=B THEN")


class TestSemanticAnalyzer:
    def test_reports_missing_targets(self):
        program = parse_source("10 GOTO 99\n20 IF A=A THEN 77\n30 IF A=A THEN\n40  GOTO 10")
        warnings = SemanticAnalyzer(program).analyze()
        assert warnings == [
            "Line 10: jump target 99 does not exist",
            "Line 20: jump target 77 does not exist",
        ]

    def test_no_warnings(self):
        program = parse_source("10 GOTO 20\n20 END")
        assert SemanticAnalyzer(program).analyze() == []
