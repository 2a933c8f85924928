class BasicError(Exception):
    """Base class for every fatal interpreter error."""
    phase = None

    def __init__(self, message, line_number=None):
        if line_number is not None:
            super().__init__(f"Line {line_number}: {message}")
        else:
            super().__init__(message)
        self.message = message
        self.line_number = line_number


class ParseError(BasicError):
    phase = "parse"


class LineNumberError(ParseError):
    pass


class BasicSyntaxError(ParseError):
    pass


class UndefinedVariableError(ParseError):
    def __init__(self, name, line_number=None):
        super().__init__(f"Variable '{name}' cannot be accessed before initialization", line_number)
        self.name = name


class VariableTypeError(ParseError):
    pass


class EmptyThenBlockError(ParseError):
    pass


class ExecutionError(BasicError):
    phase = "execute"


class UndefinedLineError(ExecutionError):
    def __init__(self, target, line_number=None):
        super().__init__(f"Not possible to go to line {target}, not found", line_number)
        self.target = target


class InfiniteLoopError(ExecutionError):
    def __init__(self, limit, line_number=None):
        super().__init__(f"Infinite loop prevented after {limit} line executions", line_number)
        self.limit = limit


class EndOfExecution(Exception):
    """Raised by END. Not a failure: stops the run loop."""

    def __init__(self, line_number=None):
        super().__init__("End of execution")
        self.line_number = line_number
