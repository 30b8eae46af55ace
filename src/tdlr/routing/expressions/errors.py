"""Error taxonomy for the routing expression DSL.

Compile-time errors (LexError, ParseError, and RegexCompileError for literal
patterns) are raised once, before any file is routed. Everything deriving
from EvaluationError is raised per file while walking the AST.
"""


class ExpressionError(Exception):
    """Base class for every error raised by the expression engine.

    Attributes:
        message: Description without the position suffix
        position: Character offset into the expression source, or None
    """

    def __init__(self, message: str, position: int | None = None):
        self.message = message
        self.position = position
        if position is None:
            super().__init__(message)
        else:
            super().__init__(f"{message} at position {position}")


class LexError(ExpressionError):
    """Error during lexical analysis."""

    def __init__(self, message: str, position: int, line: int = 1, column: int = 1):
        self.line = line
        self.column = column
        super().__init__(message, position)


class EvaluationError(ExpressionError):
    """Error during expression evaluation."""
    pass


class UndefinedVariable(EvaluationError):
    def __init__(self, name: str, position: int | None = None):
        self.name = name
        super().__init__(f"Undefined variable '{name}'", position)


class UndefinedFunction(EvaluationError):
    def __init__(self, name: str, position: int | None = None):
        self.name = name
        super().__init__(f"Undefined function '{name}'", position)


class ArityMismatch(EvaluationError):
    def __init__(self, name: str, expected: int, got: int, position: int | None = None):
        self.name = name
        self.expected = expected
        self.got = got
        plural = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"Function '{name}' expects {expected} {plural}, got {got}", position
        )


class ExpressionTypeError(EvaluationError):
    """A value of the wrong kind reached an operator, function or the routing boundary.

    Attributes:
        name: Operator symbol, function name, or "result" for the routing boundary
        arg_index: 0-based argument/operand index, or None
        expected: Expected kind name(s), e.g. "Number"
        actual: Kind name of the offending value
    """

    def __init__(
        self,
        name: str,
        arg_index: int | None,
        expected: str,
        actual: str,
        position: int | None = None,
        message: str | None = None,
    ):
        self.name = name
        self.arg_index = arg_index
        self.expected = expected
        self.actual = actual
        if message is None:
            if arg_index is None:
                message = f"'{name}' expects {expected}, got {actual}"
            else:
                message = (
                    f"'{name}' argument {arg_index + 1} expects {expected}, got {actual}"
                )
        super().__init__(message, position)


class DivisionByZero(EvaluationError):
    def __init__(self, position: int | None = None):
        super().__init__("Division by zero", position)


class NumericOverflow(EvaluationError):
    """A Number result does not fit in a finite double."""

    def __init__(self, position: int | None = None):
        super().__init__("Numeric overflow", position)


class RegexCompileError(EvaluationError):
    """Invalid regular expression.

    Raised at compile time when the pattern is a string literal, otherwise
    when the call is evaluated.
    """

    def __init__(self, pattern: str, reason: str, position: int | None = None):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regex {pattern!r}: {reason}", position)
