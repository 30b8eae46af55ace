"""Compile-once, evaluate-many API for routing expressions.

    compiled = compile_expression('if(is_video, "@videos", "me")')
    for context in contexts:
        destination = evaluate(compiled, context)

A CompiledExpression is immutable and holds no reference to any context, so
it can be shared across threads without locking.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

from tdlr.routing.expressions.builtins import default_registry
from tdlr.routing.expressions.errors import RegexCompileError
from tdlr.routing.expressions.evaluator import EvaluationContext, Evaluator
from tdlr.routing.expressions.functions import FunctionRegistry
from tdlr.routing.expressions.parser import ASTNode, Call, Literal, Variable, parse, walk
from tdlr.routing.expressions.regex import (
    PatternCache,
    PythonRegexEngine,
    RegexEngine,
    RegexPattern,
)
from tdlr.routing.expressions.values import Value

logger = logging.getLogger(__name__)

REGEX_FUNCTION = "str::regex_matches"


@dataclass(frozen=True)
class CompiledExpression:
    """A parsed expression plus everything precomputed for it.

    Attributes:
        source: The expression text as written
        ast: Root of the immutable syntax tree
        registry: Functions available to the expression
        patterns: Regex patterns compiled from string literals
    """

    source: str
    ast: ASTNode
    registry: FunctionRegistry
    patterns: PatternCache

    def variables(self) -> list[str]:
        """Names of all variables referenced, in first-use order."""
        return _unique(node.name for node in walk(self.ast) if isinstance(node, Variable))

    def functions(self) -> list[str]:
        """Names of all functions called, in first-use order."""
        return _unique(node.name for node in walk(self.ast) if isinstance(node, Call))

    def unknown_variables(self, known: Iterable[str]) -> list[str]:
        """Referenced variables that are not in `known`.

        Never called implicitly: a reference to an unknown variable is only
        an error if evaluation actually reaches it.
        """
        known_names = set(known)
        return [name for name in self.variables() if name not in known_names]

    def evaluate(self, context: EvaluationContext | Mapping[str, Value]) -> Value:
        evaluator = Evaluator(EvaluationContext.of(context), self.registry, self.patterns)
        return evaluator.evaluate(self.ast)


def compile_expression(
    source: str,
    registry: FunctionRegistry | None = None,
    regex_engine: RegexEngine | None = None,
) -> CompiledExpression:
    """Lex and parse an expression, precompiling its literal regex patterns.

    Raises:
        LexError: On an unrecognized character or unterminated string
        ParseError: On malformed syntax or an empty expression
        RegexCompileError: If a literal regex pattern is invalid
    """
    ast = parse(source)
    engine = regex_engine if regex_engine is not None else PythonRegexEngine()
    precompiled = _precompile_patterns(ast, engine)
    logger.debug(
        "Compiled expression %r (%d literal pattern(s))", source, len(precompiled)
    )
    return CompiledExpression(
        source=source,
        ast=ast,
        registry=registry if registry is not None else default_registry(),
        patterns=PatternCache(engine, precompiled),
    )


def evaluate(
    compiled: CompiledExpression, context: EvaluationContext | Mapping[str, Value]
) -> Value:
    """Evaluate a compiled expression against one context.

    Raises:
        EvaluationError: Any of UndefinedVariable, UndefinedFunction,
            ArityMismatch, ExpressionTypeError, DivisionByZero,
            RegexCompileError
    """
    return compiled.evaluate(context)


def _precompile_patterns(ast: ASTNode, engine: RegexEngine) -> dict[str, RegexPattern]:
    patterns: dict[str, RegexPattern] = {}
    for node in walk(ast):
        if not (isinstance(node, Call) and node.name == REGEX_FUNCTION):
            continue
        if len(node.arguments) != 2:
            continue
        pattern_node = node.arguments[1]
        if not (isinstance(pattern_node, Literal) and isinstance(pattern_node.value, str)):
            continue
        pattern = pattern_node.value
        if pattern in patterns:
            continue
        try:
            patterns[pattern] = engine.compile(pattern)
        except RegexCompileError as e:
            raise RegexCompileError(pattern, e.reason, pattern_node.position) from e
        logger.debug("Precompiled regex %r", pattern)
    return patterns


def _unique(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))
