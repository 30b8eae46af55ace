"""Expression DSL for tdlr routing.

This module provides:
- Lexer: Tokenizes expression strings
- Parser: Produces an immutable AST from tokens
- FunctionRegistry: Immutable table of built-in functions
- Evaluator: Evaluates the AST against one file's context
- compile_expression / evaluate: compile once, evaluate per file
"""

from tdlr.routing.expressions.builtins import build_default_registry, default_registry
from tdlr.routing.expressions.compiler import (
    CompiledExpression,
    compile_expression,
    evaluate,
)
from tdlr.routing.expressions.errors import (
    ArityMismatch,
    DivisionByZero,
    EvaluationError,
    ExpressionError,
    ExpressionTypeError,
    LexError,
    NumericOverflow,
    RegexCompileError,
    UndefinedFunction,
    UndefinedVariable,
)
from tdlr.routing.expressions.evaluator import EvaluationContext, Evaluator
from tdlr.routing.expressions.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    FunctionRegistry,
)
from tdlr.routing.expressions.lexer import Lexer, Token, TokenType, tokenize
from tdlr.routing.expressions.parser import (
    ASTNode,
    BinaryOp,
    Call,
    Literal,
    ParseError,
    Parser,
    UnaryOp,
    Variable,
    parse,
)
from tdlr.routing.expressions.regex import PatternCache, PythonRegexEngine, RegexEngine
from tdlr.routing.expressions.values import Kind, Value, kind_of, to_display_string

__all__ = [
    # Compiler
    "CompiledExpression",
    "compile_expression",
    "evaluate",
    # Errors
    "ArityMismatch",
    "DivisionByZero",
    "EvaluationError",
    "ExpressionError",
    "ExpressionTypeError",
    "LexError",
    "NumericOverflow",
    "ParseError",
    "RegexCompileError",
    "UndefinedFunction",
    "UndefinedVariable",
    # Evaluator
    "EvaluationContext",
    "Evaluator",
    # Functions
    "FunctionCategory",
    "FunctionDefinition",
    "FunctionParameter",
    "FunctionRegistry",
    "build_default_registry",
    "default_registry",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "ASTNode",
    "BinaryOp",
    "Call",
    "Literal",
    "Parser",
    "UnaryOp",
    "Variable",
    "parse",
    # Regex
    "PatternCache",
    "PythonRegexEngine",
    "RegexEngine",
    # Values
    "Kind",
    "Value",
    "kind_of",
    "to_display_string",
]
