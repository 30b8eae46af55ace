"""Evaluator for the routing expression DSL.

Walks the AST and computes the result against an immutable evaluation
context holding one file's variables. Evaluation is pure: it reads only the
context, the shared AST and the shared registry, and either returns a value
or raises a typed EvaluationError. No partial result is ever produced.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from tdlr.routing.expressions.builtins import IF_FUNCTION, default_registry
from tdlr.routing.expressions.errors import (
    ArityMismatch,
    DivisionByZero,
    EvaluationError,
    ExpressionTypeError,
    NumericOverflow,
    UndefinedFunction,
    UndefinedVariable,
)
from tdlr.routing.expressions.functions import FunctionRegistry
from tdlr.routing.expressions.parser import (
    ASTNode,
    BinaryOp,
    Call,
    Literal,
    UnaryOp,
    Variable,
)
from tdlr.routing.expressions.regex import PatternCache, PythonRegexEngine
from tdlr.routing.expressions.values import (
    CONSTANTS,
    Kind,
    Value,
    as_number,
    is_number,
    kind_name,
    kind_of,
    normalize,
    values_equal,
)


@dataclass(frozen=True)
class EvaluationContext:
    """Variables visible to one evaluation.

    Built fresh per file; the mapping is read-only and every value is
    checked to be a Number, String or Bool on construction. Numbers are
    stored as finite floats. The KB, MB and GB constants are always bound and
    take precedence over caller values.
    """

    variables: Mapping[str, Value]

    def __post_init__(self):
        frozen = {}
        for name, value in self.variables.items():
            try:
                frozen[name] = normalize(value)
            except ValueError as e:
                raise ValueError(f"Invalid value for variable '{name}': {e}") from e
        frozen.update(CONSTANTS)
        object.__setattr__(self, "variables", MappingProxyType(frozen))

    @classmethod
    def of(cls, context: "EvaluationContext | Mapping[str, Value]") -> "EvaluationContext":
        if isinstance(context, EvaluationContext):
            return context
        return cls(context)

    def lookup(self, name: str) -> Value:
        try:
            return self.variables[name]
        except KeyError:
            raise UndefinedVariable(name) from None

    def __contains__(self, name: str) -> bool:
        return name in self.variables


class Evaluator:
    """Evaluates expression AST against a context.

    Usage:
        ctx = EvaluationContext({"ext": "mp4", "size": 1024})
        evaluator = Evaluator(ctx)
        result = evaluator.evaluate(ast)
    """

    def __init__(
        self,
        context: EvaluationContext,
        registry: FunctionRegistry | None = None,
        patterns: PatternCache | None = None,
    ):
        self.context = context
        self.registry = registry if registry is not None else default_registry()
        self.patterns = patterns if patterns is not None else PatternCache(PythonRegexEngine())

    def evaluate(self, node: ASTNode) -> Value:
        """Evaluate an AST node and return the result."""
        method_name = f"_eval_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")

        return method(node)

    # -------------------------------------------------------------------------
    # Node type evaluators
    # -------------------------------------------------------------------------

    def _eval_literal(self, node: Literal) -> Value:
        return node.value

    def _eval_variable(self, node: Variable) -> Value:
        try:
            return self.context.lookup(node.name)
        except UndefinedVariable:
            raise UndefinedVariable(node.name, node.position) from None

    def _eval_binaryop(self, node: BinaryOp) -> Value:
        """Evaluate a binary operation."""
        op = node.operator

        # Short-circuit evaluation for logical operators
        if op == "&&":
            left = self._expect_bool(op, 0, self.evaluate(node.left), node)
            if not left:
                return False
            return self._expect_bool(op, 1, self.evaluate(node.right), node)

        if op == "||":
            left = self._expect_bool(op, 0, self.evaluate(node.left), node)
            if left:
                return True
            return self._expect_bool(op, 1, self.evaluate(node.right), node)

        # Evaluate both operands for other operators
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)

        # Equality works across kinds: differing kinds are simply unequal
        if op == "==":
            return values_equal(left, right)
        if op == "!=":
            return not values_equal(left, right)

        self._expect_number(op, 0, left, node)
        self._expect_number(op, 1, right, node)

        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        if op == ">=":
            return left >= right

        if op == "/" and right == 0:
            raise DivisionByZero(node.position)

        try:
            if op == "+":
                result = left + right
            elif op == "-":
                result = left - right
            elif op == "*":
                result = left * right
            elif op == "/":
                result = left / right
            else:
                raise EvaluationError(f"Unknown operator: {op}", node.position)
        except OverflowError:
            raise NumericOverflow(node.position) from None

        return self._finite(result, node)

    def _eval_unaryop(self, node: UnaryOp) -> Value:
        """Evaluate a unary operation."""
        operand = self.evaluate(node.operand)

        if node.operator == "!":
            return not self._expect_bool("!", 0, operand, node)

        if node.operator == "-":
            return self._finite(-self._expect_number("-", 0, operand, node), node)

        raise EvaluationError(f"Unknown unary operator: {node.operator}", node.position)

    def _eval_call(self, node: Call) -> Value:
        """Evaluate a function call."""
        func_name = node.name

        if func_name not in self.registry:
            raise UndefinedFunction(func_name, node.position)

        func_def = self.registry.get(func_name)

        if len(node.arguments) != func_def.arity:
            raise ArityMismatch(
                func_name, func_def.arity, len(node.arguments), node.position
            )

        if func_name == IF_FUNCTION:
            return self._eval_if(node)

        # Evaluate arguments left to right, checking each against its parameter
        args = []
        for index, (arg_node, param) in enumerate(zip(node.arguments, func_def.parameters)):
            value = self.evaluate(arg_node)
            if param.kind is not None and kind_of(value) is not param.kind:
                raise ExpressionTypeError(
                    func_name, index, param.kind.value, kind_name(value), arg_node.position
                )
            args.append(value)

        if func_def.implementation is None:
            raise EvaluationError(
                f"Function '{func_name}' has no implementation", node.position
            )

        try:
            if func_def.uses_regex:
                result = func_def.implementation(self.patterns, *args)
            else:
                result = func_def.implementation(*args)
        except OverflowError:
            raise NumericOverflow(node.position) from None

        # Number results are widened to finite doubles like every other Number
        if is_number(result):
            return self._finite(result, node)
        return result

    def _eval_if(self, node: Call) -> Value:
        """Evaluate if(cond, then, else); the untaken branch is never evaluated."""
        condition_node, then_node, else_node = node.arguments
        condition = self.evaluate(condition_node)
        if kind_of(condition) is not Kind.BOOL:
            raise ExpressionTypeError(
                IF_FUNCTION, 0, Kind.BOOL.value, kind_name(condition), condition_node.position
            )
        return self.evaluate(then_node if condition else else_node)

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _expect_bool(self, op: str, index: int, value: Any, node: ASTNode) -> bool:
        if not isinstance(value, bool):
            raise ExpressionTypeError(
                op, index, Kind.BOOL.value, kind_name(value), node.position
            )
        return value

    def _expect_number(self, op: str, index: int, value: Any, node: ASTNode) -> float:
        if not is_number(value):
            raise ExpressionTypeError(
                op, index, Kind.NUMBER.value, kind_name(value), node.position
            )
        return value

    def _finite(self, value: int | float, node: ASTNode) -> float:
        try:
            return as_number(value)
        except ValueError:
            raise NumericOverflow(node.position) from None
