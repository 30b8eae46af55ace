"""Function registry for the routing expression DSL.

Functions are callable from expressions (e.g., `str::len(name) > 0`,
`if(is_video, "@videos", "me")`). Each function is registered with metadata
used for arity/type checking and for the `tdlr expr functions` listing.

A registry is built once at startup and never mutated afterwards, so it can
be shared by any number of concurrent evaluations.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable

from tdlr.routing.expressions.values import Kind


class FunctionCategory(Enum):
    """Categories for organizing functions in documentation."""

    STRING = "string"
    MATH = "math"
    LOGIC = "logic"


@dataclass(frozen=True)
class FunctionParameter:
    """Definition of a function parameter.

    Attributes:
        name: Parameter name
        kind: Required value kind, or None if any kind is accepted
        description: Human-readable description
    """

    name: str
    kind: Kind | None
    description: str

    @property
    def type_name(self) -> str:
        return self.kind.value if self.kind is not None else "Any"


@dataclass(frozen=True)
class FunctionDefinition:
    """Complete definition of an expression function.

    Attributes:
        name: Qualified name as used in expressions (e.g. "str::len")
        description: Human-readable description
        category: Category for documentation organization
        parameters: Parameter definitions; their count is the arity
        return_type: Kind of the return value, or None if it varies
        examples: Example expressions using this function
        implementation: The Python callable (None for `if`, which the
            evaluator handles itself so untaken branches stay unevaluated)
        uses_regex: If True, the implementation receives the PatternCache
            as its first argument
    """

    name: str
    description: str
    category: FunctionCategory
    parameters: tuple[FunctionParameter, ...]
    return_type: Kind | None
    examples: tuple[str, ...] = field(default_factory=tuple)
    implementation: Callable[..., Any] | None = None
    uses_regex: bool = False

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def signature(self) -> str:
        params = ", ".join(f"{p.name}: {p.type_name}" for p in self.parameters)
        returns = self.return_type.value if self.return_type is not None else "Any"
        return f"{self.name}({params}) -> {returns}"

    def to_dict(self) -> dict[str, Any]:
        """Export for documentation output."""
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.type_name,
                    "description": p.description,
                }
                for p in self.parameters
            ],
            "returnType": self.return_type.value if self.return_type else "Any",
            "examples": list(self.examples),
        }


class FunctionRegistry:
    """Immutable registry of expression functions keyed by qualified name.

    Example:
        registry = FunctionRegistry([FunctionDefinition(name="str::len", ...)])

        func = registry.get("str::len")
        result = func.implementation("hello")  # Returns 5
    """

    def __init__(self, definitions: Iterable[FunctionDefinition]):
        functions: dict[str, FunctionDefinition] = {}
        for func_def in definitions:
            if func_def.name in functions:
                raise ValueError(f"Duplicate function: {func_def.name}")
            functions[func_def.name] = func_def
        self._functions = MappingProxyType(functions)

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def get(self, name: str) -> FunctionDefinition:
        """Get a function definition by name.

        Raises:
            KeyError: If function is not registered
        """
        return self._functions[name]

    def list_all(self) -> list[FunctionDefinition]:
        """List all registered functions."""
        return list(self._functions.values())

    def list_by_category(self, category: FunctionCategory) -> list[FunctionDefinition]:
        """List functions in a specific category."""
        return [f for f in self._functions.values() if f.category == category]

    def export_documentation(self) -> dict[str, Any]:
        """Export the full registry, organized by category."""
        by_category: dict[str, list[dict[str, Any]]] = {}
        for func_def in self._functions.values():
            by_category.setdefault(func_def.category.value, []).append(func_def.to_dict())

        return {
            "functions": {name: f.to_dict() for name, f in self._functions.items()},
            "byCategory": by_category,
        }
