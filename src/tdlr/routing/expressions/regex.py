"""Regular expression capability used by str::regex_matches.

The engine is injected so tests can substitute a deterministic fake.
Patterns given as string literals are compiled once, when the expression is
compiled, and shared read-only across every per-file evaluation.
"""

import re
from types import MappingProxyType
from typing import Any, Mapping, Protocol

from tdlr.routing.expressions.errors import RegexCompileError


class RegexPattern(Protocol):
    def search(self, string: str) -> Any: ...


class RegexEngine(Protocol):
    def compile(self, pattern: str) -> RegexPattern:
        """Compile a pattern, raising RegexCompileError if it is invalid."""
        ...


class PythonRegexEngine:
    """RegexEngine backed by the standard library `re` module."""

    def compile(self, pattern: str) -> RegexPattern:
        try:
            return re.compile(pattern)
        except re.error as e:
            raise RegexCompileError(pattern, str(e)) from e


class PatternCache:
    """Compiled patterns keyed by source text.

    Built once at expression-compile time and never mutated afterwards.
    Patterns that are not in the cache are compiled on every call.
    """

    def __init__(
        self,
        engine: RegexEngine,
        precompiled: Mapping[str, RegexPattern] | None = None,
    ):
        self.engine = engine
        self._patterns = MappingProxyType(dict(precompiled or {}))

    def __contains__(self, pattern: str) -> bool:
        return pattern in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def get(self, pattern: str) -> RegexPattern:
        compiled = self._patterns.get(pattern)
        if compiled is None:
            compiled = self.engine.compile(pattern)
        return compiled

    def matches(self, text: str, pattern: str) -> bool:
        """True if the pattern matches anywhere in text."""
        return self.get(pattern).search(text) is not None
