"""Route files to destinations with a compiled `--to` expression.

The expression is compiled once when the Router is created; compile errors
surface there, before any file is looked at. Each file then gets a fresh
context and one evaluation, whose result must be a String.

A failed evaluation never falls back to a default destination. Under the
default ABORT policy it stops the run; under SKIP the file is left out and
the failure is reported.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Sequence

from tdlr.files import CollectedFile
from tdlr.routing.context import FileContext, TimestampSource
from tdlr.routing.expressions import (
    CompiledExpression,
    EvaluationContext,
    EvaluationError,
    ExpressionTypeError,
    FunctionRegistry,
    Kind,
    RegexEngine,
    Value,
    compile_expression,
    kind_of,
)

logger = logging.getLogger(__name__)

# Saved Messages
DEFAULT_DESTINATION = "me"


class ErrorPolicy(Enum):
    """What a per-file routing failure does to the run."""

    ABORT = "abort"
    SKIP = "skip"


class RoutingError(Exception):
    """Routing failed for a file under the ABORT policy."""

    def __init__(self, path: Path, error: Exception):
        self.path = path
        self.error = error
        super().__init__(f"Cannot route {path}: {error}")


def route(
    compiled: CompiledExpression, context: EvaluationContext | Mapping[str, Value]
) -> str:
    """Evaluate a routing expression and return the destination string.

    Raises:
        ExpressionTypeError: If the expression produced a Number or Bool
        EvaluationError: If evaluation failed
    """
    value = compiled.evaluate(context)
    kind = kind_of(value)
    if kind is not Kind.STRING:
        raise ExpressionTypeError(
            "result",
            None,
            Kind.STRING.value,
            kind.value,
            message=(
                f"Routing expression must produce a String, got {kind.value}; "
                "use str::from(...) to convert"
            ),
        )
    return value


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of routing one file: a destination or an error."""

    path: Path
    index: int
    destination: str | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RoutingPlan:
    decisions: list[RouteDecision] = field(default_factory=list)

    @property
    def routed(self) -> list[RouteDecision]:
        return [d for d in self.decisions if d.ok]

    @property
    def skipped(self) -> list[RouteDecision]:
        return [d for d in self.decisions if not d.ok]

    def destinations(self) -> dict[str, list[Path]]:
        """Routed files grouped by unique destination, in first-seen order."""
        grouped: dict[str, list[Path]] = {}
        for decision in self.routed:
            grouped.setdefault(decision.destination, []).append(decision.path)
        return grouped


class Router:
    """Resolves a destination for each file of a run.

    Usage:
        router = Router('if(is_video, "@videos", "me")')
        plan = router.plan(collect_files(["./out"], FileFilter()).files)
    """

    def __init__(
        self,
        expression: str | None = None,
        chat: str | None = None,
        on_error: ErrorPolicy = ErrorPolicy.ABORT,
        timestamp_source: TimestampSource = TimestampSource.MODIFIED,
        registry: FunctionRegistry | None = None,
        regex_engine: RegexEngine | None = None,
    ):
        if expression is not None and chat is not None:
            raise ValueError("A routing expression and a fixed chat are mutually exclusive")
        self.compiled = (
            compile_expression(expression, registry, regex_engine)
            if expression is not None
            else None
        )
        self.chat = chat or DEFAULT_DESTINATION
        self.on_error = on_error
        self.timestamp_source = timestamp_source

    def resolve(self, file_context: FileContext) -> str:
        """Destination for one file."""
        if self.compiled is None:
            return self.chat
        return route(self.compiled, file_context.to_context())

    def plan(self, files: Sequence[CollectedFile], workers: int = 1) -> RoutingPlan:
        """Route every file.

        Evaluations are independent, so with workers > 1 they run on a
        thread pool sharing the compiled expression. Decisions keep the
        input order either way.

        Raises:
            RoutingError: On the first failure when the policy is ABORT
        """
        total = len(files)
        jobs = [(index, file) for index, file in enumerate(files)]
        plan = RoutingPlan()

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                decisions = list(pool.map(lambda job: self._decide(*job, total), jobs))
        else:
            decisions = (self._decide(index, file, total) for index, file in jobs)

        for decision in decisions:
            if not decision.ok:
                if self.on_error is ErrorPolicy.ABORT:
                    raise RoutingError(decision.path, decision.error)
                logger.warning("Skipping %s: %s", decision.path, decision.error)
            plan.decisions.append(decision)

        return plan

    def _decide(self, index: int, file: CollectedFile, total: int) -> RouteDecision:
        try:
            file_context = FileContext.from_path(
                file.path,
                index,
                total,
                root=file.root,
                timestamp_source=self.timestamp_source,
            )
            destination = self.resolve(file_context)
        except (EvaluationError, OSError) as e:
            return RouteDecision(file.path, index, error=e)
        return RouteDecision(file.path, index, destination=destination)
