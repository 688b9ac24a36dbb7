"""
Lifecycle drivers - the runners that sequence hooks and cases.

A suite definition talks to a driver through four registrations:
``before_each``, ``after_each``, ``case`` and ``suite``. The driver owns the
ordering guarantee: for each case, a new FixtureContext, then every
before_each hook (outer suites first), the case body, and then every
after_each hook (inner suites first, last registered first), even when
something earlier failed.

SequentialDriver runs everything in-process and returns a RunReport.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from cleanroom.testing.context import FixtureContext, FixtureLifecycle, begin_case
from cleanroom.testing.models import CaseOutcome, CaseResult, RunReport

logger = logging.getLogger(__name__)

# Type alias for hooks and case bodies
Hook = Callable[[FixtureContext], object]


@runtime_checkable
class LifecycleDriver(Protocol):
    """What a suite definition may register on."""

    def before_each(self, fn: Hook) -> None: ...

    def after_each(self, fn: Hook) -> None: ...

    def case(self, name: str, fn: Hook) -> None: ...

    def suite(self, name: str, body: "SuiteDefinition") -> None: ...


SuiteDefinition = Callable[[LifecycleDriver], object]


@dataclass
class SuitePlan:
    """Hooks, cases and child suites collected from one suite body."""

    name: str
    parent: "SuitePlan | None" = None
    before: list[Hook] = field(default_factory=list)
    after: list[Hook] = field(default_factory=list)
    cases: list[tuple[str, Hook]] = field(default_factory=list)
    children: list["SuitePlan"] = field(default_factory=list)

    @property
    def path(self) -> str:
        names: list[str] = []
        plan: SuitePlan | None = self
        while plan is not None:
            if plan.name:
                names.append(plan.name)
            plan = plan.parent
        return " > ".join(reversed(names))

    def before_chain(self) -> list[Hook]:
        """before_each hooks that apply here, outermost first."""
        inherited = self.parent.before_chain() if self.parent is not None else []
        return inherited + self.before

    def after_chain(self) -> list[Hook]:
        """after_each hooks that apply here, in run order."""
        inherited = self.parent.after_chain() if self.parent is not None else []
        return list(reversed(self.after)) + inherited

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()

    def case_count(self) -> int:
        return sum(len(plan.cases) for plan in self.walk())


class SuiteRecorder:
    """Records registrations into SuitePlan trees.

    Calling ``suite`` runs the body immediately with this recorder as its
    driver, so nested registrations land on the nested plan.
    """

    def __init__(self) -> None:
        self.root = SuitePlan(name="")
        self._current = self.root

    def before_each(self, fn: Hook) -> None:
        self._current.before.append(fn)

    def after_each(self, fn: Hook) -> None:
        self._current.after.append(fn)

    def case(self, name: str, fn: Hook) -> None:
        if any(existing == name for existing, _ in self._current.cases):
            msg = f"Case '{name}' is already registered in suite '{self._current.path}'"
            raise ValueError(msg)
        self._current.cases.append((name, fn))

    def suite(self, name: str, body: SuiteDefinition) -> None:
        plan = SuitePlan(name=name, parent=self._current)
        self._current.children.append(plan)
        previous = self._current
        self._current = plan
        try:
            body(self)
        finally:
            self._current = previous


def run_hooks(hooks: list[Hook], ctx: FixtureContext) -> list[tuple[Hook, BaseException]]:
    """Run every hook, collecting failures instead of stopping at the first."""
    failures: list[tuple[Hook, BaseException]] = []
    for hook in hooks:
        try:
            hook(ctx)
        except Exception as e:
            failures.append((hook, e))
    return failures


def describe_error(exc: BaseException) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


class SequentialDriver(SuiteRecorder):
    """
    In-process lifecycle driver.

    Example:
        >>> driver = SequentialDriver(lifecycle)
        >>> generate(heavy_load_suite(lifecycle), 3, driver)
        >>> report = driver.run()
        >>> report.passed, report.leaked_views
        (3, 0)
    """

    def __init__(
        self,
        lifecycle: FixtureLifecycle | None = None,
        context_factory: Callable[[], FixtureContext] = begin_case,
    ) -> None:
        """
        Initialize the driver.

        Args:
            lifecycle: Used to count views left on its document after a run.
            context_factory: Produces the empty context for each case.
        """
        super().__init__()
        self.lifecycle = lifecycle
        self.context_factory = context_factory

    def run(self) -> RunReport:
        """Run every registered case in registration order."""
        report = RunReport()
        for plan in self.root.walk():
            for name, body in plan.cases:
                report.results.append(self._run_case(plan, name, body))

        if self.lifecycle is not None:
            report.leaked_views = len(self.lifecycle.leaked_views())
        report.finished_at = datetime.now(UTC)
        logger.info(
            "Ran %d cases: %d passed, %d failed, %d errors, %d leaked views",
            report.total,
            report.passed,
            report.failed,
            report.errors,
            report.leaked_views,
        )
        return report

    def _run_case(self, plan: SuitePlan, name: str, body: Hook) -> CaseResult:
        start = time.perf_counter()
        ctx = self.context_factory()
        failure: BaseException | None = None
        phase = ""

        for hook in plan.before_chain():
            try:
                hook(ctx)
            except Exception as e:
                failure, phase = e, "setup"
                break
        else:
            try:
                body(ctx)
            except Exception as e:
                failure, phase = e, "case"

        teardown_failures = run_hooks(plan.after_chain(), ctx)
        if failure is None and teardown_failures:
            failure, phase = teardown_failures[0][1], "teardown"
        case_id = ctx.case_id
        del ctx

        if failure is None:
            outcome = CaseOutcome.PASSED
        elif isinstance(failure, AssertionError) and phase != "teardown":
            outcome = CaseOutcome.FAILED
        else:
            outcome = CaseOutcome.ERROR
        if failure is not None:
            logger.debug("%s > %s %s in %s: %s", plan.path, name, outcome.value, phase, failure)

        return CaseResult(
            suite=plan.path,
            case=name,
            outcome=outcome,
            message=describe_error(failure) if failure is not None else "",
            phase=phase,
            case_id=case_id,
            duration_ms=(time.perf_counter() - start) * 1000,
        )

    def __repr__(self) -> str:
        return f"SequentialDriver({self.root.case_count()} cases)"
