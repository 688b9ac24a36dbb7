"""
Cleanroom Testing Engine.

Per-case fixture contexts, call-through instrumentation, suite generation
and the drivers that run them.
"""

from cleanroom.testing.context import (
    ContextState,
    FixtureContext,
    FixtureLifecycle,
    begin_case,
)
from cleanroom.testing.driver import (
    LifecycleDriver,
    SequentialDriver,
    SuiteDefinition,
    SuitePlan,
    SuiteRecorder,
)
from cleanroom.testing.errors import PreconditionError, TeardownError
from cleanroom.testing.instrumentation import CallRecord, Instrumentation, Spy
from cleanroom.testing.models import CaseOutcome, CaseResult, RunReport
from cleanroom.testing.pytest_driver import PytestDriver
from cleanroom.testing.suites import FixtureSuite, generate

__all__ = [
    # Fixture contexts
    "ContextState",
    "FixtureContext",
    "FixtureLifecycle",
    "begin_case",
    # Instrumentation
    "CallRecord",
    "Instrumentation",
    "Spy",
    # Suites and drivers
    "FixtureSuite",
    "LifecycleDriver",
    "PytestDriver",
    "SequentialDriver",
    "SuiteDefinition",
    "SuitePlan",
    "SuiteRecorder",
    "generate",
    # Results
    "CaseOutcome",
    "CaseResult",
    "RunReport",
    # Errors
    "PreconditionError",
    "TeardownError",
]
