"""Exceptions raised by the fixture lifecycle and instrumentation."""


class PreconditionError(RuntimeError):
    """Raised when a fixture operation is used out of order.

    These signal a defect in the suite definition (mounting before setup,
    observing a method that does not exist) and are never retried.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: {reason}")


class TeardownError(RuntimeError):
    """Raised after teardown finished when one of its steps failed.

    Every teardown step still ran; ``failures`` lists each step name with
    the exception it raised and ``__cause__`` is the first of them.
    """

    def __init__(self, case_id: str, failures: list[tuple[str, BaseException]]) -> None:
        self.case_id = case_id
        self.failures = failures
        steps = ", ".join(f"{step} ({type(exc).__name__}: {exc})" for step, exc in failures)
        super().__init__(f"Teardown of {case_id} failed in: {steps}")
