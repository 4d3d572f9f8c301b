"""
Invocation of a single test method with error trapping.

The invocation is a fixed pipeline:

1. bind    - clear the error queue and bind it to the test
2. attempt - run set_up, the method and tear_down inside the interceptor
3. map     - feed a call-arity failure into the same path as captured errors
4. tally   - report leftovers, always, even if the method raised
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from errortrap.trapping.interceptor import ErrorInterceptor
from errortrap.trapping.queue import ErrorQueue, TestContext
from errortrap.trapping.severity import Severity


class OutcomeStatus(str, Enum):
    """How an attempted method call ended."""

    COMPLETED = "completed"
    ARITY_FAILURE = "arity_failure"


@dataclass(frozen=True)
class InvocationOutcome:
    """Result of attempting one test method call."""

    method: str
    status: OutcomeStatus
    value: Any = None
    message: str | None = None
    file: str | None = None
    line: int | None = None

    @property
    def is_fatal(self) -> bool:
        """Check if the call never reached the method body."""
        return self.status == OutcomeStatus.ARITY_FAILURE


def attempt_call(method_name: str, func: Callable[[], Any]) -> InvocationOutcome:
    """
    Call func() and classify the result.

    A TypeError raised by the call itself, before any frame of func was
    entered, is a wrong-number-of-arguments failure. TypeErrors raised from
    inside func propagate unchanged.
    """
    try:
        value = func()
    except TypeError as exc:
        traceback = exc.__traceback__
        if traceback is None or traceback.tb_next is not None:
            raise
        code = getattr(func, "__code__", None)
        return InvocationOutcome(
            method=method_name,
            status=OutcomeStatus.ARITY_FAILURE,
            message=str(exc),
            file=code.co_filename if code is not None else None,
            line=code.co_firstlineno if code is not None else None,
        )
    return InvocationOutcome(method=method_name, status=OutcomeStatus.COMPLETED, value=value)


class MethodDelegate(Protocol):
    """Runs one named method of a test."""

    def invoke(self, method_name: str) -> InvocationOutcome:
        """Run the method and report how the call ended."""
        ...


class MethodInvoker:
    """Default delegate: set_up(), the method, tear_down()."""

    def __init__(self, test_case: Any) -> None:
        self.test_case = test_case

    def invoke(self, method_name: str) -> InvocationOutcome:
        """Run set-up, the test method and tear-down in sequence."""
        set_up = getattr(self.test_case, "set_up", None)
        if set_up is not None:
            set_up()
        outcome = attempt_call(method_name, getattr(self.test_case, method_name))
        tear_down = getattr(self.test_case, "tear_down", None)
        if tear_down is not None:
            tear_down()
        return outcome


class ErrorTrappingInvoker:
    """
    Invokes test methods so that runtime errors become test reports.

    Example:
        >>> queue = ErrorQueue()
        >>> interceptor = ErrorInterceptor(queue, error_reporting)
        >>> invoker = ErrorTrappingInvoker(test, queue, interceptor)
        >>> outcome = invoker.invoke("test_parses_header")
    """

    def __init__(
        self,
        test_case: TestContext,
        queue: ErrorQueue,
        interceptor: ErrorInterceptor,
        delegate: MethodDelegate | None = None,
    ) -> None:
        """
        Initialize the invoker.

        Args:
            test_case: Test receiving reports; also the object whose
                methods are invoked by the default delegate.
            queue: Error queue rebound to test_case on every invocation.
            interceptor: Interceptor feeding the same queue.
            delegate: Runs the method (MethodInvoker by default).
        """
        self.test_case = test_case
        self.queue = queue
        self.interceptor = interceptor
        self.delegate = delegate if delegate is not None else MethodInvoker(test_case)

    def invoke(self, method_name: str) -> InvocationOutcome:
        """
        Run one test method through the pipeline.

        Exceptions escaping the method propagate after tally().
        """
        self._bind()
        try:
            outcome = self.interceptor.run(lambda: self.delegate.invoke(method_name))
            self._map_fatal(outcome)
        finally:
            self.queue.tally()
        return outcome

    def _bind(self) -> None:
        self.queue.clear()
        self.queue.set_test_case(self.test_case)

    def _map_fatal(self, outcome: InvocationOutcome) -> None:
        """Report a call that never ran like any other captured error."""
        if not outcome.is_fatal:
            return
        self.interceptor.dispatch(
            Severity.E_ERROR,
            outcome.message or "",
            outcome.file,
            outcome.line,
        )
