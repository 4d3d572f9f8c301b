"""
Error queue: reconciles captured errors against declared expectations.

While a test method runs, every captured error is paired with the oldest
still-pending expectation (strict FIFO, one expectation per error). Errors
arriving with no expectation pending are reported as errors; expectations
still pending when the test ends are reported as failures by tally().
"""

import weakref
from collections import deque
from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

from errortrap.trapping.formatting import escape_percent, interpolate
from errortrap.trapping.severity import DEFAULT_TABLE, SeverityTable

# =============================================================================
# Collaborator Protocols
# =============================================================================


@runtime_checkable
class TestContext(Protocol):
    """
    The test currently running, as seen by the error queue.

    Both calls are fire-and-forget reports into the surrounding framework.
    """

    def error(self, severity: str, message: str, file: str | None, line: int | None) -> None:
        """Report an error nobody expected."""
        ...

    def assert_(self, matcher: Any, actual: str | Literal[False], message: str) -> Any:
        """Check a matcher against a captured message (False: nothing captured)."""
        ...


# =============================================================================
# Queue Entries
# =============================================================================


@dataclass(frozen=True)
class CapturedError:
    """One error as delivered by the capture hook."""

    severity: int
    message: str
    file: str | None = None
    line: int | None = None


@dataclass(frozen=True)
class Expectation:
    """A declared error expectation and its report template."""

    matcher: Any
    message: str = "%s"


class UnboundQueueError(RuntimeError):
    """Raised when the queue reports without a bound test context."""

    def __init__(self) -> None:
        super().__init__("Error queue is not bound to a running test")


# =============================================================================
# Error Queue
# =============================================================================


class ErrorQueue:
    """
    FIFO reconciliation of captured errors and expected errors for one test.

    The queue keeps only a weak reference to the test it reports to; the
    invocation layer owns the test. Call clear() before binding a new test.

    Example:
        >>> queue = ErrorQueue()
        >>> queue.set_test_case(test)
        >>> queue.expect_error(AnyErrorExpectation(), "%s")
        >>> queue.add(Severity.E_NOTICE, "Undefined index: id", "app.py", 12)
        >>> queue.tally()
    """

    def __init__(self, table: SeverityTable | None = None) -> None:
        """Start with both sequences empty and no test bound."""
        self.table = table if table is not None else DEFAULT_TABLE
        self._test: weakref.ReferenceType[Any] | None = None
        self._errors: deque[CapturedError] = deque()
        self._expectations: deque[Expectation] = deque()

    def clear(self) -> None:
        """Discard pending errors and expectations."""
        self._errors.clear()
        self._expectations.clear()

    def set_test_case(self, test: TestContext) -> None:
        """Bind the test that receives reports."""
        self._test = weakref.ref(test)

    @property
    def test_case(self) -> TestContext | None:
        """The bound test, or None if unbound or already collected."""
        return self._test() if self._test is not None else None

    @property
    def pending_expectations(self) -> int:
        """Number of expectations not yet consumed."""
        return len(self._expectations)

    def expect_error(self, matcher: Any, message: str = "%s") -> None:
        """
        Declare that an error is expected.

        If no error arrives before tally(), a failure is reported. If one
        does, the matcher decides between a pass and a failure.

        Args:
            matcher: Object with test()/test_message() judging the message.
            message: Report template; "%s" receives the error description.
        """
        self._expectations.append(Expectation(matcher, message))

    def add(self, severity: int, message: str, file: str | None, line: int | None) -> None:
        """
        Reconcile a captured error immediately.

        Percent signs are doubled so the message survives template
        interpolation further down the reporting chain.
        """
        content = escape_percent(message)
        self._test_latest_error(CapturedError(severity, content, file, line))

    def extract(self) -> CapturedError | None:
        """Pop the earliest buffered error, or None."""
        if self._errors:
            return self._errors.popleft()
        return None

    def tally(self) -> None:
        """
        Report whatever is left at the end of a test.

        Buffered errors are sent as errors; expectations nobody fulfilled
        become failures. Both sequences are empty afterwards, even if a
        report raises; the remaining expectations are still reported and the
        first exception is re-raised at the end.
        """
        # add() reconciles synchronously, so nothing is ever buffered here
        while (captured := self.extract()) is not None:
            self._context().error(
                self.table.name_of(captured.severity),
                captured.message,
                captured.file,
                captured.line,
            )
        pending = list(self._expectations)
        self._expectations.clear()
        first_failure: Exception | None = None
        for expectation in pending:
            try:
                self._context().assert_(
                    expectation.matcher,
                    False,
                    f"{expectation.message} -> Expected error not caught",
                )
            except Exception as exc:
                if first_failure is None:
                    first_failure = exc
        if first_failure is not None:
            raise first_failure

    def _test_latest_error(self, captured: CapturedError) -> None:
        """Pair the error with the oldest expectation, or report it."""
        severity_name = self.table.name_of(captured.severity)
        test = self._context()
        expectation = self._extract_expectation()

        if expectation is None:
            test.error(severity_name, captured.message, captured.file, captured.line)
            return

        description = (
            f"%s -> Error [{captured.message}] severity [{severity_name}] "
            f"in [{captured.file}] line [{captured.line}]"
        )
        test.assert_(
            expectation.matcher,
            captured.message,
            interpolate(expectation.message, description),
        )

    def _extract_expectation(self) -> Expectation | None:
        if self._expectations:
            return self._expectations.popleft()
        return None

    def _context(self) -> TestContext:
        test = self.test_case
        if test is None:
            raise UnboundQueueError()
        return test

    def __len__(self) -> int:
        return len(self._errors) + len(self._expectations)

    def __repr__(self) -> str:
        return (
            f"ErrorQueue(errors={len(self._errors)}, "
            f"expectations={len(self._expectations)})"
        )
