"""Shared fixtures for errortrap tests."""

from typing import Any

import pytest

from errortrap.trapping.interceptor import ErrorInterceptor
from errortrap.trapping.queue import ErrorQueue
from errortrap.trapping.reporting import ErrorReporting


class RecordingContext:
    """Test context that records every report it receives."""

    def __init__(self) -> None:
        self.errors: list[tuple[str, str, str | None, int | None]] = []
        self.asserts: list[tuple[Any, Any, str, bool]] = []

    def error(self, severity: str, message: str, file: str | None, line: int | None) -> None:
        self.errors.append((severity, message, file, line))

    def assert_(self, matcher: Any, actual: Any, message: str) -> bool:
        passed = bool(matcher.test(actual))
        self.asserts.append((matcher, actual, message, passed))
        return passed

    @property
    def passes(self) -> list[tuple[Any, Any, str, bool]]:
        return [a for a in self.asserts if a[3]]

    @property
    def failures(self) -> list[tuple[Any, Any, str, bool]]:
        return [a for a in self.asserts if not a[3]]

    @property
    def report_count(self) -> int:
        return len(self.errors) + len(self.asserts)


@pytest.fixture
def context() -> RecordingContext:
    """A fresh recording context."""
    return RecordingContext()


@pytest.fixture
def queue(context: RecordingContext) -> ErrorQueue:
    """An error queue bound to the recording context."""
    error_queue = ErrorQueue()
    error_queue.set_test_case(context)
    return error_queue


@pytest.fixture
def reporting() -> ErrorReporting:
    """A private error-reporting registry (the shared one stays untouched)."""
    return ErrorReporting()


@pytest.fixture
def interceptor(queue: ErrorQueue, reporting: ErrorReporting) -> ErrorInterceptor:
    """An interceptor feeding the bound queue."""
    return ErrorInterceptor(queue, reporting)


@pytest.fixture
def context_factory() -> type[RecordingContext]:
    """The recording context class, for tests that need more than one."""
    return RecordingContext
