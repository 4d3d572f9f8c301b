"""
Process error-reporting registry.

Holds the stack of installed error handlers, the reporting mask deciding
which severities are eligible for capture, and the log_errors switch. Code
under test raises errors through trigger_error(); the handler on top of the
stack decides what happens to them.
"""

import logging
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from errortrap.trapping.severity import DEFAULT_TABLE, Severity, SeverityTable

logger = logging.getLogger(__name__)

# (severity, message, file, line) -> handled
ErrorHandler = Callable[[int, str, str | None, int | None], bool]

_UNSET = object()


class HandlerStackError(RuntimeError):
    """Raised when handler install/restore calls are not properly nested."""


class ErrorReporting:
    """
    Handler stack plus reporting configuration.

    Handlers are installed and restored in strict LIFO order. The preferred
    way to install one is the installed() context manager, which restores the
    previous handler on every exit path.

    Example:
        >>> reporting = ErrorReporting()
        >>> with reporting.installed(my_handler):
        ...     reporting.trigger_error(Severity.E_USER_NOTICE, "hello")
    """

    def __init__(
        self,
        mask: int = Severity.E_ALL,
        log_errors: bool = False,
        table: SeverityTable | None = None,
    ) -> None:
        """
        Initialize the registry with an empty handler stack.

        Args:
            mask: Reporting mask; severities outside it are ignored.
            log_errors: Whether captured errors are also logged.
            table: Severity table used for log labels.
        """
        self.mask = int(mask)
        self.log_errors = log_errors
        self.table = table if table is not None else DEFAULT_TABLE
        self._handlers: list[ErrorHandler] = []

    @property
    def handler(self) -> ErrorHandler | None:
        """The active handler, or None when nothing is installed."""
        return self._handlers[-1] if self._handlers else None

    @property
    def depth(self) -> int:
        """Number of installed handlers."""
        return len(self._handlers)

    def install(self, handler: ErrorHandler) -> ErrorHandler | None:
        """
        Push a handler on the stack.

        Returns:
            The handler that was active before, for a later restore().
        """
        previous = self.handler
        self._handlers.append(handler)
        return previous

    def restore(self, previous: object = _UNSET) -> None:
        """
        Pop the active handler.

        Args:
            previous: If given, the handler expected to be active after the
                pop (what install() returned).

        Raises:
            HandlerStackError: If the stack is empty or the handler that
                becomes active is not the expected one.
        """
        if not self._handlers:
            raise HandlerStackError("No error handler installed")
        self._handlers.pop()
        if previous is not _UNSET and self.handler is not previous:
            raise HandlerStackError("Error handlers restored out of order")

    @contextmanager
    def installed(self, handler: ErrorHandler) -> Iterator[ErrorHandler | None]:
        """Install a handler for the duration of a with-block."""
        previous = self.install(handler)
        try:
            yield previous
        finally:
            self.restore(previous)

    def is_reported(self, severity: int) -> bool:
        """Check whether a severity falls inside the reporting mask."""
        return bool(int(severity) & self.mask)

    def trigger_error(
        self,
        severity: int,
        message: str,
        file: str | None = None,
        line: int | None = None,
        *,
        stacklevel: int = 1,
    ) -> bool:
        """
        Raise an error through the active handler.

        File and line default to the caller's location (stacklevel=1 is the
        direct caller, like warnings.warn).

        Returns:
            True if a handler took care of the error.
        """
        if file is None or line is None:
            frame = sys._getframe(stacklevel)
            file = file if file is not None else frame.f_code.co_filename
            line = line if line is not None else frame.f_lineno

        handler = self.handler
        if handler is not None and handler(int(severity), message, file, line):
            return True

        self._default_handling(int(severity), message, file, line)
        return False

    def _default_handling(
        self, severity: int, message: str, file: str | None, line: int | None
    ) -> None:
        """Log errors nobody handled, if they are within the mask."""
        if not self.is_reported(severity):
            return
        label = self.table.name_of(severity) if self.table.is_valid(severity) else str(severity)
        logger.warning("%s: %s in %s on line %s", label, message, file, line)

    def __repr__(self) -> str:
        return (
            f"ErrorReporting(mask={self.mask}, log_errors={self.log_errors}, "
            f"handlers={len(self._handlers)})"
        )


# Registry shared by code under test and the interceptor by default
error_reporting = ErrorReporting()


def trigger_error(
    message: str,
    severity: int = Severity.E_USER_NOTICE,
    *,
    reporting: ErrorReporting | None = None,
) -> bool:
    """
    Raise a user-level error from code under test.

    Example:
        >>> trigger_error("Cache miss for key 'user:42'", Severity.E_USER_WARNING)
    """
    registry = reporting if reporting is not None else error_reporting
    # stacklevel 2: skip this wrapper so the location is the caller's
    return registry.trigger_error(severity, message, stacklevel=2)
