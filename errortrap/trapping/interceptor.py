"""
Error interception for one test invocation.

ErrorInterceptor installs its hook on the error-reporting handler stack while
an action runs, bridges Python warnings into the same hook, and restores the
previous handler whatever way the action exits.
"""

import logging
import warnings
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from errortrap.trapping.noise import NoiseFilter
from errortrap.trapping.queue import ErrorQueue
from errortrap.trapping.reporting import ErrorReporting
from errortrap.trapping.severity import DEFAULT_TABLE, SeverityTable, severity_for_warning

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorInterceptor:
    """
    Routes errors raised during an action into an ErrorQueue.

    Example:
        >>> interceptor = ErrorInterceptor(queue, reporting)
        >>> interceptor.run(lambda: code_under_test())
    """

    def __init__(
        self,
        queue: ErrorQueue,
        reporting: ErrorReporting,
        noise_filter: NoiseFilter | None = None,
        table: SeverityTable | None = None,
    ) -> None:
        """
        Initialize the interceptor.

        Args:
            queue: Queue receiving genuine captured errors.
            reporting: Registry the hook is installed on.
            noise_filter: Filter for framework/environment noise.
            table: Severity table for log labels and warning mapping.
        """
        self.queue = queue
        self.reporting = reporting
        self.noise_filter = noise_filter if noise_filter is not None else NoiseFilter()
        self.table = table if table is not None else DEFAULT_TABLE
        # One bound method, so install/restore identity checks hold
        self._hook = self.hook

    def run(self, action: Callable[[], T]) -> T:
        """Run an action with the hook installed; the previous hook is always restored."""
        with self.intercepting():
            return action()

    @contextmanager
    def intercepting(self) -> Iterator["ErrorInterceptor"]:
        """Install the hook and the warnings bridge for a with-block."""
        with self.reporting.installed(self._hook), warnings.catch_warnings():
            warnings.simplefilter("always")
            warnings.showwarning = self._show_warning
            yield self

    def hook(
        self,
        severity: int,
        message: str,
        file: str | None = None,
        line: int | None = None,
    ) -> bool:
        """
        Handle one error fired at the reporting registry.

        Always returns True: the capture is authoritative and the registry
        must not apply its default handling.
        """
        severity = int(severity) & self.reporting.mask
        if not severity:
            return True

        # Errors raised while handling this one go to the previous handler
        self.reporting.restore()
        try:
            if self.noise_filter.is_genuine(message):
                self.dispatch(severity, message, file, line)
        finally:
            self.reporting.install(self._hook)
        return True

    def dispatch(self, severity: int, message: str, file: str | None, line: int | None) -> None:
        """Log (if enabled) and queue an error that passed filtering."""
        if self.reporting.log_errors:
            label = self.table.name_of(severity)
            logger.warning("%s: %s in %s on line %s", label, message, file, line)
        self.queue.add(severity, message, file, line)

    def _show_warning(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: Any = None,
        line: str | None = None,
    ) -> None:
        severity = severity_for_warning(category, self.table)
        self.reporting.trigger_error(severity, str(message), filename, lineno)
