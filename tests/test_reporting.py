"""
Tests for errortrap.trapping.reporting module.

Tests cover the handler stack, scoped installation, trigger_error and the
default handling of errors nobody handled.
"""

import logging

import pytest

from errortrap.trapping.reporting import (
    ErrorReporting,
    HandlerStackError,
    error_reporting,
    trigger_error,
)
from errortrap.trapping.severity import Severity


def _collecting_handler(calls: list, handled: bool = True):
    def handler(severity, message, file, line):
        calls.append((severity, message, file, line))
        return handled

    return handler


# =============================================================================
# Handler Stack Tests
# =============================================================================


class TestHandlerStack:
    """Tests for install/restore."""

    def test_starts_empty(self, reporting: ErrorReporting) -> None:
        """No handler is installed initially."""
        assert reporting.handler is None
        assert reporting.depth == 0

    def test_install_returns_previous(self, reporting: ErrorReporting) -> None:
        """install() returns the handler it displaced."""
        first = _collecting_handler([])
        second = _collecting_handler([])
        assert reporting.install(first) is None
        assert reporting.install(second) is first
        assert reporting.handler is second

    def test_restore_pops(self, reporting: ErrorReporting) -> None:
        """restore() reinstates the previous handler."""
        first = _collecting_handler([])
        previous = reporting.install(first)
        reporting.restore(previous)
        assert reporting.handler is None

    def test_restore_empty_stack_raises(self, reporting: ErrorReporting) -> None:
        """Restoring with nothing installed is an error."""
        with pytest.raises(HandlerStackError):
            reporting.restore()

    def test_restore_out_of_order_raises(self, reporting: ErrorReporting) -> None:
        """restore() checks the expected previous handler."""
        first = _collecting_handler([])
        second = _collecting_handler([])
        reporting.install(first)
        reporting.install(second)
        with pytest.raises(HandlerStackError):
            reporting.restore(None)

    def test_installed_restores_on_exception(self, reporting: ErrorReporting) -> None:
        """The context manager restores even when the block raises."""
        outer = _collecting_handler([])
        reporting.install(outer)
        with pytest.raises(ValueError):
            with reporting.installed(_collecting_handler([])):
                raise ValueError("boom")
        assert reporting.handler is outer

    def test_nested_installation(self, reporting: ErrorReporting) -> None:
        """Nested blocks restore in LIFO order."""
        outer = _collecting_handler([])
        inner = _collecting_handler([])
        with reporting.installed(outer):
            with reporting.installed(inner) as previous:
                assert previous is outer
                assert reporting.handler is inner
            assert reporting.handler is outer
        assert reporting.handler is None


# =============================================================================
# trigger_error Tests
# =============================================================================


class TestTriggerError:
    """Tests for raising errors through the registry."""

    def test_calls_active_handler(self, reporting: ErrorReporting) -> None:
        """The top handler receives severity, message, file and line."""
        calls: list = []
        with reporting.installed(_collecting_handler(calls)):
            handled = reporting.trigger_error(Severity.E_USER_WARNING, "disk low", "app.py", 7)
        assert handled is True
        assert calls == [(512, "disk low", "app.py", 7)]

    def test_location_defaults_to_caller(self, reporting: ErrorReporting) -> None:
        """Without file/line the caller's location is used."""
        calls: list = []
        with reporting.installed(_collecting_handler(calls)):
            reporting.trigger_error(Severity.E_USER_NOTICE, "here")
        _, _, file, line = calls[0]
        assert file == __file__
        assert isinstance(line, int) and line > 0

    def test_module_shortcut_uses_caller_location(self, reporting: ErrorReporting) -> None:
        """trigger_error() reports the location of its own caller."""
        calls: list = []
        with reporting.installed(_collecting_handler(calls)):
            trigger_error("from caller", Severity.E_USER_ERROR, reporting=reporting)
        severity, message, file, _ = calls[0]
        assert severity == Severity.E_USER_ERROR
        assert message == "from caller"
        assert file == __file__

    def test_module_shortcut_defaults_to_user_notice(self, reporting: ErrorReporting) -> None:
        """The default severity is E_USER_NOTICE."""
        calls: list = []
        with reporting.installed(_collecting_handler(calls)):
            trigger_error("note", reporting=reporting)
        assert calls[0][0] == Severity.E_USER_NOTICE

    def test_default_handling_logs(
        self, reporting: ErrorReporting, caplog: pytest.LogCaptureFixture
    ) -> None:
        """With no handler the error is logged."""
        with caplog.at_level(logging.WARNING, logger="errortrap.trapping.reporting"):
            handled = reporting.trigger_error(Severity.E_WARNING, "unhandled", "x.py", 3)
        assert handled is False
        assert "E_WARNING: unhandled in x.py on line 3" in caplog.text

    def test_default_handling_after_handler_declines(
        self, reporting: ErrorReporting, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A handler returning False falls through to default handling."""
        calls: list = []
        with caplog.at_level(logging.WARNING, logger="errortrap.trapping.reporting"):
            with reporting.installed(_collecting_handler(calls, handled=False)):
                handled = reporting.trigger_error(Severity.E_NOTICE, "declined", "y.py", 9)
        assert handled is False
        assert len(calls) == 1
        assert "E_NOTICE: declined in y.py on line 9" in caplog.text

    def test_default_handling_respects_mask(self, caplog: pytest.LogCaptureFixture) -> None:
        """Masked-out errors are not logged by default handling."""
        reporting = ErrorReporting(mask=Severity.E_ERROR)
        with caplog.at_level(logging.WARNING, logger="errortrap.trapping.reporting"):
            reporting.trigger_error(Severity.E_NOTICE, "quiet", "z.py", 1)
        assert caplog.text == ""

    def test_is_reported(self) -> None:
        """is_reported intersects with the mask."""
        reporting = ErrorReporting(mask=Severity.E_WARNING | Severity.E_NOTICE)
        assert reporting.is_reported(Severity.E_NOTICE)
        assert not reporting.is_reported(Severity.E_USER_NOTICE)


class TestSharedRegistry:
    """Tests for the shared registry."""

    def test_shared_registry_defaults(self) -> None:
        """The shared registry reports everything and does not log."""
        assert error_reporting.mask == Severity.E_ALL
        assert error_reporting.log_errors is False
        assert error_reporting.handler is None
