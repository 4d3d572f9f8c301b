"""
errortrap Trapping Engine.

Captures runtime errors raised while a test method runs and reconciles them
against declared error expectations.
"""

from errortrap.trapping.formatting import escape_percent, interpolate
from errortrap.trapping.interceptor import ErrorInterceptor
from errortrap.trapping.invoker import (
    ErrorTrappingInvoker,
    InvocationOutcome,
    MethodInvoker,
    OutcomeStatus,
    attempt_call,
)
from errortrap.trapping.noise import DEFAULT_NOISE_RULES, NoiseFilter, NoiseRule
from errortrap.trapping.queue import (
    CapturedError,
    ErrorQueue,
    Expectation,
    TestContext,
    UnboundQueueError,
)
from errortrap.trapping.reporting import (
    ErrorReporting,
    HandlerStackError,
    error_reporting,
    trigger_error,
)
from errortrap.trapping.severity import (
    InvalidSeverityMaskError,
    Severity,
    SeverityEntry,
    SeverityTable,
    UnknownSeverityError,
    name_of,
    parse_severity_mask,
    severity_for_warning,
)

__all__ = [
    # Severity
    "InvalidSeverityMaskError",
    "Severity",
    "SeverityEntry",
    "SeverityTable",
    "UnknownSeverityError",
    "name_of",
    "parse_severity_mask",
    "severity_for_warning",
    # Noise
    "DEFAULT_NOISE_RULES",
    "NoiseFilter",
    "NoiseRule",
    # Reporting registry
    "ErrorReporting",
    "HandlerStackError",
    "error_reporting",
    "trigger_error",
    # Queue
    "CapturedError",
    "ErrorQueue",
    "Expectation",
    "TestContext",
    "UnboundQueueError",
    "escape_percent",
    "interpolate",
    # Interception and invocation
    "ErrorInterceptor",
    "ErrorTrappingInvoker",
    "InvocationOutcome",
    "MethodInvoker",
    "OutcomeStatus",
    "attempt_call",
]
