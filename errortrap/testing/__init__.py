"""
errortrap Testing.

Test cases, error expectations and outcome models built on the trapping
engine.
"""

from errortrap.testing.expectations import (
    AnyErrorExpectation,
    ContainsExpectation,
    EqualExpectation,
    ExpectationBase,
    ExpectationType,
    Matcher,
    PatternExpectation,
    coerce_to_expectation,
)
from errortrap.testing.models import MethodResult, Outcome, OutcomeKind
from errortrap.testing.test_case import TrappingTestCase

__all__ = [
    # Expectations
    "AnyErrorExpectation",
    "ContainsExpectation",
    "EqualExpectation",
    "ExpectationBase",
    "ExpectationType",
    "Matcher",
    "PatternExpectation",
    "coerce_to_expectation",
    # Outcome models
    "MethodResult",
    "Outcome",
    "OutcomeKind",
    # Test case
    "TrappingTestCase",
]
