"""
Noise filtering for captured errors.

Some messages are artifacts of the test framework itself or of the
environment it runs in. They are dropped before logging or queueing, so they
never show up as test failures.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class NoiseRule:
    """A named regex; a message matching it anywhere is noise."""

    name: str
    pattern: str
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def matches(self, message: str) -> bool:
        """Check whether the message is covered by this rule."""
        return self._compiled.search(message) is not None


DEFAULT_NOISE_RULES: tuple[NoiseRule, ...] = (
    # Raised by the framework's own introspection
    NoiseRule("framework", r"returned by reference"),
    NoiseRule("timezone", r"not safe to rely .* timezone settings"),
)


class NoiseFilter:
    """
    Predicate separating genuine errors from known noise.

    Example:
        >>> noise = NoiseFilter()
        >>> noise.is_genuine("Undefined variable: total")
        True
        >>> noise.is_genuine("Only variables should be returned by reference")
        False
    """

    def __init__(
        self,
        extra_rules: Iterable[NoiseRule] = (),
        include_defaults: bool = True,
    ) -> None:
        """
        Initialize the filter.

        Args:
            extra_rules: Rules added on top of the defaults.
            include_defaults: Keep DEFAULT_NOISE_RULES in the rule set.
        """
        base = DEFAULT_NOISE_RULES if include_defaults else ()
        self.rules: tuple[NoiseRule, ...] = (*base, *extra_rules)

    @classmethod
    def from_patterns(
        cls, patterns: Iterable[str], include_defaults: bool = True
    ) -> "NoiseFilter":
        """Build a filter from bare regex strings."""
        rules = [NoiseRule(f"custom-{index}", pattern) for index, pattern in enumerate(patterns)]
        return cls(rules, include_defaults=include_defaults)

    def is_genuine(self, message: str) -> bool:
        """True if no rule matches the message."""
        return not any(rule.matches(message) for rule in self.rules)

    def matching_rule(self, message: str) -> NoiseRule | None:
        """Return the first rule that suppresses the message, if any."""
        for rule in self.rules:
            if rule.matches(message):
                return rule
        return None

    def __repr__(self) -> str:
        return f"NoiseFilter({[rule.name for rule in self.rules]})"
