"""
Severity codes and their canonical names.

The severity enumeration is closed: every code a captured error can carry is
listed in SEVERITY_ENTRIES. A few entries depend on a capability that not
every environment enables (recoverable errors, deprecations); the table is
resolved once when a SeverityTable is built, and looking up a code that is
unknown or disabled is a programming error.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntFlag

# Capability names for environment-conditional severities
RECOVERABLE_ERRORS = "recoverable_errors"
DEPRECATIONS = "deprecations"

ALL_CAPABILITIES: frozenset[str] = frozenset({RECOVERABLE_ERRORS, DEPRECATIONS})


class Severity(IntFlag):
    """Numeric severity codes carried by captured errors."""

    E_ERROR = 1
    E_WARNING = 2
    E_PARSE = 4
    E_NOTICE = 8
    E_CORE_ERROR = 16
    E_CORE_WARNING = 32
    E_COMPILE_ERROR = 64
    E_COMPILE_WARNING = 128
    E_USER_ERROR = 256
    E_USER_WARNING = 512
    E_USER_NOTICE = 1024
    E_STRICT = 2048
    E_RECOVERABLE_ERROR = 4096
    E_DEPRECATED = 8192
    E_USER_DEPRECATED = 16384
    E_ALL = 32767


# =============================================================================
# Custom Exceptions
# =============================================================================


class UnknownSeverityError(LookupError):
    """Raised when a severity code is not part of the active table."""

    def __init__(self, code: int | str) -> None:
        self.code = code
        super().__init__(f"Unknown severity code: {code!r}")


class InvalidSeverityMaskError(ValueError):
    """Raised when a configured reporting mask cannot be parsed."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid severity mask: {value!r}")


# =============================================================================
# Severity Table
# =============================================================================


@dataclass(frozen=True)
class SeverityEntry:
    """One row of the severity table."""

    code: Severity
    name: str
    capability: str | None = None

    def is_available(self, capabilities: frozenset[str]) -> bool:
        """Check whether this entry exists under the given capabilities."""
        return self.capability is None or self.capability in capabilities


SEVERITY_ENTRIES: tuple[SeverityEntry, ...] = (
    SeverityEntry(Severity.E_ERROR, "E_ERROR"),
    SeverityEntry(Severity.E_WARNING, "E_WARNING"),
    SeverityEntry(Severity.E_PARSE, "E_PARSE"),
    SeverityEntry(Severity.E_NOTICE, "E_NOTICE"),
    SeverityEntry(Severity.E_CORE_ERROR, "E_CORE_ERROR"),
    SeverityEntry(Severity.E_CORE_WARNING, "E_CORE_WARNING"),
    SeverityEntry(Severity.E_COMPILE_ERROR, "E_COMPILE_ERROR"),
    SeverityEntry(Severity.E_COMPILE_WARNING, "E_COMPILE_WARNING"),
    SeverityEntry(Severity.E_USER_ERROR, "E_USER_ERROR"),
    SeverityEntry(Severity.E_USER_WARNING, "E_USER_WARNING"),
    SeverityEntry(Severity.E_USER_NOTICE, "E_USER_NOTICE"),
    SeverityEntry(Severity.E_STRICT, "E_STRICT"),
    SeverityEntry(Severity.E_ALL, "E_ALL"),
    SeverityEntry(Severity.E_RECOVERABLE_ERROR, "E_RECOVERABLE_ERROR", RECOVERABLE_ERRORS),
    SeverityEntry(Severity.E_DEPRECATED, "E_DEPRECATED", DEPRECATIONS),
    SeverityEntry(Severity.E_USER_DEPRECATED, "E_USER_DEPRECATED", DEPRECATIONS),
)


class SeverityTable:
    """
    Severity lookup resolved once for a set of enabled capabilities.

    Example:
        >>> table = SeverityTable()
        >>> table.name_of(Severity.E_WARNING)
        'E_WARNING'
        >>> SeverityTable(capabilities=[]).is_valid(Severity.E_DEPRECATED)
        False
    """

    def __init__(self, capabilities: Iterable[str] | None = None) -> None:
        """
        Build the table.

        Args:
            capabilities: Enabled capability names. None enables all of them.
        """
        self.capabilities = (
            ALL_CAPABILITIES if capabilities is None else frozenset(capabilities)
        )
        self._names: dict[int, str] = {
            int(entry.code): entry.name
            for entry in SEVERITY_ENTRIES
            if entry.is_available(self.capabilities)
        }

    def name_of(self, code: int) -> str:
        """
        Return the canonical name of a severity code.

        Raises:
            UnknownSeverityError: If the code is not in the active table.
        """
        try:
            return self._names[int(code)]
        except KeyError:
            raise UnknownSeverityError(int(code)) from None

    def is_valid(self, code: int) -> bool:
        """Check if a code is part of the active table."""
        return int(code) in self._names

    def entries(self) -> list[tuple[SeverityEntry, bool]]:
        """List every entry together with its availability flag."""
        return [(entry, entry.is_available(self.capabilities)) for entry in SEVERITY_ENTRIES]

    def code_of(self, name: str) -> Severity:
        """Look up a severity code by name (with or without the E_ prefix)."""
        key = name.strip().upper()
        if not key.startswith("E_"):
            key = f"E_{key}"
        for code, entry_name in self._names.items():
            if entry_name == key:
                return Severity(code)
        raise UnknownSeverityError(name)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"SeverityTable(capabilities={sorted(self.capabilities)})"


DEFAULT_TABLE = SeverityTable()


def name_of(code: int) -> str:
    """Canonical name of a severity code using the default table."""
    return DEFAULT_TABLE.name_of(code)


# =============================================================================
# Warning Categories
# =============================================================================

_WARNING_SEVERITIES: tuple[tuple[type[Warning], Severity], ...] = (
    (DeprecationWarning, Severity.E_DEPRECATED),
    (PendingDeprecationWarning, Severity.E_DEPRECATED),
    (FutureWarning, Severity.E_USER_DEPRECATED),
    (SyntaxWarning, Severity.E_COMPILE_WARNING),
    (ImportWarning, Severity.E_CORE_WARNING),
    (ResourceWarning, Severity.E_NOTICE),
    (UserWarning, Severity.E_USER_WARNING),
)


def severity_for_warning(
    category: type[Warning], table: SeverityTable | None = None
) -> Severity:
    """
    Map a Python warning category to a severity code.

    Subclasses map like their nearest listed base. Categories whose severity
    is disabled in the table fall back to E_WARNING.

    Args:
        category: The warning class passed to warnings.showwarning.
        table: Severity table to validate against (default table if None).

    Returns:
        The severity code used when the warning is captured.
    """
    if table is None:
        table = DEFAULT_TABLE
    for base, severity in _WARNING_SEVERITIES:
        if issubclass(category, base):
            return severity if table.is_valid(severity) else Severity.E_WARNING
    return Severity.E_WARNING


# =============================================================================
# Mask Parsing
# =============================================================================

_MASK_TOKEN = re.compile(r"^\s*(~)?\s*([A-Za-z_]+)\s*$")


def parse_severity_mask(value: object, table: SeverityTable | None = None) -> int:
    """
    Parse a configured reporting mask.

    Accepts an integer, a single severity name, or a list of names. Names
    prefixed with "~" are removed from the mask; a list made only of
    exclusions starts from E_ALL. An empty list is rejected.

    Example:
        >>> parse_severity_mask(["E_ALL", "~E_DEPRECATED"]) == 32767 & ~8192
        True

    Raises:
        InvalidSeverityMaskError: If the value cannot be parsed.
    """
    if table is None:
        table = DEFAULT_TABLE

    if isinstance(value, bool):
        raise InvalidSeverityMaskError(value)
    if isinstance(value, int):
        if value < 0 or value > Severity.E_ALL:
            raise InvalidSeverityMaskError(value)
        return value
    if isinstance(value, str):
        tokens: list[object] = [value]
    elif isinstance(value, list | tuple) and value:
        tokens = list(value)
    else:
        raise InvalidSeverityMaskError(value)

    included = 0
    excluded = 0
    has_inclusion = False
    for token in tokens:
        if isinstance(token, int) and not isinstance(token, bool):
            included |= token
            has_inclusion = True
            continue
        match = _MASK_TOKEN.match(str(token))
        if match is None:
            raise InvalidSeverityMaskError(value)
        try:
            code = int(table.code_of(match.group(2)))
        except UnknownSeverityError:
            raise InvalidSeverityMaskError(value) from None
        if match.group(1):
            excluded |= code
        else:
            included |= code
            has_inclusion = True

    if not has_inclusion:
        included = int(Severity.E_ALL)
    return included & ~excluded


__all__ = [
    "ALL_CAPABILITIES",
    "DEFAULT_TABLE",
    "DEPRECATIONS",
    "InvalidSeverityMaskError",
    "RECOVERABLE_ERRORS",
    "SEVERITY_ENTRIES",
    "Severity",
    "SeverityEntry",
    "SeverityTable",
    "UnknownSeverityError",
    "name_of",
    "parse_severity_mask",
    "severity_for_warning",
]
