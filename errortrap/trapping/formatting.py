"""Percent-style message templates used by error reports."""

import re

_DIRECTIVE = re.compile(r"%%|%s")


def escape_percent(text: str) -> str:
    """Double every percent sign so the text survives interpolation."""
    return text.replace("%", "%%")


def interpolate(template: str, *values: object) -> str:
    """
    Fill "%s" directives in order and collapse "%%" to "%".

    Substituted values are inserted verbatim and never scanned again.
    Directives without a matching value render as empty strings; extra
    values are ignored.

    Example:
        >>> interpolate("saw %s at 100%%", "E_NOTICE")
        'saw E_NOTICE at 100%'
    """
    remaining = iter(values)

    def substitute(match: re.Match[str]) -> str:
        if match.group(0) == "%%":
            return "%"
        return str(next(remaining, ""))

    return _DIRECTIVE.sub(substitute, template)
