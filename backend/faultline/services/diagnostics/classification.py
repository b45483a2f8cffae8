from __future__ import annotations

"""backend/faultline/services/diagnostics/classification.py

Severity codes and their human-readable classification.

This module owns the read-only lookup tables shared by every failure
report:

- Severity: numeric severity/category codes (combinable into a mask)
- ERROR_NAMES: display names for the codes that have one
- FATAL_ON_SHUTDOWN: codes the shutdown hook treats as fatal
- ENGINE_SEVERITIES: codes that cannot be handled live and are only
  recorded for the shutdown hook
- severity_for_warning: maps a ``warnings`` category to a Severity

The lookups are deterministic and never raise for unknown input.
"""

import enum
from typing import Optional


class Severity(enum.IntFlag):
    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384
    ALL = 32767


ERROR_NAMES: dict[int, str] = {
    Severity.ERROR: "Fatal Error",
    Severity.CORE_ERROR: "Fatal Core Error",
    Severity.USER_ERROR: "User Error",
    Severity.COMPILE_ERROR: "Compile Error",
    Severity.COMPILE_WARNING: "Compile Warning",
    Severity.PARSE: "Parse Error",
    Severity.WARNING: "Warning",
    Severity.CORE_WARNING: "Core Warning",
    Severity.USER_WARNING: "User Warning",
    Severity.STRICT: "Strict",
    Severity.NOTICE: "Notice",
    Severity.USER_NOTICE: "User Notice",
    Severity.RECOVERABLE_ERROR: "Recoverable Error",
    Severity.DEPRECATED: "Deprecated",
    Severity.USER_DEPRECATED: "User Deprecated",
}

FATAL_ON_SHUTDOWN: frozenset[int] = frozenset(
    {
        Severity.PARSE,
        Severity.ERROR,
        Severity.USER_ERROR,
        Severity.CORE_ERROR,
        Severity.COMPILE_ERROR,
    }
)

ENGINE_SEVERITIES: frozenset[int] = frozenset(
    {
        Severity.ERROR,
        Severity.PARSE,
        Severity.CORE_ERROR,
        Severity.CORE_WARNING,
        Severity.COMPILE_ERROR,
        Severity.COMPILE_WARNING,
    }
)

USER_SEVERITIES: frozenset[int] = frozenset(
    {
        Severity.USER_ERROR,
        Severity.USER_WARNING,
        Severity.USER_NOTICE,
        Severity.USER_DEPRECATED,
    }
)

# Matched along the category MRO, so subclasses inherit their parent's severity.
_WARNING_SEVERITIES: dict[type, Severity] = {
    DeprecationWarning: Severity.DEPRECATED,
    PendingDeprecationWarning: Severity.DEPRECATED,
    FutureWarning: Severity.USER_DEPRECATED,
    UserWarning: Severity.USER_WARNING,
    SyntaxWarning: Severity.STRICT,
    RuntimeWarning: Severity.WARNING,
    ResourceWarning: Severity.NOTICE,
    ImportWarning: Severity.NOTICE,
    UnicodeWarning: Severity.NOTICE,
    BytesWarning: Severity.NOTICE,
}


def classify(code: object) -> Optional[str]:
    """Return the display name for ``code``, or None when it has none."""
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    return ERROR_NAMES.get(code)


def is_fatal_on_shutdown(code: object) -> bool:
    return isinstance(code, int) and code in FATAL_ON_SHUTDOWN


def severity_for_warning(category: type) -> Severity:
    """Map a ``warnings`` category (or any class) to a Severity.

    The first class in the category's MRO with a known severity wins;
    anything else, including non-Warning classes, is a plain WARNING.
    """
    for klass in getattr(category, "__mro__", ()):
        severity = _WARNING_SEVERITIES.get(klass)
        if severity is not None:
            return severity
    return Severity.WARNING


def parse_severity_mask(value: object) -> int:
    """Parse a reporting mask from an int or ``"NAME|NAME"`` text.

    Raises:
        ValueError: for unknown severity names or unsupported types.
    """
    if isinstance(value, bool):
        raise ValueError("severity mask must be an int or names, not a bool")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        if text.lstrip("-").isdigit():
            return int(text)
        mask = 0
        for part in text.split("|"):
            name = part.strip().upper()
            if name not in Severity.__members__:
                raise ValueError(f"unknown severity name {part.strip()!r}")
            mask |= Severity[name]
        return int(mask)
    raise ValueError(f"unsupported severity mask {value!r}")
