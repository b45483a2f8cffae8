# backend/faultline/services/reports/__init__.py
from __future__ import annotations

"""
Reporting utilities for diagnostic events.

This package provides:
- a plain-text report builder (terminals, log files)
- an HTML report builder (browsers)

High-level helpers exposed:

- build_text_report(event) -> str
- build_html_report(event) -> str
- get_renderer(report_format) -> Callable[[DiagnosticEvent], str]
"""

from typing import Callable

from faultline.schemas import DiagnosticEvent

from .html_builder import build_html_report  # noqa: F401
from .text_builder import build_text_report  # noqa: F401

_RENDERERS: dict[str, Callable[[DiagnosticEvent], str]] = {
    "text": build_text_report,
    "html": build_html_report,
}


def get_renderer(report_format: str) -> Callable[[DiagnosticEvent], str]:
    try:
        return _RENDERERS[report_format]
    except KeyError:
        raise ValueError(f"Unknown report format {report_format!r}") from None
