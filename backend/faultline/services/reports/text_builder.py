from __future__ import annotations

"""
Plain-text report generation for diagnostic events.

This module is deliberately pure and side-effect free: it takes a
DiagnosticEvent and returns a string. It is the default renderer for
terminals and log files.
"""

import html
from typing import List

from faultline.schemas import DiagnosticEvent, FrameRecord, SourceWindow

MAX_VALUE_LENGTH = 100


def format_value(value: object) -> str:
    """Safely format an argument value, truncating long representations."""
    try:
        text = repr(value)
    except Exception as exc:  # noqa: BLE001
        return f"<unrepresentable {type(value).__name__}: {exc!r}>"
    if len(text) > MAX_VALUE_LENGTH:
        return text[:MAX_VALUE_LENGTH] + "..."
    return text


def format_call(frame: FrameRecord) -> str:
    if frame.args is None:
        return frame.function
    args = ", ".join(f"{key}={format_value(value)}" for key, value in frame.args.items())
    return f"{frame.function}({args})"


def _format_location(file: str | None, line: int | None) -> str:
    if not file:
        return "-"
    if line is None:
        return file
    return f"{file}:{line}"


def _source_lines(source: SourceWindow, indent: str) -> List[str]:
    lines: list[str] = []
    for row in source.lines:
        marker = ">" if row.highlighted else " "
        # Source text is escaped for markup; undo it for plain text.
        lines.append(f"{indent}{marker} {row.label} | {html.unescape(row.text)}")
    return lines


def build_text_report(event: DiagnosticEvent) -> str:
    lines: list[str] = []

    lines.append(f"{event.type_label} [ {event.code} ]: {event.message}")
    lines.append(f"  at {_format_location(event.file, event.line)}")
    lines.append("")

    if not event.trace:
        lines.append("No trace frames were recorded.")
        return "\n".join(lines) + "\n"

    lines.append("Trace (most recent call first):")
    for idx, frame in enumerate(event.trace):
        lines.append(f"  #{idx} {format_call(frame)}")
        lines.append(f"     {_format_location(frame.file, frame.line)}")
        if frame.source is not None and frame.source.lines:
            lines.extend(_source_lines(frame.source, "     "))
        lines.append("")

    return "\n".join(lines)
