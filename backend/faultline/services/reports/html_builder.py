from __future__ import annotations

"""
HTML report generation for diagnostic events.

Like the text builder this is a pure function of the event. Source lines
arrive already escaped; every other value is escaped here.
"""

from html import escape
from typing import List

from faultline.schemas import DiagnosticEvent, FrameRecord, SourceWindow
from faultline.services.reports.text_builder import format_value

_STYLE = """
body { font-family: sans-serif; margin: 2em; }
h1 { font-size: 1.3em; }
.location { color: #555; }
pre.source { background: #f6f6f6; padding: 0.5em; }
pre.source .number { color: #999; }
pre.source .highlight { background: #ffd; display: block; }
ol.trace > li { margin-bottom: 1em; }
"""


def _render_source(source: SourceWindow) -> str:
    rows: list[str] = []
    for row in source.lines:
        css = "line highlight" if row.highlighted else "line"
        rows.append(f'<span class="{css}"><span class="number">{row.label}</span> {row.text}</span>')
    return '<pre class="source">' + "\n".join(rows) + "</pre>"


def _render_args(frame: FrameRecord) -> str:
    if not frame.args:
        return ""
    items = "".join(
        f"<li><code>{escape(str(key))}</code> = <code>{escape(format_value(value))}</code></li>"
        for key, value in frame.args.items()
    )
    return f'<ul class="args">{items}</ul>'


def _render_location(file: str | None, line: int | None) -> str:
    if not file:
        return '<span class="location">-</span>'
    suffix = f" [ {line} ]" if line is not None else ""
    return f'<span class="location">{escape(file)}{suffix}</span>'


def build_html_report(event: DiagnosticEvent) -> str:
    parts: List[str] = []

    title = f"{event.type_label} [ {event.code} ]"
    parts.append("<!DOCTYPE html>")
    parts.append('<html><head><meta charset="utf-8">')
    parts.append(f"<title>{escape(title)}</title>")
    parts.append(f"<style>{_STYLE}</style></head><body>")
    parts.append(f"<h1>{escape(title)}: {escape(event.message)}</h1>")
    parts.append(f"<p>{_render_location(event.file, event.line)}</p>")

    if event.trace:
        parts.append('<ol class="trace" start="0">')
        for frame in event.trace:
            parts.append("<li>")
            parts.append(f"<p><code>{escape(frame.function)}</code> {_render_location(frame.file, frame.line)}</p>")
            parts.append(_render_args(frame))
            if frame.source is not None and frame.source.lines:
                parts.append(_render_source(frame.source))
            parts.append("</li>")
        parts.append("</ol>")
    else:
        parts.append("<p><em>No trace frames were recorded.</em></p>")

    parts.append("</body></html>")
    return "\n".join(p for p in parts if p)
