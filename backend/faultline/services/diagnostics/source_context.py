from __future__ import annotations

"""backend/faultline/services/diagnostics/source_context.py

Source context for trace frames.

Given a file and a line number, read a small window of lines around it
and return them as a SourceWindow: escaped for markup output, numbered,
and with the target line highlighted.

Frames frequently point at files that cannot be read (``<string>``,
``<frozen importlib._bootstrap>``, deleted files). That is a normal
outcome here, so those cases return None instead of raising.
"""

import html
from typing import Optional

from faultline.schemas import SourceLine, SourceWindow

DEFAULT_PADDING = 5


def extract_source(
    path: Optional[str],
    line_number: int,
    padding: int = DEFAULT_PADDING,
) -> Optional[SourceWindow]:
    """
    Return the lines ``[line_number - padding, line_number + padding]`` of
    ``path``, or None when the path is empty or cannot be read.

    The file is streamed and reading stops as soon as the window's last
    line has been passed, so large files are never loaded whole.
    """
    if not path:
        return None

    start = line_number - padding
    end = line_number + padding

    rows: list[tuple[int, str]] = []
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            for number, row in enumerate(handle, start=1):
                if number > end:
                    break
                if number >= start:
                    rows.append((number, html.escape(row.rstrip("\r\n"), quote=False)))
    except (OSError, ValueError):
        return None

    width = len(str(rows[-1][0])) if rows else 1
    return SourceWindow(
        path=path,
        target=line_number,
        lines=[
            SourceLine(
                number=number,
                text=text,
                highlighted=number == line_number,
                width=width,
            )
            for number, text in rows
        ],
    )
