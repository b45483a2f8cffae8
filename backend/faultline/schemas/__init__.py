# backend/faultline/schemas/__init__.py
from __future__ import annotations

"""
Pydantic schemas for the normalized diagnostic records.

This module is the contract between the diagnostics core and whatever
renders a report, and depends on nothing else in the package.

It is used by:
- services.diagnostics (which builds these records)
- services.reports (which renders them)
- integrations (which serve rendered reports)

All records are frozen: they are created once per failure and never
mutated afterwards.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OriginKind(str, Enum):
    THROWN = "thrown"
    CONDITION = "condition"
    SHUTDOWN_FATAL = "shutdown-fatal"


# ---------- Source Context ----------


class SourceLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    text: str
    highlighted: bool = False
    width: int = 1

    @property
    def label(self) -> str:
        """Line number zero-padded to the widest number in the window."""
        return str(self.number).zfill(self.width)


class SourceWindow(BaseModel):
    """
    A bounded, annotated slice of a source file.

    ``text`` of every line is already escaped for markup output. At most
    one line is highlighted: the target line, when it lies inside the file.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    target: int
    lines: List[SourceLine] = Field(default_factory=list)

    @property
    def width(self) -> int:
        return len(str(self.lines[-1].number)) if self.lines else 0

    @property
    def highlighted(self) -> Optional[SourceLine]:
        for line in self.lines:
            if line.highlighted:
                return line
        return None


# ---------- Trace ----------


class FrameRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    function: str
    args: Optional[Dict[Union[int, str], Any]] = None
    file: Optional[str] = None
    line: Optional[int] = None
    source: Optional[SourceWindow] = None


# ---------- Diagnostic Event ----------


class DiagnosticEvent(BaseModel):
    """
    One failure, normalized independently of where it came from.

    ``code`` holds the classification name (e.g. "Fatal Error") for
    runtime conditions with a known name; otherwise the raw code.
    """

    model_config = ConfigDict(frozen=True)

    type_label: str
    code: Union[int, str]
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    trace: List[FrameRecord] = Field(default_factory=list)
    origin: OriginKind = OriginKind.THROWN
