import io
from pathlib import Path

import pytest

from faultline.config import Settings
from faultline.services.diagnostics.classification import Severity
from faultline.services.diagnostics.output_buffer import OutputBuffer
from faultline.services.diagnostics.pipeline import DiagnosticPipeline


class RecordingTerminator:
    """Stands in for process termination; remembers the requested statuses."""

    def __init__(self):
        self.statuses = []

    def __call__(self, status):
        self.statuses.append(status)


class CapturingRenderer:
    """Renderer that keeps every event it is handed."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)
        return f"REPORT {event.type_label} [ {event.code} ]"


@pytest.fixture
def settings() -> Settings:
    return Settings(error_reporting=int(Severity.ALL), source_padding=5, exit_status=1)


@pytest.fixture
def sink_lines() -> list:
    return []


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def terminator() -> RecordingTerminator:
    return RecordingTerminator()


@pytest.fixture
def renderer() -> CapturingRenderer:
    return CapturingRenderer()


@pytest.fixture
def buffer(stream) -> OutputBuffer:
    return OutputBuffer(stream)


@pytest.fixture
def pipeline(settings, sink_lines, stream, buffer, terminator, renderer) -> DiagnosticPipeline:
    return DiagnosticPipeline(
        settings,
        renderer=renderer,
        sink=sink_lines.append,
        stream=stream,
        buffer=buffer,
        terminate=terminator,
    )


@pytest.fixture
def numbered_file(tmp_path) -> Path:
    """A 20-line file whose line N reads ``line N``."""
    path = tmp_path / "numbered.py"
    path.write_text("".join(f"line {n}\n" for n in range(1, 21)), encoding="utf-8")
    return path
