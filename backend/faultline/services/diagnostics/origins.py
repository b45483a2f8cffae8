from __future__ import annotations

"""backend/faultline/services/diagnostics/origins.py

The three places a failure can come from.

- Thrown: an exception nobody caught
- Condition: a recoverable runtime condition (a warning, a notice, a
  user-triggered error)
- ShutdownFatal: an engine-level error found by the shutdown hook

They share one shape so the pipeline handles all of them the same way;
``kind`` is the only thing that tells them apart.
"""

from dataclasses import dataclass
from types import TracebackType
from typing import ClassVar, Optional, Sequence, Union

from faultline.schemas import OriginKind
from faultline.services.diagnostics.frames import FrameDescriptor, frames_from_traceback


@dataclass(frozen=True)
class FailureOrigin:
    type_label: str
    code: Union[int, str] = 0
    message: str = ""
    file: Optional[str] = None
    line: Optional[int] = None
    trace: Optional[Sequence[FrameDescriptor]] = None

    kind: ClassVar[OriginKind]


@dataclass(frozen=True)
class Thrown(FailureOrigin):
    kind: ClassVar[OriginKind] = OriginKind.THROWN

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        tb: Optional[TracebackType] = None,
    ) -> "Thrown":
        """Describe an exception, located at its innermost traceback entry."""
        trace = frames_from_traceback(tb or exc.__traceback__)
        file = trace[0].file if trace else None
        line = trace[0].line if trace else None

        if isinstance(exc, SyntaxError) and exc.filename:
            # The failure site is the source being compiled.
            file, line = exc.filename, exc.lineno

        return cls(
            type_label=type(exc).__name__,
            code=_exception_code(exc),
            message=str(exc),
            file=file,
            line=line,
            trace=tuple(trace),
        )


@dataclass(frozen=True)
class Condition(FailureOrigin):
    type_label: str = "RuntimeCondition"

    kind: ClassVar[OriginKind] = OriginKind.CONDITION


@dataclass(frozen=True)
class ShutdownFatal(FailureOrigin):
    type_label: str = "FatalError"

    kind: ClassVar[OriginKind] = OriginKind.SHUTDOWN_FATAL


def _exception_code(exc: BaseException) -> Union[int, str]:
    for attr in ("code", "errno"):
        value = getattr(exc, attr, None)
        if isinstance(value, (int, str)) and not isinstance(value, bool):
            return value
    return 0
