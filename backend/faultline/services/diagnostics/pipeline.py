from __future__ import annotations

"""backend/faultline/services/diagnostics/pipeline.py

The failure handler pipeline.

Responsibilities:
- Install the process-wide hooks (uncaught exceptions, in any thread,
  warnings and shutdown)
- Filter recoverable conditions through the configured reporting mask
- Keep the last engine-level error for the shutdown hook
- Turn every failure into one DiagnosticEvent and hand it to the renderer
- Guarantee that reporting never recurses and never fails silently: a
  failure while reporting is written out as a single plain line and the
  process is terminated

All work happens synchronously on the failing thread.
"""

import atexit
import contextlib
import logging
import os
import re
import sys
import threading
import warnings
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, Optional, Sequence, TextIO, Tuple, Type, Union

from faultline.config import Settings, get_settings
from faultline.schemas import DiagnosticEvent, OriginKind
from faultline.services.diagnostics.arg_resolver import ArgResolver, IntrospectingArgResolver
from faultline.services.diagnostics.classification import (
    ENGINE_SEVERITIES,
    USER_SEVERITIES,
    Severity,
    classify,
    is_fatal_on_shutdown,
    severity_for_warning,
)
from faultline.services.diagnostics.frames import FrameDescriptor, frames_from_stack
from faultline.services.diagnostics.origins import Condition, FailureOrigin, ShutdownFatal, Thrown
from faultline.services.diagnostics.output_buffer import OutputBuffer, output_buffer
from faultline.services.diagnostics.trace_normalizer import TraceNormalizer
from faultline.services.reports import get_renderer

logger = logging.getLogger(__name__)

Renderer = Callable[[DiagnosticEvent], Optional[str]]
Sink = Callable[[str], None]
Terminate = Callable[[int], Any]

_TAGS = re.compile(r"<[^>]*>")

# Frames of the warnings machinery and of this module are not user code.
_INTERNAL_MODULES = frozenset({"warnings", "_py_warnings", __name__})


def strip_tags(text: str) -> str:
    return _TAGS.sub("", text)


@dataclass(frozen=True)
class LastError:
    code: int
    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    trace: Optional[Tuple[FrameDescriptor, ...]] = None


def _exit_now(status: int) -> None:
    """Flush the standard streams and leave without running atexit again."""
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, OSError, ValueError):
            pass
    os._exit(status)


class DiagnosticPipeline:
    """Owns the failure hooks and everything they need to produce a report.

    Collaborators are injectable so embedders and tests can replace the
    renderer, the log sink, the output stream, the argument resolver and
    process termination.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        renderer: Optional[Renderer] = None,
        sink: Optional[Sink] = None,
        stream: Optional[TextIO] = None,
        buffer: Optional[OutputBuffer] = None,
        resolver: Optional[ArgResolver] = None,
        terminate: Optional[Terminate] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.renderer: Renderer = renderer or get_renderer(self.settings.report_format)
        self.sink: Sink = sink or logging.getLogger(self.settings.logger_name).error
        self._stream = stream
        self.buffer = buffer if buffer is not None else output_buffer
        self.normalizer = TraceNormalizer(
            resolver or IntrospectingArgResolver(),
            padding=self.settings.source_padding,
        )
        self._terminate: Terminate = terminate or _exit_now
        self._last_error: Optional[LastError] = None
        self._handling = False
        self._previous_hooks: Optional[Tuple[Any, Any, Any]] = None

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    # ---- Registration ----

    @property
    def registered(self) -> bool:
        return self._previous_hooks is not None

    def register(self) -> None:
        """Install the exception, thread exception, warning and shutdown hooks."""
        if self.registered:
            return
        self._previous_hooks = (sys.excepthook, threading.excepthook, warnings.showwarning)
        sys.excepthook = self.excepthook
        threading.excepthook = self.thread_excepthook
        warnings.showwarning = self.showwarning
        atexit.register(self.shutdown_handler)

    def unregister(self) -> None:
        """Restore the hooks that were active before ``register``."""
        if self._previous_hooks is None:
            return
        sys.excepthook, threading.excepthook, warnings.showwarning = self._previous_hooks
        atexit.unregister(self.shutdown_handler)
        self._previous_hooks = None

    # ---- Hooks ----

    def excepthook(
        self,
        exc_type: Type[BaseException],
        exc: BaseException,
        tb: Optional[TracebackType],
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        self.handle(Thrown.from_exception(exc, tb))

    def thread_excepthook(self, args: threading.ExceptHookArgs) -> None:
        """Report an exception that ended a ``threading.Thread``.

        ``SystemExit`` quietly ends a thread, as with the default hook.
        """
        if issubclass(args.exc_type, SystemExit):
            return
        if args.exc_value is None:
            threading.__excepthook__(args)
            return
        self.handle(Thrown.from_exception(args.exc_value, args.exc_traceback))

    def showwarning(
        self,
        message: Union[Warning, str],
        category: Type[Warning],
        filename: str,
        lineno: int,
        file: Optional[TextIO] = None,
        line: Optional[str] = None,
    ) -> None:
        self.handle_condition(
            severity_for_warning(category),
            str(message),
            filename,
            lineno,
            type_label=category.__name__,
        )

    def handle_condition(
        self,
        code: int,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
        *,
        type_label: str = "RuntimeCondition",
        trace: Optional[Sequence[FrameDescriptor]] = None,
    ) -> bool:
        """Report a recoverable runtime condition if its severity is enabled.

        Returns False only for engine-level severities, which cannot be
        handled live and are kept for the shutdown hook instead. Suppressed
        conditions return True as well: nothing else may display them.
        """
        code = int(code)
        if code in ENGINE_SEVERITIES:
            self.record_error(code, message, file, line)
            return False

        if not self.settings.error_reporting & code:
            logger.debug("Suppressed condition [ %s ]: %s", code, message)
            return True

        if trace is None:
            trace = frames_from_stack(sys._getframe(1), skip_modules=_INTERNAL_MODULES)
        self.handle(
            Condition(
                type_label=type_label,
                code=code,
                message=message,
                file=file,
                line=line,
                trace=tuple(trace),
            )
        )
        return True

    def trigger_error(self, message: str, code: int = Severity.USER_NOTICE) -> bool:
        """Raise a user-level condition from the calling code.

        Raises:
            ValueError: if ``code`` is not one of the USER_* severities.
        """
        if code not in USER_SEVERITIES:
            raise ValueError(f"trigger_error accepts USER_* severities only, got {code!r}")
        caller = sys._getframe(1)
        return self.handle_condition(
            code,
            message,
            caller.f_code.co_filename,
            caller.f_lineno,
            trace=frames_from_stack(caller, skip_modules=_INTERNAL_MODULES),
        )

    def shutdown_handler(self) -> None:
        """Report a fatal last error at process end, then terminate."""
        error = self._last_error
        if error is None or not is_fatal_on_shutdown(error.code):
            return

        self.buffer.clean_all()
        self.handle(
            ShutdownFatal(
                code=error.code,
                message=error.message,
                file=error.file,
                line=error.line,
                trace=error.trace or (),
            )
        )
        # Leave now so the shutdown sequence is not entered a second time.
        self._terminate(self.settings.exit_status)

    # ---- Last error ----

    @property
    def last_error(self) -> Optional[LastError]:
        return self._last_error

    def record_error(
        self,
        code: int,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
        trace: Optional[Sequence[FrameDescriptor]] = None,
    ) -> None:
        self._last_error = LastError(
            code=int(code),
            message=message,
            file=file,
            line=line,
            trace=tuple(trace) if trace is not None else None,
        )

    def clear_last_error(self) -> None:
        self._last_error = None

    # ---- Reporting ----

    def summarize(self, origin: FailureOrigin) -> str:
        return "%s [ %s ]: %s ~ %s [ %d ]" % (
            origin.type_label,
            origin.code,
            strip_tags(origin.message),
            origin.file or "",
            origin.line or 0,
        )

    def build_event(self, origin: FailureOrigin) -> DiagnosticEvent:
        code = origin.code
        if origin.kind is not OriginKind.THROWN:
            # Only runtime conditions carry a classification code.
            code = classify(code) or code

        return DiagnosticEvent(
            type_label=origin.type_label,
            code=code,
            message=origin.message,
            file=origin.file,
            line=origin.line,
            trace=self.normalizer.normalize(origin.trace or ()),
            origin=origin.kind,
        )

    def report(self, origin: FailureOrigin) -> str:
        """Log the summary line and return the rendered report.

        Anything the renderer prints is captured in the report; any output
        buffered before the failure is discarded. Errors propagate.
        """
        self.sink(self.summarize(origin))
        event = self.build_event(origin)

        with self.buffer.drained() as scope, contextlib.redirect_stdout(scope):
            rendered = self.renderer(event)
            if rendered:
                scope.write(rendered)
            return scope.getvalue()

    def handle(self, origin: FailureOrigin) -> bool:
        """Report ``origin`` and write the report to the output stream.

        Returns True once the failure has been reported. If reporting
        itself fails, a one-line summary of that secondary failure is
        written instead and the process is terminated.
        """
        if self._handling:
            # A failure raised while a report is being produced.
            self.sink(self.summarize(origin))
            return True

        self._handling = True
        try:
            output = self.report(origin)
            self.stream.write(output)
            if output and not output.endswith("\n"):
                self.stream.write("\n")
            self.stream.flush()
            return True
        except Exception as exc:  # noqa: BLE001
            try:
                self.buffer.clean_all()
                self._write_fallback(self._fallback_summary(exc))
            finally:
                self._terminate(self.settings.exit_status)
            return False
        finally:
            self._handling = False

    def _fallback_summary(self, exc: BaseException) -> str:
        try:
            return self.summarize(Thrown.from_exception(exc))
        except Exception:  # noqa: BLE001
            return "%s [ 0 ]:  ~  [ 0 ]" % type(exc).__name__

    def _write_fallback(self, text: str) -> None:
        try:
            self.stream.write(text + "\n")
            self.stream.flush()
            return
        except Exception as exc:  # noqa: BLE001
            logger.debug("Output stream unusable for the fallback line: %r", exc)

        # The output stream itself is broken; stderr is the last resort.
        stderr = sys.__stderr__
        if stderr is None:
            return
        with contextlib.suppress(Exception):
            stderr.write(text + "\n")
            stderr.flush()


def install(settings: Optional[Settings] = None, **kwargs: Any) -> DiagnosticPipeline:
    """Create a pipeline and register its hooks for this process."""
    pipeline = DiagnosticPipeline(settings, **kwargs)
    pipeline.register()
    return pipeline
