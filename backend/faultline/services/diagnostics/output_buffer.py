from __future__ import annotations

"""backend/faultline/services/diagnostics/output_buffer.py

The process-wide stack of buffered-output scopes.

Output written while a scope is open is held back until the scope is
flushed or discarded. Application code routes its own output through the
shared ``output_buffer`` with ``capture()``; the failure pipeline discards
whatever is still buffered, renders its report into a fresh scope and only
then writes the report out, so a half-written page never reaches the user.
"""

import contextlib
import io
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional, TextIO


class OutputBuffer:
    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._scopes: List[io.StringIO] = []
        self._stream = stream
        # Where unbuffered output goes while ``sys.stdout`` points at us.
        self._passthrough: Optional[TextIO] = None

    @property
    def stream(self) -> TextIO:
        if self._stream is not None:
            return self._stream
        if self._passthrough is not None:
            return self._passthrough
        return sys.stdout

    @property
    def level(self) -> int:
        return len(self._scopes)

    def start(self) -> io.StringIO:
        scope = io.StringIO()
        self._scopes.append(scope)
        return scope

    def write(self, text: str) -> int:
        """Write to the innermost scope, or straight to the stream."""
        if self._scopes:
            return self._scopes[-1].write(text)
        return self.stream.write(text)

    def flush(self) -> None:
        if not self._scopes:
            self.stream.flush()

    def get_clean(self) -> str:
        """Close the innermost scope and return what it held."""
        if not self._scopes:
            return ""
        return self._scopes.pop().getvalue()

    def end_clean(self) -> None:
        if self._scopes:
            self._scopes.pop()

    def clean_all(self) -> None:
        """Discard every open scope."""
        while self._scopes:
            self._scopes.pop()

    def flush_all(self, stream: Optional[TextIO] = None) -> None:
        """Close every scope, passing each one's content outward.

        The outermost content goes to ``stream`` when given.
        """
        target = stream if stream is not None else self.stream
        while self._scopes:
            content = self._scopes.pop().getvalue()
            if self._scopes:
                self._scopes[-1].write(content)
            else:
                target.write(content)
        target.flush()

    def _close(self, scope: io.StringIO, keep: bool) -> None:
        # Scopes opened inside ``scope`` and left open are closed with it.
        if not any(open_scope is scope for open_scope in self._scopes):
            return
        while self._scopes:
            top = self._scopes.pop()
            if keep:
                self.write(top.getvalue())
            if top is scope:
                return

    @contextmanager
    def capture(self) -> Iterator[io.StringIO]:
        """Route ``sys.stdout`` through a new scope for the block.

        The scope's content is passed outward when the block finishes and
        dropped when it raises. A failure report drains the stack first, so
        output captured before the failure never precedes the report.
        """
        passthrough = self._passthrough
        if passthrough is None and sys.stdout is not self:
            self._passthrough = sys.stdout
        scope = self.start()
        try:
            with contextlib.redirect_stdout(self):
                yield scope
        except BaseException:
            self._close(scope, keep=False)
            raise
        else:
            self._close(scope, keep=True)
        finally:
            self._passthrough = passthrough

    @contextmanager
    def drained(self) -> Iterator[io.StringIO]:
        """Yield a fresh scope on an empty stack; the stack is empty again on exit."""
        self.clean_all()
        scope = self.start()
        try:
            yield scope
        finally:
            self.clean_all()


output_buffer = OutputBuffer()
