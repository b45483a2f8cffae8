from __future__ import annotations

"""backend/faultline/services/diagnostics/trace_normalizer.py

Turn a raw call stack into FrameRecords.

For every frame that names a function the normalizer:
- builds the display label (``Class->method``, ``Class::method`` or the
  bare function name)
- resolves argument names through an ArgResolver
- attaches source context when both the file and the line are known

The order of the raw stack (newest frame first) is preserved and the
input is never modified, so normalizing the same stack twice yields the
same records.
"""

import sys
from typing import Callable, Iterable, List, Optional

from faultline.schemas import FrameRecord, SourceWindow
from faultline.services.diagnostics.arg_resolver import ArgResolver, IntrospectingArgResolver
from faultline.services.diagnostics.frames import INSTANCE_CALL, FrameDescriptor, frames_from_stack
from faultline.services.diagnostics.source_context import DEFAULT_PADDING, extract_source

SourceExtractor = Callable[[Optional[str], int, int], Optional[SourceWindow]]


def function_label(frame: FrameDescriptor) -> str:
    if frame.class_name:
        return f"{frame.class_name}{frame.call_type or INSTANCE_CALL}{frame.function}"
    return frame.function or ""


class TraceNormalizer:
    def __init__(
        self,
        resolver: Optional[ArgResolver] = None,
        *,
        padding: int = DEFAULT_PADDING,
        source_extractor: SourceExtractor = extract_source,
    ) -> None:
        self.resolver = resolver or IntrospectingArgResolver()
        self.padding = padding
        self._extract = source_extractor

    def normalize(self, raw_stack: Optional[Iterable[FrameDescriptor]] = None) -> List[FrameRecord]:
        """Normalize ``raw_stack``, or the caller's stack when none is given."""
        if raw_stack is None:
            raw_stack = frames_from_stack(sys._getframe(1))

        records: List[FrameRecord] = []
        for frame in raw_stack:
            if not frame.function:
                continue

            source = None
            if frame.file and frame.line is not None:
                source = self._extract(frame.file, frame.line, self.padding)

            records.append(
                FrameRecord(
                    function=function_label(frame),
                    args=self.resolver.resolve(frame),
                    file=frame.file or None,
                    line=frame.line,
                    source=source,
                )
            )
        return records
