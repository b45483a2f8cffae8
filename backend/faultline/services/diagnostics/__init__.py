from __future__ import annotations

"""
Diagnostics: turning failures into normalized reports.

This package provides:
- classification: severity codes, their display names and the warning
  category mapping
- source_context: annotated source windows around a line
- frames / arg_resolver / trace_normalizer: call-stack capture, argument
  name resolution and FrameRecord construction
- origins: the three failure origins (thrown, condition, shutdown-fatal)
- output_buffer: the buffered-output scope stack
- pipeline: the process-wide failure handler tying all of the above together

Submodules are imported directly; this package keeps no import-time state.
"""
