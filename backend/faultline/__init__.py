# backend/faultline/__init__.py
from __future__ import annotations

"""
faultline: turn uncaught failures into one readable diagnostic report.

Typical usage at process start:

    import faultline
    faultline.install()

Diagnostics live in faultline.services.diagnostics, renderers in
faultline.services.reports and framework hooks in faultline.integrations.
"""

from faultline.services.diagnostics.classification import Severity  # noqa: F401
from faultline.services.diagnostics.output_buffer import output_buffer  # noqa: F401
from faultline.services.diagnostics.pipeline import DiagnosticPipeline, install  # noqa: F401

__version__ = "0.1.0"
