# backend/faultline/integrations/fastapi.py
from __future__ import annotations

"""
FastAPI integration.

Installs an application-wide exception handler that reports a request's
uncaught exception through a DiagnosticPipeline and answers with the
rendered report (HTTP 500). A server keeps running after a failed
request, so this path never terminates the process; when rendering
fails the response carries the one-line summary of that failure instead.

Reporting reads source files, so it runs in the threadpool rather than on
the event loop. Requests are reported with ``DiagnosticPipeline.report``,
outside the pipeline's re-entrancy guard: a warning raised while a
request's report is rendered is reported on its own. Renderer output
printed to stdout is captured process-wide, so renderers used here should
return their text rather than print it.
"""

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from faultline.services.diagnostics.origins import Thrown
from faultline.services.diagnostics.pipeline import DiagnosticPipeline


def build_error_response(pipeline: DiagnosticPipeline, exc: Exception) -> Response:
    try:
        body = pipeline.report(Thrown.from_exception(exc))
    except Exception as secondary:  # noqa: BLE001
        pipeline.buffer.clean_all()
        return PlainTextResponse(
            pipeline.summarize(Thrown.from_exception(secondary)),
            status_code=500,
        )

    if pipeline.settings.report_format == "html":
        return HTMLResponse(body, status_code=500)
    return PlainTextResponse(body, status_code=500)


def install_exception_handler(app: FastAPI, pipeline: DiagnosticPipeline) -> None:
    async def report_exception(request: Request, exc: Exception) -> Response:
        return await run_in_threadpool(build_error_response, pipeline, exc)

    app.add_exception_handler(Exception, report_exception)
