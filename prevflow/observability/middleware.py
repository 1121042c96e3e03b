"""
Observability Middleware

Flask hooks adding OpenTelemetry instrumentation and structured request
logging to every board request. Spans carry the acting user and, for
case routes, the case being worked on.
"""

import time
import logging
from flask import Flask, request, g
from opentelemetry import trace
from opentelemetry.instrumentation.flask import FlaskInstrumentor

USER_HEADER = "X-User-Id"


def _request_case_id():
    return (request.view_args or {}).get("case_id")


def add_observability_middleware(app: Flask):
    """Instrument ``app`` and log one line per completed request."""

    FlaskInstrumentor().instrument_app(app)

    logger = logging.getLogger(__name__)

    @app.before_request
    def start_request_timer():
        g.start_time = time.time()
        g.trace_id = None

        span = trace.get_current_span()
        if not span.is_recording():
            return

        g.trace_id = format(span.get_span_context().trace_id, "032x")
        attributes = {
            "http.target": request.path,
            "prevflow.user_id": request.headers.get(USER_HEADER, ""),
        }
        case_id = _request_case_id()
        if case_id:
            attributes["prevflow.case_id"] = case_id
        span.set_attributes(attributes)

    @app.after_request
    def log_request(response):
        elapsed_ms = round((time.time() - g.get('start_time', time.time())) * 1000, 2)

        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("http.duration_ms", elapsed_ms)

        logger.info(
            "Board request handled",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.path,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                    "user_id": request.headers.get(USER_HEADER),
                    "case_id": _request_case_id(),
                    "trace_id": g.get('trace_id'),
                }
            }
        )

        if g.get('trace_id'):
            response.headers['X-Trace-Id'] = g.trace_id

        return response
