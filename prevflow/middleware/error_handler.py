# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with problem-details responses.
Provides centralized error handling and formatting for Flask applications.
"""

from flask import Flask, request, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException
from typing import Dict, Any, List, Optional
from opentelemetry import trace
import logging

from ..errors import CaseStoreError, SettingsError

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

ERROR_TYPE_BASE = "https://prevflow.local/errors/"


def build_error_response(
    error_type: str,
    title: str,
    status: int,
    detail: str,
    instance: str,
    errors: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Build an RFC 7807 style error body."""
    body = {
        "type": f"{ERROR_TYPE_BASE}{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": instance,
    }
    if errors:
        body["errors"] = errors
    return body


class CustomException(Exception):
    """Base class for custom application exceptions."""

    title = "Application Error"

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for validation errors."""

    title = "Validation Error"

    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class NotFoundException(CustomException):
    """Exception for resource not found errors."""

    title = "Resource Not Found"

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


class ConflictException(CustomException):
    """Exception for moves vetoed by an automation rule."""

    title = "Move Blocked"

    def __init__(self, message: str):
        super().__init__(message, 409, "move-blocked")


class ServiceUnavailableException(CustomException):
    """Exception for persistence failures."""

    title = "Service Unavailable"

    def __init__(self, message: str):
        super().__init__(message, 503, "service-unavailable")


def _validation_errors(error: ValidationError) -> List[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in item.get("loc", ())),
            "message": item.get("msg", ""),
        }
        for item in error.errors()
    ]


def register_error_handlers(app: Flask) -> None:
    """
    Register JSON error handlers with a Flask application.

    Args:
        app: Flask application
    """

    @app.errorhandler(CustomException)
    def handle_custom_exception(error: CustomException):
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })

            logger.warning(
                f"Request failed: {error.error_type}",
                extra={"extra_fields": {
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "detail": error.message,
                    "path": request.path,
                    "method": request.method
                }}
            )

            errors = error.validation_errors if isinstance(error, ValidationException) else None
            body = build_error_response(
                error.error_type, error.title, error.status_code, error.message, request.path, errors
            )
            return jsonify(body), error.status_code

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        logger.warning(
            "Request payload rejected",
            extra={"extra_fields": {"path": request.path, "error_count": error.error_count()}}
        )
        body = build_error_response(
            "validation-error",
            "Validation Error",
            400,
            "Request payload is invalid",
            request.path,
            _validation_errors(error),
        )
        return jsonify(body), 400

    @app.errorhandler(CaseStoreError)
    @app.errorhandler(SettingsError)
    def handle_storage_error(error: Exception):
        logger.error(
            "Storage failure while handling request",
            extra={"extra_fields": {"path": request.path, "error": str(error)}}
        )
        body = build_error_response(
            "service-unavailable", "Service Unavailable", 503, str(error), request.path
        )
        return jsonify(body), 503

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        title = error.name or "HTTP Error"
        detail = str(error.description) if error.description else title
        error_type = title.lower().replace(" ", "-")
        if (error.code or 500) >= 500:
            logger.error(
                f"Server error: {title}",
                extra={"extra_fields": {"path": request.path, "status_code": error.code}}
            )
        return jsonify(build_error_response(error_type, title, error.code or 500, detail, request.path)), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)

            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={"extra_fields": {
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method
                }},
                exc_info=True
            )

            # Don't expose internal error details in production
            detail = "An unexpected error occurred"
            if app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"

            body = build_error_response(
                "internal-server-error", "Internal Server Error", 500, detail, request.path
            )
            return jsonify(body), 500
