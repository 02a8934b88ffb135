"""Centralised error handling and custom exceptions.

The service layer raises these exceptions to signal specific error
conditions without coupling itself to HTTP response codes. The Flask
app registers handlers for them during application factory
initialisation and serialises them into JSON responses.
"""
from __future__ import annotations

from flask import jsonify
from marshmallow import ValidationError as SchemaValidationError


class ApiError(Exception):
    """Base class for errors that map onto an HTTP response."""

    code = "ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def payload(self) -> dict:
        return {"code": self.code, "message": self.message}

    def to_response(self, status_code: int | None = None):
        return jsonify({"error": self.payload()}), status_code or self.status_code


class ValidationError(ApiError):
    """Raised when input validation fails."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message)
        self.fields = fields or {}

    def payload(self) -> dict:
        payload = super().payload()
        payload["fields"] = self.fields
        return payload


class AuthenticationRequiredError(ApiError):
    """Raised when an operation needs a caller identity and none is available."""

    code = "AUTHENTICATION_REQUIRED"
    status_code = 401


class NotFoundError(ApiError):
    """Raised when a requested resource cannot be found."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(ApiError):
    """Raised when a uniqueness or resource conflict occurs."""

    code = "CONFLICT"
    status_code = 409


def register_error_handlers(app) -> None:
    """Register custom error handlers on the given Flask app."""
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return err.to_response()

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(err: SchemaValidationError):
        return ValidationError("Invalid request body.", err.normalized_messages()).to_response()
