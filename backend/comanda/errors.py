# Overview: Domain error kinds and the Flask handlers that map them to responses.

"""
Error taxonomy shared by every service.

Services raise these; they never return error codes. HTTP adapters do not
catch them individually: register_error_handlers() turns each kind into a
stable JSON shape and status code.

KINDS:
- ValidationError: malformed or out-of-range input
- ForbiddenError: principal lacks the capability (or transition right)
- NotFoundError: referenced order/item/session/table does not exist
- StateError: operation incompatible with the entity's current state
- ConflictError: business invariant violated (table occupied)
- ConcurrencyError: conditional write lost a race; caller may retry
"""

from http import HTTPStatus

from flask import Flask, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class DomainError(Exception):
    """Base class for all business-rule violations."""
    kind = "domain_error"
    http_status = HTTPStatus.BAD_REQUEST


class ValidationError(DomainError, ValueError):
    """400-level input problem."""
    kind = "validation_error"
    http_status = HTTPStatus.BAD_REQUEST


class ForbiddenError(DomainError):
    """Principal is not allowed to perform the operation."""
    kind = "forbidden"
    http_status = HTTPStatus.FORBIDDEN

    def __init__(self, message: str, permission: str | None = None):
        super().__init__(message)
        self.permission = permission


class NotFoundError(DomainError):
    kind = "not_found"
    http_status = HTTPStatus.NOT_FOUND


class StateError(DomainError):
    """Operation is not allowed in the entity's current state."""
    kind = "state_error"
    http_status = HTTPStatus.BAD_REQUEST


class ConflictError(DomainError):
    """Business invariant conflict (e.g., table already has an open order)."""
    kind = "conflict"
    http_status = HTTPStatus.BAD_REQUEST


class ConcurrencyError(DomainError):
    """A conditional update matched zero rows; re-read and retry."""
    kind = "concurrency_error"
    http_status = HTTPStatus.CONFLICT


class OverpaymentError(ValidationError, StateError):
    """Payment would push the paid total past the order total."""
    kind = "validation_error"
    http_status = HTTPStatus.BAD_REQUEST


class AuthenticationError(Exception):
    """No verified principal could be resolved for the request."""


def error_response(error: DomainError):
    body = {"error": str(error), "kind": error.kind}
    permission = getattr(error, "permission", None)
    if permission:
        body["required_permission"] = permission
    return jsonify(body), int(error.http_status)


def register_error_handlers(app: Flask) -> None:
    """Register centralized error handlers for the Flask app."""

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        current_app.logger.warning("%s: %s", e.kind, e)
        return error_response(e)

    @app.errorhandler(AuthenticationError)
    def handle_authentication_error(e: AuthenticationError):
        return jsonify({"error": str(e) or "Authentication required", "kind": "unauthenticated"}), 401

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e: SQLAlchemyError):
        current_app.logger.exception("Database error")
        return jsonify({"error": "Database error"}), 500

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"error": e.description or str(e)}), e.code

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        current_app.logger.exception("Unhandled exception")
        return jsonify({"error": "Internal server error"}), 500
