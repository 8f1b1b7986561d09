from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "VALIDATION_ERROR",
}


class ApiError(Exception):
    """Base for errors raised by route handlers and decorators."""
    status = 500
    error = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class RequestValidationError(ApiError):
    status = 400
    error = "VALIDATION_ERROR"
    message = "Invalid input"


class AuthenticationError(ApiError):
    status = 401
    error = "UNAUTHENTICATED"
    message = "Not authenticated"


class AuthorizationError(ApiError):
    # Same surface as AuthenticationError: callers cannot tell a valid but
    # under-privileged token from a bad one.
    status = 401
    error = "UNAUTHENTICATED"
    message = "Not authenticated"


class LockedError(ApiError):
    status = 403
    error = "LOCKED"

    def __init__(self, remaining_minutes: int):
        super().__init__(
            f"User is locked please contact admin or try again in {remaining_minutes} minutes",
            details={"remaining_minutes": remaining_minutes},
        )
        self.remaining_minutes = remaining_minutes


class NotFoundError(ApiError):
    status = 404
    error = "NOT_FOUND"
    message = "Resource not found"


class InternalError(ApiError):
    pass


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _internal(err: Exception):
    logging.exception("Unhandled exception", exc_info=err)
    details = None
    if current_app and current_app.debug:
        details = {"type": err.__class__.__name__, "message": str(err)}
    return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status >= 500:
            return _internal(err)
        return error_response(err.error, err.message, err.status, details=err.details)

    # Marshmallow validation errors: missing/malformed fields are a 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=err.messages)

    # Integrity errors (unique constraints) that slipped past the explicit checks
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err)).lower()
        if current_app and current_app.debug:
            logging.exception("Integrity error", exc_info=err)
        if "unique" in message:
            return error_response("VALIDATION_ERROR", "Already exists.", 400)
        return error_response("VALIDATION_ERROR", "Integrity error.", 400)

    # Any other persistence failure is opaque to the client
    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(err: SQLAlchemyError):
        return _internal(err)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = err.code or 400
        return error_response(HTTP_ERROR_CODES.get(code, "HTTP_ERROR"), err.description, code)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        return _internal(err)
