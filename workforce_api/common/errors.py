# workforce_api/common/errors.py
from flask import Blueprint, current_app
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError
from workforce_api.common.http import fail

bp_errors = Blueprint("errors", __name__)


class APIError(Exception):
    """Custom API Error class."""
    code = "API_ERROR"
    status_code = 400

    def __init__(self, message, code=None, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload


class UnauthenticatedError(APIError):
    code = "UNAUTHENTICATED"
    status_code = 401


class ForbiddenError(APIError):
    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(APIError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(APIError):
    code = "CONFLICT"
    status_code = 409


class ValidationError(APIError):
    code = "VALIDATION_ERROR"
    status_code = 422


@bp_errors.app_errorhandler(APIError)
def _api_error(e: APIError):
    return fail(message=e.message, status=e.status_code, code=e.code, detail=e.payload)

@bp_errors.app_errorhandler(HTTPException)
def _http(e: HTTPException):
    return fail(message=e.description or "HTTP error", status=e.code or 400)

@bp_errors.app_errorhandler(IntegrityError)
def _integrity(e: IntegrityError):
    # 409 for unique/FK violations
    current_app.logger.warning("integrity error: %s", getattr(e, "orig", e))
    return fail(message="Conflict / integrity error", status=409, code=ConflictError.code)

@bp_errors.app_errorhandler(Exception)
def _unhandled(e: Exception):
    current_app.logger.exception(e)
    return fail(message="Internal server error", status=500, code="INTERNAL_ERROR")
