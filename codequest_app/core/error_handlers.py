"""
Error Handlers for CodeQuest

Provides:
- The error taxonomy raised by services (InvalidArgument, NotFound, Conflict, OutOfRange)
- Consistent error response format
- Flask error handlers
"""

from typing import Any, Dict, Optional

from flask import current_app, jsonify, request


class CodeQuestError(Exception):
    """Base exception class for CodeQuest."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class InvalidArgumentError(CodeQuestError):
    """Bad input supplied by the caller."""

    def __init__(self, message: str = 'Invalid argument', code: str = 'INVALID_ARGUMENT', details: Dict = None):
        super().__init__(message=message, code=code, status_code=400, details=details)


class NotFoundError(CodeQuestError):
    """Resource not found."""

    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details={'resource': resource} if resource else None
        )


class ConflictError(CodeQuestError):
    """State-machine violation: wrong status, limit exceeded, out-of-window."""

    def __init__(self, message: str = 'Conflict', code: str = 'CONFLICT', status_code: int = 409, details: Dict = None):
        super().__init__(message=message, code=code, status_code=status_code, details=details)


class OutOfRangeError(CodeQuestError):
    """Numeric bound violated."""

    def __init__(self, message: str = 'Value out of range', code: str = 'OUT_OF_RANGE', details: Dict = None):
        super().__init__(message=message, code=code, status_code=422, details=details)


class AuthorizationError(CodeQuestError):
    """Access denied."""

    def __init__(self, message: str = 'Access denied', status_code: int = 403):
        super().__init__(
            message=message,
            code='UNAUTHORIZED',
            status_code=status_code
        )


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """Create a standardized error response."""
    response = {
        'success': False,
        'message': message,
        'code': code
    }
    if details:
        response['details'] = details

    return jsonify(response), status_code


def success_response(data: Any = None, message: str = None, status_code: int = 200) -> tuple:
    """Create a standardized success response."""
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return jsonify(response), status_code


def register_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(CodeQuestError)
    def handle_codequest_error(error):
        if error.status_code >= 500:
            current_app.logger.error(f"{error.code}: {error.message}")
        else:
            current_app.logger.info(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        if request.path.startswith('/api/'):
            return error_response('Endpoint not found', 'NOT_FOUND', 404)
        return error

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        if request.path.startswith('/api/'):
            return error_response('Method not allowed', 'METHOD_NOT_ALLOWED', 405)
        return error

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error')
        if request.path.startswith('/api/'):
            return error_response('Internal server error', 'SERVER_ERROR', 500)
        return error
