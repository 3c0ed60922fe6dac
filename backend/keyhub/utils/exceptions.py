"""
Exception hierarchy for KeyHub.

Every exception carries the HTTP status and machine-readable code it maps to,
so routes can simply raise and let register_error_handlers() build the JSON
body. Core (non-HTTP) code only ever raises ValidationError.
"""
from flask import jsonify


class KeyHubException(Exception):
    """Base exception for all KeyHub errors"""
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        self.message = message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        return {
            'error': self.message,
            'error_code': self.error_code,
            'details': self.details
        }

    def to_response(self):
        return jsonify(self.to_dict()), self.status_code


class ValidationError(KeyHubException):
    """Bad input: request bodies, sub-scores, enum values"""
    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str = None, details: dict = None):
        self.field = field
        if field:
            message = f"Validation error for field '{field}': {message}"
        super().__init__(message, self.error_code, details)

    def to_dict(self):
        body = super().to_dict()
        if self.field:
            body['field'] = self.field
        return body


class AuthenticationError(KeyHubException):
    """Missing or invalid Firebase ID token"""
    status_code = 401
    error_code = "AUTH_ERROR"

    def __init__(self, message: str = "Authentication required", details: dict = None):
        super().__init__(message, self.error_code, details)


class AuthorizationError(KeyHubException):
    """Signed in, but the role or status does not allow the action"""
    status_code = 403
    error_code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Permission denied", details: dict = None):
        super().__init__(message, self.error_code, details)


class NotFoundError(KeyHubException):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", details: dict = None):
        super().__init__(f"{resource} not found", self.error_code, details)


class DataIntegrityError(KeyHubException):
    """
    A stored document failed validation while being aggregated.

    Raised from a ValidationError on data we read rather than data the
    caller sent, hence the 500.
    """
    status_code = 500
    error_code = "STORED_DATA_INVALID"

    def __init__(self, collection: str, cause: ValidationError):
        super().__init__(
            f"Stored {collection} data failed validation",
            self.error_code,
            {'collection': collection, 'field': cause.field, **cause.details},
        )


class ConfigurationError(KeyHubException):
    """A required setting (client id, signing secret) is not configured"""
    status_code = 500
    error_code = "CONFIG_ERROR"

    def __init__(self, feature: str, setting: str):
        self.setting = setting
        super().__init__(f"{feature} is not configured", self.error_code)


class ExternalAPIError(KeyHubException):
    """Google token endpoint and other outbound calls"""
    status_code = 502
    error_code = "EXTERNAL_API_ERROR"

    def __init__(self, service: str, message: str = None, details: dict = None):
        if not message:
            message = f"{service} API error. Please try again later."
        super().__init__(message, self.error_code, {
            'service': service,
            **(details or {})
        })


def handle_keyhub_exception(e: KeyHubException):
    return e.to_response()


def register_error_handlers(app):
    """Register JSON error handlers with the Flask app"""
    app.register_error_handler(KeyHubException, handle_keyhub_exception)

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({
            'error': 'Bad request',
            'error_code': 'BAD_REQUEST',
            'details': {'message': str(e)}
        }), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({
            'error': 'Resource not found',
            'error_code': 'NOT_FOUND',
            'details': {}
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({
            'error': 'Method not allowed',
            'error_code': 'METHOD_NOT_ALLOWED',
            'details': {}
        }), 405

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({
            'error': 'Too many requests',
            'error_code': 'RATE_LIMITED',
            'details': {'limit': str(getattr(e, 'description', ''))}
        }), 429

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({
            'error': 'An unexpected error occurred. Please try again later.',
            'error_code': 'INTERNAL_ERROR',
            'details': {}
        }), 500
