"""
Error handling utilities for the Inkwell API.

Provides structured error responses and custom exception classes.
"""

import logging
import traceback
from typing import Optional, Dict, Any
from flask import jsonify, request
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize API error.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class ValidationError(APIError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class InvalidIdError(ValidationError):
    """Raised when a path or body identifier is not a valid object id."""

    def __init__(self, value: Any):
        super().__init__("Invalid ID format", details={"id": str(value)})


class AuthenticationError(APIError):
    """Raised when a request carries no usable credentials."""

    def __init__(self, message: str = "No token provided"):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            status_code=401
        )


class AuthorizationError(APIError):
    """Raised when the caller is authenticated but not allowed to act."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            message=message,
            error_code="FORBIDDEN",
            status_code=403
        )


class NotFoundError(APIError):
    """Raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            message=f"{resource_type} with ID '{resource_id}' not found.",
            error_code="NOT_FOUND",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ConflictError(APIError):
    """Raised when a write would violate a uniqueness rule."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="CONFLICT",
            status_code=409,
            details=details
        )


class RateLimitError(APIError):
    """Raised when rate limit is exceeded."""

    def __init__(self, retry_after: Optional[int] = None):
        message = "Rate limit exceeded. Please try again later."
        details = {}
        if retry_after:
            details["retry_after"] = retry_after
            message += f" Retry after {retry_after} seconds."

        super().__init__(
            message=message,
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
            details=details
        )


class ServiceUnavailableError(APIError):
    """Raised when an external service is unavailable."""

    def __init__(self, service: str, message: Optional[str] = None):
        error_message = message or f"Service '{service}' is currently unavailable."
        super().__init__(
            message=error_message,
            error_code="SERVICE_UNAVAILABLE",
            status_code=503,
            details={"service": service}
        )


class MissingDependencyError(APIError):
    """Raised when a required dependency/library is not installed."""

    def __init__(self, dependency: str, install_command: str):
        message = f"Export requires '{dependency}'. Install with: {install_command}"
        super().__init__(
            message=message,
            error_code="MISSING_DEPENDENCY",
            status_code=503,
            details={"dependency": dependency, "install_command": install_command}
        )


# AI failure categories -> (error_code, status_code, user-facing message)
AI_ERROR_CATEGORIES = {
    "auth": ("AI_AUTH_ERROR", 502, "The AI service rejected our credentials."),
    "quota": ("AI_QUOTA_ERROR", 429, "The AI service quota has been exceeded. Please try again later."),
    "safety": ("AI_SAFETY_ERROR", 422, "The AI service declined to process this text."),
    "network": ("AI_NETWORK_ERROR", 503, "Could not reach the AI service. Check your connection and retry."),
    "response": ("AI_RESPONSE_ERROR", 502, "The AI service returned an unusable response."),
    "general": ("AI_GENERAL_ERROR", 502, "The AI service failed to process the request."),
}


class AIServiceError(APIError):
    """Raised when an LLM provider call fails."""

    def __init__(
        self,
        category: str = "general",
        message: Optional[str] = None,
        provider: Optional[str] = None
    ):
        if category not in AI_ERROR_CATEGORIES:
            category = "general"
        error_code, status_code, default_message = AI_ERROR_CATEGORIES[category]
        details = {"category": category}
        if provider:
            details["provider"] = provider
        super().__init__(
            message=message or default_message,
            error_code=error_code,
            status_code=status_code,
            details=details
        )
        self.category = category


def create_error_response(
    error: Exception,
    include_traceback: bool = False
) -> tuple:
    """
    Create a standardized error response.

    Args:
        error: Exception instance
        include_traceback: Whether to include traceback in response (for debugging)

    Returns:
        Tuple of (json_response, status_code)
    """
    if isinstance(error, APIError):
        # Client errors are expected traffic; only server-side failures get a traceback
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message}", exc_info=True)
        else:
            logger.info(
                f"{request.method} {request.path} -> {error.status_code} {error.error_code}: {error.message}"
            )

        response = {
            "error": error.message,
            "error_code": error.error_code,
        }
        if error.details:
            response["details"] = error.details
        if include_traceback:
            response["traceback"] = traceback.format_exc()

        return jsonify(response), error.status_code

    logger.error(
        f"Error: {type(error).__name__}: {str(error)}",
        exc_info=True,
        extra={
            "path": request.path if request else None,
            "method": request.method if request else None,
        }
    )

    error_message = str(error)
    error_type = type(error).__name__

    # Don't expose internal errors in production
    if not include_traceback:
        error_message = "An unexpected error occurred. Please try again or contact support if the issue persists."

    response = {
        "error": error_message,
        "error_code": "INTERNAL_ERROR",
        "error_type": error_type,
    }

    if include_traceback:
        response["traceback"] = traceback.format_exc()

    return jsonify(response), 500


def pydantic_error_response(error: PydanticValidationError) -> tuple:
    """
    Render a pydantic validation failure as a 400 with a list of field errors.

    Args:
        error: pydantic ValidationError raised while parsing a request body

    Returns:
        Tuple of (json_response, status_code)
    """
    errors = []
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ()))
        errors.append({"field": field, "message": item.get("msg", "Invalid value")})

    logger.info(f"{request.method} {request.path} -> 400 validation failed on {len(errors)} field(s)")
    return jsonify({
        "error": "Validation Error",
        "error_code": "VALIDATION_ERROR",
        "errors": errors,
    }), 400


def register_error_handlers(app, debug: bool = False):
    """
    Register error handlers for the Flask app.

    Args:
        app: Flask application instance
        debug: Whether to include tracebacks in error responses
    """
    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        """Handle APIError exceptions."""
        return create_error_response(error, include_traceback=debug)

    @app.errorhandler(PydanticValidationError)
    def handle_validation_error(error: PydanticValidationError):
        """Handle request bodies rejected by pydantic models."""
        return pydantic_error_response(error)

    @app.errorhandler(404)
    def handle_not_found(error):
        """Handle 404 errors."""
        return create_error_response(
            NotFoundError("Resource", request.path),
            include_traceback=debug
        )

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        """Handle 405 Method Not Allowed errors."""
        return jsonify({
            "error": f"Method '{request.method}' not allowed for this endpoint.",
            "error_code": "METHOD_NOT_ALLOWED",
        }), 405

    @app.errorhandler(429)
    def handle_rate_limit(error):
        """Handle 429 Rate Limit errors."""
        return create_error_response(
            RateLimitError(),
            include_traceback=debug
        )

    @app.errorhandler(500)
    def handle_internal_error(error):
        """Handle 500 Internal Server errors."""
        return create_error_response(error, include_traceback=debug)

    @app.errorhandler(Exception)
    def handle_generic_exception(error: Exception):
        """Handle all other exceptions."""
        return create_error_response(error, include_traceback=debug)
