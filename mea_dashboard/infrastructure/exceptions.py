"""
Custom exception classes for the MEA maturity assessment application.

Provides structured error handling with user-friendly messages and proper
error categorization for validation, persistence and lookup failures.
"""

from __future__ import annotations

from typing import Any


class MaturityAssessmentError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.user_message = user_message or self._get_default_user_message()

    def _get_default_user_message(self) -> str:
        """Provide a user-friendly version of the error message."""
        return "An unexpected error occurred. Please try again."

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ValidationError(MaturityAssessmentError):
    """Raised when input validation fails."""

    def __init__(
        self, field: str, message: str, value: Any = None, details: dict[str, Any] | None = None
    ):
        self.field = field
        self.value = value
        self.reason = message
        super().__init__(
            message=f"Validation failed for field '{field}': {message}",
            details=details or {"field": field, "value": value},
            user_message=f"Invalid {field.replace('_', ' ')}: {message}",
        )

    def _get_default_user_message(self) -> str:
        return f"Please check your input for {self.field.replace('_', ' ')} and try again."


class MultipleValidationError(ValidationError):
    """Raised when several fields fail validation at once."""

    def __init__(self, errors: list[ValidationError]):
        self.validation_errors = errors
        messages = [f"{e.field}: {e.reason}" for e in errors]
        super().__init__(
            field="submission",
            message="; ".join(messages),
            details={
                "errors": [
                    {"field": e.field, "message": e.reason, "value": e.value} for e in errors
                ]
            },
        )
        self.user_message = "Please correct the following errors and try again: " + "; ".join(
            e.user_message for e in errors
        )


class PersistenceError(MaturityAssessmentError):
    """Raised when the backing store cannot complete an operation."""

    def __init__(self, message: str, operation: str, details: dict[str, Any] | None = None):
        self.operation = operation
        super().__init__(
            message=f"Persistence error during {operation}: {message}",
            details=details or {"operation": operation},
            user_message="Unable to reach the assessment store. Please try again in a moment.",
        )

    def _get_default_user_message(self) -> str:
        return "Unable to save your changes. Please try again."


class StoreUnavailableError(PersistenceError):
    """Raised when the store connection cannot be established."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, operation="connection", details=details)


class AssessmentNotFoundError(MaturityAssessmentError):
    """Raised when an assessment does not exist or belongs to another user."""

    def __init__(self, assessment_id: str):
        self.assessment_id = assessment_id
        super().__init__(
            message=f"Assessment with ID {assessment_id} not found",
            details={"assessment_id": assessment_id},
        )

    def _get_default_user_message(self) -> str:
        return "No data is available for the selected assessment."


class AuthenticationError(MaturityAssessmentError):
    """Raised when no user identity can be established."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            details=details,
            user_message="Unable to sign you in. Please reload and try again.",
        )


class ConfigurationError(MaturityAssessmentError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            details=details or {"config_key": config_key},
            user_message="Configuration error. Please check your settings.",
        )


def handle_persistence_error(e: Exception, operation: str = "store operation") -> PersistenceError:
    """
    Convert store driver exceptions to the appropriate custom exception.

    Args:
        e: The original exception
        operation: Description of the operation that failed

    Returns:
        Appropriate PersistenceError subclass

    Example:
        >>> try:
        ...     session.commit()
        >>> except SQLAlchemyError as e:
        ...     raise handle_persistence_error(e, "create assessment") from e
    """
    if isinstance(e, PersistenceError):
        return e

    error_msg = str(e).lower()

    if "connection" in error_msg or "timeout" in error_msg or "unable to open" in error_msg:
        return StoreUnavailableError(str(e))
    return PersistenceError(str(e), operation)


def create_user_friendly_error_message(error: Exception) -> str:
    """
    Create a user-friendly error message from any exception.

    Args:
        error: The exception to convert

    Returns:
        User-friendly error message

    Example:
        >>> error = ValidationError("name", "cannot be empty")
        >>> create_user_friendly_error_message(error)
        'Invalid name: cannot be empty'
    """
    if isinstance(error, MaturityAssessmentError):
        return error.user_message

    error_type = type(error).__name__
    messages = {
        "ValueError": "Invalid input provided. Please check your data and try again.",
        "KeyError": "Required information is missing. Please check your input.",
        "TypeError": "Incorrect data type provided. Please check your input format.",
    }
    return messages.get(
        error_type, "An unexpected error occurred. Please try again or contact support."
    )


def log_error_details(error: Exception, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create structured error details for logging.

    Args:
        error: The exception to log
        context: Additional context information

    Returns:
        Dictionary with structured error details
    """
    details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }

    if isinstance(error, MaturityAssessmentError):
        details.update({"user_message": error.user_message, "error_details": error.details})

    return details
