"""
Error Taxonomy
==============

Exception hierarchy shared by the MCP tool layer, the HTTP adapters and the
instance retrieval API, plus the ErrorHandler used to log and normalize
foreign exceptions.
"""

from enum import Enum
from typing import Any, Dict, Optional

from nlui_mcp.config.logging import get_logger

logger = get_logger(__name__)


class ErrorType(str, Enum):
    """Error categories."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    ADAPTER = "ADAPTER"
    NETWORK = "NETWORK"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


USER_MESSAGES: Dict[ErrorType, str] = {
    ErrorType.VALIDATION: "The UI configuration is invalid. Check the input format.",
    ErrorType.NOT_FOUND: "The requested UI instance was not found or has expired.",
    ErrorType.ADAPTER: "The request could not be processed by the protocol adapter.",
    ErrorType.NETWORK: "A network error occurred. Please try again.",
    ErrorType.CONFIG: "The server is misconfigured.",
    ErrorType.INTERNAL: "An unexpected internal error occurred.",
}


class NLUIError(Exception):
    """Base class for all service errors."""

    error_type: ErrorType = ErrorType.INTERNAL

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})
        self.original_error = original_error

    def user_message(self) -> str:
        """Get a user-facing description of the error."""
        if self.error_type is ErrorType.VALIDATION:
            return f"{USER_MESSAGES[self.error_type]} {self.message}"
        return USER_MESSAGES[self.error_type]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for structured logs."""
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "context": self.context,
        }


class ValidationError(NLUIError):
    """Malformed or missing tool input."""

    error_type = ErrorType.VALIDATION


class NotFoundError(NLUIError):
    """Unknown instance identifier."""

    error_type = ErrorType.NOT_FOUND


class AdapterProtocolError(NLUIError):
    """The protocol engine asked an adapter for something it does not support."""

    error_type = ErrorType.ADAPTER


class StreamClosedError(AdapterProtocolError):
    """Raised when a response body stream is closed twice."""


class InternalError(NLUIError):
    """Anything unanticipated."""

    error_type = ErrorType.INTERNAL


_ERROR_CLASSES = {
    ErrorType.VALIDATION: ValidationError,
    ErrorType.NOT_FOUND: NotFoundError,
    ErrorType.ADAPTER: AdapterProtocolError,
    ErrorType.INTERNAL: InternalError,
}


class ErrorHandler:
    """Error handling utilities."""

    @staticmethod
    def handle(error: BaseException, **context: Any) -> NLUIError:
        """
        Log an error and return it as an NLUIError.

        Args:
            error: Any exception
            **context: Structured context merged into the log record

        Returns:
            The original error if it is already an NLUIError, otherwise a
            wrapper whose type is inferred from the message
        """
        if isinstance(error, NLUIError):
            fields = {**error.context, **context, "error_type": error.error_type.value}
            logger.error(error.message, **fields)
            return error

        error_type = ErrorHandler.infer_error_type(error)
        error_class = _ERROR_CLASSES.get(error_type, InternalError)
        message = str(error) or error.__class__.__name__
        wrapped = error_class(message, context=context, original_error=error)
        if error_class is InternalError and error_type is not ErrorType.INTERNAL:
            wrapped.error_type = error_type

        fields = {
            **context,
            "error_type": error_type.value,
            "exception_class": error.__class__.__name__,
        }
        logger.error(message, **fields)
        return wrapped

    @staticmethod
    def infer_error_type(error: BaseException) -> ErrorType:
        """Infer an error type from an exception's message."""
        message = str(error).lower()

        if "validation" in message or "invalid" in message:
            return ErrorType.VALIDATION
        if "not found" in message:
            return ErrorType.NOT_FOUND
        if "network" in message or "timeout" in message or "connection" in message:
            return ErrorType.NETWORK
        if "config" in message or "setting" in message:
            return ErrorType.CONFIG
        return ErrorType.INTERNAL

    @staticmethod
    def create_validation_error(message: str, field: Optional[str] = None) -> ValidationError:
        """Create a validation error for a named input field."""
        return ValidationError(message, context={"component": "validation", "field": field})

    @staticmethod
    def create_not_found_error(instance_id: str) -> NotFoundError:
        """Create a not-found error for an instance id."""
        return NotFoundError(
            f"Instance not found: {instance_id}",
            context={"component": "instance_store", "instance_id": instance_id},
        )
