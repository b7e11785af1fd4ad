"""
Exception hierarchy for habitquest

Only two kinds of failure ever reach a caller: input the engine refuses to
record (ValidationError) and progress that could not be persisted
(StorageWriteError). Read problems and dirty habit data degrade to a zero
state instead of raising.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class HabitQuestError(Exception):
    """
    Root of every error raised by the engine

    Each instance gets a request_id and UTC timestamp so the UI can quote
    them back, and is logged once when it is created. `user_message` is the
    text suitable for a notification; `message` is for logs.

    Example:
        raise HabitQuestError(
            message="Stats document could not be saved",
            operation="record_completion",
            context={"key": "userGamificationStats"}
        )
    """

    log_level = logging.ERROR

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "Something went wrong with your progress. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        self._log_error()

    def _log_error(self) -> None:
        # 'message' is a reserved LogRecord attribute
        extra = {
            "error_type": type(self).__name__,
            "error_message": self.message,
            "request_id": self.request_id,
            "operation": self.operation,
            "error_context": self.context,
        }
        if self.cause is not None:
            extra["cause"] = repr(self.cause)

        logger.log(
            self.log_level,
            f"{type(self).__name__} [{self.request_id}]: {self.message}",
            extra=extra,
            exc_info=self.cause,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Payload for surfacing the error in a UI"""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "operation": self.operation,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (caller input)
# ==========================================

class ValidationError(HabitQuestError):
    """
    Raised when a caller passes input the engine refuses to record

    Examples:
    - Completion for a missing habit reference
    - Completion dated outside the habit's start/end range
    - Backup that does not describe valid documents
    """

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class StorageError(HabitQuestError):
    """
    Base class for persistence backend failures
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        **kwargs
    ):
        self.key = key
        kwargs.setdefault("context", {"key": key})
        super().__init__(message=message, **kwargs)


class StorageReadError(StorageError):
    """Reading a persisted document failed"""

    log_level = logging.WARNING

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="Your progress could not be loaded. Starting fresh.",
            **kwargs
        )


class StorageWriteError(StorageError):
    """Writing a persisted document failed"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="We couldn't save your progress. Please try again.",
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(HabitQuestError):
    """Configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The application is not properly configured.",
            context={"config_key": config_key},
            **kwargs
        )
