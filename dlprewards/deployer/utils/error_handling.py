"""
Error types and handling utilities for the reward deployer.

Every engine error carries the epoch and participant it concerns (when known)
so batch callers can report and retry a single unit. The ``log_and_raise_*``
helpers keep logging consistent across services.
"""

import bittensor as bt
from typing import Any, Dict, Optional


class RewardEngineError(Exception):
    """Base class for all reward engine errors."""

    kind = "RewardEngineError"

    def __init__(
        self,
        message: str,
        epoch_id: Optional[int] = None,
        participant_id: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.epoch_id = epoch_id
        self.participant_id = participant_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for batch reports."""
        return {
            "kind": self.kind,
            "message": self.message,
            "epoch_id": self.epoch_id,
            "participant_id": self.participant_id,
        }


# Error taxonomy

class ValidationError(RewardEngineError, ValueError):
    kind = "ValidationError"


class StateError(RewardEngineError, RuntimeError):
    kind = "StateError"


class ExternalFailure(RewardEngineError, RuntimeError):
    kind = "ExternalFailure"


class InvariantViolation(RewardEngineError, ArithmeticError):
    kind = "InvariantViolation"


class AccessDenied(RewardEngineError):
    kind = "AccessDenied"


# Validation errors

class InvalidParameters(ValidationError):
    kind = "InvalidParameters"


class InvalidPercentageSum(ValidationError):
    kind = "InvalidPercentageSum"


class UnknownParticipant(ValidationError):
    kind = "UnknownParticipant"


# State errors

class InvalidEpoch(StateError):
    kind = "InvalidEpoch"


class EpochNotFinalized(StateError):
    kind = "EpochNotFinalized"


class AlreadyInitialized(StateError):
    kind = "AlreadyInitialized"


class NotInitialized(StateError):
    kind = "NotInitialized"


class NotYetEligible(StateError):
    kind = "NotYetEligible"


class AlreadyComplete(StateError):
    kind = "AlreadyComplete"


class NothingToWithdraw(StateError):
    kind = "NothingToWithdraw"


# External failures

class SlippageExceeded(ExternalFailure):
    kind = "SlippageExceeded"


class TreasuryTransferFailed(ExternalFailure):
    kind = "TreasuryTransferFailed"


# Invariant violations

class Underflow(InvariantViolation):
    kind = "Underflow"


def log_and_raise_validation_error(
    error_cls: type,
    message: str,
    epoch_id: Optional[int] = None,
    participant_id: Optional[int] = None,
    data: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log validation error with context and raise it.

    Args:
        error_cls: ValidationError subclass to raise
        message: Error message describing what validation failed
        epoch_id: Epoch the input belongs to
        participant_id: Participant the input belongs to
        data: Data that failed validation (will be truncated if large)

    Raises:
        ValidationError: Always raises ``error_cls``
    """
    # Truncate large data for logging
    safe_data = data
    if data and len(str(data)) > 200:
        safe_data = str(data)[:200] + "... (truncated)"

    bt.logging.error(
        f"Validation failed: {message}",
        extra={'validation_data': safe_data, 'epoch_id': epoch_id, 'participant_id': participant_id}
    )

    raise error_cls(message, epoch_id=epoch_id, participant_id=participant_id)


def log_and_raise_state_error(
    error_cls: type,
    message: str,
    epoch_id: Optional[int] = None,
    participant_id: Optional[int] = None
) -> None:
    """
    Log a lifecycle violation and raise it.

    State errors are expected during normal batch processing (a tranche that is
    not due yet), so they are logged at debug level only.

    Raises:
        StateError: Always raises ``error_cls``
    """
    bt.logging.debug(f"{error_cls.kind}: {message} (epoch={epoch_id}, participant={participant_id})")
    raise error_cls(message, epoch_id=epoch_id, participant_id=participant_id)


def log_and_raise_external_failure(
    error_cls: type,
    error: Exception,
    operation: str,
    epoch_id: Optional[int] = None,
    participant_id: Optional[int] = None
) -> None:
    """
    Log a collaborator failure with context and raise it.

    Args:
        error_cls: ExternalFailure subclass to raise
        error: The original exception (or a description of the failure)
        operation: Description of the external operation that failed

    Raises:
        ExternalFailure: Always raises ``error_cls`` chained to ``error``
    """
    bt.logging.error(
        f"External operation '{operation}' failed: {error}",
        extra={
            'operation': operation,
            'epoch_id': epoch_id,
            'participant_id': participant_id,
            'error_type': type(error).__name__
        }
    )
    raise error_cls(
        f"{operation} failed: {error}",
        epoch_id=epoch_id,
        participant_id=participant_id
    ) from error


def log_and_raise_config_error(
    message: str,
    config_key: Optional[str] = None,
    config_value: Optional[Any] = None
) -> None:
    """
    Log configuration error and raise InvalidParameters.

    Args:
        message: Error message describing the configuration issue
        config_key: The configuration key that's problematic
        config_value: The problematic value (will be sanitized)

    Raises:
        InvalidParameters: Always raises with formatted message
    """
    # Sanitize config value
    safe_value = config_value
    if config_value and any(sensitive in str(config_key).lower()
                           for sensitive in ['key', 'token', 'password', 'secret']):
        safe_value = '***REDACTED***'

    bt.logging.error(
        f"Configuration error: {message}",
        extra={'config_key': config_key, 'config_value': safe_value}
    )

    raise InvalidParameters(f"{message} (config_key: {config_key})")


def safe_operation(operation_name: str, default_return=None):
    """
    Decorator to safely execute operations with consistent error logging.

    Args:
        operation_name: Name of the operation for logging
        default_return: Value to return on error (if None, re-raises)

    Returns:
        Decorator function
    """
    def decorator(func):
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                bt.logging.error(
                    f"Operation '{operation_name}' failed: {e}",
                    extra={
                        'operation': operation_name,
                        'function': func.__name__,
                        'error_type': type(e).__name__
                    }
                )
                if default_return is not None:
                    return default_return
                raise
        return wrapper
    return decorator
