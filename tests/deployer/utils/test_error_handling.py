"""Tests for error handling utilities."""

import pytest

from dlprewards.deployer.utils.error_handling import (
    ExternalFailure,
    InvalidParameters,
    NotYetEligible,
    RewardEngineError,
    SlippageExceeded,
    StateError,
    Underflow,
    UnknownParticipant,
    log_and_raise_config_error,
    log_and_raise_external_failure,
    log_and_raise_state_error,
    log_and_raise_validation_error,
    safe_operation,
)


def test_taxonomy_maps_to_builtin_exceptions():
    """Error categories should be catchable as their builtin counterparts"""
    assert issubclass(UnknownParticipant, ValueError)
    assert issubclass(NotYetEligible, RuntimeError)
    assert issubclass(SlippageExceeded, ExternalFailure)
    assert issubclass(Underflow, ArithmeticError)


def test_log_and_raise_validation_error_carries_context():
    """Validation errors should carry epoch and participant ids"""
    with pytest.raises(UnknownParticipant) as exc_info:
        log_and_raise_validation_error(UnknownParticipant, "Participant 9 is not registered", epoch_id=2, participant_id=9)

    error = exc_info.value
    assert error.to_dict() == {
        "kind": "UnknownParticipant",
        "message": "Participant 9 is not registered",
        "epoch_id": 2,
        "participant_id": 9,
    }


def test_log_and_raise_validation_error_truncates_large_data():
    """Validation error handler truncates large data for logging"""
    with pytest.raises(InvalidParameters, match="Data too large"):
        log_and_raise_validation_error(InvalidParameters, "Data too large", data={'data': 'x' * 1000})


def test_log_and_raise_state_error():
    """State errors should be raised with their kind"""
    with pytest.raises(StateError) as exc_info:
        log_and_raise_state_error(NotYetEligible, "Tranche 2 not due", epoch_id=1, participant_id=4)

    assert exc_info.value.kind == "NotYetEligible"


def test_log_and_raise_external_failure_chains_cause():
    """External failures should chain the original exception"""
    original = ConnectionError("venue offline")

    with pytest.raises(SlippageExceeded) as exc_info:
        log_and_raise_external_failure(SlippageExceeded, original, "conversion", epoch_id=1, participant_id=4)

    assert exc_info.value.__cause__ is original
    assert "venue offline" in str(exc_info.value)


def test_log_and_raise_config_error():
    """Config errors should raise InvalidParameters naming the key"""
    with pytest.raises(InvalidParameters, match="price_api_key"):
        log_and_raise_config_error("Missing key", config_key="price_api_key", config_value="abc")


class TestSafeOperation:
    def test_returns_default_on_error(self):
        """Should return the default value when one is given"""
        @safe_operation("flaky", default_return=[])
        def flaky():
            raise OSError("disk full")

        assert flaky() == []

    def test_reraises_without_default(self):
        """Should re-raise when no default is given"""
        @safe_operation("strict")
        def strict():
            raise RewardEngineError("boom")

        with pytest.raises(RewardEngineError):
            strict()
