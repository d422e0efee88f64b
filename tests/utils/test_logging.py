"""Tests for the events logger."""

import json
from unittest.mock import Mock

from dlprewards.utils.logging import EVENTS_LEVEL_NUM, log_reward_event, setup_events_logger


def test_events_logger_writes_event_lines(tmp_path):
    """Events should be written to the rotating events file"""
    logger = setup_events_logger(str(tmp_path), 1024 * 1024)
    logger.setLevel(EVENTS_LEVEL_NUM)

    log_reward_event(logger, "tranche_distributed", {"epoch_id": 1, "participant_id": 4})
    for handler in logger.handlers:
        handler.flush()

    content = (tmp_path / "reward_events.log").read_text()
    assert "| EVENT |" in content
    assert '"event": "tranche_distributed"' in content


def test_setup_twice_does_not_duplicate_handlers(tmp_path):
    """Re-running setup for the same directory should reuse the handler"""
    first = setup_events_logger(str(tmp_path), 1024)
    handlers_before = len(first.handlers)

    second = setup_events_logger(str(tmp_path), 1024)

    assert second is first
    assert len(second.handlers) == handlers_before


def test_log_reward_event_payload():
    """The event name should be merged into the JSON payload"""
    logger = Mock()

    log_reward_event(logger, "penalty_withdrawn", {"amount": 25})

    assert json.loads(logger.event.call_args.args[0]) == {"event": "penalty_withdrawn", "amount": 25}
