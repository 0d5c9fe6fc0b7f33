import json
import logging
from datetime import datetime, timezone

import pytest

from inbox_triage.utils import is_no_reply_sender, log_action, parse_email_address, setup_logging


def test_setup_logging_sets_level_once():
    logger = setup_logging("debug")
    handlers = len(logger.handlers)
    setup_logging("warning")
    assert logger.name == "inbox_triage"
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == handlers


def test_log_action_creates_daily_log_file(tmp_path):
    """log_action should create a JSON log file named YYYY-MM-DD.json."""
    log_action(tmp_path, thread_id="t1", action="replied", label="HIGH", score=0.91)
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    entries = json.loads((tmp_path / f"{today}.json").read_text())
    assert len(entries) == 1
    assert entries[0]["thread_id"] == "t1"
    assert entries[0]["label"] == "HIGH"
    assert entries[0]["score"] == 0.91


def test_log_action_appends_to_existing(tmp_path):
    """log_action should append to existing daily log, not overwrite."""
    log_action(tmp_path, thread_id="t1", action="archived", label="NONE")
    log_action(tmp_path, thread_id="t2", action="archived", label="NONE")
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    entries = json.loads((tmp_path / f"{today}.json").read_text())
    assert [e["thread_id"] for e in entries] == ["t1", "t2"]


@pytest.mark.parametrize("header,expected", [
    ("Jane Doe <Jane@Example.com>", "jane@example.com"),
    ("bob@test.com", "bob@test.com"),
    ('"Support, Team" <support@shop.io>', "support@shop.io"),
])
def test_parse_email_address(header, expected):
    assert parse_email_address(header) == expected


@pytest.mark.parametrize("sender", [
    "noreply@store.com",
    "no-reply@github.com",
    "Shop <NoReply@shop.com>",
    "notifications <reply-bot@nowhere.io>",
])
def test_is_no_reply_sender_detects(sender):
    assert is_no_reply_sender(sender) is True


@pytest.mark.parametrize("sender", ["alice@example.com", "Reply Team <reply@example.com>", ""])
def test_is_no_reply_sender_ignores_regular_senders(sender):
    assert is_no_reply_sender(sender) is False


def test_log_action_recovers_from_truncated_file(tmp_path):
    """A half-written daily file is replaced instead of breaking every later write."""
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    (tmp_path / f"{today}.json").write_text('[{"thread_id": "x"')
    log_action(tmp_path, thread_id="t2", action="archived", label="NONE")
    entries = json.loads((tmp_path / f"{today}.json").read_text())
    assert [e["thread_id"] for e in entries] == ["t2"]
