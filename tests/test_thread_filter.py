"""Tests for eligible-thread selection."""
from unittest.mock import MagicMock, call

import pytest

from inbox_triage.labels import LabelRegistry
from inbox_triage.models import EmailThread, LabelType
from inbox_triage.thread_filter import ThreadFilter

HOST = "Support Desk <support@merr.example>"


def _message(message_id, sender=None, subject=None, snippet="", labels=None):
    headers = []
    if sender is not None:
        headers.append({"name": "From", "value": sender})
    if subject is not None:
        headers.append({"name": "Subject", "value": subject})
    return {"id": message_id, "snippet": snippet, "labelIds": labels or ["INBOX"],
            "payload": {"headers": headers}}


@pytest.fixture
def mail_client():
    client = MagicMock()
    client.list_labels.return_value = [
        {"id": "L_HIGH", "name": "High Priority"},
        {"id": "L_LOW", "name": "Low Priority"},
        {"id": "L_OTHER", "name": "Other"},
    ]
    client.threads = {}
    client.messages = {}
    client.list_inbox_threads.side_effect = lambda: [{"id": tid} for tid in client.threads]
    client.get_thread.side_effect = lambda tid: {"id": tid, "messages": [{"id": m} for m in client.threads[tid]]}
    client.get_message.side_effect = lambda mid: client.messages[mid]
    return client


@pytest.fixture
def labeler():
    labeler = MagicMock()
    labeler.apply_decision.return_value = True
    return labeler


@pytest.fixture
def make_filter(mail_client, labeler):
    def factory(host=HOST):
        registry = LabelRegistry(mail_client)
        registry.initialize()
        return ThreadFilter(mail_client, registry, labeler, host)
    return factory


def _add(client, thread_id, message):
    client.threads[thread_id] = [message["id"]]
    client.messages[message["id"]] = message


def test_returns_first_eligible_thread(mail_client, labeler, make_filter):
    _add(mail_client, "t1", _message("m1", "Alice <alice@example.com>", "Opening hours", "When are you open?"))
    _add(mail_client, "t2", _message("m2", "bob@example.com", "Other question"))
    thread = make_filter().select_next_thread()
    assert thread == EmailThread("t1", "Opening hours", "When are you open?", "Alice <alice@example.com>")
    labeler.apply_decision.assert_not_called()
    mail_client.get_thread.assert_called_once_with("t1")


def test_defaults_for_missing_headers(mail_client, make_filter):
    _add(mail_client, "t1", _message("m1", snippet="Hello &amp; welcome"))
    thread = make_filter().select_next_thread()
    assert thread.subject == "No Subject"
    assert thread.sender == "Unknown Sender"
    assert thread.body == "Hello & welcome"


def test_empty_inbox_returns_none(mail_client, make_filter):
    assert make_filter().select_next_thread() is None


def test_listing_failure_returns_none(mail_client, make_filter):
    mail_client.list_inbox_threads.side_effect = RuntimeError("quota exceeded")
    assert make_filter().select_next_thread() is None


def test_already_analyzed_thread_is_archived_without_label(mail_client, labeler, make_filter):
    _add(mail_client, "t1", _message("m1", "alice@example.com", "Hi", labels=["INBOX", "L_LOW"]))
    _add(mail_client, "t2", _message("m2", "bob@example.com", "Question"))
    thread = make_filter().select_next_thread()
    assert thread.id == "t2"
    labeler.apply_decision.assert_called_once_with("t1", LabelType.NONE)


def test_self_sent_thread_is_archived_as_other(mail_client, labeler, make_filter):
    _add(mail_client, "t1", _message("m1", "Me <SUPPORT@merr.example>", "Outgoing"))
    assert make_filter().select_next_thread() is None
    labeler.apply_decision.assert_called_once_with("t1", LabelType.OTHER)


@pytest.mark.parametrize("sender", ["noreply@shop.com", "Shop <No-Reply@shop.com>", "donotreply@bank.com"])
def test_no_reply_sender_is_archived_as_other(mail_client, labeler, make_filter, sender):
    _add(mail_client, "t1", _message("m1", sender, "Your receipt"))
    assert make_filter().select_next_thread() is None
    labeler.apply_decision.assert_called_once_with("t1", LabelType.OTHER)


def test_thread_without_messages_is_skipped_untouched(mail_client, labeler, make_filter):
    mail_client.threads["t1"] = []
    _add(mail_client, "t2", _message("m2", "bob@example.com", "Question"))
    assert make_filter().select_next_thread().id == "t2"
    labeler.apply_decision.assert_not_called()


def test_fetch_failures_skip_the_thread(mail_client, labeler, make_filter):
    _add(mail_client, "t1", _message("m1", "alice@example.com", "Broken"))
    _add(mail_client, "t2", _message("m2", "bob@example.com", "Question"))
    original = mail_client.get_message.side_effect

    def flaky(mid):
        if mid == "m1":
            raise RuntimeError("500")
        return original(mid)

    mail_client.get_message.side_effect = flaky
    assert make_filter().select_next_thread().id == "t2"
    labeler.apply_decision.assert_not_called()


def test_scan_archives_every_ineligible_thread_before_the_match(mail_client, labeler, make_filter):
    _add(mail_client, "t1", _message("m1", "noreply@a.com", "A"))
    _add(mail_client, "t2", _message("m2", "support@merr.example", "B"))
    _add(mail_client, "t3", _message("m3", "x@y.com", "C", labels=["L_HIGH"]))
    _add(mail_client, "t4", _message("m4", "real@person.com", "D"))
    _add(mail_client, "t5", _message("m5", "later@person.com", "E"))
    thread_filter = make_filter()
    assert thread_filter.select_next_thread().id == "t4"
    assert labeler.apply_decision.call_args_list == [
        call("t1", LabelType.OTHER),
        call("t2", LabelType.OTHER),
        call("t3", LabelType.NONE),
    ]
    assert thread_filter.archived == 3
    assert "t5" not in [c.args[0] for c in mail_client.get_thread.call_args_list]


def test_no_host_address_disables_self_sent_check(mail_client, labeler, make_filter):
    _add(mail_client, "t1", _message("m1", "support@merr.example", "Hello"))
    assert make_filter(host="").select_next_thread().id == "t1"
