"""Thread filter - finds the next inbox thread worth matching.

Threads that should not be matched are archived on the way:

- first message already carries a triage label -> archived, no label
- sent by the host mailbox itself -> archived as Other
- sent from a no-reply style address -> archived as Other

Only one eligible thread is returned per call, which keeps Gmail quota use
per cycle bounded.
"""
import html
import logging

from inbox_triage.gmail_client import header_value
from inbox_triage.models import EmailThread, LabelType
from inbox_triage.utils import is_no_reply_sender, parse_email_address

logger = logging.getLogger("inbox_triage.thread_filter")

DEFAULT_SUBJECT = "No Subject"
DEFAULT_SENDER = "Unknown Sender"


class ThreadFilter:
    def __init__(self, mail_client, registry, labeler, host_address: str):
        self.client = mail_client
        self.registry = registry
        self.labeler = labeler
        self.host_address = parse_email_address(host_address) if host_address else ""
        self.archived = 0

    def select_next_thread(self) -> EmailThread | None:
        try:
            threads = self.client.list_inbox_threads()
        except Exception as e:
            logger.error(f"Gmail API error while listing inbox threads: {e}")
            return None
        if not threads:
            return None

        for summary in threads:
            thread_id = summary.get("id")
            if not thread_id:
                continue
            first_message = self._first_message(thread_id)
            if first_message is None:
                continue
            email = self._screen(thread_id, first_message)
            if email is not None:
                return email
        return None

    def _first_message(self, thread_id: str) -> dict | None:
        try:
            detail = self.client.get_thread(thread_id)
        except Exception as e:
            logger.warning(f"Failed to retrieve thread {thread_id}: {e}. Skipping...")
            return None
        messages = detail.get("messages") or []
        if not messages:
            logger.warning(f"Thread {thread_id} has no messages. Skipping...")
            return None
        try:
            message = self.client.get_message(messages[0]["id"])
        except Exception as e:
            logger.warning(f"Failed to retrieve first email for thread {thread_id}: {e}. Skipping...")
            return None
        if not message:
            logger.warning(f"First email for thread {thread_id} came back empty. Skipping...")
            return None
        return message

    def _screen(self, thread_id: str, message: dict) -> EmailThread | None:
        if any(self.registry.is_triage_label(label) for label in message.get("labelIds") or []):
            logger.info(f"First email for thread {thread_id} is already analyzed. Archiving...")
            self._archive(thread_id, LabelType.NONE)
            return None

        sender = header_value(message, "From") or DEFAULT_SENDER
        sender_address = parse_email_address(sender)
        if self.host_address and sender_address == self.host_address:
            logger.info(f"Host is the first sender for thread {thread_id}. Archiving...")
            self._archive(thread_id, LabelType.OTHER)
            return None

        if is_no_reply_sender(sender):
            logger.info(f"The sender {sender_address} on thread {thread_id} is a 'no-reply'. Archiving...")
            self._archive(thread_id, LabelType.OTHER)
            return None

        subject = header_value(message, "Subject") or DEFAULT_SUBJECT
        body = html.unescape(message.get("snippet") or "")
        email = EmailThread(id=thread_id, subject=subject, body=body, sender=sender)
        logger.info(f"Email found: {email.id} | {email.subject} | {email.sender}")
        return email

    def _archive(self, thread_id: str, label_type: LabelType) -> None:
        if self.labeler.apply_decision(thread_id, label_type):
            self.archived += 1
