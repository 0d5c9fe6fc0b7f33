"""Priority label selection for threads that matched a canned response."""
import logging

from inbox_triage.models import EmailThread, LabelType
from inbox_triage.utils import parse_email_address

logger = logging.getLogger("inbox_triage.priority")

URGENCY_KEYWORDS = ["urgent", "asap", "deadline", "overdue"]

BULK_SENDER_PATTERNS = ["noreply@", "no-reply@", "newsletter@", "notifications@", "mailer-daemon@"]


def classify_priority(thread: EmailThread, vip_senders: list[str] | None = None) -> LabelType:
    """Pick HIGH, LOW or OTHER for a matched thread.

    Rules (evaluated in order):
    - HIGH: urgency keyword in subject/body OR sender in VIP list
    - OTHER: sender matches a bulk/notification pattern
    - LOW: everything else
    """
    subject_lower = thread.subject.lower()
    body_lower = thread.body.lower()

    for keyword in URGENCY_KEYWORDS:
        if keyword in subject_lower or keyword in body_lower:
            return LabelType.HIGH

    address = parse_email_address(thread.sender)
    if vip_senders:
        for vip in vip_senders:
            if vip.strip().lower() == address:
                return LabelType.HIGH

    for pattern in BULK_SENDER_PATTERNS:
        if pattern in address:
            return LabelType.OTHER

    return LabelType.LOW
