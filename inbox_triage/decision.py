"""Turns triage outcomes into a single Gmail label change per thread."""
import logging

from inbox_triage.models import EmailThread, LabelType, MatchResult
from inbox_triage.priority import classify_priority

logger = logging.getLogger("inbox_triage.decision")


def decide_label(thread: EmailThread, match: MatchResult, vip_senders: list[str] | None = None) -> LabelType:
    """Unmatched threads are archived silently; matched ones get a priority."""
    if not match.matched:
        return LabelType.NONE
    return classify_priority(thread, vip_senders)


class Labeler:
    def __init__(self, mail_client, registry):
        self.client = mail_client
        self.registry = registry

    def apply_decision(self, thread_id: str, label_type: LabelType) -> bool:
        """Archive the thread and attach the label for ``label_type``.

        A label that cannot be resolved degrades to archive-only. Provider
        failures are logged and reported as False; nothing is retried.
        """
        label_id = None
        if label_type is not LabelType.NONE:
            label_id = self.registry.label_id(label_type)
            if label_id is None:
                logger.warning(
                    f"No label id for {label_type.name}; archiving thread {thread_id} without a label"
                )
        try:
            response = self.client.modify_thread_labels(thread_id, add_label_id=label_id)
        except Exception as e:
            logger.error(f"Failed to move thread {thread_id}: {e}")
            return False
        if response is None:
            logger.warning(f"Failed to move thread {thread_id}")
            return False
        logger.info(f"Thread {thread_id} moved successfully ({label_type.name}).")
        return True
