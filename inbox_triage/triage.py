"""Triage engine - one filter -> match -> label -> reply cycle per call.

Usage:
    engine = TriageEngine.from_config(cfg, mail_client, scorer, contexts)
    engine.initialize()
    result = engine.run_once()
"""
import logging
from pathlib import Path

from inbox_triage.decision import Labeler, decide_label
from inbox_triage.errors import InitializationError
from inbox_triage.labels import LabelRegistry
from inbox_triage.matcher import find_best_reply
from inbox_triage.models import LabelType
from inbox_triage.thread_filter import ThreadFilter
from inbox_triage.utils import log_action

logger = logging.getLogger("inbox_triage.triage")


class TriageEngine:
    def __init__(self, mail_client, scorer, contexts, acceptance_score: float = 0.8,
                 host_address: str = "", label_prefix: str = "", auto_reply: bool = True,
                 vip_senders: list[str] | None = None, log_dir: Path | None = None):
        self.client = mail_client
        self.scorer = scorer
        self.contexts = contexts
        self.acceptance_score = acceptance_score
        self.auto_reply = auto_reply
        self.vip_senders = vip_senders or []
        self.log_dir = log_dir
        self.registry = LabelRegistry(mail_client, prefix=label_prefix)
        self.labeler = Labeler(mail_client, self.registry)
        self.thread_filter = ThreadFilter(mail_client, self.registry, self.labeler, host_address)
        self._ready = False

    @classmethod
    def from_config(cls, cfg, mail_client, scorer, contexts) -> "TriageEngine":
        return cls(
            mail_client=mail_client,
            scorer=scorer,
            contexts=contexts,
            acceptance_score=cfg.acceptance_score,
            host_address=cfg.host_address,
            label_prefix=cfg.label_prefix,
            auto_reply=cfg.auto_reply,
            vip_senders=cfg.vip_senders,
            log_dir=cfg.log_dir,
        )

    def initialize(self) -> None:
        """Set up triage labels and verify the similarity scorer.

        Raises InitializationError; the engine refuses to triage until this
        has succeeded.
        """
        logger.info("Creating required labels...")
        try:
            self.registry.initialize()
        except InitializationError:
            raise
        except Exception as e:
            raise InitializationError(f"Error creating required labels: {e}") from e
        self.scorer.self_check()
        self._ready = True
        logger.info(f"Triage engine ready ({len(self.contexts)} context(s))")

    def run_once(self) -> dict:
        if not self._ready:
            raise InitializationError("TriageEngine.initialize() must succeed before run_once()")

        archived_before = self.thread_filter.archived
        results = {
            "threads_archived": 0,
            "threads_triaged": 0,
            "replies_sent": 0,
            "thread_id": None,
            "label": None,
            "score": None,
        }

        thread = self.thread_filter.select_next_thread()
        results["threads_archived"] = self.thread_filter.archived - archived_before
        if thread is None:
            return results

        match = find_best_reply(thread, self.contexts, self.scorer.similarity, self.acceptance_score)
        label_type = decide_label(thread, match, self.vip_senders)

        # Reply only once the thread has left the inbox.
        if not self.labeler.apply_decision(thread.id, label_type):
            logger.warning(f"Thread {thread.id} could not be labeled; no reply sent")
        else:
            results["threads_triaged"] = 1
            if match.matched and self.auto_reply and self._send_reply(thread, match.reply):
                results["replies_sent"] = 1

        results.update(thread_id=thread.id, label=label_type.name, score=match.score)
        self._audit(thread.id, label_type, match.score, results["replies_sent"])
        return results

    def _send_reply(self, thread, reply: str) -> bool:
        try:
            self.client.send_reply(thread.id, thread.sender, thread.subject, reply)
        except Exception as e:
            logger.error(f"Failed to send canned reply on thread {thread.id}: {e}")
            return False
        return True

    def _audit(self, thread_id: str, label_type: LabelType, score: float, replied: int) -> None:
        if self.log_dir is None:
            return
        action = "replied" if replied else "archived"
        try:
            log_action(self.log_dir, thread_id=thread_id, action=action, label=label_type.name, score=score)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not write audit entry for thread {thread_id}: {e}")
