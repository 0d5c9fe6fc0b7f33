"""Selects the canned response that best matches a thread."""
import logging
import math
from typing import Callable, Iterable

from inbox_triage.models import EmailContext, EmailThread, MatchResult

logger = logging.getLogger("inbox_triage.matcher")

Similarity = Callable[[str, str], float]


def find_best_reply(
    thread: EmailThread,
    contexts: Iterable[EmailContext],
    similarity: Similarity,
    threshold: float,
) -> MatchResult:
    """Return the best context's response and its score.

    Both the thread subject and the thread body are compared against each
    context's subject; the higher of the two is that context's score. The
    earliest context holding the maximum wins. The reply is only returned
    when the maximum is strictly above ``threshold``; the score is always
    returned.
    """
    best_score = 0.0
    reply = None

    for context in contexts:
        subject_score = _safe_score(similarity, thread.subject, context.subject)
        body_score = _safe_score(similarity, thread.body, context.subject)
        score = max(subject_score, body_score)
        logger.debug(
            f"Thread {thread.id} vs '{context.subject}': subject={subject_score:.4f} body={body_score:.4f}"
        )
        if score > best_score:
            best_score = score
            reply = context.response

    if best_score > threshold:
        logger.info(f"Thread {thread.id} matched with score {best_score:.4f}")
        return MatchResult(reply, best_score)

    logger.info(f"No similar email found for thread {thread.id} (best score {best_score:.4f})")
    return MatchResult(None, best_score)


def _safe_score(similarity: Similarity, first: str, second: str) -> float:
    try:
        score = float(similarity(first, second))
    except Exception as e:
        logger.warning(f"Similarity comparison failed, scoring 0.0: {e}")
        return 0.0
    if math.isnan(score):
        return 0.0
    return min(abs(score), 1.0)
