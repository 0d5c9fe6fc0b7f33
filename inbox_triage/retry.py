"""Gmail error classification and exponential backoff for provider calls."""
import time
import logging
from functools import wraps

from googleapiclient.errors import HttpError

from inbox_triage.errors import PermanentError, TransientError

logger = logging.getLogger("inbox_triage.retry")

TRANSIENT_STATUSES = {408, 429, 500, 502, 503, 504}


def classify_http_error(error: HttpError) -> Exception:
    """Turn a Gmail HttpError into a TransientError or PermanentError."""
    status = getattr(error.resp, "status", None)
    try:
        status = int(status)
    except (TypeError, ValueError):
        status = None
    message = f"Gmail API returned {status}: {error}"
    if status in TRANSIENT_STATUSES:
        return TransientError(message)
    return PermanentError(message)


def with_retry(max_attempts=3, base_delay=1, max_delay=30):
    """Retry the wrapped call on TransientError with exponential backoff.

    PermanentError propagates on the first occurrence. After the last
    attempt the final TransientError is re-raised.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except TransientError as e:
                    if attempt == max_attempts:
                        logger.error("%s failed after %d attempts: %s", func.__name__, attempt, e)
                        raise
                    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
                    logger.warning(
                        "Attempt %d/%d for %s failed: %s. Retrying in %.1fs...",
                        attempt, max_attempts, func.__name__, e, delay,
                    )
                    time.sleep(delay)
        return wrapper
    return decorator
