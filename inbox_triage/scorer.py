"""Client for the external sentence-similarity scoring service.

The service speaks a minimal protocol over TCP: one connection per
comparison, the request is a UTF-8 JSON object ``{"first": ..., "second": ...}``
and the reply is a single JSON number. The embedding model reports cosine
similarity with an arbitrary sign, so the absolute value is used.
"""
import json
import logging
import math
import socket
import time

from inbox_triage.errors import InitializationError

logger = logging.getLogger("inbox_triage.scorer")

FAILURE_SCORE = 0.0
SELF_CHECK_TEXT = "Inbox Triage"
SELF_CHECK_TOLERANCE = 1e-9
BUFFER_SIZE = 8192


class SimilarityScorer:
    def __init__(self, host: str = "localhost", port: int = 63778, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout

    def similarity(self, first: str, second: str) -> float:
        """Return a score in [0, 1], or 0.0 if the service cannot be used."""
        payload = json.dumps({"first": first, "second": second}).encode("utf-8")
        try:
            raw = self._exchange(payload)
            value = json.loads(raw.decode("utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Similarity request to {self.host}:{self.port} failed: {e}")
            return FAILURE_SCORE
        return _normalize(value)

    __call__ = similarity

    def _exchange(self, payload: bytes) -> bytes:
        """Send the request and read the reply until the server closes.

        ``timeout`` is an overall deadline for the whole exchange, not a
        per-read limit. If the server keeps the connection open, whatever
        was received when the deadline hits is used as long as it parses.
        """
        deadline = time.monotonic() + self.timeout
        with socket.create_connection((self.host, self.port), timeout=self.timeout) as conn:
            conn.sendall(payload)
            received = b""
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    if _is_complete(received):
                        break
                    raise TimeoutError(f"no complete response within {self.timeout}s")
                conn.settimeout(remaining)
                try:
                    chunk = conn.recv(BUFFER_SIZE)
                except socket.timeout:
                    if _is_complete(received):
                        break
                    raise
                if not chunk:
                    break
                received += chunk
        if not received:
            raise ValueError("empty response from similarity service")
        return received

    def self_check(self) -> None:
        """Verify the service scores identical text as 1.0.

        Raises InitializationError when the service is unreachable or
        inconsistent; triage results would be meaningless otherwise.
        """
        score = self.similarity(SELF_CHECK_TEXT, SELF_CHECK_TEXT)
        if abs(score - 1.0) > SELF_CHECK_TOLERANCE:
            raise InitializationError(
                f"Similarity self-check failed: expected 1.0 within {SELF_CHECK_TOLERANCE}, got {score}"
            )
        logger.info("Similarity scorer initialized")


def _is_complete(received: bytes) -> bool:
    try:
        json.loads(received.decode("utf-8"))
    except ValueError:
        return False
    return True


def _normalize(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning(f"Similarity service returned a non-numeric value: {value!r}")
        return FAILURE_SCORE
    score = abs(float(value))
    if math.isnan(score):
        return FAILURE_SCORE
    return min(score, 1.0)
