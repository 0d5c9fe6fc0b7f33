import json
import logging
from datetime import datetime, timezone
from email.utils import parseaddr
from pathlib import Path


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure and return the application logger."""
    logger = logging.getLogger("inbox_triage")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def log_action(
    logs_dir: Path,
    thread_id: str,
    action: str,
    label: str,
    score: float | None = None,
) -> None:
    """Append a triage decision to the daily JSON audit file."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    log_file = logs_dir / f"{today}.json"

    entries = []
    if log_file.exists():
        try:
            entries = json.loads(log_file.read_text())
        except ValueError:
            logging.getLogger("inbox_triage.audit").warning(f"Audit file {log_file} is corrupt; starting a new list")
        if not isinstance(entries, list):
            entries = []

    entries.append({
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "thread_id": thread_id,
        "action": action,
        "label": label,
        "score": score,
    })
    log_file.write_text(json.dumps(entries, indent=2))


def parse_email_address(sender: str) -> str:
    """Extract the bare, lower-cased address from a From header value.

    "Jane Doe <Jane@Example.com>" -> "jane@example.com". Falls back to the
    stripped header when no address can be parsed.
    """
    _, address = parseaddr(sender or "")
    return (address or sender or "").strip().lower()


def is_no_reply_sender(sender: str) -> bool:
    """Heuristic no-reply detection: "no" and "reply" both appear anywhere."""
    lowered = (sender or "").lower()
    return "no" in lowered and "reply" in lowered
