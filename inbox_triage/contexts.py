"""Canned-response knowledge base loaded from a YAML file.

Expected layout::

    - subject: Opening hours
      body: When are you open?
      response: We are open 9-5, Monday to Friday.
"""
import logging
from pathlib import Path

import yaml

from inbox_triage.errors import ContextLoadError
from inbox_triage.models import EmailContext

logger = logging.getLogger("inbox_triage.contexts")


class ContextRepository:
    """Read-only, ordered collection of EmailContext records."""

    def __init__(self, contexts):
        self._contexts = tuple(contexts)

    def __iter__(self):
        return iter(self._contexts)

    def __len__(self) -> int:
        return len(self._contexts)

    @classmethod
    def from_yaml(cls, path: Path) -> "ContextRepository":
        if not path.exists():
            raise ContextLoadError(f"Knowledge base not found: {path}")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ContextLoadError(f"Could not parse {path}: {e}") from e
        if data is None:
            data = []
        if not isinstance(data, list):
            raise ContextLoadError(f"{path} must contain a list of contexts")
        contexts = [_parse_entry(entry, index, path) for index, entry in enumerate(data)]
        logger.info(f"Loaded {len(contexts)} email context(s) from {path}")
        return cls(contexts)


def _parse_entry(entry, index: int, path: Path) -> EmailContext:
    if not isinstance(entry, dict):
        raise ContextLoadError(f"{path} entry {index} is not a mapping")
    for key in ("subject", "response"):
        if not isinstance(entry.get(key), str) or not entry[key].strip():
            raise ContextLoadError(f"{path} entry {index} is missing '{key}'")
    body = entry.get("body") or ""
    return EmailContext(subject=entry["subject"], body=str(body), response=entry["response"])
