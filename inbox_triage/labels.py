"""Triage labels: names, colors and the cached LabelType <-> Gmail id mapping."""
import logging
import threading

from inbox_triage.errors import InitializationError, TriageError
from inbox_triage.models import LabelType

logger = logging.getLogger("inbox_triage.labels")

LABEL_NAMES = {
    LabelType.HIGH: "High Priority",
    LabelType.LOW: "Low Priority",
    LabelType.OTHER: "Other",
}

# (background, text)
LABEL_COLORS = {
    LabelType.HIGH: ("#fb4c2f", "#ffffff"),
    LabelType.LOW: ("#16a766", "#ffffff"),
    LabelType.OTHER: ("#285bac", "#ffffff"),
}


class LabelRegistry:
    """Resolves triage labels to Gmail label ids once and caches them.

    ``initialize`` is the only writer and runs under a lock; lookups after
    that read an immutable snapshot.
    """

    def __init__(self, mail_client, prefix: str = ""):
        self.client = mail_client
        self.prefix = prefix
        self._lock = threading.Lock()
        self._ids: dict[LabelType, str] = {}
        self._types: dict[str, LabelType] = {}

    def label_name(self, label_type: LabelType) -> str | None:
        name = LABEL_NAMES.get(label_type)
        if name is None:
            return None
        return f"{self.prefix}{name}"

    @property
    def initialized(self) -> bool:
        return len(self._ids) == len(LABEL_NAMES)

    def initialize(self) -> None:
        """Create any missing triage labels and cache all three ids."""
        with self._lock:
            try:
                existing = {label["name"]: label["id"] for label in self.client.list_labels()}
                ids = {}
                for label_type in LABEL_NAMES:
                    name = self.label_name(label_type)
                    if name in existing:
                        logger.info(f"Label '{name}' already exists. Skipping...")
                        ids[label_type] = existing[name]
                        continue
                    background, text = LABEL_COLORS[label_type]
                    created = self.client.create_label(name, background, text)
                    if not created or not created.get("id"):
                        raise InitializationError(f"Gmail did not return an id for label '{name}'")
                    logger.info(f"Label created: {name} (id={created['id']}, background={background})")
                    ids[label_type] = created["id"]
            except InitializationError:
                raise
            except TriageError as e:
                raise InitializationError(f"Could not set up triage labels: {e}") from e
            self._ids = ids
            self._types = {label_id: label_type for label_type, label_id in ids.items()}

    def label_id(self, label_type: LabelType) -> str | None:
        return self._ids.get(label_type)

    def label_type(self, label_id: str) -> LabelType | None:
        return self._types.get(label_id)

    def is_triage_label(self, label_id: str) -> bool:
        return label_id in self._types
