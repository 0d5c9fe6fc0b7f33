"""Value types passed between the filter, matcher and labeler."""
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


@dataclass(frozen=True)
class EmailThread:
    """First message of an inbox thread, normalized for matching."""
    id: str
    subject: str
    body: str
    sender: str


@dataclass(frozen=True)
class EmailContext:
    """A known question and its canned response."""
    subject: str
    body: str
    response: str


class LabelType(Enum):
    HIGH = "high"
    LOW = "low"
    OTHER = "other"
    NONE = "none"


class MatchResult(NamedTuple):
    reply: str | None
    score: float

    @property
    def matched(self) -> bool:
        return self.reply is not None
