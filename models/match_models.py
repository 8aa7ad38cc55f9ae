"""Domain models for candidate images, label outcomes and match results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from models.item_record import ItemRecord

USER_UPLOAD_PREFIX = "user-uploads/"
ADMIN_PREFIX = "admin/"


@dataclass(frozen=True)
class CandidateImage:
    """Image bytes submitted for a search or a registration."""

    data: bytes
    mime_type: str
    name: str

    @property
    def upload_key(self) -> str:
        return f"{USER_UPLOAD_PREFIX}{self.name}"

    @property
    def admin_key(self) -> str:
        return f"{ADMIN_PREFIX}{self.name}"


class LabelErrorKind(str, Enum):
    FORMAT = "format"
    REQUEST = "request"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class LabelOutcome:
    """Tagged result of a labeling call: labels on success, an error kind otherwise."""

    labels: List[str] = field(default_factory=list)
    error: Optional[LabelErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, labels: List[str]) -> "LabelOutcome":
        return cls(labels=list(labels))

    @classmethod
    def failure(cls, kind: LabelErrorKind) -> "LabelOutcome":
        return cls(labels=[], error=kind)


class MatchStatus(str, Enum):
    MATCH = "match"
    NO_MATCH = "no_match"


class MatchReason(str, Enum):
    NO_REFERENCES = "no_references"
    NO_INTERSECTION = "no_intersection"
    MISSING_RECORD = "missing_record"
    UPLOAD_FAILED = "upload_failed"


@dataclass
class MatchResult:
    """Outcome of one orchestration run. Never persisted."""

    status: MatchStatus
    record: Optional[ItemRecord] = None
    reference_key: Optional[str] = None
    shared_labels: List[str] = field(default_factory=list)
    candidate_labels: List[str] = field(default_factory=list)
    reason: Optional[MatchReason] = None

    @property
    def matched(self) -> bool:
        return self.status is MatchStatus.MATCH

    @classmethod
    def no_match(cls, reason: MatchReason, candidate_labels: Optional[List[str]] = None) -> "MatchResult":
        return cls(status=MatchStatus.NO_MATCH, reason=reason, candidate_labels=list(candidate_labels or []))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "item": self.record.to_dict() if self.record else None,
            "details_available": self.record is not None,
            "reference_key": self.reference_key,
            "shared_labels": self.shared_labels,
            "candidate_labels": self.candidate_labels,
            "reason": self.reason.value if self.reason else None,
        }


@dataclass
class RegistrationResult:
    """Best-effort outcome of registering a reference image and its record."""

    ok: bool
    item_id: str
    image_url: Optional[str] = None
    failed_step: Optional[str] = None
    overwritten: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "item_id": self.item_id,
            "image_url": self.image_url,
            "failed_step": self.failed_step,
            "overwritten": self.overwritten,
        }
