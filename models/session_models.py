"""Session domain models for the capture, review and submit workflow."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional

from models.match_models import CandidateImage, MatchResult, RegistrationResult


class SessionPhase(str, Enum):
	IDLE = "idle"
	CAPTURE_PENDING = "capture_pending"
	REVIEWING = "reviewing"
	SUBMITTING = "submitting"
	RESOLVED = "resolved"


class SessionMode(str, Enum):
	SEARCH = "search"
	ADMIN = "admin"


class SessionEvent(str, Enum):
	START_CAMERA = "start_camera"
	CANCEL = "cancel"
	PROVIDE_IMAGE = "provide_image"
	SUBMIT = "submit"
	RESOLVE = "resolve"
	FAIL = "fail"
	TOGGLE_MODE = "toggle_mode"
	RESET = "reset"


@dataclass(frozen=True)
class MatchSession:
	"""Immutable snapshot of one user's workflow; transitions return a new snapshot."""

	session_id: str
	mode: SessionMode = SessionMode.SEARCH
	phase: SessionPhase = SessionPhase.IDLE
	candidate: Optional[CandidateImage] = None
	result: Optional[MatchResult] = None
	registration: Optional[RegistrationResult] = None
	updated_at: float = field(default_factory=lambda: time.time())

	def evolve(self, **changes: Any) -> "MatchSession":
		changes.setdefault("updated_at", time.time())
		return replace(self, **changes)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"session_id": self.session_id,
			"mode": self.mode.value,
			"phase": self.phase.value,
			"candidate": (
				{"name": self.candidate.name, "mime_type": self.candidate.mime_type, "size": len(self.candidate.data)}
				if self.candidate
				else None
			),
			"result": self.result.to_dict() if self.result else None,
			"registration": self.registration.to_dict() if self.registration else None,
		}
