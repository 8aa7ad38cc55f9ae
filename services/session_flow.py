"""Pure transition function for the capture, review and submit workflow."""

from __future__ import annotations

from typing import Optional

from models.errors import InvalidTransition
from models.match_models import CandidateImage, MatchResult, RegistrationResult
from models.session_models import MatchSession, SessionEvent, SessionMode, SessionPhase

_ALLOWED = {
	SessionEvent.START_CAMERA: {SessionPhase.IDLE, SessionPhase.RESOLVED},
	SessionEvent.CANCEL: {SessionPhase.CAPTURE_PENDING},
	SessionEvent.PROVIDE_IMAGE: {
		SessionPhase.IDLE,
		SessionPhase.CAPTURE_PENDING,
		SessionPhase.REVIEWING,
		SessionPhase.RESOLVED,
	},
	SessionEvent.SUBMIT: {SessionPhase.REVIEWING},
	SessionEvent.RESOLVE: {SessionPhase.SUBMITTING},
	SessionEvent.FAIL: {SessionPhase.SUBMITTING},
	SessionEvent.TOGGLE_MODE: {
		SessionPhase.IDLE,
		SessionPhase.CAPTURE_PENDING,
		SessionPhase.REVIEWING,
		SessionPhase.RESOLVED,
	},
	SessionEvent.RESET: {
		SessionPhase.IDLE,
		SessionPhase.CAPTURE_PENDING,
		SessionPhase.REVIEWING,
		SessionPhase.RESOLVED,
	},
}


def advance(
	session: MatchSession,
	event: SessionEvent,
	*,
	candidate: Optional[CandidateImage] = None,
	result: Optional[MatchResult] = None,
	registration: Optional[RegistrationResult] = None,
) -> MatchSession:
	"""Return the session snapshot after `event`.

	Raises:
		InvalidTransition: If `event` is not allowed in the current phase.
		ValueError: If an event is missing the payload it needs.
	"""
	if session.phase not in _ALLOWED[event]:
		raise InvalidTransition(session.phase, event)

	if event is SessionEvent.START_CAMERA:
		return session.evolve(phase=SessionPhase.CAPTURE_PENDING, candidate=None, result=None, registration=None)
	if event is SessionEvent.CANCEL or event is SessionEvent.RESET:
		return session.evolve(phase=SessionPhase.IDLE, candidate=None, result=None, registration=None)
	if event is SessionEvent.PROVIDE_IMAGE:
		if candidate is None:
			raise ValueError("An image is required to review.")
		return session.evolve(phase=SessionPhase.REVIEWING, candidate=candidate, result=None, registration=None)
	if event is SessionEvent.SUBMIT:
		return session.evolve(phase=SessionPhase.SUBMITTING)
	if event is SessionEvent.FAIL:
		return session.evolve(phase=SessionPhase.REVIEWING)
	if event is SessionEvent.RESOLVE:
		if result is None and registration is None:
			raise ValueError("A match or registration result is required to resolve.")
		return session.evolve(phase=SessionPhase.RESOLVED, candidate=None, result=result, registration=registration)

	# TOGGLE_MODE
	mode = SessionMode.ADMIN if session.mode is SessionMode.SEARCH else SessionMode.SEARCH
	return session.evolve(mode=mode, phase=SessionPhase.IDLE, candidate=None, result=None, registration=None)
