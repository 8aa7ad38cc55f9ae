"""Simple in-memory store for match sessions."""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional
from uuid import uuid4

from models.session_models import MatchSession, SessionEvent, SessionMode, SessionPhase
from services.session_flow import advance

LOGGER = logging.getLogger(__name__)


class SessionStore:
	"""Keep the latest snapshot of each session and apply transitions to it.

	Sessions untouched for `ttl_seconds` are dropped whenever a new session is
	created; a TTL of 0 keeps them until they are discarded explicitly.
	"""

	def __init__(self, ttl_seconds: float = 3_600) -> None:
		self._sessions: Dict[str, MatchSession] = {}
		self.ttl_seconds = ttl_seconds

	def create(self, mode: SessionMode = SessionMode.SEARCH) -> MatchSession:
		"""Create a new idle session in the requested mode."""
		self.expire_stale()
		session = MatchSession(session_id=uuid4().hex, mode=mode)
		self._sessions[session.session_id] = session
		return session

	def get(self, session_id: str) -> MatchSession:
		"""Return a session or raise KeyError if missing."""
		session = self._sessions.get(session_id)
		if session is None:
			raise KeyError(f"Session {session_id} not found")
		return session

	def apply(self, session_id: str, event: SessionEvent, **payload) -> MatchSession:
		"""Advance a session and store the new snapshot.

		The phase check and the store happen without an intervening await, so two
		concurrent submits for the same session cannot both pass the check.
		"""
		session = advance(self.get(session_id), event, **payload)
		self._sessions[session_id] = session
		return session

	def discard(self, session_id: str) -> bool:
		"""Forget a session. Returns True if it existed."""
		return self._sessions.pop(session_id, None) is not None

	def expire_stale(self, now: Optional[float] = None) -> int:
		"""Drop sessions idle for longer than the TTL and return how many were removed.

		Sessions in SUBMITTING are kept so an in-flight submit can still resolve.
		"""
		if self.ttl_seconds <= 0:
			return 0
		cutoff = (now if now is not None else time.time()) - self.ttl_seconds
		stale = [
			sid
			for sid, session in self._sessions.items()
			if session.updated_at < cutoff and session.phase is not SessionPhase.SUBMITTING
		]
		for sid in stale:
			del self._sessions[sid]
		if stale:
			LOGGER.info("Expired %d idle session(s)", len(stale))
		return len(stale)

	def __len__(self) -> int:
		return len(self._sessions)
