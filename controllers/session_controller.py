"""Session lifecycle helpers for the capture, review and submit workflow."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, UploadFile

from controllers.admin_controller import build_registrar
from controllers.match_controller import build_orchestrator
from models.errors import InvalidTransition
from models.session_models import MatchSession, SessionEvent, SessionMode
from services.session_store import SessionStore
from utils.media_validation import candidate_from_capture, read_image_upload

LOGGER = logging.getLogger(__name__)


def _store(request: Request) -> SessionStore:
	return request.app.state.session_store


def _apply(request: Request, session_id: str, event: SessionEvent, **payload: Any) -> MatchSession:
	try:
		return _store(request).apply(session_id, event, **payload)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail="Session not found") from exc
	except InvalidTransition as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc


async def start_session(request: Request, mode: SessionMode) -> Dict[str, Any]:
	"""Create a new idle session and return its snapshot."""
	return _store(request).create(mode=mode).to_dict()


async def get_session(request: Request, session_id: str) -> Dict[str, Any]:
	try:
		return _store(request).get(session_id).to_dict()
	except KeyError as exc:
		raise HTTPException(status_code=404, detail="Session not found") from exc


async def end_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Forget a session and release its candidate image."""
	if not _store(request).discard(session_id):
		raise HTTPException(status_code=404, detail="Session not found")
	return {"session_id": session_id, "deleted": True}


async def send_event(request: Request, session_id: str, event: SessionEvent) -> Dict[str, Any]:
	"""Apply a payload-free event such as START_CAMERA, CANCEL, TOGGLE_MODE or RESET."""
	return _apply(request, session_id, event).to_dict()


async def provide_upload(request: Request, session_id: str, image: UploadFile) -> Dict[str, Any]:
	"""Attach an uploaded image to the session for review."""
	candidate = await read_image_upload(image)
	return _apply(request, session_id, SessionEvent.PROVIDE_IMAGE, candidate=candidate).to_dict()


async def provide_capture(request: Request, session_id: str, data_uri: str, name: Optional[str] = None) -> Dict[str, Any]:
	"""Attach a camera capture to the session for review."""
	candidate = candidate_from_capture(data_uri, name)
	return _apply(request, session_id, SessionEvent.PROVIDE_IMAGE, candidate=candidate).to_dict()


async def submit(
	request: Request,
	session_id: str,
	name: Optional[str] = None,
	location: Optional[str] = None,
	description: Optional[str] = None,
) -> Dict[str, Any]:
	"""Run the match (search mode) or the registration (admin mode) for the reviewed image.

	The session moves to SUBMITTING before any collaborator call, so a second
	submit for the same session is rejected with 409 until this one resolves.
	"""
	session = _apply(request, session_id, SessionEvent.SUBMIT)
	candidate = session.candidate
	try:
		if session.mode is SessionMode.ADMIN:
			registration = await build_registrar(request).register_item(
				candidate, name or "", location or "", description or ""
			)
			resolved = _apply(request, session_id, SessionEvent.RESOLVE, registration=registration)
		else:
			result = await build_orchestrator(request).find_match(candidate)
			resolved = _apply(request, session_id, SessionEvent.RESOLVE, result=result)
	except Exception:
		LOGGER.warning("Submit failed for session %s; returning to review", session_id)
		_apply(request, session_id, SessionEvent.FAIL)
		raise
	return resolved.to_dict()
