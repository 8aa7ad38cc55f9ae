"""FastAPI routes for the capture, review and submit workflow."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.session_controller import (
	end_session,
	get_session,
	provide_capture,
	provide_upload,
	send_event,
	start_session,
	submit,
)
from models.errors import ValidationError
from models.session_models import SessionEvent, SessionMode

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


class StartPayload(BaseModel):
	mode: SessionMode = SessionMode.SEARCH


class CapturePayload(BaseModel):
	data_uri: str
	name: Optional[str] = None


def _translate(exc: Exception) -> HTTPException:
	if isinstance(exc, HTTPException):
		return exc
	if isinstance(exc, ValidationError):
		return HTTPException(status_code=415, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=400, detail=str(exc))
	LOGGER.exception("Session request failed", exc_info=exc)
	return HTTPException(status_code=500, detail="Request failed.")


@router.post("")
async def start_session_route(request: Request, payload: Optional[StartPayload] = None):
	try:
		return await start_session(request, (payload or StartPayload()).mode)
	except Exception as exc:
		raise _translate(exc) from exc


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	try:
		return await get_session(request, session_id)
	except Exception as exc:
		raise _translate(exc) from exc


@router.delete("/{session_id}")
async def end_session_route(request: Request, session_id: str):
	try:
		return await end_session(request, session_id)
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/camera")
async def start_camera_route(request: Request, session_id: str):
	try:
		return await send_event(request, session_id, SessionEvent.START_CAMERA)
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/cancel")
async def cancel_route(request: Request, session_id: str):
	try:
		return await send_event(request, session_id, SessionEvent.CANCEL)
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/mode")
async def toggle_mode_route(request: Request, session_id: str):
	try:
		return await send_event(request, session_id, SessionEvent.TOGGLE_MODE)
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/reset")
async def reset_route(request: Request, session_id: str):
	try:
		return await send_event(request, session_id, SessionEvent.RESET)
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/image")
async def image_route(request: Request, session_id: str, image: UploadFile = File(...)):
	try:
		return await provide_upload(request, session_id, image)
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/capture")
async def capture_route(request: Request, session_id: str, payload: CapturePayload):
	try:
		return await provide_capture(request, session_id, payload.data_uri, payload.name)
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/submit")
async def submit_route(
	request: Request,
	session_id: str,
	name: Optional[str] = Form(None),
	location: Optional[str] = Form(None),
	description: Optional[str] = Form(None),
):
	"""Run the match, or in admin mode register the reviewed image with the given details."""
	try:
		return await submit(request, session_id, name, location, description)
	except Exception as exc:
		raise _translate(exc) from exc
