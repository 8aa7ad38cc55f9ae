"""FastAPI routes for matching an uploaded or captured image against the catalog."""

import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.match_controller import match_capture, match_upload
from models.errors import ValidationError

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/match", tags=["match"])


class CapturePayload(BaseModel):
    data_uri: str
    name: Optional[str] = None


@router.post("", summary="Find the catalog item matching an uploaded image")
async def post_match(request: Request, image: UploadFile = File(...)):
    """Store the upload, label it and return the first matching item, if any."""
    try:
        return await match_upload(request, image)
    except HTTPException:
        raise
    except ValidationError as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Match request failed")
        raise HTTPException(status_code=500, detail="Failed to search for a match.") from exc


@router.post("/capture", summary="Find the catalog item matching a camera capture")
async def post_match_capture(request: Request, payload: CapturePayload):
    """Same as POST /api/match, for a base64 data URI exported from a camera frame."""
    try:
        return await match_capture(request, payload.data_uri, payload.name)
    except HTTPException:
        raise
    except ValidationError as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Capture match request failed")
        raise HTTPException(status_code=500, detail="Failed to search for a match.") from exc
