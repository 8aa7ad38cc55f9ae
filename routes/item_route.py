"""FastAPI routes for registering and reading catalog items."""

import logging

from fastapi import APIRouter, File, Form, HTTPException, Query, Request, UploadFile

from controllers.admin_controller import get_item, list_items, register_upload
from models.errors import ValidationError

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["items"])


@router.post("/admin/items", summary="Register a found item with its reference image")
async def post_item(
    request: Request,
    image: UploadFile = File(...),
    name: str = Form(...),
    location: str = Form(...),
    description: str = Form(""),
):
    """Store the reference image under admin/<filename> and write its item record."""
    try:
        return await register_upload(request, image, name, location, description)
    except HTTPException:
        raise
    except ValidationError as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.exception("Item registration failed")
        raise HTTPException(status_code=500, detail="Failed to register item.") from exc


@router.get("/items")
async def get_items(request: Request, limit: int = Query(100, ge=1, le=500), offset: int = Query(0, ge=0)):
    """List registered items, newest first."""
    try:
        return await list_items(request, limit=limit, offset=offset)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/items/{item_id}")
async def get_item_route(request: Request, item_id: str):
    """Return the record for one item id."""
    try:
        return await get_item(request, item_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
