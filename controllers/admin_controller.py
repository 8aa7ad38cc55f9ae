from typing import Any, Dict, List

from fastapi import HTTPException, Request, UploadFile

from dal.item_dal import ItemDAL
from models.match_models import CandidateImage
from services.item_registration import ItemRegistrar
from utils.media_validation import read_image_upload


def build_registrar(request: Request) -> ItemRegistrar:
    """Assemble an ItemRegistrar from the shared clients on `app.state`."""
    state = request.app.state
    return ItemRegistrar(
        store=state.object_store,
        items=ItemDAL(state.db_initializer),
        bucket=state.settings.storage_bucket,
        label_cache=getattr(state, "label_cache", None),
    )


async def register_candidate(
    request: Request, image: CandidateImage, name: str, location: str, description: str
) -> Dict[str, Any]:
    """Register an already-validated image; a failed write becomes a generic 500."""
    result = await build_registrar(request).register_item(image, name, location, description)
    if not result.ok:
        raise HTTPException(status_code=500, detail="Failed to register item.")
    return result.to_dict()


async def register_upload(
    request: Request, image: UploadFile, name: str, location: str, description: str
) -> Dict[str, Any]:
    """Controller for the admin registration form.

    Args:
        request: FastAPI Request (used to access app.state for shared clients).
        image: Uploaded reference image (JPEG or PNG).
        name: Item name shown to users on a match.
        location: Where the item can be collected.
        description: Free-form description of the item.

    Returns:
        The registration result: item id, public image URL and overwrite flag.

    Raises:
        ValidationError: If the upload is not a JPEG or PNG image.
        HTTPException(500): If the image or record could not be written.
    """
    candidate = await read_image_upload(image)
    return await register_candidate(request, candidate, name, location, description)


async def list_items(request: Request, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
    records = await ItemDAL(request.app.state.db_initializer).list_items(limit=limit, offset=offset)
    return [record.to_dict() for record in records]


async def get_item(request: Request, item_id: str) -> Dict[str, Any]:
    """Return one item record.

    Raises:
        HTTPException(404) if no record exists for `item_id`.
    """
    record = await ItemDAL(request.app.state.db_initializer).get_item(item_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return record.to_dict()
