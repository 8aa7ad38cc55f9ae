from typing import Any, Dict, Optional

from fastapi import Request, UploadFile

from dal.item_dal import ItemDAL
from models.match_models import CandidateImage
from services.match_orchestrator import MatchOrchestrator
from utils.media_validation import candidate_from_capture, read_image_upload


def build_orchestrator(request: Request) -> MatchOrchestrator:
    """Assemble a MatchOrchestrator from the shared clients on `app.state`."""
    state = request.app.state
    settings = state.settings
    return MatchOrchestrator(
        store=state.object_store,
        detector=state.label_detector,
        items=ItemDAL(state.db_initializer),
        bucket=settings.storage_bucket,
        max_labels=settings.label_max,
        min_confidence=settings.label_min_confidence,
        abort_on_upload_failure=settings.abort_on_upload_failure,
    )


async def run_match(request: Request, candidate: CandidateImage) -> Dict[str, Any]:
    """Run one match attempt and return the serialized result."""
    result = await build_orchestrator(request).find_match(candidate)
    return result.to_dict()


async def match_upload(request: Request, image: UploadFile) -> Dict[str, Any]:
    """Validate an uploaded image and search the catalog for it.

    Raises:
        ValidationError: If the upload is not a JPEG or PNG image.
        ValueError: If the upload is empty or has no usable filename.
    """
    candidate = await read_image_upload(image)
    return await run_match(request, candidate)


async def match_capture(request: Request, data_uri: str, name: Optional[str] = None) -> Dict[str, Any]:
    """Decode a camera capture data URI and search the catalog for it."""
    candidate = candidate_from_capture(data_uri, name)
    return await run_match(request, candidate)
