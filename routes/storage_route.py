from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from models.match_models import ADMIN_PREFIX
from services.object_store import ObjectStoreError

router = APIRouter()


@router.get("/storage/{region}/{bucket}/{key:path}", include_in_schema=False)
async def get_stored_object(request: Request, region: str, bucket: str, key: str):
    """Serve a reference image so public item URLs resolve. Candidate uploads stay private."""
    store = request.app.state.object_store
    if region != store.region or not key.startswith(ADMIN_PREFIX):
        raise HTTPException(status_code=404, detail="Object not found")
    try:
        data = await store.read(bucket, key)
    except ObjectStoreError as exc:
        raise HTTPException(status_code=404, detail="Object not found") from exc
    content_type = await store.content_type(bucket, key) or "application/octet-stream"
    return Response(content=data, media_type=content_type)
