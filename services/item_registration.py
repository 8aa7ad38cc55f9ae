"""Register a reference image and its item record."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from dal.item_dal import ItemDAL
from models.errors import ValidationError
from models.item_record import ItemRecord
from models.match_models import CandidateImage, RegistrationResult
from services.label_cache import LabelCache
from services.match_orchestrator import item_id_for_key
from services.object_store import LocalObjectStore
from utils.media_validation import ALLOWED_IMAGE_TYPES, safe_filename

LOGGER = logging.getLogger(__name__)


class ItemRegistrar:
    """Store a reference image under `admin/<filename>` and write its item record.

    Both writes are best-effort. When the record write fails after the image
    was stored, the image is deleted again so it cannot be matched without
    details; if that delete also fails the orphan is left for the storage sweeper.
    """

    def __init__(
        self,
        store: LocalObjectStore,
        items: ItemDAL,
        bucket: str,
        label_cache: Optional[LabelCache] = None,
    ) -> None:
        self.store = store
        self.items = items
        self.bucket = bucket
        self.label_cache = label_cache

    async def register_item(self, image: CandidateImage, name: str, location: str, description: str) -> RegistrationResult:
        """Persist `image` plus an item record keyed by its filename.

        Raises:
            ValidationError: If the image is not JPEG or PNG.
            ValueError: If the name or location is blank or the filename is unusable.
        """
        if image.mime_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(f"Unsupported image content type: {image.mime_type}")
        if not name or not name.strip():
            raise ValueError("Item name is required.")
        if not location or not location.strip():
            raise ValueError("Item location is required.")

        image = replace(image, name=safe_filename(image.name))
        key = image.admin_key
        item_id = item_id_for_key(key)

        try:
            await self.store.put(self.bucket, key, image.data, image.mime_type)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Failed to store reference image %s/%s", self.bucket, key)
            return RegistrationResult(ok=False, item_id=item_id, failed_step="image")

        if self.label_cache is not None:
            self.label_cache.invalidate(self.bucket, key)

        image_url = self.store.public_url(self.bucket, key)
        record = ItemRecord(
            item_id=item_id,
            name=name,
            location=location,
            description=description or "",
            image_url=image_url,
        )

        try:
            overwritten = await self.items.put_item(record)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Failed to write item record %s; removing stored image", item_id)
            await self._discard_image(key)
            return RegistrationResult(ok=False, item_id=item_id, image_url=image_url, failed_step="metadata")

        if overwritten:
            LOGGER.warning("Item %s already existed and was overwritten", item_id)
        LOGGER.info("Registered item %s (%s) at %s", item_id, record.name, image_url)
        return RegistrationResult(ok=True, item_id=item_id, image_url=image_url, overwritten=overwritten)

    async def _discard_image(self, key: str) -> None:
        try:
            await self.store.delete(self.bucket, key)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Could not remove orphaned reference image %s/%s", self.bucket, key)
