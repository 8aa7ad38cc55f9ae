"""Helpers to remove orphaned reference images and stale candidate uploads."""

import asyncio
import logging
import time

from dal.item_dal import ItemDAL
from models.match_models import ADMIN_PREFIX, USER_UPLOAD_PREFIX
from services.match_orchestrator import item_id_for_key
from services.object_store import LocalObjectStore

LOGGER = logging.getLogger(__name__)


class StorageSweeper:
    """Delete reference images without item records and candidate uploads past retention."""

    def __init__(
        self,
        store: LocalObjectStore,
        items: ItemDAL,
        bucket: str,
        retention_seconds: int = 86_400,
    ) -> None:
        """
        Args:
            store: Object store holding reference images and candidate uploads.
            items: Item DAL used to decide which reference images are orphans.
            bucket: Bucket to sweep.
            retention_seconds: Age threshold in seconds for candidate uploads.
        """
        self.store = store
        self.items = items
        self.bucket = bucket
        self.retention_seconds = retention_seconds

    async def sweep_orphans(self) -> int:
        """Delete `admin/` objects that have no item record and return the count removed."""
        known = set(await self.items.list_item_ids())
        removed = 0
        for key in await self.store.list(self.bucket, ADMIN_PREFIX):
            if item_id_for_key(key) in known:
                continue
            if await self.store.delete(self.bucket, key):
                LOGGER.info("Removed orphaned reference image %s/%s", self.bucket, key)
                removed += 1
        return removed

    async def prune_user_uploads(self) -> int:
        """Delete candidate uploads older than the retention window and return count removed."""
        cutoff = time.time() - self.retention_seconds
        removed = 0
        for key in await self.store.list(self.bucket, USER_UPLOAD_PREFIX):
            if await self.store.last_modified(self.bucket, key) < cutoff:
                if await self.store.delete(self.bucket, key):
                    removed += 1
        if removed:
            LOGGER.info("Pruned %d candidate upload(s) older than %ss", removed, self.retention_seconds)
        return removed

    async def run_periodic_cleanup(self, interval_seconds: int = 3_600) -> None:
        """
        Repeatedly sweep orphans and prune uploads at the given interval until cancelled.

        Args:
            interval_seconds: Seconds to sleep between cleanup runs.
        """
        while True:
            try:
                await self.sweep_orphans()
                await self.prune_user_uploads()
                await asyncio.sleep(interval_seconds)
            except asyncio.CancelledError:
                break
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception("Storage sweep failed; retrying in %ss", interval_seconds)
                await asyncio.sleep(interval_seconds)
