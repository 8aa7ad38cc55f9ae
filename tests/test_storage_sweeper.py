"""Unit tests for orphan and stale upload removal."""

import os
import shutil
import tempfile
import time
import unittest

from dal.item_dal import ItemDAL
from models.item_record import ItemRecord
from services.object_store import LocalObjectStore
from utils.database_init import AsyncDatabaseInitializer
from utils.storage_sweeper import StorageSweeper


class TestStorageSweeper(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.store = LocalObjectStore(os.path.join(self.tmpdir, "objects"))
        self.items = ItemDAL(AsyncDatabaseInitializer(self.tmpdir))
        self.sweeper = StorageSweeper(self.store, self.items, "bucket", retention_seconds=60)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    async def test_sweep_orphans_keeps_registered_images(self):
        await self.store.put("bucket", "admin/kept.jpg", b"x", "image/jpeg")
        await self.store.put("bucket", "admin/orphan.jpg", b"x", "image/jpeg")
        await self.items.put_item(ItemRecord("kept.jpg", "Kept", "Desk", ""))

        self.assertEqual(await self.sweeper.sweep_orphans(), 1)
        self.assertEqual(await self.store.list("bucket", "admin/"), ["admin/kept.jpg"])

    async def test_prune_user_uploads_by_age(self):
        await self.store.put("bucket", "user-uploads/old.jpg", b"x", "image/jpeg")
        await self.store.put("bucket", "user-uploads/new.jpg", b"x", "image/jpeg")
        stale = time.time() - 3600
        os.utime(self.store.object_path("bucket", "user-uploads/old.jpg"), (stale, stale))

        self.assertEqual(await self.sweeper.prune_user_uploads(), 1)
        self.assertEqual(await self.store.list("bucket", "user-uploads/"), ["user-uploads/new.jpg"])


if __name__ == "__main__":
    unittest.main()
