"""Unit tests for the local object store."""

import os
import shutil
import tempfile
import time
import unittest

from services.object_store import LocalObjectStore, ObjectStoreError


class TestLocalObjectStore(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.store = LocalObjectStore(self.tmpdir, region="eu-test", public_base_url="https://lost.example/")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    async def test_put_then_read(self):
        path = await self.store.put("bucket", "admin/wallet.jpg", b"data", "image/jpeg")
        self.assertTrue(path.endswith(os.path.join("eu-test", "bucket", "admin", "wallet.jpg")))
        self.assertEqual(await self.store.read("bucket", "admin/wallet.jpg"), b"data")
        self.assertEqual(await self.store.content_type("bucket", "admin/wallet.jpg"), "image/jpeg")

    async def test_list_is_sorted_and_prefix_filtered(self):
        for key in ("admin/b.jpg", "user-uploads/x.png", "admin/a.jpg", "admin/sub/c.jpg"):
            await self.store.put("bucket", key, b"x", "image/jpeg")
        self.assertEqual(
            await self.store.list("bucket", "admin/"),
            ["admin/a.jpg", "admin/b.jpg", "admin/sub/c.jpg"],
        )

    async def test_list_of_missing_bucket_is_empty(self):
        self.assertEqual(await self.store.list("nothing", "admin/"), [])

    async def test_metadata_sidecars_are_not_listed(self):
        await self.store.put("bucket", "admin/a.jpg", b"x", "image/jpeg")
        self.assertEqual(await self.store.list("bucket"), ["admin/a.jpg"])

    async def test_read_missing_raises(self):
        with self.assertRaises(ObjectStoreError):
            await self.store.read("bucket", "admin/none.jpg")

    async def test_rejects_traversal_keys(self):
        for key in ("../escape.jpg", "/abs.jpg", "admin//x.jpg", ""):
            with self.assertRaises(ObjectStoreError):
                await self.store.put("bucket", key, b"x", "image/jpeg")

    async def test_delete(self):
        await self.store.put("bucket", "admin/a.jpg", b"x", "image/jpeg")
        self.assertTrue(await self.store.delete("bucket", "admin/a.jpg"))
        self.assertFalse(await self.store.delete("bucket", "admin/a.jpg"))
        self.assertIsNone(await self.store.content_type("bucket", "admin/a.jpg"))

    async def test_last_modified(self):
        await self.store.put("bucket", "user-uploads/a.jpg", b"x", "image/jpeg")
        self.assertLessEqual(await self.store.last_modified("bucket", "user-uploads/a.jpg"), time.time() + 1)

    def test_public_url_is_deterministic(self):
        url = self.store.public_url("bucket", "admin/blue backpack.jpg")
        self.assertEqual(url, "https://lost.example/storage/eu-test/bucket/admin/blue%20backpack.jpg")
        self.assertEqual(url, self.store.public_url("bucket", "admin/blue backpack.jpg"))


if __name__ == "__main__":
    unittest.main()
