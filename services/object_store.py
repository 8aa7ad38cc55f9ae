"""Local-disk object storage with bucket/key semantics.

Objects live under `<root>/<region>/<bucket>/<key>`; the content type of each
object is kept in a small JSON sidecar under `<root>/<region>/.meta/<bucket>/`
so the bucket directory only ever contains object bytes. Listing returns keys
in lexicographic order, which is stable for a given set of objects.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path, PurePosixPath
from typing import List, Optional
from urllib.parse import quote

import aiofiles

META_DIR = ".meta"


class ObjectStoreError(Exception):
    """Raised when an object cannot be written, read or removed."""


class LocalObjectStore:
    """Bucket/key object store rooted at a local directory.

    Args:
        root: Base directory for all regions and buckets.
        region: Region segment used in object paths and public URLs.
        public_base_url: Base URL the application serves `/storage` under.
    """

    def __init__(self, root: Path | str, region: str = "local", public_base_url: str = "http://localhost:8000") -> None:
        self.root = Path(root).expanduser()
        self.region = region
        self.public_base_url = public_base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _clean_key(key: str) -> PurePosixPath:
        """Reject keys that are empty, absolute or escape the bucket."""
        path = PurePosixPath(key)
        if not key or path.is_absolute() or any(part in ("..", "", ".") for part in key.split("/")):
            raise ObjectStoreError(f"Invalid object key: {key!r}")
        if path.parts[0] == META_DIR:
            raise ObjectStoreError(f"Reserved object key: {key!r}")
        return path

    def bucket_path(self, bucket: str) -> Path:
        if not bucket or "/" in bucket or bucket.startswith("."):
            raise ObjectStoreError(f"Invalid bucket name: {bucket!r}")
        return self.root / self.region / bucket

    def object_path(self, bucket: str, key: str) -> Path:
        return self.bucket_path(bucket).joinpath(*self._clean_key(key).parts)

    def _meta_path(self, bucket: str, key: str) -> Path:
        return self.root / self.region / META_DIR / bucket / (str(self._clean_key(key)) + ".json")

    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        """Write `data` under `bucket/key`, replacing any existing object.

        Returns:
            The filesystem path of the stored object.
        """
        path = self.object_path(bucket, key)
        meta_path = self._meta_path(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
            async with aiofiles.open(meta_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps({"content_type": content_type, "size": len(data)}))
        except OSError as exc:
            raise ObjectStoreError(f"Failed to store {bucket}/{key}") from exc
        return str(path)

    async def read(self, bucket: str, key: str) -> bytes:
        """Return the bytes stored under `bucket/key`."""
        path = self.object_path(bucket, key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError as exc:
            raise ObjectStoreError(f"Object not found: {bucket}/{key}") from exc
        except OSError as exc:
            raise ObjectStoreError(f"Failed to read {bucket}/{key}") from exc

    async def content_type(self, bucket: str, key: str) -> Optional[str]:
        """Return the content type recorded at upload time, if any."""
        meta_path = self._meta_path(bucket, key)
        try:
            async with aiofiles.open(meta_path, "r", encoding="utf-8") as f:
                meta = json.loads(await f.read())
        except (OSError, ValueError):
            return None
        return meta.get("content_type")

    async def list(self, bucket: str, prefix: str = "") -> List[str]:
        """List keys in `bucket` starting with `prefix`, in lexicographic order."""
        base = self.bucket_path(bucket)

        def _walk() -> List[str]:
            if not base.is_dir():
                return []
            keys = []
            for dirpath, _dirnames, filenames in os.walk(base):
                for filename in filenames:
                    rel = Path(dirpath, filename).relative_to(base).as_posix()
                    if rel.startswith(prefix):
                        keys.append(rel)
            return sorted(keys)

        return await asyncio.to_thread(_walk)

    async def last_modified(self, bucket: str, key: str) -> float:
        path = self.object_path(bucket, key)
        try:
            return (await asyncio.to_thread(path.stat)).st_mtime
        except FileNotFoundError as exc:
            raise ObjectStoreError(f"Object not found: {bucket}/{key}") from exc

    async def delete(self, bucket: str, key: str) -> bool:
        """Remove `bucket/key` and its sidecar. Returns True if the object existed."""
        path = self.object_path(bucket, key)
        meta_path = self._meta_path(bucket, key)

        def _remove() -> bool:
            meta_path.unlink(missing_ok=True)
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            return True

        try:
            return await asyncio.to_thread(_remove)
        except OSError as exc:
            raise ObjectStoreError(f"Failed to delete {bucket}/{key}") from exc

    def public_url(self, bucket: str, key: str) -> str:
        """Deterministic, unsigned URL for the object: base/storage/region/bucket/key."""
        self._clean_key(key)
        return f"{self.public_base_url}/storage/{quote(self.region)}/{quote(bucket)}/{quote(key)}"
