"""In-memory stand-ins for the storage, labeling and metadata collaborators."""

import io
from typing import Dict, List, Optional, Union

from PIL import Image

from models.item_record import ItemRecord


def make_image_bytes(fmt: str = "PNG", color: str = "blue", size=(16, 16)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


class FakeStore:
    def __init__(self, fail_put: bool = False, fail_list: bool = False) -> None:
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.fail_put = fail_put
        self.fail_list = fail_list
        self.put_keys: List[str] = []
        self.deleted: List[str] = []
        self.region = "local"

    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        self.put_keys.append(key)
        if self.fail_put:
            raise OSError("disk full")
        self.objects[key] = data
        self.content_types[key] = content_type
        return f"/{bucket}/{key}"

    async def list(self, bucket: str, prefix: str = "") -> List[str]:
        if self.fail_list:
            raise OSError("listing failed")
        return sorted(k for k in self.objects if k.startswith(prefix))

    async def delete(self, bucket: str, key: str) -> bool:
        self.deleted.append(key)
        return self.objects.pop(key, None) is not None

    def public_url(self, bucket: str, key: str) -> str:
        return f"http://test/storage/{self.region}/{bucket}/{key}"


class FakeDetector:
    """Returns canned labels per key, or raises the configured exception."""

    def __init__(self, labels: Optional[Dict[str, Union[List[str], Exception]]] = None) -> None:
        self.labels = labels or {}
        self.calls: List[str] = []

    async def detect_labels(self, bucket: str, key: str, max_labels: int = 10, min_confidence: float = 70.0) -> List[str]:
        self.calls.append(key)
        value = self.labels.get(key, [])
        if isinstance(value, Exception):
            raise value
        return list(value)


class FakeItems:
    def __init__(self, records: Optional[Dict[str, ItemRecord]] = None, fail_put: bool = False) -> None:
        self.records = dict(records or {})
        self.fail_put = fail_put
        self.lookups: List[str] = []

    async def get_item(self, item_id: str) -> Optional[ItemRecord]:
        self.lookups.append(item_id)
        return self.records.get(item_id)

    async def put_item(self, record: ItemRecord) -> bool:
        if self.fail_put:
            raise RuntimeError("database is locked")
        existed = record.item_id in self.records
        self.records[record.item_id] = record
        return existed

    async def list_item_ids(self) -> List[str]:
        return list(self.records)
