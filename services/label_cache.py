"""In-memory label cache placed in front of a label detector."""

from __future__ import annotations

import logging
from typing import Dict, List, Protocol, Tuple

from models.match_models import ADMIN_PREFIX

LOGGER = logging.getLogger(__name__)


class SupportsDetectLabels(Protocol):
    async def detect_labels(
        self, bucket: str, key: str, max_labels: int = 10, min_confidence: float = 70.0
    ) -> List[str]: ...


class LabelCache:
    """Remember successful label sets per (bucket, key, max_labels, min_confidence).

    Entries must be invalidated when the image under a key is replaced.
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str, int, float], List[str]] = {}

    def get(self, bucket: str, key: str, max_labels: int, min_confidence: float) -> List[str] | None:
        labels = self._entries.get((bucket, key, max_labels, min_confidence))
        return list(labels) if labels is not None else None

    def put(self, bucket: str, key: str, max_labels: int, min_confidence: float, labels: List[str]) -> None:
        self._entries[(bucket, key, max_labels, min_confidence)] = list(labels)

    def invalidate(self, bucket: str, key: str) -> int:
        """Drop every entry for `bucket/key`. Returns the number of entries removed."""
        stale = [entry for entry in self._entries if entry[0] == bucket and entry[1] == key]
        for entry in stale:
            del self._entries[entry]
        if stale:
            LOGGER.info("Invalidated %d cached label set(s) for %s/%s", len(stale), bucket, key)
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


class CachingLabelDetector:
    """Label detector wrapper that serves repeated reference requests from a `LabelCache`.

    Only reference images under `admin/` are cached; registration invalidates
    them when their image is replaced. Candidate uploads are labeled on every
    request because a new upload may reuse an earlier filename. Failures are
    not cached, so a key that failed once is asked again next time.
    """

    def __init__(self, detector: SupportsDetectLabels, cache: LabelCache) -> None:
        self.detector = detector
        self.cache = cache

    async def detect_labels(
        self, bucket: str, key: str, max_labels: int = 10, min_confidence: float = 70.0
    ) -> List[str]:
        if not key.startswith(ADMIN_PREFIX):
            return await self.detector.detect_labels(bucket, key, max_labels, min_confidence)
        cached = self.cache.get(bucket, key, max_labels, min_confidence)
        if cached is not None:
            LOGGER.debug("Label cache hit for %s/%s", bucket, key)
            return cached
        labels = await self.detector.detect_labels(bucket, key, max_labels, min_confidence)
        self.cache.put(bucket, key, max_labels, min_confidence, labels)
        return labels
