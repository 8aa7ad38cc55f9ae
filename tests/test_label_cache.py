"""Unit tests for the label cache."""

import unittest

from models.errors import LabelRequestError
from models.item_record import ItemRecord
from models.match_models import CandidateImage, MatchStatus
from services.label_cache import CachingLabelDetector, LabelCache
from services.match_orchestrator import MatchOrchestrator
from tests.fakes import FakeDetector, FakeItems, FakeStore


class TestCachingLabelDetector(unittest.IsolatedAsyncioTestCase):
    async def test_repeated_requests_hit_cache(self):
        inner = FakeDetector({"admin/a.jpg": ["Bag"]})
        detector = CachingLabelDetector(inner, LabelCache())
        self.assertEqual(await detector.detect_labels("b", "admin/a.jpg"), ["Bag"])
        self.assertEqual(await detector.detect_labels("b", "admin/a.jpg"), ["Bag"])
        self.assertEqual(inner.calls, ["admin/a.jpg"])

    async def test_invalidation_forces_relabel(self):
        inner = FakeDetector({"admin/a.jpg": ["Bag"]})
        cache = LabelCache()
        detector = CachingLabelDetector(inner, cache)
        await detector.detect_labels("b", "admin/a.jpg")
        self.assertEqual(cache.invalidate("b", "admin/a.jpg"), 1)
        await detector.detect_labels("b", "admin/a.jpg")
        self.assertEqual(inner.calls, ["admin/a.jpg", "admin/a.jpg"])

    async def test_failures_are_not_cached(self):
        inner = FakeDetector({"admin/a.jpg": LabelRequestError("down")})
        cache = LabelCache()
        detector = CachingLabelDetector(inner, cache)
        with self.assertRaises(LabelRequestError):
            await detector.detect_labels("b", "admin/a.jpg")
        self.assertEqual(len(cache), 0)

    async def test_entries_are_per_threshold(self):
        inner = FakeDetector({"admin/a.jpg": ["Bag"]})
        detector = CachingLabelDetector(inner, LabelCache())
        await detector.detect_labels("b", "admin/a.jpg", 10, 70.0)
        await detector.detect_labels("b", "admin/a.jpg", 3, 70.0)
        self.assertEqual(len(inner.calls), 2)


    async def test_candidate_uploads_are_never_cached(self):
        inner = FakeDetector({"user-uploads/photo.jpg": ["Phone"]})
        cache = LabelCache()
        detector = CachingLabelDetector(inner, cache)
        self.assertEqual(await detector.detect_labels("b", "user-uploads/photo.jpg"), ["Phone"])
        inner.labels["user-uploads/photo.jpg"] = ["Wallet"]
        self.assertEqual(await detector.detect_labels("b", "user-uploads/photo.jpg"), ["Wallet"])
        self.assertEqual(len(cache), 0)


class TestCachedMatching(unittest.IsolatedAsyncioTestCase):
    async def test_reused_candidate_filename_is_relabeled(self):
        store = FakeStore()
        store.objects["admin/wallet.jpg"] = b"w"
        items = FakeItems({"wallet.jpg": ItemRecord("wallet.jpg", "Wallet", "Library", "")})
        inner = FakeDetector({"admin/wallet.jpg": ["Wallet"], "user-uploads/photo.jpg": ["Phone"]})
        cache = LabelCache()
        orchestrator = MatchOrchestrator(store, CachingLabelDetector(inner, cache), items, "b")

        first = await orchestrator.find_match(CandidateImage(data=b"1", mime_type="image/jpeg", name="photo.jpg"))
        inner.labels["user-uploads/photo.jpg"] = ["Wallet"]
        second = await orchestrator.find_match(CandidateImage(data=b"2", mime_type="image/jpeg", name="photo.jpg"))

        self.assertEqual(first.status, MatchStatus.NO_MATCH)
        self.assertEqual(second.status, MatchStatus.MATCH)
        self.assertEqual(second.candidate_labels, ["Wallet"])
        self.assertEqual(inner.calls.count("admin/wallet.jpg"), 1)
        self.assertEqual(len(cache), 1)


if __name__ == "__main__":
    unittest.main()
