"""Unit tests for upload and capture validation."""

import base64
import unittest
from datetime import datetime, timezone

from models.errors import ValidationError
from utils.media_validation import (
    candidate_from_bytes,
    candidate_from_capture,
    capture_name,
    decode_data_uri,
    normalize_image_type,
    safe_filename,
)


class TestNormalizeImageType(unittest.TestCase):
    def test_accepts_jpeg_and_png(self):
        self.assertEqual(normalize_image_type("image/jpeg"), "image/jpeg")
        self.assertEqual(normalize_image_type("IMAGE/PNG; charset=binary"), "image/png")
        self.assertEqual(normalize_image_type("image/jpg"), "image/jpeg")

    def test_rejects_other_types(self):
        for mime in ("image/gif", "image/webp", "application/pdf", "text/plain"):
            with self.assertRaises(ValidationError):
                normalize_image_type(mime)

    def test_falls_back_to_extension(self):
        self.assertEqual(normalize_image_type(None, "photo.JPEG"), "image/jpeg")
        with self.assertRaises(ValidationError):
            normalize_image_type(None, "photo.heic")

    def test_declared_type_wins_over_extension(self):
        with self.assertRaises(ValidationError):
            normalize_image_type("image/gif", "photo.png")


class TestSafeFilename(unittest.TestCase):
    def test_strips_directories(self):
        self.assertEqual(safe_filename("../../etc/passwd.png"), "passwd.png")
        self.assertEqual(safe_filename("C:\\Users\\me\\wallet.jpg"), "wallet.jpg")

    def test_replaces_unsafe_characters(self):
        self.assertEqual(safe_filename("blue*backpack?.jpg"), "blue_backpack_.jpg")

    def test_empty_name_is_rejected(self):
        with self.assertRaises(ValueError):
            safe_filename("")
        with self.assertRaises(ValueError):
            safe_filename("..")


class TestCaptures(unittest.TestCase):
    def test_capture_name(self):
        now = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
        self.assertEqual(capture_name("image/png", now), "capture-20240501T123045123456.png")

    def test_decode_data_uri(self):
        uri = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
        self.assertEqual(decode_data_uri(uri), (b"\x89PNG", "image/png"))

    def test_decode_rejects_wrong_type(self):
        uri = "data:image/gif;base64," + base64.b64encode(b"GIF").decode()
        with self.assertRaises(ValidationError):
            decode_data_uri(uri)

    def test_decode_rejects_malformed(self):
        for uri in ("not a uri", "data:image/png;base64,!!!", "data:image/png;base64,"):
            with self.assertRaises(ValueError):
                decode_data_uri(uri)

    def test_capture_gets_generated_name(self):
        uri = "data:image/png;base64," + base64.b64encode(b"png").decode()
        candidate = candidate_from_capture(uri)
        self.assertTrue(candidate.name.startswith("capture-"))
        self.assertTrue(candidate.name.endswith(".png"))
        self.assertEqual(candidate.upload_key, f"user-uploads/{candidate.name}")

    def test_capture_keeps_supplied_name(self):
        uri = "data:image/jpeg;base64," + base64.b64encode(b"jpg").decode()
        self.assertEqual(candidate_from_capture(uri, "desk.jpg").name, "desk.jpg")


class TestCandidateFromBytes(unittest.TestCase):
    def test_builds_candidate(self):
        candidate = candidate_from_bytes(b"data", "image/jpeg", "wallet.jpg")
        self.assertEqual(candidate.mime_type, "image/jpeg")
        self.assertEqual(candidate.admin_key, "admin/wallet.jpg")

    def test_empty_upload_rejected(self):
        with self.assertRaises(ValueError):
            candidate_from_bytes(b"", "image/jpeg", "wallet.jpg")


if __name__ == "__main__":
    unittest.main()
