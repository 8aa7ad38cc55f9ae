"""Match a candidate image against administrator-registered reference images.

The orchestrator runs strictly sequentially: store the candidate, label it,
list the reference images, then label each reference in listing order and stop
at the first one sharing at least one label with the candidate. Labels are
compared as exact, case-sensitive strings; a single shared label is a match.

Collaborator failures never escape `find_match`: a failed upload is logged,
a failed labeling call contributes an empty label set, a failed listing is
treated as an empty catalog and a failed record lookup as a missing record.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Iterable, List, Optional

from dal.item_dal import ItemDAL
from models.errors import LabelFormatError, LabelRequestError, ValidationError
from models.item_record import ItemRecord
from models.match_models import (
    ADMIN_PREFIX,
    CandidateImage,
    LabelErrorKind,
    LabelOutcome,
    MatchReason,
    MatchResult,
    MatchStatus,
)
from services.label_cache import SupportsDetectLabels
from services.object_store import LocalObjectStore
from utils.media_validation import ALLOWED_IMAGE_TYPES

LOGGER = logging.getLogger(__name__)


def shared_labels(candidate: Iterable[str], reference: Iterable[str]) -> List[str]:
    """Labels present in both sets, in the candidate's order."""
    reference_set = set(reference)
    seen: List[str] = []
    for label in candidate:
        if label in reference_set and label not in seen:
            seen.append(label)
    return seen


def intersects(candidate: Iterable[str], reference: Iterable[str]) -> bool:
    return not set(candidate).isdisjoint(reference)


def item_id_for_key(key: str) -> str:
    """Item records are keyed by the reference image's basename."""
    return PurePosixPath(key).name


class MatchOrchestrator:
    """Sequence storage, labeling and metadata lookups for one match attempt."""

    def __init__(
        self,
        store: LocalObjectStore,
        detector: SupportsDetectLabels,
        items: ItemDAL,
        bucket: str,
        *,
        max_labels: int = 10,
        min_confidence: float = 70.0,
        abort_on_upload_failure: bool = False,
    ) -> None:
        self.store = store
        self.detector = detector
        self.items = items
        self.bucket = bucket
        self.max_labels = max_labels
        self.min_confidence = min_confidence
        self.abort_on_upload_failure = abort_on_upload_failure

    async def labels_of(self, key: str) -> LabelOutcome:
        """Label the image stored under `key`, converting failures into a tagged outcome."""
        try:
            labels = await self.detector.detect_labels(
                self.bucket, key, max_labels=self.max_labels, min_confidence=self.min_confidence
            )
        except LabelFormatError as exc:
            LOGGER.warning("Image format not supported for labeling %s: %s", key, exc)
            return LabelOutcome.failure(LabelErrorKind.FORMAT)
        except LabelRequestError as exc:
            LOGGER.warning("Labeling request failed for %s: %s", key, exc)
            return LabelOutcome.failure(LabelErrorKind.REQUEST)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Label detector unavailable for %s", key)
            return LabelOutcome.failure(LabelErrorKind.UNAVAILABLE)
        return LabelOutcome.success(labels)

    async def find_match(self, candidate: CandidateImage) -> MatchResult:
        """Return the first reference item sharing a label with `candidate`, or NO_MATCH.

        Raises:
            ValidationError: If the candidate is not a JPEG or PNG image.
        """
        if candidate.mime_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(f"Unsupported image content type: {candidate.mime_type}")

        key = candidate.upload_key
        try:
            await self.store.put(self.bucket, key, candidate.data, candidate.mime_type)
            LOGGER.info("Stored candidate image %s/%s", self.bucket, key)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Failed to store candidate image %s/%s", self.bucket, key)
            if self.abort_on_upload_failure:
                return MatchResult.no_match(MatchReason.UPLOAD_FAILED)

        candidate_outcome = await self.labels_of(key)
        candidate_labels = candidate_outcome.labels
        LOGGER.info("Candidate %s labels: %s", key, candidate_labels)

        reference_keys = await self._reference_keys()
        if not reference_keys:
            LOGGER.info("No reference images registered; nothing to compare %s against", key)
            return MatchResult.no_match(MatchReason.NO_REFERENCES, candidate_labels)

        for reference_key in reference_keys:
            reference_labels = (await self.labels_of(reference_key)).labels
            if not intersects(candidate_labels, reference_labels):
                continue

            common = shared_labels(candidate_labels, reference_labels)
            LOGGER.info("Candidate %s matches %s on %s", key, reference_key, common)
            record = await self._lookup(item_id_for_key(reference_key))
            return MatchResult(
                status=MatchStatus.MATCH,
                record=record,
                reference_key=reference_key,
                shared_labels=common,
                candidate_labels=candidate_labels,
                reason=None if record else MatchReason.MISSING_RECORD,
            )

        LOGGER.info("Compared %s against %d reference image(s); no shared labels", key, len(reference_keys))
        return MatchResult.no_match(MatchReason.NO_INTERSECTION, candidate_labels)

    async def _reference_keys(self) -> List[str]:
        try:
            return await self.store.list(self.bucket, ADMIN_PREFIX)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Failed to list reference images under %s", ADMIN_PREFIX)
            return []

    async def _lookup(self, item_id: str) -> Optional[ItemRecord]:
        try:
            record = await self.items.get_item(item_id)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Item lookup failed for %s", item_id)
            return None
        if record is None:
            LOGGER.warning("Matched reference %s has no item record", item_id)
        return record
