"""Persistent human corrections for text detection.

Every image that was annotated gets one TrainingData record, keyed by the
hash of its bytes. The whole collection lives as a single JSON array under
one key of a KeyValueStore. Later detections on the same image are improved
with the user-drawn rectangles.

Examples
--------
    store = TrainingStore(FileKeyValueStore("~/.label_vision"))
    store.save(session.to_training_data(dimensions))

    improved = store.improve(annotations, image_hash)
    print(store.stats())
"""

import json
import logging
import threading
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Any, List, Optional

from ..exceptions import TrainingDataError
from ..types import TrainingData, TrainingStats, TextRegionAnnotation
from ..utils.config import load_config, get_config_value
from ..utils.geometry import iou
from .storage import KeyValueStore, InMemoryKeyValueStore

logger = logging.getLogger(__name__)

EXPORT_FILENAME_PREFIX = "label-vision-training"


def export_filename(today: Optional[date] = None) -> str:
    """Suggested file name for an export, e.g. label-vision-training-2024-05-01.json."""
    today = today or datetime.now(timezone.utc).date()
    return f"{EXPORT_FILENAME_PREFIX}-{today.isoformat()}.json"


def _newest_first(records: List[TrainingData]) -> List[TrainingData]:
    # ties on created_at go to the most recently inserted record
    ordered = sorted(enumerate(records), key=lambda item: (item[1].created, item[0]), reverse=True)
    return [record for _, record in ordered]


class TrainingStore:
    """
    Thread-safe collection of TrainingData records.

    Every operation that reads and rewrites the stored array holds one
    re-entrant lock, so concurrent saves and imports do not lose updates.
    """

    def __init__(self, storage: Optional[KeyValueStore] = None,
                 config: Optional[Dict[str, Any]] = None):
        """
        Args:
            storage: Backend holding the JSON array; in-memory when omitted
            config: Full configuration dictionary; packaged defaults when omitted
        """
        self.storage = storage if storage is not None else InMemoryKeyValueStore()
        self.config = config if config is not None else load_config()
        self._lock = threading.RLock()

        self.storage_key = get_config_value(self.config, 'training.storage_key', 'text_training')
        self.max_records = int(get_config_value(self.config, 'training.max_records', 100))
        self.overlap_threshold = get_config_value(self.config, 'training.overlap_threshold', 0.3)
        self.matched_confidence_floor = get_config_value(
            self.config, 'training.matched_confidence_floor', 0.8)
        self.new_region_confidence = get_config_value(self.config, 'training.new_region_confidence', 0.9)
        self.retention_days = get_config_value(self.config, 'training.retention_days', 30)
        self.recent_activity_days = get_config_value(self.config, 'training.recent_activity_days', 7)

    # Storage helpers

    def _load(self) -> List[TrainingData]:
        try:
            raw = self.storage.get(self.storage_key)
            if not raw:
                return []
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise TrainingDataError(f"Stored training data must be a list, got {type(payload).__name__}")
            return [TrainingData.from_dict(item) for item in payload]
        except (OSError, ValueError, TrainingDataError) as e:
            logger.error(f"Stored training data is unreadable or corrupt, treating store as empty: {e}")
            return []

    def _write(self, records: List[TrainingData]) -> None:
        self.storage.set(self.storage_key, json.dumps([r.to_dict() for r in records]))

    def _bounded(self, records: List[TrainingData]) -> List[TrainingData]:
        if len(records) <= self.max_records:
            return records
        logger.info(f"Training data exceeds {self.max_records} records, evicting the oldest")
        return _newest_first(records)[:self.max_records]

    # Public API

    def save(self, data: TrainingData) -> None:
        """Insert or replace the record for ``data.image_hash``."""
        with self._lock:
            records = [r for r in self._load() if r.image_hash != data.image_hash]
            records.append(data)
            self._write(self._bounded(records))
        logger.debug(f"Saved training data for {data.image_hash} "
                     f"({len(data.annotations)} annotations)")

    def get(self, image_hash: str) -> Optional[TrainingData]:
        """Record for an image hash, or None."""
        with self._lock:
            for record in self._load():
                if record.image_hash == image_hash:
                    return record
        return None

    def list_all(self) -> List[TrainingData]:
        with self._lock:
            return self._load()

    def improve(self, regions: List[TextRegionAnnotation], image_hash: str) -> List[TextRegionAnnotation]:
        """
        Apply stored user corrections to detected regions.

        For each user-drawn annotation, the first region overlapping it by
        more than ``overlap_threshold`` IoU takes the user's coordinates and
        at least ``matched_confidence_floor`` confidence. Annotations without
        a match are appended with ``new_region_confidence``. Inputs are not
        modified and the output is never shorter than the input.
        """
        improved = [replace(region) for region in regions]

        record = self.get(image_hash)
        if record is None:
            return improved

        for annotation in record.user_annotations:
            match_index = next(
                (i for i, region in enumerate(improved) if iou(region, annotation) > self.overlap_threshold),
                None,
            )
            if match_index is not None:
                region = improved[match_index]
                improved[match_index] = replace(
                    region,
                    x=annotation.x,
                    y=annotation.y,
                    width=annotation.width,
                    height=annotation.height,
                    confidence=max(region.confidence, self.matched_confidence_floor),
                )
            else:
                improved.append(replace(annotation, confidence=self.new_region_confidence))

        logger.debug(f"Improved {len(regions)} regions to {len(improved)} using stored corrections")
        return improved

    def stats(self, now: Optional[datetime] = None) -> TrainingStats:
        """Totals, mean feedback ratings and recent activity."""
        now = now or datetime.now(timezone.utc)
        recent_cutoff = now - timedelta(days=self.recent_activity_days)
        records = self.list_all()

        total = len(records)
        quality_sum = sum(r.user_feedback.overall_quality for r in records if r.user_feedback)
        accuracy_sum = sum(r.user_feedback.detection_accuracy for r in records if r.user_feedback)

        return TrainingStats(
            total_images=total,
            total_annotations=sum(len(r.annotations) for r in records),
            average_quality=quality_sum / total if total else 0.0,
            average_accuracy=accuracy_sum / total if total else 0.0,
            recent_activity_count=sum(1 for r in records if r.created > recent_cutoff),
        )

    def clean_older_than(self, days: Optional[float] = None, now: Optional[datetime] = None) -> int:
        """Remove records created more than ``days`` ago; returns how many were removed."""
        days = self.retention_days if days is None else days
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=days)

        with self._lock:
            records = self._load()
            kept = [r for r in records if r.created >= cutoff]
            removed = len(records) - len(kept)
            if removed:
                self._write(kept)

        if removed:
            logger.info(f"Removed {removed} training records older than {days} days")
        return removed

    def export_all(self) -> str:
        """All records as an indented JSON array."""
        return json.dumps([r.to_dict() for r in self.list_all()], indent=2)

    def import_all(self, text: str) -> bool:
        """
        Merge records from a JSON export.

        Every record is validated before anything is written; a malformed
        payload returns False and leaves the store unchanged. Incoming records
        replace existing ones with the same hash.
        """
        try:
            payload = json.loads(text)
            if not isinstance(payload, list):
                raise TrainingDataError(f"Import must be a JSON array, got {type(payload).__name__}")
            incoming = [TrainingData.from_dict(item) for item in payload]
        except (ValueError, TypeError, TrainingDataError) as e:
            logger.error(f"Failed to import training data: {e}")
            return False

        with self._lock:
            merged = self._load()
            positions = {r.image_hash: i for i, r in enumerate(merged)}
            for record in incoming:
                if record.image_hash in positions:
                    merged[positions[record.image_hash]] = record
                else:
                    positions[record.image_hash] = len(merged)
                    merged.append(record)
            self._write(self._bounded(merged))

        logger.info(f"Imported {len(incoming)} training records")
        return True

    def clear(self) -> None:
        """Delete every stored record."""
        with self._lock:
            self.storage.delete(self.storage_key)


__all__ = ['TrainingStore', 'export_filename', 'EXPORT_FILENAME_PREFIX']
