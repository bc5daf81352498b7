#!/usr/bin/env python3
"""
Test 12: Detection Pipeline
Tests detection combined with stored user corrections
"""

import asyncio
import json

import pytest

from label_vision import TextDetectionPipeline
from label_vision.exceptions import ImageDecodingError, ValidationError
from label_vision.preprocessing.text_detector import LOAD_FAILED, TextDetector
from label_vision.training.hashing import generate_image_hash
from label_vision.training.storage import InMemoryKeyValueStore
from label_vision.training.training_store import TrainingStore
from label_vision.types import BoundingBox, DisplayGeometry, ImageDimensions
from label_vision.utils.geometry import iou

run = asyncio.run

DIMENSIONS = ImageDimensions(400, 300)


class TestPipeline:

    @pytest.fixture(autouse=True)
    def _pipeline(self, config):
        self.config = config
        self.store = TrainingStore(InMemoryKeyValueStore(), config)
        self.pipeline = TextDetectionPipeline(store=self.store, config=config)

    def test_without_training_data(self, striped_png):
        result = run(self.pipeline.analyze(striped_png))
        detection = run(TextDetector(self.config).detect_text(striped_png))

        assert result.image_hash == generate_image_hash(striped_png)
        assert not result.improved
        assert result.detection == detection
        assert [a.id for a in result.annotations] == ["auto_1"]

        annotation = result.annotations[0]
        assert not annotation.user_marked
        assert annotation.image_hash == result.image_hash
        assert (annotation.x, annotation.y, annotation.width, annotation.height) == (100, 100, 200, 100)
        assert result.user_corrections == []

    def test_path_input(self, tmp_path, striped_png):
        path = tmp_path / "label.png"
        path.write_bytes(striped_png)

        result = run(self.pipeline.analyze(path))

        assert result.image_hash == generate_image_hash(striped_png)
        assert result.detection.has_text

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageDecodingError):
            run(self.pipeline.analyze(tmp_path / "missing.png"))

    @pytest.mark.parametrize("bad", [None, 3.5, [1, 2, 3]])
    def test_unsupported_input(self, bad):
        with pytest.raises(ValidationError):
            run(self.pipeline.analyze(bad))

    def test_undecodable_bytes(self):
        result = run(self.pipeline.analyze(b"junk"))

        assert not result.detection.has_text
        assert result.detection.recommendations == [LOAD_FAILED]
        assert result.annotations == []
        assert result.image_hash == generate_image_hash(b"junk")

    def test_unmatched_correction_boosts_confidence(self, striped_png, make_record, make_annotation):
        base = run(self.pipeline.analyze(striped_png)).detection
        image_hash = generate_image_hash(striped_png)
        self.store.save(make_record(image_hash, annotations=[
            make_annotation("user_1", 10, 220, 60, 40, image_hash=image_hash),
        ]))

        result = run(self.pipeline.analyze(striped_png))

        assert result.improved
        assert result.detection.confidence == pytest.approx(min(base.confidence + 0.1, 1.0))
        assert result.detection.has_text
        assert len(result.detection.text_regions) == 2
        assert [a.id for a in result.user_corrections] == ["user_1"]
        assert result.user_corrections[0].confidence == 0.9

    def test_overlapping_correction_adjusts_region(self, striped_png, make_record, make_annotation):
        base = run(self.pipeline.analyze(striped_png)).detection
        image_hash = generate_image_hash(striped_png)
        self.store.save(make_record(image_hash, annotations=[
            make_annotation("user_1", 95, 95, 210, 110, image_hash=image_hash),
        ]))

        result = run(self.pipeline.analyze(striped_png))

        assert not result.improved
        assert result.detection == base
        annotation = result.annotations[0]
        assert annotation.id == "auto_1"
        assert (annotation.x, annotation.y, annotation.width, annotation.height) == (95, 95, 210, 110)

    def test_annotation_round_trip(self, striped_png):
        first = run(self.pipeline.analyze(striped_png))

        session = self.pipeline.start_annotation(first)
        assert [a.id for a in session.detected] == ["auto_1"]

        # image shown at its natural size at the screen origin
        display = DisplayGeometry(0, 0, 400, 300, 400, 300)
        session.add_region(BoundingBox(20, 230, 80, 40), display)
        session.complete(DIMENSIONS)

        second = run(self.pipeline.analyze(striped_png))

        assert second.improved
        assert len(second.annotations) == 2
        drawn = second.user_corrections[0]
        assert iou(drawn, BoundingBox(20, 230, 80, 40)) == pytest.approx(1.0)

    def test_start_annotation_resumes_after_improvement(self, striped_png):
        session = self.pipeline.start_annotation(run(self.pipeline.analyze(striped_png)))
        session.add_region(BoundingBox(20, 230, 80, 40), DisplayGeometry(0, 0, 400, 300, 400, 300))
        session.complete(DIMENSIONS)

        resumed = self.pipeline.start_annotation(run(self.pipeline.analyze(striped_png)))

        assert [a.id for a in resumed.detected] == ["auto_1"]
        assert len(resumed.user_annotations) == 1

    def test_improved_result_is_json_serialisable(self, striped_png, make_record, make_annotation):
        image_hash = generate_image_hash(striped_png)
        self.store.save(make_record(image_hash, annotations=[
            make_annotation("user_1", 10, 220, 60, 40, image_hash=image_hash),
        ]))

        result = run(self.pipeline.analyze(striped_png))

        assert result.improved
        assert type(result.detection.has_text) is bool
        assert type(result.detection.confidence) is float
        payload = json.loads(json.dumps(result.detection.to_dict()))
        assert [region.get("id") for region in payload["textRegions"]] == ["auto_1", "user_1"]
