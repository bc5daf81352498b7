#!/usr/bin/env python3
"""
Test 6: Edges and Region Finder
Tests Sobel magnitude, block scanning and region merging
"""

import numpy as np
import pytest

from label_vision.preprocessing.edge_detector import sobel_magnitude
from label_vision.preprocessing.region_finder import RegionFinder
from label_vision.types import TextRegion


class TestEdgeDetector:

    def test_uniform_image_has_no_edges(self):
        assert not sobel_magnitude(np.full((20, 20), 0.3)).any()

    def test_vertical_step(self):
        gray = np.zeros((10, 10))
        gray[:, 5:] = 1.0

        edges = sobel_magnitude(gray)

        # columns 4 and 5 straddle the step: |gx| = 4
        assert edges[5, 4] == pytest.approx(4.0)
        assert edges[5, 5] == pytest.approx(4.0)
        assert edges[5, 2] == 0.0
        assert edges[5, 7] == 0.0

    def test_border_pixels_are_zero(self):
        rng = np.random.default_rng(3)
        edges = sobel_magnitude(rng.random((12, 15)))

        assert not edges[0, :].any()
        assert not edges[-1, :].any()
        assert not edges[:, 0].any()
        assert not edges[:, -1].any()

    def test_tiny_image(self):
        assert sobel_magnitude(np.ones((2, 2))).shape == (2, 2)


class TestRegionFinder:

    def setup_method(self):
        self.finder = RegionFinder({})

    def test_single_dense_block(self):
        edges = np.zeros((100, 100))
        edges[20:40, 20:40] = 0.5

        candidates = self.finder.find_candidate_blocks(edges)

        assert len(candidates) == 1
        block = candidates[0]
        assert (block.x, block.y, block.width, block.height) == (20, 20, 20, 20)
        assert block.confidence == pytest.approx(0.5)
        assert block.estimated_char_count == 40

    def test_lone_block_is_too_small(self):
        edges = np.zeros((100, 100))
        edges[20:40, 20:40] = 0.5
        # 20x20 = 400 px, which is not above the minimum area
        assert self.finder.find_regions(edges) == []

    def test_confidence_is_capped(self):
        edges = np.zeros((60, 60))
        edges[0:20, 0:20] = 3.0
        assert self.finder.find_candidate_blocks(edges)[0].confidence == 1.0

    def test_sparse_block_rejected(self):
        edges = np.zeros((60, 60))
        edges[0, 0:20] = 1.0  # 20 of 400 pixels
        assert self.finder.find_candidate_blocks(edges) == []

    def test_weak_block_rejected(self):
        edges = np.zeros((60, 60))
        edges[0:20, 0:20] = 0.15  # dense but mean strength below 0.2
        assert self.finder.find_candidate_blocks(edges) == []

    def test_trailing_strip_not_scanned(self):
        # origins must be strictly below dimension - block size
        edges = np.full((40, 40), 0.5)
        candidates = self.finder.find_candidate_blocks(edges)
        assert [(c.x, c.y) for c in candidates] == [(0, 0)]

        assert self.finder.find_candidate_blocks(np.full((20, 20), 0.5)) == []

    def test_adjacent_blocks_merge(self):
        edges = np.zeros((100, 100))
        edges[20:40, 20:40] = 0.5
        edges[20:40, 40:60] = 1.0

        regions = self.finder.find_regions(edges)

        assert len(regions) == 1
        region = regions[0]
        assert (region.x, region.y, region.width, region.height) == (20, 20, 40, 20)
        assert region.confidence == pytest.approx(1.0)
        assert region.estimated_char_count == 80

    def test_merge_is_transitive(self):
        chain = [TextRegion(x, 0, 20, 20, confidence=0.1 * (i + 1), estimated_char_count=5)
                 for i, x in enumerate((0, 20, 40))]

        merged = self.finder.merge_regions(chain)

        # (0,0) and (40,0) are 40 px apart but joined through (20,0)
        assert len(merged) == 1
        assert (merged[0].x, merged[0].width, merged[0].height) == (0, 60, 20)
        assert merged[0].confidence == pytest.approx(0.3)
        assert merged[0].estimated_char_count == 15

    def test_distant_groups_stay_apart(self):
        blocks = [
            TextRegion(0, 0, 20, 20, 0.5, 1), TextRegion(20, 0, 20, 20, 0.5, 1),
            TextRegion(200, 200, 20, 20, 0.7, 2), TextRegion(200, 220, 20, 20, 0.7, 2),
        ]

        merged = self.finder.merge_regions(blocks)

        assert [(r.x, r.y, r.width, r.height) for r in merged] == [
            (0, 0, 40, 20), (200, 200, 20, 40),
        ]

    def test_merge_of_nothing(self):
        assert self.finder.merge_regions([]) == []
