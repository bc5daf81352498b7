# src/label_vision/preprocessing/region_finder.py
"""
Block-based text region finder.

Splits the edge map into fixed-size blocks, keeps blocks dense in strong
edges, then merges nearby blocks into enclosing rectangles and drops
regions that are still too small.
"""

import numpy as np
import logging
from typing import Dict, Any, List

from ..types import TextRegion
from ..utils.config import get_config_value
from ..utils.geometry import enclosing_rect, round_half_up

logger = logging.getLogger(__name__)


class RegionFinder:
    """
    Finds rectangles with a high density of strong edges.
    Coordinates are in the pixel space of the edge map passed in.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config

        self.block_size = int(get_config_value(config, 'text_detection.block_size', 20))
        self.edge_threshold = get_config_value(config, 'text_detection.edge_threshold', 0.1)
        self.min_edge_density = get_config_value(config, 'text_detection.min_edge_density', 0.1)
        self.min_edge_strength = get_config_value(config, 'text_detection.min_edge_strength', 0.2)
        self.chars_per_edge_pixels = get_config_value(config, 'text_detection.chars_per_edge_pixels', 10)
        self.merge_distance = get_config_value(config, 'text_detection.merge_distance', 40)
        self.min_region_area = get_config_value(config, 'text_detection.min_region_area', 400)

    def find_regions(self, edges: np.ndarray) -> List[TextRegion]:
        """Candidate blocks merged into text regions."""
        candidates = self.find_candidate_blocks(edges)
        regions = self.merge_regions(candidates)
        logger.debug(f"Found {len(candidates)} candidate blocks, {len(regions)} regions after merge")
        return regions

    def find_candidate_blocks(self, edges: np.ndarray) -> List[TextRegion]:
        """
        Scan non-overlapping blocks in row-major order.

        Block origins run 0, bs, 2*bs, ... strictly below (dimension - bs), so
        a partial trailing strip is never scanned.
        """
        bs = self.block_size
        height, width = edges.shape
        rows = len(range(0, height - bs, bs))
        cols = len(range(0, width - bs, bs))
        if rows <= 0 or cols <= 0:
            return []

        blocks = edges[:rows * bs, :cols * bs].reshape(rows, bs, cols, bs)
        strong = blocks > self.edge_threshold
        counts = strong.sum(axis=(1, 3))
        strength = np.where(strong, blocks, 0.0).sum(axis=(1, 3))

        density = counts / float(bs * bs)
        mean_strength = np.divide(strength, counts, out=np.zeros_like(strength), where=counts > 0)
        selected = (density > self.min_edge_density) & (mean_strength > self.min_edge_strength)

        candidates = []
        for by, bx in zip(*np.nonzero(selected)):
            candidates.append(TextRegion(
                x=int(bx) * bs,
                y=int(by) * bs,
                width=bs,
                height=bs,
                confidence=min(float(density[by, bx] * mean_strength[by, bx]), 1.0),
                estimated_char_count=round_half_up(counts[by, bx] / self.chars_per_edge_pixels),
            ))
        return candidates

    def merge_regions(self, candidates: List[TextRegion]) -> List[TextRegion]:
        """
        Union candidates whose origins are closer than merge_distance.

        The union is transitive (single linkage), so chains of neighbouring
        blocks collapse into one rectangle. Each group becomes its enclosing
        rectangle with the maximum confidence and the summed character
        estimate. Groups are emitted in order of their first candidate.
        """
        if not candidates:
            return []

        origins = np.array([(c.x, c.y) for c in candidates], dtype=np.float64)
        deltas = origins[:, None, :] - origins[None, :, :]
        close = np.hypot(deltas[..., 0], deltas[..., 1]) < self.merge_distance

        parent = list(range(len(candidates)))

        def find(i: int) -> int:
            while parent[i] != i:
                parent[i] = parent[parent[i]]
                i = parent[i]
            return i

        for i, j in zip(*np.nonzero(np.triu(close, k=1))):
            root_i, root_j = find(int(i)), find(int(j))
            if root_i != root_j:
                parent[max(root_i, root_j)] = min(root_i, root_j)

        groups: Dict[int, List[TextRegion]] = {}
        for index, candidate in enumerate(candidates):
            groups.setdefault(find(index), []).append(candidate)

        merged = []
        for members in groups.values():
            box = enclosing_rect(members)
            region = TextRegion(
                x=box.x,
                y=box.y,
                width=box.width,
                height=box.height,
                confidence=max(m.confidence for m in members),
                estimated_char_count=sum(m.estimated_char_count for m in members),
            )
            if region.area > self.min_region_area:
                merged.append(region)

        return merged


__all__ = ['RegionFinder']
