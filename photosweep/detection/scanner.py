"""
Bounded-neighborhood similarity scan for burst and similar shots
"""

import logging
from typing import Collection, List, Optional, Sequence

from ..config import DetectionSettings
from .models import PhotoCategory, PhotoMetadata

logger = logging.getLogger(__name__)


class SimilarityScanner:
    """
    Finds visually close photos (by metadata proxy) among time neighbors.

    Photos are put in creation-time order before scanning, whatever order
    the caller supplied, and each photo is only compared against the
    `window_radius` photos on either side of it in that order. Per-photo
    cost is constant, so a full scan stays linear in the library size.
    """

    def __init__(self,
                 photos: Sequence[PhotoMetadata],
                 settings: Optional[DetectionSettings] = None):
        """
        Initialize similarity scanner

        Args:
            photos: Photos in input order
            settings: Detection settings
        """
        self.photos = list(photos)
        self.settings = settings or DetectionSettings()

        # Stable on ties so equal timestamps keep input order
        self._order: List[int] = sorted(
            range(len(self.photos)),
            key=lambda i: (self.photos[i].creation_time, i)
        )
        self._rank: List[int] = [0] * len(self.photos)
        for rank, index in enumerate(self._order):
            self._rank[index] = rank

    def is_similar(self, photo: PhotoMetadata, other: PhotoMetadata) -> bool:
        """
        Check whether two photos look like shots of the same moment

        Same dimensions, file sizes within max(ratio * size, floor) bytes,
        and capture times closer than the time threshold.
        """
        if photo.width != other.width or photo.height != other.height:
            return False

        size_tolerance = max(photo.size * self.settings.similar_size_ratio,
                             self.settings.similar_size_floor_bytes)
        if abs(photo.size - other.size) >= size_tolerance:
            return False

        return abs(photo.creation_time - other.creation_time) < self.settings.similar_time_threshold_ms

    def similar_for(self, index: int, exclude_ids: Collection[str] = ()) -> List[int]:
        """
        Find similar neighbors of one photo

        Args:
            index: Position of the photo in input order
            exclude_ids: Ids never reported as similar (e.g. its duplicates)

        Returns:
            Input positions of up to `max_similar` similar photos
        """
        photo = self.photos[index]
        rank = self._rank[index]
        radius = self.settings.window_radius
        start = max(0, rank - radius)
        end = min(len(self._order), rank + radius + 1)

        similar = []
        for neighbor_rank in range(start, end):
            if len(similar) >= self.settings.max_similar:
                break
            other_index = self._order[neighbor_rank]
            if other_index == index:
                continue
            other = self.photos[other_index]
            if other.id in exclude_ids:
                continue
            if self.is_similar(photo, other):
                similar.append(other_index)

        return similar

    def classify(self, similar_count: int) -> Optional[PhotoCategory]:
        """BURST above the burst threshold, SIMILAR for fewer, None for zero."""
        if similar_count <= 0:
            return None
        if similar_count > self.settings.burst_min_neighbors:
            return PhotoCategory.BURST
        return PhotoCategory.SIMILAR
