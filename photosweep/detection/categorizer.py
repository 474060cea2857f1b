"""
Rule-based photo categorization
"""

import logging
import time
from typing import List, Optional, Sequence

from ..config import DetectionSettings
from .models import CategorizedPhoto, PhotoCategory, PhotoMetadata

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class Categorizer:
    """
    Applies independent cleanup rules to a photo.

    Rules do not exclude each other: a photo can be a duplicate, a
    screenshot and old at the same time. Duplicate and similarity results
    come from the grouping index and the similarity scanner; the remaining
    rules only look at the photo itself.
    """

    def __init__(self,
                 settings: Optional[DetectionSettings] = None,
                 reference_time_ms: Optional[int] = None):
        """
        Initialize categorizer

        Args:
            settings: Detection settings
            reference_time_ms: "Now" for age checks, in epoch milliseconds
        """
        self.settings = settings or DetectionSettings()
        self.reference_time_ms = now_ms() if reference_time_ms is None else reference_time_ms

    def is_screenshot(self, photo: PhotoMetadata) -> bool:
        if abs(photo.width - photo.height) < self.settings.square_tolerance_px:
            return True

        tolerance = self.settings.screenshot_tolerance_px
        return any(
            abs(photo.width - width) < tolerance and abs(photo.height - height) < tolerance
            for width, height in self.settings.screenshot_resolutions
        )

    def is_low_quality(self, photo: PhotoMetadata) -> bool:
        pixels = photo.width * photo.height
        if pixels <= 0:
            return False

        if photo.size < self.settings.low_quality_min_bytes:
            return True

        bytes_per_pixel = photo.size / pixels
        return (pixels > self.settings.low_quality_min_pixels
                and bytes_per_pixel < self.settings.low_quality_bytes_per_pixel)

    def is_old_unused(self, photo: PhotoMetadata) -> bool:
        return (self.reference_time_ms - photo.creation_time) > self.settings.old_unused_ms

    def categories_for(self,
                       photo: PhotoMetadata,
                       duplicate_ids: Sequence[str] = (),
                       similarity: Optional[PhotoCategory] = None) -> List[PhotoCategory]:
        """
        Collect every category that applies to a photo

        Args:
            photo: Photo metadata
            duplicate_ids: Ids of its duplicates
            similarity: BURST, SIMILAR or None from the similarity scan

        Returns:
            Unique categories in rule order
        """
        categories = []

        if duplicate_ids:
            categories.append(PhotoCategory.DUPLICATE)
        if similarity is not None:
            categories.append(similarity)
        if self.is_screenshot(photo):
            categories.append(PhotoCategory.SCREENSHOT)
        if self.is_low_quality(photo):
            categories.append(PhotoCategory.LOW_QUALITY)
        if self.is_old_unused(photo):
            categories.append(PhotoCategory.OLD_UNUSED)

        return list(dict.fromkeys(categories))

    def categorize(self,
                   photo: PhotoMetadata,
                   signature: str,
                   duplicate_ids: Sequence[str] = (),
                   similar_count: int = 0,
                   similarity: Optional[PhotoCategory] = None) -> CategorizedPhoto:
        """Build the final, immutable CategorizedPhoto for one photo."""
        categories = self.categories_for(photo, duplicate_ids, similarity)
        return CategorizedPhoto(
            photo=photo,
            signature=signature,
            categories=tuple(categories),
            duplicate_ids=tuple(dict.fromkeys(duplicate_ids)),
            similar_count=similar_count,
        )
