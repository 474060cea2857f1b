"""
Cleanup queues built from categorized photos
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from .categorizer import now_ms
from .clusters import get_duplicate_groups, group_by_category
from .models import CategorizedPhoto, PhotoCategory

logger = logging.getLogger(__name__)

LARGE_FILE_BYTES = 5 * 1024 * 1024
ONE_YEAR_MS = 365 * 24 * 60 * 60 * 1000

# Review priority for the "all" queue
DUPLICATE_PRIORITY = 10
CATEGORY_PRIORITY = {
    PhotoCategory.LOW_QUALITY: 5,
    PhotoCategory.SCREENSHOT: 3,
}


class CleanupMode(Enum):
    """Which photos a cleanup session reviews."""
    ALL = "all"
    SCREENSHOTS = "screenshots"
    DUPLICATES = "duplicates"
    LARGE = "large"
    OLD = "old"
    LOW_QUALITY = "lowquality"


def cleanup_priority(photo: CategorizedPhoto) -> int:
    score = DUPLICATE_PRIORITY if photo.is_duplicate else 0
    for category, weight in CATEGORY_PRIORITY.items():
        if photo.has_category(category):
            score += weight
    return score


def select_for_cleanup(photos: Sequence[CategorizedPhoto],
                       mode: Union[CleanupMode, str] = CleanupMode.ALL,
                       reference_time_ms: Optional[int] = None,
                       large_file_bytes: int = LARGE_FILE_BYTES) -> List[CategorizedPhoto]:
    """
    Build the review queue for a cleanup mode

    Args:
        photos: Categorized photos
        mode: CleanupMode or its string value
        reference_time_ms: "Now" for the age filter (current time if None)
        large_file_bytes: Size threshold for the LARGE mode

    Returns:
        Photos to review, in review order

    Raises:
        ValueError: If mode is not a known cleanup mode
    """
    mode = CleanupMode(mode)

    if mode is CleanupMode.SCREENSHOTS:
        return [p for p in photos if p.has_category(PhotoCategory.SCREENSHOT)]

    if mode is CleanupMode.DUPLICATES:
        return [p for p in photos
                if p.is_duplicate or p.has_category(PhotoCategory.SIMILAR)]

    if mode is CleanupMode.LARGE:
        large = [p for p in photos if p.size > large_file_bytes]
        return sorted(large, key=lambda p: p.size, reverse=True)

    if mode is CleanupMode.OLD:
        now = now_ms() if reference_time_ms is None else reference_time_ms
        cutoff = now - ONE_YEAR_MS
        old = [p for p in photos
               if p.has_category(PhotoCategory.OLD_UNUSED) or p.creation_time < cutoff]
        return sorted(old, key=lambda p: p.creation_time)

    if mode is CleanupMode.LOW_QUALITY:
        return [p for p in photos if p.has_category(PhotoCategory.LOW_QUALITY)]

    # sorted() is stable, equal priorities keep input order
    return sorted(photos, key=cleanup_priority, reverse=True)


def summarize(photos: Sequence[CategorizedPhoto]) -> Dict[str, Any]:
    """
    Summarize a categorized library

    Returns:
        Dictionary with photo and category counts, duplicate group count
        and the bytes a duplicate cleanup would reclaim
    """
    grouped = group_by_category(photos)
    groups = get_duplicate_groups(photos)

    return {
        'total_photos': len(photos),
        'total_size': sum(p.size for p in photos),
        'category_counts': {category.value: len(members) for category, members in grouped.items()},
        'duplicate_groups': len(groups),
        'photos_in_duplicate_groups': sum(g.count for g in groups),
        'reclaimable_size': sum(g.reclaimable_size for g in groups),
    }
