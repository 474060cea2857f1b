"""
PhotoSweep: metadata-only photo library cleanup

Classifies photo records into overlapping cleanup categories (duplicate,
similar, burst, screenshot, low quality, old and unused) without reading
pixel data.
"""

__version__ = "0.1.0"

from .config import load_config, DetectionSettings
from .detection import (
    PhotoCategory,
    PhotoMetadata,
    CategorizedPhoto,
    DuplicateGroup,
    PhotoDetectionPipeline,
    categorize_photos,
    categorize_photos_async,
    group_by_category,
    get_duplicate_groups,
)

__all__ = [
    "load_config",
    "DetectionSettings",
    "PhotoCategory",
    "PhotoMetadata",
    "CategorizedPhoto",
    "DuplicateGroup",
    "PhotoDetectionPipeline",
    "categorize_photos",
    "categorize_photos_async",
    "group_by_category",
    "get_duplicate_groups",
]
