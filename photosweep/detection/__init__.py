"""
Duplicate, similarity and cleanup category detection for PhotoSweep
"""

from .models import PhotoCategory, PhotoMetadata, CategorizedPhoto, DuplicateGroup
from .signature import generate_signature, normalize_file_name
from .grouping import DuplicateIndex
from .scanner import SimilarityScanner
from .categorizer import Categorizer
from .pipeline import (
    PhotoDetectionPipeline,
    ProgressReporter,
    categorize_photos,
    categorize_photos_async
)
from .clusters import group_by_category, get_duplicate_groups
from .cleanup import CleanupMode, select_for_cleanup, summarize

__all__ = [
    'PhotoCategory',
    'PhotoMetadata',
    'CategorizedPhoto',
    'DuplicateGroup',
    'generate_signature',
    'normalize_file_name',
    'DuplicateIndex',
    'SimilarityScanner',
    'Categorizer',
    'PhotoDetectionPipeline',
    'ProgressReporter',
    'categorize_photos',
    'categorize_photos_async',
    'group_by_category',
    'get_duplicate_groups',
    'CleanupMode',
    'select_for_cleanup',
    'summarize'
]
