"""
Reading photo metadata records and writing scan results
Used by the CLI; the detection pipeline itself never touches files
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from photosweep.detection.models import CategorizedPhoto, DuplicateGroup, PhotoMetadata
from photosweep.exceptions import MetadataError

logger = logging.getLogger(__name__)


def parse_photo_records(data: Any) -> List[PhotoMetadata]:
    """
    Convert decoded JSON into photo metadata

    Accepts either a list of records or an object with a `photos` list.

    Args:
        data: Decoded JSON document

    Returns:
        List of PhotoMetadata in document order

    Raises:
        MetadataError: If the document or a record has the wrong shape
    """
    if isinstance(data, dict):
        data = data.get('photos')
    if not isinstance(data, list):
        raise MetadataError("Expected a list of photo records or an object with a 'photos' list")

    photos = []
    for position, record in enumerate(data):
        try:
            photos.append(PhotoMetadata.from_dict(record))
        except MetadataError as e:
            raise MetadataError(f"Record {position}: {e}") from e
    return photos


def load_photo_records(path: Union[str, Path]) -> List[PhotoMetadata]:
    """
    Load photo metadata records from a JSON file

    Args:
        path: JSON file exported from the media store

    Returns:
        List of PhotoMetadata in file order

    Raises:
        MetadataError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise MetadataError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise MetadataError(f"Invalid JSON in {path}: {e}") from e

    photos = parse_photo_records(data)
    logger.info(f"Loaded {len(photos)} photo records from {path}")
    return photos


def build_results_document(photos: Sequence[CategorizedPhoto],
                           groups: Optional[Sequence[DuplicateGroup]] = None,
                           summary: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    document: Dict[str, Any] = {'photos': [p.to_dict() for p in photos]}
    if groups is not None:
        document['duplicate_groups'] = [g.to_dict() for g in groups]
    if summary is not None:
        document['summary'] = summary
    return document


def write_results(path: Union[str, Path],
                  photos: Sequence[CategorizedPhoto],
                  groups: Optional[Sequence[DuplicateGroup]] = None,
                  summary: Optional[Dict[str, Any]] = None) -> Path:
    """
    Write categorized photos (and optional groups/summary) as JSON

    Returns:
        Path of the written file
    """
    path = Path(path)
    document = build_results_document(photos, groups, summary)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=2, default=str)

    logger.info(f"Wrote results for {len(photos)} photos to {path}")
    return path
