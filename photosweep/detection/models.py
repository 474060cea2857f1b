"""
Data models for the photo detection pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..exceptions import MetadataError


class PhotoCategory(Enum):
    """Cleanup categories a photo can be placed in (not exclusive)."""
    DUPLICATE = "duplicate"          # Same signature or same base filename
    SIMILAR = "similar"              # 1-2 close neighbors in time and size
    SCREENSHOT = "screenshot"        # Square or common device screen size
    LOW_QUALITY = "low_quality"      # Tiny or heavily compressed file
    BURST = "burst"                  # 3+ close neighbors in time and size
    OLD_UNUSED = "old_unused"        # Older than a year


Number = Union[int, float]


def _number(record: Mapping[str, Any], *keys: str) -> Number:
    """First present, non-null numeric value among keys; 0 when absent."""
    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise MetadataError(f"Field '{key}' is not numeric: {value!r}")
        return value
    return 0


@dataclass(frozen=True)
class PhotoMetadata:
    """
    Metadata for one photo as supplied by the media store.

    The pipeline only reads these values, it never touches pixel data.
    """
    id: str
    uri: str
    width: Number = 0
    height: Number = 0
    size: Number = 0                 # Bytes
    creation_time: Number = 0        # Epoch milliseconds

    def __post_init__(self):
        for name in ('width', 'height', 'size', 'creation_time'):
            if getattr(self, name) is None:
                object.__setattr__(self, name, 0)

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> 'PhotoMetadata':
        """
        Build metadata from a media store record

        Accepts camelCase keys (`creationTime`, `fileSize`) as well as
        snake_case. Absent or null numeric fields default to 0.

        Args:
            record: Mapping with at least an `id`

        Returns:
            PhotoMetadata instance
        """
        if not isinstance(record, Mapping):
            raise MetadataError(f"Photo record must be a mapping, got {type(record).__name__}")
        if record.get('id') is None:
            raise MetadataError(f"Photo record has no id: {dict(record)!r}")

        return cls(
            id=str(record['id']),
            uri=record.get('uri') or '',
            width=_number(record, 'width'),
            height=_number(record, 'height'),
            size=_number(record, 'size', 'fileSize', 'file_size'),
            creation_time=_number(record, 'creationTime', 'creation_time'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'uri': self.uri,
            'width': self.width,
            'height': self.height,
            'size': self.size,
            'creationTime': self.creation_time,
        }


@dataclass(frozen=True)
class CategorizedPhoto:
    """
    A photo with its signature and detection results.

    `duplicate_count` is derived from `duplicate_ids`, so the two can
    never disagree.
    """
    photo: PhotoMetadata
    signature: str
    categories: Tuple[PhotoCategory, ...] = ()
    duplicate_ids: Tuple[str, ...] = ()
    similar_count: int = 0

    @property
    def id(self) -> str:
        return self.photo.id

    @property
    def uri(self) -> str:
        return self.photo.uri

    @property
    def width(self) -> Number:
        return self.photo.width

    @property
    def height(self) -> Number:
        return self.photo.height

    @property
    def size(self) -> Number:
        return self.photo.size

    @property
    def creation_time(self) -> Number:
        return self.photo.creation_time

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicate_ids)

    @property
    def is_duplicate(self) -> bool:
        return bool(self.duplicate_ids)

    def has_category(self, category: PhotoCategory) -> bool:
        return category in self.categories

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase layout consumed by the app."""
        data = self.photo.to_dict()
        data.update({
            'signature': self.signature,
            'categories': [c.value for c in self.categories],
            'isDuplicate': self.is_duplicate,
            'duplicateIds': list(self.duplicate_ids),
            'duplicateCount': self.duplicate_count,
            'similarCount': self.similar_count,
        })
        return data


@dataclass
class DuplicateGroup:
    """A maximal cluster of photos that reference each other as duplicates."""
    group_id: int
    photos: List[CategorizedPhoto] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.photos)

    @property
    def ids(self) -> List[str]:
        return [p.id for p in self.photos]

    @property
    def total_size(self) -> Number:
        return sum(p.size for p in self.photos)

    @property
    def keeper(self) -> Optional[CategorizedPhoto]:
        """Largest photo in the group, the one a cleanup would keep."""
        if not self.photos:
            return None
        return max(self.photos, key=lambda p: p.size)

    @property
    def reclaimable_size(self) -> Number:
        """Bytes freed by deleting everything except the keeper."""
        keeper = self.keeper
        return self.total_size - keeper.size if keeper else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'group_id': self.group_id,
            'count': self.count,
            'total_size': self.total_size,
            'reclaimable_size': self.reclaimable_size,
            'photo_ids': self.ids,
        }
