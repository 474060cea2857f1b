"""
Metadata signatures for duplicate detection

A signature is a short fingerprint of a photo's quantized metadata
(dimensions, size in KB, capture minute, base filename). Photos that were
re-exported, copied or renamed usually collide on the same signature.
"""

import logging
import math
import re
import struct
from typing import Optional

from ..config import DetectionSettings
from ..exceptions import SignatureError
from .models import PhotoMetadata

logger = logging.getLogger(__name__)

_COUNTER_PATTERN = re.compile(r'\s*\([0-9]+\)\s*')      # "IMG_001 (1).jpg"
_COPY_PATTERN = re.compile(r'-copy', re.IGNORECASE)     # "photo-copy.jpg"
_TRAILING_NUMBER_PATTERN = re.compile(r'-[0-9]+\Z')     # "photo-2"

_BASE36_ALPHABET = '0123456789abcdefghijklmnopqrstuvwxyz'

_DEFAULT_SETTINGS = DetectionSettings()


def extract_file_name(uri: str) -> str:
    """Return the trailing path segment of a uri, or '' if there is none."""
    if not isinstance(uri, str):
        raise SignatureError(f"uri must be a string, got {type(uri).__name__}")
    return uri.split('/')[-1]


def normalize_file_name(name: str) -> str:
    """
    Strip copy/variant markers from a filename

    Removes every " (N)" counter, the first "-copy" (any case) and a
    trailing "-<digits>", then lowercases.

    Args:
        name: Bare filename (no directories)

    Returns:
        Normalized base used for filename matching
    """
    name = _COUNTER_PATTERN.sub('', name)
    name = _COPY_PATTERN.sub('', name, count=1)
    name = _TRAILING_NUMBER_PATTERN.sub('', name)
    return name.lower()


def filename_base(uri: str) -> str:
    return normalize_file_name(extract_file_name(uri))


def _format_number(value) -> str:
    # Integral floats render without the ".0" so 1080 and 1080.0 agree
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def rolling_hash(text: str) -> int:
    """
    32-bit rolling string hash (h = h * 31 + c) over UTF-16 code units

    Returns:
        Absolute value of the signed 32-bit result
    """
    data = text.encode('utf-16-le', errors='surrogatepass')
    h = 0
    for unit in struct.unpack(f'<{len(data) // 2}H', data):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return abs(h)


def to_base36(value: int) -> str:
    if value == 0:
        return '0'
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return ''.join(reversed(digits))


def canonical_string(photo: PhotoMetadata,
                     settings: Optional[DetectionSettings] = None) -> str:
    """
    Build the canonical `width|height|sizeKB|minute|filenameBase` string

    Raises:
        SignatureError: If a field cannot be quantized
    """
    settings = settings or _DEFAULT_SETTINGS
    base = filename_base(photo.uri)

    try:
        size_bucket = _round_half_up(photo.size / settings.size_bucket_bytes)
        time_bucket = math.floor(photo.creation_time / settings.time_bucket_ms)
    except (TypeError, ValueError, OverflowError, ZeroDivisionError) as e:
        raise SignatureError(f"Cannot quantize metadata for photo {photo.id}: {e}") from e

    return '|'.join([
        _format_number(photo.width),
        _format_number(photo.height),
        str(size_bucket),
        str(time_bucket),
        base,
    ])


def generate_signature(photo: PhotoMetadata,
                       settings: Optional[DetectionSettings] = None) -> str:
    """
    Generate the metadata signature for a photo

    Args:
        photo: Photo metadata
        settings: Quantization settings (defaults if None)

    Returns:
        Base-36 encoded hash of the canonical string

    Raises:
        SignatureError: If the metadata is malformed
    """
    return to_base36(rolling_hash(canonical_string(photo, settings)))


def fallback_signature(photo: PhotoMetadata) -> str:
    """Coarse signature used when generate_signature fails."""
    return '|'.join(_format_number(v) for v in (photo.width, photo.height, photo.size))


def signature_distance(sig1: str, sig2: str) -> float:
    """
    Rough distance between two signatures

    Counts mismatched positions over the shared prefix and divides by the
    longer length. Signatures are hashes, so anything other than 0
    (identical) carries little meaning.

    Returns:
        0.0 for identical signatures, up to 1.0
    """
    if sig1 == sig2:
        return 0.0
    longest = max(len(sig1), len(sig2))
    distance = sum(1 for a, b in zip(sig1, sig2) if a != b)
    return distance / longest


def are_likely_duplicates_by_filename(uri1: str, uri2: str) -> bool:
    """
    True for e.g. "IMG_1234.jpg" vs "IMG_1234 (1).jpg"

    Bases are compared after normalization, which lowercases, so names
    differing only in case ("Photo.jpg" vs "photo.jpg") also count as
    likely duplicates. Identical names do not.
    """
    name1 = extract_file_name(uri1)
    name2 = extract_file_name(uri2)
    return normalize_file_name(name1) == normalize_file_name(name2) and name1 != name2
