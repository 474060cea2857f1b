"""
Shared fixtures for PhotoSweep tests.
"""

import itertools

import pytest

from photosweep.config import DetectionSettings
from photosweep.detection.models import PhotoMetadata

MINUTE_MS = 60 * 1000
DAY_MS = 24 * 60 * MINUTE_MS

# Fixed "now" so age-based rules are reproducible
NOW_MS = 1_750_000_000_000


@pytest.fixture
def now_ms():
    return NOW_MS


@pytest.fixture
def settings():
    return DetectionSettings()


@pytest.fixture
def make_photo():
    """
    Factory for regular camera photos.

    By default each photo is taken 10 minutes after the previous one, a day
    before NOW_MS, so unrelated photos trip no rule at all.
    """
    counter = itertools.count(1)

    def _make(photo_id=None, uri=None, width=4000, height=3000,
              size=3_000_000, creation_time=None):
        n = next(counter)
        if creation_time is None:
            creation_time = NOW_MS - DAY_MS + n * 10 * MINUTE_MS
        return PhotoMetadata(
            id=photo_id or f"photo-{n}",
            uri=uri if uri is not None else f"file:///DCIM/Camera/IMG_{n:04d}.jpg",
            width=width,
            height=height,
            size=size,
            creation_time=creation_time,
        )

    return _make
