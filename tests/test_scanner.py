"""
Tests for the windowed similarity scanner.
"""

import pytest

from photosweep.config import DetectionSettings
from photosweep.detection.models import PhotoCategory
from photosweep.detection.scanner import SimilarityScanner

from conftest import MINUTE_MS, NOW_MS

BASE_TIME = NOW_MS - 10 * 24 * 60 * MINUTE_MS


class TestIsSimilar:
    """Test the pairwise similarity rule."""

    @pytest.fixture
    def scanner(self):
        return SimilarityScanner([])

    def test_close_shots(self, scanner, make_photo):
        a = make_photo(size=3_000_000, creation_time=BASE_TIME)
        b = make_photo(size=3_200_000, creation_time=BASE_TIME + 30_000)
        assert scanner.is_similar(a, b)

    def test_different_dimensions(self, scanner, make_photo):
        a = make_photo(width=4000, height=3000, creation_time=BASE_TIME)
        b = make_photo(width=3000, height=4000, creation_time=BASE_TIME)
        assert not scanner.is_similar(a, b)

    def test_size_tolerance_is_relative(self, scanner, make_photo):
        a = make_photo(size=3_000_000, creation_time=BASE_TIME)
        b = make_photo(size=3_400_000, creation_time=BASE_TIME)
        assert not scanner.is_similar(a, b)

    def test_size_tolerance_floor(self, scanner, make_photo):
        # 10% of 20 KB is 2 KB, but the floor allows up to 10 KB
        a = make_photo(size=20_000, creation_time=BASE_TIME)
        b = make_photo(size=29_000, creation_time=BASE_TIME)
        c = make_photo(size=30_000, creation_time=BASE_TIME)
        assert scanner.is_similar(a, b)
        assert not scanner.is_similar(a, c)

    def test_time_threshold(self, scanner, make_photo):
        a = make_photo(creation_time=BASE_TIME)
        b = make_photo(creation_time=BASE_TIME + 59_999)
        c = make_photo(creation_time=BASE_TIME + 60_000)
        assert scanner.is_similar(a, b)
        assert not scanner.is_similar(a, c)


class TestWindow:
    """Test neighborhood scanning."""

    def test_sorted_by_creation_time(self, make_photo):
        # The two close shots are at opposite ends of the caller's order
        photos = [make_photo(creation_time=BASE_TIME)]
        photos += [make_photo(creation_time=BASE_TIME + (i + 1) * 10 * MINUTE_MS) for i in range(60)]
        photos.append(make_photo(creation_time=BASE_TIME + 5_000))

        scanner = SimilarityScanner(photos)
        assert scanner.similar_for(0) == [len(photos) - 1]
        assert scanner.similar_for(len(photos) - 1) == [0]

    def test_input_order_does_not_matter(self, make_photo):
        photos = [make_photo(creation_time=BASE_TIME + i * 1_000) for i in range(3)]
        forward = SimilarityScanner(photos)
        backward = SimilarityScanner(list(reversed(photos)))

        forward_ids = sorted(photos[i].id for i in forward.similar_for(1))
        backward_ids = sorted(backward.photos[i].id for i in backward.similar_for(1))
        assert forward_ids == backward_ids

    def test_radius_bounds_the_scan(self, make_photo):
        # 4 photos in the same second; with radius 1 the first only sees the second
        photos = [make_photo(creation_time=BASE_TIME) for _ in range(4)]
        scanner = SimilarityScanner(photos, DetectionSettings(window_radius=1))
        assert scanner.similar_for(0) == [1]
        assert scanner.similar_for(1) == [0, 2]

    def test_window_is_symmetric(self, make_photo):
        photos = [make_photo(creation_time=BASE_TIME) for _ in range(3)]
        scanner = SimilarityScanner(photos, DetectionSettings(window_radius=2))
        assert scanner.similar_for(0) == [1, 2]
        assert scanner.similar_for(2) == [0, 1]

    def test_max_similar_cap(self, make_photo):
        photos = [make_photo(creation_time=BASE_TIME) for _ in range(10)]
        scanner = SimilarityScanner(photos)
        assert len(scanner.similar_for(0)) == 5

    def test_excluded_ids(self, make_photo):
        photos = [make_photo(creation_time=BASE_TIME) for _ in range(3)]
        scanner = SimilarityScanner(photos)
        assert scanner.similar_for(0, exclude_ids={photos[1].id}) == [2]


class TestClassify:
    """Test burst/similar classification."""

    @pytest.mark.parametrize("count,expected", [
        (0, None),
        (1, PhotoCategory.SIMILAR),
        (2, PhotoCategory.SIMILAR),
        (3, PhotoCategory.BURST),
        (5, PhotoCategory.BURST),
    ])
    def test_classify(self, count, expected):
        assert SimilarityScanner([]).classify(count) is expected
