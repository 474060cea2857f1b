"""
Tests for metadata file input and result output.
"""

import json

import pytest

from photosweep.detection.clusters import get_duplicate_groups
from photosweep.detection.models import PhotoMetadata
from photosweep.detection.pipeline import categorize_photos
from photosweep.exceptions import MetadataError
from photosweep.io.metadata import (
    build_results_document,
    load_photo_records,
    parse_photo_records,
    write_results,
)

from conftest import DAY_MS, NOW_MS

RECORDS = [
    {"id": "1", "uri": "file:///DCIM/IMG_001.jpg", "width": 4000, "height": 3000,
     "fileSize": 2_500_000, "creationTime": NOW_MS - DAY_MS},
    {"id": "2", "uri": "file:///Download/IMG_001 (1).jpg", "width": 4000, "height": 3000,
     "fileSize": 2_500_000, "creationTime": NOW_MS - DAY_MS},
]


class TestParseRecords:
    """Test record parsing."""

    def test_list(self):
        photos = parse_photo_records(RECORDS)
        assert [p.id for p in photos] == ["1", "2"]
        assert photos[0].size == 2_500_000
        assert photos[0].creation_time == NOW_MS - DAY_MS

    def test_wrapped_object(self):
        assert len(parse_photo_records({"photos": RECORDS})) == 2

    def test_wrong_shape(self):
        with pytest.raises(MetadataError):
            parse_photo_records({"items": RECORDS})

    def test_bad_record_reports_position(self):
        with pytest.raises(MetadataError, match="Record 1"):
            parse_photo_records([RECORDS[0], {"uri": "no-id.jpg"}])

    def test_non_numeric_field(self):
        with pytest.raises(MetadataError):
            parse_photo_records([{"id": "1", "width": "wide"}])

    def test_numeric_strings_accepted(self):
        photo, = parse_photo_records([{"id": 7, "width": "640", "height": 480}])
        assert photo == PhotoMetadata(id="7", uri="", width=640.0, height=480)


class TestLoadRecords:
    """Test loading records from disk."""

    def test_load(self, tmp_path):
        path = tmp_path / "photos.json"
        path.write_text(json.dumps(RECORDS))
        assert [p.id for p in load_photo_records(path)] == ["1", "2"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(MetadataError):
            load_photo_records(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "photos.json"
        path.write_text("[{")
        with pytest.raises(MetadataError):
            load_photo_records(path)


class TestWriteResults:
    """Test result serialization."""

    @pytest.fixture
    def results(self):
        return categorize_photos(RECORDS, reference_time_ms=NOW_MS)

    def test_document_layout(self, results):
        document = build_results_document(results)
        first = document['photos'][0]

        assert set(document) == {'photos'}
        assert first['id'] == "1"
        assert first['creationTime'] == NOW_MS - DAY_MS
        assert first['categories'] == ["duplicate"]
        assert first['isDuplicate'] is True
        assert first['duplicateIds'] == ["2"]
        assert first['duplicateCount'] == 1

    def test_write(self, results, tmp_path):
        path = write_results(tmp_path / "out.json", results,
                             get_duplicate_groups(results), {'total_photos': 2})
        document = json.loads(path.read_text())

        assert len(document['photos']) == 2
        assert document['duplicate_groups'][0]['photo_ids'] == ["1", "2"]
        assert document['summary'] == {'total_photos': 2}
