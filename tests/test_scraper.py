"""Tests for reading the browser scraper's JSON export."""

import json

import pytest

from slotwatch.errors import PermanentError, ScrapingError, TransientError
from slotwatch.scraper import ExportFileScraper

EXPORT = [
    {
        "date": "2025/11/20",
        "startTime": "10:00",
        "endTime": "11:00",
        "startDatetime": "2025/11/20 10:00:00",
        "endDatetime": "2025/11/20 11:00:00",
        "available": False,
        "hasHourglass": False,
        "hasCheck": False,
        "serviceCd": "S01",
        "sessionCd": "A",
    },
    {
        "date": "2025/11/21",
        "startTime": "13:00",
        "endTime": "14:00",
        "startDatetime": "2025/11/21 13:00:00",
        "endDatetime": "2025/11/21 14:00:00",
        "available": True,
        "hasHourglass": False,
        "hasCheck": True,
        "serviceCd": "S01",
        "sessionCd": None,
    },
]


@pytest.fixture
def export_path(tmp_path):
    path = tmp_path / "calendar_availabilities.json"
    path.write_text(json.dumps(EXPORT), encoding="utf-8")
    return path


def test_reads_all_slots_when_no_dates(export_path):
    slots = ExportFileScraper(export_path).scrape([])

    assert [s.key for s in slots] == ["2025/11/20_10:00_11:00", "2025/11/21_13:00_14:00"]
    assert [s.available for s in slots] == [False, True]
    assert slots[1].to_record() == EXPORT[1]


def test_filters_requested_dates(export_path):
    slots = ExportFileScraper(export_path).scrape(["2025/11/21", "2025/11/22"])

    assert [s.date for s in slots] == ["2025/11/21"]


def test_missing_export_is_transient(tmp_path):
    with pytest.raises(TransientError):
        ExportFileScraper(tmp_path / "nope.json").scrape([])


@pytest.mark.parametrize(
    "content",
    [
        "{broken",
        json.dumps({"slots": EXPORT}),
        json.dumps([{"date": "2025/11/20", "startTime": "10:00"}]),
    ],
)
def test_malformed_export_is_permanent(tmp_path, content):
    path = tmp_path / "export.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(PermanentError):
        ExportFileScraper(path).scrape([])


def test_errors_share_scraping_base(tmp_path):
    with pytest.raises(ScrapingError):
        ExportFileScraper(tmp_path / "nope.json").scrape(["2025/11/20"])
