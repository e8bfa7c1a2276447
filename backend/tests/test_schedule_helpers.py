from datetime import time

import pytest

from educenter.services.schedule import (
    BUSINESS_HOURS_SLOTS,
    format_time,
    intersect_days,
    normalize_days,
    parse_time,
    sort_days,
)


def test_normalize_days_uppercases_and_deduplicates_in_order():
    assert normalize_days(["wed", "MON", "Wed", " fri "]) == ["WED", "MON", "FRI"]


def test_normalize_days_rejects_unknown_tokens():
    with pytest.raises(ValueError):
        normalize_days(["MON", "FUNDAY"])


def test_intersect_days_keeps_candidate_order():
    assert intersect_days(["FRI", "WED", "MON"], ["MON", "WED"]) == ["WED", "MON"]
    assert intersect_days(["TUE"], ["MON"]) == []


def test_parse_time_accepts_full_and_short_forms():
    assert parse_time("09:00:00") == time(9, 0)
    assert parse_time("18:30") == time(18, 30)
    assert parse_time(time(7, 15, 0, 500)) == time(7, 15)


@pytest.mark.parametrize("value", ["9:00", "24:00:00", "09:60:00", "nine"])
def test_parse_time_rejects_malformed_values(value):
    with pytest.raises(ValueError):
        parse_time(value)


def test_format_time_and_business_hours():
    assert format_time(time(9, 5)) == "09:05:00"
    assert format_time(None) is None
    assert format_time(BUSINESS_HOURS_SLOTS[0]) == "08:00:00"
    assert format_time(BUSINESS_HOURS_SLOTS[-1]) == "18:00:00"
    assert len(BUSINESS_HOURS_SLOTS) == 11


def test_sort_days_uses_week_order():
    assert sort_days(["SUN", "MON", "WED", "MON"]) == ["MON", "WED", "SUN"]
