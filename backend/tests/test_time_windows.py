from datetime import datetime, timedelta

from footprint.utils.time_windows import (
    add_months,
    filter_days_back,
    get_days_remaining_in_period,
    get_season,
    get_time_periods,
    group_by_period,
    is_weekend,
    js_weekday,
    parse_iso_datetime,
    week_start
)


def test_weeks_start_on_sunday(now):
    assert js_weekday(now) == 3
    assert week_start(now) == datetime(2024, 6, 9)
    assert week_start(datetime(2024, 6, 9, 23, 59)) == datetime(2024, 6, 9)


def test_get_time_periods(now):
    periods = get_time_periods(now)

    assert periods['today'] == datetime(2024, 6, 12)
    assert periods['yesterday'] == datetime(2024, 6, 11)
    assert periods['last_week_start'] == datetime(2024, 6, 2)
    assert periods['month_start'] == datetime(2024, 6, 1)
    assert periods['last_month_start'] == datetime(2024, 5, 1)
    assert periods['last_month_end'] == datetime(2024, 5, 31)
    assert periods['year_start'] == datetime(2024, 1, 1)


def test_filter_days_back_is_half_open(make_record, now):
    at_now = make_record(1, timestamp=now)
    at_start = make_record(2, timestamp=now - timedelta(days=7))
    inside = make_record(3, days_ago=1)
    previous = make_record(4, days_ago=8)

    records = [at_now, at_start, inside, previous]

    assert filter_days_back(records, now, 7) == [at_start, inside]
    assert filter_days_back(records, now, 7, offset_days=7) == [previous]


def test_group_by_period_keys(make_record):
    records = [
        make_record(1, timestamp=datetime(2024, 6, 10, 8)),
        make_record(2, timestamp=datetime(2024, 6, 10, 20)),
        make_record(3, timestamp=datetime(2024, 6, 16, 9)),
    ]

    assert list(group_by_period(records, 'day')) == ['2024-06-10', '2024-06-16']
    assert list(group_by_period(records, 'week')) == ['2024-06-09', '2024-06-16']
    assert list(group_by_period(records, 'month')) == ['2024-6']


def test_seasons_and_weekends():
    assert get_season(1) == 'Winter'
    assert get_season(4) == 'Spring'
    assert get_season(7) == 'Summer'
    assert get_season(10) == 'Fall'
    assert get_season(12) == 'Winter'
    assert is_weekend(datetime(2024, 6, 15))
    assert not is_weekend(datetime(2024, 6, 12))


def test_add_months_wraps_years():
    assert add_months(datetime(2024, 1, 31), -1) == datetime(2023, 12, 1)
    assert add_months(datetime(2024, 11, 5), 2) == datetime(2025, 1, 1)


def test_days_remaining(now):
    assert get_days_remaining_in_period('daily', now) == 1
    assert get_days_remaining_in_period('weekly', now) == 4
    assert get_days_remaining_in_period('weekly', datetime(2024, 6, 9)) == 7
    assert get_days_remaining_in_period('monthly', now) == 18


def test_parse_iso_datetime_normalizes_to_naive_utc():
    assert parse_iso_datetime('2024-06-12T14:00:00+02:00') == datetime(2024, 6, 12, 12, 0)
    assert parse_iso_datetime('2024-06-12T12:00:00Z') == datetime(2024, 6, 12, 12, 0)
    assert parse_iso_datetime('2024-06-12') == datetime(2024, 6, 12)
    assert parse_iso_datetime(None) is None
