from datetime import date, datetime, timedelta

import pytest

from farefinder.timeutils import (
    Weekday,
    calculate_date_range,
    calculate_weekend_range,
    determine_range,
    get_days_order,
    get_next_weekday,
    list_dates_between,
    should_include_day,
)

WEDNESDAY_NOON = datetime(2024, 3, 20, 12, 0)
WEDNESDAY_AFTERNOON = datetime(2024, 3, 20, 14, 0)


def test_determine_range_before_one_pm():
    assert determine_range(Weekday.WEDNESDAY, WEDNESDAY_NOON) == (
        Weekday.THURSDAY,
        Weekday.SUNDAY,
    )


def test_determine_range_after_one_pm():
    assert determine_range(Weekday.WEDNESDAY, WEDNESDAY_AFTERNOON) == (
        Weekday.THURSDAY,
        Weekday.MONDAY,
    )


def test_determine_range_wraps_from_saturday():
    assert determine_range(Weekday.SATURDAY, WEDNESDAY_NOON) == (
        Weekday.SUNDAY,
        Weekday.WEDNESDAY,
    )
    assert determine_range(Weekday.FRIDAY, WEDNESDAY_AFTERNOON) == (
        Weekday.SATURDAY,
        Weekday.WEDNESDAY,
    )


def test_determine_range_unknown_day_uses_default():
    assert determine_range(9, WEDNESDAY_NOON) == (Weekday.THURSDAY, Weekday.MONDAY)


@pytest.mark.parametrize(
    "day,expected",
    [
        (Weekday.THURSDAY, True),
        (Weekday.SATURDAY, True),
        (Weekday.MONDAY, True),
        (Weekday.TUESDAY, False),
        (Weekday.WEDNESDAY, False),
    ],
)
def test_should_include_day_wrapping(day, expected):
    assert should_include_day(day, Weekday.THURSDAY, Weekday.MONDAY) is expected


def test_should_include_day_single_day_range():
    assert should_include_day(Weekday.FRIDAY, Weekday.FRIDAY, Weekday.FRIDAY) is True
    assert should_include_day(Weekday.MONDAY, Weekday.FRIDAY, Weekday.FRIDAY) is False


def test_get_days_order_wednesday_starts_wednesday():
    order, start, end = get_days_order(WEDNESDAY_NOON)
    assert order[0] == Weekday.WEDNESDAY
    assert sorted(order) == list(Weekday)
    assert (start, end) == determine_range(Weekday.WEDNESDAY, WEDNESDAY_NOON)


def test_get_days_order_thursday_still_starts_wednesday():
    order, _, _ = get_days_order(datetime(2024, 3, 21, 9, 0))
    assert order[0] == Weekday.WEDNESDAY


def test_get_days_order_saturday_starts_saturday():
    order, _, _ = get_days_order(datetime(2024, 3, 23, 9, 0))
    assert order[:2] == [Weekday.SATURDAY, Weekday.SUNDAY]
    assert len(set(order)) == 7


def test_list_dates_between_inclusive_over_leap_day():
    dates = list_dates_between("2024-02-27", "2024-03-01")
    assert len(dates) == 4
    assert dates[0] == "2024-02-27"
    assert dates[-1] == "2024-03-01"
    assert "2024-02-29" in dates


def test_list_dates_between_reversed_is_empty():
    assert list_dates_between("2024-03-05", "2024-03-01") == []


def test_list_dates_between_invalid_start():
    with pytest.raises(ValueError, match="invalid start date"):
        list_dates_between("not-a-date", "2024-03-01")


def test_list_dates_between_invalid_end():
    with pytest.raises(ValueError, match="invalid end date"):
        list_dates_between("2024-03-01", "2024-13-01")


def test_calculate_date_range_round_trip():
    start, end = calculate_date_range(date(2024, 3, 20), 4)
    assert start == "2024-03-20"
    assert len(list_dates_between(start, end)) == 4


def test_get_next_weekday_include_current():
    base = date(2024, 3, 20)
    assert get_next_weekday(base, Weekday.WEDNESDAY, True) == base
    assert get_next_weekday(base, Weekday.WEDNESDAY, False) == base + timedelta(days=7)


def test_get_next_weekday_earlier_day_wraps():
    base = date(2024, 3, 20)
    result = get_next_weekday(base, Weekday.MONDAY, True)
    assert result > base
    assert (result - base).days < 7
    assert result.weekday() == 0


def test_calculate_weekend_range_this_week():
    dep_start, dep_end, arr_start, arr_end = calculate_weekend_range(0, WEDNESDAY_NOON)
    assert dep_start == "2024-03-20"
    assert len(list_dates_between(dep_start, dep_end)) == 4
    assert len(list_dates_between(arr_start, arr_end)) == 4
    assert list_dates_between(dep_end, arr_start)[1] == arr_start
    assert len(list_dates_between(dep_end, arr_start)) == 2


def test_calculate_weekend_range_next_week_is_seven_days_later():
    this_week = calculate_weekend_range(0, datetime(2024, 3, 18, 9, 0))
    next_week = calculate_weekend_range(1, datetime(2024, 3, 18, 9, 0))
    assert len(list_dates_between(this_week[0], next_week[0])) == 8
    this_start = datetime.strptime(this_week[0], "%Y-%m-%d").date()
    assert this_start.weekday() == 2