import sqlite3
from contextlib import closing

import pytest

from farefinder.accommodation import (
    LocationPrices,
    booking_url,
    calculate_median,
    compile_accommodation,
    round_to_two_decimal_places,
    trimmed_pppn,
)


def test_calculate_median_odd_and_even():
    assert calculate_median([1.0, 2.0, 3.0]) == 2.0
    assert calculate_median([1.0, 3.0]) == 2.0


def test_calculate_median_empty_raises():
    with pytest.raises(ValueError):
        calculate_median([])


def test_round_half_away_from_zero():
    assert round_to_two_decimal_places(0.125) == pytest.approx(0.13)
    assert round_to_two_decimal_places(-0.125) == pytest.approx(-0.13)


def test_round_keeps_two_decimal_values():
    assert round_to_two_decimal_places(12.34) == pytest.approx(12.34)


def test_trimmed_pppn_needs_ten_prices():
    assert trimmed_pppn([140.0] * 9) is None


def test_trimmed_pppn_uniform_prices():
    assert trimmed_pppn([140.0] * 10) == pytest.approx(10.0)


def test_trimmed_pppn_drops_outliers():
    prices = [140.0] * 8 + [0.0, 100000.0]
    assert trimmed_pppn(prices) == trimmed_pppn([140.0] * 10)


def test_booking_url():
    url = booking_url("Rome", "2024-05-01", "2024-05-15")
    assert url.startswith("https://www.booking.com/searchresults.en-gb.html?ss=Rome&")
    assert url.endswith("checkin=2024-05-01&checkout=2024-05-15")


def test_location_prices_default_empty():
    location = LocationPrices("Rome", "IT")
    location.prices.append(1.0)
    assert LocationPrices("Oslo", "NO").prices == []


def test_compile_accommodation(tmp_path):
    raw_db = tmp_path / "booking.db"
    new_db = tmp_path / "main.db"
    with closing(sqlite3.connect(raw_db)) as conn:
        conn.execute(
            "CREATE TABLE property (city TEXT, country TEXT, gross_price REAL, "
            "checkin_date TEXT, checkout_date TEXT, review_score REAL)"
        )
        rows = [("Rome", "IT", 140.0, "2024-05-01", "2024-05-15", 8.5)] * 10
        rows += [("Oslo", "NO", 200.0, "2024-05-01", "2024-05-15", 9.0)] * 5
        rows += [("Rome", "IT", 99999.0, "2024-05-01", "2024-05-15", 5.0)] * 3
        conn.executemany("INSERT INTO property VALUES (?, ?, ?, ?, ?, ?)", rows)
        conn.commit()

    assert compile_accommodation(new_db, raw_db) == 1

    with closing(sqlite3.connect(new_db)) as conn:
        result = conn.execute(
            "SELECT city, country, booking_url, booking_pppn FROM accommodation"
        ).fetchall()
    assert len(result) == 1
    city, country, url, pppn = result[0]
    assert (city, country) == ("Rome", "IT")
    assert url == booking_url("Rome", "2024-05-01", "2024-05-15")
    assert pppn == pytest.approx(trimmed_pppn([140.0] * 10))