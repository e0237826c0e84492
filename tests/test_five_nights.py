import sqlite3
from contextlib import closing

import pytest

from farefinder.five_nights import (
    compile_five_nights_and_flights,
    median,
    median_booking_pppn_for_country,
)


def test_median_odd():
    assert median([3.0, 1.0, 2.0]) == 2.0


def test_median_even():
    assert median([4.0, 1.0, 3.0, 2.0]) == pytest.approx(2.5)


def test_median_empty_is_zero():
    assert median([]) == 0


def _make_db(path):
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE flight (origin_city_name TEXT, origin_country TEXT, "
        "destination_city_name TEXT, destination_country TEXT, price_this_week REAL)"
    )
    conn.execute(
        "CREATE TABLE accommodation (city TEXT, country TEXT, booking_url TEXT, booking_pppn REAL)"
    )
    return conn


def test_median_pppn_for_country(tmp_path):
    with closing(_make_db(tmp_path / "m.db")) as conn:
        conn.executemany(
            "INSERT INTO accommodation (city, country, booking_pppn) VALUES (?, ?, ?)",
            [("A", "FR", 30.0), ("B", "FR", 70.0), ("C", "FR", 50.0)],
        )
        assert median_booking_pppn_for_country(conn, "FR") == 50.0


def test_median_pppn_defaults_when_country_unknown(tmp_path):
    with closing(_make_db(tmp_path / "m.db")) as conn:
        assert median_booking_pppn_for_country(conn, "XX") == 40


def test_compile_five_nights_and_flights(tmp_path):
    path = tmp_path / "m.db"
    with closing(_make_db(path)) as conn:
        conn.executemany(
            "INSERT INTO accommodation (city, country, booking_pppn) VALUES (?, ?, ?)",
            [("Paris", "FR", 50.0), ("Lyon", "FR", 50.0)],
        )
        conn.executemany(
            "INSERT INTO flight VALUES (?, ?, ?, ?, ?)",
            [
                ("Edinburgh", "GB", "Paris", "FR", 100.0),
                ("Edinburgh", "GB", "Nice", "FR", 100.0),
                ("Edinburgh", "GB", "Oslo", "NO", 100.0),
            ],
        )
        conn.commit()

    assert compile_five_nights_and_flights(path) == 3

    with closing(sqlite3.connect(path)) as conn:
        prices = dict(
            conn.execute("SELECT destination_city, price_fnaf FROM five_nights_and_flights")
        )
    assert prices["Paris"] == pytest.approx(350.0)
    assert prices["Nice"] == prices["Paris"]
    assert prices["Oslo"] == pytest.approx(300.0)


def test_compile_rejects_missing_price(tmp_path):
    path = tmp_path / "m.db"
    with closing(_make_db(path)) as conn:
        conn.execute("INSERT INTO flight VALUES ('A', 'GB', 'B', 'FR', NULL)")
        conn.commit()
    with pytest.raises(ValueError):
        compile_five_nights_and_flights(path)