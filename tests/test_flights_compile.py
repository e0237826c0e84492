import sqlite3
from contextlib import closing

import pytest

from farefinder.flights_compile import (
    compile_flights,
    load_prices,
    main,
    skyscanner_url,
)

RAW_SCHEMA = """
CREATE TABLE skyscannerprices (
    origin_city TEXT, origin_country TEXT, origin_iata TEXT, origin_skyscanner_id TEXT,
    destination_city TEXT, destination_country TEXT, destination_iata TEXT,
    destination_skyscanner_id TEXT, this_weekend REAL, next_weekend REAL, duration INTEGER
)
"""

MAIN_SCHEMA = """
CREATE TABLE flight (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    origin_city_name TEXT, origin_country TEXT, origin_iata TEXT, origin_skyscanner_id TEXT,
    destination_city_name TEXT, destination_country TEXT, destination_iata TEXT,
    destination_skyscanner_id TEXT, price_this_week DECIMAL, skyscanner_url_this_week TEXT,
    price_next_week DECIMAL, skyscanner_url_next_week TEXT, duration_in_minutes DECIMAL
)
"""

ROWS = [
    ("Berlin", "Germany", "BER", "BER", "Lisbon", "PT", "LIS", "LIS", 120.5, 99.0, 180),
    ("Edinburgh", "Scotland", "EDI", "EDI", "Rome", "IT", "FCO", "FCO", None, 75.0, 150),
]


@pytest.fixture
def raw_db(tmp_path):
    path = tmp_path / "flights.db"
    with closing(sqlite3.connect(path)) as conn:
        conn.execute(RAW_SCHEMA)
        conn.executemany("INSERT INTO skyscannerprices VALUES (?,?,?,?,?,?,?,?,?,?,?)", ROWS)
        conn.commit()
    return path


@pytest.fixture
def main_db(tmp_path):
    path = tmp_path / "new_main.db"
    with closing(sqlite3.connect(path)) as conn:
        conn.execute(MAIN_SCHEMA)
        conn.execute(
            "INSERT INTO flight (origin_city_name, destination_city_name) VALUES ('Old', 'Stale')"
        )
        conn.commit()
    return path


def _flight_rows(path):
    with closing(sqlite3.connect(path)) as conn:
        return conn.execute(
            "SELECT origin_city_name, origin_country, origin_iata, destination_country, "
            "destination_iata, price_this_week, skyscanner_url_this_week, price_next_week, "
            "skyscanner_url_next_week FROM flight ORDER BY origin_city_name"
        ).fetchall()


def test_skyscanner_url_places_both_airports():
    url = skyscanner_url("BER", "LIS")
    assert url.startswith("https://www.skyscanner.de/transport/fluge/BER/LIS/?")
    assert url.endswith("&rtn=1")


def test_load_prices_converts_origin_country(raw_db):
    prices = load_prices(raw_db)
    assert [p.origin_country for p in prices] == ["DE", "GB"]
    assert [p.destination_country for p in prices] == ["PT", "IT"]


def test_load_prices_keeps_missing_price(raw_db):
    prices = load_prices(raw_db)
    assert prices[0].this_weekend == 120.5
    assert prices[1].this_weekend is None
    assert prices[1].skyscanner_url == skyscanner_url("EDI", "FCO")


def test_compile_replaces_existing_rows(raw_db, main_db):
    count = compile_flights(raw_db, main_db)
    rows = _flight_rows(main_db)
    assert count == len(ROWS)
    assert [r[0] for r in rows] == ["Berlin", "Edinburgh"]


def test_compile_writes_prices_and_urls(raw_db, main_db):
    compile_flights(raw_db, main_db)
    berlin, edinburgh = _flight_rows(main_db)
    assert berlin[1] == "DE"
    assert berlin[5] == 120.5
    assert berlin[7] == 99.0
    assert berlin[6] == berlin[8] == skyscanner_url("BER", "LIS")
    assert edinburgh[5] == 0
    assert edinburgh[7] == 75.0


def test_compile_twice_does_not_duplicate(raw_db, main_db):
    compile_flights(raw_db, main_db)
    compile_flights(raw_db, main_db)
    assert len(_flight_rows(main_db)) == len(ROWS)


def test_main_runs_with_paths(raw_db, main_db):
    assert main(["--flights-db", str(raw_db), "--main-db", str(main_db)]) == 0
    assert len(_flight_rows(main_db)) == len(ROWS)


def test_main_exits_without_flight_table(raw_db, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["--flights-db", str(raw_db), "--main-db", str(tmp_path / "empty.db")])
    assert "Database error" in str(excinfo.value.code)