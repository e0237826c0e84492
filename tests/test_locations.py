import sqlite3
from contextlib import closing

import pytest

from farefinder.locations import City, compile_locations, fill_iatas, load_cities, update_avg_wpi
from farefinder.maindb import initialize_database


def _make_locations_db(path):
    with closing(sqlite3.connect(path)) as conn:
        conn.execute(
            "CREATE TABLE city (city TEXT, include_tf INTEGER, city_ascii TEXT, lat REAL, "
            "lon REAL, country TEXT, iso2 TEXT, iso3 TEXT, admin_name TEXT, capital TEXT, "
            "population INTEGER, id INTEGER)"
        )
        conn.execute("CREATE TABLE airport (iata TEXT, city TEXT, country TEXT)")
        conn.executemany(
            "INSERT INTO city VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                ("Paris", 1, "Paris", 48.8, 2.3, "France", "FR", "FRA", None, "primary", 100, 1),
                ("Lyon", 0, "Lyon", 45.7, 4.8, "France", "FR", "FRA", None, None, 50, 2),
                ("Nowhere", 1, "Nowhere", 1.0, 1.0, "Spain", "ES", "ESP", None, None, None, 3),
            ],
        )
        conn.executemany(
            "INSERT INTO airport VALUES (?, ?, ?)",
            [("CDG", "paris", "fr"), ("ORY", "PARIS", "FR"), ("LYS", "Lyon", "FR")],
        )
        conn.commit()


@pytest.fixture
def locations_db(tmp_path):
    path = tmp_path / "locations.db"
    _make_locations_db(path)
    return path


@pytest.fixture
def main_db(tmp_path):
    path = tmp_path / "new_main.db"
    initialize_database(path)
    return path


def test_fill_iatas_pads_with_none():
    values = fill_iatas("Paris", "FR", ["CDG", "ORY"])
    assert len(values) == 10
    assert values[:4] == ["Paris", "FR", "CDG", "ORY"]
    assert values[4:] == [None] * 6


def test_fill_iatas_keeps_only_seven_codes():
    codes = [f"A{n:02d}" for n in range(9)]
    values = fill_iatas("X", "YY", codes)
    assert len(values) == 10
    assert values[2:9] == codes[:7]
    assert values[9] is None


def test_load_cities_only_included_with_airports(locations_db):
    cities = load_cities(locations_db)
    by_name = {city.city_ascii: city for city in cities}
    assert set(by_name) == {"Paris", "Nowhere"}
    assert sorted(by_name["Paris"].iata_codes) == ["CDG", "ORY"]
    assert by_name["Nowhere"].iata_codes == []
    assert by_name["Nowhere"].population is None


def test_compile_locations_skips_city_without_airport(locations_db, main_db):
    inserted = compile_locations(locations_db, main_db)
    assert inserted == 1
    with closing(sqlite3.connect(main_db)) as conn:
        rows = conn.execute("SELECT city, country, iata_1, iata_2, iata_3 FROM location").fetchall()
    assert len(rows) == 1
    city, country, iata_1, iata_2, iata_3 = rows[0]
    assert (city, country) == ("Paris", "FR")
    assert sorted([iata_1, iata_2]) == ["CDG", "ORY"]
    assert iata_3 is None


def test_compile_locations_sets_avg_wpi_from_weather(locations_db, main_db):
    with closing(sqlite3.connect(main_db)) as conn:
        conn.executemany(
            "INSERT INTO weather (city, country, date, avg_daytime_wpi) VALUES (?, ?, ?, ?)",
            [("paris", "fr", "2030-01-01", 6.5), ("PARIS", "FR", "2030-01-02", 6.5)],
        )
        conn.commit()
    compile_locations(locations_db, main_db)
    with closing(sqlite3.connect(main_db)) as conn:
        (avg,) = conn.execute("SELECT avg_wpi FROM location WHERE city = 'Paris'").fetchone()
    assert avg == pytest.approx(6.5)


def test_update_avg_wpi_between_extremes_and_null_without_weather(main_db):
    with closing(sqlite3.connect(main_db)) as conn:
        conn.executemany(
            "INSERT INTO location (city, country, iata_1) VALUES (?, ?, ?)",
            [("Rome", "IT", "FCO"), ("Oslo", "NO", "OSL")],
        )
        conn.executemany(
            "INSERT INTO weather (city, country, date, avg_daytime_wpi) VALUES (?, ?, ?, ?)",
            [("Rome", "IT", "2030-01-01", 4.0), ("Rome", "IT", "2030-01-02", 9.0)],
        )
        conn.commit()
        with_value = update_avg_wpi(conn)
        result = dict(conn.execute("SELECT city, avg_wpi FROM location").fetchall())
    assert with_value == 1
    assert 4.0 < result["Rome"] < 9.0
    assert result["Oslo"] is None


def test_city_defaults_to_no_codes():
    city = City("A", 1, "A", 0.0, 0.0, "B", "BB", "BBB", None, None, None, 7)
    assert city.iata_codes == []
    assert fill_iatas(city.city_ascii, city.iso2, city.iata_codes)[:2] == ["A", "BB"]