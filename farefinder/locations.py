"""Compile the location table: included cities, their airports and average WPI."""

from __future__ import annotations

import argparse
import sqlite3
import sys
from contextlib import closing
from dataclasses import dataclass, field

from tqdm import tqdm

DEFAULT_LOCATIONS_DB = "../../../../../../data/raw/locations/locations.db"
DEFAULT_MAIN_DB = "../../../../../../data/compiled/new_main.db"
MAX_IATAS = 7

_SELECT_CITIES = """
    SELECT city, include_tf, city_ascii, lat, lon, country, iso2, iso3,
           admin_name, capital, population, id
    FROM city WHERE include_tf = 1
"""

_SELECT_AIRPORTS = """
    SELECT iata FROM airport WHERE LOWER(city) = LOWER(?) AND LOWER(country) = LOWER(?)
"""

_INSERT_LOCATION = """
    INSERT OR REPLACE INTO location (city, country, iata_1, iata_2, iata_3, iata_4,
        iata_5, iata_6, iata_7, avg_wpi)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_CASE_INSENSITIVE_MATCH = "LOWER(city) = LOWER(?) AND LOWER(country) = LOWER(?)"


@dataclass
class City:
    """A city marked for inclusion, with the airports that serve it."""

    city: str
    include_tf: int
    city_ascii: str
    lat: float
    lon: float
    country: str
    iso2: str
    iso3: str
    admin_name: str | None
    capital: str | None
    population: int | None
    id: int
    iata_codes: list[str] = field(default_factory=list)


def fill_iatas(city: str, country: str, codes) -> list:
    """Return insert values: city, country, up to seven IATA codes padded with None, avg_wpi."""
    iatas = list(codes)[:MAX_IATAS]
    iatas += [None] * (MAX_IATAS - len(iatas))
    return [city, country, *iatas, None]


def load_cities(locations_db_path) -> list[City]:
    """Load every included city together with its airports' IATA codes."""
    cities = []
    with closing(sqlite3.connect(locations_db_path)) as conn:
        for row in conn.execute(_SELECT_CITIES).fetchall():
            city = City(*row)
            city.iata_codes = [
                iata
                for (iata,) in conn.execute(_SELECT_AIRPORTS, (city.city_ascii, city.iso2))
                if iata is not None
            ]
            if not city.iata_codes:
                print(f"No IATA codes found for city: {city.city_ascii} {city.country}")
            cities.append(city)
    return cities


def update_avg_wpi(conn: sqlite3.Connection) -> int:
    """Set each location's avg_wpi to the mean daytime WPI of its weather rows.

    Locations without weather get NULL. Returns the number given a value.
    """
    pairs = conn.execute("SELECT DISTINCT city, country FROM location").fetchall()
    with_value = 0
    for city, country in tqdm(pairs, desc="Updating average WPI", unit="pairs"):
        try:
            (average,) = conn.execute(
                f"SELECT AVG(avg_daytime_wpi) FROM weather WHERE {_CASE_INSENSITIVE_MATCH}",
                (city, country),
            ).fetchone()
        except sqlite3.Error as err:
            print(f"Failed to calculate average WPI for {city}, {country}: {err}")
            continue
        if average is None:
            print(f"No valid average WPI found for {city}, {country}, setting avg_wpi to NULL")
        else:
            with_value += 1
        try:
            conn.execute(
                f"UPDATE location SET avg_wpi = ? WHERE {_CASE_INSENSITIVE_MATCH}",
                (average, city, country),
            )
        except sqlite3.Error as err:
            print(f"Failed to update avg_wpi for {city}, {country}: {err}")
    conn.commit()
    print("Updated avg_wpi based on weather data successfully.")
    return with_value


def compile_locations(locations_db_path, main_db_path) -> int:
    """Fill the compiled location table and its average WPI.

    Cities that cannot be inserted (such as those without any airport) are
    reported and skipped. Returns the number of cities inserted.
    """
    cities = load_cities(locations_db_path)
    inserted = 0
    with closing(sqlite3.connect(main_db_path)) as conn:
        for city in tqdm(cities, desc="Inserting into new_main.db", unit="cities"):
            try:
                conn.execute(
                    _INSERT_LOCATION, fill_iatas(city.city_ascii, city.iso2, city.iata_codes)
                )
            except sqlite3.Error as err:
                print(err)
                continue
            inserted += 1
        conn.commit()
        update_avg_wpi(conn)
    return inserted


def main(argv=None) -> int:
    """Compile the location table of the compiled database."""
    parser = argparse.ArgumentParser(description="Compile locations")
    parser.add_argument("--locations-db", default=DEFAULT_LOCATIONS_DB)
    parser.add_argument("--main-db", default=DEFAULT_MAIN_DB)
    args = parser.parse_args(argv)
    try:
        compile_locations(args.locations_db, args.main_db)
    except sqlite3.Error as err:
        sys.exit(f"Database error: {err}")
    return 0