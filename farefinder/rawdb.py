"""Create the raw flights, weather and locations databases and mark served cities."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing

from tqdm import tqdm

logger = logging.getLogger(__name__)

DEFAULT_FLIGHTS_DB = "../../../../../../data/raw/flights/flights.db"
DEFAULT_WEATHER_DB = "../../../../../../data/raw/weather/weather.db"
DEFAULT_LOCATIONS_DB = "../../../../../../../data/raw/locations/locations.db"

CONTINUE_PROMPT = "Press 'Enter' to continue with the next table..."

_CREATE_SCHEDULE = """
    CREATE TABLE IF NOT EXISTS "schedule" (
        "id" INTEGER,
        "flightNumber" TEXT NOT NULL,
        "departureAirport" TEXT,
        "arrivalAirport" TEXT,
        "departureTime" TEXT,
        "arrivalTime" TEXT,
        "direction" TEXT NOT NULL,
        PRIMARY KEY("id" AUTOINCREMENT)
    )
"""

_CREATE_SKYSCANNER_PRICES = """
    CREATE TABLE IF NOT EXISTS "skyscannerprices" (
        "origin_city" TEXT,
        "origin_country" TEXT,
        "origin_iata" TEXT,
        "origin_skyscanner_id" TEXT,
        "destination_city" TEXT,
        "destination_country" TEXT,
        "destination_iata" TEXT,
        "destination_skyscanner_id" TEXT,
        "this_weekend" REAL,
        "next_weekend" REAL,
        "duration" INTEGER
    )
"""

_CREATE_WEATHER = """
    CREATE TABLE IF NOT EXISTS weather (
        weather_id INTEGER PRIMARY KEY AUTOINCREMENT,
        city_name TEXT NOT NULL,
        country_code TEXT NOT NULL,
        iata TEXT NOT NULL,
        date TEXT NOT NULL,
        weather_type TEXT NOT NULL,
        temperature REAL NOT NULL,
        weather_icon_url TEXT NOT NULL,
        google_weather_link TEXT NOT NULL,
        wind_speed REAL NOT NULL
    )
"""

_LOCATIONS_TABLES = [
    """
    CREATE TABLE city (
        id INTEGER PRIMARY KEY,
        include_tf BOOLEAN,
        city TEXT,
        countrycode TEXT,
        population BIGINT,
        elevation REAL,
        lat REAL,
        long REAL
    )
    """,
    """
    CREATE TABLE "airport" (
        "icao" TEXT,
        "iata" TEXT,
        "name" TEXT,
        "city" TEXT,
        "subd" BLOB,
        "country" TEXT,
        "elevation" INTEGER,
        "lat" REAL,
        "lon" REAL,
        "tz" TEXT,
        "lid" TEXT,
        "skyscannerid" TEXT,
        PRIMARY KEY("icao")
    )
    """,
    """
    CREATE TABLE marina (
        id INTEGER PRIMARY KEY,
        name TEXT,
        location TEXT,
        capacity INTEGER,
        facilities TEXT,
        lat REAL,
        lon REAL
    )
    """,
    """
    CREATE TABLE beach (
        id INTEGER PRIMARY KEY,
        name TEXT,
        location TEXT,
        accessibility TEXT,
        facilities TEXT,
        water_quality TEXT,
        lat REAL,
        lon REAL
    )
    """,
    """
    CREATE TABLE ski_resort (
        id INTEGER PRIMARY KEY,
        name TEXT,
        location TEXT,
        num_trails INTEGER,
        difficulty TEXT,
        lift_count INTEGER,
        lat REAL,
        lon REAL
    )
    """,
    """
    CREATE TABLE national_park (
        id INTEGER PRIMARY KEY,
        name TEXT,
        location TEXT,
        area_sq_km REAL,
        visitors_per_year INTEGER,
        established_year INTEGER,
        lat REAL,
        lon REAL
    )
    """,
]


def init_flights_db(db_path=DEFAULT_FLIGHTS_DB, confirm=None) -> None:
    """Create the schedule and skyscannerprices tables if missing.

    If ``confirm`` is given it is called with a prompt between the two tables,
    so a caller can pause there (``confirm=input``).
    """
    with closing(sqlite3.connect(db_path)) as conn:
        with conn:
            conn.execute(_CREATE_SCHEDULE)
        logger.info("Checked/created 'schedule' table successfully.")
        if confirm is not None:
            confirm(CONTINUE_PROMPT)
        with conn:
            conn.execute(_CREATE_SKYSCANNER_PRICES)
        logger.info("Checked/created 'skyscannerprices' table successfully.")


def init_weather_db(db_path=DEFAULT_WEATHER_DB) -> None:
    """Create the raw weather table if missing."""
    with closing(sqlite3.connect(db_path)) as conn:
        with conn:
            conn.execute(_CREATE_WEATHER)
    logger.info("Weather table created successfully.")


def init_locations_db(db_path=DEFAULT_LOCATIONS_DB) -> None:
    """Create the locations tables; raises sqlite3.OperationalError if any exists."""
    with closing(sqlite3.connect(db_path)) as conn:
        with conn:
            for statement in _LOCATIONS_TABLES:
                conn.execute(statement)
    logger.info("All tables created successfully.")


def set_iata_cities_to_true(db_path=DEFAULT_LOCATIONS_DB) -> int:
    """Mark every city served by an airport with an IATA code as included.

    Cities match airports on lower-cased name and ISO-2 country. All updates
    run in one transaction. Returns the number of airport rows examined.
    """
    with closing(sqlite3.connect(db_path)) as conn:
        with conn:
            (total,) = conn.execute(
                "SELECT COUNT(*) FROM airport WHERE iata IS NOT NULL"
            ).fetchone()
            rows = conn.execute(
                "SELECT LOWER(city), LOWER(country) FROM airport WHERE iata IS NOT NULL"
            ).fetchall()
            for city, country in tqdm(rows, total=total, desc="Updating cities..."):
                if city is None or country is None:
                    continue
                conn.execute(
                    "UPDATE city SET include_tf = 1 "
                    "WHERE LOWER(city_ascii) = ? AND LOWER(iso2) = ?",
                    (city, country),
                )
    print("The 'include_tf' flags were updated successfully.")
    return len(rows)