"""Price of a flight plus five nights of accommodation at the destination."""

from __future__ import annotations

import argparse
import sqlite3
import sys
from contextlib import closing

from tqdm import tqdm

DEFAULT_DB_PATH = "../../../../../../data/compiled/new_main.db"
DEFAULT_PPPN = 40.0
NIGHTS = 5

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS five_nights_and_flights (
        origin_city TEXT,
        origin_country TEXT,
        destination_city TEXT,
        destination_country TEXT,
        price_fnaf REAL
    )
"""


def median(values) -> float:
    """Median of ``values``; 0 for an empty sequence."""
    ordered = sorted(values)
    n = len(ordered)
    if n == 0:
        return 0.0
    if n % 2 == 0:
        return (ordered[n // 2 - 1] + ordered[n // 2]) / 2
    return ordered[n // 2]


def median_booking_pppn_for_country(conn: sqlite3.Connection, country: str) -> float:
    """Median per-person-per-night price across a country, or the default if none."""
    values = [
        row[0]
        for row in conn.execute(
            "SELECT booking_pppn FROM accommodation WHERE country = ?", (country,)
        )
    ]
    if not values:
        print(f"No booking_pppn values found for country {country}, using default value of 40")
        return DEFAULT_PPPN
    return median(values)


def _booking_pppn(conn: sqlite3.Connection, city: str, country: str) -> float:
    row = conn.execute(
        "SELECT booking_pppn FROM accommodation WHERE city = ? AND country = ?",
        (city, country),
    ).fetchone()
    if row is None:
        print(f"Using median booking_pppn for country: {country}")
        return median_booking_pppn_for_country(conn, country)
    return row[0]


def compile_five_nights_and_flights(db_path) -> int:
    """Fill ``five_nights_and_flights`` from the flight and accommodation tables.

    Returns the number of rows inserted.
    """
    with closing(sqlite3.connect(db_path)) as conn:
        conn.execute(_CREATE_TABLE)
        conn.commit()
        flights = conn.execute(
            "SELECT origin_city_name, origin_country, destination_city_name, "
            "destination_country, price_this_week FROM flight"
        ).fetchall()
        print(f"Total number of rows to process: {len(flights)}")
        with conn:
            for origin_city, origin_country, dest_city, dest_country, price in tqdm(
                flights, desc="Processing rows..."
            ):
                if price is None:
                    raise ValueError(f"flight to {dest_city}, {dest_country} has no price")
                pppn = _booking_pppn(conn, dest_city, dest_country)
                conn.execute(
                    "INSERT INTO five_nights_and_flights (origin_city, origin_country, "
                    "destination_city, destination_country, price_fnaf) VALUES (?, ?, ?, ?, ?)",
                    (origin_city, origin_country, dest_city, dest_country, price + pppn * NIGHTS),
                )
    print("Data inserted into 'five_nights_and_flights' table successfully.")
    return len(flights)


def main(argv=None) -> int:
    """Compute five-nights-and-flights prices in the compiled database."""
    parser = argparse.ArgumentParser(description="Five nights and flights prices")
    parser.add_argument("--db", default=DEFAULT_DB_PATH)
    args = parser.parse_args(argv)
    try:
        compile_five_nights_and_flights(args.db)
    except (sqlite3.Error, ValueError) as err:
        sys.exit(f"Error: {err}")
    return 0