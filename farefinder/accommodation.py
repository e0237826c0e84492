"""Typical nightly accommodation prices per city from Booking.com listings."""

from __future__ import annotations

import argparse
import logging
import math
import sqlite3
import sys
from contextlib import closing
from dataclasses import dataclass, field

from tqdm import tqdm

logger = logging.getLogger(__name__)

DEFAULT_NEW_DB = "../../../../../../../data/compiled/new_main.db"
DEFAULT_RAW_DB = "../../../../../../../data/raw/accommocation/booking-com/booking.db"
MIN_ENTRIES = 10
TRIM_FRACTION = 0.10
STAY_NIGHTS = 14

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS accommodation (
        city TEXT NOT NULL,
        country TEXT NOT NULL,
        booking_url TEXT,
        booking_pppn REAL NOT NULL
    )
"""


@dataclass
class LocationPrices:
    """All listing prices gathered for one city."""

    city: str
    country: str
    prices: list[float] = field(default_factory=list)


def calculate_median(prices) -> float:
    """Median of an already sorted, non-empty sequence."""
    n = len(prices)
    if n == 0:
        raise ValueError("median of an empty sequence")
    if n % 2 == 0:
        return (prices[n // 2 - 1] + prices[n // 2]) / 2
    return prices[n // 2]


def round_to_two_decimal_places(value: float) -> float:
    """Round to two decimals, halves away from zero."""
    scaled = value * 100
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / 100


def trimmed_pppn(prices) -> float | None:
    """Price per person per night from the median of the middle 80% of stay prices.

    Returns None when there are fewer than ten prices.
    """
    ordered = sorted(prices)
    n = len(ordered)
    if n < MIN_ENTRIES:
        return None
    drop = math.floor(n * TRIM_FRACTION)
    remaining = ordered[drop : n - drop]
    return round_to_two_decimal_places(calculate_median(remaining) / STAY_NIGHTS)


def booking_url(city: str, checkin: str, checkout: str) -> str:
    """Booking.com search link for ``city`` between the given dates."""
    return (
        f"https://www.booking.com/searchresults.en-gb.html?ss={city}&group_adults=1"
        "&no_rooms=1&group_children=0&nflt=price%3DEUR-min-110-1%3Breview_score%3D80"
        f"&flex_window=2&checkin={checkin}&checkout={checkout}"
    )


def compile_accommodation(new_db_path, raw_db_path) -> int:
    """Write one accommodation row per well-reviewed city into the compiled database.

    Returns the number of rows inserted.
    """
    locations: dict[tuple[str, str], LocationPrices] = {}
    checkin = checkout = ""
    with closing(sqlite3.connect(raw_db_path)) as raw:
        rows = raw.execute(
            "SELECT city, country, gross_price, checkin_date, checkout_date "
            "FROM property WHERE review_score > 7"
        )
        for row in rows:
            if any(value is None for value in row):
                logger.warning("Skipping incomplete property row: %s", row)
                continue
            city, country, price, row_checkin, row_checkout = row
            if not checkin and not checkout:
                checkin, checkout = row_checkin, row_checkout
            location = locations.setdefault((city, country), LocationPrices(city, country))
            location.prices.append(float(price))

    inserted = 0
    with closing(sqlite3.connect(new_db_path)) as conn:
        conn.execute(_CREATE_TABLE)
        conn.commit()
        for location in tqdm(locations.values(), desc="Compiling accommodation"):
            pppn = trimmed_pppn(location.prices)
            if pppn is None:
                print(
                    f"Not enough entries for {location.city}, {location.country} "
                    "to drop 10% outliers"
                )
                continue
            try:
                with conn:
                    conn.execute(
                        "INSERT INTO accommodation (city, country, booking_url, booking_pppn) "
                        "VALUES (?, ?, ?, ?)",
                        (
                            location.city,
                            location.country,
                            booking_url(location.city, checkin, checkout),
                            pppn,
                        ),
                    )
            except sqlite3.Error as err:
                logger.error(
                    "Failed to insert accommodation for %s, %s: %s",
                    location.city,
                    location.country,
                    err,
                )
                continue
            inserted += 1
    print("Data inserted into new_main.db successfully!")
    return inserted


def main(argv=None) -> int:
    """Compile accommodation prices into the compiled database."""
    parser = argparse.ArgumentParser(description="Compile accommodation prices")
    parser.add_argument("--new-db", default=DEFAULT_NEW_DB)
    parser.add_argument("--raw-db", default=DEFAULT_RAW_DB)
    args = parser.parse_args(argv)
    try:
        compile_accommodation(args.new_db, args.raw_db)
    except sqlite3.Error as err:
        sys.exit(f"Database error: {err}")
    return 0