"""Copy Skyscanner prices from the raw flights database into the compiled one."""

from __future__ import annotations

import argparse
import sqlite3
import sys
from contextlib import closing
from dataclasses import dataclass

from tqdm import tqdm

from farefinder.countries import get_iso_code

DEFAULT_FLIGHTS_DB = "../../../../../../data/raw/flights/flights.db"
DEFAULT_MAIN_DB = "../../../../../../data/compiled/new_main.db"

_SELECT_PRICES = """
    SELECT origin_city, origin_country, origin_iata, origin_skyscanner_id,
           destination_city, destination_country, destination_iata,
           destination_skyscanner_id, this_weekend, next_weekend
    FROM skyscannerprices
"""

_INSERT_FLIGHT = """
    INSERT INTO flight (origin_city_name, origin_country, origin_iata, origin_skyscanner_id,
        destination_city_name, destination_country, destination_iata,
        destination_skyscanner_id, price_this_week, skyscanner_url_this_week,
        price_next_week, skyscanner_url_next_week)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


@dataclass
class SkyScannerPrice:
    """A route with its prices for this and next weekend."""

    origin_city: str
    origin_country: str
    origin_iata: str
    origin_skyscanner_id: str
    destination_city: str
    destination_country: str
    destination_iata: str
    destination_skyscanner_id: str
    this_weekend: float | None
    next_weekend: float | None
    skyscanner_url: str = ""


def skyscanner_url(origin_iata: str, destination_iata: str) -> str:
    """Skyscanner return-trip search link between two airports."""
    return (
        f"https://www.skyscanner.de/transport/fluge/{origin_iata}/{destination_iata}/"
        "?adults=1&adultsv2=1&cabinclass=economy&children=0&inboundaltsenabled=false"
        "&infants=0&outboundaltsenabled=false&preferdirects=true&ref=home&rtn=1"
    )


def load_prices(flights_db_path) -> list[SkyScannerPrice]:
    """Read every price row, turning the origin country into its ISO code."""
    prices = []
    with closing(sqlite3.connect(flights_db_path)) as conn:
        for row in conn.execute(_SELECT_PRICES):
            price = SkyScannerPrice(*row)
            price.origin_country = get_iso_code(price.origin_country or "")
            price.skyscanner_url = skyscanner_url(price.origin_iata, price.destination_iata)
            prices.append(price)
    return prices


def compile_flights(flights_db_path, main_db_path) -> int:
    """Replace the compiled ``flight`` table with the raw Skyscanner prices.

    Missing prices are stored as 0. Returns the number of rows inserted.
    """
    print("Starting to Compile Flights Table")
    prices = load_prices(flights_db_path)
    with closing(sqlite3.connect(main_db_path)) as conn:
        with conn:
            conn.execute("DELETE FROM flight")
        print("Existing data deleted.")
        with conn:
            for price in tqdm(prices, desc="Inserting records"):
                conn.execute(
                    _INSERT_FLIGHT,
                    (
                        price.origin_city,
                        price.origin_country,
                        price.origin_iata,
                        price.origin_skyscanner_id,
                        price.destination_city,
                        price.destination_country,
                        price.destination_iata,
                        price.destination_skyscanner_id,
                        price.this_weekend if price.this_weekend is not None else 0.0,
                        price.skyscanner_url,
                        price.next_weekend if price.next_weekend is not None else 0.0,
                        price.skyscanner_url,
                    ),
                )
    print("Data inserted successfully into new_main.db")
    return len(prices)


def main(argv=None) -> int:
    """Compile the flight table of the compiled database."""
    parser = argparse.ArgumentParser(description="Compile flight prices")
    parser.add_argument("--flights-db", default=DEFAULT_FLIGHTS_DB)
    parser.add_argument("--main-db", default=DEFAULT_MAIN_DB)
    args = parser.parse_args(argv)
    try:
        compile_flights(args.flights_db, args.main_db)
    except sqlite3.Error as err:
        sys.exit(f"Database error: {err}")
    return 0