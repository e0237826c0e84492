"""Find destinations reachable from an origin in both directions of a trip."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_FLIGHTS_DB = "data/flights.db"


@dataclass
class OriginInfo:
    """The home airport and the outbound/return date windows."""

    iata: str
    departure_start_date: str = ""
    departure_end_date: str = ""
    arrival_start_date: str = ""
    arrival_end_date: str = ""


@dataclass
class DestinationInfo:
    """A destination airport with its location and booking links."""

    iata: str
    city: str = ""
    country: str = ""
    sky_scanner_id: str = ""
    skyscanner_url: str = ""
    airbnb_url: str = ""
    booking_url: str = ""


def intersect_sets(sets) -> list[str]:
    """Return the items present in every set, sorted; empty when given no sets."""
    sets = list(sets)
    if not sets:
        return []
    common = set(sets[0]).intersection(*sets[1:])
    return sorted(common)


def query_airports(conn: sqlite3.Connection, query: str, params=()) -> set[str]:
    """Run a one-column query and collect its values as a set."""
    return {row[0] for row in conn.execute(query, params)}


def fetch_airport_details(conn: sqlite3.Connection, iata_code: str) -> tuple[str, str, str]:
    """Return (city, country, skyscanner id) for an airport.

    Raises LookupError if the airport is unknown or its details are incomplete.
    """
    row = conn.execute(
        "SELECT city, country, skyscannerid FROM airport_info WHERE iata = ?", (iata_code,)
    ).fetchone()
    if row is None:
        raise LookupError(f"no airport_info row for {iata_code}")
    if any(value is None for value in row):
        raise LookupError(f"incomplete airport_info row for {iata_code}")
    city, country, skyscanner_id = row
    return city, country, skyscanner_id


def build_airport_details(conn: sqlite3.Connection, iata_codes) -> list[DestinationInfo]:
    """Build destinations for the codes, skipping blank or unknown ones."""
    details = []
    for iata in iata_codes:
        if not iata:
            continue
        try:
            city, country, skyscanner_id = fetch_airport_details(conn, iata)
        except LookupError as err:
            logger.warning("Error fetching details for IATA %s: %s", iata, err)
            continue
        details.append(
            DestinationInfo(iata=iata, city=city, country=country, sky_scanner_id=skyscanner_id)
        )
    return details


def determine_flights(origin: OriginInfo, db_path=DEFAULT_FLIGHTS_DB) -> list[DestinationInfo]:
    """Find airports served outbound and inbound from ``origin`` within its windows."""
    queries = [
        (
            "SELECT arrivalAirport FROM flights WHERE departureAirport = ? "
            "AND departureTime BETWEEN ? AND ?",
            (origin.iata, origin.departure_start_date, origin.departure_end_date),
        ),
        (
            "SELECT departureAirport FROM flights WHERE arrivalAirport = ? "
            "AND arrivalTime BETWEEN ? AND ?",
            (origin.iata, origin.arrival_start_date, origin.arrival_end_date),
        ),
    ]
    with closing(sqlite3.connect(db_path)) as conn:
        sets = [query_airports(conn, query, params) for query, params in queries]
        intersection = intersect_sets(sets)
        print(f"Airports meeting all conditions: [{' '.join(intersection)}]")
        details = build_airport_details(conn, intersection)
    for info in details:
        print(f"{info.iata}: {info.city}, {info.country}")
    return details