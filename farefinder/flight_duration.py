"""Estimate flight durations from airport coordinates."""

from __future__ import annotations

import argparse
import logging
import math
import sqlite3
import sys
from contextlib import closing

from tqdm import tqdm

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
AVERAGE_SPEED_KMH = 900.0
TAKEOFF_LANDING_BUFFER_H = 0.40
ROUTE_MULTIPLIER = 1.10

DEFAULT_MAIN_DB = "../../../../../../data/compiled/new_main.db"
DEFAULT_LOCATIONS_DB = "../../../../../../data/raw/locations/locations.db"


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def degrees_to_radians(deg: float) -> float:
    """Convert degrees to radians."""
    return deg * math.pi / 180


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two coordinates."""
    lat1, lon1 = degrees_to_radians(lat1), degrees_to_radians(lon1)
    lat2, lon2 = degrees_to_radians(lat2), degrees_to_radians(lon2)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def calculate_adjusted_flight_time(distance: float) -> float:
    """Flight time in hours, allowing for indirect routing and take-off/landing."""
    cruise_time = distance * ROUTE_MULTIPLIER / AVERAGE_SPEED_KMH
    return cruise_time + TAKEOFF_LANDING_BUFFER_H


def format_duration(hours: float) -> float:
    """Express ``hours`` as hours.minutes with minutes rounded to the nearest 20."""
    total_minutes = _round_half_away(hours * 60)
    hours_part = math.floor(total_minutes / 60)
    minutes_part = total_minutes - hours_part * 60
    rounded_minutes = _round_half_away(minutes_part / 20) * 20
    if rounded_minutes == 60:
        hours_part += 1
        rounded_minutes = 0
    return hours_part + rounded_minutes / 100


def get_airport_coordinates(conn: sqlite3.Connection, iata_code: str) -> tuple[float, float]:
    """Return (lat, lon) of an airport; raise LookupError if it is unknown."""
    row = conn.execute("SELECT lat, lon FROM airport WHERE iata = ?", (iata_code,)).fetchone()
    if row is None or row[0] is None or row[1] is None:
        raise LookupError(f"failed to find coordinates for IATA code {iata_code}")
    return float(row[0]), float(row[1])


def update_flight_durations(main_db_path, locations_db_path) -> int:
    """Store an estimated duration on every flight whose airports are known.

    Returns the number of flights updated.
    """
    updated = 0
    with closing(sqlite3.connect(main_db_path)) as main_conn, closing(
        sqlite3.connect(locations_db_path)
    ) as locations_conn:
        flights = main_conn.execute(
            "SELECT id, origin_iata, destination_iata FROM flight"
        ).fetchall()
        with main_conn:
            for flight_id, origin_iata, destination_iata in tqdm(
                flights, desc="Calculating flight durations"
            ):
                try:
                    origin = get_airport_coordinates(locations_conn, origin_iata)
                    destination = get_airport_coordinates(locations_conn, destination_iata)
                except LookupError as err:
                    logger.info("Skipping flight ID %s: %s", flight_id, err)
                    continue
                distance = haversine(*origin, *destination)
                duration = format_duration(calculate_adjusted_flight_time(distance))
                try:
                    main_conn.execute(
                        "UPDATE flight SET duration_hour_dot_mins = ? WHERE id = ?",
                        (duration, flight_id),
                    )
                except sqlite3.Error as err:
                    logger.error("Failed to update flight duration for ID %s: %s", flight_id, err)
                    continue
                updated += 1
        logger.info("Processed %d flight routes", len(flights))
    return updated


def main(argv=None) -> int:
    """Update flight durations in the compiled database."""
    parser = argparse.ArgumentParser(description="Estimate flight durations")
    parser.add_argument("--main-db", default=DEFAULT_MAIN_DB)
    parser.add_argument("--locations-db", default=DEFAULT_LOCATIONS_DB)
    args = parser.parse_args(argv)
    try:
        update_flight_durations(args.main_db, args.locations_db)
    except sqlite3.Error as err:
        sys.exit(f"Database error: {err}")
    return 0