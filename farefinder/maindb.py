"""Create, copy, back up and remove the compiled main database."""

from __future__ import annotations

import logging
import shutil
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_DIR_NAME = "backups"


@dataclass(frozen=True)
class _Table:
    name: str
    columns: tuple[tuple[str, str], ...]
    constraints: tuple[str, ...] = ()

    @property
    def ddl(self) -> str:
        parts = [f'"{col}" {decl}'.rstrip() for col, decl in self.columns]
        parts.extend(self.constraints)
        body = ",\n    ".join(parts)
        return f'CREATE TABLE IF NOT EXISTS "{self.name}" (\n    {body}\n)'


_NAME = "VARCHAR(255) NOT NULL"
_CODE2 = "CHAR(2) NOT NULL"
_URL = "VARCHAR(255)"
_SCORE = "FLOAT(10,1)"


def _iata_columns() -> tuple[tuple[str, str], ...]:
    first = (("iata_1", "CHAR(3) NOT NULL"),)
    return first + tuple((f"iata_{n}", "CHAR(3)") for n in range(2, 8))


def _endpoint_columns() -> tuple[tuple[str, str], ...]:
    fields = ("city_name", "country", "iata", "skyscanner_id")
    return tuple(
        (f"{side}_{field}", "TEXT")
        for side in ("origin", "destination")
        for field in fields
    )


def _flight_table(*extra: tuple[str, str]) -> _Table:
    columns = (
        (("id", "INTEGER"),)
        + _endpoint_columns()
        + (
            ("price_this_week", "DECIMAL"),
            ("skyscanner_url_this_week", _URL),
            ("price_next_week", "DECIMAL"),
            ("skyscanner_url_next_week", _URL),
            ("duration_in_minutes", "DECIMAL"),
        )
        + extra
    )
    return _Table("flight", columns, ('PRIMARY KEY("id" AUTOINCREMENT)',))


_WEATHER = _Table(
    "weather",
    (
        ("city", _NAME),
        ("country", _CODE2),
        ("date", "DATE NOT NULL"),
        ("avg_daytime_temp", _SCORE),
        ("weather_icon", _URL),
        ("google_url", _URL),
        ("avg_daytime_wpi", _SCORE),
    ),
)

_LOCATION_BASE = (("city", _NAME), ("country", _CODE2)) + _iata_columns() + (
    ("avg_wpi", _SCORE),
)

_SETUP_TABLES = (
    _Table("location", _LOCATION_BASE),
    _WEATHER,
    _flight_table(),
    _Table(
        "five_nights_and_flights",
        tuple(
            (f"{side}_{field}", "TEXT")
            for side in ("origin", "destination")
            for field in ("city", "country")
        )
        + (("price_fnaf", "REAL"),),
    ),
    _Table(
        "accommodation",
        (
            ("city", "TEXT NOT NULL"),
            ("country", "TEXT NOT NULL"),
            ("booking_url", "TEXT"),
            ("booking_pppn", "REAL NOT NULL"),
        ),
    ),
)

_INIT_TABLES = (
    _flight_table(("duration_in_hours", "DECIMAL")),
    _WEATHER,
    _Table(
        "accommodation",
        (
            ("city", _NAME),
            ("country", _CODE2),
            ("airbnb_url", _URL),
            ("booking_url", _URL),
            ("avg_pppn", "DECIMAL(10, 2) NOT NULL"),
        ),
    ),
    _Table(
        "location",
        _LOCATION_BASE + tuple((f"image_{n}", "TEXT") for n in range(1, 10)),
        ("UNIQUE(city, country)",),
    ),
)


def _create_tables(db_path, tables) -> None:
    with closing(sqlite3.connect(db_path)) as conn:
        with conn:
            for table in tables:
                conn.execute(table.ddl)


def initialize_database(db_path) -> None:
    """Create the compiled database's tables used by the pipeline, if missing."""
    _create_tables(db_path, _SETUP_TABLES)
    logger.info("Database and tables created successfully.")


def init_main_db(db_path) -> None:
    """Create the compiled database with image columns and unique locations, if missing."""
    _create_tables(db_path, _INIT_TABLES)
    logger.info("Database initialized and tables created successfully.")


def delete_new_main_db(db_path) -> bool:
    """Delete the database file if present; return whether it was deleted."""
    try:
        Path(db_path).unlink()
    except FileNotFoundError:
        return False
    print("Deleted existing new_main.db")
    return True


def copy_main_db(src_path, dest_path) -> None:
    """Copy the main database file over ``dest_path``."""
    shutil.copyfile(src_path, dest_path)
    print("Successfully copied main.db to new_main.db")


def backup_database(db_path, output_dir, now: datetime | None = None) -> Path | None:
    """Copy the database into ``output_dir/backups`` under a timestamped name.

    Returns the backup path, or None if the database does not exist.
    """
    source = Path(db_path)
    if not source.exists():
        return None
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    backup_dir = Path(output_dir) / BACKUP_DIR_NAME
    backup_dir.mkdir(exist_ok=True)
    target = backup_dir / f"main_backup_{stamp}.db"
    shutil.copyfile(source, target)
    return target