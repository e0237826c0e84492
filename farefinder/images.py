"""Attach city photos to compiled locations and collect each city's first photo."""

from __future__ import annotations

import logging
import os
import shutil
import sqlite3
from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_IMAGES = 5
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif"})
IMAGE_COLUMNS = tuple(f"image_{n}" for n in range(1, MAX_IMAGES + 1))

DEFAULT_DB_PATH = "../../../../../../data/compiled/new_main.db"
DEFAULT_IMAGES_ROOT = "../../../../../../ignore/location-images"

_UPDATE_IMAGES = """
    UPDATE location SET image_1 = ?, image_2 = ?, image_3 = ?, image_4 = ?, image_5 = ?
    WHERE city = ? AND country = ?
"""


@dataclass
class CityImages:
    """A location and the web paths of up to five of its photos."""

    city_name: str
    country: str
    images: list[str] = field(default_factory=list)


def _extension(filename: str) -> str:
    base = filename.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def is_image(filename: str, ignore_case: bool = True) -> bool:
    """Tell whether ``filename`` has a .jpg, .jpeg, .png or .gif extension."""
    ext = _extension(filename)
    if ignore_case:
        ext = ext.lower()
    return ext in IMAGE_EXTENSIONS


def ensure_image_columns_exist(conn: sqlite3.Connection) -> list[str]:
    """Add any missing image_1..image_5 columns to ``location``; return those added."""
    existing = {row[1] for row in conn.execute("PRAGMA table_info(location)")}
    added = []
    for column in IMAGE_COLUMNS:
        if column in existing:
            continue
        logger.info("Column '%s' is missing. Adding it to the table...", column)
        conn.execute(f"ALTER TABLE location ADD COLUMN {column} TEXT")
        added.append(column)
    conn.commit()
    return added


def load_cities(conn: sqlite3.Connection) -> list[CityImages]:
    """Read every (city, country) of the ``location`` table."""
    cities = [
        CityImages(city_name=city, country=country)
        for city, country in conn.execute("SELECT city, country FROM location")
    ]
    logger.info("Loaded %d cities from the database", len(cities))
    return cities


def get_city_images(city_folder) -> list[str]:
    """Return paths of the first five images in ``city_folder``, sorted by name.

    Raises OSError if the folder cannot be read.
    """
    folder = os.fspath(city_folder)
    with os.scandir(folder) as entries:
        names = sorted(
            entry.name for entry in entries if not entry.is_dir() and is_image(entry.name)
        )
    return [os.path.join(folder, name) for name in names[:MAX_IMAGES]]


def update_city_images(conn: sqlite3.Connection, city: CityImages) -> int:
    """Store the city's image paths on its location row; return the rows changed."""
    images = list(city.images[:MAX_IMAGES])
    images += [""] * (MAX_IMAGES - len(images))
    cursor = conn.execute(_UPDATE_IMAGES, (*images, city.city_name, city.country))
    conn.commit()
    if cursor.rowcount == 0:
        logger.warning(
            "No rows were updated for city: %s. Check city and country values.", city.city_name
        )
    return cursor.rowcount


def assign_location_images(db_path=DEFAULT_DB_PATH, images_root=DEFAULT_IMAGES_ROOT) -> int:
    """Fill the image columns of every location from ``images_root/<City_Name>``.

    Stored paths are relative to the parent of ``images_root`` and start with
    a slash. Returns the number of cities updated.
    """
    root = Path(images_root)
    updated = 0
    with closing(sqlite3.connect(db_path)) as conn:
        ensure_image_columns_exist(conn)
        for city in load_cities(conn):
            folder_name = city.city_name.replace(" ", "_")
            try:
                found = get_city_images(root / folder_name)
            except OSError as err:
                logger.warning("Error getting images for %s: %s", city.city_name, err)
                continue
            if not found:
                logger.info("No images found for %s. Skipping update.", city.city_name)
                continue
            city.images = [
                f"/{root.name}/{folder_name}/{Path(path).name}" for path in found
            ]
            try:
                if update_city_images(conn, city):
                    updated += 1
            except sqlite3.Error as err:
                logger.error("Failed to update city %s: %s", city.city_name, err)
    return updated


def copy_first_images(source_dir, destination_dir) -> list[Path]:
    """Copy the alphabetically first image of each city folder into ``destination_dir``.

    Extensions are matched case-sensitively. Returns the paths of the copies.
    """
    source = Path(source_dir)
    destination = Path(destination_dir)
    folders = sorted(
        (entry for entry in source.iterdir() if entry.is_dir()), key=lambda p: p.name
    )
    destination.mkdir(exist_ok=True)
    copied = []
    for folder in folders:
        try:
            names = sorted(
                entry.name
                for entry in folder.iterdir()
                if not entry.is_dir() and is_image(entry.name, ignore_case=False)
            )
        except OSError as err:
            logger.error("Error reading directory for %s: %s", folder.name, err)
            continue
        if not names:
            print(f"No image files found for {folder.name}.")
            continue
        target_folder = destination / folder.name
        try:
            target_folder.mkdir(exist_ok=True)
            target = target_folder / names[0]
            shutil.copyfile(folder / names[0], target)
        except OSError as err:
            logger.error("Failed to copy image %s: %s", names[0], err)
            continue
        print(f"Copied file from {folder / names[0]} to {target}")
        copied.append(target)
    return copied