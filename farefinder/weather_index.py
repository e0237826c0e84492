"""Weather pleasantness index (WPI) scoring and the current-weather table."""

from __future__ import annotations

import argparse
import sqlite3
import sys
from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from tqdm import tqdm

DEFAULT_CONFIG_PATH = "../../../../../config/weatherPleasantness.yaml"
DEFAULT_DB_PATH = "../../../../../data/raw/weather/weather.db"

WEIGHT_TEMP = 5.0
WEIGHT_WIND = 1.0
WEIGHT_COND = 2.0
WORST_WIND = 13.8


@dataclass
class WeatherEntry:
    """One forecast row for a city."""

    city: str
    country: str
    iata: str
    date: str
    weather_type: str
    temperature: float
    wind_speed: float
    weather_icon_url: str
    google_weather_link: str
    wpi: float = 0.0


@dataclass
class PleasantnessConfig:
    """Scores (0-10) per weather condition name."""

    conditions: dict[str, float] = field(default_factory=dict)


def load_pleasantness_config(path) -> PleasantnessConfig:
    """Read a YAML file with a ``conditions`` mapping of condition name to score."""
    with Path(path).open(encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    conditions = data.get("conditions") or {}
    if not isinstance(conditions, dict):
        raise ValueError(f"{path}: 'conditions' must be a mapping")
    return PleasantnessConfig({str(k): float(v) for k, v in conditions.items()})


def interpolate(temp: float, temp1: float, temp2: float, score1: float, score2: float) -> float:
    """Linearly map ``temp`` from [temp1, temp2] onto [score1, score2]."""
    return ((temp - temp1) / (temp2 - temp1)) * (score2 - score1) + score1


def temp_pleasantness(temperature: float) -> float:
    """Score a temperature from 0 to 10; 22-26 degrees is ideal."""
    if 22 <= temperature <= 26:
        return 10.0
    if 18 < temperature < 22:
        return interpolate(temperature, 18, 22, 7, 10)
    if 26 < temperature < 40:
        return interpolate(temperature, 26, 40, 10, 0)
    if 5 <= temperature <= 18:
        return interpolate(temperature, 5, 18, 0, 7)
    return 0.0


def wind_pleasantness(wind_speed: float) -> float:
    """Score a wind speed from 0 to 10; calm is best."""
    if wind_speed >= WORST_WIND:
        return 0.0
    return 10 - wind_speed * 10 / WORST_WIND


def weather_cond_pleasantness(cond: str, config: PleasantnessConfig) -> float:
    """Look up the condition's score, 0 if unknown."""
    return config.conditions.get(cond, 0.0)


def weather_pleasantness(temp: float, wind: float, cond: str, config: PleasantnessConfig) -> float:
    """Weighted average of temperature, wind and condition scores."""
    total = (
        temp_pleasantness(temp) * WEIGHT_TEMP
        + wind_pleasantness(wind) * WEIGHT_WIND
        + weather_cond_pleasantness(cond, config) * WEIGHT_COND
    )
    return total / (WEIGHT_TEMP + WEIGHT_WIND + WEIGHT_COND)


_CREATE_CURRENT = """
    CREATE TABLE current_weather (
        city_name TEXT,
        country_code TEXT,
        iata TEXT,
        date TEXT,
        weather_type TEXT,
        temperature REAL,
        weather_icon_url TEXT,
        google_weather_link TEXT,
        wind_speed REAL,
        wpi REAL
    )
"""

_SELECT_FUTURE = """
    SELECT city_name, country_code, iata, date, weather_type, temperature,
           wind_speed, weather_icon_url, google_weather_link
    FROM all_weather
    WHERE datetime(date) > datetime('now', 'localtime') AND city_name != ''
"""

_INSERT_CURRENT = """
    INSERT INTO current_weather (city_name, country_code, iata, date, weather_type,
        temperature, wind_speed, wpi, weather_icon_url, google_weather_link)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


def process_database_entries(db_path, config: PleasantnessConfig) -> int:
    """Rebuild ``current_weather`` from future ``all_weather`` rows with their WPI.

    Returns the number of rows written.
    """
    with closing(sqlite3.connect(db_path)) as conn:
        conn.execute("DROP TABLE IF EXISTS current_weather")
        conn.execute(_CREATE_CURRENT)
        conn.commit()

        entries = [
            WeatherEntry(
                city=row[0],
                country=row[1],
                iata=row[2],
                date=row[3],
                weather_type=row[4],
                temperature=row[5],
                wind_speed=row[6],
                weather_icon_url=row[7],
                google_weather_link=row[8],
            )
            for row in conn.execute(_SELECT_FUTURE)
        ]

        with conn:
            for entry in tqdm(entries, desc="Scoring weather"):
                entry.wpi = weather_pleasantness(
                    entry.temperature, entry.wind_speed, entry.weather_type, config
                )
                conn.execute(
                    _INSERT_CURRENT,
                    (
                        entry.city,
                        entry.country,
                        entry.iata,
                        entry.date,
                        entry.weather_type,
                        entry.temperature,
                        entry.wind_speed,
                        entry.wpi,
                        entry.weather_icon_url,
                        entry.google_weather_link,
                    ),
                )
    return len(entries)


def main(argv=None) -> int:
    """Score one reading (temperature, wind, condition) or rebuild the database table."""
    parser = argparse.ArgumentParser(description="Weather pleasantness index")
    parser.add_argument("values", nargs="*", help="temperature wind_speed condition")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    parser.add_argument("--db", default=DEFAULT_DB_PATH)
    args = parser.parse_args(argv)

    if len(args.values) == 3:
        temp_text, wind_text, condition = args.values
        try:
            temp = float(temp_text)
        except ValueError as err:
            sys.exit(f"Invalid temperature input: {err}")
        try:
            wind = float(wind_text)
        except ValueError as err:
            sys.exit(f"Invalid wind speed input: {err}")
        try:
            config = load_pleasantness_config(args.config)
        except (OSError, ValueError, yaml.YAMLError) as err:
            sys.exit(f"Error loading weather pleasantness config: {err}")
        print(f"Weather Pleasantness Index: {weather_pleasantness(temp, wind, condition, config):.2f}")
        return 0

    try:
        config = load_pleasantness_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as err:
        sys.exit(f"Error loading weather pleasantness config: {err}")
    try:
        process_database_entries(args.db, config)
    except sqlite3.Error as err:
        sys.exit(f"Database error: {err}")
    return 0