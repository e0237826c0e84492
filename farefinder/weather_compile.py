"""Compile daily daytime weather averages into the compiled database."""

from __future__ import annotations

import argparse
import sqlite3
import sys
from contextlib import closing
from dataclasses import dataclass

from tqdm import tqdm

DEFAULT_WEATHER_DB = "../../../../../../data/raw/weather/weather.db"
DEFAULT_MAIN_DB = "../../../../../../data/compiled/new_main.db"

_SELECT_DAYTIME = """
    SELECT city_name, country_code, date, AVG(temperature) AS avg_temp, AVG(wpi) AS avg_wpi,
           weather_icon_url, google_weather_link
    FROM current_weather
    WHERE strftime('%H:%M:%S', date) BETWEEN '10:00:00' AND '18:00:00'
    GROUP BY city_name, country_code, strftime('%Y-%m-%d', date)
"""

_INSERT_WEATHER = """
    INSERT INTO weather (city, country, date, avg_daytime_temp, weather_icon, google_url,
        avg_daytime_wpi)
    VALUES (?, ?, ?, ?, ?, ?, ?)
"""


@dataclass
class CompiledWeather:
    """Average daytime weather of one city on one day."""

    city: str
    country: str
    date: str
    avg_daytime_temp: float
    weather_icon: str
    google_url: str
    avg_daytime_wpi: float


def _one_decimal(value: float) -> float:
    return float(f"{value:.1f}")


def load_daytime_weather(weather_db_path) -> list[CompiledWeather]:
    """Average each city's 10:00-18:00 readings per day, to one decimal place."""
    with closing(sqlite3.connect(weather_db_path)) as conn:
        rows = conn.execute(_SELECT_DAYTIME).fetchall()
    weathers = []
    for city, country, date, temperature, wpi, icon, link in rows:
        if temperature is None or wpi is None:
            raise ValueError(f"missing temperature or WPI for {city}, {country} on {date}")
        weathers.append(
            CompiledWeather(
                city=city,
                country=country,
                date=date.split(" ")[0],
                avg_daytime_temp=_one_decimal(temperature),
                weather_icon=icon,
                google_url=link,
                avg_daytime_wpi=_one_decimal(wpi),
            )
        )
    return weathers


def compile_weather(weather_db_path, main_db_path) -> int:
    """Replace the compiled ``weather`` table with fresh daytime averages.

    Returns the number of rows inserted.
    """
    weathers = load_daytime_weather(weather_db_path)
    with closing(sqlite3.connect(main_db_path)) as conn:
        with conn:
            conn.execute("DELETE FROM weather")
        with conn:
            for weather in tqdm(weathers, desc="Compiling weather"):
                conn.execute(
                    _INSERT_WEATHER,
                    (
                        weather.city,
                        weather.country,
                        weather.date,
                        weather.avg_daytime_temp,
                        weather.weather_icon,
                        weather.google_url,
                        weather.avg_daytime_wpi,
                    ),
                )
    print("Data successfully transferred to new_main.db")
    return len(weathers)


def main(argv=None) -> int:
    """Compile the weather table of the compiled database."""
    parser = argparse.ArgumentParser(description="Compile daytime weather")
    parser.add_argument("--weather-db", default=DEFAULT_WEATHER_DB)
    parser.add_argument("--main-db", default=DEFAULT_MAIN_DB)
    args = parser.parse_args(argv)
    try:
        compile_weather(args.weather_db, args.main_db)
    except (sqlite3.Error, ValueError) as err:
        sys.exit(f"Error: {err}")
    return 0