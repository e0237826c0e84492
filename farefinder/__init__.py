"""Compile flight, weather, accommodation and location data into one SQLite database."""

__version__ = "0.1.0"