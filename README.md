# farefinder

farefinder builds the compiled travel database behind a fair-fare search.
It reads raw SQLite databases of flight prices, weather forecasts,
accommodation listings and locations, and writes a compiled `new_main.db`
holding the `flight`, `weather`, `location`, `accommodation` and
`five_nights_and_flights` tables.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Commands

Each stage is its own command. The default database paths are relative
(`../../../../../../data/...`), so either run a command from the directory
those paths expect or pass the paths as options.

| Command | Options | What it does |
| --- | --- | --- |
| `farefinder-weather-index` | `--config`, `--db` | Drops and recreates `current_weather` from the future rows of `all_weather`, each with its Weather Pleasantness Index (WPI). |
| `farefinder-flights` | `--flights-db`, `--main-db` | Empties `flight` and refills it from `skyscannerprices`, turning the origin country into its ISO code and adding Skyscanner links. Missing prices are stored as 0. |
| `farefinder-weather` | `--weather-db`, `--main-db` | Empties `weather` and refills it with each city's 10:00–18:00 average temperature and WPI per day, to one decimal place. |
| `farefinder-locations` | `--locations-db`, `--main-db` | Inserts every city marked `include_tf = 1` with up to seven airport IATA codes, then sets `avg_wpi` from the `weather` table (NULL where there is none). Cities without an airport are reported and skipped. |
| `farefinder-flight-duration` | `--main-db`, `--locations-db` | Estimates each flight's duration from the airports' coordinates and writes it to `flight.duration_hour_dot_mins`; that column must already exist. |
| `farefinder-accommodation` | `--new-db`, `--raw-db` | For each city with at least ten listings scoring above 7, drops the cheapest and dearest 10 %, takes the median and divides by 14 to give a price per person per night. |
| `farefinder-five-nights` | `--db` | Adds each flight's price to five nights' accommodation at the destination; where a city has no accommodation row the country's median is used, or 40 if the country has none. |
| `farefinder-pipeline` | see below | Runs the stages in order. |

### Weather Pleasantness Index for a single reading

With three arguments — temperature, wind speed and a condition name from
the pleasantness configuration — the index is printed instead of the
database being rebuilt:

```
farefinder-weather-index 24 3.5 "clear sky" --config weatherPleasantness.yaml
```

The configuration is a YAML file with a `conditions` mapping of condition
name to score (0–10). Temperature, wind and condition are each scored
0–10 and weighted 5, 1 and 2; unknown conditions score 0.

### Running the pipeline

```
farefinder-pipeline --all        # back up, create missing tables, run every step
farefinder-pipeline --compile    # only the calculate and compile steps
farefinder-pipeline --weather    # refresh weather and the tables built from it
farefinder-pipeline --transfer   # copy new_main.db to the server with scp
farefinder-pipeline --daemon     # run indefinitely
```

Further options: `--output-dir` (where `new_main.db` and `backups/` live),
`--base` (the directory the step programs are found under), `--log-root`,
`--destination` (the scp target) and `--key` (the SSH key, by default
`~/.ssh/fff_server`).

Each step is a program named in a directory below `--base` (for example
`process/compile/main/flights/flights`); the pipeline runs it with that
directory as the working directory and stops with an error if it fails.
Before `--all` rebuilds, the existing database is copied to
`backups/main_backup_YYYYMMDD_HHMMSS.db` in the output directory. The
transfer retries up to 13 times before giving up. Log records go to the
console and to `logs/YYYY/MM/DD.log` under `--log-root`, switching file
when the day changes.

In daemon mode the loop acts at hours 0, 6, 12 and 18: it backs up the
database, runs the weather refresh steps and transfers the result, then
waits 50 minutes. The full weekly rebuild is tied to Monday 03:00, an
hour the loop never acts at, so in practice the daemon only refreshes;
a full rebuild is available through `--all` or `run_weekly_rebuild`.

## Library use

The pieces are importable on their own, for example:

```python
from farefinder.weather_index import temp_pleasantness, wind_pleasantness
from farefinder.flight_duration import haversine, format_duration
from farefinder.countries import get_iso_code

get_iso_code("Scotland")        # "GB"
temp_pleasantness(24)           # 10.0
wind_pleasantness(13.8)         # 0.0
```

Other modules:

- `farefinder.maindb` — `initialize_database`, `init_main_db`,
  `backup_database`, `copy_main_db`, `delete_new_main_db`.
- `farefinder.rawdb` — `init_flights_db`, `init_weather_db`,
  `init_locations_db` and `set_iata_cities_to_true`, which marks every
  city served by an airport with an IATA code as included.
- `farefinder.images` — `assign_location_images` fills the `image_1` to
  `image_5` columns of `location` from a folder per city;
  `copy_first_images` copies each city folder's first image elsewhere.
- `farefinder.timeutils` — weekday ranges and departure/arrival date
  windows (`calculate_weekend_range`, `list_dates_between` and others).
- `farefinder.routes` — `determine_flights` finds airports served both
  outbound and inbound from an origin within its date windows.
- `farefinder.urls` — Skyscanner, Airbnb and Booking.com search links for
  a list of destinations.

## What farefinder does not do

farefinder does not fetch anything itself: flight schedules, flight
prices, weather forecasts and accommodation listings must already be in
the raw databases. The pipeline's fetch steps, and every other step, are
separate programs it expects to find under `--base`. It does not serve
the compiled database or provide a search website.