"""Run the data pipeline's steps in order, on demand or on a schedule."""

from __future__ import annotations

import argparse
import logging
import subprocess
import sys
import time
from datetime import datetime
from pathlib import Path

from farefinder.maindb import backup_database, delete_new_main_db, initialize_database

logger = logging.getLogger(__name__)

GREEN = "\033[32m"
RESET = "\033[0m"

DEFAULT_OUTPUT_DIR = "../../../../../data/compiled/"
DEFAULT_BASE = "../../../"
NEW_MAIN_DB_NAME = "new_main.db"
DEFAULT_DESTINATION = "user@example.com:~/FairFareFinder/data/compiled/new_main.db"
DEFAULT_KEY_NAME = "fff_server"
DEFAULT_MAX_RETRIES = 13
JOB_PAUSE_SECONDS = 50 * 60
IDLE_PAUSE_SECONDS = 60

_SCHEDULE = ("fetch/flights/schedule", "aerodatabox", "aerodatabox (flight schedule)")
_PRICES = ("fetch/flights/prices", "prices", "prices (flight prices)")
_WEATHER_FETCH = ("fetch/weather", "update-weather-db", "update-weather-db (weather update)")
_PROPERTIES = (
    "fetch/accommocation/booking-com/get-properties",
    "get-properties",
    "get-properties (properties update)",
)
_WEATHER_CALC = ("process/calculate/weather", "weather", "weather (weather calculation)")
_FLIGHTS_COMPILE = ("process/compile/main/flights", "flights", "flights (process compile)")
_WEATHER_COMPILE = ("process/compile/main/weather", "weather", "process/compile/main/weather")
_LOCATIONS = ("process/compile/main/locations", "locations", "process/compile/main/locations")
_FLIGHT_DURATION = (
    "process/calculate/flights/flight-duration",
    "flight-duration",
    "process/calculate/flights/flight-duration",
)
_LOCATION_IMAGES = (
    "process/compile/locations/location-images",
    "location-images",
    "process/compile/locations/location-images",
)
_ACCOMMODATION = (
    "process/compile/main/accommodation/booking-com",
    "booking-com",
    "process/compile/main/accommodation/booking-com",
)
_FIVE_NIGHTS = (
    "process/calculate/main/five-nights-and-flights",
    "five-nights-and-flights",
    "process/calculate/main/five-nights-and-flights",
)

ALL_STEPS = (
    _SCHEDULE,
    _PRICES,
    _WEATHER_FETCH,
    _PROPERTIES,
    _WEATHER_CALC,
    _FLIGHTS_COMPILE,
    _WEATHER_COMPILE,
    _LOCATIONS,
    _ACCOMMODATION,
    _FIVE_NIGHTS,
)
COMPILE_STEPS = (
    _WEATHER_CALC,
    _FLIGHTS_COMPILE,
    _WEATHER_COMPILE,
    _LOCATIONS,
    _ACCOMMODATION,
    _FIVE_NIGHTS,
)
WEATHER_STEPS = (_WEATHER_FETCH, _WEATHER_CALC, _FLIGHTS_COMPILE, _WEATHER_COMPILE, _LOCATIONS)
WEEKLY_STEPS = (
    _SCHEDULE,
    _PRICES,
    _WEATHER_FETCH,
    _PROPERTIES,
    _WEATHER_CALC,
    _FLIGHTS_COMPILE,
    _WEATHER_COMPILE,
    _LOCATIONS,
    _FLIGHT_DURATION,
    _LOCATION_IMAGES,
    _ACCOMMODATION,
    _FIVE_NIGHTS,
)
REFRESH_STEPS = (_WEATHER_FETCH, _WEATHER_CALC, _WEATHER_COMPILE, _LOCATIONS, _LOCATION_IMAGES)


class PipelineError(RuntimeError):
    """A pipeline step or the database transfer failed."""


def daily_log_path(now: datetime | None = None) -> Path:
    """Relative path of the log file for ``now``: logs/YYYY/MM/DD.log."""
    now = now or datetime.now()
    return Path("logs") / now.strftime("%Y") / now.strftime("%m") / now.strftime("%d.log")


class DailyLog:
    """Sends log records to a file that changes with each new day."""

    def __init__(self, root=".", clock=datetime.now, target: logging.Logger | None = None):
        self.root = Path(root)
        self._clock = clock
        self._target = target if target is not None else logging.getLogger()
        self._handler: logging.Handler | None = None
        self.current_date: str | None = None
        self.path: Path | None = None

    def update(self) -> bool:
        """Open today's log file if the day has changed; return whether it switched."""
        now = self._clock()
        today = now.strftime("%Y-%m-%d")
        if today == self.current_date:
            return False
        path = self.root / daily_log_path(now)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
        self._detach()
        self._target.addHandler(handler)
        self._handler = handler
        self.path = path
        self.current_date = today
        return True

    def _detach(self) -> None:
        if self._handler is not None:
            self._target.removeHandler(self._handler)
            self._handler.close()
            self._handler = None

    def close(self) -> None:
        """Stop writing to the current log file."""
        self._detach()
        self.current_date = None

    def __enter__(self) -> DailyLog:
        self.update()
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def run_executable_in_dir(directory, executable: str) -> None:
    """Run ``executable`` found in ``directory`` with that directory as working directory.

    Raises PipelineError if the directory is missing or the program fails.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise PipelineError(f"Failed to change directory to {directory}: not a directory")
    logger.info("Running executable: %s in %s", executable, directory)
    try:
        subprocess.run([str(directory.resolve() / executable)], cwd=directory, check=True)
    except (subprocess.CalledProcessError, OSError) as err:
        raise PipelineError(
            f"Failed to run executable {executable} in directory {directory}: {err}"
        ) from err
    logger.info("Successfully executed: %s", executable)


def _run_steps(base, steps) -> list[Path]:
    base = Path(base)
    completed = []
    for relative, executable, label in steps:
        directory = base / relative
        run_executable_in_dir(directory, executable)
        print(f"{GREEN}COMPLETED: {label}{RESET}")
        completed.append(directory)
    return completed


def run_all_tasks(base) -> list[Path]:
    """Fetch, calculate and compile everything; return the directories run."""
    return _run_steps(base, ALL_STEPS)


def run_compile_tasks(base) -> list[Path]:
    """Run only the calculation and compile steps; return the directories run."""
    return _run_steps(base, COMPILE_STEPS)


def run_weather_tasks(base) -> list[Path]:
    """Refresh weather and rebuild the tables depending on it; return the directories run."""
    return _run_steps(base, WEATHER_STEPS)


def run_weekly_rebuild(base) -> list[Path]:
    """Run every step of a full weekly rebuild; return the directories run."""
    return _run_steps(base, WEEKLY_STEPS)


def run_weather_refresh(base) -> list[Path]:
    """Run the periodic weather, WPI and location refresh; return the directories run."""
    return _run_steps(base, REFRESH_STEPS)


def _retry_delay(attempt: int) -> int:
    return 2 ^ (attempt + 1)


def transfer_database(
    db_path,
    destination: str = DEFAULT_DESTINATION,
    key_path=None,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> int:
    """Copy the database to ``destination`` with scp, retrying on failure.

    Returns the number of attempts used; raises PipelineError if all fail.
    """
    key = Path(key_path) if key_path is not None else Path.home() / ".ssh" / DEFAULT_KEY_NAME
    command = ["scp", "-i", str(key), str(db_path), destination]
    for attempt in range(max_retries + 1):
        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except OSError as err:
            failure, stdout, stderr = str(err), "", ""
        else:
            if result.returncode == 0:
                logger.info("Operations completed successfully")
                return attempt + 1
            failure = f"exit status {result.returncode}"
            stdout, stderr = result.stdout, result.stderr
        logger.warning("Attempt %d: SCP failed with error: %s", attempt + 1, failure)
        logger.warning("Attempt %d: SCP stdout: %s", attempt + 1, stdout)
        logger.warning("Attempt %d: SCP stderr: %s", attempt + 1, stderr)
        if attempt < max_retries:
            logger.info("Request failed: %s. Retrying...", failure)
            time.sleep(_retry_delay(attempt))
    raise PipelineError(f"failed to run scp command after {max_retries} attempts")


def _run_daemon(base: Path, db_path: Path, output_dir: Path, log: DailyLog, args) -> None:
    logger.info("Daemon mode is enabled. Running tasks in loop...")
    while True:
        try:
            log.update()
        except OSError as err:
            logger.error("Error updating log file: %s", err)
        now = datetime.now()
        if now.hour % 6 != 0:
            time.sleep(IDLE_PAUSE_SECONDS)
            continue
        if now.weekday() == 0 and now.hour == 3:
            backup_database(db_path, output_dir)
            delete_new_main_db(db_path)
            initialize_database(db_path)
            run_weekly_rebuild(base)
        else:
            backup_database(db_path, output_dir)
            run_weather_refresh(base)
        try:
            transfer_database(db_path, args.destination, args.key)
        except PipelineError as err:
            logger.error("Error occurred during transfer: %s", err)
        time.sleep(JOB_PAUSE_SECONDS)


def main(argv=None) -> int:
    """Run pipeline tasks according to the command-line flags."""
    parser = argparse.ArgumentParser(description="Run the data pipeline")
    parser.add_argument("--all", action="store_true", help="Run all tasks in sequence")
    parser.add_argument("--compile", action="store_true", help="Run only compile tasks")
    parser.add_argument("--weather", action="store_true", help="Run only weather tasks")
    parser.add_argument("--daemon", action="store_true", help="Run indefinitely as a daemon")
    parser.add_argument("--transfer", action="store_true", help="Transfer new_main to the server")
    parser.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--base", default=DEFAULT_BASE)
    parser.add_argument("--log-root", default=".")
    parser.add_argument("--destination", default=DEFAULT_DESTINATION)
    parser.add_argument("--key", default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, stream=sys.stdout, format="%(asctime)s %(message)s")

    output_dir = Path(args.output_dir)
    try:
        output_dir.mkdir(exist_ok=True)
    except OSError as err:
        sys.exit(f"Failed to create directory {output_dir}: {err}")
    output_dir = output_dir.resolve()
    db_path = output_dir / NEW_MAIN_DB_NAME
    base = Path(args.base).resolve()
    logger.info("Absolute path of new_main.db: %s", db_path)
    logger.info("Absolute path of outputdir: %s", output_dir)
    logger.info("Absolute path of base directory utils/data: %s", base)

    try:
        with DailyLog(args.log_root) as log:
            if args.all:
                backup_database(db_path, output_dir)
                initialize_database(db_path)
                run_all_tasks(base)
            elif args.compile:
                run_compile_tasks(base)
            elif args.weather:
                run_weather_tasks(base)
            elif args.transfer:
                transfer_database(db_path, args.destination, args.key)
            elif args.daemon:
                _run_daemon(base, db_path, output_dir, log, args)
            else:
                logger.info("No flags set. Use --all, --compile, --weather, or --daemon.")
    except PipelineError as err:
        sys.exit(str(err))
    except OSError as err:
        sys.exit(f"Failed to initialize log file: {err}")
    return 0