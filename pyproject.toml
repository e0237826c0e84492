[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "farefinder"
version = "0.1.0"
description = "Compile flight, weather, accommodation and location data into one SQLite database for fair-fare travel search."
requires-python = ">=3.10"
keywords = ["flights", "weather", "travel", "sqlite", "pipeline", "etl"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
]
dependencies = [
    "pyyaml>=6.0",
    "tqdm>=4.60",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
farefinder-pipeline = "farefinder.pipeline:main"
farefinder-weather-index = "farefinder.weather_index:main"
farefinder-flight-duration = "farefinder.flight_duration:main"
farefinder-five-nights = "farefinder.five_nights:main"
farefinder-accommodation = "farefinder.accommodation:main"
farefinder-flights = "farefinder.flights_compile:main"
farefinder-locations = "farefinder.locations:main"
farefinder-weather = "farefinder.weather_compile:main"

[tool.hatch.build.targets.wheel]
packages = ["farefinder"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
