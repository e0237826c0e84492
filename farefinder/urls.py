"""Search links for flights and accommodation at each destination."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from farefinder.accommodation import booking_url
from farefinder.routes import DestinationInfo, OriginInfo

PLACEHOLDER = "$$$"
STAY_NIGHTS = 3
_CHECKIN_WEEKDAYS = {3, 4, 5}  # Thursday, Friday, Saturday


def replace_placeholder(url: str, iata_code: str) -> str:
    """Replace the first destination placeholder in ``url`` with ``iata_code``."""
    return url.replace(PLACEHOLDER, iata_code, 1)


def next_thursday_friday_saturday(today: date | None = None) -> date:
    """Return ``today`` or the first following day that is a Thursday, Friday or Saturday."""
    day = today if today is not None else datetime.now()
    while day.weekday() not in _CHECKIN_WEEKDAYS:
        day += timedelta(days=1)
    return day


def _stay_dates(today: date | None) -> tuple[str, str]:
    checkin = next_thursday_friday_saturday(today)
    checkout = checkin + timedelta(days=STAY_NIGHTS)
    return checkin.strftime("%Y-%m-%d"), checkout.strftime("%Y-%m-%d")


def generate_airbnb_url(city_name: str, today: date | None = None) -> str:
    """Build an Airbnb search link for a three-night stay in ``city_name``."""
    checkin, checkout = _stay_dates(today)
    return (
        f"https://www.airbnb.de/s/{city_name}/homes?adults=1&checkin={checkin}"
        f"&checkout={checkout}&flexible_trip_lengths%5B%5D=one_week"
        "&price_filter_num_nights=3&price_max=112"
    )


def generate_booking_url(city_name: str, today: date | None = None) -> str:
    """Build a Booking.com search link for a three-night stay in ``city_name``."""
    checkin, checkout = _stay_dates(today)
    return booking_url(city_name, checkin, checkout)


def generate_flights_and_hotels_urls(
    origin: OriginInfo,
    destinations: list[DestinationInfo],
    now: datetime | None = None,
) -> list[DestinationInfo]:
    """Fill in the Skyscanner, Airbnb and Booking.com links of every destination.

    The destinations are updated in place and returned.
    """
    now = now or datetime.now()
    base_skyscanner_url = (
        f"https://www.skyscanner.de/transport/fluge/{origin.iata}/{PLACEHOLDER}/"
        "?adults=1&adultsv2=1&cabinclass=economy&children=0&inboundaltsenabled=false"
        "&infants=0&outboundaltsenabled=false&preferdirects=true&ref=home&rtn=1"
        f"&oym={now.strftime('%y%m')}"
    )
    for destination in destinations:
        destination.skyscanner_url = replace_placeholder(base_skyscanner_url, destination.iata)
        destination.airbnb_url = generate_airbnb_url(destination.city, now)
        destination.booking_url = generate_booking_url(destination.city, now)
    return destinations