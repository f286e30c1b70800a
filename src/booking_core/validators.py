import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from booking_core.errors import (
    InvalidAppointmentTime,
    InvalidChannel,
    InvalidEmail,
    InvalidPhone,
    InvalidPrice,
)
from booking_core.models import Channel

COUNTRY_CODE = "27"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NON_DIGITS = re.compile(r"\D")

_DATE_TIME_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S")


def normalize_phone(raw) -> str:
    """
    Normalize a client phone number to "+<country><number>".

    "082 123 4567" -> "+27821234567"; "+27821234567" is returned as is.
    """
    digits = _NON_DIGITS.sub("", str(raw or ""))
    if digits.startswith("0"):
        digits = COUNTRY_CODE + digits[1:]

    if not 11 <= len(digits) <= 15:
        raise InvalidPhone(f"Invalid phone number: {raw!r}")

    return "+" + digits


def validate_email(raw) -> str:
    if not isinstance(raw, str) or not _EMAIL_RE.match(raw):
        raise InvalidEmail(f"Invalid email address: {raw!r}")
    return raw


def parse_channel(raw) -> Channel:
    if raw is None or raw == "":
        return Channel.SMS
    try:
        return Channel(str(raw).strip().lower())
    except ValueError:
        raise InvalidChannel(f"Unsupported notification method: {raw!r}")


def parse_price(raw) -> Decimal:
    # bool is an int subclass; a JSON `true` is not a price
    if isinstance(raw, bool):
        raise InvalidPrice(f"Invalid price: {raw!r}")
    try:
        price = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise InvalidPrice(f"Invalid price: {raw!r}")

    if not price.is_finite() or price <= 0:
        raise InvalidPrice(f"Invalid price: {raw!r}")
    return price


def to_minor_units(price: Decimal) -> int:
    """Price in cents, the unit Paystack charges and reports in."""
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def appointment_epoch(date: str, time: str, tz_name: str) -> int:
    """Epoch seconds of an appointment given as local date and time strings."""
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise RuntimeError(f"Unknown BOOKING_TIMEZONE '{tz_name}'")

    for fmt in _DATE_TIME_FORMATS:
        try:
            local = datetime.strptime(f"{date} {time}", fmt)
        except ValueError:
            continue
        return int(local.replace(tzinfo=tz).timestamp())

    raise InvalidAppointmentTime(f"Invalid appointment date/time: {date!r} {time!r}")
