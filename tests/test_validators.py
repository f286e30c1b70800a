from decimal import Decimal

import pytest

from booking_core.errors import (
    InvalidAppointmentTime,
    InvalidChannel,
    InvalidEmail,
    InvalidPhone,
    InvalidPrice,
)
from booking_core.models import Channel
from booking_core.validators import (
    appointment_epoch,
    normalize_phone,
    parse_channel,
    parse_price,
    to_minor_units,
    validate_email,
)


def test_local_number_gets_country_code():
    assert normalize_phone("0821234567") == "+27821234567"


def test_international_number_is_kept():
    assert normalize_phone("+27821234567") == "+27821234567"


def test_formatting_characters_are_stripped():
    assert normalize_phone("082 123-4567") == "+27821234567"
    assert normalize_phone("(+27) 82 123 4567") == "+27821234567"


@pytest.mark.parametrize("raw", ["12345", "", None, "0" + "1" * 15])
def test_bad_phone_numbers_are_rejected(raw):
    with pytest.raises(InvalidPhone):
        normalize_phone(raw)


def test_email_validation():
    assert validate_email("a@b.com") == "a@b.com"
    for bad in ("not-an-email", "a@b", "a b@c.com", "@b.com", None):
        with pytest.raises(InvalidEmail):
            validate_email(bad)


def test_channel_parsing():
    assert parse_channel(None) == Channel.SMS
    assert parse_channel("WhatsApp") == Channel.WHATSAPP
    assert parse_channel("sms") == Channel.SMS
    with pytest.raises(InvalidChannel):
        parse_channel("pigeon")


def test_price_parsing_and_minor_units():
    assert parse_price("350") == Decimal("350")
    assert to_minor_units(parse_price(199.995)) == 20000
    assert to_minor_units(parse_price(350)) == 35000
    for bad in ("free", 0, -10, True, "NaN"):
        with pytest.raises(InvalidPrice):
            parse_price(bad)


def test_appointment_epoch_uses_booking_timezone():
    # 14:00 in Johannesburg is 12:00 UTC
    assert appointment_epoch("2026-11-20", "14:00", "Africa/Johannesburg") == 1795176000
    assert appointment_epoch("2026-11-20", "12:00:00", "UTC") == 1795176000


def test_appointment_epoch_rejects_garbage():
    with pytest.raises(InvalidAppointmentTime):
        appointment_epoch("next friday", "2pm", "Africa/Johannesburg")
