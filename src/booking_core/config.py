import os
from dataclasses import dataclass
from typing import Optional

from booking_core.logger import get_logger

logger = get_logger("config")

DEFAULT_WHATSAPP_FROM = "whatsapp:+14155238886"


@dataclass(frozen=True)
class Settings:
    bookings_table: str
    reminder_logs_table: str
    reminder_index: str
    twilio_secret_name: str
    paystack_secret_name: str
    paystack_base_url: str
    paystack_callback_url: Optional[str]
    gateway_timeout_seconds: int
    whatsapp_from: str
    booking_timezone: str
    reminder_lead_hours: int
    region: str


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        msg = f"Invalid {name}='{raw}'. Must be an integer."
        logger.error(msg)
        raise RuntimeError(msg)


def load_settings() -> Settings:
    """
    Load the service configuration from environment variables.

    BOOKINGS_TABLE:        DynamoDB table holding booking items
    REMINDER_LOGS_TABLE:   DynamoDB table for the append-only reminder audit log
    TWILIO_SECRET_NAME:    Secrets Manager secret with Twilio credentials
    PAYSTACK_SECRET_NAME:  Secrets Manager secret with the Paystack secret key

    Raises RuntimeError with a clear message if something is missing/invalid.
    """
    required = {
        "BOOKINGS_TABLE": os.getenv("BOOKINGS_TABLE"),
        "REMINDER_LOGS_TABLE": os.getenv("REMINDER_LOGS_TABLE"),
        "TWILIO_SECRET_NAME": os.getenv("TWILIO_SECRET_NAME"),
        "PAYSTACK_SECRET_NAME": os.getenv("PAYSTACK_SECRET_NAME"),
    }

    missing = [name for name, value in required.items() if not value]
    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        logger.error(msg)
        raise RuntimeError(msg)

    return Settings(
        bookings_table=required["BOOKINGS_TABLE"],
        reminder_logs_table=required["REMINDER_LOGS_TABLE"],
        reminder_index=os.getenv("REMINDER_INDEX", "reminderDue-reminderAt-index"),
        twilio_secret_name=required["TWILIO_SECRET_NAME"],
        paystack_secret_name=required["PAYSTACK_SECRET_NAME"],
        paystack_base_url=os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co").rstrip("/"),
        paystack_callback_url=os.getenv("PAYSTACK_CALLBACK_URL") or None,
        gateway_timeout_seconds=_int_env("GATEWAY_TIMEOUT_SECONDS", "15"),
        whatsapp_from=os.getenv("TWILIO_WHATSAPP_FROM", DEFAULT_WHATSAPP_FROM),
        booking_timezone=os.getenv("BOOKING_TIMEZONE", "Africa/Johannesburg"),
        reminder_lead_hours=_int_env("REMINDER_LEAD_HOURS", "5"),
        region=os.getenv("AWS_REGION", "us-east-1"),
    )
