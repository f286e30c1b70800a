from dataclasses import dataclass
from functools import lru_cache

import boto3

from booking_core.booking_store import BookingStore
from booking_core.config import Settings, load_settings
from booking_core.logger import get_logger
from booking_core.notifier import Notifier
from booking_core.paystack import PaystackClient
from booking_core.secrets import get_paystack_keys
from booking_core.twilio_client import build_client

logger = get_logger("services")


@dataclass
class Services:
    """Collaborators shared by every handler in one Lambda container."""

    settings: Settings
    store: BookingStore
    gateway: PaystackClient
    notifier: Notifier
    webhook_secret: str


def build_services(settings: Settings) -> Services:
    ddb = boto3.client("dynamodb", region_name=settings.region)
    store = BookingStore(
        ddb,
        table_name=settings.bookings_table,
        logs_table_name=settings.reminder_logs_table,
        reminder_index=settings.reminder_index,
    )

    paystack_keys = get_paystack_keys(settings.paystack_secret_name, settings.region)
    gateway = PaystackClient(
        paystack_keys["secret_key"],
        base_url=settings.paystack_base_url,
        callback_url=settings.paystack_callback_url,
        timeout=settings.gateway_timeout_seconds,
    )

    twilio_client, twilio_conf = build_client(
        settings.twilio_secret_name,
        settings.region,
        whatsapp_from=settings.whatsapp_from,
    )

    logger.info("services.initialized", extra={"bookings_table": settings.bookings_table})
    return Services(
        settings=settings,
        store=store,
        gateway=gateway,
        notifier=Notifier(twilio_client, twilio_conf),
        webhook_secret=paystack_keys["webhook_secret"],
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    """Build the collaborators once per container and reuse them across invocations."""
    return build_services(load_settings())
