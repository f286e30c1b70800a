# booking_core/twilio_client.py

from twilio.rest import Client as TwilioClient

from booking_core.config import DEFAULT_WHATSAPP_FROM
from booking_core.logger import get_logger
from booking_core.secrets import get_secret

logger = get_logger("twilio_client")


def build_client(secret_name: str, region_name: str = "us-east-1", whatsapp_from: str = DEFAULT_WHATSAPP_FROM):
    """
    Build and return a Twilio client plus a small config dict.

    Returns:
        (client, conf) where:
          - client: twilio.rest.Client
          - conf: dict with {"sms_from": "+1...", "whatsapp_from": "whatsapp:+1..."}
    """
    secrets = get_secret(secret_name, region_name)

    account_sid = secrets.get("account_sid")
    auth_token = secrets.get("auth_token")
    # "phone" is the SMS-capable number on the account
    sms_from = secrets.get("phone") or secrets.get("sms_from")

    missing = [
        name
        for name, value in [
            ("account_sid", account_sid),
            ("auth_token", auth_token),
            ("phone", sms_from),
        ]
        if not value
    ]

    if missing:
        logger.error("Missing Twilio secrets", extra={"missing": missing})
        raise RuntimeError(f"Missing Twilio secrets: {', '.join(missing)}")

    client = TwilioClient(account_sid, auth_token)
    logger.info("Twilio client initialized successfully")

    conf = {
        "sms_from": sms_from,
        "whatsapp_from": whatsapp_from,
    }

    return client, conf
