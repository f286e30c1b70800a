import time
from typing import Callable, Optional

from booking_core.errors import NotificationFailed
from booking_core.logger import get_logger
from booking_core.models import Channel

logger = get_logger("notifier")

MAX_ATTEMPTS = 3
BASE_DELAY_SECONDS = 0.5

WHATSAPP_PREFIX = "whatsapp:"


class Notifier:
    """
    Sends a text to a client over SMS or WhatsApp through Twilio.

    The Twilio client is built once per Lambda container (see
    booking_core.services) and handed in here; `sleep` is swappable so the
    backoff can be observed in tests.
    """

    def __init__(self, client, conf: dict, sleep: Callable[[float], None] = time.sleep):
        self.client = client
        self.sms_from = conf["sms_from"]
        self.whatsapp_from = conf["whatsapp_from"]
        self.sleep = sleep

    def _route(self, phone: str, channel: Channel):
        if channel == Channel.WHATSAPP:
            return self.whatsapp_from, WHATSAPP_PREFIX + phone
        return self.sms_from, phone

    def send(self, phone: str, message: str, channel: Channel = Channel.SMS) -> str:
        """
        Send `message` to `phone`, retrying up to MAX_ATTEMPTS times with
        exponential backoff (1s, 2s). Returns the Twilio message SID.

        Raises NotificationFailed once every attempt has failed, whatever the
        cause; the last error is attached as `last_error`.
        """
        from_, to = self._route(phone, Channel(channel))
        last_error: Optional[BaseException] = None

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                resp = self.client.messages.create(body=message, from_=from_, to=to)
            except Exception as e:
                # Twilio API errors, dropped connections and timeouts all retry
                last_error = e
                logger.warning(
                    "notifier.attempt_failed",
                    extra={
                        "attempt": attempt,
                        "to": to,
                        "channel": Channel(channel).value,
                        "error": str(e),
                    },
                )
                if attempt < MAX_ATTEMPTS:
                    self.sleep(BASE_DELAY_SECONDS * 2 ** attempt)
                continue

            sid = getattr(resp, "sid", "<no-sid>")
            logger.info(
                "notifier.sent",
                extra={"sid": sid, "to": to, "attempt": attempt},
            )
            return sid

        logger.error(
            "notifier.exhausted",
            extra={"to": to, "attempts": MAX_ATTEMPTS, "error": str(last_error)},
        )
        raise NotificationFailed(
            f"Failed to notify {to} after {MAX_ATTEMPTS} attempts: {last_error}",
            last_error=last_error,
        ) from last_error
