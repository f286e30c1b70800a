import json
from typing import Optional, Union

from botocore.exceptions import ClientError

from booking_core.apigw import header, method, raw_body, response
from booking_core.errors import (
    AmountMismatch,
    BookingNotFound,
    InvalidSignature,
    MissingBookingId,
    NotificationFailed,
)
from booking_core.logger import get_logger
from booking_core.messages import build_message
from booking_core.paystack import verify_signature
from booking_core.services import Services, get_services

logger = get_logger("paystack_webhook")

PAYMENT_SUCCEEDED = "charge.success"
SIGNATURE_HEADERS = ("x-paystack-signature", "x-signature")

IGNORED = "ignored"
PROCESSED = "processed"
DUPLICATE = "duplicate"


def handle(body: Union[bytes, str], signature: Optional[str], services: Services) -> str:
    """
    Process one Paystack webhook delivery.

    The signature is checked before anything else is read from the body. A
    `charge.success` event moves its booking to Paid/Accepted exactly once and
    then sends the confirmation text; redeliveries are acknowledged without
    touching the booking or notifying again.

    Returns IGNORED, PROCESSED or DUPLICATE. Raises InvalidSignature,
    json.JSONDecodeError, MissingBookingId, BookingNotFound or AmountMismatch,
    all of which leave the booking unchanged.
    """
    verify_signature(body, signature, services.webhook_secret)

    event = json.loads(body)
    if not isinstance(event, dict):
        raise json.JSONDecodeError("Expected a JSON object", str(body), 0)
    event_type = event.get("event")
    if event_type != PAYMENT_SUCCEEDED:
        logger.info("webhook.event_ignored", extra={"event": event_type})
        return IGNORED

    data = event.get("data") or {}
    booking_id = (data.get("metadata") or {}).get("bookingId")
    if not booking_id:
        raise MissingBookingId("charge.success event without metadata.bookingId")

    amount = data.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise AmountMismatch(booking_id, None, amount)

    booking = services.store.mark_paid(booking_id, amount)
    if booking is None:
        logger.info(
            "webhook.duplicate",
            extra={"booking_id": booking_id, "reference": data.get("reference")},
        )
        return DUPLICATE

    logger.info(
        "webhook.payment_confirmed",
        extra={"booking_id": booking_id, "amount": amount, "reference": data.get("reference")},
    )

    # Payment is committed at this point; a failed text must not undo it.
    message = build_message("confirmation", booking)
    try:
        services.notifier.send(booking.client_phone, message, booking.method)
    except NotificationFailed as e:
        logger.error(
            "webhook.confirmation_not_sent",
            extra={"booking_id": booking_id, "method": booking.method.value, "error": str(e)},
        )
        return PROCESSED

    try:
        services.store.mark_confirmation_sent(booking_id)
    except ClientError as e:
        logger.warning(
            "webhook.confirmation_flag_error",
            extra={"booking_id": booking_id, "error": str(e)},
        )

    return PROCESSED


def lambda_handler(event, context, services: Optional[Services] = None):
    logger.info(
        "webhook.lambda_start",
        extra={"request_id": getattr(context, "aws_request_id", None)},
    )

    if method(event) != "POST":
        return response(405, {"error": "method_not_allowed"})

    try:
        services = services or get_services()
    except Exception as e:
        logger.error("webhook.init_error", extra={"error": str(e)})
        return response(500, {"error": "server_misconfigured"})

    signature = None
    for name in SIGNATURE_HEADERS:
        signature = header(event, name)
        if signature:
            break

    try:
        outcome = handle(raw_body(event), signature, services)
    except InvalidSignature as e:
        logger.warning("webhook.invalid_signature", extra={"error": str(e)})
        return response(400, {"error": e.code})
    except json.JSONDecodeError:
        logger.warning("webhook.invalid_json")
        return response(400, {"error": "invalid_json"})
    except MissingBookingId as e:
        logger.warning("webhook.missing_booking_id")
        return response(400, {"error": e.code})
    except AmountMismatch as e:
        logger.error(
            "webhook.amount_mismatch",
            extra={"booking_id": e.booking_id, "expected": e.expected, "received": e.received},
        )
        return response(400, {"error": e.code})
    except BookingNotFound as e:
        logger.error("webhook.booking_not_found", extra={"booking_id": e.booking_id})
        return response(404, {"error": e.code})
    except Exception as e:
        # Anything else is ours; a 500 makes Paystack redeliver later.
        logger.exception("webhook.unexpected_error", extra={"error": str(e)})
        return response(500, {"error": "internal_error"})

    return response(200, {"ok": True, "result": outcome})
