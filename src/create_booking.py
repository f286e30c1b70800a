import json
import time
import uuid
from typing import Optional

from botocore.exceptions import ClientError

from booking_core.apigw import method, parse_body, response
from booking_core.errors import GatewayError, MissingFields, ValidationError
from booking_core.logger import get_logger
from booking_core.models import Booking
from booking_core.services import Services, get_services
from booking_core.validators import (
    appointment_epoch,
    normalize_phone,
    parse_channel,
    parse_price,
    to_minor_units,
    validate_email,
)

logger = get_logger("create_booking")

REQUIRED_FIELDS = ("style", "length", "price", "clientName", "clientPhone", "date", "time", "email")


def create_booking(payload: dict, services: Services, now: Optional[int] = None) -> dict:
    """
    Validate a booking request, persist it as Pending/Unpaid and start a
    Paystack checkout for the full price.

    Returns {"authorizationUrl": ..., "bookingId": ...}.
    """
    missing = [name for name in REQUIRED_FIELDS if payload.get(name) in (None, "")]
    if missing:
        raise MissingFields(missing)

    settings = services.settings
    phone = normalize_phone(payload["clientPhone"])
    email = validate_email(payload["email"])
    price = parse_price(payload["price"])
    channel = parse_channel(payload.get("method"))
    appointment_at = appointment_epoch(
        str(payload["date"]), str(payload["time"]), settings.booking_timezone
    )

    now = int(time.time()) if now is None else now
    booking = Booking(
        booking_id=str(uuid.uuid4()),
        style=str(payload["style"]),
        length=str(payload["length"]),
        price=price,
        client_name=str(payload["clientName"]),
        client_phone=phone,
        client_email=email,
        date=str(payload["date"]),
        time=str(payload["time"]),
        method=channel,
        amount_due=to_minor_units(price),
        created_at=now,
        reminder_at=appointment_at - settings.reminder_lead_hours * 3600,
    )
    services.store.create(booking)

    try:
        data = services.gateway.initialize_transaction(
            email, booking.amount_due, metadata={"bookingId": booking.booking_id}
        )
    except GatewayError:
        _compensate(services, booking.booking_id)
        raise

    reference = data.get("reference")
    if reference:
        try:
            services.store.set_payment_reference(booking.booking_id, reference)
        except ClientError as e:
            # The checkout exists already; the reference is only bookkeeping.
            logger.warning(
                "create_booking.reference_not_saved",
                extra={"booking_id": booking.booking_id, "error": str(e)},
            )

    logger.info(
        "create_booking.checkout_started",
        extra={
            "booking_id": booking.booking_id,
            "amount": booking.amount_due,
            "method": channel.value,
            "reference": reference,
        },
    )
    return {"authorizationUrl": data["authorization_url"], "bookingId": booking.booking_id}


def _compensate(services: Services, booking_id: str) -> None:
    try:
        marked = services.store.mark_failed(booking_id)
    except ClientError as e:
        logger.error(
            "create_booking.compensation_error",
            extra={"booking_id": booking_id, "error": str(e)},
        )
        return
    logger.warning(
        "create_booking.gateway_failed",
        extra={"booking_id": booking_id, "marked_failed": marked},
    )


def lambda_handler(event, context, services: Optional[Services] = None):
    logger.info(
        "create_booking.lambda_start",
        extra={"request_id": getattr(context, "aws_request_id", None)},
    )

    if method(event) != "POST":
        return response(405, {"error": "method_not_allowed"})

    # 1) Collaborators, built once per container
    try:
        services = services or get_services()
    except Exception as e:
        # Misconfiguration is a 500, not a 4xx
        logger.error("create_booking.init_error", extra={"error": str(e)})
        return response(500, {"error": "server_misconfigured"})

    # 2) Parse JSON body
    try:
        payload = parse_body(event)
    except json.JSONDecodeError:
        return response(400, {"error": "invalid_json"})

    # 3) Validate, persist, start checkout
    try:
        result = create_booking(payload, services)
    except MissingFields as e:
        logger.warning("create_booking.missing_fields", extra={"fields": e.fields})
        return response(400, {"error": e.code, "fields": e.fields})
    except ValidationError as e:
        logger.warning("create_booking.invalid_input", extra={"error": str(e), "code": e.code})
        return response(400, {"error": e.code, "message": str(e)})
    except GatewayError as e:
        logger.error("create_booking.gateway_error", extra={"error": str(e)})
        return response(502, {"error": e.code})
    except RuntimeError as e:
        logger.error("create_booking.config_error", extra={"error": str(e)})
        return response(500, {"error": "server_misconfigured"})
    except Exception as e:
        logger.exception("create_booking.unexpected_error", extra={"error": str(e)})
        return response(500, {"error": "internal_error"})

    return response(200, result)
