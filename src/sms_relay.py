import json
from typing import Optional

from booking_core.apigw import method, parse_body, response
from booking_core.errors import InvalidPhone, NotificationFailed
from booking_core.logger import get_logger
from booking_core.models import Channel
from booking_core.services import Services, get_services
from booking_core.validators import normalize_phone

logger = get_logger("sms_relay")


def lambda_handler(event, context, services: Optional[Services] = None):
    """POST /sms {"phone": ..., "message": ...}: send a plain SMS to one number."""
    if method(event) != "POST":
        return response(405, {"success": False, "error": "method_not_allowed"})

    try:
        payload = parse_body(event)
    except json.JSONDecodeError:
        return response(400, {"success": False, "error": "invalid_json"})

    phone = payload.get("phone")
    message = payload.get("message")
    if not phone or not message:
        return response(400, {"success": False, "error": "missing_fields"})

    try:
        to = normalize_phone(phone)
    except InvalidPhone as e:
        return response(400, {"success": False, "error": e.code})

    try:
        services = services or get_services()
    except Exception as e:
        logger.error("sms_relay.init_error", extra={"error": str(e)})
        return response(500, {"success": False, "error": "server_misconfigured"})

    try:
        sid = services.notifier.send(to, str(message), Channel.SMS)
    except NotificationFailed as e:
        logger.error("sms_relay.send_failed", extra={"to": to, "error": str(e)})
        return response(500, {"success": False, "error": e.code})

    return response(200, {"success": True, "sid": sid})
