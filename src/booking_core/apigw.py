"""
Helpers for API Gateway (HTTP API, payload v2) events and responses.
"""

import base64
import json
from typing import Any, Dict, Optional

from booking_core.logger import get_logger

logger = get_logger("http")


def response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def raw_body(event: dict) -> bytes:
    """The request body exactly as the client sent it."""
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    if isinstance(body, (dict, list)):
        # Direct invocations in local tests may hand us a parsed body
        return json.dumps(body).encode("utf-8")
    return body.encode("utf-8")


def parse_body(event: dict) -> dict:
    """
    Extract and parse the JSON body from the Lambda event.

    - For API Gateway / HttpApi: event["body"] should be a JSON string.
    - For direct tests: event["body"] may already be a dict.

    Raises json.JSONDecodeError (a ValueError) when the body is not a JSON object.
    """
    body = event.get("body")
    if isinstance(body, dict):
        return body

    raw = raw_body(event)
    try:
        data = json.loads(raw or b"{}")
    except json.JSONDecodeError:
        logger.warning("http.invalid_json", extra={"body_preview": raw[:200].decode("utf-8", "replace")})
        raise

    if not isinstance(data, dict):
        raise json.JSONDecodeError("Expected a JSON object", raw.decode("utf-8", "replace"), 0)
    return data


def header(event: dict, name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    wanted = name.lower()
    for key, value in (event.get("headers") or {}).items():
        if key.lower() == wanted:
            return value
    return None


def method(event: dict) -> str:
    ctx = event.get("requestContext") or {}
    return (ctx.get("http", {}).get("method") or event.get("httpMethod") or "POST").upper()
