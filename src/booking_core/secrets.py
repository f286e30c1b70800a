import json

import boto3

from booking_core.logger import get_logger

logger = get_logger("secrets")


def get_secret(secret_name: str, region_name: str = "us-east-1") -> dict:
    """
    Fetch a JSON secret from AWS Secrets Manager.

    Expects the secret value to be a JSON object, e.g. for Twilio:

        {
          "account_sid": "...",
          "auth_token": "...",
          "phone": "+1..."
        }

    or for Paystack:

        {
          "secret_key": "sk_live_...",
          "webhook_secret": "..."   # optional, defaults to secret_key
        }
    """
    logger.info(
        "Fetching secret from Secrets Manager",
        extra={"secret_name": secret_name, "region": region_name},
    )

    client = boto3.client("secretsmanager", region_name=region_name)

    resp = client.get_secret_value(SecretId=secret_name)
    secret_str = resp.get("SecretString")

    if not secret_str:
        msg = f"Secret '{secret_name}' has no SecretString payload"
        logger.error(msg)
        raise RuntimeError(msg)

    try:
        data = json.loads(secret_str)
    except json.JSONDecodeError as e:
        logger.error(
            "SecretString is not valid JSON",
            extra={"secret_name": secret_name, "error": str(e)},
        )
        raise

    if not isinstance(data, dict):
        msg = f"Secret '{secret_name}' must be a JSON object"
        logger.error(msg)
        raise RuntimeError(msg)

    return data


def get_paystack_keys(secret_name: str, region_name: str = "us-east-1") -> dict:
    """
    Returns {"secret_key": ..., "webhook_secret": ...}.

    Paystack signs webhooks with the account secret key, so the webhook secret
    falls back to it when the secret does not set one explicitly.
    """
    data = get_secret(secret_name, region_name)
    secret_key = data.get("secret_key")
    if not secret_key:
        logger.error("Missing Paystack secret key", extra={"secret_name": secret_name})
        raise RuntimeError("Missing Paystack secrets: secret_key")

    return {
        "secret_key": secret_key,
        "webhook_secret": data.get("webhook_secret") or secret_key,
    }
