"""
Booking Service Core
====================

Shared modules behind the booking Lambda handlers:

- apigw.py           → API Gateway event parsing and JSON responses
- booking_store.py   → DynamoDB persistence with conditional state transitions
- config.py          → environment-driven settings
- errors.py          → domain error taxonomy
- logger.py          → structured JSON logging
- messages.py        → client-facing SMS/WhatsApp texts
- models.py          → Booking / ReminderLog records
- notifier.py        → Twilio SMS/WhatsApp dispatch with retry and backoff
- paystack.py        → Paystack checkout initialization + webhook signatures
- secrets.py         → AWS Secrets Manager integration
- services.py        → per-container wiring of the collaborators above
- twilio_client.py   → authenticated Twilio client builder
- validators.py      → phone/email/price/date normalization

Nothing here keeps per-request state; collaborators are built once per Lambda
container and passed explicitly.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
