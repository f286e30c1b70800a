"""
Booking Payments Service
========================

AWS Lambda handlers for a styling salon's booking flow: a client books an
appointment, pays through a hosted Paystack checkout, and is confirmed and
later reminded by SMS or WhatsApp through Twilio.

Modules under this package:
- create_booking.py    → POST /bookings, stores the booking and returns the checkout URL
- paystack_webhook.py  → POST /paystack/webhook, signed payment confirmation
- reminders.py         → EventBridge rate(5 minutes) reminder sweep
- sms_relay.py         → POST /sms, plain SMS relay
- health.py            → GET /health
- booking_core/        → Shared modules (store, notifier, gateway, logging, config)

Environment variables expected:
  • BOOKINGS_TABLE          - DynamoDB table for bookings
  • REMINDER_LOGS_TABLE     - DynamoDB table for the reminder audit log
  • REMINDER_INDEX          - sparse GSI on (reminderDue, reminderAt) (default: reminderDue-reminderAt-index)
  • TWILIO_SECRET_NAME      - Secrets Manager secret with Twilio credentials
  • PAYSTACK_SECRET_NAME    - Secrets Manager secret with the Paystack secret key
  • PAYSTACK_CALLBACK_URL   - Where Paystack sends the client after checkout (optional)
  • BOOKING_TIMEZONE        - Timezone of appointment dates (default: Africa/Johannesburg)
  • REMINDER_LEAD_HOURS     - Hours before the appointment to remind (default: 5)
  • LOG_LEVEL               - Log verbosity (default: INFO)

All handlers in this package are stateless and Lambda-optimized.
"""
