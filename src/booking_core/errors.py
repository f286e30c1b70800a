"""
Error taxonomy for the booking/payment core.

Every error carries a snake_case ``code`` that the Lambda handlers return as
the JSON ``error`` value.
"""

from typing import Iterable, Optional


class BookingError(Exception):
    """Base class for all domain errors raised by this service."""

    code = "booking_error"


class ValidationError(BookingError):
    """Raised when client input is rejected before anything is persisted."""

    code = "invalid_input"


class InvalidPhone(ValidationError):
    code = "invalid_phone"


class InvalidEmail(ValidationError):
    code = "invalid_email"


class InvalidPrice(ValidationError):
    code = "invalid_price"


class InvalidChannel(ValidationError):
    code = "invalid_method"


class InvalidAppointmentTime(ValidationError):
    code = "invalid_appointment_time"


class MissingFields(ValidationError):
    code = "missing_fields"

    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(f"Missing fields: {', '.join(self.fields)}")


class InvalidSignature(BookingError):
    code = "invalid_signature"


class MissingBookingId(BookingError):
    code = "missing_booking_id"


class BookingNotFound(BookingError):
    code = "booking_not_found"

    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        super().__init__(f"Booking not found: {booking_id}")


class AmountMismatch(BookingError):
    """Raised when a webhook reports an amount other than the one we charged."""

    code = "amount_mismatch"

    def __init__(self, booking_id: str, expected: Optional[int], received: int):
        self.booking_id = booking_id
        self.expected = expected
        self.received = received
        super().__init__(
            f"Booking {booking_id}: expected amount {expected}, received {received}"
        )


class NotificationFailed(BookingError):
    """Raised by the Notifier once every attempt has failed."""

    code = "notification_failed"

    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        self.last_error = last_error
        super().__init__(message)


class GatewayError(BookingError):
    """Raised when the payment gateway cannot start a transaction."""

    code = "gateway_error"
