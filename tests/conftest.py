import copy
import threading
from decimal import Decimal

import pytest
from twilio.base.exceptions import TwilioRestException

from booking_core.config import Settings
from booking_core.errors import AmountMismatch, BookingNotFound
from booking_core.models import Booking, BookingStatus, Channel, PaymentStatus
from booking_core.notifier import Notifier
from booking_core.services import Services

WEBHOOK_SECRET = "sk_test_webhook_secret"
SMS_FROM = "+15550001111"
WHATSAPP_FROM = "whatsapp:+14155238886"


class StubTwilioMsg:
    def __init__(self, sid):
        self.sid = sid


class StubMessages:
    """Stands in for `client.messages`; fails the first `failures` calls."""

    def __init__(self, failures=0, fail_for=(), error=None):
        self.failures = failures
        self.fail_for = set(fail_for)
        self.error = error
        self.attempts = []
        self.sent = []

    def create(self, body, from_, to):
        self.attempts.append({"to": to, "from_": from_, "body": body})
        if len(self.attempts) <= self.failures or to in self.fail_for:
            if self.error is not None:
                raise self.error(f"boom {len(self.attempts)}")
            raise TwilioRestException(503, "https://api.twilio.com/Messages.json", msg=f"boom {len(self.attempts)}")
        self.sent.append({"to": to, "from_": from_, "body": body})
        return StubTwilioMsg(f"SM{len(self.sent):032d}")


class StubTwilioClient:
    def __init__(self, failures=0, fail_for=(), error=None):
        self.messages = StubMessages(failures, fail_for, error)


class StubGateway:
    def __init__(self, url="https://checkout.paystack.com/abc123", error=None):
        self.url = url
        self.error = error
        self.calls = []

    def initialize_transaction(self, email, amount, metadata):
        self.calls.append({"email": email, "amount": amount, "metadata": metadata})
        if self.error:
            raise self.error
        return {"authorization_url": self.url, "access_code": "abc123", "reference": "ref_abc123"}


class InMemoryBookingStore:
    """Same contract as BookingStore, with a lock standing in for DynamoDB conditions."""

    def __init__(self):
        self.items = {}
        self.logs = []
        self._lock = threading.Lock()

    def create(self, booking):
        with self._lock:
            assert booking.booking_id not in self.items
            self.items[booking.booking_id] = copy.deepcopy(booking)

    def get(self, booking_id):
        return copy.deepcopy(self.items.get(booking_id))

    def set_payment_reference(self, booking_id, reference):
        self.items[booking_id].payment_reference = reference

    def mark_paid(self, booking_id, amount):
        with self._lock:
            booking = self.items.get(booking_id)
            if booking is None:
                raise BookingNotFound(booking_id)
            if booking.payment_status == PaymentStatus.PAID:
                return None
            if booking.amount_due != amount:
                raise AmountMismatch(booking_id, booking.amount_due, amount)
            booking.payment_status = PaymentStatus.PAID
            booking.verified = True
            booking.deposit_paid = Decimal(amount) / 100
            booking.status = BookingStatus.ACCEPTED
            booking.confirmation_sent = False
            return copy.deepcopy(booking)

    def mark_failed(self, booking_id):
        with self._lock:
            booking = self.items[booking_id]
            if booking.status != BookingStatus.PENDING or booking.payment_status != PaymentStatus.UNPAID:
                return False
            booking.status = BookingStatus.FAILED
            return True

    def mark_confirmation_sent(self, booking_id):
        self.items[booking_id].confirmation_sent = True

    def due_for_reminder(self, now):
        return [
            copy.deepcopy(b)
            for b in self.items.values()
            if b.status == BookingStatus.ACCEPTED and not b.reminder_sent and b.reminder_at <= now
        ]

    def mark_reminder_sent(self, booking_id):
        with self._lock:
            booking = self.items[booking_id]
            if booking.reminder_sent:
                return False
            booking.reminder_sent = True
            return True

    def log_reminder(self, entry):
        self.logs.append(entry)


def make_booking(booking_id="bk-123", **overrides):
    fields = dict(
        booking_id=booking_id,
        style="Knotless braids",
        length="Waist",
        price=Decimal("350"),
        client_name="Thandi",
        client_phone="+27821234567",
        client_email="thandi@example.com",
        date="2026-11-20",
        time="14:00",
        method=Channel.SMS,
        amount_due=35000,
        created_at=1795000000,
        reminder_at=1795158000,
    )
    fields.update(overrides)
    return Booking(**fields)


@pytest.fixture
def settings():
    return Settings(
        bookings_table="bookings",
        reminder_logs_table="reminder-logs",
        reminder_index="reminderDue-reminderAt-index",
        twilio_secret_name="salon/twilio",
        paystack_secret_name="salon/paystack",
        paystack_base_url="https://api.paystack.co",
        paystack_callback_url=None,
        gateway_timeout_seconds=15,
        whatsapp_from=WHATSAPP_FROM,
        booking_timezone="Africa/Johannesburg",
        reminder_lead_hours=5,
        region="us-east-1",
    )


@pytest.fixture
def twilio():
    return StubTwilioClient()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def services(settings, store, gateway, twilio, sleeps):
    notifier = Notifier(
        twilio,
        {"sms_from": SMS_FROM, "whatsapp_from": WHATSAPP_FROM},
        sleep=sleeps.append,
    )
    return Services(
        settings=settings,
        store=store,
        gateway=gateway,
        notifier=notifier,
        webhook_secret=WEBHOOK_SECRET,
    )
