from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class Channel(str, Enum):
    SMS = "sms"
    WHATSAPP = "whatsapp"


class BookingStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    FAILED = "Failed"


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


@dataclass
class Booking:
    """One appointment request and its payment/notification lifecycle."""

    booking_id: str
    style: str
    length: str
    price: Decimal
    client_name: str
    client_phone: str
    client_email: str
    date: str
    time: str
    method: Channel
    amount_due: int
    created_at: int
    reminder_at: int
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    deposit_paid: Optional[Decimal] = None
    verified: bool = False
    confirmation_sent: bool = False
    reminder_sent: bool = False
    payment_reference: Optional[str] = None

    def to_item(self) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "bookingId": self.booking_id,
            "style": self.style,
            "length": self.length,
            "price": self.price,
            "clientName": self.client_name,
            "clientPhone": self.client_phone,
            "clientEmail": self.client_email,
            "date": self.date,
            "time": self.time,
            "method": self.method.value,
            "amountDue": self.amount_due,
            "createdAt": self.created_at,
            "reminderAt": self.reminder_at,
            "status": self.status.value,
            "paymentStatus": self.payment_status.value,
            "verified": self.verified,
            "confirmationSent": self.confirmation_sent,
            "reminderSent": self.reminder_sent,
        }
        # Unset optionals are left out of the item rather than stored as NULL.
        if self.deposit_paid is not None:
            item["depositPaid"] = self.deposit_paid
        if self.payment_reference is not None:
            item["paymentReference"] = self.payment_reference
        return item

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Booking":
        deposit = item.get("depositPaid")
        return cls(
            booking_id=item["bookingId"],
            style=item["style"],
            length=item["length"],
            price=Decimal(str(item["price"])),
            client_name=item["clientName"],
            client_phone=item["clientPhone"],
            client_email=item["clientEmail"],
            date=item["date"],
            time=item["time"],
            method=Channel(item.get("method") or Channel.SMS.value),
            amount_due=int(item["amountDue"]),
            created_at=int(item["createdAt"]),
            reminder_at=int(item["reminderAt"]),
            status=BookingStatus(item["status"]),
            payment_status=PaymentStatus(item["paymentStatus"]),
            deposit_paid=Decimal(str(deposit)) if deposit is not None else None,
            verified=bool(item.get("verified", False)),
            confirmation_sent=bool(item.get("confirmationSent", False)),
            reminder_sent=bool(item.get("reminderSent", False)),
            payment_reference=item.get("paymentReference"),
        )


@dataclass
class ReminderLog:
    """Append-only audit record written after a reminder goes out."""

    log_id: str
    booking_id: str
    client_name: str
    phone: str
    method: Channel
    sent_at: int
    type: str = "5-hour"

    def to_item(self) -> Dict[str, Any]:
        return {
            "logId": self.log_id,
            "bookingId": self.booking_id,
            "clientName": self.client_name,
            "phone": self.phone,
            "method": self.method.value,
            "sentAt": self.sent_at,
            "type": self.type,
        }
