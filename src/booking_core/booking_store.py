"""
DynamoDB persistence for bookings and reminder logs.

All state transitions are single conditional writes, so concurrent or
duplicate callers serialize on the condition: only the first one observes the
old state and wins, the rest get ConditionalCheckFailedException.

Table layout:
  bookings:       partition key `bookingId` (S); sparse GSI
                  `reminderDue-reminderAt-index` on (`reminderDue` S, `reminderAt` N)
                  with projection ALL. `reminderDue` is set when a booking is
                  paid and removed once its reminder is sent, so the index
                  only ever holds bookings still waiting for a reminder.
  reminder logs:  partition key `logId` (S)
"""

from decimal import Decimal
from typing import Any, Dict, Iterator, Optional

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError

from booking_core.errors import AmountMismatch, BookingNotFound
from booking_core.logger import get_logger
from booking_core.models import Booking, BookingStatus, PaymentStatus, ReminderLog

logger = get_logger("booking_store")

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()

CONDITION_FAILED = "ConditionalCheckFailedException"

# partition value of the sparse reminder index
REMINDER_DUE = "Due"


def _to_ddb(values: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    return {k: _serializer.serialize(v) for k, v in values.items()}


def _from_ddb(item: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {k: _deserializer.deserialize(v) for k, v in item.items()}


def _condition_failed(e: ClientError) -> bool:
    return e.response.get("Error", {}).get("Code") == CONDITION_FAILED


class BookingStore:
    def __init__(self, client, table_name: str, logs_table_name: str, reminder_index: str):
        self.client = client
        self.table_name = table_name
        self.logs_table_name = logs_table_name
        self.reminder_index = reminder_index

    @staticmethod
    def _key(booking_id: str) -> Dict[str, Dict[str, str]]:
        return {"bookingId": {"S": booking_id}}

    def create(self, booking: Booking) -> None:
        self.client.put_item(
            TableName=self.table_name,
            Item=_to_ddb(booking.to_item()),
            ConditionExpression="attribute_not_exists(bookingId)",
        )
        logger.info("store.booking_created", extra={"booking_id": booking.booking_id})

    def get(self, booking_id: str) -> Optional[Booking]:
        resp = self.client.get_item(
            TableName=self.table_name,
            Key=self._key(booking_id),
            ConsistentRead=True,
        )
        item = resp.get("Item")
        if not item:
            return None
        return Booking.from_item(_from_ddb(item))

    def set_payment_reference(self, booking_id: str, reference: str) -> None:
        self.client.update_item(
            TableName=self.table_name,
            Key=self._key(booking_id),
            UpdateExpression="SET paymentReference = :ref",
            ConditionExpression="attribute_exists(bookingId)",
            ExpressionAttributeValues=_to_ddb({":ref": reference}),
        )

    def mark_paid(self, booking_id: str, amount: int) -> Optional[Booking]:
        """
        Move a booking from Unpaid/Pending to Paid/Accepted.

        `amount` is the charged amount in minor units as reported by the
        gateway; it must equal the booking's `amountDue`.

        Returns the updated booking, or None when it was already Paid (a
        redelivered event). Raises BookingNotFound or AmountMismatch.
        """
        try:
            resp = self.client.update_item(
                TableName=self.table_name,
                Key=self._key(booking_id),
                UpdateExpression=(
                    "SET paymentStatus = :paid, verified = :true, depositPaid = :deposit, "
                    "#s = :accepted, confirmationSent = :false, reminderDue = :due"
                ),
                ConditionExpression=(
                    "attribute_exists(bookingId) AND paymentStatus = :unpaid AND amountDue = :amount"
                ),
                ExpressionAttributeNames={"#s": "status"},
                ExpressionAttributeValues=_to_ddb(
                    {
                        ":paid": PaymentStatus.PAID.value,
                        ":unpaid": PaymentStatus.UNPAID.value,
                        ":accepted": BookingStatus.ACCEPTED.value,
                        ":deposit": Decimal(amount) / 100,
                        ":amount": amount,
                        ":true": True,
                        ":false": False,
                        ":due": REMINDER_DUE,
                    }
                ),
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if not _condition_failed(e):
                raise
            return self._classify_failed_payment(booking_id, amount)

        return Booking.from_item(_from_ddb(resp["Attributes"]))

    def _classify_failed_payment(self, booking_id: str, amount: int) -> None:
        current = self.get(booking_id)
        if current is None:
            raise BookingNotFound(booking_id)
        if current.payment_status == PaymentStatus.PAID:
            logger.info("store.already_paid", extra={"booking_id": booking_id})
            return None
        raise AmountMismatch(booking_id, current.amount_due, amount)

    def mark_failed(self, booking_id: str) -> bool:
        """Compensate a booking whose checkout could not be started."""
        try:
            self.client.update_item(
                TableName=self.table_name,
                Key=self._key(booking_id),
                UpdateExpression="SET #s = :failed",
                ConditionExpression="#s = :pending AND paymentStatus = :unpaid",
                ExpressionAttributeNames={"#s": "status"},
                ExpressionAttributeValues=_to_ddb(
                    {
                        ":failed": BookingStatus.FAILED.value,
                        ":pending": BookingStatus.PENDING.value,
                        ":unpaid": PaymentStatus.UNPAID.value,
                    }
                ),
            )
        except ClientError as e:
            if _condition_failed(e):
                return False
            raise
        return True

    def mark_confirmation_sent(self, booking_id: str) -> None:
        self.client.update_item(
            TableName=self.table_name,
            Key=self._key(booking_id),
            UpdateExpression="SET confirmationSent = :true",
            ConditionExpression="attribute_exists(bookingId)",
            ExpressionAttributeValues=_to_ddb({":true": True}),
        )

    def due_for_reminder(self, now: int) -> Iterator[Booking]:
        """Paid bookings whose reminder time has passed and is not yet sent."""
        paginator = self.client.get_paginator("query")
        pages = paginator.paginate(
            TableName=self.table_name,
            IndexName=self.reminder_index,
            KeyConditionExpression="reminderDue = :due AND reminderAt <= :now",
            ExpressionAttributeValues=_to_ddb({":due": REMINDER_DUE, ":now": now}),
        )
        for page in pages:
            for item in page.get("Items", []):
                yield Booking.from_item(_from_ddb(item))

    def mark_reminder_sent(self, booking_id: str) -> bool:
        try:
            self.client.update_item(
                TableName=self.table_name,
                Key=self._key(booking_id),
                UpdateExpression="SET reminderSent = :true REMOVE reminderDue",
                ConditionExpression="reminderSent = :false",
                ExpressionAttributeValues=_to_ddb({":true": True, ":false": False}),
            )
        except ClientError as e:
            if _condition_failed(e):
                logger.info("store.reminder_already_sent", extra={"booking_id": booking_id})
                return False
            raise
        return True

    def log_reminder(self, entry: ReminderLog) -> None:
        self.client.put_item(
            TableName=self.logs_table_name,
            Item=_to_ddb(entry.to_item()),
        )
