"""
Payment Domain Types

The in-memory shape of a decided charge, independent of the ORM.
"""

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Union

OrderId = Union[str, int]


class PaymentStatus(str, enum.Enum):
    """Outcome of a charge decision."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class PaymentRecord:
    """One charge attempt's outcome. Never mutated after creation."""

    payment_id: str
    order_id: OrderId
    amount: Decimal
    method: str
    status: PaymentStatus
    reference: str
    created_at: datetime

    def to_response(self) -> Dict[str, Any]:
        """Response body returned to the client and stored for replay."""
        return {
            "payment_id": self.payment_id,
            "order_id": self.order_id,
            "amount": self.amount,
            "method": self.method,
            "status": self.status.value,
            "reference": self.reference,
            "created_at": format_timestamp(self.created_at),
        }

    def to_row(self) -> Dict[str, Any]:
        """Column values for the payments table."""
        return {
            "payment_id": self.payment_id,
            "order_id": str(self.order_id),
            "amount": self.amount,
            "method": self.method,
            "status": self.status.value,
            "reference": self.reference,
            "created_at": self.created_at,
        }
