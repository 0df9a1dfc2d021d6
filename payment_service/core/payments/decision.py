"""
Charge Decision Engine

Pure approve/decline policy for a single charge.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from payment_service.core.exceptions import InvalidChargeRequestError
from payment_service.core.payments.models import OrderId, PaymentRecord, PaymentStatus

DEFAULT_DECLINE_THRESHOLD = Decimal("10000")

# payments.amount is NUMERIC(18, 4)
AMOUNT_SCALE = Decimal("0.0001")
MAX_AMOUNT_DIGITS = 14
# Snapshots carry the amount as a JSON number, which clients read as a double
MAX_SIGNIFICANT_DIGITS = 15

# payments.order_id is VARCHAR(255)
MAX_ORDER_ID_LENGTH = 255


def new_identifier() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(value: Any) -> Decimal:
    """
    Coerce a caller-supplied amount to a positive finite Decimal.

    Numbers and numeric strings are accepted; booleans are not. The result
    is quantized to the stored scale, so the value that is decided on is the
    value that is stored and echoed back.

    Raises:
        InvalidChargeRequestError: If the amount cannot be charged
    """
    if value is None:
        raise InvalidChargeRequestError("amount is required")
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise InvalidChargeRequestError("amount must be a number")

    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise InvalidChargeRequestError("amount must be a number")

    if not amount.is_finite():
        raise InvalidChargeRequestError("amount must be a finite number")
    if amount <= 0:
        raise InvalidChargeRequestError("amount must be greater than zero")
    if amount.adjusted() >= MAX_AMOUNT_DIGITS:
        raise InvalidChargeRequestError("amount is too large")

    quantized = amount.quantize(AMOUNT_SCALE)
    if quantized != amount:
        raise InvalidChargeRequestError("amount must have at most 4 decimal places")
    if len(quantized.normalize().as_tuple().digits) > MAX_SIGNIFICANT_DIGITS:
        raise InvalidChargeRequestError(
            f"amount must have at most {MAX_SIGNIFICANT_DIGITS} significant digits"
        )

    return quantized


def _is_blank(value: Any) -> bool:
    return value is None or isinstance(value, bool) or not str(value).strip()


class ChargeDecisionEngine:
    """
    Decides SUCCESS or FAILED for a charge and builds its PaymentRecord.

    Identifiers and timestamps come from the injected ``id_factory`` and
    ``clock``, so the same inputs and sources always give the same record.
    """

    def __init__(
        self,
        threshold: Decimal = DEFAULT_DECLINE_THRESHOLD,
        id_factory: Callable[[], str] = new_identifier,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.threshold = threshold
        self.id_factory = id_factory
        self.clock = clock

    def decide(
        self,
        order_id: Optional[OrderId],
        amount: Any,
        method: Optional[str],
    ) -> PaymentRecord:
        """
        Decide a charge.

        Args:
            order_id: Caller's order identifier
            amount: Amount to charge, as received
            method: Payment method label

        Returns:
            A new, unsaved PaymentRecord

        Raises:
            InvalidChargeRequestError: For input that is not a valid charge,
                as opposed to a valid charge that is declined
        """
        if _is_blank(order_id):
            raise InvalidChargeRequestError("order_id is required")
        if len(str(order_id)) > MAX_ORDER_ID_LENGTH:
            raise InvalidChargeRequestError(
                f"order_id must be at most {MAX_ORDER_ID_LENGTH} characters"
            )
        if _is_blank(method):
            raise InvalidChargeRequestError("method is required")

        value = parse_amount(amount)
        status = PaymentStatus.FAILED if value > self.threshold else PaymentStatus.SUCCESS

        return PaymentRecord(
            payment_id=self.id_factory(),
            order_id=order_id,
            amount=value,
            method=method,
            status=status,
            reference=self.id_factory(),
            created_at=self.clock(),
        )
