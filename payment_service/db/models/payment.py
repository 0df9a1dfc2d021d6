"""
Payment Model

Database model for recorded charge outcomes.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from payment_service.core.payments.models import PaymentStatus
from payment_service.db.base import Base


class Payment(Base):
    """
    Payment Model.

    One row per resolved idempotency key. Rows are written together with
    their ledger entry and are never updated or deleted by the service.
    """

    __tablename__ = "payments"

    payment_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Caller-supplied, opaque
    order_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    method: Mapped[str] = mapped_column(String(64), nullable=False)

    # Decision
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=PaymentStatus.SUCCESS.value,
        index=True,
    )

    # External reconciliation token
    reference: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Payment(id={self.payment_id}, order={self.order_id}, status={self.status})>"
