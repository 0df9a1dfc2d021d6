"""
Idempotency Record Model

Database model mapping a client idempotency key to its response snapshot.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Text, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from payment_service.db.base import Base


class IdempotencyRecord(Base):
    """
    Idempotency Record Model.

    The primary key on ``idempotency_key`` is what serializes racing
    writers: whichever transaction commits first owns the key, every other
    insert fails with a uniqueness violation.
    """

    __tablename__ = "idempotency_keys"

    idempotency_key: Mapped[str] = mapped_column(String(255), primary_key=True)

    # Exact response body served on first success, replayed verbatim afterwards
    response_snapshot: Mapped[str] = mapped_column(Text, nullable=False)

    payment_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("payments.payment_id"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<IdempotencyRecord(key={self.idempotency_key}, payment={self.payment_id})>"
