"""
Payment Recorder

Writes a decided payment and its ledger entry as one unit.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError

from payment_service.core.idempotency.ledger import IdempotencyLedger, ReserveOutcome
from payment_service.core.idempotency.snapshot import StoredResponse, serialize_snapshot
from payment_service.core.payments.models import PaymentRecord
from payment_service.core.store.gateway import StoreGateway
from payment_service.db.models.payment import Payment
from payment_service.monitoring.logging import get_logger
from payment_service.monitoring.metrics import payment_persistence_failures_counter

logger = get_logger(__name__)


class PersistOutcome(str, enum.Enum):
    PERSISTED = "persisted"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass(frozen=True)
class PersistResult:
    outcome: PersistOutcome
    response: Optional[StoredResponse] = None
    error: Optional[BaseException] = None


class _ReservationLost(Exception):
    """Aborts the persist transaction after a ledger conflict."""


class PaymentRecorder:
    """
    Persists payments together with their idempotency snapshot.

    The payment insert and the ledger reservation share one transaction:
    either both rows become visible or neither does.
    """

    def __init__(self, gateway: StoreGateway, ledger: IdempotencyLedger):
        self.gateway = gateway
        self.ledger = ledger

    async def persist(self, record: PaymentRecord, key: str) -> PersistResult:
        """
        Record a payment and link it to its idempotency key.

        Args:
            record: Decided payment
            key: Idempotency key the payment answers

        Returns:
            PersistResult with PERSISTED and the stored snapshot, CONFLICT if
            another writer owns the key, or FAILED with the store error
        """
        snapshot = serialize_snapshot(record.to_response())

        try:
            async with self.gateway.transaction() as session:
                await self.gateway.execute(
                    insert(Payment).values(**record.to_row()),
                    session=session,
                )
                outcome = await self.ledger.reserve(
                    key,
                    snapshot,
                    payment_id=record.payment_id,
                    session=session,
                )
                if outcome is ReserveOutcome.CONFLICT:
                    raise _ReservationLost()
        except _ReservationLost:
            return PersistResult(PersistOutcome.CONFLICT)
        except SQLAlchemyError as e:
            payment_persistence_failures_counter.inc()
            logger.error(
                "payment_persist_failed",
                key=key,
                payment_id=record.payment_id,
                exc_info=True,
            )
            return PersistResult(PersistOutcome.FAILED, error=e)

        return PersistResult(PersistOutcome.PERSISTED, response=StoredResponse(snapshot))
