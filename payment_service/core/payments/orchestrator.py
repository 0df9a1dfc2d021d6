"""
Charge Orchestrator

Sequences one idempotent charge request:

    validate key -> lookup -> (hit: replay)
                           -> (miss: decide -> persist -> respond)

A persist that loses the race for its key re-reads the ledger and replays
the winner's response, so every caller of a given key sees the same body.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

from payment_service.core.exceptions import (
    InvalidChargeRequestError,
    PaymentPersistenceError,
)
from payment_service.core.idempotency.keys import validate_idempotency_key
from payment_service.core.idempotency.ledger import IdempotencyLedger
from payment_service.core.idempotency.snapshot import StoredResponse
from payment_service.core.payments.decision import ChargeDecisionEngine
from payment_service.core.payments.models import OrderId
from payment_service.core.payments.recorder import PaymentRecorder, PersistOutcome
from payment_service.monitoring.logging import get_logger
from payment_service.monitoring.metrics import (
    charge_requests_counter,
    idempotency_malformed_snapshots_counter,
    idempotency_replays_counter,
    payment_decisions_counter,
)

logger = get_logger(__name__)


def _log_persist_error(task: asyncio.Future) -> None:
    """Retrieve and log a persist failure, even when its caller is gone."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("payment_persist_crashed", error=str(error), exc_info=error)


@dataclass(frozen=True)
class ChargeResult:
    """Response to send back, and whether it is a replay."""

    response: StoredResponse
    replayed: bool = False


class ChargeOrchestrator:
    """Runs the idempotent charge protocol against the ledger and recorder."""

    def __init__(
        self,
        ledger: IdempotencyLedger,
        engine: ChargeDecisionEngine,
        recorder: PaymentRecorder,
        key_max_length: int = 255,
    ):
        self.ledger = ledger
        self.engine = engine
        self.recorder = recorder
        self.key_max_length = key_max_length

    async def charge(
        self,
        idempotency_key: Optional[str],
        order_id: Optional[OrderId],
        amount: Any,
        method: Optional[str],
    ) -> ChargeResult:
        """
        Charge once per idempotency key.

        Args:
            idempotency_key: Raw Idempotency-Key header value
            order_id: Caller's order identifier
            amount: Amount to charge, as received
            method: Payment method label

        Returns:
            ChargeResult holding the stored snapshot

        Raises:
            MissingIdempotencyKeyError: Key absent or blank
            InvalidIdempotencyKeyError: Key too long
            InvalidChargeRequestError: Body cannot be charged
            StoreUnavailableError: Ledger could not be read
            PaymentPersistenceError: Charge could not be recorded
        """
        key = validate_idempotency_key(idempotency_key, self.key_max_length)

        stored = await self.ledger.lookup(key)
        if stored is not None:
            return self._replay(key, stored, source="ledger")

        try:
            record = self.engine.decide(order_id, amount, method)
        except InvalidChargeRequestError as e:
            charge_requests_counter.labels(outcome="rejected").inc()
            logger.info("charge_rejected", key=key, reason=e.message)
            raise
        payment_decisions_counter.labels(status=record.status.value).inc()

        # A client disconnect must not abort the write half-way
        persist_task = asyncio.ensure_future(self.recorder.persist(record, key))
        persist_task.add_done_callback(_log_persist_error)
        result = await asyncio.shield(persist_task)

        if result.outcome is PersistOutcome.PERSISTED:
            charge_requests_counter.labels(outcome="created").inc()
            logger.info(
                "payment_created",
                key=key,
                payment_id=record.payment_id,
                status=record.status.value,
            )
            return ChargeResult(response=result.response)

        if result.outcome is PersistOutcome.CONFLICT:
            stored = await self.ledger.lookup(key)
            if stored is not None:
                return self._replay(key, stored, source="race")
            logger.error("idempotency_conflict_without_entry", key=key)

        charge_requests_counter.labels(outcome="failed").inc()
        raise PaymentPersistenceError()

    def _replay(self, key: str, stored: StoredResponse, source: str) -> ChargeResult:
        if not stored.is_well_formed:
            idempotency_malformed_snapshots_counter.inc()
            logger.warning("snapshot_malformed", key=key)

        idempotency_replays_counter.labels(source=source).inc()
        charge_requests_counter.labels(outcome="replayed").inc()
        logger.info("payment_replayed", key=key, source=source)
        return ChargeResult(response=stored, replayed=True)
