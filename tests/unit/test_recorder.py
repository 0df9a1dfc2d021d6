"""
Payment Recorder Unit Tests
"""

import dataclasses
import json
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from payment_service.core.payments.recorder import PersistOutcome
from payment_service.db.models import IdempotencyRecord, Payment


class TestPaymentRecorder:
    """Tests for PaymentRecorder against the test database."""

    @pytest.mark.asyncio
    async def test_persist_writes_payment_and_ledger_entry(
        self, recorder, ledger, gateway, decision_engine
    ):
        record = decision_engine.decide("order-1", 99, "card")

        result = await recorder.persist(record, "key-1")

        assert result.outcome is PersistOutcome.PERSISTED
        assert json.loads(result.response.raw)["payment_id"] == record.payment_id

        stored = await ledger.lookup("key-1")
        assert stored == result.response

        rows = await gateway.query(select(Payment.payment_id, Payment.status, Payment.order_id))
        assert [tuple(row) for row in rows] == [(record.payment_id, "SUCCESS", "order-1")]

        links = await gateway.query(select(IdempotencyRecord.payment_id))
        assert links[0].payment_id == record.payment_id

    @pytest.mark.asyncio
    async def test_conflict_rolls_back_payment(self, recorder, ledger, decision_engine, count_rows):
        await ledger.reserve("key-1", '{"winner":true}')
        record = decision_engine.decide("order-1", 99, "card")

        result = await recorder.persist(record, "key-1")

        assert result.outcome is PersistOutcome.CONFLICT
        assert result.response is None
        assert await count_rows(Payment) == 0
        assert (await ledger.lookup("key-1")).raw == '{"winner":true}'

    @pytest.mark.asyncio
    async def test_failure_between_inserts_leaves_nothing(
        self, recorder, ledger, decision_engine, count_rows
    ):
        """A failure after the payment insert rolls the payment back too."""
        failure = OperationalError("INSERT", {}, Exception("connection lost"))
        ledger.reserve = AsyncMock(side_effect=failure)
        record = decision_engine.decide("order-1", 99, "card")

        result = await recorder.persist(record, "key-1")

        assert result.outcome is PersistOutcome.FAILED
        assert result.error is failure
        ledger.reserve.assert_awaited_once()
        assert await count_rows(Payment) == 0
        assert await count_rows(IdempotencyRecord) == 0

    @pytest.mark.asyncio
    async def test_payment_insert_failure_is_not_a_conflict(
        self, recorder, decision_engine, count_rows
    ):
        first = decision_engine.decide("order-1", 10, "card")
        await recorder.persist(first, "key-1")

        # Same payment_id again violates the payments primary key, not the ledger
        duplicate = dataclasses.replace(first)
        result = await recorder.persist(duplicate, "key-2")

        assert result.outcome is PersistOutcome.FAILED
        assert await count_rows(Payment) == 1
        assert await count_rows(IdempotencyRecord) == 1
