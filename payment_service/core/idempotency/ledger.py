"""
Idempotency Ledger

Store-backed mapping from idempotency key to the response first produced for it.
"""

import enum
from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payment_service.core.exceptions import StoreUnavailableError
from payment_service.core.idempotency.snapshot import StoredResponse
from payment_service.core.store.gateway import StoreGateway
from payment_service.db.models.idempotency import IdempotencyRecord
from payment_service.monitoring.logging import get_logger
from payment_service.monitoring.metrics import idempotency_conflicts_counter

logger = get_logger(__name__)


class ReserveOutcome(str, enum.Enum):
    """Result of trying to claim a key."""
    RESERVED = "reserved"
    CONFLICT = "conflict"


class IdempotencyLedger:
    """
    Ledger of idempotency keys and their response snapshots.

    Uses the database for distributed state with the following flow:
    1. ``lookup`` the key; a hit is replayed as-is
    2. On a miss, the caller decides and ``reserve``s the key with its snapshot
    3. If another writer already owns the key, ``reserve`` reports CONFLICT

    Uniqueness comes from the table's primary key, so two instances racing
    on the same key cannot both succeed no matter how their lookups interleave.
    """

    def __init__(self, gateway: StoreGateway):
        """Initialize with the store gateway."""
        self.gateway = gateway

    async def lookup(self, key: str) -> Optional[StoredResponse]:
        """
        Get the stored response for an idempotency key.

        Args:
            key: Idempotency key

        Returns:
            Stored response or None if the key was never reserved

        Raises:
            StoreUnavailableError: If the store could not be queried
        """
        statement = select(IdempotencyRecord.response_snapshot).where(
            IdempotencyRecord.idempotency_key == key
        )
        try:
            rows = await self.gateway.query(statement)
        except SQLAlchemyError as e:
            logger.error("idempotency_lookup_failed", key=key, error=str(e))
            raise StoreUnavailableError() from e

        if not rows:
            return None
        return StoredResponse(rows[0].response_snapshot)

    async def reserve(
        self,
        key: str,
        snapshot: str,
        *,
        payment_id: Optional[str] = None,
        session: Optional[AsyncSession] = None,
    ) -> ReserveOutcome:
        """
        Associate a key with its response snapshot for the first time.

        Args:
            key: Idempotency key
            snapshot: Serialized response body
            payment_id: Payment the snapshot describes
            session: Session of an enclosing transaction, if any

        Returns:
            RESERVED if the key is now ours, CONFLICT if it already existed

        Any store error other than a uniqueness violation propagates.
        """
        statement = insert(IdempotencyRecord).values(
            idempotency_key=key,
            response_snapshot=snapshot,
            payment_id=payment_id,
        )
        try:
            await self.gateway.execute(statement, session=session)
        except IntegrityError:
            idempotency_conflicts_counter.inc()
            logger.info("idempotency_conflict", key=key)
            return ReserveOutcome.CONFLICT

        return ReserveOutcome.RESERVED
