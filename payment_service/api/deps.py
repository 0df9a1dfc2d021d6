"""
API Dependencies Module

Common dependencies used across API routes.
"""

from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from payment_service.config import settings
from payment_service.core.idempotency.keys import IDEMPOTENCY_HEADER, validate_idempotency_key
from payment_service.core.idempotency.ledger import IdempotencyLedger
from payment_service.core.payments.decision import ChargeDecisionEngine
from payment_service.core.payments.orchestrator import ChargeOrchestrator
from payment_service.core.payments.recorder import PaymentRecorder
from payment_service.core.store.gateway import StoreGateway


def get_store_gateway(request: Request) -> StoreGateway:
    """Get the store gateway created by the application lifespan."""
    return request.app.state.store_gateway


def get_ledger(
    gateway: Annotated[StoreGateway, Depends(get_store_gateway)]
) -> IdempotencyLedger:
    """Get idempotency ledger dependency."""
    return IdempotencyLedger(gateway)


def get_decision_engine() -> ChargeDecisionEngine:
    """Get charge decision engine dependency."""
    return ChargeDecisionEngine(threshold=settings.charge_decline_threshold)


def get_recorder(
    gateway: Annotated[StoreGateway, Depends(get_store_gateway)],
    ledger: Annotated[IdempotencyLedger, Depends(get_ledger)],
) -> PaymentRecorder:
    """Get payment recorder dependency."""
    return PaymentRecorder(gateway, ledger)


def get_orchestrator(
    ledger: Annotated[IdempotencyLedger, Depends(get_ledger)],
    engine: Annotated[ChargeDecisionEngine, Depends(get_decision_engine)],
    recorder: Annotated[PaymentRecorder, Depends(get_recorder)],
) -> ChargeOrchestrator:
    """Get charge orchestrator dependency."""
    return ChargeOrchestrator(
        ledger,
        engine,
        recorder,
        key_max_length=settings.idempotency_key_max_length,
    )


def get_idempotency_key(
    idempotency_key: Annotated[Optional[str], Header(alias=IDEMPOTENCY_HEADER)] = None,
) -> str:
    """
    Get the validated Idempotency-Key header.

    Dependencies resolve before the body is validated, so a missing key is
    reported as such even when the body is malformed.
    """
    return validate_idempotency_key(idempotency_key, settings.idempotency_key_max_length)


# Type aliases for dependency injection
StoreGatewayDep = Annotated[StoreGateway, Depends(get_store_gateway)]
ChargeOrchestratorDep = Annotated[ChargeOrchestrator, Depends(get_orchestrator)]
IdempotencyKeyDep = Annotated[str, Depends(get_idempotency_key)]
