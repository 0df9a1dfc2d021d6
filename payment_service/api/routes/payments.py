"""
Payment Routes - Idempotent Charge Endpoint
"""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from payment_service.api.deps import ChargeOrchestratorDep, IdempotencyKeyDep
from payment_service.core.idempotency.keys import REPLAY_HEADER
from payment_service.core.payments.orchestrator import ChargeResult
from payment_service.schemas.payment import ChargeRequest, ChargeResponse, ErrorResponse

router = APIRouter()


def snapshot_response(result: ChargeResult) -> Response:
    """Send the stored snapshot as the response body, byte for byte."""
    headers = {REPLAY_HEADER: "true"} if result.replayed else None
    snapshot = result.response

    if snapshot.is_well_formed:
        return Response(content=snapshot.raw, media_type="application/json", headers=headers)

    # Corrupt snapshot: hand back the stored text as a JSON string
    return JSONResponse(content=snapshot.body(), headers=headers)


@router.post(
    "/charge",
    response_model=ChargeResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def charge_payment(
    idempotency_key: IdempotencyKeyDep,
    orchestrator: ChargeOrchestratorDep,
    payload: Optional[ChargeRequest] = None,
) -> Response:
    """
    Charge a payment exactly once per Idempotency-Key.

    The first request for a key decides and records the charge. Every later
    request with the same key, concurrent or not, gets the original body back
    unchanged with an ``Idempotent-Replayed: true`` header.
    """
    payload = payload or ChargeRequest()
    result = await orchestrator.charge(
        idempotency_key,
        order_id=payload.order_id,
        amount=payload.amount,
        method=payload.method,
    )
    return snapshot_response(result)
