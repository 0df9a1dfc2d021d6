"""
Payment Schemas

Pydantic schemas for the charge endpoint.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from payment_service.core.payments.models import PaymentStatus


class ChargeRequest(BaseModel):
    """
    Schema for a charge request body.

    Fields are deliberately loose: the decision engine owns the rules for
    what can be charged and reports violations as 400s.
    """
    model_config = ConfigDict(extra="ignore")

    order_id: Optional[Union[int, str]] = Field(
        None,
        description="Caller's order identifier"
    )
    amount: Optional[Any] = Field(
        None,
        description="Amount to charge; must be a positive number"
    )
    method: Optional[str] = Field(
        None,
        max_length=64,
        description="Payment method label"
    )


class ChargeResponse(BaseModel):
    """Schema for a charge response (first result or replay)."""
    payment_id: str = Field(..., description="Server-generated payment ID")
    order_id: Union[int, str] = Field(..., description="Order ID as submitted")
    amount: float = Field(..., description="Charged amount")
    method: str = Field(..., description="Payment method label")
    status: PaymentStatus = Field(..., description="SUCCESS or FAILED")
    reference: str = Field(..., description="Reconciliation reference (UUID)")
    created_at: str = Field(..., description="ISO-8601 UTC creation time")


class ErrorResponse(BaseModel):
    """Schema for error bodies."""
    error: str = Field(..., description="Error message")
