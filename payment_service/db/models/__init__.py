"""Database Models Package"""

from payment_service.db.models.payment import Payment
from payment_service.db.models.idempotency import IdempotencyRecord

__all__ = [
    "Payment",
    "IdempotencyRecord",
]
