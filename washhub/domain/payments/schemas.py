"""Payment domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PaymentCreate(BaseModel):
    """A payment that has already been settled outside the system"""

    order_id: str
    amount: float
    method: str  # cash, card, wallet, transfer
    status: str = "paid"  # paid, failed, pending, refunded
    transaction_ref: Optional[str] = None
    paid_at: Optional[datetime] = None


class PaymentResponse(BaseModel):
    id: str
    user_id: str
    carwash_id: str
    order_id: str
    amount: float
    method: str
    status: str
    transaction_ref: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EarningsResponse(BaseModel):
    carwash_id: str
    total_earnings: float
