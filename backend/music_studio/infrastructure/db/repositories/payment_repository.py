"""
Payment Repository

Gateway payment records.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from music_studio.infrastructure.db.models.payment import Payment


class PaymentRepository:
    """Repository for payments."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, payment_id: str) -> Optional[Payment]:
        return await self._session.get(Payment, payment_id)

    async def get_by_order_id(self, order_id: str) -> Optional[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.razorpay_order_id == order_id)
            .order_by(Payment.created_at.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, payment: Payment) -> Payment:
        self._session.add(payment)
        await self._session.flush()
        await self._session.refresh(payment)
        return payment
