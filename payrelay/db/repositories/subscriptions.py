from datetime import datetime
from typing import Optional
import asyncpg
import logging

from payrelay.constants import PROVIDER, SUBSCRIPTION_STATUS_ACTIVE
from payrelay.models.subscription import SubscriptionRecord

logger = logging.getLogger(__name__)


class SubscriptionRepository:
    """Репозиторий для работы с подписками в БД"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def upsert_active(
        self,
        user_id: str,
        plan_id: str,
        payment_id: str,
        period_start: datetime,
        period_end: datetime,
        provider: str = PROVIDER
    ) -> None:
        """Создает или перезаписывает подписку пользователя (одна на user_id)"""
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO subscriptions (
                    user_id, plan_id, provider, status, razorpay_payment_id,
                    current_period_start, current_period_end, updated_at
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $6)
                ON CONFLICT (user_id)
                DO UPDATE SET plan_id = $2,
                              provider = $3,
                              status = $4,
                              razorpay_payment_id = $5,
                              current_period_start = $6,
                              current_period_end = $7,
                              updated_at = $6
                """,
                user_id, plan_id, provider, SUBSCRIPTION_STATUS_ACTIVE, payment_id,
                period_start, period_end
            )

    async def get_by_user_id(self, user_id: str) -> Optional[SubscriptionRecord]:
        """Получает подписку по user_id"""
        async with self.pool.acquire() as conn:
            result = await conn.fetchrow(
                """
                SELECT user_id, plan_id, provider, status, razorpay_payment_id,
                       current_period_start, current_period_end, updated_at
                FROM subscriptions
                WHERE user_id = $1
                """,
                user_id
            )
            return dict(result) if result else None  # type: ignore
