"""Репозиторий для работы с платежами"""
import json
import asyncpg
from typing import Optional, Any
from datetime import datetime

from payrelay.constants import PROVIDER, PAYMENT_STATUS_PENDING, PAYMENT_STATUS_CAPTURED
from payrelay.db.pool import affected_rows
from payrelay.models.payment import PaymentRecord


class PaymentRepository:
    """Репозиторий для работы с платежами"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def create_pending(
        self,
        order_id: str,
        user_id: str,
        amount: Optional[int],
        currency: str,
        plan_id: str,
        metadata: dict[str, Any],
        provider: str = PROVIDER
    ) -> None:
        """
        Сохранить новый платеж в статусе pending

        Args:
            order_id: ID заказа в Razorpay
            user_id: ID пользователя
            amount: Сумма в пайсах
            currency: Валюта
            plan_id: Тариф
            metadata: planName, planDescription
            provider: Платежный провайдер
        """
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO payments (
                    user_id, provider, razorpay_order_id, amount,
                    currency, status, plan_id, metadata
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8::jsonb)
                """,
                user_id, provider, order_id, amount,
                currency, PAYMENT_STATUS_PENDING, plan_id, json.dumps(metadata)
            )

    async def mark_captured(
        self,
        order_id: str,
        user_id: str,
        payment_id: str,
        signature: str,
        updated_at: datetime
    ) -> int:
        """
        Отметить платеж как оплаченный

        Returns:
            Количество обновленных строк (0 - платеж не найден)
        """
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE payments
                SET razorpay_payment_id = $1,
                    razorpay_signature = $2,
                    status = $3,
                    updated_at = $4
                WHERE razorpay_order_id = $5 AND user_id = $6
                """,
                payment_id, signature, PAYMENT_STATUS_CAPTURED, updated_at,
                order_id, user_id
            )
            return affected_rows(result)

    async def get_payment(self, order_id: str, user_id: str) -> Optional[PaymentRecord]:
        """Получить платеж по ID заказа и пользователю"""
        async with self.pool.acquire() as conn:
            result = await conn.fetchrow(
                """
                SELECT razorpay_order_id, user_id, provider, amount, currency, plan_id,
                       status, razorpay_payment_id, razorpay_signature, metadata,
                       created_at, updated_at
                FROM payments
                WHERE razorpay_order_id = $1 AND user_id = $2
                """,
                order_id, user_id
            )
            if not result:
                return None

            record = dict(result)
            if isinstance(record.get('metadata'), str):
                record['metadata'] = json.loads(record['metadata'])
            return record  # type: ignore
