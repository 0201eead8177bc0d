import logging
import time
from typing import Optional

from payrelay.clients.razorpay_client import RazorpayClient
from payrelay.constants import (
    DEFAULT_USER_NAME,
    RECEIPT_MAX_LENGTH,
    RECEIPT_PREFIX,
    RECEIPT_USER_ID_LENGTH,
)
from payrelay.db.repositories.payments import PaymentRepository
from payrelay.errors import ConfigurationError, PersistenceError, PersistenceStep
from payrelay.models.payment import OrderRecord
from payrelay.services.plans import require_plan

logger = logging.getLogger(__name__)


def build_receipt(plan_id: str, user_id: Optional[str], timestamp_ms: int) -> str:
    """Собирает receipt и обрезает до лимита Razorpay"""
    short_user_id = str(user_id or "")[:RECEIPT_USER_ID_LENGTH]
    receipt = f"{RECEIPT_PREFIX}_{plan_id}_{short_user_id}_{timestamp_ms}"
    return receipt[:RECEIPT_MAX_LENGTH]


class OrderService:
    """Сервис создания заказов"""

    def __init__(
        self,
        gateway: Optional[RazorpayClient],
        payments: Optional[PaymentRepository] = None
    ):
        self.gateway = gateway
        self.payments = payments

    async def create_order(
        self,
        plan_id: str,
        user_id: str,
        user_email: str = "",
        user_name: str = DEFAULT_USER_NAME
    ) -> OrderRecord:
        """
        Создает заказ в Razorpay для тарифа

        Raises:
            ConfigurationError: ключи Razorpay не настроены
            InvalidPlanError: тариф не найден (запрос в Razorpay не отправляется)
            GatewayError: Razorpay вернул ошибку
        """
        if self.gateway is None:
            raise ConfigurationError("Razorpay credentials not configured")

        plan = require_plan(plan_id)
        receipt = build_receipt(plan.id, user_id, int(time.time() * 1000))

        order = await self.gateway.create_order(
            amount=plan.amount,
            currency=plan.currency,
            receipt=receipt,
            notes={
                "plan": plan.id,
                "userId": user_id,
                "userEmail": user_email or "",
                "userName": user_name or DEFAULT_USER_NAME,
            }
        )

        logger.info(f"Создан заказ {order.get('id')} для пользователя {user_id} (тариф {plan.id}, {plan.amount} {plan.currency})")

        return OrderRecord(
            id=order["id"],
            amount=int(order.get("amount", plan.amount)),
            currency=order.get("currency") or plan.currency,
            receipt=order.get("receipt") or receipt,
            status=order.get("status", "created"),
            plan=plan.id,
            plan_name=plan.name,
            plan_description=plan.description
        )

    async def record_pending(self, order: OrderRecord, user_id: str) -> bool:
        """
        Сохраняет платеж в статусе pending

        Заказ уже создан в Razorpay, поэтому ошибка записи только логируется.

        Returns:
            True если запись сохранена
        """
        if self.payments is None:
            logger.warning(f"⚠️ БД не настроена, платеж по заказу {order.id} не сохранен")
            return False

        try:
            await self.payments.create_pending(
                order_id=order.id,
                user_id=user_id,
                amount=order.amount,
                currency=order.currency or "INR",
                plan_id=order.plan,
                metadata={
                    "planName": order.plan_name,
                    "planDescription": order.plan_description,
                }
            )
            return True
        except Exception as e:
            error = PersistenceError(PersistenceStep.PAYMENT_INSERT, e)
            logger.error(f"Ошибка сохранения платежа: order_id={order.id}, user_id={user_id}, step={error.step.value}: {e}")
            return False
