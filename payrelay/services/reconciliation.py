from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar
import logging

from payrelay.constants import SUBSCRIPTION_PERIOD
from payrelay.db.repositories.payments import PaymentRepository
from payrelay.db.repositories.profiles import ProfileRepository
from payrelay.db.repositories.subscriptions import SubscriptionRepository
from payrelay.errors import (
    InvalidPlanError,
    InvalidSignatureError,
    MissingParametersError,
    PersistenceError,
    PersistenceStep,
)
from payrelay.models.payment import ReconciliationResult, StepFailure
from payrelay.services.plans import require_plan
from payrelay.utils.crypto import verify_payment_signature

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PaymentReconciler:
    """
    Подтверждение оплаты: проверка подписи и обновление платежа,
    подписки и профиля.

    Три записи в БД не объединены в транзакцию. Шаги выполняются строго
    по порядку (платеж, подписка, профиль); ошибка шага логируется и
    попадает в result.failures, следующие шаги все равно выполняются,
    предыдущие не откатываются.
    """

    def __init__(
        self,
        key_secret: Optional[str],
        payments: Optional[PaymentRepository] = None,
        subscriptions: Optional[SubscriptionRepository] = None,
        profiles: Optional[ProfileRepository] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.key_secret = key_secret
        self.payments = payments
        self.subscriptions = subscriptions
        self.profiles = profiles
        self.clock = clock

    @property
    def persistence_enabled(self) -> bool:
        return None not in (self.payments, self.subscriptions, self.profiles)

    async def reconcile(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
        plan_id: str,
        user_id: str
    ) -> ReconciliationResult:
        """
        Подтверждает платеж

        Raises:
            MissingParametersError: не передан один из пяти параметров
            InvalidSignatureError: подпись не совпала (ничего не меняется)
            InvalidPlanError: тариф не найден (ничего не меняется)
        """
        params = {
            "orderId": order_id,
            "paymentId": payment_id,
            "signature": signature,
            "plan": plan_id,
            "userId": user_id,
        }
        missing = [name for name, value in params.items() if not value]
        if missing:
            logger.warning(f"Подтверждение платежа без параметров {missing}: order_id={order_id}, user_id={user_id}")
            raise MissingParametersError(missing)

        if not verify_payment_signature(order_id, payment_id, signature, self.key_secret):
            logger.warning(f"🚫 Неверная подпись платежа: order_id={order_id}, payment_id={payment_id}, user_id={user_id}")
            raise InvalidSignatureError(order_id, payment_id)

        try:
            plan = require_plan(plan_id)
        except InvalidPlanError:
            logger.warning(f"Подтверждение платежа с неизвестным тарифом {plan_id!r}: order_id={order_id}, user_id={user_id}")
            raise

        now = self.clock()

        result = ReconciliationResult(
            order_id=order_id,
            payment_id=payment_id,
            plan=plan.id,
            plan_name=plan.name,
            amount=plan.amount,
            currency=plan.currency,
            user_id=user_id,
            timestamp=now
        )

        if not self.persistence_enabled:
            logger.warning(f"⚠️ БД не настроена, платеж {order_id} подтвержден без сохранения (user_id={user_id})")
            result.persistence_degraded = True
            return result

        rows = await self._run_step(
            result,
            PersistenceStep.PAYMENT_UPDATE,
            lambda: self.payments.mark_captured(order_id, user_id, payment_id, signature, now)
        )
        if rows is not None:
            result.payment_record_found = rows > 0
            if not rows:
                logger.warning(f"Платеж в статусе pending не найден: order_id={order_id}, user_id={user_id}")

        await self._run_step(
            result,
            PersistenceStep.SUBSCRIPTION_UPSERT,
            lambda: self.subscriptions.upsert_active(
                user_id=user_id,
                plan_id=plan.id,
                payment_id=payment_id,
                period_start=now,
                period_end=now + SUBSCRIPTION_PERIOD
            )
        )

        await self._run_step(
            result,
            PersistenceStep.PROFILE_UPDATE,
            lambda: self.profiles.update_plan(user_id, plan.id)
        )

        if result.failures:
            result.persistence_degraded = True
            steps = ", ".join(failure.step.value for failure in result.failures)
            logger.error(f"⚠️ Платеж {order_id} подтвержден, но запись в БД не завершена ({steps}), user_id={user_id}")
        else:
            logger.info(f"💰 Платеж {order_id} подтвержден: user_id={user_id}, тариф {plan.id} до {now + SUBSCRIPTION_PERIOD}")

        return result

    async def _run_step(
        self,
        result: ReconciliationResult,
        step: PersistenceStep,
        action: Callable[[], Awaitable[T]]
    ) -> Optional[T]:
        """Выполняет шаг записи; ошибку сохраняет в result и возвращает None"""
        try:
            return await action()
        except Exception as e:
            error = PersistenceError(step, e)
            logger.error(
                f"Ошибка записи в БД: step={step.value}, order_id={result.order_id}, "
                f"user_id={result.user_id}: {e}"
            )
            result.failures.append(StepFailure(step=error.step, error=str(error)))
            return None
