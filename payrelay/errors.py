"""Ошибки платежного сервиса"""
from enum import Enum
from typing import Optional, Sequence


class PersistenceStep(str, Enum):
    """Шаг записи в БД, на котором произошла ошибка"""
    PAYMENT_INSERT = "payment_insert"
    PAYMENT_UPDATE = "payment_update"
    SUBSCRIPTION_UPSERT = "subscription_upsert"
    PROFILE_UPDATE = "profile_update"


class PaymentError(Exception):
    """Базовая ошибка сервиса"""


class ConfigurationError(PaymentError):
    """Не заданы ключи платежного шлюза"""


class InvalidPlanError(PaymentError):
    """Тариф отсутствует в каталоге"""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Invalid plan: {plan_id}")


class MissingParametersError(PaymentError):
    """Не переданы обязательные параметры"""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required parameters: {', '.join(self.missing)}")


class InvalidSignatureError(PaymentError):
    """Подпись платежа не совпала"""

    def __init__(self, order_id: str, payment_id: str):
        self.order_id = order_id
        self.payment_id = payment_id
        super().__init__("Invalid payment signature")


class GatewayError(PaymentError):
    """Ошибка при обращении к платежному шлюзу"""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class PersistenceError(PaymentError):
    """Ошибка записи в БД, помеченная шагом"""

    def __init__(self, step: PersistenceStep, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"{step.value} failed: {cause}")
