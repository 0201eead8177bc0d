"""Модели для платежей"""
from typing import TypedDict, Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from payrelay.errors import PersistenceStep


class PaymentRecord(TypedDict):
    """Запись платежа из базы данных"""
    razorpay_order_id: str
    user_id: str
    provider: str
    amount: Optional[int]  # в пайсах
    currency: str
    plan_id: str
    status: str  # pending, captured
    razorpay_payment_id: Optional[str]
    razorpay_signature: Optional[str]
    metadata: dict[str, Any]  # planName, planDescription
    created_at: datetime
    updated_at: Optional[datetime]


class _ApiModel(BaseModel):
    """Модель ответа API: поля в camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class OrderRecord(_ApiModel):
    """Созданный в Razorpay заказ"""
    id: str
    amount: int
    currency: str
    receipt: str
    status: str
    plan: str
    plan_name: str
    plan_description: str


class StepFailure(_ApiModel):
    """Ошибка одного из шагов записи в БД"""
    step: PersistenceStep
    error: str


class ReconciliationResult(_ApiModel):
    """Результат подтверждения платежа"""
    success: bool = True
    order_id: str
    payment_id: str
    plan: str
    plan_name: str
    amount: int
    currency: str
    user_id: str
    timestamp: datetime
    # None - шаг не выполнялся (БД не настроена или упала)
    payment_record_found: Optional[bool] = None
    persistence_degraded: bool = False
    failures: list[StepFailure] = Field(default_factory=list)
