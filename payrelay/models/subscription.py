from datetime import datetime
from typing import TypedDict, Optional


class SubscriptionRecord(TypedDict):
    """Запись подписки из базы данных"""
    user_id: str  # один активный период на пользователя
    plan_id: str
    provider: str
    status: str  # active
    razorpay_payment_id: Optional[str]
    current_period_start: datetime
    current_period_end: datetime
    updated_at: Optional[datetime]
