"""Общие фикстуры: фейковые репозитории и шлюз вместо asyncpg и Razorpay."""
from datetime import datetime, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from payrelay.config import Config
from payrelay.constants import PAYMENT_STATUS_CAPTURED, PAYMENT_STATUS_PENDING, SUBSCRIPTION_STATUS_ACTIVE
from payrelay.errors import GatewayError
from payrelay.services.orders import OrderService
from payrelay.services.reconciliation import PaymentReconciler
from payrelay.utils.crypto import compute_payment_signature

SECRET = "test_secret_key"
KEY_ID = "rzp_test_1234567890"
FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class StoreUnavailable(Exception):
    """Имитация недоступной БД"""


class FakePaymentRepository:
    def __init__(self):
        self.rows: dict[tuple[str, str], dict[str, Any]] = {}
        self.error: Optional[Exception] = None
        self.calls = 0

    async def create_pending(self, order_id, user_id, amount, currency, plan_id, metadata, provider="razorpay"):
        self.calls += 1
        if self.error:
            raise self.error
        self.rows[(order_id, user_id)] = {
            "razorpay_order_id": order_id,
            "user_id": user_id,
            "provider": provider,
            "amount": amount,
            "currency": currency,
            "plan_id": plan_id,
            "status": PAYMENT_STATUS_PENDING,
            "razorpay_payment_id": None,
            "razorpay_signature": None,
            "metadata": metadata,
            "created_at": FIXED_NOW,
            "updated_at": None,
        }

    async def mark_captured(self, order_id, user_id, payment_id, signature, updated_at):
        self.calls += 1
        if self.error:
            raise self.error
        row = self.rows.get((order_id, user_id))
        if row is None:
            return 0
        row.update(
            razorpay_payment_id=payment_id,
            razorpay_signature=signature,
            status=PAYMENT_STATUS_CAPTURED,
            updated_at=updated_at,
        )
        return 1

    async def get_payment(self, order_id, user_id):
        return self.rows.get((order_id, user_id))


class FakeSubscriptionRepository:
    def __init__(self):
        self.rows: dict[str, dict[str, Any]] = {}
        self.error: Optional[Exception] = None
        self.calls = 0

    async def upsert_active(self, user_id, plan_id, payment_id, period_start, period_end, provider="razorpay"):
        self.calls += 1
        if self.error:
            raise self.error
        self.rows[user_id] = {
            "user_id": user_id,
            "plan_id": plan_id,
            "provider": provider,
            "status": SUBSCRIPTION_STATUS_ACTIVE,
            "razorpay_payment_id": payment_id,
            "current_period_start": period_start,
            "current_period_end": period_end,
            "updated_at": period_start,
        }

    async def get_by_user_id(self, user_id):
        return self.rows.get(user_id)


class FakeProfileRepository:
    def __init__(self):
        self.rows: dict[str, dict[str, Any]] = {}
        self.error: Optional[Exception] = None
        self.calls = 0

    async def update_plan(self, user_id, plan_id):
        self.calls += 1
        if self.error:
            raise self.error
        if user_id not in self.rows:
            return 0
        self.rows[user_id]["plan"] = plan_id
        return 1


class FakeGateway:
    def __init__(self):
        self.requests: list[dict[str, Any]] = []
        self.error: Optional[GatewayError] = None

    async def create_order(self, amount, currency, receipt, notes):
        self.requests.append({"amount": amount, "currency": currency, "receipt": receipt, "notes": notes})
        if self.error:
            raise self.error
        return {
            "id": f"order_{len(self.requests):04d}",
            "entity": "order",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
        }

    async def close(self):
        pass


def sign(order_id: str, payment_id: str, secret: str = SECRET) -> str:
    return compute_payment_signature(order_id, payment_id, secret)


def make_pool(conn: AsyncMock) -> MagicMock:
    """asyncpg pool: pool.acquire() как async context manager"""
    acquire = MagicMock()
    acquire.__aenter__ = AsyncMock(return_value=conn)
    acquire.__aexit__ = AsyncMock(return_value=False)
    pool = MagicMock()
    pool.acquire.return_value = acquire
    return pool


@pytest.fixture
def config() -> Config:
    return Config(razorpay_key_id=KEY_ID, razorpay_key_secret=SECRET, database_url="postgresql://localhost/test")


@pytest.fixture
def payments() -> FakePaymentRepository:
    return FakePaymentRepository()


@pytest.fixture
def subscriptions() -> FakeSubscriptionRepository:
    return FakeSubscriptionRepository()


@pytest.fixture
def profiles() -> FakeProfileRepository:
    repo = FakeProfileRepository()
    repo.rows["u1"] = {"id": "u1", "plan": "free"}
    return repo


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def order_service(gateway, payments) -> OrderService:
    return OrderService(gateway, payments)


@pytest.fixture
def reconciler(payments, subscriptions, profiles) -> PaymentReconciler:
    return PaymentReconciler(SECRET, payments, subscriptions, profiles, clock=lambda: FIXED_NOW)
