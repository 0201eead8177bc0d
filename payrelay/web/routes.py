"""HTTP сервер: создание заказов и подтверждение платежей Razorpay"""
import logging
from datetime import datetime, timezone
from typing import Any, Mapping
from urllib.parse import urlencode

from aiohttp import web

from payrelay.config import Config
from payrelay.constants import DEFAULT_USER_NAME, SUCCESS_PATH
from payrelay.errors import (
    ConfigurationError,
    GatewayError,
    InvalidPlanError,
    InvalidSignatureError,
    MissingParametersError,
    PaymentError,
)
from payrelay.services.orders import OrderService
from payrelay.services.plans import list_plans
from payrelay.services.reconciliation import PaymentReconciler

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", Config)
ORDER_SERVICE_KEY = web.AppKey("order_service", OrderService)
RECONCILER_KEY = web.AppKey("reconciler", PaymentReconciler)

NOT_CONFIGURED = "Payment service not configured"
MISSING_PARAMETERS = "Missing required parameters"
VERIFICATION_FAILED = "Payment verification failed"


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _field(data: Mapping[str, Any], name: str) -> str:
    """Значение поля как строка; None и отсутствие поля дают пустую строку"""
    value = data.get(name)
    if value is None:
        return ""
    return str(value).strip()


async def _read_payload(request: web.Request) -> Mapping[str, Any]:
    """Читает тело запроса: JSON или форма"""
    if request.content_type == "application/json":
        try:
            data = await request.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
    return await request.post()


async def handle_create_order(request: web.Request) -> web.Response:
    """
    POST /api/create-order

    Тело: plan, userId, userEmail (необязательно), userName (необязательно)
    """
    if not request.app[CONFIG_KEY].gateway_configured:
        return _error(NOT_CONFIGURED, 500)

    data = await _read_payload(request)
    plan_id = _field(data, "plan")
    user_id = _field(data, "userId")

    if not plan_id or not user_id:
        return _error(MISSING_PARAMETERS, 400)

    order_service = request.app[ORDER_SERVICE_KEY]
    try:
        order = await order_service.create_order(
            plan_id,
            user_id,
            user_email=_field(data, "userEmail"),
            user_name=_field(data, "userName") or DEFAULT_USER_NAME
        )
    except InvalidPlanError as e:
        logger.warning(f"Запрос заказа с неизвестным тарифом {e.plan_id!r}, user_id={user_id}")
        return _error(str(e), 400)
    except ConfigurationError:
        return _error(NOT_CONFIGURED, 500)
    except GatewayError as e:
        logger.error(f"Ошибка создания заказа: user_id={user_id}, plan={plan_id}: {e}")
        return _error(str(e), 500)

    # Заказ уже существует в Razorpay, ошибка записи не ломает ответ
    await order_service.record_pending(order, user_id)

    return web.json_response(order.to_json())


async def handle_verify_payment(request: web.Request) -> web.Response:
    """
    POST /api/verify-payment

    Тело: orderId, paymentId, signature, plan, userId
    """
    if not request.app[CONFIG_KEY].razorpay_key_secret:
        return _error(NOT_CONFIGURED, 500)

    data = await _read_payload(request)
    reconciler = request.app[RECONCILER_KEY]

    try:
        result = await reconciler.reconcile(
            order_id=_field(data, "orderId"),
            payment_id=_field(data, "paymentId"),
            signature=_field(data, "signature"),
            plan_id=_field(data, "plan"),
            user_id=_field(data, "userId")
        )
    except MissingParametersError:
        return _error(MISSING_PARAMETERS, 400)
    except (InvalidSignatureError, InvalidPlanError):
        # Детали (тариф, подпись) только в логах reconciler
        return _error(VERIFICATION_FAILED, 400)

    return web.json_response({"success": True, "result": result.to_json()})


async def handle_success_callback(request: web.Request) -> web.Response:
    """
    POST /success - callback_url Razorpay (redirect: true)

    Поля берутся из формы, при отсутствии - из query string.
    После обработки всегда редирект на страницу успеха.
    """
    form = await request.post()

    def field(name: str) -> str:
        return _field(form, name) or _field(request.query, name)

    order_id = field("razorpay_order_id")
    payment_id = field("razorpay_payment_id")
    signature = field("razorpay_signature")
    plan_id = field("plan")
    user_id = field("userId")

    logger.info(f"Получен callback от Razorpay: order_id={order_id}, payment_id={payment_id}, user_id={user_id}")

    try:
        await request.app[RECONCILER_KEY].reconcile(order_id, payment_id, signature, plan_id, user_id)
    except InvalidSignatureError:
        logger.error(f"Callback с неверной подписью: order_id={order_id}, payment_id={payment_id}")
    except PaymentError as e:
        logger.error(f"Ошибка обработки callback: order_id={order_id}, user_id={user_id}: {e}")

    query = urlencode({
        "paymentId": payment_id,
        "orderId": order_id,
        "signature": signature,
        "plan": plan_id,
    })
    raise web.HTTPFound(f"{SUCCESS_PATH}?{query}")


async def handle_success_page(request: web.Request) -> web.Response:
    """GET /success - страница после оплаты"""
    payment_id = request.query.get("paymentId", "unknown")
    return web.Response(
        text=f"Payment received. Payment ID: {payment_id}",
        content_type="text/plain"
    )


async def handle_plans(request: web.Request) -> web.Response:
    """GET /api/plans"""
    return web.json_response([plan.model_dump() for plan in list_plans()])


async def handle_health(request: web.Request) -> web.Response:
    """GET /api/health"""
    return web.json_response({
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat()
    })


def create_app(
    config: Config,
    order_service: OrderService,
    reconciler: PaymentReconciler
) -> web.Application:
    """Создает aiohttp приложение"""
    app = web.Application()
    app[CONFIG_KEY] = config
    app[ORDER_SERVICE_KEY] = order_service
    app[RECONCILER_KEY] = reconciler

    app.router.add_post("/api/create-order", handle_create_order)
    app.router.add_post("/api/verify-payment", handle_verify_payment)
    app.router.add_post(SUCCESS_PATH, handle_success_callback)
    app.router.add_get(SUCCESS_PATH, handle_success_page)
    app.router.add_get("/api/plans", handle_plans)
    app.router.add_get("/api/health", handle_health)

    return app
