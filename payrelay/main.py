import asyncio
import logging
import sys
from typing import Optional

import asyncpg
from aiohttp import web

from payrelay.config import Config, mask_secret, setup_logging
from payrelay.clients.razorpay_client import RazorpayClient
from payrelay.db.pool import create_pool, close_pool
from payrelay.db.repositories.payments import PaymentRepository
from payrelay.db.repositories.profiles import ProfileRepository
from payrelay.db.repositories.subscriptions import SubscriptionRepository
from payrelay.errors import ConfigurationError
from payrelay.services.orders import OrderService
from payrelay.services.reconciliation import PaymentReconciler
from payrelay.web.routes import create_app

logger = logging.getLogger(__name__)


async def init_storage(config: Config) -> Optional[asyncpg.Pool]:
    """
    Подключается к БД, если она настроена

    Недоступная БД не останавливает сервер: заказы и проверка платежей
    работают, записи в БД пропускаются.
    """
    if not config.persistence_enabled:
        logger.warning("⚠️ DATABASE_URL не установлен, платежи будут оставаться pending в БД")
        return None

    try:
        return await create_pool(config.database_url, config.database_password, config.database_timeout)
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        logger.error(f"❌ Не удалось подключиться к базе данных, работаем без сохранения платежей: {e}")
        return None


async def main(config: Config) -> None:
    """Главная функция запуска сервера"""
    logger.info("🚀 Запуск платежного сервера...")

    # Инициализация базы данных (необязательна)
    pool = await init_storage(config)

    payments = PaymentRepository(pool) if pool else None
    subscriptions = SubscriptionRepository(pool) if pool else None
    profiles = ProfileRepository(pool) if pool else None

    # Инициализация клиента Razorpay
    gateway = RazorpayClient(
        key_id=config.razorpay_key_id,
        key_secret=config.razorpay_key_secret,
        api_url=config.razorpay_api_url,
        timeout=config.gateway_timeout
    )

    app = create_app(
        config,
        OrderService(gateway, payments),
        PaymentReconciler(config.razorpay_key_secret, payments, subscriptions, profiles)
    )

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, config.host, config.port)

    try:
        await site.start()
        logger.info(f"✅ Сервер запущен на порту {config.port}")
        logger.info(f"📊 Health check: http://localhost:{config.port}/api/health")
        await asyncio.Event().wait()
    finally:
        # Очистка ресурсов
        await runner.cleanup()
        await gateway.close()
        await close_pool(pool)
        logger.info("👋 Сервер остановлен")


def run() -> None:
    """Точка входа: проверка окружения и запуск"""
    config = Config.from_env()
    setup_logging(config.log_level)

    try:
        config.validate_required()
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        logger.error("Установите переменные окружения или добавьте их в .env файл")
        sys.exit(1)

    logger.info("✅ Переменные окружения проверены")
    logger.info(f"🔑 Razorpay Key ID: {mask_secret(config.razorpay_key_id)}")
    logger.info(f"🔐 Razorpay Secret: {mask_secret(config.razorpay_key_secret)}")

    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
