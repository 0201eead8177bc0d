import asyncpg
from typing import Optional
import logging

logger = logging.getLogger(__name__)


async def create_pool(
    database_url: str,
    password: Optional[str] = None,
    timeout: float = 10.0
) -> asyncpg.Pool:
    """Создает пул соединений с PostgreSQL"""
    pool = await asyncpg.create_pool(
        database_url,
        password=password,
        min_size=1,
        max_size=10,
        timeout=timeout,
        command_timeout=timeout
    )
    logger.info("✅ Подключение к базе данных установлено")
    return pool


async def close_pool(pool: Optional[asyncpg.Pool]) -> None:
    """Закрывает пул соединений"""
    if pool:
        await pool.close()
        logger.info("🔒 Соединение с базой данных закрыто")


def affected_rows(status: str) -> int:
    """Извлекает число строк из статуса команды: "UPDATE 1" -> 1"""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0
