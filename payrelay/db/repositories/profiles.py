"""Репозиторий профилей: меняем только поле plan"""
import asyncpg

from payrelay.db.pool import affected_rows


class ProfileRepository:
    """Профили принадлежат внешней системе, здесь обновляется только тариф"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def update_plan(self, user_id: str, plan_id: str) -> int:
        """Обновляет тариф в профиле, возвращает количество обновленных строк"""
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                "UPDATE profiles SET plan = $1 WHERE id = $2",
                plan_id, user_id
            )
            return affected_rows(result)
