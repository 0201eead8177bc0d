"""Клиент для работы с Razorpay Orders API"""
import asyncio
import logging
from typing import Any, Optional

import aiohttp

from payrelay.errors import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to create payment order"


class RazorpayClient:
    """Клиент для создания заказов Razorpay"""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        api_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.key_id = key_id
        self.api_url = api_url.rstrip("/")
        self._auth = aiohttp.BasicAuth(key_id, key_secret)
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        """Закрывает HTTP сессию"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Создает заказ в Razorpay

        Args:
            amount: Сумма в минимальных единицах валюты
            currency: ISO код валюты
            receipt: Номер чека (не длиннее 40 символов)
            notes: Произвольные данные, сохраняются на стороне Razorpay

        Returns:
            Ответ Razorpay: id, amount, currency, receipt, status

        Raises:
            GatewayError: Razorpay вернул ошибку или недоступен
        """
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        }

        try:
            async with self._get_session().post(
                f"{self.api_url}/orders",
                json=payload,
                auth=self._auth,
                timeout=self._timeout
            ) as response:
                data = await response.json(content_type=None)
                if response.status >= 400:
                    message = _extract_error_message(data)
                    logger.error(f"Razorpay вернул ошибку {response.status}: {message} (receipt={receipt})")
                    raise GatewayError(message, status=response.status)
                if not isinstance(data, dict) or not data.get("id"):
                    logger.error(f"Razorpay вернул ответ без id заказа: status={response.status} (receipt={receipt})")
                    raise GatewayError(DEFAULT_ERROR_MESSAGE, status=response.status)
                return data
        except GatewayError:
            raise
        except asyncio.TimeoutError as e:
            logger.error(f"Таймаут запроса к Razorpay (receipt={receipt})")
            raise GatewayError("Payment gateway timed out") from e
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"Ошибка запроса к Razorpay (receipt={receipt}): {e}")
            raise GatewayError(DEFAULT_ERROR_MESSAGE) from e


def _extract_error_message(data: Any) -> str:
    """Достает описание ошибки из ответа Razorpay: {"error": {"description": ...}}"""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("description"):
            return str(error["description"])
    return DEFAULT_ERROR_MESSAGE
