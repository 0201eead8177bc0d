import hashlib
import hmac
import logging
import secrets
from typing import Optional

logger = logging.getLogger(__name__)

SIGNATURE_DELIMITER = "|"


def compute_payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """
    Считает подпись платежа Razorpay

    Формат: hex(HMAC-SHA256(secret, "order_id|payment_id")).
    Порядок полей и разделитель задает Razorpay, менять нельзя.

    Args:
        order_id: ID заказа в Razorpay
        payment_id: ID платежа в Razorpay
        secret: Key Secret аккаунта Razorpay

    Returns:
        Подпись в hex формате (64 символа)
    """
    body = f"{order_id}{SIGNATURE_DELIMITER}{payment_id}"
    return hmac.new(
        secret.encode('utf-8'),
        body.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()


def verify_payment_signature(
    order_id: str,
    payment_id: str,
    signature: Optional[str],
    secret: Optional[str]
) -> bool:
    """
    Проверяет подпись платежа с использованием защищенного сравнения

    Никогда не бросает исключений: при отсутствии секрета или любой
    ошибке возвращает False.

    Args:
        order_id: ID заказа
        payment_id: ID платежа
        signature: Подпись из callback
        secret: Key Secret аккаунта Razorpay

    Returns:
        True если подпись верна
    """
    if not secret:
        logger.error("Razorpay secret key не настроен, подпись не может быть проверена")
        return False

    if not signature:
        return False

    try:
        expected_signature = compute_payment_signature(order_id, payment_id, secret)
        return secrets.compare_digest(
            expected_signature.encode('utf-8'),
            str(signature).encode('utf-8')
        )
    except Exception as e:
        logger.error(f"Ошибка проверки подписи платежа: {e}")
        return False
