from datetime import timedelta

PROVIDER = "razorpay"

# Длительность подписки после успешной оплаты
SUBSCRIPTION_PERIOD = timedelta(days=30)

# Статусы
PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_CAPTURED = "captured"
SUBSCRIPTION_STATUS_ACTIVE = "active"

# Лимиты
RECEIPT_MAX_LENGTH = 40  # Razorpay отклоняет receipt длиннее 40 символов
RECEIPT_PREFIX = "rcpt"
RECEIPT_USER_ID_LENGTH = 10

DEFAULT_USER_NAME = "Ace User"
SUCCESS_PATH = "/success"
