import os
import logging
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

from payrelay.errors import ConfigurationError

# Загружаем переменные из .env файла (для локального запуска)
load_dotenv()

REQUIRED_ENV_VARS = ("RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET")


class Config(BaseModel):
    """Конфигурация сервиса с валидацией"""

    # Razorpay настройки
    razorpay_key_id: Optional[str] = Field(default=None, description="Razorpay Key ID")
    razorpay_key_secret: Optional[str] = Field(default=None, description="Razorpay Key Secret (для подписи)")
    razorpay_api_url: str = Field(default="https://api.razorpay.com/v1", description="Razorpay REST API base URL")

    # База данных (необязательна: без нее платежи не сохраняются)
    database_url: Optional[str] = Field(default=None, description="PostgreSQL connection URL")
    database_password: Optional[str] = Field(default=None, description="Service credential for the database")

    host: str = Field(default="0.0.0.0", description="HTTP bind host")
    port: int = Field(default=3000, description="HTTP port")
    gateway_timeout: float = Field(default=10.0, gt=0, description="Timeout for gateway calls, seconds")
    database_timeout: float = Field(default=10.0, gt=0, description="Timeout for database calls, seconds")

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('razorpay_key_id', 'razorpay_key_secret', 'database_url', 'database_password', mode='before')
    @classmethod
    def empty_to_none(cls, v):
        """Пустые строки из окружения считаем отсутствующими значениями"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def gateway_configured(self) -> bool:
        return bool(self.razorpay_key_id and self.razorpay_key_secret)

    @property
    def persistence_enabled(self) -> bool:
        return bool(self.database_url)

    def validate_required(self) -> None:
        """Проверяет обязательные параметры, бросает ConfigurationError"""
        missing = []
        if not self.razorpay_key_id:
            missing.append("RAZORPAY_KEY_ID")
        if not self.razorpay_key_secret:
            missing.append("RAZORPAY_KEY_SECRET")

        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

    @classmethod
    def from_env(cls) -> "Config":
        """Создает конфиг из переменных окружения с валидацией"""
        return cls(
            razorpay_key_id=os.getenv("RAZORPAY_KEY_ID"),
            razorpay_key_secret=os.getenv("RAZORPAY_KEY_SECRET"),
            razorpay_api_url=os.getenv("RAZORPAY_API_URL", "https://api.razorpay.com/v1"),
            database_url=os.getenv("DATABASE_URL"),
            database_password=os.getenv("DATABASE_PASSWORD"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            gateway_timeout=float(os.getenv("GATEWAY_TIMEOUT", "10")),
            database_timeout=float(os.getenv("DATABASE_TIMEOUT", "10")),
            log_level=os.getenv("LOG_LEVEL", "INFO")
        )


def mask_secret(value: Optional[str], visible: int = 8) -> str:
    """Оставляет в логах только префикс секрета"""
    if not value:
        return "<not set>"
    return f"{value[:visible]}..."


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Настраивает логирование для приложения"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(__name__)
