# lucy/config.py
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Lucy3000 API"
    ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Base de datos (SQLite local por defecto, la app de escritorio no necesita más)
    DATABASE_URL: str = "sqlite:///./lucy.db"

    # Seguridad
    SECRET_KEY: str = "lucy3000_secret_key_change_me_in_prod"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12  # 12 horas

    # Ventas
    SALE_NUMBER_PREFIX: str = "V"
    LOYALTY_POINTS_DIVISOR: int = Field(10, gt=0)  # 1 punto por cada 10 unidades monetarias
    # Qué hacer si el descuento supera el 100%: rechazar, limitar o dejar total negativo
    DISCOUNT_OVERFLOW_POLICY: Literal["reject", "clamp", "allow"] = "reject"

    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
