from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: Union[str, List[str]] = "*"
    # Honour X-Forwarded-* headers when building share links behind a proxy
    TRUST_PROXY: bool = True

    # Storage
    STORAGE_DIR: str = "./uploads"
    PUBLIC_PREFIX: str = "/uploads"
    PUBLIC_DIR: str = "./public"
    VIEWER_PATH: str = "/view.html"

    # Upload limits
    MAX_FILES: int = 10
    MAX_FILE_BYTES: int = 5 * 1024 * 1024

    # QR rendering
    QR_BOX_SIZE: int = 10
    QR_BORDER: int = 4

    # Ops
    RATE_LIMIT_ENABLED: bool = True
    UPLOAD_RATE_LIMIT: str = "30/minute"
    METRICS_ENABLED: bool = False
    SENTRY_DSN: str = ""

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('PUBLIC_PREFIX', 'VIEWER_PATH')
    @classmethod
    def leading_slash(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("/"):
            v = "/" + v
        return v.rstrip("/") or "/"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
