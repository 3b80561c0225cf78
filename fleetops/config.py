from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # ─── Application ───────────────────────────────────────────────────────────
    APP_NAME: str = "Fleet Operations"
    APP_ENV:  str = "development"
    APP_DEBUG: bool = True
    APP_HOST:  str = "0.0.0.0"
    APP_PORT:  int = 8000

    # ─── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL:          str
    DATABASE_POOL_SIZE:    int  = 10
    DATABASE_MAX_OVERFLOW: int  = 20
    DATABASE_POOL_TIMEOUT: int  = 30
    DATABASE_ECHO:         bool = False

    # ─── JWT ───────────────────────────────────────────────────────────────────
    SECRET_KEY:                  str
    ALGORITHM:                   str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # ─── Webhooks ──────────────────────────────────────────────────────────────
    # Empty string = notification disabled
    PICKUP_WEBHOOK_URL:      str   = ""
    INCIDENT_WEBHOOK_URL:    str   = ""
    MAINTENANCE_WEBHOOK_URL: str   = ""
    WEBHOOK_TIMEOUT_SECONDS: float = 5.0

    # ─── Maintenance alerts ────────────────────────────────────────────────────
    MAINTENANCE_ALERT_DAYS: int = 7       # overdue or due within N days
    MAINTENANCE_ALERT_KM:   int = 11000   # pre-pickup advisory window
    MAINTENANCE_NOTIFY_KM:  int = 2000    # post-return upcoming notification window

    # ─── CORS ──────────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    def get_cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    model_config = {"env_file": ".env.example", "case_sensitive": True, "extra": "ignore"}


settings = Settings()
