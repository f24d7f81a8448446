import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./tenancy.db")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS", "http://localhost:8080,http://127.0.0.1:8002")

    DEFAULT_OWNER_ID: str | None = os.getenv("DEFAULT_OWNER_ID")
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "INR")
    DEFAULT_PAYMENT_METHOD: str = "Bank Transfer"

    # Durable side-effect queue
    OUTBOX_MAX_ATTEMPTS: int = int(os.getenv("OUTBOX_MAX_ATTEMPTS", 5))
    # seconds between background retry passes in run_services.py; 0 disables
    OUTBOX_RETRY_INTERVAL_SECONDS: int = int(
        os.getenv("OUTBOX_RETRY_INTERVAL_SECONDS", 60))

    # Room grid synthesized for properties without floor rows
    FALLBACK_TOTAL_FLOORS: int = int(os.getenv("FALLBACK_TOTAL_FLOORS", 3))
    FALLBACK_ROOMS_PER_FLOOR: int = int(
        os.getenv("FALLBACK_ROOMS_PER_FLOOR", 10))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()

TENANCY_DATABASE_URL = settings.DATABASE_URL
