import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Load variables from .env
load_dotenv()


class Settings(BaseModel):
    database_url: str = "sqlite+aiosqlite:///./hotel_backoffice.db"
    database_echo: bool = False

    # Hotel-local time is used for audit log timestamps
    hotel_timezone: str = "Asia/Manila"

    # Booking logs
    booking_logs_limit: int = 500

    # Rate limiting settings
    rate_limit_enabled: bool = True  # Killswitch for quick disable
    rate_limit_export: str = "10/minute"  # CSV export is unbounded, keep it throttled

    # CORS (admin console runs on a separate origin)
    cors_origins: str = "http://localhost:5173"

    # Logging settings
    log_format: str = "console"  # Options: "console", "json"
    log_slow_request_threshold_ms: int = 500  # Log timing only if duration > threshold

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings(
    database_url=os.environ.get(
        "DATABASE_URL", "sqlite+aiosqlite:///./hotel_backoffice.db"
    ),
    database_echo=os.environ.get("DATABASE_ECHO", "false").lower() == "true",
    hotel_timezone=os.environ.get("HOTEL_TIMEZONE", "Asia/Manila"),
    booking_logs_limit=int(os.environ.get("BOOKING_LOGS_LIMIT", "500")),
    rate_limit_enabled=os.environ.get("RATE_LIMIT_ENABLED", "true").lower() == "true",
    rate_limit_export=os.environ.get("RATE_LIMIT_EXPORT", "10/minute"),
    cors_origins=os.environ.get("CORS_ORIGINS", "http://localhost:5173"),
    log_format=os.environ.get("LOG_FORMAT", "console"),
    log_slow_request_threshold_ms=int(
        os.environ.get("LOG_SLOW_REQUEST_THRESHOLD_MS", "500")
    ),
)
