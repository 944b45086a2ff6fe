import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Загрузка переменных из .env
load_dotenv()


class Settings(BaseModel):
    project_name: str = "Amanpulo Reservations"
    database_url: str = "sqlite+aiosqlite:///./resort.db"

    # Auth
    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7

    # Booking rules
    booking_expiration_hours: int = 6
    booking_reference_prefix: str = "AMAN"

    # Email (SMTP)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    email_from: str = '"Amanpulo Resort" <noreply@amanpulo.com>'
    admin_notification_email: str = ""

    # CORS
    frontend_url: str = "http://localhost:5173"

    # Scheduler: 0 disables the periodic expiration sweep
    expiration_sweep_interval_minutes: int = 0

    # Rate limiting settings
    rate_limit_enabled: bool = True  # Killswitch for quick disable
    rate_limit_bookings: str = "20/minute"

    # Logging settings
    log_format: str = "console"  # Options: "console", "json"
    log_level: str = "INFO"
    log_slow_request_threshold_ms: int = 500  # Log timing only if duration > threshold


settings = Settings(
    project_name=os.environ.get("PROJECT_NAME", "Amanpulo Reservations"),
    database_url=os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./resort.db"),
    jwt_secret=os.environ.get("JWT_SECRET", "dev-secret-change-me"),
    jwt_expire_days=int(os.environ.get("JWT_EXPIRE_DAYS", "7")),
    booking_expiration_hours=int(os.environ.get("BOOKING_EXPIRATION_HOURS", "6")),
    booking_reference_prefix=os.environ.get("BOOKING_REFERENCE_PREFIX", "AMAN"),
    smtp_host=os.environ.get("SMTP_HOST", "smtp.gmail.com"),
    smtp_port=int(os.environ.get("SMTP_PORT", "587")),
    smtp_user=os.environ.get("SMTP_USER", ""),
    smtp_password=os.environ.get("SMTP_PASSWORD", ""),
    smtp_use_tls=os.environ.get("SMTP_USE_TLS", "true").lower() == "true",
    email_from=os.environ.get(
        "EMAIL_FROM", '"Amanpulo Resort" <noreply@amanpulo.com>'
    ),
    # Operator inbox defaults to the SMTP account itself
    admin_notification_email=os.environ.get(
        "ADMIN_NOTIFICATION_EMAIL", os.environ.get("SMTP_USER", "")
    ),
    frontend_url=os.environ.get("FRONTEND_URL", "http://localhost:5173"),
    expiration_sweep_interval_minutes=int(
        os.environ.get("EXPIRATION_SWEEP_INTERVAL_MINUTES", "0")
    ),
    rate_limit_enabled=os.environ.get("RATE_LIMIT_ENABLED", "true").lower() == "true",
    rate_limit_bookings=os.environ.get("RATE_LIMIT_BOOKINGS", "20/minute"),
    log_format=os.environ.get("LOG_FORMAT", "console"),
    log_level=os.environ.get("LOG_LEVEL", "INFO"),
    log_slow_request_threshold_ms=int(
        os.environ.get("LOG_SLOW_REQUEST_THRESHOLD_MS", "500")
    ),
)
