import os
import secrets
from typing import Dict, Any, Optional, List
from pydantic_settings import BaseSettings
from pydantic import validator
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "Hotel Back Office"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "true").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SECRET_KEY: str = os.getenv("SECRET_KEY", secrets.token_urlsafe(32))

    # Server Settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    API_PREFIX: str = os.getenv("API_PREFIX", "/api/v1")
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

    # Database Settings (POSTGRES_* first, the URL validator reads them)
    POSTGRES_USER: Optional[str] = os.getenv("POSTGRES_USER")
    POSTGRES_PASSWORD: Optional[str] = os.getenv("POSTGRES_PASSWORD")
    POSTGRES_SERVER: Optional[str] = os.getenv("POSTGRES_SERVER")
    POSTGRES_PORT: Optional[str] = os.getenv("POSTGRES_PORT")
    POSTGRES_DB: Optional[str] = os.getenv("POSTGRES_DB")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///backoffice.db")
    DB_ECHO_LOG: bool = os.getenv("DB_ECHO_LOG", "false").lower() == "true"

    # JWT Settings
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "720"))

    # CORS Settings (list values are read from the environment as JSON arrays)
    CORS_ALLOW_ORIGINS: List[str] = ["http://localhost:3000"]
    CORS_ALLOW_CREDENTIALS: bool = os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"
    CORS_ALLOW_METHODS: List[str] = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    # Logging
    LOG_FILE: str = os.getenv("LOG_FILE", "./logs/app.log")

    # Blob storage for hotel logos
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "./uploads")
    MAX_LOGO_BYTES: int = int(os.getenv("MAX_LOGO_BYTES", str(2 * 1024 * 1024)))

    # Billing
    TAX_RATE: float = float(os.getenv("TAX_RATE", "0.18"))
    BILL_NUMBER_PREFIX: str = os.getenv("BILL_NUMBER_PREFIX", "BILL")
    DEFAULT_CUSTOMER_NAME: str = os.getenv("DEFAULT_CUSTOMER_NAME", "Walk-in Customer")
    DEFAULT_PAYMENT_METHOD: str = os.getenv("DEFAULT_PAYMENT_METHOD", "cash")
    DEFAULT_PAYMENT_STATUS: str = os.getenv("DEFAULT_PAYMENT_STATUS", "paid")
    # Write the bill and its bill_items rows in one transaction
    BILL_ITEMS_ATOMIC: bool = os.getenv("BILL_ITEMS_ATOMIC", "false").lower() == "true"
    RECENT_BILLS_LIMIT: int = int(os.getenv("RECENT_BILLS_LIMIT", "5"))

    # Attendance
    ATTENDANCE_LATE_WEIGHT: float = float(os.getenv("ATTENDANCE_LATE_WEIGHT", "0.8"))
    ATTENDANCE_HALF_DAY_WEIGHT: float = float(os.getenv("ATTENDANCE_HALF_DAY_WEIGHT", "0.5"))
    TOP_PERFORMERS_LIMIT: int = int(os.getenv("TOP_PERFORMERS_LIMIT", "5"))

    # Construct PostgreSQL URL if individual components are provided
    @validator("DATABASE_URL", pre=True)
    def assemble_postgres_url(cls, v: Optional[str], values: Dict[str, Any]) -> str:
        if v and not v.startswith("sqlite"):
            return v

        if all(values.get(key) for key in ["POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_SERVER", "POSTGRES_DB"]):
            port = values.get("POSTGRES_PORT") or "5432"
            return f"postgresql://{values['POSTGRES_USER']}:{values['POSTGRES_PASSWORD']}@{values['POSTGRES_SERVER']}:{port}/{values['POSTGRES_DB']}"
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()

# Create directory structure
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
