# config.py
"""
Application configuration.

Values come from environment variables (a local .env file is loaded first).
Import the shared ``settings`` instance rather than reading os.environ directly.
"""
import os
from typing import List
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
     raw = os.getenv(name)
     if raw is None:
          return default
     return raw.strip().lower() in {"1", "true", "yes", "on"}


def _build_database_url() -> str:
     url = os.getenv("DATABASE_URL")
     if url:
          return url
     user = quote_plus(os.getenv("DB_USER", "root"))
     password = quote_plus(os.getenv("DB_PASSWORD", ""))
     host = os.getenv("DB_HOST", "localhost")
     port = os.getenv("DB_PORT", "3306")
     name = os.getenv("DB_NAME", "manpower_recruitment_db")
     return f"mysql+pymysql://{user}:{password}@{host}:{port}/{name}?charset=utf8mb4"


class Settings:
     # Database
     DATABASE_URL: str = _build_database_url()
     SQL_ECHO: bool = _env_bool("SQL_ECHO", False)
     DB_AUTO_INIT: bool = _env_bool("DB_AUTO_INIT", True)

     # JWT
     JWT_SECRET: str = os.getenv("JWT_SECRET", "your-super-secret-key")
     JWT_ALGORITHM: str = "HS256"
     ACCESS_TOKEN_EXPIRE_HOURS: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24"))

     # SSLCommerz
     SSL_STORE_ID: str = os.getenv("SSL_STORE_ID", "testbox")
     SSL_STORE_PASSWORD: str = os.getenv("SSL_STORE_PASSWORD", "qwerty")
     SSL_IS_SANDBOX: bool = _env_bool("SSL_IS_SANDBOX", True)
     SSL_TIMEOUT_SECONDS: float = float(os.getenv("SSL_TIMEOUT_SECONDS", "30"))
     SSL_VALIDATE_PAYMENTS: bool = _env_bool("SSL_VALIDATE_PAYMENTS", False)

     # Public base URL used to build gateway callback and redirect URLs.
     # Empty means "derive from the incoming request".
     APP_URL: str = os.getenv("APP_URL", "")

     # Overpayment policy: when False, a payment larger than the current
     # due amount is rejected.
     ALLOW_OVERPAYMENT: bool = _env_bool("ALLOW_OVERPAYMENT", True)

     # HTTP
     CORS_ORIGINS: List[str] = [o for o in os.getenv("CORS_ORIGINS", "*").split(",") if o]
     UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
     MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
     LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

     # Bootstrap super admin (created by seed_defaults when missing)
     DEFAULT_ADMIN_EMAIL: str = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@example.com")
     DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")

     @property
     def ssl_api_url(self) -> str:
          host = "sandbox.sslcommerz.com" if self.SSL_IS_SANDBOX else "securepay.sslcommerz.com"
          return f"https://{host}/gwprocess/v4/api.php"

     @property
     def ssl_validation_url(self) -> str:
          host = "sandbox.sslcommerz.com" if self.SSL_IS_SANDBOX else "securepay.sslcommerz.com"
          return f"https://{host}/validator/api/validationserverAPI.php"


settings = Settings()
