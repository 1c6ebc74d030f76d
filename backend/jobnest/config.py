from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote

from dotenv import load_dotenv


load_dotenv()


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    app_name: str = "JobNest"
    environment: str = os.getenv("ENV", "development")
    port: int = int(os.getenv("PORT", "5000"))
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./db/jobnest.db")
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_algorithm: str = "HS256"
    token_ttl_minutes: int = int(os.getenv("TOKEN_TTL_MINUTES", "60"))
    admin_token_ttl_minutes: int = int(os.getenv("ADMIN_TOKEN_TTL_MINUTES", str(60 * 24)))
    media_cloud_name: str = os.getenv("CLOUDINARY_CLOUD_NAME", "").strip()
    media_api_key: str = os.getenv("CLOUDINARY_API_KEY", "").strip()
    media_api_secret: str = os.getenv("CLOUDINARY_API_SECRET", "").strip()
    upload_timeout_seconds: float = float(os.getenv("UPLOAD_TIMEOUT_SECONDS", "30"))
    max_upload_size_mb: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "5"))
    upload_rate_limit: int = int(os.getenv("UPLOAD_RATE_LIMIT", "3"))
    upload_rate_window_minutes: int = int(os.getenv("UPLOAD_RATE_WINDOW_MINUTES", "10"))
    cors_origins: list[str] = field(
        default_factory=lambda: _csv(os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"))
    )
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str | None = os.getenv("LOG_FILE") or None

    def __post_init__(self) -> None:
        if not self.jwt_secret:
            self.jwt_secret = "jobnest-dev-secret"
            self._jwt_secret_defaulted = True
        else:
            self._jwt_secret_defaulted = False

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def missing_required(self) -> list[str]:
        missing: list[str] = []
        if self._jwt_secret_defaulted:
            missing.append("JWT_SECRET")
        if not self.media_cloud_name:
            missing.append("CLOUDINARY_CLOUD_NAME")
        if not self.media_api_key:
            missing.append("CLOUDINARY_API_KEY")
        if not self.media_api_secret:
            missing.append("CLOUDINARY_API_SECRET")
        return missing

    def ensure_directories(self) -> None:
        if not self.database_url.startswith("sqlite:///"):
            return
        raw_path = self.database_url.replace("sqlite:///", "", 1)
        if not raw_path or raw_path == ":memory:":
            return
        db_path = Path(unquote(raw_path))
        if not db_path.is_absolute():
            db_path = Path(".") / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
