from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "CAE Request Tracker"
    environment: str = "dev"
    log_level: str = "INFO"

    # ─────────── API ───────────
    api_prefix: str = "/api/v1"
    request_id_header: str = "X-Request-Id"

    # ─────────── DATABASE ───────────
    database_url: str

    # ─────────── JWT / AUTH ───────────
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_access_token_minutes: int = 1440  # 24 hours

    # ─────────── OBJECT STORAGE ───────────
    s3_endpoint_url: str = "http://127.0.0.1:9000"
    # browser-facing host for presigned URLs; empty = same as s3_endpoint_url
    s3_public_endpoint_url: str = ""
    s3_access_key: str = "minioadmin"
    s3_secret_key: str = "minioadmin"
    s3_region: str = "us-east-1"
    s3_bucket: str = "request-files"

    upload_url_expires_s: int = 600
    download_url_expires_s: int = 300
    max_upload_bytes: int = 50 * 1024 * 1024  # 50MB


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
