from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List

class Settings(BaseSettings):
    # Database settings
    supabase_url: str = ""
    supabase_service_key: str = ""

    # App settings
    app_env: str = "development"
    debug: bool = True
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # JWT settings
    jwt_secret_key: str = "your-secret-key"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 30

    # Habit settings
    # Status returned when an authenticated user touches a habit they don't own.
    # The API contract has always answered 401 here; set to 403 to opt into the stricter code.
    ownership_error_status: int = 401
    toggle_max_retries: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'

@lru_cache()
def get_settings():
    return Settings()
