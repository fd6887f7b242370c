from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict # type: ignore
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    app_name: str = "Advocate Search API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database Settings (SQLite)
    database_path: str = "advocates.db"

    # CORS Settings
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Client Settings
    api_base_url: str = "http://localhost:8000"
    search_debounce_ms: int = 500
    fetch_timeout_seconds: float = 10.0

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
