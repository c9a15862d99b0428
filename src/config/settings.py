from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    debug: bool = True
    cors_origins: list[str] = ["*"]

    ENVIRONMENT: str = "Production"

    # Remote wedding API
    api_base_url: str = "http://localhost:3001"
    api_token: str = ""  # guest session JWT, sent as a bearer token when set
    graphql_path: str = "/graphql"
    photo_upload_path: str = "/api/photos/upload"
    delivery_timeout: float = 15.0  # seconds per delivery attempt

    # Reachability probe
    probe_path: str = "/manifest.json"
    probe_timeout: float = 5.0
    periodic_probe_timeout: float = 3.0
    probe_interval: float = 30.0
    fast_connection_threshold_ms: float = 1000.0

    # Local store
    local_database_url: str = "sqlite+aiosqlite:///./wedding_offline.db"
    LOG_DB: bool = False

    # RSVP form
    meal_preferences_enabled: bool = True
    max_guests_per_rsvp: int = 10

    # Photo uploads
    max_photo_bytes: int = 10 * 1024 * 1024

    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.0
    SENTRY_PROFILES_SAMPLE_RATE: float = 0.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
