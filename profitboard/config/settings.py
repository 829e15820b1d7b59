from pydantic_settings import BaseSettings

from profitboard.models.enums import FingerprintMode


class Settings(BaseSettings):
    log_level: str = "INFO"
    cache_max_entries: int = 100
    fingerprint_mode: FingerprintMode = FingerprintMode.SUMMARY
    use_worker_thread: bool = True
    prev_year_overflow_days: int = 6
    cors_origins: list[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_prefix = "PROFITBOARD_"
