from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    LAUNCH_LIBRARY_URL: str = "https://ll.thespacedevs.com/2.2.0"
    USNO_URL: str = "https://aa.usno.navy.mil/api"
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    CACHE_TTL_SECONDS: int = 3600
    HTTP_TIMEOUT: float = 30
    LAUNCH_PAGE_LIMIT: int = 100
    EARLIEST_YEAR: int = 1957
    DEFAULT_YEAR: int = 2025
    MONTH_LABELS: List[str] = [
        "Jan", "Feb", "Mär", "Apr", "Mai", "Jun",
        "Jul", "Aug", "Sep", "Okt", "Nov", "Dez",
    ]
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("MONTH_LABELS")
    @classmethod
    def twelve_months(cls, value: List[str]) -> List[str]:
        if len(value) != 12:
            raise ValueError(f"MONTH_LABELS needs 12 entries, got {len(value)}")
        return value

settings = Settings()
