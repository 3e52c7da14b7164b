from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Remote Trip Planner API
    API_BASE_URL: str = "http://tta-api.runasp.net/api"
    API_TIMEOUT_SECONDS: float = 15.0

    # Session settings
    PIN_MAX_ATTEMPTS: int = 5
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Service settings
    SERVICE_NAME: str = "Trip Planner"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        validate_default = True

    @property
    def effective_log_level(self) -> str:
        """Get log level, forced to DEBUG in debug mode."""
        if self.DEBUG:
            return "DEBUG"
        return self.LOG_LEVEL.upper()


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached Settings instance to avoid reloading .env file on every access
    """
    return Settings()
