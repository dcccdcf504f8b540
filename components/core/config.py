from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database settings
    DB_URL: Optional[str] = None  # Optional full DB URL
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "farm_lending"
    DB_ECHO: bool = False

    # Security settings
    SECRET_KEY: str = "change-me-in-env"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # API settings
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Ledger policy
    MIN_INVESTMENT: float = 1000
    DEFAULT_INTEREST_RATE: float = 12
    DEFAULT_RISK_LEVEL: str = "medium"
    DEFAULT_INVESTMENT_CAPACITY: float = 100000
    DEFAULT_PREFERRED_CROPS: List[str] = ["Wheat", "Rice", "Cotton"]
    DEFAULT_PREFERRED_REGIONS: List[str] = ["Punjab", "Haryana", "Maharashtra"]
    MARKETPLACE_LIMIT: int = 50
    TRANSACTIONS_LIMIT: int = 50
    RECENT_APPLICATIONS_LIMIT: int = 5
    MONTHLY_RETURNS_WINDOW_DAYS: int = 30

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        validate_default = True

    @property
    def async_db_url(self) -> str:
        """Get asynchronous database URL."""
        if self.DB_URL:
            return self.DB_URL
        return f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached Settings instance to avoid reloading .env file on every access
    """
    return Settings()


settings = get_settings()
