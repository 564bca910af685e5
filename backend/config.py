# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Literal, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

# What happens to products when their category is deleted
CategoryDeletePolicy = Literal["orphan", "cascade", "restrict"]


class Settings(BaseSettings):
    APP_NAME: str = "Catalog API"
    APP_VERSION: str = "1.0.0"

    DATABASE_URL: str = "sqlite:///./database_catalog.db"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    CATEGORY_DELETE_POLICY: CategoryDeletePolicy = "orphan"

    # Extra CORS origin for a deployed frontend
    FRONTEND_URL: Optional[str] = None

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"


settings = Settings()
