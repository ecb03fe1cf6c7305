from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# Ensure env file is loaded before Settings() reads environment variables
from course_catalog.core.env import load_env
load_env()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=None,  # we load via course_catalog.core.env (ENV_FILE)
        extra="ignore",
        case_sensitive=True,
    )

    APP_NAME: str = "Course Catalog"
    DATABASE_URL: str = "sqlite:///./courses.db"

    HOST: str = "127.0.0.1"
    PORT: int = 3000

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    SQL_ECHO: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
