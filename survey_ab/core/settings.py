from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Runtime configuration, read from the environment (or a local .env file)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "survey-ab"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Storage credentials are supplied at process start.
    # DATABASE_URL wins over the individual POSTGRES_* values when set.
    DATABASE_URL: Optional[str] = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "surveys"
    POSTGRES_PORT: int = 5432

    SURVEYS_DIR: Path = PACKAGE_DIR / "surveys"
    PUBLIC_DIR: Path = PACKAGE_DIR / "public"

    DEFAULT_LANGUAGE: str = "en"
    # Seconds; the sticky assignment cookie expires 900,000 ms after creation
    ASSIGNMENT_COOKIE_MAX_AGE: int = 900
    # Key for signing sticky assignment cookies; set a real secret in production
    COOKIE_SECRET: str = "change-me"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


config_settings = Settings()
