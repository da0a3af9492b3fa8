from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Slotbook API"
    # Comma-separated origins for CORS. If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    # Shared with the identity provider that issues bearer tokens
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    # Upper bound on waiting for another admission on the same resource
    RESOURCE_LOCK_TIMEOUT_SECONDS: float = 5.0

    # Schedule grid defaults
    GRID_START_HOUR: int = 8
    GRID_END_HOUR: int = 22
    GRID_DAYS: int = 5
    GRID_UNIT_MINUTES: int = 60

    SEED_ON_START: bool = True


settings = Settings()
