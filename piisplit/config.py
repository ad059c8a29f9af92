from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./piisplit.db"
    JOIN_KEY_COLUMN: str = "join_key"
    MAX_UPLOAD_SIZE_MB: int = 50
    DEBUG: bool = False

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
