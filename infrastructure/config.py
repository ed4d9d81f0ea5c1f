"""Application settings, read from the environment"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    JWT_SECRET: str = "your-secret-key-keep-it-secret"
    JWT_ALGORITHM: str = "HS256"

    ACCESS_TOKEN_EXPIRATION_MILLIS: int = 30 * 60 * 1000
    REFRESH_TOKEN_EXPIRATION_MILLIS: int = 24 * 60 * 60 * 1000

    REFRESH_COOKIE_NAME: str = "refresh"

    LOG_LEVEL: str = "INFO"


settings = Settings()
