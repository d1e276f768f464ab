import os
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DATABASE: str = os.getenv("MONGO_DATABASE", "swosh")
    MONGO_COLLECTION: str = os.getenv("MONGO_COLLECTION", "swosh")
    # "mongo" or "memory"
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "mongo")

    PHONE_REGION: str = "SE"
    MIN_AMOUNT: int = 1
    MAX_AMOUNT: int = 999999999999
    MAX_EXPIRE_AFTER_SECONDS: int = 365 * 24 * 60 * 60
    MAX_DESCRIPTION_LENGTH: int = 50
    ID_LENGTH: int = 6
    QR_SIZE: int = 256

    RATE_LIMIT: str = "60/minute"

    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")


setting = Settings()
