from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # DB
    DATABASE_URL: str = "sqlite:///./database.db"

    # Security / JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"

    # Pricing engine limits
    PREVIEW_LIMIT: int = 50
    PRICE_HISTORY_LIMIT: int = 50
    RECENT_BULK_UPDATES_LIMIT: int = 10

    # 0 disables the in-process sale reconciler
    SALE_RECONCILE_INTERVAL_SECONDS: int = 0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
