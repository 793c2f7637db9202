# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "User Management API"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    JWT_SECRET: str = Field(...)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "usermgmt"
    DB_PASSWORD: str = "usermgmt"
    DB_NAME: str = "usermgmt"
    # si está seteada, pisa la URL armada con DB_* (tests usan sqlite+aiosqlite)
    DATABASE_URL: str | None = None

    # --- 2FA / TOTP ---
    TOTP_ISSUER: str = "UserManagement"
    TOTP_PERIOD: int = 30
    TOTP_DIGITS: int = Field(default=6, ge=6, le=8)
    TOTP_WINDOW: int = 1
    TOTP_SECRET_BYTES: int = Field(default=20, ge=20)
    BACKUP_CODE_COUNT: int = 10
    TWO_FACTOR_SETUP_TOKEN_MINUTES: int = 10

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")


settings = Settings()  # type: ignore[call-arg]
