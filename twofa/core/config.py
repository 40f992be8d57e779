# twofa/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore")

    APP_NAME: str = "Mission Control"

    JWT_SECRET: str = Field(...)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # DATABASE_URL gana sobre DB_* (tests usan sqlite+aiosqlite)
    DATABASE_URL: str | None = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "twofa"
    DB_PASSWORD: str = ""
    DB_NAME: str = "twofa"
    DB_ECHO: bool = False
    DB_POOL_RECYCLE: int = 1800

    # primer admin: si está seteado, /auth/setup solo acepta este email
    ADMIN_EMAIL: str | None = None

    # --- TOTP ---
    TOTP_ISSUER: str = "Mission Control"
    TOTP_DIGITS: int = 6
    TOTP_INTERVAL: int = 30
    TOTP_DIGEST: str = "sha1"
    TOTP_VALID_WINDOW: int = 1
    TOTP_REENROLL_REQUIRES_PASSWORD: bool = True

    STORE_TIMEOUT_SECONDS: float = 5.0

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:3000"

    @field_validator("TOTP_DIGEST")
    @classmethod
    def _known_digest(cls, v: str) -> str:
        v = v.lower()
        if v not in ("sha1", "sha256", "sha512"):
            raise ValueError("TOTP_DIGEST must be sha1, sha256 or sha512")
        return v

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()  # type: ignore[call-arg]
