from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="loyaltyapi/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Loyalty API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./loyalty.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    # Security
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Timezone (행사 날짜 판단 기준)
    TIMEZONE: str = "Europe/Moscow"

    # Rewards
    VISIT_REWARD: int = 5  # 행사 등록 1회당 지급 코인
    VISIT_REWARD_EVERY: int = 5  # 방문 마일스톤 주기
    VISIT_MILESTONE_REWARD: int = 5  # 마일스톤 달성 시 수령 가능한 코인
    BINGO_REWARD: int = 100  # 빙고 1회 기본 보상

    # Codes
    TEST_CODES_ENABLED: bool = False  # 00000 / B0000 은 개발·테스트 환경에서만 켠다
    REGISTRATION_TEST_CODE: str = "00000"
    BINGO_TEST_CODE: str = "B0000"
    REGISTRATION_CODE_STYLE: str = "numeric"  # numeric | alphanumeric
    CODE_MAX_ATTEMPTS: int = 50

    # Transfers
    TRANSFER_TOKEN_TTL_MINUTES: int = 5

    # Telegram
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_ADMIN_CHAT_ID: str = ""
    TELEGRAM_WEBHOOK_SECRET: Optional[str] = None
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    MINI_APP_URL: str = ""


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
