"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./question_bank.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # 기동 시 기본 역할/권한/상태/전이 규칙을 적재합니다.
    SEED_REFERENCE_DATA: bool = True

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Review workflow
    REVIEW_DEFAULT_PRIORITY: int = 2  # 1: low, 2: medium, 3: high
    REVIEW_APPROVED_STATUS_NAME: str = "approved"
    REVIEW_CLOSED_STATUS_NAMES: List[str] = ["approved", "rejected"]
    # 리뷰 승인 시 문항 상태를 강제로 옮길 대상 상태
    PUBLISHED_STATUS_NAME: str = "published"

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
