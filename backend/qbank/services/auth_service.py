"""Auth Service 도메인 서비스 레이어입니다. 이메일 기반 모의 SSO 로그인과 액세스 토큰 발급을 담당합니다."""

import logging
from datetime import datetime, timedelta
from jose import jwt
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from qbank.models.user import User
from qbank.config import settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_access_token(user_id: int) -> str:
    issued_at = datetime.utcnow()
    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def mock_sso_login(db: Session, email: str) -> User:
    normalized = email.strip().lower()
    user = (
        db.query(User)
        .filter(User.email == normalized, User.is_active == True)  # noqa: E712
        .first()
    )
    if not user:
        logger.warning("[auth] login rejected for %s", normalized)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"'{email}'에 해당하는 활성 사용자를 찾을 수 없습니다.",
        )
    return user
