"""Bearer 토큰을 검증해 현재 사용자와 요청 단위 Actor를 주입하는 FastAPI 의존성입니다."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from qbank.database import get_db
from qbank.models.user import User
from qbank.config import settings
from qbank.services.auth_service import ALGORITHM
from qbank.services.permission_service import build_actor
from qbank.utils.permissions import Actor

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise _unauthorized("Invalid or expired token") from exc


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    payload = decode_token(credentials.credentials)
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise _unauthorized("Invalid token payload")

    user = (
        db.query(User)
        .filter(User.user_id == int(subject), User.is_active == True)  # noqa: E712
        .first()
    )
    if not user:
        raise _unauthorized("User not found or inactive")
    return user


def get_current_actor(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Actor:
    # 역할은 요청마다 다시 읽는다. 회수된 역할이 토큰 수명 동안 남지 않는다.
    return build_actor(db, current_user)
