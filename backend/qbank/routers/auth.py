"""Auth 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from qbank.database import get_db
from qbank.schemas.user import ActorOut, LoginRequest, TokenResponse, UserOut
from qbank.services.auth_service import create_access_token, mock_sso_login
from qbank.services.permission_service import resolve_permissions
from qbank.middleware.auth_middleware import get_current_actor, get_current_user
from qbank.models.user import User
from qbank.utils.permissions import ALL_PERMISSIONS, Actor

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = mock_sso_login(db, request.email)
    token = create_access_token(user.user_id)
    return TokenResponse(access_token=token, user=UserOut.model_validate(user))


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    return {"message": "로그아웃 되었습니다."}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/me/permissions", response_model=ActorOut)
def my_permissions(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    held = resolve_permissions(db, actor)
    names = ALL_PERMISSIONS if held.universal else held
    return ActorOut(
        user_id=actor.user_id,
        roles=list(actor.roles),
        is_system_admin=actor.is_system_admin,
        permissions=sorted(names),
    )
