"""Roles 기능 API 라우터입니다. 역할/권한 정의 관리를 서비스 레이어로 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from qbank.database import get_db
from qbank.schemas.role import PermissionCreate, PermissionOut, RoleCreate, RoleGrantRequest, RoleOut, RoleUpdate
from qbank.services import role_service
from qbank.middleware.auth_middleware import get_current_actor
from qbank.utils.permissions import Actor

router = APIRouter(tags=["roles"])


@router.get("/api/roles", response_model=List[RoleOut])
def list_roles(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    roles = role_service.list_roles(db, actor, include_inactive=include_inactive)
    return [role_service.role_to_response(role) for role in roles]


@router.post("/api/roles", response_model=RoleOut, status_code=201)
def create_role(data: RoleCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return role_service.role_to_response(role_service.create_role(db, data, actor))


@router.put("/api/roles/{role_id}", response_model=RoleOut)
def update_role(
    role_id: int,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return role_service.role_to_response(role_service.update_role(db, role_id, data, actor))


@router.post("/api/roles/{role_id}/permissions", response_model=RoleOut)
def grant_permission(
    role_id: int,
    data: RoleGrantRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    role = role_service.grant_permission(db, role_id, data.permission_name, actor)
    return role_service.role_to_response(role)


@router.delete("/api/roles/{role_id}/permissions/{permission_name}", response_model=RoleOut)
def revoke_permission(
    role_id: int,
    permission_name: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    role = role_service.revoke_permission(db, role_id, permission_name, actor)
    return role_service.role_to_response(role)


@router.get("/api/permissions", response_model=List[PermissionOut])
def list_permissions(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return role_service.list_permissions(db, actor)


@router.post("/api/permissions", response_model=PermissionOut, status_code=201)
def create_permission(data: PermissionCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return role_service.create_permission(db, data, actor)
