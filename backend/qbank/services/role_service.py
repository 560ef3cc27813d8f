"""Role Service 도메인 서비스 레이어입니다. 역할/권한 정의와 역할-권한 연결을 관리합니다.

모든 변경은 커밋 직후 참조 데이터 캐시를 무효화합니다.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from qbank.database import transaction
from qbank.models.role import Permission, Role, RolePermission
from qbank.schemas.role import PermissionCreate, RoleCreate, RoleUpdate
from qbank.services.permission_service import require_permission
from qbank.services.reference_cache import reference_cache
from qbank.utils.errors import ConflictError, NotFoundError, ValidationError
from qbank.utils.permissions import ROLE_MANAGE, ROLE_VIEW, Actor, RoleKind, default_permissions_for

logger = logging.getLogger(__name__)


def role_to_response(role: Role) -> Dict[str, Any]:
    return {
        "role_id": role.role_id,
        "role_name": role.role_name,
        "role_kind": role.role_kind,
        "description": role.description,
        "is_active": bool(role.is_active),
        "permissions": sorted(link.permission.permission_name for link in role.permission_links),
    }


def get_role(db: Session, role_id: int) -> Role:
    role = db.query(Role).filter(Role.role_id == role_id).first()
    if not role:
        raise NotFoundError("역할을 찾을 수 없습니다.", role_id=role_id)
    return role


def _get_permission_by_name(db: Session, permission_name: str) -> Permission:
    permission = db.query(Permission).filter(Permission.permission_name == permission_name).first()
    if not permission:
        raise NotFoundError("권한을 찾을 수 없습니다.", permission_name=permission_name)
    return permission


def list_roles(db: Session, actor: Actor, include_inactive: bool = False) -> List[Role]:
    require_permission(db, actor, [ROLE_VIEW, ROLE_MANAGE])
    query = db.query(Role)
    if not include_inactive:
        query = query.filter(Role.is_active == True)  # noqa: E712
    return query.order_by(Role.role_id).all()


def create_role(db: Session, data: RoleCreate, actor: Actor) -> Role:
    require_permission(db, actor, ROLE_MANAGE)
    name = data.role_name.strip()
    duplicate = db.query(Role).filter(Role.role_name.ilike(name)).first()
    if duplicate:
        raise ConflictError("이미 존재하는 역할명입니다.", role_name=name)

    kind = data.role_kind or RoleKind.from_role_name(name)
    permission_names = data.permission_names
    if permission_names is None:
        permission_names = list(default_permissions_for(kind))
    permissions = [_get_permission_by_name(db, permission_name) for permission_name in dict.fromkeys(permission_names)]

    with transaction(db):
        role = Role(role_name=name, role_kind=kind.value, description=data.description)
        db.add(role)
        db.flush()
        for permission in permissions:
            db.add(RolePermission(role_id=role.role_id, permission_id=permission.permission_id))
    reference_cache.invalidate()
    db.refresh(role)
    logger.info("[role] created role=%s kind=%s by user=%s", name, kind.value, actor.user_id)
    return role


def update_role(db: Session, role_id: int, data: RoleUpdate, actor: Actor) -> Role:
    require_permission(db, actor, ROLE_MANAGE)
    role = get_role(db, role_id)
    payload = data.model_dump(exclude_none=True)
    if payload.get("is_active") is False and role.role_kind == RoleKind.ADMIN.value:
        raise ValidationError("시스템 관리자 역할은 비활성화할 수 없습니다.", role_id=role_id)
    with transaction(db):
        for k, v in payload.items():
            setattr(role, k, v)
    reference_cache.invalidate()
    db.refresh(role)
    return role


def list_permissions(db: Session, actor: Actor) -> List[Permission]:
    require_permission(db, actor, [ROLE_VIEW, ROLE_MANAGE])
    return db.query(Permission).order_by(Permission.permission_name).all()


def create_permission(db: Session, data: PermissionCreate, actor: Actor) -> Permission:
    require_permission(db, actor, ROLE_MANAGE)
    if db.query(Permission).filter(Permission.permission_name == data.permission_name).first():
        raise ConflictError("이미 존재하는 권한입니다.", permission_name=data.permission_name)
    with transaction(db):
        permission = Permission(permission_name=data.permission_name, description=data.description)
        db.add(permission)
    reference_cache.invalidate()
    db.refresh(permission)
    return permission


def grant_permission(db: Session, role_id: int, permission_name: str, actor: Actor) -> Role:
    require_permission(db, actor, ROLE_MANAGE)
    role = get_role(db, role_id)
    permission = _get_permission_by_name(db, permission_name)
    exists = (
        db.query(RolePermission)
        .filter(RolePermission.role_id == role_id, RolePermission.permission_id == permission.permission_id)
        .first()
    )
    if not exists:
        with transaction(db):
            db.add(RolePermission(role_id=role_id, permission_id=permission.permission_id))
        reference_cache.invalidate()
        logger.info("[role] granted %s to role=%s", permission_name, role.role_name)
    db.refresh(role)
    return role


def revoke_permission(db: Session, role_id: int, permission_name: str, actor: Actor) -> Role:
    require_permission(db, actor, ROLE_MANAGE)
    role = get_role(db, role_id)
    permission = _get_permission_by_name(db, permission_name)
    link = (
        db.query(RolePermission)
        .filter(RolePermission.role_id == role_id, RolePermission.permission_id == permission.permission_id)
        .first()
    )
    if link:
        with transaction(db):
            db.delete(link)
        reference_cache.invalidate()
        logger.info("[role] revoked %s from role=%s", permission_name, role.role_name)
    db.refresh(role)
    return role
