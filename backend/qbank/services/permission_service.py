"""역할-권한 해석기입니다. 호출자의 유효 권한 집합을 계산하고 권한 검사를 수행합니다."""

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from sqlalchemy.orm import Session

from qbank.models.company import Company
from qbank.models.employee import Employee
from qbank.models.role import EmployeeRole, Role
from qbank.models.user import User, UserRole
from qbank.services.reference_cache import reference_cache
from qbank.utils.errors import ForbiddenError
from qbank.utils.permissions import ALL_PERMISSIONS, Actor, RoleKind, make_actor

logger = logging.getLogger(__name__)


class PermissionSet(frozenset):
    universal = False


class UniversalPermissionSet(PermissionSet):
    """시스템 관리자용 집합. 어떤 권한 이름이든 포함한다."""

    universal = True

    def __contains__(self, item) -> bool:
        return True

    def __repr__(self) -> str:
        return "UniversalPermissionSet()"


UNIVERSAL_PERMISSIONS = UniversalPermissionSet(ALL_PERMISSIONS)


@dataclass(frozen=True)
class PermissionCheck:
    allowed: bool
    required: Tuple[str, ...]
    held: Tuple[str, ...]
    require_all: bool

    def __bool__(self) -> bool:
        return self.allowed

    @property
    def message(self) -> str:
        if self.allowed:
            return "허용"
        joined = ", ".join(self.required)
        if self.require_all:
            return f"다음 권한이 모두 필요합니다: {joined}"
        return f"다음 권한 중 하나가 필요합니다: {joined}"


def build_actor(db: Session, user: User) -> Actor:
    """전역 역할과 활성 직원 소속을 통해 보유한 역할을 모아 Actor를 만든다."""
    global_rows = (
        db.query(Role.role_name, Role.role_kind)
        .join(UserRole, UserRole.role_id == Role.role_id)
        .filter(
            UserRole.user_id == user.user_id,
            UserRole.is_active == True,  # noqa: E712
            Role.is_active == True,  # noqa: E712
        )
        .all()
    )
    employee_rows = (
        db.query(Role.role_name, Role.role_kind)
        .join(EmployeeRole, EmployeeRole.role_id == Role.role_id)
        .join(Employee, Employee.employee_id == EmployeeRole.employee_id)
        .join(Company, Company.company_id == Employee.company_id)
        .filter(
            Employee.user_id == user.user_id,
            Employee.is_active == True,  # noqa: E712
            EmployeeRole.is_active == True,  # noqa: E712
            Role.is_active == True,  # noqa: E712
            Company.is_active == True,  # noqa: E712
        )
        .all()
    )
    rows = [*global_rows, *employee_rows]
    kinds = {name.lower(): RoleKind(kind) for name, kind in rows}
    return make_actor(user.user_id, [name for name, _ in rows], kinds)


def resolve_permissions(db: Session, actor: Actor) -> PermissionSet:
    if actor.is_system_admin:
        return UNIVERSAL_PERMISSIONS
    if not actor.roles:
        return PermissionSet()
    snapshot = reference_cache.get(db)
    return PermissionSet(snapshot.permissions_for_roles(actor.roles))


def _normalize_required(required: Union[str, Iterable[str]]) -> Tuple[str, ...]:
    if isinstance(required, str):
        return (required,)
    return tuple(required)


def has_permission(
    db: Session,
    actor: Actor,
    required: Union[str, Iterable[str]],
    require_all: bool = False,
) -> PermissionCheck:
    required_names = _normalize_required(required)
    if actor.is_system_admin:
        return PermissionCheck(True, required_names, tuple(sorted(ALL_PERMISSIONS)), require_all)

    held = resolve_permissions(db, actor)
    if require_all:
        allowed = all(name in held for name in required_names)
    else:
        allowed = any(name in held for name in required_names)
    return PermissionCheck(allowed, required_names, tuple(sorted(held)), require_all)


def require_permission(
    db: Session,
    actor: Actor,
    required: Union[str, Iterable[str]],
    require_all: bool = False,
) -> PermissionCheck:
    check = has_permission(db, actor, required, require_all=require_all)
    if not check.allowed:
        logger.warning("[permission] user=%s denied: requires %s", actor.user_id, check.required)
        raise ForbiddenError(
            check.message,
            required_permissions=list(check.required),
            held_permissions=list(check.held),
            require_all=check.require_all,
        )
    return check
