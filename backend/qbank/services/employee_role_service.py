"""직원-역할 부여 서비스입니다.

역할 부여는 (employee_id, role_id) 기준 upsert이므로 같은 역할을 여러 번 부여해도 활성 연결은
하나만 남습니다. 시스템 관리자는 모든 역할을, 같은 회사의 company_admin은 admin 종류를 제외한
역할만 부여/회수할 수 있습니다. ``get_assignable_roles``는 ``assign_role``과 동일한 규칙을 사용합니다.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from qbank.database import transaction
from qbank.models.company import Company
from qbank.models.employee import Employee
from qbank.models.role import EmployeeRole, Role
from qbank.services import event_service
from qbank.services.access_service import has_company_role, is_company_owner, is_employee_self
from qbank.utils.errors import ForbiddenError, NotFoundError
from qbank.utils.permissions import Actor, RoleKind

logger = logging.getLogger(__name__)


def _require_company(db: Session, company_id: int) -> Company:
    company = db.query(Company).filter(Company.company_id == company_id).first()
    if not company:
        raise NotFoundError("회사를 찾을 수 없습니다.", company_id=company_id)
    return company


def can_manage_roles(db: Session, actor: Actor, company_id: int) -> bool:
    if actor.is_system_admin:
        return True
    return has_company_role(db, actor.user_id, company_id, RoleKind.COMPANY_ADMIN)


def can_view_roles(db: Session, actor: Actor, company_id: int) -> bool:
    if actor.is_system_admin or is_company_owner(db, actor.user_id, company_id):
        return True
    return any(
        has_company_role(db, actor.user_id, company_id, kind)
        for kind in (RoleKind.COMPANY_ADMIN, RoleKind.HR_MANAGER)
    )


def _can_grant(actor: Actor, role: Role) -> bool:
    return actor.is_system_admin or role.role_kind != RoleKind.ADMIN.value


def _require_manager(db: Session, actor: Actor, company_id: int) -> None:
    _require_company(db, company_id)
    if not can_manage_roles(db, actor, company_id):
        logger.warning("[role] user=%s cannot manage roles in company=%s", actor.user_id, company_id)
        raise ForbiddenError("역할을 관리할 권한이 없습니다.", company_id=company_id)


def get_assignable_roles(db: Session, company_id: int, actor: Actor) -> List[Role]:
    _require_company(db, company_id)
    if not can_manage_roles(db, actor, company_id):
        return []
    roles = db.query(Role).filter(Role.is_active == True).order_by(Role.role_id).all()  # noqa: E712
    return [role for role in roles if _can_grant(actor, role)]


def assign_role(db: Session, company_id: int, employee_id: int, role_id: int, actor: Actor) -> EmployeeRole:
    _require_manager(db, actor, company_id)

    employee = (
        db.query(Employee)
        .filter(
            Employee.employee_id == employee_id,
            Employee.company_id == company_id,
            Employee.is_active == True,  # noqa: E712
        )
        .first()
    )
    if not employee:
        raise NotFoundError("직원을 찾을 수 없습니다.", employee_id=employee_id)
    role = db.query(Role).filter(Role.role_id == role_id, Role.is_active == True).first()  # noqa: E712
    if not role:
        raise NotFoundError("역할을 찾을 수 없습니다.", role_id=role_id)
    if not _can_grant(actor, role):
        logger.warning("[role] user=%s attempted to grant admin role", actor.user_id)
        raise ForbiddenError("시스템 관리자 역할은 부여할 수 없습니다.", role_id=role_id)

    with transaction(db):
        link = (
            db.query(EmployeeRole)
            .filter(EmployeeRole.employee_id == employee_id, EmployeeRole.role_id == role_id)
            .first()
        )
        if link:
            link.is_active = True
            link.assigned_by = actor.user_id
            link.updated_at = func.now()
        else:
            link = EmployeeRole(employee_id=employee_id, role_id=role_id, assigned_by=actor.user_id)
            db.add(link)
    db.refresh(link)
    logger.info("[role] role=%s assigned to employee=%s by user=%s", role.role_name, employee_id, actor.user_id)
    event_service.emit(
        event_service.ROLE_ASSIGNED,
        {
            "company_id": company_id,
            "employee_id": employee_id,
            "user_id": employee.user_id,
            "role_id": role_id,
            "role_name": role.role_name,
            "assigned_by": actor.user_id,
        },
    )
    return link


def remove_role(db: Session, employee_role_id: int, company_id: int, actor: Actor) -> bool:
    """역할 연결을 비활성화한다. 이미 비활성 상태면 False."""
    _require_manager(db, actor, company_id)

    link = (
        db.query(EmployeeRole)
        .join(Employee, Employee.employee_id == EmployeeRole.employee_id)
        .filter(
            EmployeeRole.employee_role_id == employee_role_id,
            Employee.company_id == company_id,
        )
        .first()
    )
    if not link:
        raise NotFoundError("역할 부여 내역을 찾을 수 없습니다.", employee_role_id=employee_role_id)
    if not _can_grant(actor, link.role):
        logger.warning("[role] user=%s attempted to revoke admin role", actor.user_id)
        raise ForbiddenError("시스템 관리자 역할은 회수할 수 없습니다.", employee_role_id=employee_role_id)
    if not link.is_active:
        return False

    with transaction(db):
        link.is_active = False
    logger.info("[role] employee_role=%s revoked by user=%s", employee_role_id, actor.user_id)
    return True


def _require_viewer(db: Session, actor: Actor, company_id: int, employee_id: Optional[int] = None) -> None:
    _require_company(db, company_id)
    if can_view_roles(db, actor, company_id):
        return
    if employee_id is not None and is_employee_self(db, actor.user_id, company_id, employee_id):
        return
    logger.warning("[role] user=%s cannot view roles in company=%s", actor.user_id, company_id)
    raise ForbiddenError("직원 역할을 조회할 권한이 없습니다.", company_id=company_id)


def get_employee_roles(
    db: Session, company_id: int, employee_id: int, actor: Actor, include_inactive: bool = False
) -> List[EmployeeRole]:
    _require_viewer(db, actor, company_id, employee_id)
    query = (
        db.query(EmployeeRole)
        .join(Employee, Employee.employee_id == EmployeeRole.employee_id)
        .filter(Employee.company_id == company_id, EmployeeRole.employee_id == employee_id)
    )
    if not include_inactive:
        query = query.filter(EmployeeRole.is_active == True)  # noqa: E712
    return query.order_by(EmployeeRole.employee_role_id).all()


def list_employees_with_roles(db: Session, company_id: int, actor: Actor) -> List[Dict]:
    _require_viewer(db, actor, company_id)
    employees = (
        db.query(Employee)
        .filter(Employee.company_id == company_id, Employee.is_active == True)  # noqa: E712
        .order_by(Employee.employee_id)
        .all()
    )
    links = (
        db.query(EmployeeRole)
        .join(Employee, Employee.employee_id == EmployeeRole.employee_id)
        .filter(Employee.company_id == company_id, EmployeeRole.is_active == True)  # noqa: E712
        .order_by(EmployeeRole.employee_role_id)
        .all()
    )
    by_employee: Dict[int, List[EmployeeRole]] = {}
    for link in links:
        by_employee.setdefault(link.employee_id, []).append(link)

    return [
        {
            "employee_id": employee.employee_id,
            "user_id": employee.user_id,
            "user_email": employee.user_email,
            "user_name": employee.user_name,
            "department": employee.department,
            "position": employee.position,
            "roles": by_employee.get(employee.employee_id, []),
        }
        for employee in employees
    ]
