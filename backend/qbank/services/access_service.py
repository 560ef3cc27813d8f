"""테넌트 접근 가드입니다.

회사 단위 데이터 접근은 다음 순서로 판단합니다.

1. 시스템 관리자
2. 활성 회사의 소유자 (``Company.owner_user_id`` 기준, 직원 행이 없어도 허용)
3. 활성 회사의 활성 직원
4. 그 외 거부

직원 관리(추가/제거/조회)는 관리자·소유자, 같은 회사의 company_admin, 그리고 본인 직원
레코드에 대한 자기 접근만 허용합니다.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from qbank.models.company import Company
from qbank.models.employee import Employee
from qbank.models.role import EmployeeRole, Role
from qbank.utils.errors import ForbiddenError, NotFoundError
from qbank.utils.permissions import Actor, RoleKind

logger = logging.getLogger(__name__)

REASON_SYSTEM_ADMIN = "system_admin"
REASON_OWNER = "company_owner"
REASON_EMPLOYEE = "company_employee"
REASON_COMPANY_ADMIN = "company_admin"
REASON_SELF = "self_access"
REASON_DENIED = "denied"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


def _get_company(db: Session, company_id: int) -> Optional[Company]:
    return db.query(Company).filter(Company.company_id == company_id).first()


def is_company_owner(db: Session, user_id: int, company_id: int) -> bool:
    return (
        db.query(Company.company_id)
        .filter(
            Company.company_id == company_id,
            Company.owner_user_id == user_id,
            Company.is_active == True,  # noqa: E712
        )
        .first()
        is not None
    )


def is_company_employee(db: Session, user_id: int, company_id: int) -> bool:
    return (
        db.query(Employee.employee_id)
        .join(Company, Company.company_id == Employee.company_id)
        .filter(
            Employee.company_id == company_id,
            Employee.user_id == user_id,
            Employee.is_active == True,  # noqa: E712
            Company.is_active == True,  # noqa: E712
        )
        .first()
        is not None
    )


def has_company_role(db: Session, user_id: int, company_id: int, kind: RoleKind) -> bool:
    """사용자가 해당 회사의 활성 직원으로서 주어진 종류의 활성 역할을 보유하는지."""
    return (
        db.query(EmployeeRole.employee_role_id)
        .join(Employee, Employee.employee_id == EmployeeRole.employee_id)
        .join(Role, Role.role_id == EmployeeRole.role_id)
        .filter(
            Employee.company_id == company_id,
            Employee.user_id == user_id,
            Employee.is_active == True,  # noqa: E712
            EmployeeRole.is_active == True,  # noqa: E712
            Role.is_active == True,  # noqa: E712
            Role.role_kind == kind.value,
        )
        .first()
        is not None
    )


def is_employee_self(db: Session, user_id: int, company_id: int, employee_id: int) -> bool:
    return (
        db.query(Employee.employee_id)
        .filter(
            Employee.employee_id == employee_id,
            Employee.company_id == company_id,
            Employee.user_id == user_id,
            Employee.is_active == True,  # noqa: E712
        )
        .first()
        is not None
    )


def authorize_company_access(db: Session, actor: Actor, company_id: int) -> AccessDecision:
    if actor.is_system_admin:
        return AccessDecision(True, REASON_SYSTEM_ADMIN)
    if is_company_owner(db, actor.user_id, company_id):
        return AccessDecision(True, REASON_OWNER)
    if is_company_employee(db, actor.user_id, company_id):
        return AccessDecision(True, REASON_EMPLOYEE)
    return AccessDecision(False, REASON_DENIED)


def require_company_access(db: Session, actor: Actor, company_id: int) -> Company:
    company = _get_company(db, company_id)
    if not company:
        raise NotFoundError("회사를 찾을 수 없습니다.", company_id=company_id)
    decision = authorize_company_access(db, actor, company_id)
    if not decision:
        logger.warning("[access] user=%s denied company=%s", actor.user_id, company_id)
        raise ForbiddenError("해당 회사에 접근할 권한이 없습니다.", company_id=company_id)
    return company


def authorize_employee_management(
    db: Session,
    actor: Actor,
    company_id: int,
    employee_id: Optional[int] = None,
) -> AccessDecision:
    if actor.is_system_admin:
        return AccessDecision(True, REASON_SYSTEM_ADMIN)
    if is_company_owner(db, actor.user_id, company_id):
        return AccessDecision(True, REASON_OWNER)
    if has_company_role(db, actor.user_id, company_id, RoleKind.COMPANY_ADMIN):
        return AccessDecision(True, REASON_COMPANY_ADMIN)
    if employee_id is not None and is_employee_self(db, actor.user_id, company_id, employee_id):
        return AccessDecision(True, REASON_SELF)
    return AccessDecision(False, REASON_DENIED)


def require_employee_management(
    db: Session,
    actor: Actor,
    company_id: int,
    employee_id: Optional[int] = None,
) -> AccessDecision:
    if not _get_company(db, company_id):
        raise NotFoundError("회사를 찾을 수 없습니다.", company_id=company_id)
    decision = authorize_employee_management(db, actor, company_id, employee_id)
    if not decision:
        logger.warning(
            "[access] user=%s denied employee management company=%s employee=%s",
            actor.user_id,
            company_id,
            employee_id,
        )
        raise ForbiddenError("직원 정보를 관리할 권한이 없습니다.", company_id=company_id)
    return decision
