"""Company Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

import logging
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from qbank.database import transaction
from qbank.models.company import Company
from qbank.models.employee import Employee
from qbank.models.role import EmployeeRole, Role
from qbank.schemas.company import CompanyCreate, CompanyUpdate
from qbank.services.access_service import is_company_owner, require_company_access
from qbank.utils.errors import ForbiddenError, NotFoundError
from qbank.utils.permissions import Actor, RoleKind

logger = logging.getLogger(__name__)


def _company_admin_role(db: Session) -> Role:
    role = (
        db.query(Role)
        .filter(Role.role_kind == RoleKind.COMPANY_ADMIN.value, Role.is_active == True)  # noqa: E712
        .order_by(Role.role_id)
        .first()
    )
    if not role:
        raise NotFoundError("company_admin 역할이 정의되어 있지 않습니다.")
    return role


def create_company(db: Session, data: CompanyCreate, actor: Actor) -> Company:
    """생성자를 소유자로 지정하고, 소유자를 company_admin 직원으로 함께 등록한다."""
    admin_role = _company_admin_role(db)
    with transaction(db):
        company = Company(owner_user_id=actor.user_id, **data.model_dump())
        db.add(company)
        db.flush()
        employee = Employee(company_id=company.company_id, user_id=actor.user_id)
        db.add(employee)
        db.flush()
        db.add(
            EmployeeRole(
                employee_id=employee.employee_id,
                role_id=admin_role.role_id,
                assigned_by=actor.user_id,
            )
        )
    db.refresh(company)
    logger.info("[company] created company=%s owner=%s", company.company_id, actor.user_id)
    return company


def get_company(db: Session, company_id: int, actor: Actor) -> Company:
    return require_company_access(db, actor, company_id)


def list_companies(db: Session, actor: Actor) -> List[Company]:
    query = db.query(Company).filter(Company.is_active == True)  # noqa: E712
    if not actor.is_system_admin:
        employed = (
            db.query(Employee.company_id)
            .filter(Employee.user_id == actor.user_id, Employee.is_active == True)  # noqa: E712
        )
        query = query.filter(
            or_(Company.owner_user_id == actor.user_id, Company.company_id.in_(employed))
        )
    return query.order_by(Company.company_id).all()


def _require_owner_or_admin(db: Session, company_id: int, actor: Actor) -> Company:
    company = db.query(Company).filter(Company.company_id == company_id).first()
    if not company:
        raise NotFoundError("회사를 찾을 수 없습니다.", company_id=company_id)
    if not (actor.is_system_admin or is_company_owner(db, actor.user_id, company_id)):
        logger.warning("[company] user=%s is not owner of company=%s", actor.user_id, company_id)
        raise ForbiddenError("회사 소유자 또는 관리자만 변경할 수 있습니다.", company_id=company_id)
    return company


def update_company(db: Session, company_id: int, data: CompanyUpdate, actor: Actor) -> Company:
    company = _require_owner_or_admin(db, company_id, actor)
    with transaction(db):
        for k, v in data.model_dump(exclude_none=True).items():
            setattr(company, k, v)
    db.refresh(company)
    return company


def deactivate_company(db: Session, company_id: int, actor: Actor) -> Company:
    company = _require_owner_or_admin(db, company_id, actor)
    with transaction(db):
        company.is_active = False
    db.refresh(company)
    logger.info("[company] deactivated company=%s by user=%s", company_id, actor.user_id)
    return company
