"""Employee Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

import logging
from typing import List

from sqlalchemy.orm import Session

from qbank.database import transaction
from qbank.models.employee import Employee
from qbank.models.role import EmployeeRole
from qbank.models.user import User
from qbank.schemas.company import EmployeeCreate, EmployeeUpdate
from qbank.services.access_service import require_company_access, require_employee_management
from qbank.utils.errors import NotFoundError
from qbank.utils.permissions import Actor

logger = logging.getLogger(__name__)


def _get_employee_row(db: Session, company_id: int, employee_id: int) -> Employee:
    employee = (
        db.query(Employee)
        .filter(Employee.employee_id == employee_id, Employee.company_id == company_id)
        .first()
    )
    if not employee:
        raise NotFoundError("직원을 찾을 수 없습니다.", employee_id=employee_id)
    return employee


def add_employee(db: Session, company_id: int, data: EmployeeCreate, actor: Actor) -> Employee:
    """(company_id, user_id) 기준 upsert. 제거된 직원이면 같은 행을 재활성화한다."""
    require_employee_management(db, actor, company_id)
    user = db.query(User).filter(User.user_id == data.user_id, User.is_active == True).first()  # noqa: E712
    if not user:
        raise NotFoundError("사용자를 찾을 수 없습니다.", user_id=data.user_id)

    with transaction(db):
        employee = (
            db.query(Employee)
            .filter(Employee.company_id == company_id, Employee.user_id == data.user_id)
            .first()
        )
        if employee:
            employee.is_active = True
            if data.department is not None:
                employee.department = data.department
            if data.position is not None:
                employee.position = data.position
        else:
            employee = Employee(company_id=company_id, **data.model_dump())
            db.add(employee)
    db.refresh(employee)
    logger.info("[employee] user=%s enrolled in company=%s", data.user_id, company_id)
    return employee


def update_employee(
    db: Session, company_id: int, employee_id: int, data: EmployeeUpdate, actor: Actor
) -> Employee:
    require_employee_management(db, actor, company_id)
    employee = _get_employee_row(db, company_id, employee_id)
    with transaction(db):
        for k, v in data.model_dump(exclude_none=True).items():
            setattr(employee, k, v)
    db.refresh(employee)
    return employee


def remove_employee(db: Session, company_id: int, employee_id: int, actor: Actor) -> bool:
    """소프트 삭제. 직원의 역할 연결도 함께 비활성화한다."""
    require_employee_management(db, actor, company_id)
    employee = _get_employee_row(db, company_id, employee_id)
    if not employee.is_active:
        return False
    with transaction(db):
        employee.is_active = False
        (
            db.query(EmployeeRole)
            .filter(EmployeeRole.employee_id == employee_id, EmployeeRole.is_active == True)  # noqa: E712
            .update({EmployeeRole.is_active: False}, synchronize_session=False)
        )
    logger.info("[employee] employee=%s removed from company=%s", employee_id, company_id)
    return True


def get_employee(db: Session, company_id: int, employee_id: int, actor: Actor) -> Employee:
    # 본인 레코드 조회는 관리 권한이 없어도 허용된다.
    require_employee_management(db, actor, company_id, employee_id)
    return _get_employee_row(db, company_id, employee_id)


def list_employees(
    db: Session, company_id: int, actor: Actor, include_inactive: bool = False
) -> List[Employee]:
    require_company_access(db, actor, company_id)
    query = db.query(Employee).filter(Employee.company_id == company_id)
    if not include_inactive:
        query = query.filter(Employee.is_active == True)  # noqa: E712
    return query.order_by(Employee.employee_id).all()
