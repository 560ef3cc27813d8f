"""Employee Roles 기능 API 라우터입니다. 직원 역할 부여/회수/조회를 서비스 레이어로 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from qbank.database import get_db
from qbank.schemas.role import EmployeeRoleOut, EmployeeWithRolesOut, RoleAssignRequest, RoleOut
from qbank.services import employee_role_service, role_service
from qbank.middleware.auth_middleware import get_current_actor
from qbank.utils.permissions import Actor

router = APIRouter(prefix="/api/companies/{company_id}", tags=["employee_roles"])


@router.get("/assignable-roles", response_model=List[RoleOut])
def assignable_roles(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    roles = employee_role_service.get_assignable_roles(db, company_id, actor)
    return [role_service.role_to_response(role) for role in roles]


@router.get("/employee-roles", response_model=List[EmployeeWithRolesOut])
def employees_with_roles(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return employee_role_service.list_employees_with_roles(db, company_id, actor)


@router.get("/employees/{employee_id}/roles", response_model=List[EmployeeRoleOut])
def employee_roles(
    company_id: int,
    employee_id: int,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return employee_role_service.get_employee_roles(
        db, company_id, employee_id, actor, include_inactive=include_inactive
    )


@router.post("/employees/{employee_id}/roles", response_model=EmployeeRoleOut)
def assign_role(
    company_id: int,
    employee_id: int,
    data: RoleAssignRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return employee_role_service.assign_role(db, company_id, employee_id, data.role_id, actor)


@router.delete("/employees/{employee_id}/roles/{employee_role_id}")
def remove_role(
    company_id: int,
    employee_id: int,
    employee_role_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    removed = employee_role_service.remove_role(db, employee_role_id, company_id, actor)
    return {"removed": removed}
