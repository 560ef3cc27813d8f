"""Companies 기능 API 라우터입니다. 회사와 직원 요청을 검증하고 서비스 레이어로 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from qbank.database import get_db
from qbank.schemas.company import (
    AccessDecisionOut, CompanyCreate, CompanyOut, CompanyUpdate,
    EmployeeCreate, EmployeeOut, EmployeeUpdate,
)
from qbank.schemas.question import QuestionStatistics
from qbank.services import access_service, company_service, employee_service, question_service
from qbank.middleware.auth_middleware import get_current_actor
from qbank.utils.permissions import Actor

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("", response_model=List[CompanyOut])
def list_companies(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return company_service.list_companies(db, actor)


@router.post("", response_model=CompanyOut, status_code=201)
def create_company(data: CompanyCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return company_service.create_company(db, data, actor)


@router.get("/{company_id}", response_model=CompanyOut)
def get_company(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return company_service.get_company(db, company_id, actor)


@router.put("/{company_id}", response_model=CompanyOut)
def update_company(
    company_id: int,
    data: CompanyUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return company_service.update_company(db, company_id, data, actor)


@router.delete("/{company_id}")
def deactivate_company(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    company_service.deactivate_company(db, company_id, actor)
    return {"message": "비활성화되었습니다."}


@router.get("/{company_id}/access", response_model=AccessDecisionOut)
def check_access(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    decision = access_service.authorize_company_access(db, actor, company_id)
    return AccessDecisionOut(allowed=decision.allowed, reason=decision.reason)


@router.get("/{company_id}/statistics", response_model=QuestionStatistics)
def question_statistics(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return question_service.get_statistics(db, company_id, actor)


@router.get("/{company_id}/employees", response_model=List[EmployeeOut])
def list_employees(
    company_id: int,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return employee_service.list_employees(db, company_id, actor, include_inactive=include_inactive)


@router.post("/{company_id}/employees", response_model=EmployeeOut, status_code=201)
def add_employee(
    company_id: int,
    data: EmployeeCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return employee_service.add_employee(db, company_id, data, actor)


@router.get("/{company_id}/employees/{employee_id}", response_model=EmployeeOut)
def get_employee(
    company_id: int,
    employee_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return employee_service.get_employee(db, company_id, employee_id, actor)


@router.put("/{company_id}/employees/{employee_id}", response_model=EmployeeOut)
def update_employee(
    company_id: int,
    employee_id: int,
    data: EmployeeUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return employee_service.update_employee(db, company_id, employee_id, data, actor)


@router.delete("/{company_id}/employees/{employee_id}")
def remove_employee(
    company_id: int,
    employee_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    removed = employee_service.remove_employee(db, company_id, employee_id, actor)
    return {"removed": removed}
