"""Categories 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from qbank.database import get_db
from qbank.schemas.category import CategoryCreate, CategoryOut
from qbank.services import category_service
from qbank.middleware.auth_middleware import get_current_actor
from qbank.utils.permissions import Actor

router = APIRouter(prefix="/api/companies/{company_id}/categories", tags=["categories"])


@router.get("", response_model=List[CategoryOut])
def list_categories(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return category_service.list_categories(db, company_id, actor)


@router.post("", response_model=CategoryOut, status_code=201)
def create_category(
    company_id: int,
    data: CategoryCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return category_service.create_category(db, company_id, data, actor)


@router.delete("/{category_id}")
def delete_category(
    company_id: int,
    category_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    category_service.deactivate_category(db, company_id, category_id, actor)
    return {"message": "삭제되었습니다."}
