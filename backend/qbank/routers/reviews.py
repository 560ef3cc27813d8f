"""Reviews 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from qbank.database import get_db
from qbank.schemas.review import (
    ReviewAssignRequest, ReviewCommentCreate, ReviewCommentOut, ReviewCreate,
    ReviewDetailOut, ReviewOut, ReviewPage, ReviewStatusOut, ReviewStatusUpdate,
)
from qbank.services import review_service
from qbank.middleware.auth_middleware import get_current_actor
from qbank.utils.permissions import Actor

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.get("/statuses", response_model=List[ReviewStatusOut])
def list_review_statuses(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return review_service.get_review_statuses(db)


@router.get("", response_model=ReviewPage)
def list_reviews(
    company_id: int = Query(..., ge=1),
    status_id: Optional[int] = Query(None),
    question_id: Optional[int] = Query(None),
    assigned_to: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return review_service.list_reviews(
        db,
        actor,
        company_id,
        status_id=status_id,
        question_id=question_id,
        assigned_to=assigned_to,
        is_active=is_active,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=ReviewOut, status_code=201)
def create_review(data: ReviewCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return review_service.create_review(db, data.question_id, actor, data)


@router.get("/{review_id}", response_model=ReviewDetailOut)
def get_review(review_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return review_service.get_review(db, review_id, actor)


@router.put("/{review_id}/status", response_model=ReviewOut)
def update_review_status(
    review_id: int,
    data: ReviewStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return review_service.update_review_status(db, review_id, data.status_id, actor, data.comment)


@router.post("/{review_id}/comments", response_model=ReviewCommentOut, status_code=201)
def add_comment(
    review_id: int,
    data: ReviewCommentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return review_service.add_comment(db, review_id, actor, data)


@router.put("/{review_id}/assign", response_model=ReviewOut)
def assign_review(
    review_id: int,
    data: ReviewAssignRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return review_service.assign_review(db, review_id, data.user_id, actor)
