"""Question Statuses 기능 API 라우터입니다. 상태 정의와 전이 규칙 관리를 서비스 레이어로 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from qbank.database import get_db
from qbank.schemas.status import (
    QuestionStatusCreate, QuestionStatusOut, QuestionStatusUpdate,
    TransitionRuleCreate, TransitionRuleOut,
)
from qbank.services import status_service
from qbank.middleware.auth_middleware import get_current_actor
from qbank.utils.permissions import Actor

router = APIRouter(prefix="/api/question-statuses", tags=["question_statuses"])


@router.get("", response_model=List[QuestionStatusOut])
def list_statuses(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return status_service.get_statuses(db, include_inactive=include_inactive)


@router.post("", response_model=QuestionStatusOut, status_code=201)
def create_status(data: QuestionStatusCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return status_service.create_status(db, data, actor)


@router.put("/{status_id}", response_model=QuestionStatusOut)
def update_status(
    status_id: int,
    data: QuestionStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return status_service.update_status_definition(db, status_id, data, actor)


@router.get("/{status_id}/transitions", response_model=List[QuestionStatusOut])
def valid_transitions(status_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    status_service.get_status(db, status_id)
    return status_service.get_valid_transitions(db, status_id, actor)


@router.get("/transition-rules", response_model=List[TransitionRuleOut])
def list_rules(
    role_id: Optional[int] = Query(None),
    from_status_id: Optional[int] = Query(None),
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return status_service.list_transition_rules(
        db, actor, role_id=role_id, from_status_id=from_status_id, include_inactive=include_inactive
    )


@router.post("/transition-rules", response_model=TransitionRuleOut, status_code=201)
def create_rule(data: TransitionRuleCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return status_service.create_transition_rule(db, data, actor)


@router.delete("/transition-rules/{transition_id}", response_model=TransitionRuleOut)
def deactivate_rule(transition_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return status_service.deactivate_transition_rule(db, transition_id, actor)
