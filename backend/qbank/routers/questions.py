"""Questions 기능 API 라우터입니다. 문항/버전/상태 전이 요청을 서비스 레이어로 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from qbank.database import get_db
from qbank.schemas.question import QuestionCreate, QuestionOut, QuestionPage, QuestionUpdate
from qbank.schemas.status import (
    QuestionStatusOut, StatusChangeRequest, StatusHistoryOut, StatusHistoryPage, TransitionResultOut,
)
from qbank.schemas.version import ContentVersionOut, ContentVersionSummary
from qbank.services import question_service, status_service, version_service
from qbank.middleware.auth_middleware import get_current_actor
from qbank.utils.permissions import Actor

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("", response_model=QuestionPage)
def list_questions(
    company_id: int = Query(..., ge=1),
    status_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None),
    question_type: Optional[str] = Query(None),
    difficulty_level: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    created_by: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return question_service.list_questions(
        db,
        actor,
        company_id,
        status_id=status_id,
        status=status,
        category_id=category_id,
        question_type=question_type,
        difficulty_level=difficulty_level,
        search=search,
        created_by=created_by,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=QuestionOut, status_code=201)
def create_question(data: QuestionCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return question_service.create_question(db, data, actor)


@router.get("/{question_id}", response_model=QuestionOut)
def get_question(question_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return question_service.get_question(db, question_id, actor)


@router.put("/{question_id}", response_model=QuestionOut)
def update_question(
    question_id: int,
    data: QuestionUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return question_service.update_question(db, question_id, data, actor)


@router.delete("/{question_id}")
def delete_question(question_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    question_service.delete_question(db, question_id, actor)
    return {"message": "삭제되었습니다."}


@router.get("/{question_id}/versions", response_model=List[ContentVersionSummary])
def list_versions(question_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return question_service.get_versions(db, question_id, actor)


@router.get("/{question_id}/versions/{version_number}", response_model=ContentVersionOut)
def get_version(
    question_id: int,
    version_number: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    row = question_service.get_version(db, question_id, version_number, actor)
    return version_service.to_response(row)


@router.post("/{question_id}/status", response_model=TransitionResultOut)
def change_status(
    question_id: int,
    data: StatusChangeRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    result = status_service.transition_status(db, question_id, data.to_status_id, actor, data.comments)
    return TransitionResultOut(
        question=QuestionOut.model_validate(result.question),
        history=StatusHistoryOut.model_validate(result.history),
    )


@router.get("/{question_id}/status/transitions", response_model=List[QuestionStatusOut])
def valid_transitions(question_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return status_service.get_question_transitions(db, question_id, actor)


@router.get("/{question_id}/status/history", response_model=StatusHistoryPage)
def status_history(
    question_id: int,
    limit: int = Query(50, ge=1),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return status_service.get_history(db, question_id, actor, limit=limit, offset=offset)
