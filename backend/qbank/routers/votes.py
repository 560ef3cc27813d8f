"""Votes 기능 API 라우터입니다. 문항 투표 등록/취소와 집계 조회를 서비스 레이어로 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from qbank.database import get_db
from qbank.schemas.vote import VoteCast, VoteHistoryPage, VotePage, VoteResult, VoteSummary, VoteTypeOut
from qbank.services import vote_service
from qbank.middleware.auth_middleware import get_current_actor
from qbank.utils.permissions import Actor

router = APIRouter(tags=["votes"])


@router.get("/api/votes/types", response_model=List[VoteTypeOut])
def list_vote_types(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return vote_service.get_vote_types(db, actor)


@router.get("/api/votes/me", response_model=VotePage)
def get_my_votes(
    company_id: int = Query(..., ge=1),
    vote_type_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return vote_service.get_my_votes(
        db, actor, company_id, vote_type_id=vote_type_id, page=page, page_size=page_size
    )


@router.delete("/api/votes/{vote_id}")
def remove_vote(vote_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    vote_service.remove_vote(db, vote_id, actor)
    return {"message": "투표가 취소되었습니다."}


@router.post("/api/questions/{question_id}/votes", response_model=VoteResult, status_code=201)
def cast_vote(
    question_id: int,
    data: VoteCast,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return vote_service.cast_vote(db, question_id, data.vote_type_id, actor)


@router.get("/api/questions/{question_id}/votes", response_model=VotePage)
def list_votes(
    question_id: int,
    vote_type_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return vote_service.list_votes(
        db, question_id, actor, vote_type_id=vote_type_id, page=page, page_size=page_size
    )


@router.get("/api/questions/{question_id}/votes/summary", response_model=VoteSummary)
def get_vote_summary(question_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return vote_service.get_vote_summary(db, question_id, actor)


@router.get("/api/questions/{question_id}/votes/history", response_model=VoteHistoryPage)
def get_vote_history(
    question_id: int,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return vote_service.get_vote_history(db, question_id, actor, page=page, page_size=page_size)
