"""문항 투표 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class VoteCast(BaseModel):
    vote_type_id: int


class VoteTypeOut(BaseModel):
    vote_type_id: int
    name: str
    display_name: str
    description: Optional[str] = None
    score_impact: int
    is_active: bool

    model_config = {"from_attributes": True}


class VoteOut(BaseModel):
    vote_id: int
    question_id: int
    user_id: int
    vote_type_id: int
    vote_type_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VoteResult(BaseModel):
    action: str
    vote: Optional[VoteOut] = None


class VoteTypeCount(BaseModel):
    vote_type_id: int
    name: str
    display_name: str
    count: int
    users: List[str] = []


class VoteSummary(BaseModel):
    question_id: int
    total_score: int
    types: List[VoteTypeCount]
    user_vote: Optional[VoteOut] = None


class VoteHistoryOut(BaseModel):
    history_id: int
    vote_id: int
    question_id: int
    user_id: int
    old_vote_type_id: Optional[int] = None
    new_vote_type_id: Optional[int] = None
    action: str
    changed_by: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VotePage(BaseModel):
    items: List[VoteOut]
    total: int
    page: int
    page_size: int


class VoteHistoryPage(BaseModel):
    items: List[VoteHistoryOut]
    total: int
    page: int
    page_size: int
