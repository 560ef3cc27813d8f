"""리뷰 워크플로 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    question_id: int
    assigned_to: Optional[int] = None
    notes: Optional[str] = None
    priority: Optional[int] = Field(default=None, ge=1, le=3)
    due_date: Optional[datetime] = None


class ReviewStatusUpdate(BaseModel):
    status_id: int
    comment: Optional[str] = None


class ReviewCommentCreate(BaseModel):
    comment_text: str = Field(min_length=1)


class ReviewAssignRequest(BaseModel):
    user_id: int


class ReviewStatusOut(BaseModel):
    status_id: int
    name: str
    display_name: str
    is_active: bool

    model_config = {"from_attributes": True}


class ReviewHistoryOut(BaseModel):
    history_id: int
    review_id: int
    status_id: Optional[int] = None
    changed_by: int
    comments: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReviewCommentOut(BaseModel):
    comment_id: int
    review_id: int
    user_id: int
    comment_text: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReviewAssignmentOut(BaseModel):
    assignment_id: int
    review_id: int
    user_id: int
    assigned_by: int
    is_active: bool
    assigned_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReviewOut(BaseModel):
    review_id: int
    question_id: int
    status_id: int
    status_name: Optional[str] = None
    created_by: int
    assigned_to: Optional[int] = None
    updated_by: Optional[int] = None
    notes: Optional[str] = None
    priority: int
    due_date: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReviewDetailOut(ReviewOut):
    history: List[ReviewHistoryOut] = []
    comments: List[ReviewCommentOut] = []
    assignments: List[ReviewAssignmentOut] = []


class ReviewPage(BaseModel):
    items: List[ReviewOut]
    total: int
    page: int
    page_size: int
