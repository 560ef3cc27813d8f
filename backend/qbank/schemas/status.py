"""문항 상태/전이 규칙/상태 이력 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from qbank.schemas.question import QuestionOut


class QuestionStatusCreate(BaseModel):
    name: str = Field(min_length=1, max_length=30, pattern=r"^[a-z_]+$")
    display_name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None
    is_default: bool = False


class QuestionStatusUpdate(BaseModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    is_default: Optional[bool] = None


class QuestionStatusOut(BaseModel):
    status_id: int
    name: str
    display_name: str
    description: Optional[str] = None
    is_active: bool
    is_default: bool

    model_config = {"from_attributes": True}


class TransitionRuleCreate(BaseModel):
    from_status_id: int
    to_status_id: int
    role_id: int


class TransitionRuleOut(BaseModel):
    transition_id: int
    from_status_id: int
    from_status_name: Optional[str] = None
    to_status_id: int
    to_status_name: Optional[str] = None
    role_id: int
    role_name: Optional[str] = None
    is_active: bool

    model_config = {"from_attributes": True}


class StatusChangeRequest(BaseModel):
    to_status_id: int
    comments: Optional[str] = None


class StatusHistoryOut(BaseModel):
    history_id: int
    question_id: int
    from_status_id: Optional[int] = None
    from_status_name: Optional[str] = None
    to_status_id: int
    to_status_name: Optional[str] = None
    changed_by: int
    comments: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StatusHistoryPage(BaseModel):
    items: List[StatusHistoryOut]
    total: int
    limit: int
    offset: int


class TransitionResultOut(BaseModel):
    question: QuestionOut
    history: StatusHistoryOut
