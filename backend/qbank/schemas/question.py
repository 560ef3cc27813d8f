"""Question(문항) 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

QuestionType = Literal["multiple_choice", "true_false", "short_answer", "essay", "fill_blank"]
DifficultyLevel = Literal["easy", "medium", "hard"]


class QuestionOptionIn(BaseModel):
    option_text: str = Field(min_length=1)
    is_correct: bool = False
    option_order: Optional[int] = Field(default=None, ge=1)


class QuestionOptionOut(BaseModel):
    option_id: int
    option_text: str
    is_correct: bool
    option_order: int

    model_config = {"from_attributes": True}


class QuestionCreate(BaseModel):
    company_id: int
    category_id: Optional[int] = None
    question_type: QuestionType
    difficulty_level: DifficultyLevel = "medium"
    question_text: str = Field(min_length=1)
    explanation: Optional[str] = None
    options: List[QuestionOptionIn] = []


class QuestionUpdate(BaseModel):
    # 상태는 여기서 바꿀 수 없다. /status 전이 API를 사용한다.
    category_id: Optional[int] = None
    question_type: Optional[QuestionType] = None
    difficulty_level: Optional[DifficultyLevel] = None
    question_text: Optional[str] = Field(default=None, min_length=1)
    explanation: Optional[str] = None
    options: Optional[List[QuestionOptionIn]] = None
    change_summary: Optional[str] = Field(default=None, max_length=255)


class QuestionOut(BaseModel):
    question_id: int
    company_id: int
    category_id: Optional[int] = None
    question_type: str
    difficulty_level: str
    question_text: str
    explanation: Optional[str] = None
    status_id: int
    status_name: Optional[str] = None
    created_by: int
    updated_by: Optional[int] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    options: List[QuestionOptionOut] = []

    model_config = {"from_attributes": True}


class QuestionPage(BaseModel):
    items: List[QuestionOut]
    total: int
    page: int
    page_size: int


class QuestionStatistics(BaseModel):
    company_id: int
    total: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    by_difficulty: Dict[str, int]
