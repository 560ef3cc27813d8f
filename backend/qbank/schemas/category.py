"""문항 카테고리 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryOut(BaseModel):
    category_id: int
    company_id: int
    name: str
    description: Optional[str] = None
    created_by: int
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
