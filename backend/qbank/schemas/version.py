"""문항 버전 이력 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ContentVersionSummary(BaseModel):
    version_id: int
    question_id: int
    version_number: int
    change_summary: Optional[str] = None
    created_by: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ContentVersionOut(ContentVersionSummary):
    snapshot: Dict[str, Any]
