"""문항 버전 스냅샷 저장/조회 공용 기능을 제공하는 도메인 서비스입니다."""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from qbank.models.content_version import ContentVersion
from qbank.models.question import Question
from qbank.utils.errors import NotFoundError

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = (
    "question_id",
    "company_id",
    "category_id",
    "question_type",
    "difficulty_level",
    "question_text",
    "explanation",
    "status_id",
    "created_by",
    "updated_by",
    "reviewed_by",
    "reviewed_at",
    "published_at",
    "is_active",
    "created_at",
    "updated_at",
)


def _plain(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def question_snapshot(question: Question) -> Dict[str, Any]:
    data = {field: _plain(getattr(question, field)) for field in SNAPSHOT_FIELDS}
    data["status_name"] = question.status_name
    data["options"] = [
        {
            "option_id": option.option_id,
            "option_text": option.option_text,
            "is_correct": bool(option.is_correct),
            "option_order": option.option_order,
        }
        for option in question.options
    ]
    return data


def snapshot_before_update(
    db: Session,
    question: Question,
    *,
    changed_by: int,
    change_summary: Optional[str] = None,
) -> ContentVersion:
    """현재 행 상태를 다음 버전 번호로 저장한다.

    호출자의 트랜잭션 안에서 실행되어야 하며, 커밋은 호출자가 한다. 버전 번호는
    ``1 + COALESCE(MAX(version_number), 0)``이고 부모 행을 잠근 채 계산한다.
    """
    (
        db.query(Question.question_id)
        .filter(Question.question_id == question.question_id)
        .with_for_update()
        .one()
    )
    current_max = (
        db.query(func.max(ContentVersion.version_number))
        .filter(ContentVersion.question_id == question.question_id)
        .scalar()
    )
    version_number = (current_max or 0) + 1

    row = ContentVersion(
        question_id=question.question_id,
        version_number=version_number,
        change_summary=change_summary,
        snapshot=json.dumps(question_snapshot(question), ensure_ascii=False),
        created_by=changed_by,
    )
    db.add(row)
    db.flush()
    return row


def list_versions(db: Session, question_id: int) -> List[ContentVersion]:
    return (
        db.query(ContentVersion)
        .filter(ContentVersion.question_id == question_id)
        .order_by(ContentVersion.version_number.desc())
        .all()
    )


def get_version(db: Session, question_id: int, version_number: int) -> ContentVersion:
    row = (
        db.query(ContentVersion)
        .filter(
            ContentVersion.question_id == question_id,
            ContentVersion.version_number == version_number,
        )
        .first()
    )
    if not row:
        raise NotFoundError(
            "버전 이력을 찾을 수 없습니다.",
            question_id=question_id,
            version_number=version_number,
        )
    return row


def parse_snapshot(row: ContentVersion) -> Dict[str, Any]:
    try:
        return json.loads(row.snapshot or "{}")
    except json.JSONDecodeError:
        logger.warning("[version] unreadable snapshot version_id=%s", row.version_id)
        return {}


def to_response(row: ContentVersion) -> Dict[str, Any]:
    return {
        "version_id": row.version_id,
        "question_id": row.question_id,
        "version_number": row.version_number,
        "change_summary": row.change_summary,
        "snapshot": parse_snapshot(row),
        "created_by": row.created_by,
        "created_at": row.created_at,
    }
