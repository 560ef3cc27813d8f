"""Question Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from qbank.config import settings
from qbank.database import transaction
from qbank.models.category import Category
from qbank.models.content_version import ContentVersion
from qbank.models.question import Question, QuestionOption
from qbank.models.question_status import QuestionStatus
from qbank.schemas.question import QuestionCreate, QuestionOptionIn, QuestionUpdate
from qbank.services import event_service, version_service
from qbank.services.access_service import require_company_access
from qbank.services.permission_service import require_permission
from qbank.services.reference_cache import reference_cache
from qbank.utils.errors import NotFoundError, ValidationError
from qbank.utils.permissions import (
    QUESTION_CREATE,
    QUESTION_DELETE,
    QUESTION_UPDATE,
    QUESTION_VIEW,
    Actor,
)

logger = logging.getLogger(__name__)


def load_question(db: Session, question_id: int, include_inactive: bool = False) -> Question:
    query = db.query(Question).filter(Question.question_id == question_id)
    if not include_inactive:
        query = query.filter(Question.is_active == True)  # noqa: E712
    question = query.first()
    if not question:
        raise NotFoundError("문항을 찾을 수 없습니다.", question_id=question_id)
    return question


def _require_category(db: Session, company_id: int, category_id: Optional[int]) -> None:
    if category_id is None:
        return
    exists = (
        db.query(Category.category_id)
        .filter(
            Category.category_id == category_id,
            Category.company_id == company_id,
            Category.is_active == True,  # noqa: E712
        )
        .first()
    )
    if not exists:
        raise NotFoundError("카테고리를 찾을 수 없습니다.", category_id=category_id)


def _build_options(options: List[QuestionOptionIn]) -> List[QuestionOption]:
    return [
        QuestionOption(
            option_text=option.option_text,
            is_correct=option.is_correct,
            option_order=option.option_order or index,
        )
        for index, option in enumerate(options, start=1)
    ]


def create_question(db: Session, data: QuestionCreate, actor: Actor) -> Question:
    require_company_access(db, actor, data.company_id)
    require_permission(db, actor, QUESTION_CREATE)
    _require_category(db, data.company_id, data.category_id)

    default_status = reference_cache.get(db).default_status()
    if default_status is None:
        raise NotFoundError("기본 문항 상태가 정의되어 있지 않습니다.")

    payload = data.model_dump(exclude={"options"})
    with transaction(db):
        question = Question(
            **payload,
            status_id=default_status.status_id,
            created_by=actor.user_id,
            updated_by=actor.user_id,
        )
        question.options = _build_options(data.options)
        db.add(question)
    db.refresh(question)
    logger.info("[question] created question=%s company=%s", question.question_id, question.company_id)
    return question


def get_question(db: Session, question_id: int, actor: Actor) -> Question:
    question = load_question(db, question_id)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, QUESTION_VIEW)
    return question


def list_questions(
    db: Session,
    actor: Actor,
    company_id: int,
    *,
    status_id: Optional[int] = None,
    status: Optional[str] = None,
    category_id: Optional[int] = None,
    question_type: Optional[str] = None,
    difficulty_level: Optional[str] = None,
    search: Optional[str] = None,
    created_by: Optional[int] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    require_company_access(db, actor, company_id)
    require_permission(db, actor, QUESTION_VIEW)

    query = db.query(Question).filter(
        Question.company_id == company_id,
        Question.is_active == True,  # noqa: E712
    )
    if status_id is not None:
        query = query.filter(Question.status_id == status_id)
    if status:
        query = query.join(QuestionStatus, QuestionStatus.status_id == Question.status_id).filter(
            QuestionStatus.name == status
        )
    if category_id is not None:
        query = query.filter(Question.category_id == category_id)
    if question_type:
        query = query.filter(Question.question_type == question_type)
    if difficulty_level:
        query = query.filter(Question.difficulty_level == difficulty_level)
    if created_by is not None:
        query = query.filter(Question.created_by == created_by)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Question.question_text.ilike(pattern), Question.explanation.ilike(pattern)))

    page = max(page, 1)
    page_size = min(max(page_size or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)
    total = query.count()
    items = (
        query.order_by(Question.created_at.desc(), Question.question_id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": items, "total": total, "page": page, "page_size": page_size}


def update_question(db: Session, question_id: int, data: QuestionUpdate, actor: Actor) -> Question:
    """수정 직전 상태를 버전으로 남기고 필드를 변경한다. 둘은 하나의 트랜잭션이다."""
    question = load_question(db, question_id)
    require_company_access(db, actor, question.company_id)
    # 작성자는 question:update 없이도 자기 문항을 수정할 수 있다.
    if question.created_by != actor.user_id:
        require_permission(db, actor, QUESTION_UPDATE)

    patch = data.model_dump(exclude_unset=True)
    change_summary = patch.pop("change_summary", None)
    patch.pop("options", None)
    if data.options is None and not patch:
        raise ValidationError("변경할 항목이 없습니다.", question_id=question_id)
    if "category_id" in patch:
        _require_category(db, question.company_id, patch["category_id"])
    for field in ("question_type", "difficulty_level", "question_text"):
        if field in patch and patch[field] is None:
            raise ValidationError(f"{field} 값은 비울 수 없습니다.", field=field)

    with transaction(db):
        version = version_service.snapshot_before_update(
            db,
            question,
            changed_by=actor.user_id,
            change_summary=change_summary,
        )
        for k, v in patch.items():
            setattr(question, k, v)
        if data.options is not None:
            question.options = _build_options(data.options)
        question.updated_by = actor.user_id
    db.refresh(question)
    logger.info("[question] question=%s updated, version=%s", question_id, version.version_number)
    event_service.emit(
        event_service.CONTENT_VERSIONED,
        {
            "question_id": question_id,
            "company_id": question.company_id,
            "version_number": version.version_number,
            "changed_by": actor.user_id,
        },
    )
    return question


def delete_question(db: Session, question_id: int, actor: Actor) -> bool:
    """상태 머신을 거치지 않는 소프트 삭제."""
    question = load_question(db, question_id)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, QUESTION_DELETE)
    with transaction(db):
        question.is_active = False
        question.updated_by = actor.user_id
    logger.info("[question] question=%s deactivated by user=%s", question_id, actor.user_id)
    return True


def _require_readable(db: Session, question_id: int, actor: Actor) -> Question:
    question = load_question(db, question_id, include_inactive=True)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, QUESTION_VIEW)
    return question


def get_versions(db: Session, question_id: int, actor: Actor) -> List[ContentVersion]:
    _require_readable(db, question_id, actor)
    return version_service.list_versions(db, question_id)


def get_version(db: Session, question_id: int, version_number: int, actor: Actor) -> ContentVersion:
    _require_readable(db, question_id, actor)
    return version_service.get_version(db, question_id, version_number)


def get_statistics(db: Session, company_id: int, actor: Actor) -> Dict[str, Any]:
    require_company_access(db, actor, company_id)
    require_permission(db, actor, QUESTION_VIEW)
    base = db.query(Question).filter(
        Question.company_id == company_id,
        Question.is_active == True,  # noqa: E712
    )

    by_status = dict(
        base.join(QuestionStatus, QuestionStatus.status_id == Question.status_id)
        .with_entities(QuestionStatus.name, func.count(Question.question_id))
        .group_by(QuestionStatus.name)
        .all()
    )
    by_type = dict(
        base.with_entities(Question.question_type, func.count(Question.question_id))
        .group_by(Question.question_type)
        .all()
    )
    by_difficulty = dict(
        base.with_entities(Question.difficulty_level, func.count(Question.question_id))
        .group_by(Question.difficulty_level)
        .all()
    )
    return {
        "company_id": company_id,
        "total": base.count(),
        "by_status": by_status,
        "by_type": by_type,
        "by_difficulty": by_difficulty,
    }
