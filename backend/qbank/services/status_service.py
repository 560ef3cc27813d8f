"""문항 상태 머신 서비스입니다.

상태 목록과 전이 그래프는 코드가 아니라 데이터입니다. ``(from_status, to_status, role)`` 규칙 행이
있는 간선만 해당 역할로 이동할 수 있고, 상태 변경과 이력 추가는 항상 같은 트랜잭션에서 커밋됩니다.
``archived -> draft``처럼 종료 상태로 보이는 곳에서의 이동도 규칙이 있으면 허용됩니다.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from qbank.config import settings
from qbank.database import transaction
from qbank.models.question import Question
from qbank.models.question_status import QuestionStatus, StatusHistory, StatusTransition
from qbank.models.role import Role
from qbank.schemas.status import QuestionStatusCreate, QuestionStatusUpdate, TransitionRuleCreate
from qbank.services import event_service
from qbank.services.access_service import require_company_access
from qbank.services.permission_service import require_permission
from qbank.services.question_service import load_question
from qbank.services.reference_cache import StatusInfo, reference_cache
from qbank.utils.errors import ConflictError, ForbiddenTransitionError, NotFoundError, ValidationError
from qbank.utils.permissions import QUESTION_CHANGE_STATUS, QUESTION_VIEW, STATUS_MANAGE, Actor

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    question: Question
    history: StatusHistory


def get_statuses(db: Session, include_inactive: bool = False) -> List[QuestionStatus]:
    query = db.query(QuestionStatus)
    if not include_inactive:
        query = query.filter(QuestionStatus.is_active == True)  # noqa: E712
    return query.order_by(QuestionStatus.status_id).all()


def get_status(db: Session, status_id: int) -> QuestionStatus:
    row = db.query(QuestionStatus).filter(QuestionStatus.status_id == status_id).first()
    if not row:
        raise NotFoundError("문항 상태를 찾을 수 없습니다.", status_id=status_id)
    return row


def _clear_other_defaults(db: Session, keep_status_id: int) -> None:
    (
        db.query(QuestionStatus)
        .filter(QuestionStatus.status_id != keep_status_id, QuestionStatus.is_default == True)  # noqa: E712
        .update({QuestionStatus.is_default: False}, synchronize_session=False)
    )


def create_status(db: Session, data: QuestionStatusCreate, actor: Actor) -> QuestionStatus:
    require_permission(db, actor, STATUS_MANAGE)
    if db.query(QuestionStatus).filter(QuestionStatus.name == data.name).first():
        raise ConflictError("이미 존재하는 상태명입니다.", name=data.name)
    with transaction(db):
        row = QuestionStatus(**data.model_dump())
        db.add(row)
        db.flush()
        if row.is_default:
            _clear_other_defaults(db, row.status_id)
    reference_cache.invalidate()
    db.refresh(row)
    logger.info("[status] created status=%s by user=%s", row.name, actor.user_id)
    return row


def update_status_definition(
    db: Session, status_id: int, data: QuestionStatusUpdate, actor: Actor
) -> QuestionStatus:
    require_permission(db, actor, STATUS_MANAGE)
    row = get_status(db, status_id)
    payload = data.model_dump(exclude_none=True)
    if payload.get("is_default") and payload.get("is_active") is False:
        raise ValidationError("비활성 상태를 기본 상태로 지정할 수 없습니다.", status_id=status_id)
    with transaction(db):
        for k, v in payload.items():
            setattr(row, k, v)
        if payload.get("is_default"):
            _clear_other_defaults(db, status_id)
    reference_cache.invalidate()
    db.refresh(row)
    return row


def list_transition_rules(
    db: Session,
    actor: Actor,
    role_id: Optional[int] = None,
    from_status_id: Optional[int] = None,
    include_inactive: bool = False,
) -> List[StatusTransition]:
    require_permission(db, actor, [STATUS_MANAGE, QUESTION_CHANGE_STATUS])
    query = db.query(StatusTransition)
    if role_id is not None:
        query = query.filter(StatusTransition.role_id == role_id)
    if from_status_id is not None:
        query = query.filter(StatusTransition.from_status_id == from_status_id)
    if not include_inactive:
        query = query.filter(StatusTransition.is_active == True)  # noqa: E712
    return query.order_by(StatusTransition.transition_id).all()


def create_transition_rule(db: Session, data: TransitionRuleCreate, actor: Actor) -> StatusTransition:
    require_permission(db, actor, STATUS_MANAGE)
    if data.from_status_id == data.to_status_id:
        raise ValidationError("같은 상태로의 전이 규칙은 만들 수 없습니다.", status_id=data.from_status_id)
    get_status(db, data.from_status_id)
    get_status(db, data.to_status_id)
    if not db.query(Role).filter(Role.role_id == data.role_id).first():
        raise NotFoundError("역할을 찾을 수 없습니다.", role_id=data.role_id)

    rule = (
        db.query(StatusTransition)
        .filter(
            StatusTransition.from_status_id == data.from_status_id,
            StatusTransition.to_status_id == data.to_status_id,
            StatusTransition.role_id == data.role_id,
        )
        .first()
    )
    if rule and rule.is_active:
        raise ConflictError("이미 존재하는 전이 규칙입니다.", transition_id=rule.transition_id)

    with transaction(db):
        if rule:
            rule.is_active = True
        else:
            rule = StatusTransition(**data.model_dump())
            db.add(rule)
    reference_cache.invalidate()
    db.refresh(rule)
    logger.info(
        "[status] rule %s -> %s enabled for role=%s",
        data.from_status_id,
        data.to_status_id,
        data.role_id,
    )
    return rule


def deactivate_transition_rule(db: Session, transition_id: int, actor: Actor) -> StatusTransition:
    require_permission(db, actor, STATUS_MANAGE)
    rule = db.query(StatusTransition).filter(StatusTransition.transition_id == transition_id).first()
    if not rule:
        raise NotFoundError("전이 규칙을 찾을 수 없습니다.", transition_id=transition_id)
    with transaction(db):
        rule.is_active = False
    reference_cache.invalidate()
    db.refresh(rule)
    return rule


def get_valid_transitions(db: Session, from_status_id: int, actor: Actor) -> List[StatusInfo]:
    """actor가 보유한 역할 중 하나라도 규칙이 있는 활성 목적 상태 목록."""
    snapshot = reference_cache.get(db)
    role_ids = snapshot.role_ids_for(actor.roles)
    targets = snapshot.valid_targets(from_status_id, role_ids)
    return sorted((snapshot.statuses[status_id] for status_id in targets), key=lambda s: s.status_id)


def get_question_transitions(db: Session, question_id: int, actor: Actor) -> List[StatusInfo]:
    question = load_question(db, question_id)
    require_company_access(db, actor, question.company_id)
    return get_valid_transitions(db, question.status_id, actor)


def apply_status_change(
    db: Session,
    question: Question,
    to_status: StatusInfo,
    *,
    changed_by: int,
    comments: Optional[str] = None,
) -> StatusHistory:
    """상태를 바꾸고 이력 한 건을 추가한다. 호출자의 트랜잭션 안에서만 사용한다."""
    from_status_id = question.status_id
    now = datetime.utcnow()
    question.status_id = to_status.status_id
    question.updated_by = changed_by
    if to_status.name == settings.PUBLISHED_STATUS_NAME:
        question.published_at = now
    elif to_status.name in settings.REVIEW_CLOSED_STATUS_NAMES:
        question.reviewed_by = changed_by
        question.reviewed_at = now

    history = StatusHistory(
        question_id=question.question_id,
        from_status_id=from_status_id,
        to_status_id=to_status.status_id,
        changed_by=changed_by,
        comments=comments,
    )
    db.add(history)
    db.flush()
    return history


def transition_status(
    db: Session,
    question_id: int,
    to_status_id: int,
    actor: Actor,
    comments: Optional[str] = None,
) -> TransitionResult:
    question = load_question(db, question_id)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, QUESTION_CHANGE_STATUS)

    snapshot = reference_cache.get(db)
    target = snapshot.status(to_status_id)
    if target is None:
        raise NotFoundError("문항 상태를 찾을 수 없습니다.", status_id=to_status_id)

    with transaction(db):
        question = (
            db.query(Question)
            .filter(Question.question_id == question_id)
            .with_for_update()
            .populate_existing()
            .one()
        )
        current = snapshot.status(question.status_id)
        valid = get_valid_transitions(db, question.status_id, actor)
        if to_status_id not in {status.status_id for status in valid}:
            logger.warning(
                "[status] user=%s denied %s -> %s on question=%s",
                actor.user_id,
                current.name if current else question.status_id,
                target.name,
                question_id,
            )
            raise ForbiddenTransitionError(
                current_status=current.name if current else None,
                requested_status=target.name,
                valid_transitions=[status.name for status in valid],
            )
        from_status_id = question.status_id
        history = apply_status_change(db, question, target, changed_by=actor.user_id, comments=comments)
    db.refresh(question)
    db.refresh(history)
    logger.info(
        "[status] question=%s %s -> %s by user=%s",
        question_id,
        current.name if current else from_status_id,
        target.name,
        actor.user_id,
    )
    event_service.emit(
        event_service.STATUS_CHANGED,
        {
            "question_id": question_id,
            "company_id": question.company_id,
            "from_status_id": from_status_id,
            "to_status_id": target.status_id,
            "to_status": target.name,
            "changed_by": actor.user_id,
        },
    )
    return TransitionResult(question=question, history=history)


def get_history(
    db: Session,
    question_id: int,
    actor: Actor,
    limit: int = 50,
    offset: int = 0,
) -> Dict[str, Any]:
    question = load_question(db, question_id, include_inactive=True)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, QUESTION_VIEW)

    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)
    offset = max(offset, 0)
    query = db.query(StatusHistory).filter(StatusHistory.question_id == question_id)
    total = query.count()
    items = (
        query.order_by(StatusHistory.created_at.asc(), StatusHistory.history_id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return {"items": items, "total": total, "limit": limit, "offset": offset}
