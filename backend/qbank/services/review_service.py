"""Review Service 도메인 서비스 레이어입니다.

문항당 활성 리뷰는 하나뿐입니다. 생성 전 조회로 먼저 확인하고, 동시에 들어온 생성 요청은 부분
유니크 인덱스(uq_review_active_question)가 막아 ``ConflictError``로 돌려줍니다.
리뷰 상태 변경에는 역할별 전이 표가 없으며 ``review:update`` 권한만 있으면 어떤 상태로든 바꿀 수
있고, 변경마다 이력이 남습니다. 승인에 도달하면 같은 트랜잭션에서 문항을 게시 상태로 옮깁니다.
종료된 리뷰를 다시 여는 경우에도 같은 인덱스가 문항당 활성 리뷰 하나를 보장합니다.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qbank.config import settings
from qbank.database import transaction
from qbank.models.question import Question
from qbank.models.review import Review, ReviewAssignment, ReviewComment, ReviewHistory, ReviewStatus
from qbank.models.user import User
from qbank.schemas.review import ReviewCommentCreate, ReviewCreate
from qbank.services import event_service
from qbank.services.access_service import require_company_access
from qbank.services.permission_service import require_permission
from qbank.services.question_service import load_question
from qbank.services.reference_cache import reference_cache
from qbank.services.status_service import apply_status_change
from qbank.utils.errors import ConflictError, NotFoundError
from qbank.utils.permissions import (
    REVIEW_ASSIGN,
    REVIEW_COMMENT,
    REVIEW_CREATE,
    REVIEW_UPDATE,
    REVIEW_VIEW,
    Actor,
)

logger = logging.getLogger(__name__)

REVIEW_PENDING_STATUS_NAME = "pending"


def get_review_statuses(db: Session) -> List[ReviewStatus]:
    return (
        db.query(ReviewStatus)
        .filter(ReviewStatus.is_active == True)  # noqa: E712
        .order_by(ReviewStatus.status_id)
        .all()
    )


def _review_status_by_name(db: Session, name: str) -> ReviewStatus:
    row = db.query(ReviewStatus).filter(ReviewStatus.name == name, ReviewStatus.is_active == True).first()  # noqa: E712
    if not row:
        raise NotFoundError("리뷰 상태를 찾을 수 없습니다.", status_name=name)
    return row


def _load_review(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.review_id == review_id).first()
    if not review:
        raise NotFoundError("리뷰를 찾을 수 없습니다.", review_id=review_id)
    return review


def _require_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.user_id == user_id, User.is_active == True).first()  # noqa: E712
    if not user:
        raise NotFoundError("사용자를 찾을 수 없습니다.", user_id=user_id)
    return user


def _authorize(db: Session, review: Review, actor: Actor, permission: str) -> Question:
    question = load_question(db, review.question_id, include_inactive=True)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, permission)
    return question


def get_active_review(db: Session, question_id: int) -> Optional[Review]:
    return (
        db.query(Review)
        .filter(Review.question_id == question_id, Review.is_active == True)  # noqa: E712
        .first()
    )


def create_review(db: Session, question_id: int, actor: Actor, data: ReviewCreate) -> Review:
    question = load_question(db, question_id)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, REVIEW_CREATE)
    if data.assigned_to is not None:
        _require_user(db, data.assigned_to)

    existing = get_active_review(db, question_id)
    if existing:
        raise ConflictError(
            "이미 진행 중인 리뷰가 있습니다.",
            question_id=question_id,
            review_id=existing.review_id,
        )

    pending = _review_status_by_name(db, REVIEW_PENDING_STATUS_NAME)
    try:
        with transaction(db):
            review = Review(
                question_id=question_id,
                status_id=pending.status_id,
                created_by=actor.user_id,
                assigned_to=data.assigned_to,
                notes=data.notes,
                priority=data.priority or settings.REVIEW_DEFAULT_PRIORITY,
                due_date=data.due_date,
            )
            db.add(review)
            db.flush()
            db.add(
                ReviewHistory(
                    review_id=review.review_id,
                    status_id=pending.status_id,
                    changed_by=actor.user_id,
                    comments="Review created",
                )
            )
            if data.assigned_to is not None:
                db.add(
                    ReviewAssignment(
                        review_id=review.review_id,
                        user_id=data.assigned_to,
                        assigned_by=actor.user_id,
                    )
                )
    except IntegrityError as exc:
        logger.warning("[review] concurrent create rejected for question=%s", question_id)
        raise ConflictError("이미 진행 중인 리뷰가 있습니다.", question_id=question_id) from exc
    db.refresh(review)
    logger.info("[review] created review=%s for question=%s", review.review_id, question_id)
    return review


def update_review_status(
    db: Session,
    review_id: int,
    status_id: int,
    actor: Actor,
    comment: Optional[str] = None,
) -> Review:
    """리뷰 상태를 바꾸고 이력을 남긴다.

    승인 상태에 도달하면 연결된 문항을 게시 상태로 옮기고 문항 상태 이력도 함께 추가한다. 리뷰 변경,
    문항 변경, 두 이력은 한 번에 커밋되거나 모두 롤백된다. 승인/반려에 도달한 리뷰는 종료(비활성)된다.
    종료된 리뷰를 대기/진행 상태로 되돌리면 다시 활성화되며, 같은 문항에 다른 활성 리뷰가 있으면
    ``ConflictError``로 거부한다. 삭제된 문항은 승인되어도 게시하지 않는다.
    """
    review = _load_review(db, review_id)
    question = _authorize(db, review, actor, REVIEW_UPDATE)

    new_status = (
        db.query(ReviewStatus)
        .filter(ReviewStatus.status_id == status_id, ReviewStatus.is_active == True)  # noqa: E712
        .first()
    )
    if not new_status:
        raise NotFoundError("리뷰 상태를 찾을 수 없습니다.", status_id=status_id)

    closing = new_status.name in settings.REVIEW_CLOSED_STATUS_NAMES
    reopening = not review.is_active and not closing
    if reopening:
        other = get_active_review(db, review.question_id)
        if other is not None and other.review_id != review_id:
            raise ConflictError(
                "같은 문항에 진행 중인 다른 리뷰가 있어 다시 열 수 없습니다.",
                review_id=review_id,
                active_review_id=other.review_id,
            )

    approving = new_status.name == settings.REVIEW_APPROVED_STATUS_NAME
    publishing = approving and question.is_active
    if approving and not question.is_active:
        logger.info(
            "[review] question=%s is deleted; approval of review=%s skips publish",
            question.question_id,
            review_id,
        )
    published = None
    if publishing:
        published = reference_cache.get(db).status_by_name(settings.PUBLISHED_STATUS_NAME)
        if published is None or not published.is_active:
            raise NotFoundError("게시 상태가 정의되어 있지 않습니다.", status_name=settings.PUBLISHED_STATUS_NAME)

    status_history = None
    from_status_id = question.status_id
    try:
        with transaction(db):
            review.status_id = new_status.status_id
            review.updated_by = actor.user_id
            db.add(
                ReviewHistory(
                    review_id=review_id,
                    status_id=new_status.status_id,
                    changed_by=actor.user_id,
                    comments=comment,
                )
            )
            if closing:
                review.is_active = False
            elif reopening:
                review.is_active = True
                db.flush()
            if publishing and question.status_id != published.status_id:
                question = (
                    db.query(Question)
                    .filter(Question.question_id == question.question_id)
                    .with_for_update()
                    .populate_existing()
                    .one()
                )
                from_status_id = question.status_id
                status_history = apply_status_change(
                    db,
                    question,
                    published,
                    changed_by=actor.user_id,
                    comments=comment or f"Review #{review_id} approved",
                )
    except IntegrityError as exc:
        logger.warning("[review] concurrent reopen rejected for review=%s", review_id)
        raise ConflictError(
            "같은 문항에 진행 중인 다른 리뷰가 있어 다시 열 수 없습니다.",
            review_id=review_id,
        ) from exc
    db.refresh(review)
    logger.info("[review] review=%s -> %s by user=%s", review_id, new_status.name, actor.user_id)

    if status_history is not None:
        logger.info("[review] question=%s published by review=%s", question.question_id, review_id)
        event_service.emit(
            event_service.STATUS_CHANGED,
            {
                "question_id": question.question_id,
                "company_id": question.company_id,
                "from_status_id": from_status_id,
                "to_status_id": published.status_id,
                "to_status": published.name,
                "changed_by": actor.user_id,
                "review_id": review_id,
            },
        )
    return review


def add_comment(db: Session, review_id: int, actor: Actor, data: ReviewCommentCreate) -> ReviewComment:
    review = _load_review(db, review_id)
    _authorize(db, review, actor, REVIEW_COMMENT)
    with transaction(db):
        comment = ReviewComment(review_id=review_id, user_id=actor.user_id, comment_text=data.comment_text)
        db.add(comment)
    db.refresh(comment)
    return comment


def assign_review(db: Session, review_id: int, user_id: int, actor: Actor) -> Review:
    """이전 담당자 지정을 비활성화하고 새 담당자를 기록한다. 이력에는 상태 없이 남는다."""
    review = _load_review(db, review_id)
    _authorize(db, review, actor, REVIEW_ASSIGN)
    _require_user(db, user_id)

    with transaction(db):
        (
            db.query(ReviewAssignment)
            .filter(ReviewAssignment.review_id == review_id, ReviewAssignment.is_active == True)  # noqa: E712
            .update({ReviewAssignment.is_active: False}, synchronize_session=False)
        )
        db.add(ReviewAssignment(review_id=review_id, user_id=user_id, assigned_by=actor.user_id))
        review.assigned_to = user_id
        review.updated_by = actor.user_id
        db.add(
            ReviewHistory(
                review_id=review_id,
                status_id=None,
                changed_by=actor.user_id,
                comments=f"Assigned to user ID: {user_id}",
            )
        )
    db.refresh(review)
    logger.info("[review] review=%s assigned to user=%s", review_id, user_id)
    return review


def get_review(db: Session, review_id: int, actor: Actor) -> Review:
    review = _load_review(db, review_id)
    _authorize(db, review, actor, REVIEW_VIEW)
    return review


def list_reviews(
    db: Session,
    actor: Actor,
    company_id: int,
    *,
    status_id: Optional[int] = None,
    question_id: Optional[int] = None,
    assigned_to: Optional[int] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    require_company_access(db, actor, company_id)
    require_permission(db, actor, REVIEW_VIEW)

    query = (
        db.query(Review)
        .join(Question, Question.question_id == Review.question_id)
        .filter(Question.company_id == company_id)
    )
    if status_id is not None:
        query = query.filter(Review.status_id == status_id)
    if question_id is not None:
        query = query.filter(Review.question_id == question_id)
    if assigned_to is not None:
        query = query.filter(Review.assigned_to == assigned_to)
    if is_active is not None:
        query = query.filter(Review.is_active == is_active)

    page = max(page, 1)
    page_size = min(max(page_size or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)
    total = query.count()
    items = (
        query.order_by(Review.priority.desc(), Review.review_id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": items, "total": total, "page": page, "page_size": page_size}
