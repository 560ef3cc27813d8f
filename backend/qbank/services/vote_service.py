"""Vote Service 도메인 서비스 레이어입니다.

사용자는 문항마다 투표를 하나만 가집니다. 같은 종류로 다시 투표하면 취소되고, 다른 종류로 투표하면
기존 투표가 바뀝니다. 등록/변경/취소는 모두 ``VoteHistory``에 남습니다. 투표 요약의 점수는 종류별
``score_impact``에 투표 수를 곱한 합입니다.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qbank.config import settings
from qbank.database import transaction
from qbank.models.question import Question
from qbank.models.user import User
from qbank.models.vote import Vote, VoteHistory, VoteType
from qbank.services.access_service import require_company_access
from qbank.services.permission_service import require_permission
from qbank.services.question_service import load_question
from qbank.utils.errors import ConflictError, ForbiddenError, NotFoundError
from qbank.utils.permissions import VOTE_CREATE, VOTE_DELETE, VOTE_READ, Actor

logger = logging.getLogger(__name__)

ACTION_ADDED = "added"
ACTION_UPDATED = "updated"
ACTION_REMOVED = "removed"


def _paginate(query, page: int, page_size: Optional[int], *order_by) -> Dict[str, Any]:
    page = max(page, 1)
    page_size = min(max(page_size or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)
    total = query.count()
    items = query.order_by(*order_by).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


def _readable_question(db: Session, question_id: int, actor: Actor, permission: str) -> Question:
    question = load_question(db, question_id)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, permission)
    return question


def _load_vote_type(db: Session, vote_type_id: int) -> VoteType:
    vote_type = (
        db.query(VoteType)
        .filter(VoteType.vote_type_id == vote_type_id, VoteType.is_active == True)  # noqa: E712
        .first()
    )
    if not vote_type:
        raise NotFoundError("투표 종류를 찾을 수 없습니다.", vote_type_id=vote_type_id)
    return vote_type


def _active_vote_types(db: Session) -> List[VoteType]:
    return (
        db.query(VoteType)
        .filter(VoteType.is_active == True)  # noqa: E712
        .order_by(VoteType.vote_type_id)
        .all()
    )


def get_vote_types(db: Session, actor: Actor) -> List[VoteType]:
    require_permission(db, actor, VOTE_READ)
    return _active_vote_types(db)


def get_user_vote(db: Session, question_id: int, user_id: int) -> Optional[Vote]:
    return db.query(Vote).filter(Vote.question_id == question_id, Vote.user_id == user_id).first()


def cast_vote(db: Session, question_id: int, vote_type_id: int, actor: Actor) -> Dict[str, Any]:
    """투표를 등록하거나 바꾼다. 같은 종류로 다시 투표하면 취소한다.

    반환값은 ``{"action": added|updated|removed, "vote": Vote | None}``.
    """
    _readable_question(db, question_id, actor, VOTE_CREATE)
    vote_type = _load_vote_type(db, vote_type_id)

    existing = get_user_vote(db, question_id, actor.user_id)
    if existing is not None and existing.vote_type_id == vote_type.vote_type_id:
        _delete_vote(db, existing, actor)
        return {"action": ACTION_REMOVED, "vote": None}

    try:
        with transaction(db):
            if existing is None:
                vote = Vote(question_id=question_id, user_id=actor.user_id, vote_type_id=vote_type.vote_type_id)
                db.add(vote)
                db.flush()
                old_vote_type_id = None
                action = ACTION_ADDED
            else:
                vote = existing
                old_vote_type_id = vote.vote_type_id
                vote.vote_type_id = vote_type.vote_type_id
                action = ACTION_UPDATED
            db.add(
                VoteHistory(
                    vote_id=vote.vote_id,
                    question_id=question_id,
                    user_id=actor.user_id,
                    old_vote_type_id=old_vote_type_id,
                    new_vote_type_id=vote_type.vote_type_id,
                    action=action,
                    changed_by=actor.user_id,
                )
            )
    except IntegrityError as exc:
        logger.warning("[vote] concurrent vote rejected for question=%s user=%s", question_id, actor.user_id)
        raise ConflictError("이미 이 문항에 투표했습니다.", question_id=question_id) from exc
    db.refresh(vote)
    logger.info("[vote] question=%s %s %s by user=%s", question_id, vote_type.name, action, actor.user_id)
    return {"action": action, "vote": vote}


def _delete_vote(db: Session, vote: Vote, actor: Actor) -> None:
    vote_id, question_id = vote.vote_id, vote.question_id
    with transaction(db):
        db.add(
            VoteHistory(
                vote_id=vote.vote_id,
                question_id=vote.question_id,
                user_id=vote.user_id,
                old_vote_type_id=vote.vote_type_id,
                new_vote_type_id=None,
                action=ACTION_REMOVED,
                changed_by=actor.user_id,
            )
        )
        db.delete(vote)
    logger.info("[vote] vote=%s on question=%s removed by user=%s", vote_id, question_id, actor.user_id)


def remove_vote(db: Session, vote_id: int, actor: Actor) -> bool:
    """본인 투표만 취소할 수 있다. 시스템 관리자는 예외."""
    vote = db.query(Vote).filter(Vote.vote_id == vote_id).first()
    if not vote:
        raise NotFoundError("투표를 찾을 수 없습니다.", vote_id=vote_id)
    question = load_question(db, vote.question_id, include_inactive=True)
    require_company_access(db, actor, question.company_id)
    require_permission(db, actor, VOTE_DELETE)
    if vote.user_id != actor.user_id and not actor.is_system_admin:
        raise ForbiddenError("본인의 투표만 취소할 수 있습니다.", vote_id=vote_id)
    _delete_vote(db, vote, actor)
    return True


def list_votes(
    db: Session,
    question_id: int,
    actor: Actor,
    *,
    vote_type_id: Optional[int] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    _readable_question(db, question_id, actor, VOTE_READ)
    query = db.query(Vote).filter(Vote.question_id == question_id)
    if vote_type_id is not None:
        query = query.filter(Vote.vote_type_id == vote_type_id)
    return _paginate(query, page, page_size, Vote.created_at.desc(), Vote.vote_id.desc())


def get_vote_summary(db: Session, question_id: int, actor: Actor) -> Dict[str, Any]:
    """활성 투표 종류마다 투표 수와 투표자 이메일, 총점, 호출자의 투표를 돌려준다."""
    _readable_question(db, question_id, actor, VOTE_READ)

    counts = dict(
        db.query(Vote.vote_type_id, func.count(Vote.vote_id))
        .filter(Vote.question_id == question_id)
        .group_by(Vote.vote_type_id)
        .all()
    )
    voters: Dict[int, List[str]] = {}
    rows = (
        db.query(Vote.vote_type_id, User.email)
        .join(User, User.user_id == Vote.user_id)
        .filter(Vote.question_id == question_id)
        .order_by(Vote.vote_id)
        .all()
    )
    for vote_type_id, email in rows:
        voters.setdefault(vote_type_id, []).append(email)

    types = []
    total_score = 0
    for vote_type in _active_vote_types(db):
        count = counts.get(vote_type.vote_type_id, 0)
        total_score += count * vote_type.score_impact
        types.append(
            {
                "vote_type_id": vote_type.vote_type_id,
                "name": vote_type.name,
                "display_name": vote_type.display_name,
                "count": count,
                "users": voters.get(vote_type.vote_type_id, []),
            }
        )

    return {
        "question_id": question_id,
        "total_score": total_score,
        "types": types,
        "user_vote": get_user_vote(db, question_id, actor.user_id),
    }


def get_my_votes(
    db: Session,
    actor: Actor,
    company_id: int,
    *,
    vote_type_id: Optional[int] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    """호출자의 투표 중 해당 회사 문항에 대한 것만 돌려준다."""
    require_company_access(db, actor, company_id)
    require_permission(db, actor, VOTE_READ)
    query = (
        db.query(Vote)
        .join(Question, Question.question_id == Vote.question_id)
        .filter(Vote.user_id == actor.user_id, Question.company_id == company_id)
    )
    if vote_type_id is not None:
        query = query.filter(Vote.vote_type_id == vote_type_id)
    return _paginate(query, page, page_size, Vote.created_at.desc(), Vote.vote_id.desc())


def get_vote_history(
    db: Session,
    question_id: int,
    actor: Actor,
    *,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    _readable_question(db, question_id, actor, VOTE_READ)
    query = db.query(VoteHistory).filter(VoteHistory.question_id == question_id)
    return _paginate(query, page, page_size, VoteHistory.history_id.desc())
