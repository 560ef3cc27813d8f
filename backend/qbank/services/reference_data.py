"""기본 권한, 역할, 상태(문항/리뷰), 전이 규칙과 투표 종류를 멱등적으로 적재합니다."""

import logging
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from qbank.models.question_status import QuestionStatus, StatusTransition
from qbank.models.review import ReviewStatus
from qbank.models.role import Permission, Role, RolePermission
from qbank.models.vote import VoteType
from qbank.services.reference_cache import reference_cache
from qbank.utils.permissions import PERMISSIONS, RoleKind, default_permissions_for

logger = logging.getLogger(__name__)

DEFAULT_ROLES: List[Tuple[str, RoleKind, str]] = [
    ("admin", RoleKind.ADMIN, "시스템 관리자"),
    ("company_admin", RoleKind.COMPANY_ADMIN, "회사 관리자"),
    ("hr_manager", RoleKind.HR_MANAGER, "인사 담당자"),
    ("editor", RoleKind.EDITOR, "문항 작성자"),
    ("reviewer", RoleKind.REVIEWER, "문항 검토자"),
]

# (name, display_name, is_default)
DEFAULT_QUESTION_STATUSES: List[Tuple[str, str, bool]] = [
    ("draft", "초안", True),
    ("pending_review", "검토 대기", False),
    ("approved", "승인", False),
    ("rejected", "반려", False),
    ("archived", "보관", False),
    ("published", "게시", False),
]

# 리뷰 상태 ID는 관례상 pending=1, in_progress=2, approved=3, rejected=4
DEFAULT_REVIEW_STATUSES: List[Tuple[int, str, str]] = [
    (1, "pending", "대기"),
    (2, "in_progress", "진행 중"),
    (3, "approved", "승인"),
    (4, "rejected", "반려"),
]

# (vote_type_id, name, display_name, score_impact)
DEFAULT_VOTE_TYPES: List[Tuple[int, str, str, int]] = [
    (1, "upvote", "추천", 1),
    (2, "downvote", "비추천", -1),
    (3, "favorite", "즐겨찾기", 0),
    (4, "report", "신고", 0),
]

ALL_EDGES: List[Tuple[str, str]] = [
    ("draft", "pending_review"),
    ("pending_review", "draft"),
    ("pending_review", "approved"),
    ("pending_review", "rejected"),
    ("rejected", "draft"),
    ("approved", "published"),
    ("approved", "archived"),
    ("published", "archived"),
    ("archived", "draft"),
]

DEFAULT_TRANSITIONS: Dict[str, List[Tuple[str, str]]] = {
    "admin": ALL_EDGES,
    "company_admin": ALL_EDGES,
    "editor": [("draft", "pending_review"), ("pending_review", "draft"), ("rejected", "draft")],
    "reviewer": [("pending_review", "approved"), ("pending_review", "rejected")],
}


def _ensure_permissions(db: Session) -> Dict[str, Permission]:
    existing = {p.permission_name: p for p in db.query(Permission).all()}
    for name, description in PERMISSIONS.items():
        if name not in existing:
            row = Permission(permission_name=name, description=description)
            db.add(row)
            existing[name] = row
    db.flush()
    return existing


def _ensure_roles(db: Session, permissions: Dict[str, Permission]) -> Dict[str, Role]:
    existing = {r.role_name: r for r in db.query(Role).all()}
    for name, kind, description in DEFAULT_ROLES:
        role = existing.get(name)
        if role is not None:
            continue
        role = Role(role_name=name, role_kind=kind.value, description=description)
        db.add(role)
        db.flush()
        for permission_name in default_permissions_for(kind):
            db.add(RolePermission(role_id=role.role_id, permission_id=permissions[permission_name].permission_id))
        existing[name] = role
    db.flush()
    return existing


def _ensure_statuses(db: Session) -> Dict[str, QuestionStatus]:
    existing = {s.name: s for s in db.query(QuestionStatus).all()}
    for name, display_name, is_default in DEFAULT_QUESTION_STATUSES:
        if name not in existing:
            row = QuestionStatus(name=name, display_name=display_name, is_default=is_default)
            db.add(row)
            existing[name] = row
    for status_id, name, display_name in DEFAULT_REVIEW_STATUSES:
        if db.query(ReviewStatus).filter(ReviewStatus.name == name).first() is None:
            db.add(ReviewStatus(status_id=status_id, name=name, display_name=display_name))
    db.flush()
    return existing


def _ensure_vote_types(db: Session) -> None:
    known = {name for (name,) in db.query(VoteType.name).all()}
    for vote_type_id, name, display_name, score_impact in DEFAULT_VOTE_TYPES:
        if name not in known:
            db.add(VoteType(vote_type_id=vote_type_id, name=name, display_name=display_name, score_impact=score_impact))
    db.flush()


def _ensure_transitions(db: Session, roles: Dict[str, Role], statuses: Dict[str, QuestionStatus]) -> None:
    existing = {
        (t.from_status_id, t.to_status_id, t.role_id)
        for t in db.query(StatusTransition).all()
    }
    for role_name, edges in DEFAULT_TRANSITIONS.items():
        role = roles.get(role_name)
        if role is None:
            continue
        for from_name, to_name in edges:
            key = (statuses[from_name].status_id, statuses[to_name].status_id, role.role_id)
            if key in existing:
                continue
            db.add(StatusTransition(from_status_id=key[0], to_status_id=key[1], role_id=key[2]))
            existing.add(key)


def seed_reference_data(db: Session) -> None:
    permissions = _ensure_permissions(db)
    roles = _ensure_roles(db, permissions)
    statuses = _ensure_statuses(db)
    _ensure_transitions(db, roles, statuses)
    _ensure_vote_types(db)
    db.commit()
    reference_cache.invalidate()
    logger.info("[reference] default roles, permissions, statuses and vote types ensured")
