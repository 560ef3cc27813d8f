"""역할 종류(RoleKind)와 권한 카탈로그, 역할별 기본 권한 매핑입니다."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


class RoleKind(str, Enum):
    ADMIN = "admin"
    COMPANY_ADMIN = "company_admin"
    HR_MANAGER = "hr_manager"
    EDITOR = "editor"
    REVIEWER = "reviewer"
    CUSTOM = "custom"

    @classmethod
    def from_role_name(cls, role_name: Optional[str]) -> "RoleKind":
        # 예약된 역할명만 대소문자 구분 없이 종류로 매핑하고, 나머지는 custom
        text = str(role_name or "").strip().lower()
        for kind in cls:
            if kind is not cls.CUSTOM and kind.value == text:
                return kind
        return cls.CUSTOM


# Company
COMPANY_VIEW = "company:view"
COMPANY_UPDATE = "company:update"
# Employee
EMPLOYEE_VIEW = "employee:view"
EMPLOYEE_MANAGE = "employee:manage"
# Role
ROLE_VIEW = "role:view"
ROLE_ASSIGN = "role:assign"
ROLE_MANAGE = "role:manage"
# Category
CATEGORY_VIEW = "category:view"
CATEGORY_CREATE = "category:create"
CATEGORY_DELETE = "category:delete"
# Question
QUESTION_VIEW = "question:view"
QUESTION_CREATE = "question:create"
QUESTION_UPDATE = "question:update"
QUESTION_DELETE = "question:delete"
QUESTION_CHANGE_STATUS = "question:change_status"
# Review
REVIEW_VIEW = "review:view"
REVIEW_CREATE = "review:create"
REVIEW_UPDATE = "review:update"
REVIEW_COMMENT = "review:comment"
REVIEW_ASSIGN = "review:assign"
# Vote
VOTE_READ = "vote:read"
VOTE_CREATE = "vote:create"
VOTE_DELETE = "vote:delete"
# Status definitions / transition rules
STATUS_MANAGE = "status:manage"

PERMISSIONS: Dict[str, str] = {
    COMPANY_VIEW: "회사 정보 조회",
    COMPANY_UPDATE: "회사 정보 수정",
    EMPLOYEE_VIEW: "직원 목록 조회",
    EMPLOYEE_MANAGE: "직원 추가/제거",
    ROLE_VIEW: "직원 역할 조회",
    ROLE_ASSIGN: "직원 역할 부여/회수",
    ROLE_MANAGE: "역할/권한 정의 관리",
    CATEGORY_VIEW: "카테고리 조회",
    CATEGORY_CREATE: "카테고리 생성",
    CATEGORY_DELETE: "카테고리 삭제",
    QUESTION_VIEW: "문항 조회",
    QUESTION_CREATE: "문항 작성",
    QUESTION_UPDATE: "문항 수정",
    QUESTION_DELETE: "문항 삭제",
    QUESTION_CHANGE_STATUS: "문항 상태 변경",
    REVIEW_VIEW: "리뷰 조회",
    REVIEW_CREATE: "리뷰 생성",
    REVIEW_UPDATE: "리뷰 상태 변경",
    REVIEW_COMMENT: "리뷰 코멘트 작성",
    REVIEW_ASSIGN: "리뷰 담당자 지정",
    VOTE_READ: "투표 조회",
    VOTE_CREATE: "투표 등록/변경",
    VOTE_DELETE: "투표 취소",
    STATUS_MANAGE: "문항 상태/전이 규칙 관리",
}

ALL_PERMISSIONS: FrozenSet[str] = frozenset(PERMISSIONS)

_CONTENT_READ = (COMPANY_VIEW, CATEGORY_VIEW, QUESTION_VIEW, REVIEW_VIEW, VOTE_READ)

# 역할 종류별 기본 권한. admin은 검사 자체를 우회하므로 목록은 표시용이다.
DEFAULT_ROLE_PERMISSIONS: Dict[RoleKind, Tuple[str, ...]] = {
    RoleKind.ADMIN: tuple(sorted(ALL_PERMISSIONS)),
    RoleKind.COMPANY_ADMIN: tuple(sorted(ALL_PERMISSIONS - {ROLE_MANAGE, STATUS_MANAGE})),
    RoleKind.HR_MANAGER: (COMPANY_VIEW, EMPLOYEE_VIEW, ROLE_VIEW),
    RoleKind.EDITOR: (
        *_CONTENT_READ,
        CATEGORY_CREATE,
        QUESTION_CREATE,
        QUESTION_UPDATE,
        QUESTION_DELETE,
        QUESTION_CHANGE_STATUS,
        REVIEW_CREATE,
        REVIEW_COMMENT,
        VOTE_CREATE,
        VOTE_DELETE,
    ),
    RoleKind.REVIEWER: (
        *_CONTENT_READ,
        QUESTION_CHANGE_STATUS,
        REVIEW_UPDATE,
        REVIEW_COMMENT,
        REVIEW_ASSIGN,
        VOTE_CREATE,
        VOTE_DELETE,
    ),
    RoleKind.CUSTOM: (),
}


def default_permissions_for(kind: RoleKind) -> Tuple[str, ...]:
    return DEFAULT_ROLE_PERMISSIONS.get(kind, ())


@dataclass(frozen=True)
class Actor:
    """요청마다 새로 구성되는 인증된 호출자 정보입니다."""

    user_id: int
    roles: Tuple[str, ...] = ()
    is_system_admin: bool = False
    role_kinds: FrozenSet[RoleKind] = field(default_factory=frozenset)

    def has_kind(self, kind: RoleKind) -> bool:
        return kind in self.role_kinds


def make_actor(user_id: int, roles: List[str], kinds: Dict[str, RoleKind]) -> Actor:
    """역할명 목록과 역할명→종류 매핑으로 Actor를 만든다."""
    unique_roles = tuple(dict.fromkeys(r for r in roles if r))
    role_kinds = frozenset(
        kinds.get(name.lower(), RoleKind.from_role_name(name)) for name in unique_roles
    )
    return Actor(
        user_id=user_id,
        roles=unique_roles,
        is_system_admin=RoleKind.ADMIN in role_kinds,
        role_kinds=role_kinds,
    )
