"""역할/권한/상태/전이 규칙 참조 데이터의 프로세스 내 캐시입니다.

권한 검사마다 조회하지 않도록 최초 사용 시 한 번 적재하고, 관리자 편집(역할, 권한, 상태,
전이 규칙 변경) 직후 ``invalidate()``로 비웁니다.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple

from sqlalchemy.orm import Session

from qbank.models.question_status import QuestionStatus, StatusTransition
from qbank.models.role import Permission, Role, RolePermission
from qbank.utils.permissions import RoleKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusInfo:
    status_id: int
    name: str
    display_name: str
    is_active: bool
    is_default: bool


@dataclass(frozen=True)
class ReferenceSnapshot:
    # 역할 키는 모두 소문자 역할명
    role_permissions: Dict[str, FrozenSet[str]]
    role_kinds: Dict[str, RoleKind]
    role_ids: Dict[str, int]
    permission_names: FrozenSet[str]
    statuses: Dict[int, StatusInfo]
    status_ids: Dict[str, int]
    # from_status_id -> ((to_status_id, role_id), ...)
    transitions: Dict[int, Tuple[Tuple[int, int], ...]]

    def permissions_for_roles(self, role_names: Iterable[str]) -> FrozenSet[str]:
        held: Set[str] = set()
        for name in role_names:
            held |= self.role_permissions.get(str(name).lower(), frozenset())
        return frozenset(held)

    def role_ids_for(self, role_names: Iterable[str]) -> Set[int]:
        return {
            self.role_ids[str(name).lower()]
            for name in role_names
            if str(name).lower() in self.role_ids
        }

    def status(self, status_id: Optional[int]) -> Optional[StatusInfo]:
        if status_id is None:
            return None
        return self.statuses.get(status_id)

    def status_by_name(self, name: str) -> Optional[StatusInfo]:
        status_id = self.status_ids.get(name)
        return self.statuses.get(status_id) if status_id is not None else None

    def default_status(self) -> Optional[StatusInfo]:
        active = [s for s in self.statuses.values() if s.is_active]
        for status in sorted(active, key=lambda s: s.status_id):
            if status.is_default:
                return status
        return None

    def valid_targets(self, from_status_id: int, role_ids: Set[int]) -> Set[int]:
        targets: Set[int] = set()
        for to_status_id, role_id in self.transitions.get(from_status_id, ()):
            target = self.statuses.get(to_status_id)
            if role_id in role_ids and target is not None and target.is_active:
                targets.add(to_status_id)
        return targets


def _load(db: Session) -> ReferenceSnapshot:
    roles = db.query(Role).filter(Role.is_active == True).all()  # noqa: E712
    role_permissions: Dict[str, Set[str]] = {role.role_name.lower(): set() for role in roles}
    rows = (
        db.query(Role.role_name, Permission.permission_name)
        .join(RolePermission, RolePermission.role_id == Role.role_id)
        .join(Permission, Permission.permission_id == RolePermission.permission_id)
        .filter(Role.is_active == True)  # noqa: E712
        .all()
    )
    for role_name, permission_name in rows:
        role_permissions.setdefault(role_name.lower(), set()).add(permission_name)

    statuses = {
        row.status_id: StatusInfo(
            status_id=row.status_id,
            name=row.name,
            display_name=row.display_name,
            is_active=bool(row.is_active),
            is_default=bool(row.is_default),
        )
        for row in db.query(QuestionStatus).all()
    }

    transitions: Dict[int, list] = {}
    for rule in db.query(StatusTransition).filter(StatusTransition.is_active == True).all():  # noqa: E712
        transitions.setdefault(rule.from_status_id, []).append((rule.to_status_id, rule.role_id))

    return ReferenceSnapshot(
        role_permissions={name: frozenset(perms) for name, perms in role_permissions.items()},
        role_kinds={role.role_name.lower(): RoleKind(role.role_kind) for role in roles},
        role_ids={role.role_name.lower(): role.role_id for role in roles},
        permission_names=frozenset(name for (name,) in db.query(Permission.permission_name).all()),
        statuses=statuses,
        status_ids={info.name: status_id for status_id, info in statuses.items()},
        transitions={key: tuple(value) for key, value in transitions.items()},
    )


class ReferenceCache:
    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[ReferenceSnapshot] = None

    def get(self, db: Session) -> ReferenceSnapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                self._snapshot = _load(db)
                logger.info(
                    "[reference] loaded %d roles, %d statuses",
                    len(self._snapshot.role_ids),
                    len(self._snapshot.statuses),
                )
            return self._snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None


reference_cache = ReferenceCache()
