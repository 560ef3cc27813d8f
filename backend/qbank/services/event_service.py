"""후속 알림 전달을 위한 프로세스 내 이벤트 훅입니다.

커밋이 끝난 뒤에만 emit 하며, 핸들러 실패는 로그만 남기고 핵심 트랜잭션에 영향을 주지 않습니다.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)

STATUS_CHANGED = "status:changed"
ROLE_ASSIGNED = "role:assigned"
CONTENT_VERSIONED = "content:versioned"

Handler = Callable[[str, Dict[str, Any]], None]

_handlers: DefaultDict[str, List[Handler]] = defaultdict(list)


def subscribe(event: str, handler: Handler) -> None:
    if handler not in _handlers[event]:
        _handlers[event].append(handler)


def unsubscribe(event: str, handler: Handler) -> None:
    if handler in _handlers.get(event, []):
        _handlers[event].remove(handler)


def clear_handlers() -> None:
    _handlers.clear()


def emit(event: str, payload: Dict[str, Any]) -> None:
    for handler in list(_handlers.get(event, [])):
        try:
            handler(event, dict(payload))
        except Exception as exc:
            logger.warning("[event] handler %r failed for %s: %s", handler, event, exc)
