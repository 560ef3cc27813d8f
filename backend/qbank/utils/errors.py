"""도메인 오류 분류 체계입니다.

모든 오류는 ``HTTPException`` 하위 클래스이므로 서비스 레이어에서 그대로 raise 하면
FastAPI가 상태 코드와 구조화된 ``detail`` 본문으로 응답합니다. ``detail``은 항상
``{"code": ..., "message": ..., **details}`` 형태입니다.
"""

from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status


class DomainError(HTTPException):
    code = "INTERNAL_ERROR"
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details: Dict[str, Any] = details
        super().__init__(
            status_code=self.status_code_default,
            detail={"code": self.code, "message": message, **details},
        )


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code_default = status.HTTP_404_NOT_FOUND


class ForbiddenError(DomainError):
    code = "FORBIDDEN"
    status_code_default = status.HTTP_403_FORBIDDEN


class ForbiddenTransitionError(DomainError):
    """권한은 있으나 현재 상태에서 요청한 전이가 허용되지 않는 경우."""

    code = "FORBIDDEN_TRANSITION"
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        *,
        current_status: Optional[str],
        requested_status: Optional[str],
        valid_transitions: Iterable[str],
        message: Optional[str] = None,
    ):
        valid: List[str] = sorted(set(valid_transitions))
        super().__init__(
            message or f"'{current_status}' 상태에서 '{requested_status}' 상태로 전이할 권한이 없습니다.",
            current_status=current_status,
            requested_status=requested_status,
            valid_transitions=valid,
        )


class ConflictError(DomainError):
    code = "CONFLICT"
    status_code_default = status.HTTP_409_CONFLICT


class ValidationError(DomainError):
    code = "VALIDATION_ERROR"
    status_code_default = status.HTTP_400_BAD_REQUEST
