"""서비스 레이어 패키지 초기화 모듈입니다."""

from qbank.services import (
    event_service,
    reference_cache,
    reference_data,
    permission_service,
    access_service,
    auth_service,
    company_service,
    employee_service,
    employee_role_service,
    role_service,
    category_service,
    version_service,
    question_service,
    status_service,
    review_service,
    vote_service,
)
