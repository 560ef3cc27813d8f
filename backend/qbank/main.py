"""FastAPI 애플리케이션 진입점. 로깅, 미들웨어, API 라우터, 기동 시 스키마/참조 데이터 준비를 등록합니다."""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from qbank.config import settings
from qbank.database import Base, SessionLocal, engine
import qbank.models  # noqa: F401 - 모델 import로 metadata 등록
from qbank.routers import (
    auth, companies, employee_roles, roles, categories, questions, question_statuses, reviews, votes,
)
from qbank.services.reference_cache import reference_cache
from qbank.services.reference_data import seed_reference_data

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Question Bank API",
    description="멀티테넌트 문항 은행: 권한 해석, 버전 관리, 역할 기반 상태 전이와 리뷰 워크플로, 문항 투표",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(companies.router)
app.include_router(employee_roles.router)
app.include_router(roles.router)
app.include_router(categories.router)
app.include_router(questions.router)
app.include_router(question_statuses.router)
app.include_router(reviews.router)
app.include_router(votes.router)


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if settings.SEED_REFERENCE_DATA:
            seed_reference_data(db)
        # 첫 요청 전에 역할/권한/전이 규칙을 미리 적재한다.
        reference_cache.get(db)
    finally:
        db.close()
    logger.info("[startup] schema ready")


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Question Bank API"}
