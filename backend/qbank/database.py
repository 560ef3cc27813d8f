"""SQLAlchemy 엔진/세션/트랜잭션 경계를 제공합니다."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from qbank.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """블록 전체를 하나의 커밋 단위로 묶는다. 예외 발생 시 전부 롤백한다."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
