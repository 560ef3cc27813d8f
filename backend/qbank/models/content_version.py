"""문항 수정 직전 상태를 보존하는 불변 버전 스냅샷 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from qbank.database import Base


class ContentVersion(Base):
    __tablename__ = "content_version"

    version_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("question.question_id"), nullable=False)
    version_number = Column(Integer, nullable=False)
    change_summary = Column(String(255))
    snapshot = Column(Text, nullable=False)  # JSON string
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("question_id", "version_number", name="uq_content_version_number"),
    )
