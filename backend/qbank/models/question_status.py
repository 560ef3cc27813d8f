"""문항 상태 정의, 역할별 전이 규칙, 상태 변경 이력 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from qbank.database import Base


class QuestionStatus(Base):
    __tablename__ = "question_status"

    status_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(30), unique=True, nullable=False)
    display_name = Column(String(50), nullable=False)
    description = Column(String(255))
    is_active = Column(Boolean, nullable=False, default=True)
    is_default = Column(Boolean, nullable=False, default=False)


class StatusTransition(Base):
    __tablename__ = "question_status_transition"

    transition_id = Column(Integer, primary_key=True, autoincrement=True)
    from_status_id = Column(Integer, ForeignKey("question_status.status_id"), nullable=False)
    to_status_id = Column(Integer, ForeignKey("question_status.status_id"), nullable=False)
    role_id = Column(Integer, ForeignKey("role.role_id", ondelete="CASCADE"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())

    from_status = relationship("QuestionStatus", foreign_keys=[from_status_id])
    to_status = relationship("QuestionStatus", foreign_keys=[to_status_id])
    role = relationship("Role")

    __table_args__ = (
        UniqueConstraint("from_status_id", "to_status_id", "role_id", name="uq_status_transition"),
    )

    @property
    def from_status_name(self):
        return self.from_status.name if self.from_status else None

    @property
    def to_status_name(self):
        return self.to_status.name if self.to_status else None

    @property
    def role_name(self):
        return self.role.role_name if self.role else None


class StatusHistory(Base):
    __tablename__ = "question_status_history"

    history_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("question.question_id"), nullable=False)
    from_status_id = Column(Integer, ForeignKey("question_status.status_id"), nullable=True)
    to_status_id = Column(Integer, ForeignKey("question_status.status_id"), nullable=False)
    changed_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    comments = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    from_status = relationship("QuestionStatus", foreign_keys=[from_status_id])
    to_status = relationship("QuestionStatus", foreign_keys=[to_status_id])

    __table_args__ = (
        Index("idx_status_history_question", "question_id", "created_at"),
    )

    @property
    def from_status_name(self):
        return self.from_status.name if self.from_status else None

    @property
    def to_status_name(self):
        return self.to_status.name if self.to_status else None
