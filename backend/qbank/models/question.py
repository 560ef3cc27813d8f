"""Question(콘텐츠 레코드) 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from qbank.database import Base


class Question(Base):
    __tablename__ = "question"

    question_id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("company.company_id"), nullable=False)
    category_id = Column(Integer, ForeignKey("question_category.category_id"), nullable=True)
    question_type = Column(String(30), nullable=False)  # multiple_choice/true_false/short_answer/essay/...
    difficulty_level = Column(String(20), nullable=False, default="medium")  # easy/medium/hard
    question_text = Column(Text, nullable=False)
    explanation = Column(Text)
    status_id = Column(Integer, ForeignKey("question_status.status_id"), nullable=False)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    updated_by = Column(Integer, ForeignKey("users.user_id"))
    reviewed_by = Column(Integer, ForeignKey("users.user_id"))
    reviewed_at = Column(DateTime)
    published_at = Column(DateTime)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    status = relationship("QuestionStatus")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.option_order",
    )

    __table_args__ = (
        Index("idx_question_company_status", "company_id", "status_id"),
    )

    @property
    def status_name(self):
        return self.status.name if self.status else None


class QuestionOption(Base):
    __tablename__ = "question_option"

    option_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("question.question_id", ondelete="CASCADE"), nullable=False)
    option_text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    option_order = Column(Integer, nullable=False, default=1)

    question = relationship("Question", back_populates="options")
