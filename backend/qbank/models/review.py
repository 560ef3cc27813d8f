"""리뷰 워크플로(리뷰/상태/이력/코멘트/담당자 지정) SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from qbank.database import Base


class ReviewStatus(Base):
    __tablename__ = "review_status"

    status_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(30), unique=True, nullable=False)  # pending/in_progress/approved/rejected
    display_name = Column(String(50), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class Review(Base):
    __tablename__ = "review"

    review_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("question.question_id"), nullable=False)
    status_id = Column(Integer, ForeignKey("review_status.status_id"), nullable=False)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    assigned_to = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    notes = Column(Text)
    priority = Column(Integer, nullable=False, default=2)  # 1: low, 2: medium, 3: high
    due_date = Column(DateTime)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    status = relationship("ReviewStatus")
    question = relationship("Question")
    history = relationship("ReviewHistory", order_by="ReviewHistory.history_id", back_populates="review")
    comments = relationship("ReviewComment", order_by="ReviewComment.comment_id", back_populates="review")
    assignments = relationship(
        "ReviewAssignment",
        order_by="ReviewAssignment.assignment_id.desc()",
        back_populates="review",
    )

    __table_args__ = (
        # 문항당 활성 리뷰는 하나뿐이다. 동시 생성 경쟁은 이 인덱스가 막는다.
        Index(
            "uq_review_active_question",
            "question_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    @property
    def status_name(self):
        return self.status.name if self.status else None


class ReviewHistory(Base):
    __tablename__ = "review_history"

    history_id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(Integer, ForeignKey("review.review_id"), nullable=False)
    status_id = Column(Integer, ForeignKey("review_status.status_id"), nullable=True)  # 담당자 지정 기록은 NULL
    changed_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    comments = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    review = relationship("Review", back_populates="history")


class ReviewComment(Base):
    __tablename__ = "review_comment"

    comment_id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(Integer, ForeignKey("review.review_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    comment_text = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    review = relationship("Review", back_populates="comments")


class ReviewAssignment(Base):
    __tablename__ = "review_assignment"

    assignment_id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(Integer, ForeignKey("review.review_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    assigned_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    assigned_at = Column(DateTime, server_default=func.now())

    review = relationship("Review", back_populates="assignments")
