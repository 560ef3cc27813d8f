"""문항 투표(투표 종류/투표/이력) SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from qbank.database import Base


class VoteType(Base):
    __tablename__ = "vote_type"

    vote_type_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(30), unique=True, nullable=False)  # upvote/downvote/favorite/report
    display_name = Column(String(50), nullable=False)
    description = Column(Text)
    score_impact = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


class Vote(Base):
    __tablename__ = "vote"

    vote_id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("question.question_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    vote_type_id = Column(Integer, ForeignKey("vote_type.vote_type_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    vote_type = relationship("VoteType")
    user = relationship("User")

    __table_args__ = (UniqueConstraint("question_id", "user_id", name="uq_vote_question_user"),)

    @property
    def vote_type_name(self):
        return self.vote_type.name if self.vote_type else None


class VoteHistory(Base):
    __tablename__ = "vote_history"

    history_id = Column(Integer, primary_key=True, autoincrement=True)
    # 투표가 삭제돼도 이력은 남으므로 FK를 두지 않는다.
    vote_id = Column(Integer, nullable=False)
    question_id = Column(Integer, ForeignKey("question.question_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    old_vote_type_id = Column(Integer, ForeignKey("vote_type.vote_type_id"), nullable=True)
    new_vote_type_id = Column(Integer, ForeignKey("vote_type.vote_type_id"), nullable=True)
    action = Column(String(20), nullable=False)  # added/updated/removed
    changed_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
