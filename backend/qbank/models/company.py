"""Company(테넌트) 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from qbank.database import Base


class Company(Base):
    __tablename__ = "company"

    company_id = Column(Integer, primary_key=True, autoincrement=True)
    owner_user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    company_name = Column(String(200), nullable=False)
    city = Column(String(100))
    country = Column(String(100))
    address = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    owner = relationship("User", back_populates="owned_companies")
    employees = relationship("Employee", back_populates="company")

    __table_args__ = (
        Index("idx_company_owner", "owner_user_id"),
    )
