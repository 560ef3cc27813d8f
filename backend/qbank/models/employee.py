"""Employee(회사-사용자 소속) 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from qbank.database import Base


class Employee(Base):
    __tablename__ = "employee"

    employee_id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("company.company_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    department = Column(String(100))
    position = Column(String(100))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    company = relationship("Company", back_populates="employees")
    user = relationship("User", back_populates="employments")
    role_links = relationship("EmployeeRole", back_populates="employee")

    __table_args__ = (
        UniqueConstraint("company_id", "user_id", name="uq_employee_company_user"),
    )

    @property
    def user_email(self):
        return self.user.email if self.user else None

    @property
    def user_name(self):
        return self.user.name if self.user else None
