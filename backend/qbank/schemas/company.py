"""Company/Employee 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CompanyBase(BaseModel):
    company_name: str = Field(min_length=1, max_length=200)
    city: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(BaseModel):
    company_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    city: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None


class CompanyOut(CompanyBase):
    company_id: int
    owner_user_id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AccessDecisionOut(BaseModel):
    allowed: bool
    reason: str


class EmployeeCreate(BaseModel):
    user_id: int
    department: Optional[str] = None
    position: Optional[str] = None


class EmployeeUpdate(BaseModel):
    department: Optional[str] = None
    position: Optional[str] = None


class EmployeeOut(BaseModel):
    employee_id: int
    company_id: int
    user_id: int
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
