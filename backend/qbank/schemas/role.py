"""역할/권한 및 직원-역할 부여 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from qbank.utils.permissions import RoleKind


class PermissionCreate(BaseModel):
    permission_name: str = Field(min_length=3, max_length=100, pattern=r"^[a-z_]+:[a-z_]+$")
    description: Optional[str] = None


class PermissionOut(BaseModel):
    permission_id: int
    permission_name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class RoleCreate(BaseModel):
    role_name: str = Field(min_length=1, max_length=50)
    role_kind: Optional[RoleKind] = None
    description: Optional[str] = None
    # None이면 역할 종류의 기본 권한을 연결한다.
    permission_names: Optional[List[str]] = None


class RoleUpdate(BaseModel):
    description: Optional[str] = None
    is_active: Optional[bool] = None


class RoleOut(BaseModel):
    role_id: int
    role_name: str
    role_kind: str
    description: Optional[str] = None
    is_active: bool
    permissions: List[str] = []


class RoleGrantRequest(BaseModel):
    permission_name: str


class RoleAssignRequest(BaseModel):
    role_id: int


class EmployeeRoleOut(BaseModel):
    employee_role_id: int
    employee_id: int
    role_id: int
    role_name: Optional[str] = None
    role_kind: Optional[str] = None
    assigned_by: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EmployeeWithRolesOut(BaseModel):
    employee_id: int
    user_id: int
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    roles: List[EmployeeRoleOut] = []
