"""역할-권한 해석기 동작을 검증하는 자동화 테스트입니다."""

import pytest

from qbank.models.company import Company
from qbank.models.employee import Employee
from qbank.models.role import EmployeeRole
from qbank.schemas.company import CompanyCreate, EmployeeCreate
from qbank.services import company_service, employee_role_service, employee_service, role_service
from qbank.services.permission_service import has_permission, require_permission, resolve_permissions
from qbank.utils.errors import ForbiddenError
from qbank.utils.permissions import (
    CATEGORY_CREATE,
    QUESTION_CREATE,
    REVIEW_UPDATE,
    ROLE_MANAGE,
    Actor,
    RoleKind,
    make_actor,
)
from tests.conftest import actor_for


def test_role_kind_maps_reserved_names_case_insensitively():
    assert RoleKind.from_role_name("Company_Admin") is RoleKind.COMPANY_ADMIN
    assert RoleKind.from_role_name("ADMIN") is RoleKind.ADMIN
    assert RoleKind.from_role_name("content-lead") is RoleKind.CUSTOM
    assert RoleKind.from_role_name(None) is RoleKind.CUSTOM


def test_make_actor_detects_admin_regardless_of_case():
    actor = make_actor(7, ["Admin", "editor", "editor"], {})
    assert actor.is_system_admin
    assert actor.roles == ("Admin", "editor")


def test_admin_short_circuits_to_universal_set(db, seed_users):
    admin = actor_for(db, seed_users["admin"])
    held = resolve_permissions(db, admin)
    assert held.universal
    assert "anything:at_all" in held
    assert has_permission(db, admin, [ROLE_MANAGE, "custom:thing"], require_all=True).allowed


def test_empty_role_set_fails_closed(db, reference):
    nobody = Actor(user_id=999)
    assert resolve_permissions(db, nobody) == frozenset()
    check = has_permission(db, nobody, CATEGORY_CREATE)
    assert not check.allowed
    assert check.held == ()


def test_require_permission_reports_required_and_held(db, seed_users, seed_company):
    hr = actor_for(db, seed_users["hr"])
    with pytest.raises(ForbiddenError) as exc:
        require_permission(db, hr, [QUESTION_CREATE, CATEGORY_CREATE])
    detail = exc.value.detail
    assert exc.value.status_code == 403
    assert detail["code"] == "FORBIDDEN"
    assert detail["required_permissions"] == [QUESTION_CREATE, CATEGORY_CREATE]
    assert "employee:view" in detail["held_permissions"]
    assert detail["require_all"] is False


def test_require_all_needs_every_permission(db, seed_users, seed_company):
    editor = actor_for(db, seed_users["editor"])
    assert has_permission(db, editor, [QUESTION_CREATE, REVIEW_UPDATE]).allowed
    assert not has_permission(db, editor, [QUESTION_CREATE, REVIEW_UPDATE], require_all=True).allowed


def test_permissions_union_across_companies(db, reference, seed_users, seed_company):
    # editor in Acme, reviewer in a second company
    other_owner = actor_for(db, seed_users["outsider"])
    other = company_service.create_company(db, CompanyCreate(company_name="Other"), other_owner)
    other_owner = actor_for(db, seed_users["outsider"])
    employee = employee_service.add_employee(
        db, other.company_id, EmployeeCreate(user_id=seed_users["editor"].user_id), other_owner
    )
    employee_role_service.assign_role(
        db, other.company_id, employee.employee_id, reference["roles"]["reviewer"].role_id, other_owner
    )

    editor = actor_for(db, seed_users["editor"])
    held = resolve_permissions(db, editor)
    assert QUESTION_CREATE in held
    assert REVIEW_UPDATE in held
    assert editor.has_kind(RoleKind.EDITOR) and editor.has_kind(RoleKind.REVIEWER)


def test_roles_of_removed_employee_or_inactive_company_are_ignored(db, seed_users, seed_company):
    company_id = seed_company["company"].company_id
    owner = actor_for(db, seed_users["owner"])
    employee_service.remove_employee(db, company_id, seed_company["employees"]["editor"].employee_id, owner)
    assert actor_for(db, seed_users["editor"]).roles == ()

    company = db.query(Company).filter(Company.company_id == company_id).one()
    company.is_active = False
    db.commit()
    assert actor_for(db, seed_users["reviewer"]).roles == ()


def test_grant_permission_invalidates_cache(db, reference, seed_users, seed_company):
    hr = actor_for(db, seed_users["hr"])
    assert CATEGORY_CREATE not in resolve_permissions(db, hr)

    admin = actor_for(db, seed_users["admin"])
    role_service.grant_permission(db, reference["roles"]["hr_manager"].role_id, CATEGORY_CREATE, admin)
    assert CATEGORY_CREATE in resolve_permissions(db, hr)

    role_service.revoke_permission(db, reference["roles"]["hr_manager"].role_id, CATEGORY_CREATE, admin)
    assert CATEGORY_CREATE not in resolve_permissions(db, hr)


def test_build_actor_collects_company_roles(db, seed_users, seed_company):
    owner = actor_for(db, seed_users["owner"])
    assert owner.roles == ("company_admin",)
    assert not owner.is_system_admin
    links = (
        db.query(EmployeeRole)
        .join(Employee, Employee.employee_id == EmployeeRole.employee_id)
        .filter(Employee.user_id == seed_users["owner"].user_id)
        .all()
    )
    assert len(links) == 1
