"""Seed the database with demo users, a company and a few questions."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from qbank.database import SessionLocal, engine, Base
import qbank.models  # noqa: F401

from qbank.models.role import Role
from qbank.models.user import User, UserRole
from qbank.schemas.category import CategoryCreate
from qbank.schemas.company import CompanyCreate, EmployeeCreate
from qbank.schemas.question import QuestionCreate, QuestionOptionIn
from qbank.services import (
    category_service,
    company_service,
    employee_role_service,
    employee_service,
    question_service,
)
from qbank.services.permission_service import build_actor
from qbank.services.reference_data import seed_reference_data


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_reference_data(db)
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        users = {
            "admin": User(email="admin@qbank.local", name="시스템 관리자"),
            "owner": User(email="owner@acme.local", name="대표 김민수"),
            "editor": User(email="editor@acme.local", name="작성자 이서연"),
            "reviewer": User(email="reviewer@acme.local", name="검토자 박지훈"),
            "hr": User(email="hr@acme.local", name="인사 최유진"),
        }
        db.add_all(users.values())
        db.flush()

        admin_role = db.query(Role).filter(Role.role_name == "admin").one()
        db.add(UserRole(user_id=users["admin"].user_id, role_id=admin_role.role_id))
        db.commit()

        owner = build_actor(db, users["owner"])
        company = company_service.create_company(
            db, CompanyCreate(company_name="Acme 교육", city="서울", country="KR"), owner
        )
        # 소유자는 회사 생성 시 company_admin으로 등록되므로 역할을 다시 읽는다.
        owner = build_actor(db, users["owner"])

        role_ids = {role.role_name: role.role_id for role in db.query(Role).all()}
        for key, role_name, department in (
            ("editor", "editor", "콘텐츠팀"),
            ("reviewer", "reviewer", "품질팀"),
            ("hr", "hr_manager", "인사팀"),
        ):
            employee = employee_service.add_employee(
                db,
                company.company_id,
                EmployeeCreate(user_id=users[key].user_id, department=department),
                owner,
            )
            employee_role_service.assign_role(
                db, company.company_id, employee.employee_id, role_ids[role_name], owner
            )

        category = category_service.create_category(
            db, company.company_id, CategoryCreate(name="수학", description="기초 수학"), owner
        )
        editor = build_actor(db, users["editor"])
        question_service.create_question(
            db,
            QuestionCreate(
                company_id=company.company_id,
                category_id=category.category_id,
                question_type="multiple_choice",
                difficulty_level="easy",
                question_text="2 + 3 = ?",
                options=[
                    QuestionOptionIn(option_text="4"),
                    QuestionOptionIn(option_text="5", is_correct=True),
                    QuestionOptionIn(option_text="6"),
                ],
            ),
            editor,
        )
        question_service.create_question(
            db,
            QuestionCreate(
                company_id=company.company_id,
                category_id=category.category_id,
                question_type="true_false",
                question_text="0은 짝수이다.",
                options=[
                    QuestionOptionIn(option_text="참", is_correct=True),
                    QuestionOptionIn(option_text="거짓"),
                ],
            ),
            editor,
        )

        print("Seed completed successfully!")
        print(f"  Users: {len(users)}")
        print(f"  Company: {company.company_name} (id={company.company_id})")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
