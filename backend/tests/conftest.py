import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from qbank.database import Base, get_db
from qbank.main import app
from qbank.models.question_status import QuestionStatus
from qbank.models.review import ReviewStatus
from qbank.models.role import Role
from qbank.models.user import User, UserRole
from qbank.schemas.company import CompanyCreate, EmployeeCreate
from qbank.schemas.question import QuestionCreate, QuestionOptionIn
from qbank.services import company_service, employee_role_service, employee_service, event_service, question_service
from qbank.services.permission_service import build_actor
from qbank.services.reference_cache import reference_cache
from qbank.services.reference_data import seed_reference_data

TEST_DB_URL = "sqlite:///./test_qbank.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    reference_cache.invalidate()
    event_service.clear_handlers()
    yield
    event_service.clear_handlers()
    reference_cache.invalidate()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def reference(db):
    seed_reference_data(db)
    return {
        "roles": {role.role_name: role for role in db.query(Role).all()},
        "statuses": {status.name: status for status in db.query(QuestionStatus).all()},
        "review_statuses": {status.name: status for status in db.query(ReviewStatus).all()},
    }


@pytest.fixture
def seed_users(db, reference):
    users = {
        "admin": User(email="admin@qbank.test", name="Admin"),
        "owner": User(email="owner@acme.test", name="Owner"),
        "editor": User(email="editor@acme.test", name="Editor"),
        "reviewer": User(email="reviewer@acme.test", name="Reviewer"),
        "hr": User(email="hr@acme.test", name="HR"),
        "outsider": User(email="outsider@other.test", name="Outsider"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    db.add(UserRole(user_id=users["admin"].user_id, role_id=reference["roles"]["admin"].role_id))
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def actor_for(db, user):
    db.expire_all()
    return build_actor(db, user)


@pytest.fixture
def seed_company(db, reference, seed_users):
    """owner가 만든 회사에 editor/reviewer/hr 직원을 각 역할로 등록한다."""
    owner = actor_for(db, seed_users["owner"])
    company = company_service.create_company(db, CompanyCreate(company_name="Acme"), owner)
    owner = actor_for(db, seed_users["owner"])

    employees = {}
    for key, role_name in (("editor", "editor"), ("reviewer", "reviewer"), ("hr", "hr_manager")):
        employee = employee_service.add_employee(
            db, company.company_id, EmployeeCreate(user_id=seed_users[key].user_id), owner
        )
        employee_role_service.assign_role(
            db, company.company_id, employee.employee_id, reference["roles"][role_name].role_id, owner
        )
        employees[key] = employee
    return {"company": company, "employees": employees}


@pytest.fixture
def seed_question(db, seed_users, seed_company):
    editor = actor_for(db, seed_users["editor"])
    return question_service.create_question(
        db,
        QuestionCreate(
            company_id=seed_company["company"].company_id,
            question_type="multiple_choice",
            question_text="2 + 3 = ?",
            explanation="덧셈",
            options=[
                QuestionOptionIn(option_text="4"),
                QuestionOptionIn(option_text="5", is_correct=True),
            ],
        ),
        editor,
    )


def get_token(client, email: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}
