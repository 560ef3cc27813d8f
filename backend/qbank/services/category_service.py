"""Category Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import List

from sqlalchemy.orm import Session

from qbank.database import transaction
from qbank.models.category import Category
from qbank.schemas.category import CategoryCreate
from qbank.services.access_service import require_company_access
from qbank.services.permission_service import require_permission
from qbank.utils.errors import ConflictError, NotFoundError
from qbank.utils.permissions import CATEGORY_CREATE, CATEGORY_DELETE, CATEGORY_VIEW, Actor


def get_category(db: Session, company_id: int, category_id: int) -> Category:
    category = (
        db.query(Category)
        .filter(Category.category_id == category_id, Category.company_id == company_id)
        .first()
    )
    if not category:
        raise NotFoundError("카테고리를 찾을 수 없습니다.", category_id=category_id)
    return category


def list_categories(db: Session, company_id: int, actor: Actor) -> List[Category]:
    require_company_access(db, actor, company_id)
    require_permission(db, actor, CATEGORY_VIEW)
    return (
        db.query(Category)
        .filter(Category.company_id == company_id, Category.is_active == True)  # noqa: E712
        .order_by(Category.name)
        .all()
    )


def create_category(db: Session, company_id: int, data: CategoryCreate, actor: Actor) -> Category:
    require_company_access(db, actor, company_id)
    require_permission(db, actor, CATEGORY_CREATE)
    name = data.name.strip()
    existing = (
        db.query(Category)
        .filter(Category.company_id == company_id, Category.name == name)
        .first()
    )
    if existing and existing.is_active:
        raise ConflictError("같은 이름의 카테고리가 이미 있습니다.", name=name)

    with transaction(db):
        if existing:
            existing.is_active = True
            existing.description = data.description
            category = existing
        else:
            category = Category(
                company_id=company_id,
                name=name,
                description=data.description,
                created_by=actor.user_id,
            )
            db.add(category)
    db.refresh(category)
    return category


def deactivate_category(db: Session, company_id: int, category_id: int, actor: Actor) -> Category:
    require_company_access(db, actor, company_id)
    require_permission(db, actor, CATEGORY_DELETE)
    category = get_category(db, company_id, category_id)
    with transaction(db):
        category.is_active = False
    db.refresh(category)
    return category
