"""/v1/categories - built-in and user-defined categories"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from finance_gateway.api.v1.schemas import CategoryListResponse, CategoryRequest, CategorySchema
from finance_gateway.api.dependencies import get_category_repository
from finance_gateway.infrastructure.database.session import get_db
from finance_gateway.infrastructure.database.repositories import CategoryRepository
from finance_gateway.domain.budgets import DEFAULT_CATEGORIES, validate_category
from finance_gateway.domain.models import Category
from finance_gateway.domain.exceptions import CategoryNotFoundError, ValidationError

router = APIRouter()


@router.post("/categories", response_model=CategorySchema, status_code=201)
def create_category(
    request_body: CategoryRequest,
    db: Session = Depends(get_db),
    category_repo: CategoryRepository = Depends(get_category_repository),
):
    try:
        category = validate_category(
            Category(
                id="",
                name=request_body.name,
                type=request_body.type,
                icon=request_body.icon,
                color=request_body.color,
            )
        )
        saved = category_repo.create_category(request_body.user_id, category)
        db.commit()
        return CategorySchema.model_validate(saved)

    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/categories", response_model=CategoryListResponse)
def list_categories(
    user_id: str = Query(..., description="User identifier"),
    category_repo: CategoryRepository = Depends(get_category_repository),
):
    """Built-in categories followed by the user's own"""
    defaults = [CategorySchema.model_validate(c).model_copy(update={"is_default": True}) for c in DEFAULT_CATEGORIES]
    custom = [CategorySchema.model_validate(c) for c in category_repo.get_categories_by_user(user_id)]
    return CategoryListResponse(user_id=user_id, categories=defaults + custom)


@router.put("/categories/{category_id}", response_model=CategorySchema)
def update_category(
    category_id: str,
    request_body: CategoryRequest,
    db: Session = Depends(get_db),
    category_repo: CategoryRepository = Depends(get_category_repository),
):
    """Edit a user-defined category; built-in ones are read-only"""
    try:
        category = validate_category(
            Category(
                id=category_id,
                name=request_body.name,
                type=request_body.type,
                icon=request_body.icon,
                color=request_body.color,
            )
        )
        saved = category_repo.update_category(request_body.user_id, category)
        db.commit()
        return CategorySchema.model_validate(saved)

    except ValidationError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    except CategoryNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
    category_repo: CategoryRepository = Depends(get_category_repository),
):
    if not category_repo.delete_category(user_id, category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    db.commit()
