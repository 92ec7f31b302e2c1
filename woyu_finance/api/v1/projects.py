"""Project and debt category endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from woyu_finance.api.dependencies import get_request_id
from woyu_finance.api.errors import transaction
from woyu_finance.api.v1.schemas import CategoryCreate, CategoryResponse, ProjectCreate, ProjectResponse
from woyu_finance.infrastructure.database.repositories import CategoryRepository, ProjectRepository
from woyu_finance.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/payment/projects", response_model=List[ProjectResponse])
def list_projects(db: Session = Depends(get_db)):
    return ProjectRepository(db).list_projects()


@router.post("/payment/projects", response_model=ProjectResponse, status_code=201)
def create_project(body: ProjectCreate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        project = ProjectRepository(db).create(**body.model_dump())
    return project


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(
    category_type: Optional[str] = Query(None, alias="categoryType"),
    db: Session = Depends(get_db),
):
    return CategoryRepository(db).list_categories(category_type)


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(body: CategoryCreate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        category = CategoryRepository(db).create(**body.model_dump())
    return category
