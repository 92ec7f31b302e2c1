"""Data access layer for projects and debt categories"""

from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from woyu_finance.infrastructure.database.models import DebtCategory, PaymentProject
from woyu_finance.infrastructure.database.repositories.base import exclude_deleted


class ProjectRepository:
    """Repository for payment projects"""

    def __init__(self, db: Session):
        self.db = db

    def list_projects(self) -> List[PaymentProject]:
        query = exclude_deleted(self.db.query(PaymentProject), PaymentProject)
        return query.order_by(PaymentProject.project_name).all()

    def get(self, project_id: int) -> Optional[PaymentProject]:
        query = exclude_deleted(self.db.query(PaymentProject), PaymentProject)
        return query.filter(PaymentProject.id == project_id).first()

    def find_by_name(self, name: str) -> Optional[PaymentProject]:
        """Case-insensitive lookup"""
        query = exclude_deleted(self.db.query(PaymentProject), PaymentProject)
        return query.filter(func.lower(PaymentProject.project_name) == name.strip().lower()).first()

    def create(self, project_name: str, project_type: str = "general", description: Optional[str] = None) -> PaymentProject:
        project = PaymentProject(project_name=project_name, project_type=project_type, description=description)
        self.db.add(project)
        self.db.flush()
        return project

    def get_or_create(self, name: str, description: Optional[str] = None) -> PaymentProject:
        return self.find_by_name(name) or self.create(name.strip(), description=description)


class CategoryRepository:
    """Repository for debt categories"""

    def __init__(self, db: Session):
        self.db = db

    def list_categories(self, category_type: Optional[str] = None) -> List[DebtCategory]:
        query = exclude_deleted(self.db.query(DebtCategory), DebtCategory)
        if category_type:
            query = query.filter(DebtCategory.category_type == category_type)
        return query.order_by(DebtCategory.category_name).all()

    def get(self, category_id: int) -> Optional[DebtCategory]:
        query = exclude_deleted(self.db.query(DebtCategory), DebtCategory)
        return query.filter(DebtCategory.id == category_id).first()

    def find_by_name(self, name: str) -> Optional[DebtCategory]:
        query = exclude_deleted(self.db.query(DebtCategory), DebtCategory)
        return query.filter(func.lower(DebtCategory.category_name) == name.strip().lower()).first()

    def create(self, category_name: str, category_type: str = "project") -> DebtCategory:
        category = DebtCategory(category_name=category_name, category_type=category_type)
        self.db.add(category)
        self.db.flush()
        return category

    def get_or_create(self, name: str) -> DebtCategory:
        return self.find_by_name(name) or self.create(name.strip())
