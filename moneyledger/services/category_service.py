"""
Category service.
"""

from typing import List, Optional

from ..models.currency import Category
from ..repositories.base import DatabaseConnection
from ..repositories.currency_repository import CategoryRepository
from ..utils.secure_logging import get_logger
from .base import CatalogService, logged_operation
from .validators import validate_name

logger = get_logger(__name__)


class CategoryService(CatalogService[Category]):
    """Service for entry categories."""

    entity_name = "category"

    def __init__(self, db_connection: DatabaseConnection):
        super().__init__(db_connection, CategoryRepository(db_connection))

    @logged_operation("create_category")
    def create_category(self, user_id: int, name: str) -> Category:
        name = validate_name(name)

        with self.db.transaction():
            self._require_user(user_id)
            self._ensure_unique_name(user_id, name)
            category = self.repository.insert(Category(user_id=user_id, name=name))

        logger.info("Category created", user_id=user_id, category_id=category.id, name=name)
        return category

    @logged_operation("rename_category")
    def rename_category(self, user_id: int, category_id: int, name: str) -> Category:
        name = validate_name(name)

        with self.db.transaction():
            self._get(user_id, category_id)
            self._ensure_unique_name(user_id, name, exclude_id=category_id)
            self.repository.update_fields(category_id, name=name)
            category = self.repository.find_by_id(category_id)

        logger.info("Category renamed", user_id=user_id, category_id=category_id, name=name)
        return category

    def get_category(self, user_id: int, category_id: int) -> Category:
        return self._get(user_id, category_id)

    def get_category_by_name(self, user_id: int, name: str) -> Optional[Category]:
        return self.repository.find_by_name(user_id, name)

    def list_categories(self, user_id: int, include_archived: bool = False) -> List[Category]:
        return self._list(user_id, include_archived)

    @logged_operation("archive_category")
    def archive_category(self, user_id: int, category_id: int) -> Category:
        return self._set_archived(user_id, category_id, True)

    @logged_operation("restore_category")
    def restore_category(self, user_id: int, category_id: int) -> Category:
        return self._set_archived(user_id, category_id, False)

    @logged_operation("delete_category")
    def delete_category(self, user_id: int, category_id: int) -> None:
        """Delete a category no entry references."""
        self._delete(user_id, category_id)
