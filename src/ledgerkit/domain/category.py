"""Category domain service."""

from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Category as CategoryEntity
from ledgerkit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_category_name,
    invalid_color_code,
)
from ledgerkit.domain.validation import is_valid_hex_color

DEFAULT_COLOR = "#6366f1"
DEFAULT_ICON = "pi-tag"


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate(self, name: str, color_code: str, icon: str) -> tuple[str, str]:
        name = name.strip() if name else ""
        if not name:
            raise ValidationError("Category name cannot be empty")
        if not is_valid_hex_color(color_code):
            raise ValidationError(invalid_color_code(color_code))
        icon = icon.strip() if icon else ""
        if not icon:
            raise ValidationError("Category icon cannot be empty")
        return name, icon

    def create_category(self, name: str, color_code: str = DEFAULT_COLOR, icon: str = DEFAULT_ICON) -> int:
        """Create a category.

        Returns:
            Category ID

        Raises:
            ValidationError: If name is blank or color is not #RGB/#RRGGBB
            ConflictError: If a category with the same name exists
        """
        name, icon = self._validate(name, color_code, icon)
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(duplicate_category_name(name))
        return self.db.create_category(name=name, color_code=color_code, icon=icon)

    def update_category(self, category_id: int, name: str, color_code: str, icon: str) -> None:
        """Update a category.

        Raises:
            NotFoundError: If category not found
            ValidationError: If name is blank or color is invalid
            ConflictError: If another category already has the name
        """
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        name, icon = self._validate(name, color_code, icon)
        existing = self.db.get_category_by_name(name)
        if existing is not None and existing.id != category_id:
            raise ConflictError(duplicate_category_name(name))
        self.db.update_category(category_id, name=name, color_code=color_code, icon=icon)

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        return self.db.get_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[CategoryEntity]:
        return self.db.get_category_by_name(name)

    def list_categories(self) -> list[CategoryEntity]:
        return self.db.list_categories()

    def delete_category(self, category_id: int) -> int:
        """Delete a category. Its transactions become uncategorized.

        Returns:
            Number of transactions that lost their category

        Raises:
            NotFoundError: If category not found
        """
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        return self.db.delete_category(category_id)
