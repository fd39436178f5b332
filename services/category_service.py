import logging
import re

from database.category_dao import CategoryDAO
from database.transaction_dao import TransactionDAO
from models.category import Category, CategoryType
from models.report import CategoryRef
from models.validation import ValidationError, require_text
from utils.constants import UNCATEGORIZED_NAME, UNKNOWN_CATEGORY_NAME

logger = logging.getLogger(__name__)

COLOR_HEX_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


class CategoryService:
    def __init__(self, category_dao: CategoryDAO, tx_dao: TransactionDAO):
        self._dao = category_dao
        self._tx_dao = tx_dao

    def get_all(self) -> list[Category]:
        return self._dao.get_all()

    def get_for_transaction_type(self, tx_type: str) -> list[Category]:
        return self._dao.get_for_transaction_type(tx_type)

    def get_expense_categories(self) -> list[Category]:
        return self._dao.get_for_transaction_type("expense")

    def find_by_name(self, name: str | None) -> CategoryRef:
        """Resolve a name to a grouping key; a miss yields the 'Unknown' ref."""
        cat = self._dao.get_by_name(name) if name and name.strip() else None
        if cat is None:
            logger.debug("Category lookup missed for %r", name)
            return CategoryRef(None, UNKNOWN_CATEGORY_NAME)
        return CategoryRef(cat.id, cat.name)

    def create(self, name: str, type_: str, description: str = "", color_hex: str = "#888888") -> Category:
        name = require_text(name, "Category name", "name")
        type_ = self._check_type(type_)
        color_hex = self._check_color(color_hex)
        self._check_unique(name)
        return self._dao.create(name, type_, description.strip(), color_hex)

    def update(
        self, category_id: int, name: str, type_: str, description: str = "", color_hex: str = "#888888"
    ) -> Category:
        cat = self._dao.get_by_id(category_id)
        if cat is None:
            raise ValidationError("Category not found.", field="category")
        name = require_text(name, "Category name", "name")
        type_ = self._check_type(type_)
        color_hex = self._check_color(color_hex)
        if cat.is_system and (name.lower() != cat.name.lower() or type_ != cat.type.value):
            raise ValidationError(
                f"'{UNCATEGORIZED_NAME}' cannot be renamed or change type.", field="name"
            )
        self._check_unique(name, exclude_id=category_id)
        return self._dao.update(category_id, name, type_, description.strip(), color_hex)

    def delete(self, category_id: int) -> int:
        """Delete a category, moving its transactions to Uncategorized.

        Budgets of the deleted category stay and report as unknown.
        Returns the number of transactions moved.
        """
        cat = self._dao.get_by_id(category_id)
        if cat is None:
            return 0
        if cat.is_system or cat.is_uncategorized:
            raise ValidationError(f"The '{UNCATEGORIZED_NAME}' category cannot be deleted.", field="category")
        fallback = self._dao.get_uncategorized()
        moved = self._tx_dao.reassign_category(category_id, fallback.id)
        self._dao.delete(category_id)
        logger.info("Deleted category %s; moved %d transactions to %s", cat.name, moved, fallback.name)
        return moved

    def _check_type(self, type_: str) -> str:
        try:
            return CategoryType(type_).value
        except ValueError:
            raise ValidationError(f"Invalid category type: {type_}", field="type")

    def _check_color(self, color_hex: str) -> str:
        color = (color_hex or "").strip()
        if color and not color.startswith("#"):
            color = "#" + color
        if not COLOR_HEX_RE.match(color):
            raise ValidationError("Color must be a hex value like #4CAF50.", field="color_hex")
        return color.upper()

    def _check_unique(self, name: str, exclude_id: int | None = None):
        existing = self._dao.get_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise ValidationError(f"A category named '{name}' already exists.", field="name")
