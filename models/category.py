from dataclasses import dataclass
from enum import Enum

from utils.constants import UNCATEGORIZED_NAME


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    BOTH = "both"


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    type: CategoryType = CategoryType.BOTH
    description: str = ""
    color_hex: str = "#888888"
    is_system: bool = False

    def __post_init__(self):
        object.__setattr__(self, "type", CategoryType(self.type or CategoryType.BOTH))

    def is_applicable_to(self, tx_type) -> bool:
        """True when transactions of ``tx_type`` ('income'/'expense') may use this category."""
        return self.type is CategoryType.BOTH or self.type.value == getattr(tx_type, "value", tx_type)

    @property
    def is_uncategorized(self) -> bool:
        return self.name.lower() == UNCATEGORIZED_NAME.lower()
