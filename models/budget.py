from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Budget:
    id: int
    category_id: Optional[int]      # None once the category was deleted
    category_name: str
    month: str                      # 'YYYY-MM'
    planned_amount: Decimal
    notes: str = ""
    # Display hint only. BudgetStatus.actual_spent is recomputed from transactions.
    spent_amount: Decimal = Decimal("0")
    color_hex: str = "#888888"
