from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from models.validation import ValidationError, require_text, to_amount, to_date


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def label(self) -> str:
        return self.value.title()


class IncomeSource(str, Enum):
    SALARY = "salary"
    INVESTMENT = "investment"
    BUSINESS = "business"
    OTHER = "other"


class PaymentMethod(str, Enum):
    CASH = "cash"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


@dataclass(frozen=True)
class Transaction:
    id: int
    type: TransactionType
    amount: Decimal
    description: str
    date: date
    category_id: Optional[int]
    category_name: str = ""
    notes: str = ""
    # expense-only payload
    essential: bool = False
    payment_method: Optional[PaymentMethod] = None
    # income-only payload
    income_source: Optional[IncomeSource] = None
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self):
        try:
            tx_type = TransactionType(self.type)
        except ValueError:
            raise ValidationError(f"Invalid type: {self.type}", field="type")
        object.__setattr__(self, "type", tx_type)
        object.__setattr__(self, "amount", to_amount(self.amount))
        object.__setattr__(self, "description", require_text(self.description, "Description", "description"))
        object.__setattr__(self, "date", to_date(self.date))

        if tx_type is TransactionType.INCOME:
            if self.essential or self.payment_method is not None:
                raise ValidationError(
                    "Essential flag and payment method only apply to expenses.", field="type"
                )
            if self.income_source is not None:
                try:
                    source = IncomeSource(self.income_source)
                except ValueError:
                    raise ValidationError(
                        f"Invalid income source: {self.income_source}", field="income_source"
                    )
                object.__setattr__(self, "income_source", source)
        else:
            if self.income_source is not None:
                raise ValidationError("Income source only applies to income.", field="type")
            if self.payment_method is not None:
                try:
                    method = PaymentMethod(self.payment_method)
                except ValueError:
                    raise ValidationError(
                        f"Invalid payment method: {self.payment_method}", field="payment_method"
                    )
                object.__setattr__(self, "payment_method", method)

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Contribution to a running balance: income positive, expense negative."""
        return self.amount if self.type is TransactionType.INCOME else -self.amount
