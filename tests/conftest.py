from datetime import date
from decimal import Decimal

import pytest

from database.db_manager import DatabaseManager
from database.budget_dao import BudgetDAO
from database.category_dao import CategoryDAO
from database.transaction_dao import TransactionDAO
from models.transaction import Transaction
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.data_service import DataService
from services.preferences_service import PreferencesService
from services.report_service import ReportService
from services.transaction_service import TransactionService


@pytest.fixture
def db():
    manager = DatabaseManager(":memory:")
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def category_dao(db):
    return CategoryDAO(db)


@pytest.fixture
def tx_dao(db):
    return TransactionDAO(db)


@pytest.fixture
def budget_dao(db):
    return BudgetDAO(db)


@pytest.fixture
def prefs_service(db):
    return PreferencesService(db)


@pytest.fixture
def tx_service(tx_dao, category_dao):
    return TransactionService(tx_dao, category_dao)


@pytest.fixture
def budget_service(budget_dao, tx_dao, category_dao):
    return BudgetService(budget_dao, tx_dao, category_dao)


@pytest.fixture
def category_service(category_dao, tx_dao):
    return CategoryService(category_dao, tx_dao)


@pytest.fixture
def report_service(tx_dao, budget_dao, category_dao, prefs_service):
    return ReportService(tx_dao, budget_dao, category_dao, prefs_service)


@pytest.fixture
def data_service(db, category_dao, budget_dao, tx_dao, prefs_service):
    return DataService(db, category_dao, budget_dao, tx_dao, prefs_service)


@pytest.fixture
def food(category_dao):
    return category_dao.get_by_name("Food")


@pytest.fixture
def salary(category_dao):
    return category_dao.get_by_name("Salary")


_next_id = iter(range(1, 1_000_000))


def make_tx(type_, amount, on, description="item", category_id=1, category_name="X", **extra):
    """Build an in-memory transaction without touching the database."""
    return Transaction(
        id=next(_next_id),
        type=type_,
        amount=Decimal(str(amount)),
        description=description,
        date=on if isinstance(on, date) else date.fromisoformat(on),
        category_id=category_id,
        category_name=category_name,
        **extra,
    )
