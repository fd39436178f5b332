APP_NAME = "Finance Tracker"
APP_WIDTH = 1200
APP_HEIGHT = 750
DB_FILE = "finance.db"

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

UNCATEGORIZED_NAME = "Uncategorized"
UNKNOWN_CATEGORY_NAME = "Unknown"

DEFAULT_CURRENCY_CODE = "USD"
DEFAULT_LOCALE = "en_US"
DEFAULT_DATE_FORMAT = "MM/DD/YYYY"

# name, type, description, color
DEFAULT_CATEGORIES = [
    {"name": "Salary",         "type": "income",  "description": "Regular employment income",         "color_hex": "#4CAF50"},
    {"name": "Investment",     "type": "income",  "description": "Income from investments",           "color_hex": "#009688"},
    {"name": "Gifts",          "type": "income",  "description": "Money received as gifts",           "color_hex": "#795548"},
    {"name": "Bonus",          "type": "income",  "description": "Work bonuses or incentives",        "color_hex": "#FF9800"},
    {"name": "Housing",        "type": "expense", "description": "Rent, mortgage, repairs",           "color_hex": "#E91E63"},
    {"name": "Food",           "type": "expense", "description": "Groceries and dining out",          "color_hex": "#9C27B0"},
    {"name": "Transportation", "type": "expense", "description": "Car, public transit, ride sharing", "color_hex": "#2196F3"},
    {"name": "Utilities",      "type": "expense", "description": "Electricity, water, internet",      "color_hex": "#03A9F4"},
    {"name": "Entertainment",  "type": "expense", "description": "Movies, games, hobbies",            "color_hex": "#FF5722"},
    {"name": "Healthcare",     "type": "expense", "description": "Doctor visits, medicine",           "color_hex": "#607D8B"},
    {"name": "Education",      "type": "expense", "description": "Tuition, books, courses",           "color_hex": "#3F51B5"},
    {"name": "Shopping",       "type": "expense", "description": "Clothing, electronics",             "color_hex": "#CDDC39"},
]

UNCATEGORIZED_CATEGORY = {
    "name": UNCATEGORIZED_NAME,
    "type": "both",
    "description": "Default category",
    "color_hex": "#888888",
}

REPORT_MONTHLY = "monthly"
REPORT_YEARLY = "yearly"
REPORT_CASHFLOW = "cashflow"
REPORT_TYPES = (REPORT_MONTHLY, REPORT_YEARLY, REPORT_CASHFLOW)

TOP_CATEGORY_COUNT = 5
BUDGET_WARNING_THRESHOLD = 0.80

TYPE_COLORS = {
    "income":  "#4CAF50",
    "expense": "#F44336",
}
