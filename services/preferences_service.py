import logging
from pathlib import Path

from database.db_manager import DatabaseManager
from models.preferences import APPEARANCE_MODES, UserPreferences
from utils.constants import DEFAULT_DATE_FORMAT
from utils.currency import resolve_currency_code, resolve_locale
from utils.date_helpers import DATE_FORMAT_OPTIONS

logger = logging.getLogger(__name__)


class PreferencesService:
    """Reads and writes UserPreferences in the app_settings table."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def load(self) -> UserPreferences:
        get = self._db.get_setting
        return self._normalize(UserPreferences(
            currency_code=get("currency_code", "USD"),
            locale=get("locale", "en_US"),
            date_format=get("date_format", DEFAULT_DATE_FORMAT),
            appearance_mode=get("appearance_mode", "system"),
            auto_save=get("auto_save", "1") == "1",
            backup_location=get("backup_location", str(Path.home())),
        ))

    def save(self, prefs: UserPreferences) -> UserPreferences:
        prefs = self._normalize(prefs)
        self._db.set_setting("currency_code", prefs.currency_code)
        self._db.set_setting("locale", prefs.locale)
        self._db.set_setting("date_format", prefs.date_format)
        self._db.set_setting("appearance_mode", prefs.appearance_mode)
        self._db.set_setting("auto_save", "1" if prefs.auto_save else "0")
        self._db.set_setting("backup_location", prefs.backup_location)
        logger.info("Saved preferences: %s / %s", prefs.currency_code, prefs.locale)
        return prefs

    def get_date_format(self) -> str:
        return self.load().date_format

    @staticmethod
    def _normalize(prefs: UserPreferences) -> UserPreferences:
        date_format = prefs.date_format
        if date_format not in DATE_FORMAT_OPTIONS:
            logger.warning("Unknown date format %r, using %s", date_format, DEFAULT_DATE_FORMAT)
            date_format = DEFAULT_DATE_FORMAT
        appearance = prefs.appearance_mode if prefs.appearance_mode in APPEARANCE_MODES else "system"
        return UserPreferences(
            currency_code=resolve_currency_code(prefs.currency_code),
            locale=resolve_locale(prefs.locale),
            date_format=date_format,
            appearance_mode=appearance,
            auto_save=bool(prefs.auto_save),
            backup_location=prefs.backup_location or str(Path.home()),
        )
