from models.preferences import UserPreferences


def test_defaults(prefs_service):
    prefs = prefs_service.load()
    assert prefs.currency_code == "USD"
    assert prefs.locale == "en_US"
    assert prefs.date_format == "MM/DD/YYYY"
    assert prefs.appearance_mode == "system"
    assert prefs.auto_save is True


def test_save_and_load(prefs_service, tmp_path):
    prefs_service.save(UserPreferences(
        currency_code="gbp", locale="en-GB", date_format="DD/MM/YYYY",
        appearance_mode="dark", auto_save=False, backup_location=str(tmp_path),
    ))
    prefs = prefs_service.load()
    assert prefs.currency_code == "GBP"
    assert prefs.locale == "en_GB"
    assert prefs.date_format == "DD/MM/YYYY"
    assert prefs.dark_mode
    assert prefs.auto_save is False
    assert prefs.backup_location == str(tmp_path)
    assert prefs_service.get_date_format() == "DD/MM/YYYY"


def test_unsupported_values_fall_back(prefs_service):
    saved = prefs_service.save(UserPreferences(
        currency_code="ZZZ", locale="xx_XX", date_format="YY", appearance_mode="neon",
    ))
    assert saved.currency_code == "USD"
    assert saved.locale == "en_US"
    assert saved.date_format == "MM/DD/YYYY"
    assert saved.appearance_mode == "system"
