from billing_backend.app.core.settings import DEFAULT_SECRET_KEY, Settings, get_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.app_name == "Billing Tool"
    assert settings.environment == "development"
    assert settings.default_currency == "INR"
    assert settings.invoice_number_prefix == "INV"
    assert settings.max_logo_bytes == 5 * 1024 * 1024
    assert isinstance(settings.secret_key, str) and settings.secret_key
    assert isinstance(settings.database_url, str) and settings.database_url


def test_development_accepts_default_secret():
    settings = Settings(environment="development", secret_key=DEFAULT_SECRET_KEY)
    assert settings.missing_configuration() == []


def test_production_requires_real_secret_and_database():
    settings = Settings(environment="production", secret_key=DEFAULT_SECRET_KEY, database_url="")
    assert settings.missing_configuration() == ["DATABASE_URL", "SECRET_KEY"]


def test_email_configured_needs_user_and_password():
    assert not Settings(email_user="me@example.com").email_configured
    assert Settings(email_user="me@example.com", email_pass="app-password").email_configured
