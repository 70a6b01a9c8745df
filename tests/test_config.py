import pytest

from utils.config import Settings

ENV_NAMES = [
    "PORT", "MONGODB_URI", "DB_NAME", "COLLECTION_NAME", "CORS_ORIGINS",
    "MAX_BODY_SIZE", "RATE_LIMIT", "RATE_LIMIT_ENABLED", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.port == 5000
    assert settings.mongodb_uri is None
    assert settings.db_name == "expense_tracker"
    assert settings.collection_name == "expenses"
    assert settings.cors_origin_list == ["*"]
    assert settings.max_body_size == 102400
    assert settings.rate_limit_enabled is False


def test_reads_environment_variables(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("MONGODB_URI", "mongodb://db:27017")
    monkeypatch.setenv("DB_NAME", "personal")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings(_env_file=None)
    assert settings.port == 8080
    assert settings.mongodb_uri == "mongodb://db:27017"
    assert settings.db_name == "personal"
    assert settings.cors_origin_list == ["http://a.test", "http://b.test"]
    assert settings.rate_limit_enabled is True
    assert settings.log_level == "DEBUG"


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PORT", "")
    monkeypatch.setenv("DB_NAME", "")
    settings = Settings(_env_file=None)
    assert settings.port == 5000
    assert settings.db_name == "expense_tracker"


def test_reads_dotenv_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("DB_NAME=from_file\nPORT=7000\n")
    settings = Settings(_env_file=env_file)
    assert settings.db_name == "from_file"
    assert settings.port == 7000
