from __future__ import annotations

from tablesync import config
from tablesync.infrastructure.dsn import parse_dsn


def test_settings_defaults(monkeypatch) -> None:
    for name in ("DB_HOST", "DB_PORT", "DB_NAME", "DB_SCHEMA", "AUTO_DROP_COLUMNS", "LOG_JSON"):
        monkeypatch.delenv(name, raising=False)

    settings = config.Settings(_env_file=None)

    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_schema == "public"
    assert settings.auto_drop_columns is False
    assert settings.log_json is False
    assert settings.db_pool_max_size >= settings.db_pool_min_size


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_NAME", "orders")
    monkeypatch.setenv("AUTO_DROP_COLUMNS", "true")

    settings = config.Settings(_env_file=None)

    assert settings.auto_drop_columns is True
    params = parse_dsn(settings.dsn)
    assert params["host"] == "db.internal"
    assert params["dbname"] == "orders"


def test_get_settings_is_cached() -> None:
    config.get_settings.cache_clear()
    try:
        assert config.get_settings() is config.get_settings()
    finally:
        config.get_settings.cache_clear()
