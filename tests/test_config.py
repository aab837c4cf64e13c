import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_cors_origins_accept_comma_separated_and_json():
    assert Settings(cors_origins="https://a.example, https://b.example").cors_origins == [
        "https://a.example",
        "https://b.example",
    ]
    assert Settings(cors_origins='["https://c.example"]').cors_origins == ["https://c.example"]
    assert Settings(cors_origins="").cors_origins == []


def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_production_rejects_sqlite_and_wildcard_cors():
    with pytest.raises(ValidationError):
        Settings(env="production", database_url="sqlite:///./warehouse.db")

    with pytest.raises(ValidationError):
        Settings(
            env="prod",
            database_url="postgresql+psycopg://wh:wh@db/warehouse",
            cors_origins="*",
        )

    ok = Settings(
        env="prod",
        database_url="postgresql+psycopg://wh:wh@db/warehouse",
        cors_origins="https://warehouse.example",
    )
    assert ok.cors_origins == ["https://warehouse.example"]


def test_default_page_size_cannot_exceed_max():
    with pytest.raises(ValidationError):
        Settings(default_page_size=100, max_page_size=10)
