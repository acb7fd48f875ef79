"""Yapılandırma yükleme unit testleri."""

import pytest

from kumas_stok.config import BACKEND_DYNAMODB, BACKEND_SQLITE, load_settings

_ENV_VARS = (
    "KUMAS_STORE_BACKEND",
    "KUMAS_SQLITE_PATH",
    "KUMAS_TABLE_PREFIX",
    "AWS_DEFAULT_REGION",
    "KUMAS_USD_TRY_FALLBACK",
    "KUMAS_LOW_STOCK_THRESHOLD",
    "KUMAS_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestLoadSettings:

    def test_defaults(self, clean_env):
        settings = load_settings()
        assert settings.store_backend == BACKEND_SQLITE
        assert settings.sqlite_path == "kumas_stok.db"
        assert settings.low_stock_threshold == 500.0

    def test_environment_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("KUMAS_STORE_BACKEND", " DynamoDB ")
        monkeypatch.setenv("KUMAS_TABLE_PREFIX", "Test-")
        monkeypatch.setenv("KUMAS_LOW_STOCK_THRESHOLD", "250")
        monkeypatch.setenv("KUMAS_LOG_LEVEL", "debug")
        settings = load_settings()
        assert settings.store_backend == BACKEND_DYNAMODB
        assert settings.table_prefix == "Test-"
        assert settings.low_stock_threshold == 250.0
        assert settings.log_level == "DEBUG"

    def test_env_file_does_not_override_environment(self, clean_env, monkeypatch):
        env_file = clean_env / "test.env"
        env_file.write_text("KUMAS_SQLITE_PATH=dosyadan.db\nKUMAS_USD_TRY_FALLBACK=33.5\n", encoding="utf-8")
        monkeypatch.setenv("KUMAS_SQLITE_PATH", "ortamdan.db")
        # load_dotenv os.environ'a yazar; monkeypatch geri alsın
        monkeypatch.setenv("KUMAS_USD_TRY_FALLBACK", "")
        monkeypatch.delenv("KUMAS_USD_TRY_FALLBACK")

        settings = load_settings(env_file)

        assert settings.sqlite_path == "ortamdan.db"
        assert settings.usd_try_fallback == 33.5

    def test_invalid_backend(self, clean_env, monkeypatch):
        monkeypatch.setenv("KUMAS_STORE_BACKEND", "mongodb")
        with pytest.raises(ValueError):
            load_settings()
