from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003

import pytest

from intune_graph.app import load_intune_config
from intune_graph.config import (
    GRAPH_BASE_URL,
    ConfigurationError,
    InvalidConfigurationError,
    MissingConfigurationError,
    StorageConfig,
    configure_logging,
    get_database_config,
    get_intune_config,
    get_storage_config,
    optional_env_var,
    require_env_vars,
)
from intune_graph.config.storage import (
    DEFAULT_DB_FILENAME,
    HTTP_CACHE_FILENAME,
    database_filename,
)


def test_require_env_vars_returns_stripped_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("BLANK_VAR", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "BLANK_VAR", "MISSING_A"])

    assert str(exc.value) == "Missing configuration for: BLANK_VAR, MISSING_A, MISSING_B"
    assert isinstance(exc.value, ConfigurationError)


def test_optional_env_var_treats_blank_as_absent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " ")

    assert optional_env_var("EXAMPLE_VAR") is None


def test_get_intune_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INTUNE_TENANT_ID", "tenant-0001")
    monkeypatch.setenv("GRAPH_ACCESS_TOKEN", "secret-token")
    monkeypatch.delenv("INTUNE_CLIENT_ID", raising=False)
    monkeypatch.delenv("INTUNE_GRAPH_PAGE_SIZE", raising=False)

    config = get_intune_config()

    assert config.tenant_id == "tenant-0001"
    assert config.access_token == "secret-token"
    assert config.client_id is None
    assert config.resilience.base_url == GRAPH_BASE_URL
    assert config.resilience.ratelimit is not None
    assert config.resilience.cache is None
    assert config.page_size == 100


def test_get_intune_config_requires_tenant_and_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("INTUNE_TENANT_ID", raising=False)
    monkeypatch.delenv("GRAPH_ACCESS_TOKEN", raising=False)

    with pytest.raises(MissingConfigurationError, match="GRAPH_ACCESS_TOKEN, INTUNE_TENANT_ID"):
        get_intune_config()


def test_load_intune_config_with_http_cache(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("INTUNE_TENANT_ID", "tenant-0001")
    monkeypatch.setenv("GRAPH_ACCESS_TOKEN", "secret-token")

    config = load_intune_config(http_cache=True, storage=StorageConfig(data_dir=tmp_path))

    cache = config.resilience.cache
    assert cache is not None
    assert cache.backend == "sqlite"
    assert cache.sqlite_path == str(tmp_path.resolve() / HTTP_CACHE_FILENAME)


def test_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("INTUNE_GRAPH_DATA_DIR", str(custom))

    storage = get_storage_config()

    assert storage.resolve_data_dir() == custom.resolve()


def test_database_config_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INTUNE_GRAPH_DATABASE_URI", "sqlite:///override.db")

    assert get_database_config(tenant_id="tenant-0001").uri == "sqlite:///override.db"


def test_database_config_creates_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("INTUNE_GRAPH_DATABASE_URI", raising=False)
    monkeypatch.setenv("INTUNE_GRAPH_DATA_DIR", str(tmp_path / "data-dir"))

    uri = get_database_config().uri

    expected_path = (tmp_path / "data-dir" / DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()


def test_each_tenant_gets_its_own_database(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("INTUNE_GRAPH_DATABASE_URI", raising=False)
    storage = StorageConfig(data_dir=tmp_path)

    first = get_database_config(tenant_id="contoso.onmicrosoft.com", storage=storage).uri
    second = get_database_config(tenant_id="fabrikam/../x", storage=storage).uri

    assert first.endswith("intune_graph-contoso.onmicrosoft.com.db")
    assert first != second
    assert database_filename("fabrikam/../x") == "intune_graph-fabrikam_.._x.db"
    assert database_filename(None) == DEFAULT_DB_FILENAME


def test_page_size_can_be_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INTUNE_TENANT_ID", "tenant-0001")
    monkeypatch.setenv("GRAPH_ACCESS_TOKEN", "secret-token")
    monkeypatch.setenv("INTUNE_GRAPH_PAGE_SIZE", "250")

    assert get_intune_config().page_size == 250


@pytest.mark.parametrize("raw", ["many", "0", "1000"])
def test_invalid_page_size_is_a_configuration_error(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("INTUNE_TENANT_ID", "tenant-0001")
    monkeypatch.setenv("GRAPH_ACCESS_TOKEN", "secret-token")
    monkeypatch.setenv("INTUNE_GRAPH_PAGE_SIZE", raw)

    with pytest.raises(InvalidConfigurationError, match="INTUNE_GRAPH_PAGE_SIZE") as exc:
        get_intune_config()

    assert isinstance(exc.value, ConfigurationError)
    assert exc.value.value == raw


def test_configure_logging_quiets_http_libraries() -> None:
    configure_logging(level=logging.DEBUG, force=True)
    assert logging.getLogger("httpx").level == logging.DEBUG

    configure_logging(force=True)
    assert logging.getLogger("httpx").level == logging.WARNING
