import pytest
from pydantic import ValidationError

from flashdrill.application.config import AppConfig, resolve_config
from flashdrill.application.factory import (
    build_study_session,
    get_catalog_repository,
    get_state_store,
)
from flashdrill.domain.exceptions import CatalogError
from flashdrill.infrastructure.adapters.state_store import (
    InMemoryStateStore,
    JsonFileStateStore,
)


def test_defaults(mock_home):
    config = resolve_config()

    assert config.state_file == mock_home / ".config/flashdrill/state.json"
    assert config.catalog_file is None
    assert config.store_backend == "file"
    assert config.miss_delay_seconds == 5.0
    assert config.shuffle_catalog is True
    assert set(AppConfig.model_fields) == {
        "state_file",
        "catalog_file",
        "store_backend",
        "miss_delay_seconds",
        "shuffle_catalog",
    }


def test_env_overrides_defaults(mock_home, monkeypatch):
    monkeypatch.setenv("FLASHDRILL_MISS_DELAY_SECONDS", "2")
    monkeypatch.setenv("FLASHDRILL_STORE_BACKEND", "memory")

    config = resolve_config()

    assert config.miss_delay_seconds == 2.0
    assert config.store_backend == "memory"


def test_cli_overrides_win_and_none_is_ignored(mock_home, monkeypatch):
    monkeypatch.setenv("FLASHDRILL_MISS_DELAY_SECONDS", "2")

    config = resolve_config({"miss_delay_seconds": 0.5, "catalog_file": None})

    assert config.miss_delay_seconds == 0.5
    assert config.catalog_file is None


def test_toml_file_is_read(mock_home, monkeypatch):
    cfg = mock_home / ".config/flashdrill/config.toml"
    cfg.parent.mkdir(parents=True)
    cfg.write_text('miss_delay_seconds = 1.5\nshuffle_catalog = false\n')

    config = resolve_config()
    assert config.miss_delay_seconds == 1.5
    assert config.shuffle_catalog is False

    monkeypatch.setenv("FLASHDRILL_MISS_DELAY_SECONDS", "3")
    assert resolve_config().miss_delay_seconds == 3.0


def test_negative_delay_rejected(mock_home):
    with pytest.raises(ValidationError):
        resolve_config({"miss_delay_seconds": -1})


def test_catalog_path_is_resolved(mock_home, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = resolve_config({"catalog_file": "cards.yaml"})

    assert config.catalog_file == (tmp_path / "cards.yaml").resolve()


# --- Factory ---


def test_store_selection(mock_home):
    assert isinstance(get_state_store(resolve_config()), JsonFileStateStore)
    assert isinstance(
        get_state_store(resolve_config({"store_backend": "memory"})), InMemoryStateStore
    )


def test_missing_catalog_raises(mock_home):
    with pytest.raises(CatalogError, match="No catalog configured"):
        get_catalog_repository(resolve_config())


def test_build_study_session(mock_home, tmp_path):
    catalog = tmp_path / "cards.yaml"
    catalog.write_text("- {id: 1, front: Suco, back: 401}\n- {id: 2, front: Agua, back: 402}\n")

    session = build_study_session(
        resolve_config({"catalog_file": catalog, "store_backend": "memory"})
    )

    assert sorted(session.start()) == [1, 2]
