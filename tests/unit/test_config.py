"""
Unit tests for grocery_ml.core.config module.
"""

from pathlib import Path

import pytest

from grocery_ml.core.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    Config,
    create_default_config_file,
    find_config_file,
    get_config,
    get_default_config,
    load_config_cascade,
    load_toml,
    reset_config,
    save_toml,
    set_config,
)


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run each test in an empty directory so ./grocery-ml.toml is absent."""
    monkeypatch.chdir(tmp_path)


class TestConfig:
    """Tests for Config class."""

    def test_default_config(self):
        config = get_default_config()

        assert isinstance(config, Config)
        assert config.storage.get("root") == "stored-models"
        assert config.validation.get("min_images_per_class") == 10
        assert config.training.get("max_epochs") == 30

    def test_config_get(self):
        config = get_default_config()

        assert config.get("server", "port") == 8000
        assert config.get("server", "nonexistent", "default") == "default"
        assert config.get("nosection", "key", 1) == 1

    def test_config_set(self):
        config = get_default_config()

        config.set("training", "max_epochs", 12)
        assert config.get("training", "max_epochs") == 12

    def test_defaults_are_not_shared(self):
        config = get_default_config()
        config.set("storage", "root", "elsewhere")
        config.validation["accepted_image_types"].append("svg")

        assert DEFAULT_CONFIG["storage"]["root"] == "stored-models"
        assert "svg" not in DEFAULT_CONFIG["validation"]["accepted_image_types"]

    def test_to_dict_from_dict(self):
        data = {"storage": {"root": "/srv/models"}, "logging": {"level": "DEBUG"}}
        config = Config.from_dict(data, source="x.toml")

        assert config.storage["root"] == "/srv/models"
        assert config.to_dict()["logging"] == {"level": "DEBUG"}
        assert config.to_dict()["server"] == {}
        assert config._source == "x.toml"


class TestTOMLOperations:
    """Tests for TOML load/save operations."""

    def test_save_and_load(self, tmp_path):
        filepath = tmp_path / "test.toml"
        save_toml(
            {
                "training": {"max_epochs": 20, "seed": None},
                "server": {"cors_origins": ["http://localhost:3000"], "port": 9000},
                "validation": {"max_class_ratio": 4.5, "strict": True},
            },
            filepath,
        )

        loaded = load_toml(filepath)

        assert loaded["training"] == {"max_epochs": 20}
        assert loaded["server"]["cors_origins"] == ["http://localhost:3000"]
        assert loaded["validation"] == {"max_class_ratio": 4.5, "strict": True}

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_toml(tmp_path / "missing.toml")

    def test_create_default_config_file(self):
        path = create_default_config_file()

        assert path == CONFIG_FILENAME
        loaded = load_toml(path)
        assert loaded["storage"]["root"] == "stored-models"
        assert "seed" not in loaded["training"]


class TestFindConfig:
    """Tests for find_config_file."""

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text("[storage]\nroot = 'x'\n")

        assert find_config_file(str(path)) == path

    def test_explicit_missing(self, tmp_path):
        assert find_config_file(str(tmp_path / "nope.toml")) is None

    def test_current_directory(self):
        Path(CONFIG_FILENAME).write_text("[storage]\nroot = 'x'\n")

        assert find_config_file() == Path(CONFIG_FILENAME)


class TestCascade:
    """Tests for load_config_cascade and the global config."""

    def test_explicit_file_overrides_defaults(self, tmp_path):
        path = tmp_path / "override.toml"
        path.write_text("[training]\nmax_epochs = 8\n\n[server]\nport = 9001\n")

        config = load_config_cascade(str(path))

        assert config.get("training", "max_epochs") == 8
        assert config.get("training", "epoch_delay_min_ms") == 100
        assert config.get("server", "port") == 9001
        assert config._source == str(path)

    def test_explicit_beats_current_directory(self, tmp_path):
        Path(CONFIG_FILENAME).write_text("[training]\nmax_epochs = 5\nseed = 3\n")
        path = tmp_path / "explicit.toml"
        path.write_text("[training]\nmax_epochs = 9\n")

        config = load_config_cascade(str(path))

        assert config.get("training", "max_epochs") == 9
        assert config.get("training", "seed") == 3

    def test_malformed_file_is_skipped(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[training\nmax_epochs = ")

        config = load_config_cascade(str(path))

        assert config.get("training", "max_epochs") == 30

    def test_global_config(self):
        custom = get_default_config()
        custom.set("storage", "root", "custom-root")

        set_config(custom)
        assert get_config().get("storage", "root") == "custom-root"

        reset_config()
        assert get_config().get("storage", "root") == "stored-models"
