"""Tests for ConfigService."""

from grocery_ml.services.config import ConfigService


class TestConfigService:
    def test_get_config(self):
        result = ConfigService().get_config()

        assert result.success
        assert result.data.get("storage", "root") is not None

    def test_create_default_config(self, tmp_path):
        path = tmp_path / "grocery-ml.toml"

        result = ConfigService().create_default_config(str(path))

        assert result.success
        assert path.exists()

    def test_create_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "grocery-ml.toml"
        path.write_text("[storage]\n")

        result = ConfigService().create_default_config(str(path))

        assert not result.success
        assert "already exists" in result.error

    def test_create_with_force(self, tmp_path):
        path = tmp_path / "grocery-ml.toml"
        path.write_text("[storage]\n")

        assert ConfigService().create_default_config(str(path), force=True).success
        assert "[validation]" in path.read_text()

    def test_config_locations(self):
        locations = ConfigService().get_config_locations().data

        assert locations[0] == "grocery-ml.toml"
        assert len(locations) == 3
