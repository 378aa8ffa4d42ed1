"""
Integration tests for the grocery-ml CLI.
"""

import json
import zipfile

import pytest
from click.testing import CliRunner

from grocery_ml.cli import cli
from grocery_ml.cli.service_helpers import set_factory
from tests.helpers import make_bundle, make_dataset

pytestmark = pytest.mark.integration


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def cli_factory(factory):
    """Route CLI commands to the test factory."""
    set_factory(factory)
    return factory


@pytest.fixture
def dataset_file(tmp_path):
    path = tmp_path / "dataset.json"
    path.write_text(json.dumps(make_dataset({"Apples": 12, "Oranges": 12}).to_dict()))
    return path


@pytest.fixture
def stored_model(factory):
    factory.store.save(make_bundle())
    return "test-model"


class TestCLIBasic:
    """Basic CLI tests."""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_command_groups(self, runner):
        result = runner.invoke(cli, ["--help"])

        for group in ["train", "models", "storage", "config", "serve"]:
            assert group in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "grocery-ml" in result.output


class TestTrainCommands:
    def test_run(self, runner, dataset_file, factory):
        result = runner.invoke(cli, ["train", "run", str(dataset_file), "--no-delay", "-q"])

        assert result.exit_code == 0, result.output
        assert "Trained model grocery-model-" in result.output
        assert len(factory.store.list_model_ids()) == 1

    def test_run_invalid_dataset(self, runner, tmp_path, factory):
        path = tmp_path / "small.json"
        path.write_text(json.dumps(make_dataset({"Apples": 3, "Oranges": 12}).to_dict()))

        result = runner.invoke(cli, ["train", "run", str(path), "-q"])

        assert result.exit_code == 1
        assert 'Error: Class "Apples" needs at least 10 images' in result.output
        assert factory.store.list_model_ids() == []

    def test_validate(self, runner, dataset_file):
        result = runner.invoke(cli, ["train", "validate", str(dataset_file)])

        assert result.exit_code == 0
        assert "Dataset is valid: 2 classes, 24 images" in result.output

    def test_validate_failure(self, runner, tmp_path):
        path = tmp_path / "one.json"
        path.write_text(json.dumps(make_dataset({"Apples": 12}).to_dict()))

        result = runner.invoke(cli, ["train", "validate", str(path)])

        assert result.exit_code == 1
        assert "Error: Need at least 2 classes to train (has 1)" in result.output

    def test_malformed_dataset_file(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        result = runner.invoke(cli, ["train", "validate", str(path)])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_stats(self, runner, dataset_file):
        result = runner.invoke(cli, ["train", "stats", str(dataset_file)])

        assert result.exit_code == 0
        assert "Total: 24 images in 2 classes" in result.output

    def test_untrained(self, runner, dataset_file, factory):
        result = runner.invoke(
            cli, ["train", "untrained", str(dataset_file), "--model-id", "draft", "--seed", "1"]
        )

        assert result.exit_code == 0
        assert "Generated model draft" in result.output
        assert factory.store.list_model_ids() == ["draft"]

    def test_untrained_no_save(self, runner, dataset_file, factory):
        result = runner.invoke(cli, ["train", "untrained", str(dataset_file), "--no-save"])

        assert result.exit_code == 0
        assert "(not saved)" in result.output
        assert factory.store.list_model_ids() == []

    def test_progress_json(self, runner):
        result = runner.invoke(cli, ["train", "progress", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["totalEpochs"] == 20
        assert 0 <= data["progress"] < 100


class TestModelCommands:
    def test_list_empty(self, runner):
        result = runner.invoke(cli, ["models", "list"])

        assert result.exit_code == 0
        assert "No stored models." in result.output

    def test_list_json(self, runner, stored_model):
        result = runner.invoke(cli, ["models", "list", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [m["id"] for m in data] == [stored_model]
        assert data[0]["trainedImages"] == 24

    def test_show(self, runner, stored_model):
        result = runner.invoke(cli, ["models", "show", stored_model])

        assert result.exit_code == 0
        assert "Apples, Oranges" in result.output

    def test_show_missing(self, runner):
        result = runner.invoke(cli, ["models", "show", "missing"])

        assert result.exit_code == 1
        assert "Error: Model not found: missing" in result.output

    def test_delete(self, runner, stored_model, factory):
        result = runner.invoke(cli, ["models", "delete", stored_model, "--yes"])

        assert result.exit_code == 0
        assert factory.store.list_model_ids() == []

    def test_delete_declined(self, runner, stored_model, factory):
        result = runner.invoke(cli, ["models", "delete", stored_model], input="n\n")

        assert result.exit_code == 1
        assert factory.store.list_model_ids() == [stored_model]

    def test_export(self, runner, stored_model, tmp_path):
        output = tmp_path / "exported.zip"

        result = runner.invoke(cli, ["models", "export", stored_model, "-o", str(output)])

        assert result.exit_code == 0
        with zipfile.ZipFile(output) as zf:
            assert "model.weights.bin" in zf.namelist()

    def test_export_json_then_import(self, runner, stored_model, tmp_path, factory):
        exported = runner.invoke(cli, ["models", "export", stored_model, "--json"])
        assert exported.exit_code == 0

        payload = json.loads(exported.output)
        payload["id"] = "copy"
        path = tmp_path / "copy.json"
        path.write_text(json.dumps(payload))

        result = runner.invoke(cli, ["models", "import", str(path)])

        assert result.exit_code == 0, result.output
        assert sorted(factory.store.list_model_ids()) == ["copy", stored_model]

    def test_import_invalid_file(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"modelId": "x"}))

        result = runner.invoke(cli, ["models", "import", str(path)])

        assert result.exit_code == 1
        assert "Missing required fields" in result.output


class TestStorageCommands:
    def test_info_json(self, runner, stored_model):
        result = runner.invoke(cli, ["storage", "info", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["totalModels"] == 1
        assert data["availableSpace"] == 10 * 1024 ** 3

    def test_summary(self, runner):
        result = runner.invoke(cli, ["storage", "summary"])

        assert result.exit_code == 0
        assert "10.0 GB" in result.output

    def test_model(self, runner, stored_model):
        result = runner.invoke(cli, ["storage", "model", stored_model])

        assert result.exit_code == 0
        assert "model-info.json" in result.output

    def test_model_missing(self, runner):
        result = runner.invoke(cli, ["storage", "model", "missing"])

        assert result.exit_code == 1


class TestConfigCommands:
    def test_init(self, runner, tmp_path):
        output = tmp_path / "grocery-ml.toml"

        result = runner.invoke(cli, ["config", "init", "-o", str(output)])

        assert result.exit_code == 0
        assert "[training]" in output.read_text()

    def test_init_existing(self, runner, tmp_path):
        output = tmp_path / "grocery-ml.toml"
        output.write_text("")

        result = runner.invoke(cli, ["config", "init", "-o", str(output)])

        assert result.exit_code == 1
        assert "Use --force to overwrite." in result.output

    def test_path(self, runner):
        result = runner.invoke(cli, ["config", "path"])

        assert result.exit_code == 0
        assert "grocery-ml.toml" in result.output

    def test_show(self, runner):
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "[storage]" in result.output
