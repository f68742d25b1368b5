"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import new_model
from typer.testing import CliRunner

from prompt_models import __version__
from prompt_models.cli import app

runner = CliRunner()


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Directory for the CLI's stored configurations."""
    return tmp_path / "cli-store"


def invoke(*args: str, storage_dir: Path | None = None):
    """Run the CLI, pointing it at the test storage directory."""
    command = list(args)
    if storage_dir is not None:
        command += ["--storage-dir", str(storage_dir)]
    return runner.invoke(app, command)


class TestCLI:
    """Tests for CLI commands."""

    def test_version(self) -> None:
        """Test --version prints the version."""
        result = invoke("--version")

        assert result.exit_code == 0
        assert f"prompt-models v{__version__}" in result.output

    def test_info(self, storage_dir: Path) -> None:
        """Test info lists the registered providers."""
        result = invoke("info", storage_dir=storage_dir)

        assert result.exit_code == 0
        assert "Google Gemini" in result.output
        assert "deepseek" in result.output

    def test_list_initializes_storage(self, storage_dir: Path) -> None:
        """Test listing seeds the storage with the defaults."""
        result = invoke("list", storage_dir=storage_dir)

        assert result.exit_code == 0
        assert "openai" in result.output
        assert (storage_dir / "models.json").exists()

    def test_enable_and_list_enabled(self, storage_dir: Path) -> None:
        """Test an enabled model shows up in the enabled list."""
        assert invoke("disable", "gemini", storage_dir=storage_dir).exit_code == 0
        result = invoke("enable", "gemini", storage_dir=storage_dir)
        assert result.exit_code == 0
        assert "Enabled" in result.output

        result = invoke("list", "--enabled", storage_dir=storage_dir)

        assert result.exit_code == 0
        assert "gemini" in result.output

    def test_enable_unknown(self, storage_dir: Path) -> None:
        """Test configuration errors exit with status 1."""
        result = invoke("enable", "nope", storage_dir=storage_dir)

        assert result.exit_code == 1
        assert "Unknown model: nope" in result.output

    def test_show_masks_api_key(self, storage_dir: Path, tmp_path: Path) -> None:
        """Test show hides the stored API key."""
        import_file = tmp_path / "import.json"
        import_file.write_text(json.dumps([new_model()]), encoding="utf-8")
        assert invoke("import", str(import_file), storage_dir=storage_dir).exit_code == 0

        result = invoke("show", "my-model", storage_dir=storage_dir)

        assert result.exit_code == 0
        assert "providerMeta" in result.output
        assert "sk-mine" not in result.output

    def test_show_unknown(self, storage_dir: Path) -> None:
        """Test showing an unknown key fails."""
        result = invoke("show", "nope", storage_dir=storage_dir)
        assert result.exit_code == 1

    def test_delete(self, storage_dir: Path) -> None:
        """Test deleting a model removes it."""
        result = invoke("delete", "siliconflow", storage_dir=storage_dir)
        assert result.exit_code == 0

        stored = json.loads((storage_dir / "models.json").read_text(encoding="utf-8"))
        assert "siliconflow" not in stored

    def test_delete_unknown(self, storage_dir: Path) -> None:
        """Test deleting an unknown key fails."""
        result = invoke("delete", "nope", storage_dir=storage_dir)

        assert result.exit_code == 1
        assert "Model nope does not exist" in result.output

    def test_export_to_file(self, storage_dir: Path, tmp_path: Path) -> None:
        """Test exporting writes every configuration to a file."""
        output = tmp_path / "export.json"

        result = invoke("export", "--output", str(output), storage_dir=storage_dir)

        assert result.exit_code == 0
        exported = json.loads(output.read_text(encoding="utf-8"))
        assert {"openai", "anthropic", "custom"} <= {entry["id"] for entry in exported}

    def test_import_reports_skipped(self, storage_dir: Path, tmp_path: Path) -> None:
        """Test import summarises added and skipped entries."""
        import_file = tmp_path / "import.json"
        import_file.write_text(json.dumps([new_model("fresh"), {"garbage": True}]), encoding="utf-8")

        result = invoke("import", str(import_file), storage_dir=storage_dir)

        assert result.exit_code == 0
        assert "1 new" in result.output
        assert "1 skipped" in result.output
        assert "Missing key field" in result.output

    def test_import_invalid_json(self, storage_dir: Path, tmp_path: Path) -> None:
        """Test a file that is not JSON is refused."""
        import_file = tmp_path / "broken.json"
        import_file.write_text("{oops", encoding="utf-8")

        result = invoke("import", str(import_file), storage_dir=storage_dir)

        assert result.exit_code == 1

    def test_import_not_a_list(self, storage_dir: Path, tmp_path: Path) -> None:
        """Test a JSON object instead of a list is refused."""
        import_file = tmp_path / "object.json"
        import_file.write_text('{"openai": {}}', encoding="utf-8")

        result = invoke("import", str(import_file), storage_dir=storage_dir)

        assert result.exit_code == 1
        assert "must be a list" in result.output
