"""
Tests for configuration loading and folder resolution.
"""

from pathlib import Path

import pytest

from campaign_sync.config import DEFAULT_FOLDERS, DriveFolder, load_config, resolve_config, resolve_folder
from campaign_sync.config.resolver import is_unresolved
from campaign_sync.exceptions import ConfigurationError


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        config = load_config(tmp_path)

        assert config.get("sync.max_runtime_ms") == 50_000
        assert config.get("sync.file_delay") == 0.25
        assert config.get("sync.persist_batch_size") == 1000
        assert config.get("drive.retry.max_attempts") == 3
        assert config.default_folder == "scheduled_email"
        assert config.folders == DEFAULT_FOLDERS
        assert config.api_key is None

    def test_yaml_overrides_defaults(self, tmp_path):
        (tmp_path / "campaign_sync.yaml").write_text(
            "sync:\n  max_runtime_ms: 1000\ndatabase:\n  type: duckdb\n  path: ':memory:'\n"
        )
        config = load_config(tmp_path)

        assert config.get("sync.max_runtime_ms") == 1000
        assert config.get("sync.file_delay") == 0.25
        assert config.database["path"] == ":memory:"

    def test_env_overlay(self, tmp_path):
        (tmp_path / "campaign_sync.yaml").write_text("sync:\n  file_delay: 1.0\n")
        (tmp_path / "campaign_sync.prod.yaml").write_text("sync:\n  file_delay: 0.5\n")

        assert load_config(tmp_path, env="prod").get("sync.file_delay") == 0.5
        assert load_config(tmp_path, env="staging").get("sync.file_delay") == 1.0

    def test_api_key_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "secret")
        assert load_config(tmp_path).api_key == "secret"

    def test_api_key_from_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        (tmp_path / "campaign_sync.yaml").write_text("drive:\n  api_key: from-file\n")
        assert load_config(tmp_path).api_key == "from-file"

    def test_custom_folders(self, tmp_path):
        (tmp_path / "campaign_sync.yaml").write_text(
            "folders:\n  archive:\n    id: abc123\n    name: Archive\ndefault_folder: archive\n"
        )
        config = load_config(tmp_path)

        assert config.folders["archive"] == DriveFolder(id="abc123", name="Archive")
        assert config.default_folder == "archive"

    def test_unknown_default_folder(self, tmp_path):
        (tmp_path / "campaign_sync.yaml").write_text("default_folder: nowhere\n")
        with pytest.raises(ConfigurationError, match="default_folder 'nowhere'"):
            load_config(tmp_path)

    def test_folder_without_id(self, tmp_path):
        (tmp_path / "campaign_sync.yaml").write_text("folders:\n  broken:\n    name: Broken\n")
        with pytest.raises(ConfigurationError, match="must be a mapping with an 'id'"):
            load_config(tmp_path)

    def test_invalid_yaml_reports_position(self, tmp_path):
        (tmp_path / "campaign_sync.yaml").write_text("sync:\n  file_delay: [1, 2\n")
        with pytest.raises(ConfigurationError, match="line"):
            load_config(tmp_path)

    def test_non_mapping_yaml(self, tmp_path):
        (tmp_path / "campaign_sync.yaml").write_text("- one\n- two\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_config(tmp_path)

    def test_invalid_batch_size(self, tmp_path):
        (tmp_path / "campaign_sync.yaml").write_text("sync:\n  persist_batch_size: 0\n")
        with pytest.raises(ConfigurationError, match="persist_batch_size"):
            load_config(tmp_path)

    def test_dict_access(self, tmp_path):
        config = load_config(tmp_path)
        assert "sync.file_delay" in config
        assert "sync.nothing" not in config
        assert config["sync"].get("batch_delay") == 0.05
        with pytest.raises(KeyError):
            config["missing"]

    def test_example_file_matches_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        example = Path(__file__).parent.parent / "examples" / "campaign_sync.yaml"
        (tmp_path / "campaign_sync.yaml").write_text(example.read_text())

        assert load_config(tmp_path).data == load_config(tmp_path / "missing").data


class TestResolver:
    """Tests for placeholder resolution."""

    def test_env_var_substitution(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "db.internal")
        assert resolve_config({"host": "${DB_HOST}"}) == {"host": "db.internal"}

    def test_unset_var_is_left_in_place(self, monkeypatch):
        monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
        assert resolve_config({"x": "${NOT_SET_ANYWHERE}"}) == {"x": "${NOT_SET_ANYWHERE}"}

    def test_env_placeholder(self):
        assert resolve_config({"path": "data/{env}.duckdb", "items": ["{env}"]}, env="prod") == {
            "path": "data/prod.duckdb",
            "items": ["prod"],
        }

    def test_non_strings_untouched(self):
        assert resolve_config({"n": 3, "flag": True}) == {"n": 3, "flag": True}

    def test_is_unresolved(self):
        assert is_unresolved(None)
        assert is_unresolved("  ")
        assert is_unresolved("${GOOGLE_API_KEY}")
        assert not is_unresolved("abc")


class TestResolveFolder:
    """Tests for folder selection."""

    def test_default(self):
        assert resolve_folder(None, DEFAULT_FOLDERS).name == "Scheduled Email"

    def test_by_key(self):
        assert resolve_folder("processed_lists", DEFAULT_FOLDERS).name == "[00] Processed Lists"

    def test_explicit_folder_passes_through(self):
        folder = DriveFolder(id="x", name="X")
        assert resolve_folder(folder, DEFAULT_FOLDERS) is folder

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown campaign recipient folder: archive"):
            resolve_folder("archive", DEFAULT_FOLDERS)
