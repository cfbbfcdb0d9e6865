"""設定読み込みのテスト."""

import logging
from pathlib import Path

import pytest
import yaml

from temp_files.models.config import DEFAULT_CONFIG_PATH, TempFilesConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """テストごとにTEMP_FILES_*環境変数を取り除く."""
    for name in (
        "TEMP_FILES_CONFIG",
        "TEMP_FILES_DIRECTORY",
        "TEMP_FILES_MAX_AGE_HOURS",
        "TEMP_FILES_DISK",
        "TEMP_FILES_DOWNLOAD_TIMEOUT",
        "TEMP_FILES_LOCAL_ROOT",
    ):
        monkeypatch.delenv(name, raising=False)


def write_config(path: Path, config) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f)
    return path


class TestLoadConfig:
    """load_configのテストクラス."""

    def test_defaults(self):
        config = TempFilesConfig()
        assert config.directory == "temp"
        assert config.max_age_hours == 10
        assert config.disk == "local"
        assert config.download_timeout == 30
        assert config.disks["local"].driver == "local"

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")
        assert config == TempFilesConfig()

    def test_missing_file_is_logged(self, tmp_path, caplog):
        caplog.set_level(logging.DEBUG, logger="temp_files.models.config")
        missing = tmp_path / "missing.yaml"

        load_config(missing)

        assert f"Config file {missing} not found, using defaults" in caplog.text

    def test_bundled_config_file(self):
        assert DEFAULT_CONFIG_PATH.exists()
        config = load_config()
        assert config.directory == "temp"
        assert config.max_age_hours == 10

    def test_section_in_yaml(self, tmp_path):
        config_file = write_config(tmp_path / "config.yaml", {
            "temp_files": {
                "directory": "scratch",
                "max_age_hours": 2,
                "disk": "shared",
                "disks": {"shared": {"driver": "local", "root": str(tmp_path)}},
            }
        })

        config = load_config(config_file)

        assert config.directory == "scratch"
        assert config.max_age_hours == 2
        assert config.disk == "shared"
        assert config.disks["shared"].root == str(tmp_path)

    def test_flat_yaml(self, tmp_path):
        config_file = write_config(tmp_path / "config.yaml", {"directory": "flat"})
        assert load_config(config_file).directory == "flat"

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        config_file = write_config(tmp_path / "config.yaml", {"directory": "from-env-file"})
        monkeypatch.setenv("TEMP_FILES_CONFIG", str(config_file))
        assert load_config().directory == "from-env-file"

    def test_env_overrides(self, tmp_path, monkeypatch):
        config_file = write_config(tmp_path / "config.yaml", {"directory": "scratch"})
        monkeypatch.setenv("TEMP_FILES_DIRECTORY", "override")
        monkeypatch.setenv("TEMP_FILES_MAX_AGE_HOURS", "0.5")
        monkeypatch.setenv("TEMP_FILES_LOCAL_ROOT", str(tmp_path / "root"))

        config = load_config(config_file)

        assert config.directory == "override"
        assert config.max_age_hours == 0.5
        assert config.disks["local"].root == str(tmp_path / "root")

    def test_invalid_env_value_is_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEMP_FILES_MAX_AGE_HOURS", "soon")
        config = load_config(tmp_path / "missing.yaml")
        assert config.max_age_hours == 10

    def test_broken_yaml_uses_defaults(self, tmp_path, caplog):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("temp_files: [unclosed\n", encoding="utf-8")

        config = load_config(config_file)

        assert config == TempFilesConfig()
        assert "Failed to read config file" in caplog.text

    def test_invalid_values_use_defaults(self, tmp_path, caplog):
        config_file = write_config(tmp_path / "config.yaml", {"max_age_hours": -1})

        config = load_config(config_file)

        assert config.max_age_hours == 10
        assert "Invalid temp files configuration" in caplog.text
