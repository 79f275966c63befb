"""Unit tests for settings.settings_loader module."""

import os

import pytest
from unittest.mock import patch

from src.settings.errors import ConfigError
from src.settings.settings_loader import ENV_VARS, SettingsLoader


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Run every test in an empty directory without settings variables."""
    for env_name in ENV_VARS.values():
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.chdir(tmp_path)
    with patch('src.settings.settings_loader.load_dotenv'):
        yield


def set_required_env(monkeypatch):
    monkeypatch.setenv("CONFLUENCE_BASE_URL", "https://example.atlassian.net/")
    monkeypatch.setenv("CONFLUENCE_PARENT_ID", "123456")
    monkeypatch.setenv("ATLASSIAN_USER_NAME", "me@example.com")
    monkeypatch.setenv("ATLASSIAN_API_TOKEN", "token")


class TestSettingsLoader:
    """Test cases for SettingsLoader.load."""

    def test_loads_from_environment_with_defaults(self, monkeypatch, tmp_path):
        set_required_env(monkeypatch)

        settings = SettingsLoader.load()

        assert settings.confluence_base_url == "https://example.atlassian.net"
        assert settings.confluence_parent_id == "123456"
        assert settings.folder_to_publish == "."
        assert settings.content_root == os.getcwd()
        assert settings.first_heading_page_title is False
        assert settings.max_workers == 4

    def test_missing_required_field_names_it(self, monkeypatch):
        set_required_env(monkeypatch)
        monkeypatch.delenv("ATLASSIAN_API_TOKEN")

        with pytest.raises(ConfigError) as exc_info:
            SettingsLoader.load()

        assert exc_info.value.config_field == "atlassian_api_token"
        assert "ATLASSIAN_API_TOKEN" in str(exc_info.value)

    def test_reads_default_config_file(self, tmp_path):
        (tmp_path / ".confluence-publish.yaml").write_text(
            "confluence_base_url: https://example.atlassian.net\n"
            "confluence_parent_id: 42\n"
            "atlassian_user_name: me@example.com\n"
            "atlassian_api_token: token\n"
            "first_heading_page_title: true\n"
            "default_space_key: TEAM\n"
            "max_workers: 2\n"
        )

        settings = SettingsLoader.load()

        assert settings.confluence_parent_id == "42"
        assert settings.first_heading_page_title is True
        assert settings.default_space_key == "TEAM"
        assert settings.max_workers == 2

    def test_environment_overrides_config_file(self, monkeypatch, tmp_path):
        config = tmp_path / "custom.yaml"
        config.write_text("confluence_parent_id: '1'\nfolder_to_publish: docs\n")
        set_required_env(monkeypatch)

        settings = SettingsLoader.load(str(config))

        assert settings.confluence_parent_id == "123456"
        assert settings.folder_to_publish == "docs"

    def test_missing_explicit_config_file_raises(self):
        with pytest.raises(ConfigError, match="not found"):
            SettingsLoader.load("missing.yaml")

    def test_non_mapping_yaml_is_rejected(self, tmp_path):
        config = tmp_path / "list.yaml"
        config.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="YAML dictionary"):
            SettingsLoader.load(str(config))

    def test_unknown_keys_are_ignored(self, monkeypatch, tmp_path, caplog):
        config = tmp_path / "extra.yaml"
        config.write_text("colour: blue\n")
        set_required_env(monkeypatch)

        SettingsLoader.load(str(config))

        assert "colour" in caplog.text

    def test_non_numeric_parent_id_is_rejected(self, monkeypatch):
        set_required_env(monkeypatch)
        monkeypatch.setenv("CONFLUENCE_PARENT_ID", "abc")

        with pytest.raises(ConfigError) as exc_info:
            SettingsLoader.load()

        assert exc_info.value.config_field == "confluence_parent_id"

    def test_non_http_base_url_is_rejected(self, monkeypatch):
        set_required_env(monkeypatch)
        monkeypatch.setenv("CONFLUENCE_BASE_URL", "ftp://example.com")

        with pytest.raises(ConfigError):
            SettingsLoader.load()

    def test_content_root_is_made_absolute(self, monkeypatch, tmp_path):
        set_required_env(monkeypatch)
        monkeypatch.setenv("CONFLUENCE_CONTENT_ROOT", "docs")

        settings = SettingsLoader.load()

        assert settings.content_root == os.path.join(os.getcwd(), "docs")
