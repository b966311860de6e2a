"""Tests for the client's local configuration files."""

import json
import stat

import pytest

from timelapse.cli.config_store import (
    ClientConfiguration,
    ConfigStore,
    Credentials,
    ProviderCredentials,
    default_config_dir,
)
from timelapse.cli.errors import ConfigurationError
from timelapse.config import ClientSettings


class TestConfigStore:
    """Test reading and writing config.json and credentials.json."""

    def test_missing_files_are_empty(self, tmp_path):
        """Test defaults when nothing was stored yet."""
        store = ConfigStore(tmp_path / "timelapse")

        assert store.load_credentials().current() is None
        assert store.load_configuration().base_url == ""

    def test_credentials_round_trip_with_private_mode(self, tmp_path):
        """Test that credentials are stored readable by the owner only."""
        store = ConfigStore(tmp_path / "timelapse")
        credentials = Credentials(
            credentials={"google": ProviderCredentials(id_token="id", refresh_token="refresh")},
            default_provider="google",
        )

        store.save_credentials(credentials)

        assert stat.S_IMODE(store.credentials_path.stat().st_mode) == 0o600
        assert store.load_credentials().current().refresh_token == "refresh"

    def test_file_format(self, tmp_path):
        """Test the JSON layout of both files."""
        store = ConfigStore(tmp_path)
        store.save_configuration(ClientConfiguration(base_url="https://time.example.com"))
        store.save_credentials(
            Credentials(
                credentials={"google": ProviderCredentials(access_token="a", id_token="i")},
                default_provider="google",
            )
        )

        assert json.loads(store.config_path.read_text()) == {"base_url": "https://time.example.com"}
        assert json.loads(store.credentials_path.read_text()) == {
            "credentials": {"google": {"access_token": "a", "refresh_token": "", "id_token": "i"}},
            "default_provider": "google",
        }

    def test_corrupt_file(self, tmp_path):
        """Test that unreadable files raise a configuration error."""
        (tmp_path / "config.json").write_text("{not json")

        with pytest.raises(ConfigurationError, match="config.json"):
            ConfigStore(tmp_path).load_configuration()


class TestDefaultConfigDir:
    """Test config directory resolution."""

    def test_explicit_setting_wins(self, tmp_path):
        """Test TIMELAPSE_CONFIG_DIR."""
        settings = ClientSettings(config_dir=str(tmp_path))
        assert default_config_dir(settings) == tmp_path

    def test_xdg_config_home(self, tmp_path, monkeypatch):
        """Test the XDG base directory."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert default_config_dir(ClientSettings(config_dir="")) == tmp_path / "timelapse"

    def test_home_fallback(self, tmp_path, monkeypatch):
        """Test the ~/.config fallback."""
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        expected = tmp_path / ".config" / "timelapse"
        assert default_config_dir(ClientSettings(config_dir="")) == expected
