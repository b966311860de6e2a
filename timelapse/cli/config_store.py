"""Local configuration and credential files of the command line client."""

import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from timelapse.cli.errors import ConfigurationError
from timelapse.config import ClientSettings

CONFIG_FILE = "config.json"
CREDENTIALS_FILE = "credentials.json"


class ProviderCredentials(BaseModel):
    """Tokens obtained from one identity provider."""

    access_token: str = ""
    refresh_token: str = ""
    id_token: str = ""


class Credentials(BaseModel):
    """Contents of ``credentials.json``."""

    credentials: dict[str, ProviderCredentials] = Field(default_factory=dict)
    default_provider: str = ""

    def current(self) -> ProviderCredentials | None:
        return self.credentials.get(self.default_provider)


class ClientConfiguration(BaseModel):
    """Contents of ``config.json``."""

    base_url: str = ""


def default_config_dir(settings: ClientSettings) -> Path:
    """Directory holding config.json and credentials.json.

    ``TIMELAPSE_CONFIG_DIR`` wins, then ``$XDG_CONFIG_HOME/timelapse``, then
    ``~/.config/timelapse``.
    """
    if settings.config_dir:
        return Path(settings.config_dir).expanduser()
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "timelapse"


class ConfigStore:
    """Reads and writes the JSON files in the client's config directory."""

    def __init__(self, directory: Path):
        self.directory = directory

    @property
    def credentials_path(self) -> Path:
        return self.directory / CREDENTIALS_FILE

    @property
    def config_path(self) -> Path:
        return self.directory / CONFIG_FILE

    def load_credentials(self) -> Credentials:
        return self._load(self.credentials_path, Credentials)

    def save_credentials(self, credentials: Credentials) -> None:
        """Write credentials readable by the owner only."""
        self._write(self.credentials_path, credentials.model_dump_json(indent=2), mode=0o600)

    def load_configuration(self) -> ClientConfiguration:
        return self._load(self.config_path, ClientConfiguration)

    def save_configuration(self, configuration: ClientConfiguration) -> None:
        self._write(self.config_path, configuration.model_dump_json(indent=2), mode=0o644)

    @staticmethod
    def _load(path: Path, model: type[BaseModel]):
        if not path.exists():
            return model()
        try:
            return model.model_validate_json(path.read_bytes())
        except (OSError, PydanticValidationError) as exc:
            raise ConfigurationError(f"Could not read {path}: {exc}") from exc

    def _write(self, path: Path, content: str, mode: int) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True, mode=0o700)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.chmod(path, mode)
        except OSError as exc:
            raise ConfigurationError(f"Could not write {path}: {exc}") from exc
