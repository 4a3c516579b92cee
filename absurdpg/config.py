"""Saved connection profile storage."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

from .models import ConnectionParameters

CONFIG_FILE = Path.home() / ".config" / "absurdpg" / "configs.json"

LOG = logging.getLogger(__name__)


class ConfigIOError(RuntimeError):
    """Raised when the profile store cannot be read, written or parsed."""


class ConnectionProfileConfig(BaseModel):
    """Named connection profile stored in configs.json."""

    name: str
    host: str = ""
    port: str = ""
    user: str = ""
    password: str = ""
    dbname: str = ""

    def to_parameters(self) -> ConnectionParameters:
        """Return the connection values for this profile."""

        return ConnectionParameters(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.dbname,
        )


_PROFILES = TypeAdapter(list[ConnectionProfileConfig])


class ConfigStore:
    """Loads and saves the ordered profile list as JSON."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        # Resolved lazily so tests can patch CONFIG_FILE.
        return self._path or CONFIG_FILE

    def load(self) -> list[ConnectionProfileConfig]:
        """Return saved profiles; an empty list when no store exists yet."""

        path = self.path
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise ConfigIOError(f"Could not read config file {path}: {exc}") from exc
        try:
            return _PROFILES.validate_json(data)
        except ValidationError as exc:
            raise ConfigIOError(f"Error parsing config file {path}: {exc}") from exc

    def save(self, profiles: list[ConnectionProfileConfig]) -> None:
        """Overwrite the store with the given profiles."""

        path = self.path
        payload = _PROFILES.dump_json(list(profiles), indent=2)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(payload + b"\n")
        except OSError as exc:
            raise ConfigIOError(f"Could not write config file {path}: {exc}") from exc
        LOG.debug("Saved profiles", extra={"path": str(path), "count": len(profiles)})

    def upsert(self, profile: ConnectionProfileConfig) -> list[ConnectionProfileConfig]:
        """Replace the profile with the same name, or append it, then save."""

        profiles = self.load()
        for idx, existing in enumerate(profiles):
            if existing.name == profile.name:
                profiles[idx] = profile
                break
        else:
            profiles.append(profile)
        self.save(profiles)
        return profiles


__all__ = ["CONFIG_FILE", "ConfigIOError", "ConfigStore", "ConnectionProfileConfig"]
