from __future__ import annotations
"""Connection profile models and persistence."""
from dataclasses import dataclass
import json
import os
from pathlib import Path
from typing import Mapping

import keyring
from keyring.errors import KeyringError

DEFAULT_ENDPOINT = "localhost:9000"
DEFAULT_CREDENTIAL = "minioadmin"
ENV_PROFILE_NAME = "env"
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ConnectionProfile:
    """Represents a saved object-store connection."""

    name: str
    endpoint_url: str
    access_key: str
    secret_key: str
    use_ssl: bool = False

    @property
    def resolved_endpoint(self) -> str:
        """Endpoint with an explicit scheme chosen from ``use_ssl``."""
        return resolve_endpoint(self.endpoint_url, self.use_ssl)


def resolve_endpoint(endpoint: str, use_ssl: bool) -> str:
    cleaned = endpoint.strip()
    if "://" in cleaned:
        return cleaned
    scheme = "https" if use_ssl else "http"
    return f"{scheme}://{cleaned}"


def profile_from_env(environ: Mapping[str, str] | None = None) -> ConnectionProfile:
    env = os.environ if environ is None else environ
    return ConnectionProfile(
        name=ENV_PROFILE_NAME,
        endpoint_url=env.get("MINIO_ENDPOINT") or DEFAULT_ENDPOINT,
        access_key=env.get("MINIO_KEY_ID") or DEFAULT_CREDENTIAL,
        secret_key=env.get("MINIO_ACCESS_KEY") or env.get("MINO_ACCESS_KEY") or DEFAULT_CREDENTIAL,
        use_ssl=(env.get("MINIO_SSL") or "").strip().lower() in _TRUTHY,
    )


class KeychainStore:
    """Encapsulates OS keychain access for secrets."""

    def __init__(self, service_name: str = "s3-console"):
        self._service_name = service_name

    def get_secret(self, profile_name: str) -> str:
        if not profile_name:
            return ""
        try:
            return keyring.get_password(self._service_name, profile_name) or ""
        except KeyringError:
            return ""

    def set_secret(self, profile_name: str, secret_key: str) -> None:
        if not profile_name:
            return
        if not secret_key:
            self.delete_secret(profile_name)
            return
        try:
            keyring.set_password(self._service_name, profile_name, secret_key)
        except KeyringError:
            return

    def delete_secret(self, profile_name: str) -> None:
        if not profile_name:
            return
        try:
            keyring.delete_password(self._service_name, profile_name)
        except KeyringError:
            return


class ProfileStorage:
    """JSON-backed store for connection profiles; secrets live in the keychain."""

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_console_connections.json"
        self._path = Path(storage_path)
        self._keychain = keychain or KeychainStore()

    def load(self) -> list[ConnectionProfile]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return []

        profiles: list[ConnectionProfile] = []
        sanitized: list[dict[str, object]] = []
        saw_plaintext = False
        for entry in data:
            try:
                name = entry["name"]
                endpoint_url = entry["endpoint_url"]
                access_key = entry["access_key"]
            except (KeyError, TypeError):
                continue
            use_ssl = bool(entry.get("use_ssl", False))
            secret_key = entry.get("secret_key", "")
            if secret_key:
                saw_plaintext = True
                self._keychain.set_secret(name, secret_key)
            else:
                secret_key = self._keychain.get_secret(name)
            profiles.append(
                ConnectionProfile(
                    name=name,
                    endpoint_url=endpoint_url,
                    access_key=access_key,
                    secret_key=secret_key,
                    use_ssl=use_ssl,
                )
            )
            sanitized.append(self._serialize(name, endpoint_url, access_key, use_ssl))
        if saw_plaintext:
            self._write_data(sanitized)
        return profiles

    def save(self, profiles: list[ConnectionProfile]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = []
        for profile in profiles:
            self._keychain.set_secret(profile.name, profile.secret_key)
            data.append(
                self._serialize(profile.name, profile.endpoint_url, profile.access_key, profile.use_ssl)
            )
        existing_names = self._load_profile_names()
        current_names = {profile.name for profile in profiles}
        for name in existing_names - current_names:
            self._keychain.delete_secret(name)
        self._write_data(data)

    @staticmethod
    def _serialize(name: str, endpoint_url: str, access_key: str, use_ssl: bool) -> dict[str, object]:
        return {
            "name": name,
            "endpoint_url": endpoint_url,
            "access_key": access_key,
            "use_ssl": use_ssl,
        }

    def _load_profile_names(self) -> set[str]:
        if not self._path.exists():
            return set()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return set()
        names = set()
        for entry in data:
            name = entry.get("name")
            if isinstance(name, str) and name:
                names.add(name)
        return names

    def _write_data(self, data: list[dict[str, object]]) -> None:
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")
