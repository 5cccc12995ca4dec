from __future__ import annotations
"""Application settings persistence helpers."""

from dataclasses import asdict, dataclass, replace
import json
import os
from pathlib import Path
from typing import Mapping

DEFAULT_MAX_OBJECTS = 1024
DEFAULT_PAGE_SIZE = 1000
DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class AppSettings:
    """Process-wide console settings, passed explicitly to the service."""

    max_objects: int = DEFAULT_MAX_OBJECTS
    page_size: int = DEFAULT_PAGE_SIZE
    chunk_size: int = DEFAULT_CHUNK_SIZE
    region: str = ""


_POSITIVE_FIELDS = ("max_objects", "page_size", "chunk_size")


def _positive_int(value: object, default: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if number <= 0:
        return default
    return number


def apply_env_overrides(settings: AppSettings, environ: Mapping[str, str] | None = None) -> AppSettings:
    """Return ``settings`` with ``MAX_OBJECTS`` and ``S3_REGION`` applied."""

    env = os.environ if environ is None else environ
    updates: dict[str, object] = {}
    if env.get("MAX_OBJECTS"):
        updates["max_objects"] = _positive_int(env["MAX_OBJECTS"], settings.max_objects)
    if env.get("S3_REGION"):
        updates["region"] = env["S3_REGION"].strip()
    return replace(settings, **updates) if updates else settings


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_console_settings.json"
        self._path = Path(storage_path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppSettings:
        if not self._path.exists():
            return AppSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()
        defaults = AppSettings()
        values = {
            name: _positive_int(data.get(name, getattr(defaults, name)), getattr(defaults, name))
            for name in _POSITIVE_FIELDS
        }
        region = data.get("region", defaults.region)
        if not isinstance(region, str):
            region = defaults.region
        return AppSettings(region=region.strip(), **values)

    def save(self, settings: AppSettings) -> None:
        payload = asdict(settings)
        for name in _POSITIVE_FIELDS:
            payload[name] = max(int(payload[name]), 1)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            return
