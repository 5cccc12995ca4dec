from __future__ import annotations
"""Controller layer between console front ends and the S3 service."""

import logging
import mimetypes
import os
from typing import Callable

from .cancellation import CancellationToken
from .errors import Cancelled, StoreUnavailable
from .models import BucketInfo, ListingResult, ObjectStream, ObjectView
from .paths import compute_breadcrumbs, compute_parent
from .profiles import ConnectionProfile, ProfileStorage
from .services import S3ConsoleService
from .settings import AppSettings, SettingsStorage

LOGGER = logging.getLogger(__name__)

ServiceFactory = Callable[[ConnectionProfile, AppSettings], S3ConsoleService]


class NotConnectedError(RuntimeError):
    """Raised when an S3 operation is attempted before connecting."""


class ConsoleController:
    """Coordinates console requests with the :class:`S3ConsoleService`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        storage: ProfileStorage | None = None,
        service_factory: ServiceFactory | None = None,
        settings_storage: SettingsStorage | None = None,
    ):
        self._settings_storage = settings_storage or SettingsStorage()
        self._settings = settings or self._settings_storage.load()
        self._storage = storage or ProfileStorage()
        self._service_factory = service_factory or S3ConsoleService
        self._service: S3ConsoleService | None = None
        self._profiles: list[ConnectionProfile] = self._storage.load()
        self._selected_profile: str | None = None

    @property
    def is_connected(self) -> bool:
        return self._service is not None

    @property
    def selected_profile(self) -> str | None:
        return self._selected_profile

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def settings_storage(self) -> SettingsStorage:
        return self._settings_storage

    def save_settings(self, settings: AppSettings) -> None:
        """Persist ``settings``; connections made afterwards use them."""

        self._settings = settings
        self._settings_storage.save(settings)

    def list_profiles(self) -> list[ConnectionProfile]:
        return list(self._profiles)

    def save_profile(self, profile: ConnectionProfile, *, original_name: str | None = None) -> None:
        if original_name and original_name != profile.name:
            self._profiles = [p for p in self._profiles if p.name != original_name]
        self._upsert_profile(profile)
        self._persist_profiles()

    def delete_profile(self, name: str) -> None:
        before = len(self._profiles)
        self._profiles = [p for p in self._profiles if p.name != name]
        if len(self._profiles) == before:
            raise ValueError(f"Profile '{name}' does not exist")
        if self._selected_profile == name:
            self._selected_profile = None
        self._persist_profiles()

    def get_profile(self, name: str) -> ConnectionProfile:
        for profile in self._profiles:
            if profile.name == name:
                return profile
        raise ValueError(f"Profile '{name}' does not exist")

    def connect_with_profile(self, name: str) -> list[BucketInfo]:
        profile = self.get_profile(name)
        buckets = self.connect(profile)
        self._selected_profile = name
        return buckets

    def connect(self, profile: ConnectionProfile) -> list[BucketInfo]:
        """Bind to ``profile`` once its bucket list can be fetched."""

        LOGGER.debug("Connecting to '%s'", profile.resolved_endpoint)
        service = self._service_factory(profile, self._settings)
        buckets = service.list_buckets()
        self._service = service
        return buckets

    def view_buckets(self) -> list[BucketInfo]:
        return self._require_connection().list_buckets()

    def list_objects(
        self,
        *,
        bucket_name: str,
        prefix: str = "",
        cancel: CancellationToken | None = None,
    ) -> ListingResult:
        service = self._require_connection()
        try:
            return service.list_objects(bucket_name, prefix, cancel=cancel)
        except Cancelled:
            LOGGER.debug("Listing of bucket '%s' cancelled", bucket_name)
            raise
        except StoreUnavailable:
            LOGGER.exception("List objects error for bucket '%s'", bucket_name)
            raise

    def object_info(self, *, bucket_name: str, key: str) -> ObjectView:
        details = self._require_connection().get_object_details(bucket_name, key)
        return ObjectView(
            bucket=bucket_name,
            key=key,
            details=details,
            parent_prefix=compute_parent(key),
            breadcrumbs=compute_breadcrumbs(key),
        )

    def open_object(self, *, bucket_name: str, key: str) -> ObjectStream:
        return self._require_connection().get_object_stream(bucket_name, key)

    def create_bucket(self, bucket_name: str) -> None:
        self._require_connection().create_bucket(bucket_name)

    def remove_bucket(self, bucket_name: str) -> None:
        self._require_connection().delete_bucket(bucket_name)

    def remove_object(self, *, bucket_name: str, key: str) -> str:
        """Delete ``key`` and return the prefix to show afterwards."""

        self._require_connection().delete_object(bucket_name, key)
        return compute_parent(key)

    def upload_file(self, *, bucket_name: str, prefix: str, source_path: str) -> str:
        """Upload a local file into ``prefix`` and return the new key."""

        service = self._require_connection()
        content_type, content_encoding = mimetypes.guess_type(source_path)
        size = os.path.getsize(source_path)
        stream = open(source_path, "rb")
        return service.put_object(
            bucket_name,
            prefix,
            os.path.basename(source_path),
            stream,
            size,
            content_type=content_type or "application/octet-stream",
            content_encoding=content_encoding,
        )

    def _require_connection(self) -> S3ConsoleService:
        if self._service is None:
            raise NotConnectedError("Not connected to S3")
        return self._service

    def _upsert_profile(self, profile: ConnectionProfile) -> None:
        for idx, existing in enumerate(self._profiles):
            if existing.name == profile.name:
                self._profiles[idx] = profile
                break
        else:
            self._profiles.append(profile)

    def _persist_profiles(self) -> None:
        self._storage.save(self._profiles)
