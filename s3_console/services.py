from __future__ import annotations
"""Business logic for browsing and administering an S3-compatible store."""
import logging
from typing import BinaryIO, Callable

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from .cancellation import CancellationToken
from .errors import Cancelled, ConsoleError, InvalidArgument, NotFound, StoreUnavailable
from .models import (
    SEPARATOR,
    BucketInfo,
    CommonPrefix,
    ListingResult,
    ObjectDetails,
    ObjectEntry,
    ObjectStream,
    classify_entry,
)
from .paths import ROOT_PREFIX, compose_object_key, compute_breadcrumbs, normalize_prefix
from .profiles import ConnectionProfile
from .settings import AppSettings

LOGGER = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})


def error_code(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code", ""))
    return ""


def wrap_store_error(
    exc: Exception,
    *,
    operation: str,
    bucket: str,
    key: str | None = None,
) -> ConsoleError:
    """Map a botocore failure onto :class:`NotFound` or :class:`StoreUnavailable`."""

    code = error_code(exc)
    if code in NOT_FOUND_CODES:
        return NotFound(f"Not found ({code})", operation=operation, bucket=bucket, key=key)
    return StoreUnavailable(f"Store request failed: {exc}", operation=operation, bucket=bucket, key=key)


class S3ConsoleService:
    """Hierarchical listing and pass-through operations for one connection.

    ``settings.max_objects`` bounds every listing; callers cannot raise it.
    A fresh client is created per call so instances hold no per-request
    state and can be shared across threads.
    """

    def __init__(
        self,
        profile: ConnectionProfile,
        settings: AppSettings | None = None,
        client_factory: Callable[..., object] | None = None,
    ):
        self._profile = profile
        self._settings = settings or AppSettings()
        if self._settings.max_objects <= 0:
            raise InvalidArgument("max_objects must be greater than zero")
        self._client_factory = client_factory or boto3.client

    @property
    def profile(self) -> ConnectionProfile:
        return self._profile

    @property
    def max_entries(self) -> int:
        return self._settings.max_objects

    def _create_client(self, timeout: float | None = None):
        options: dict[str, object] = {"signature_version": "s3v4", "s3": {"addressing_style": "path"}}
        if timeout:
            # A single request must not outlive the caller's deadline.
            options["connect_timeout"] = timeout
            options["read_timeout"] = timeout
        config = Config(**options)
        return self._client_factory(
            "s3",
            endpoint_url=self._profile.resolved_endpoint,
            aws_access_key_id=self._profile.access_key,
            aws_secret_access_key=self._profile.secret_key,
            region_name=self._settings.region or None,
            config=config,
        )

    def list_objects(
        self,
        bucket_name: str,
        prefix: str = ROOT_PREFIX,
        *,
        cancel: CancellationToken | None = None,
    ) -> ListingResult:
        """Return the directory view of ``prefix`` in ``bucket_name``.

        At most ``max_entries`` entries are returned. The token is checked
        before every page request and every consumed entry.

        Raises:
            InvalidArgument: when ``bucket_name`` is empty.
            Cancelled: when ``cancel`` fires before the listing completes.
            StoreUnavailable: when the store cannot list the bucket.
        """

        self._require("bucket", bucket_name, operation="list_objects")
        query_prefix = prefix or ROOT_PREFIX
        store_prefix = normalize_prefix(query_prefix)
        cancel = cancel or CancellationToken()
        client = self._create_client(timeout=cancel.time_remaining())

        prefixes: list[CommonPrefix] = []
        objects: list[ObjectEntry] = []
        remaining = self.max_entries
        request_token: str | None = None
        truncated = False
        page_number = 0

        while remaining > 0:
            self._check_cancelled(cancel, bucket_name, query_prefix)
            list_params = {
                "Bucket": bucket_name,
                "Delimiter": SEPARATOR,
                "MaxKeys": min(remaining, self._settings.page_size),
            }
            if store_prefix:
                list_params["Prefix"] = store_prefix
            if request_token:
                list_params["ContinuationToken"] = request_token

            page_number += 1
            try:
                response = client.list_objects_v2(**list_params)
            except (ClientError, BotoCoreError) as exc:
                raise StoreUnavailable(
                    f"Listing failed: {exc}",
                    operation="list_objects",
                    bucket=bucket_name,
                    key=query_prefix,
                ) from exc

            raw_entries = list(response.get("Contents", [])) + list(response.get("CommonPrefixes", []))
            for raw in raw_entries:
                self._check_cancelled(cancel, bucket_name, query_prefix)
                if remaining == 0:
                    truncated = True
                    break
                entry = classify_entry(raw)
                if isinstance(entry, CommonPrefix):
                    prefixes.append(entry)
                else:
                    objects.append(entry)
                remaining -= 1

            request_token = response.get("NextContinuationToken")
            if not (response.get("IsTruncated", False) and request_token):
                break
            if remaining == 0:
                truncated = True

        LOGGER.debug(
            "Listed %d prefix(es) and %d object(s) under '%s' in bucket '%s' (%d page(s), truncated=%s)",
            len(prefixes),
            len(objects),
            query_prefix,
            bucket_name,
            page_number,
            truncated,
        )
        return ListingResult(
            bucket_name=bucket_name,
            query_prefix=query_prefix,
            common_prefixes=tuple(prefixes),
            objects=tuple(objects),
            breadcrumbs=compute_breadcrumbs(query_prefix),
            truncated=truncated,
        )

    def list_buckets(self) -> list[BucketInfo]:
        """Return the available buckets in store order."""

        client = self._create_client()
        try:
            response = client.list_buckets()
        except (ClientError, BotoCoreError) as exc:
            raise StoreUnavailable(f"Store request failed: {exc}", operation="list_buckets") from exc
        return [
            BucketInfo(name=bucket["Name"], creation_date=bucket.get("CreationDate"))
            for bucket in response.get("Buckets", [])
        ]

    def create_bucket(self, bucket_name: str) -> None:
        self._require("bucket", bucket_name, operation="create_bucket")
        params: dict[str, object] = {"Bucket": bucket_name}
        region = self._settings.region
        if region and region != DEFAULT_REGION:
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        client = self._create_client()
        try:
            client.create_bucket(**params)
        except (ClientError, BotoCoreError) as exc:
            raise StoreUnavailable(
                f"Store request failed: {exc}", operation="create_bucket", bucket=bucket_name
            ) from exc
        LOGGER.debug("Created bucket '%s'", bucket_name)

    def delete_bucket(self, bucket_name: str) -> None:
        self._require("bucket", bucket_name, operation="delete_bucket")
        client = self._create_client()
        try:
            client.delete_bucket(Bucket=bucket_name)
        except (ClientError, BotoCoreError) as exc:
            raise wrap_store_error(exc, operation="delete_bucket", bucket=bucket_name) from exc
        LOGGER.debug("Deleted bucket '%s'", bucket_name)

    def get_object_details(self, bucket_name: str, key: str) -> ObjectDetails:
        """Fetch metadata about a single object."""

        self._require("bucket", bucket_name, operation="stat_object")
        self._require("key", key, operation="stat_object", bucket=bucket_name)
        client = self._create_client()
        try:
            response = client.head_object(Bucket=bucket_name, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise wrap_store_error(exc, operation="stat_object", bucket=bucket_name, key=key) from exc
        return self._details_from_response(bucket_name, key, response)

    def get_object_stream(self, bucket_name: str, key: str) -> ObjectStream:
        """Open the object body; the caller must close the returned stream."""

        self._require("bucket", bucket_name, operation="get_object")
        self._require("key", key, operation="get_object", bucket=bucket_name)
        client = self._create_client()
        try:
            response = client.get_object(Bucket=bucket_name, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise wrap_store_error(exc, operation="get_object", bucket=bucket_name, key=key) from exc
        return ObjectStream(self._details_from_response(bucket_name, key, response), response["Body"])

    def put_object(
        self,
        bucket_name: str,
        prefix: str,
        name: str,
        stream: BinaryIO,
        size: int,
        *,
        content_type: str | None = None,
        content_encoding: str | None = None,
        content_disposition: str | None = None,
        content_language: str | None = None,
    ) -> str:
        """Upload ``stream`` as ``name`` inside ``prefix`` and return the key.

        ``stream`` is closed before returning, whether the upload succeeded,
        failed in the store or was rejected by validation.
        """

        try:
            self._require("bucket", bucket_name, operation="put_object")
            key = compose_object_key(prefix, name)
            if size is None or size < 0:
                raise InvalidArgument(
                    "Object size must be known and non-negative",
                    operation="put_object",
                    bucket=bucket_name,
                    key=key,
                )
            params: dict[str, object] = {
                "Bucket": bucket_name,
                "Key": key,
                "Body": stream,
                "ContentLength": size,
            }
            optional_headers = {
                "ContentType": content_type,
                "ContentEncoding": content_encoding,
                "ContentDisposition": content_disposition,
                "ContentLanguage": content_language,
            }
            params.update({header: value for header, value in optional_headers.items() if value})

            client = self._create_client()
            try:
                client.put_object(**params)
            except (ClientError, BotoCoreError) as exc:
                raise wrap_store_error(exc, operation="put_object", bucket=bucket_name, key=key) from exc
            LOGGER.debug("Uploaded %d byte(s) to '%s' in bucket '%s'", size, key, bucket_name)
            return key
        finally:
            stream.close()

    def delete_object(self, bucket_name: str, key: str) -> None:
        """Delete an object; deleting a missing key succeeds."""

        self._require("bucket", bucket_name, operation="delete_object")
        self._require("key", key, operation="delete_object", bucket=bucket_name)
        client = self._create_client()
        try:
            client.delete_object(Bucket=bucket_name, Key=key)
        except (ClientError, BotoCoreError) as exc:
            if error_code(exc) in ("404", "NoSuchKey", "NotFound"):
                LOGGER.debug("Object '%s' already absent from bucket '%s'", key, bucket_name)
                return
            raise wrap_store_error(exc, operation="delete_object", bucket=bucket_name, key=key) from exc
        LOGGER.debug("Deleted '%s' from bucket '%s'", key, bucket_name)

    @staticmethod
    def _details_from_response(bucket_name: str, key: str, response: dict) -> ObjectDetails:
        return ObjectDetails(
            bucket=bucket_name,
            key=key,
            size=response.get("ContentLength"),
            last_modified=response.get("LastModified"),
            storage_class=response.get("StorageClass"),
            etag=response.get("ETag"),
            content_type=response.get("ContentType"),
            metadata=dict(response.get("Metadata") or {}),
        )

    @staticmethod
    def _require(label: str, value: str, *, operation: str, bucket: str | None = None) -> None:
        if not value:
            raise InvalidArgument(f"{label.capitalize()} name cannot be empty", operation=operation, bucket=bucket)

    @staticmethod
    def _check_cancelled(cancel: CancellationToken, bucket_name: str, prefix: str) -> None:
        if cancel.is_cancelled():
            raise Cancelled("Listing cancelled", operation="list_objects", bucket=bucket_name, key=prefix)
