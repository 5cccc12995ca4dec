from __future__ import annotations
"""Data models representing bucket listings and object metadata."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Optional, Union

from .errors import Cancelled

SEPARATOR = "/"


@dataclass(frozen=True)
class CommonPrefix:
    """A virtual directory one level below the listed prefix."""

    prefix: str

    def __post_init__(self) -> None:
        if not self.prefix.endswith(SEPARATOR):
            raise ValueError(f"Common prefix must end with '{SEPARATOR}': {self.prefix!r}")

    @property
    def name(self) -> str:
        return self.prefix.rstrip(SEPARATOR).rsplit(SEPARATOR, 1)[-1] + SEPARATOR


@dataclass(frozen=True)
class ObjectEntry:
    """A concrete object with the metadata reported by the store."""

    key: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None

    def __post_init__(self) -> None:
        if self.key.endswith(SEPARATOR):
            raise ValueError(f"Object key must not end with '{SEPARATOR}': {self.key!r}")

    @property
    def name(self) -> str:
        return self.key.rsplit(SEPARATOR, 1)[-1]


ListingEntry = Union[CommonPrefix, ObjectEntry]


def classify_entry(raw: dict) -> ListingEntry:
    """Build the listing variant for a raw ``list_objects_v2`` item.

    ``raw`` is either an item of ``Contents`` (has ``Key``) or of
    ``CommonPrefixes`` (has ``Prefix``). A name ending in the separator is a
    common prefix regardless of which list it came from.
    """

    name = raw.get("Key")
    if name is None:
        name = raw["Prefix"]
    if name.endswith(SEPARATOR):
        return CommonPrefix(prefix=name)
    return ObjectEntry(
        key=name,
        size=raw.get("Size"),
        last_modified=raw.get("LastModified"),
        content_type=raw.get("ContentType"),
        etag=raw.get("ETag"),
        storage_class=raw.get("StorageClass"),
    )


@dataclass(frozen=True)
class Breadcrumb:
    """One step of the navigation trail above a listing."""

    display_name: str
    cumulative_prefix: str


@dataclass(frozen=True)
class ListingResult:
    """Represents the hierarchical view of one prefix in a bucket."""

    bucket_name: str
    query_prefix: str = SEPARATOR
    common_prefixes: tuple[CommonPrefix, ...] = ()
    objects: tuple[ObjectEntry, ...] = ()
    breadcrumbs: tuple[Breadcrumb, ...] = ()
    truncated: bool = False

    @property
    def entry_count(self) -> int:
        return len(self.common_prefixes) + len(self.objects)

    @property
    def is_empty(self) -> bool:
        return self.entry_count == 0


@dataclass(frozen=True)
class BucketInfo:
    name: str
    creation_date: Optional[datetime] = None


@dataclass(frozen=True)
class ObjectDetails:
    """Metadata about a single S3 object."""

    bucket: str
    key: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None
    storage_class: Optional[str] = None
    etag: Optional[str] = None
    content_type: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ObjectView:
    """Object metadata together with its place in the directory tree."""

    bucket: str
    key: str
    details: ObjectDetails
    parent_prefix: str
    breadcrumbs: tuple[Breadcrumb, ...] = ()


class ObjectStream:
    """Readable object body plus its metadata.

    The body is released on :meth:`close`; use the stream as a context manager
    so that happens on every exit path.
    """

    def __init__(self, details: ObjectDetails, body) -> None:
        self.details = details
        self._body = body
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, amount: int | None = None) -> bytes:
        if amount is None:
            return self._body.read()
        return self._body.read(amount)

    def iter_chunks(self, chunk_size: int, cancel_requested=None) -> Iterator[bytes]:
        """Yield the body in chunks, stopping when ``cancel_requested`` fires.

        The cancellation check raises :class:`~s3_console.errors.Cancelled`
        and the stream is closed once iteration ends for any reason.
        """
        try:
            while True:
                if cancel_requested and cancel_requested():
                    raise Cancelled(
                        "Download cancelled",
                        operation="get_object",
                        bucket=self.details.bucket,
                        key=self.details.key,
                    )
                chunk = self._body.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._body.close()

    def __enter__(self) -> "ObjectStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
