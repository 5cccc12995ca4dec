from __future__ import annotations
"""UI-agnostic helpers for formatting listings and object metadata."""
from dataclasses import dataclass
from datetime import datetime
from importlib.metadata import PackageNotFoundError, metadata, version

from .models import BucketInfo, ListingResult, ObjectDetails

DIST_NAME = "s3-console"


@dataclass(frozen=True)
class PackageInfo:
    name: str
    version: str
    summary: str


def load_package_info(dist_name: str = DIST_NAME) -> PackageInfo:
    try:
        distribution_metadata = metadata(dist_name)
        package_version = version(dist_name)
    except PackageNotFoundError:
        return PackageInfo(
            name="S3 Console",
            version="",
            summary="Browse and administer buckets in an S3-compatible store.",
        )
    return PackageInfo(
        name=distribution_metadata.get("Name"),
        version=package_version,
        summary=distribution_metadata.get("Summary") or "",
    )


def format_size(size: int | None) -> str:
    if size is None:
        return "-"
    suffixes = ["B", "KB", "MB", "GB", "TB"]
    value = float(max(size, 0))
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}" if suffix != "B" else f"{int(value)} {suffix}"
        value /= 1024
    return f"{size} B"


def format_last_modified(last_modified: object) -> str:
    if not last_modified:
        return "-"
    if isinstance(last_modified, datetime):
        return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip() or last_modified.isoformat()
    try:
        return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip() or str(last_modified)
    except AttributeError:
        return str(last_modified)


def format_breadcrumbs(bucket_name: str, listing: ListingResult) -> str:
    trail = "".join(crumb.display_name for crumb in listing.breadcrumbs)
    return f"{bucket_name}/{trail}"


def render_buckets(buckets: list[BucketInfo]) -> list[str]:
    return [f"{format_last_modified(bucket.creation_date):<24} {bucket.name}" for bucket in buckets]


def render_listing(listing: ListingResult) -> list[str]:
    """Return printable lines: the trail, directories, then files."""

    lines = [format_breadcrumbs(listing.bucket_name, listing)]
    for prefix in listing.common_prefixes:
        lines.append(f"{'DIR':>10}  {'':<24} {prefix.name}")
    for entry in listing.objects:
        lines.append(
            f"{format_size(entry.size):>10}  {format_last_modified(entry.last_modified):<24} {entry.name}"
        )
    if listing.is_empty:
        lines.append("(empty)")
    if listing.truncated:
        lines.append(f"... listing truncated after {listing.entry_count} entries")
    return lines


def render_object_details(details: ObjectDetails) -> list[str]:
    lines = [
        f"Bucket:        {details.bucket}",
        f"Key:           {details.key}",
        f"Size:          {format_size(details.size)}",
        f"Last modified: {format_last_modified(details.last_modified)}",
        f"Content type:  {details.content_type or '-'}",
        f"ETag:          {details.etag or '-'}",
        f"Storage class: {details.storage_class or '-'}",
    ]
    for name, value in sorted(details.metadata.items()):
        lines.append(f"Metadata:      {name}={value}")
    return lines
