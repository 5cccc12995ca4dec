from __future__ import annotations
"""Pure helpers that derive a directory tree from flat object keys."""
from .errors import InvalidArgument
from .models import SEPARATOR, Breadcrumb

ROOT_PREFIX = SEPARATOR


def is_root(prefix: str) -> bool:
    return prefix in ("", ROOT_PREFIX)


def compute_parent(key: str) -> str:
    """Return the directory that contains ``key``.

    The result always starts with the separator, whatever convention the key
    itself used, so ``"a/b.txt"`` gives ``"/a"``.
    """

    if is_root(key):
        return ROOT_PREFIX
    parts = key.split(SEPARATOR)
    if len(parts) < 2:
        return ROOT_PREFIX
    return SEPARATOR + SEPARATOR.join(parts[:-1])


def compute_breadcrumbs(prefix: str) -> tuple[Breadcrumb, ...]:
    """Split ``prefix`` into navigation steps from the top level down.

    Empty components (from doubled separators) produce no step but keep
    their position, so each cumulative prefix is the original text up to
    that component.
    """

    if is_root(prefix):
        return ()
    parts = prefix.split(SEPARATOR)
    return tuple(
        Breadcrumb(
            display_name=part + SEPARATOR,
            cumulative_prefix=SEPARATOR.join(parts[: index + 1]),
        )
        for index, part in enumerate(parts)
        if part
    )


def ensure_trailing_separator(prefix: str) -> str:
    if prefix.endswith(SEPARATOR):
        return prefix
    return prefix + SEPARATOR


def normalize_prefix(prefix: str) -> str:
    """Translate a caller prefix into the prefix sent to the store.

    The root becomes the empty string and any other prefix is anchored as a
    directory: no leading separator, exactly the caller's text plus a
    trailing separator.
    """

    cleaned = prefix.lstrip(SEPARATOR)
    if not cleaned:
        return ""
    return ensure_trailing_separator(cleaned)


def compose_object_key(prefix: str, name: str) -> str:
    if not name.strip():
        raise InvalidArgument("Object name cannot be empty", operation="put_object")
    return normalize_prefix(prefix) + name
