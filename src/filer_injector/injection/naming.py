"""
Name token generation for injected sidecars.

A name token has the shape ``<filer>-<bucket>[-<deepest dir>]`` and is used as
the sidecar container name and inside every volume name derived from it, so
it must be a valid RFC 1123 label fragment and unique within a pod.
"""

import hashlib
import logging
import re

from filer_injector.constants import (
    BUCKET_NAME_LIMIT,
    DEEPEST_DIR_LIMIT,
    FALLBACK_HASH_LENGTH,
    FILER_NAME_LIMIT,
    VALID_NAME_PATTERN,
)

logger = logging.getLogger(__name__)

_VALID_NAME = re.compile(VALID_NAME_PATTERN)
_INVALID_CHARS = re.compile(r"[^a-z0-9-]+")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def limit_string(value: str, length: int) -> str:
    """Truncate ``value`` to at most ``length`` characters."""
    return value[:length]


def is_valid_name(name: str) -> bool:
    return bool(_VALID_NAME.match(name))


def clean_name(name: str) -> str:
    """Collapse doubled hyphens and trim trailing ones."""
    return name.replace("--", "-").rstrip("-")


def fallback_name(name: str) -> str:
    """
    Build a valid name from one that failed validation.

    Offending characters are replaced and a short digest of the original
    string is appended, so distinct inputs stay distinct and repeated runs
    produce the same result.
    """
    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:FALLBACK_HASH_LENGTH]
    sanitized = _INVALID_CHARS.sub("-", name.lower())
    sanitized = _REPEATED_HYPHENS.sub("-", sanitized).strip("-")
    if not sanitized:
        return digest
    return f"{sanitized}-{digest}"


def make_name_token(source: str, mount_path: str, used_names: set[str]) -> str:
    """
    Generate a unique sidecar name for one credential.

    Args:
        source: Short identifier of the credential source (the filer name)
        mount_path: Bucket path, optionally with sub directories (bucket/a/b)
        used_names: Names already handed out in this admission request; the
            returned name is added to it

    Returns:
        Name matching ``^[a-z0-9]([-a-z0-9]*[a-z0-9])?$`` not in ``used_names``
    """
    bucket_dirs = mount_path.split("/")

    name = (
        f"{limit_string(source, FILER_NAME_LIMIT)}-"
        f"{limit_string(bucket_dirs[0], BUCKET_NAME_LIMIT)}"
    )
    if len(bucket_dirs) >= 2:
        name = f"{name}-{limit_string(bucket_dirs[-1], DEEPEST_DIR_LIMIT)}"
    name = clean_name(name)

    if not is_valid_name(name):
        name = clean_name(name)
        if not is_valid_name(name):
            replacement = fallback_name(name)
            logger.warning(
                f"Generated name {name!r} is not a valid resource name, "
                f"using {replacement!r} instead"
            )
            name = replacement

    if name in used_names:
        ordinal = len(used_names) + 1
        while f"{name}-{ordinal}" in used_names:
            ordinal += 1
        name = f"{name}-{ordinal}"

    used_names.add(name)
    return name
