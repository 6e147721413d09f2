"""Pure helpers for turning bookmark URIs and names into display and alias names."""

import re
from typing import Optional
from urllib.parse import unquote, urlsplit

_FORBIDDEN_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE_RUN = re.compile(r"\s+")
_UNDERSCORE_RUN = re.compile(r"_+")

DEFAULT_ALIAS_NAME = "location"


def derive_display_name(uri: str) -> str:
    """
    Build a readable name from a URI's host and path.

    ``smb://nas/media`` -> ``nas/media``; a bare share root gives just the
    host. URIs without a host fall back to ``unknown``; unparsable input is
    returned unchanged.
    """
    try:
        parts = urlsplit(uri)
        path = unquote(parts.path or "")
    except ValueError:
        return uri

    host = _host_of(parts.netloc) or "unknown"
    return f"{host}{path}" if len(path) > 1 else host


def _host_of(netloc: str) -> str:
    # urlsplit().hostname lowercases; keep the host as the user wrote it
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        return host[1:].partition("]")[0]
    return host.partition(":")[0]


def sanitize_alias_name(name: str) -> str:
    """Make a display name safe to use as a single filename."""
    sanitized = _FORBIDDEN_CHARS.sub("_", name)
    sanitized = _WHITESPACE_RUN.sub("_", sanitized)
    sanitized = _UNDERSCORE_RUN.sub("_", sanitized)
    sanitized = sanitized.strip("_")
    return sanitized or DEFAULT_ALIAS_NAME


def is_valid_alias_override(alias_name: Optional[str]) -> bool:
    """An explicit alias name must be a single path component."""
    if not alias_name:
        return False
    if alias_name in (".", ".."):
        return False
    return "/" not in alias_name and "\\" not in alias_name
