"""
Utilities package for the network auto mount agent.

Pure functions without side effects, plus host configuration lookup.
"""

from .naming import (
    DEFAULT_ALIAS_NAME,
    derive_display_name,
    is_valid_alias_override,
    sanitize_alias_name,
)

__all__ = [
    "DEFAULT_ALIAS_NAME",
    "derive_display_name",
    "is_valid_alias_override",
    "sanitize_alias_name",
]
