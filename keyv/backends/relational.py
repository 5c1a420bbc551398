"""Helpers shared by the SQL backends."""

from __future__ import annotations

import re

from keyv.errors import ConfigurationError


DEFAULT_TABLE = "keyv"

_VALID_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(value: str, what: str) -> str:
    """Return ``value`` when it is safe to splice into SQL as an identifier."""
    if not _VALID_IDENTIFIER.fullmatch(value):
        msg = f"{what} must be a valid unquoted SQL identifier"
        raise ConfigurationError(msg)
    return value


def escape_like(prefix: str) -> str:
    """Escape LIKE metacharacters so ``prefix`` matches literally with ``\\`` as escape character."""
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
