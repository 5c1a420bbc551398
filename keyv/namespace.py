"""Namespace prefixing for backend keys."""

from __future__ import annotations

from .errors import ConfigurationError


class Namespace:
    """Map between caller keys and namespaced backend keys.

    The empty namespace renders to a bare separator. Names may not share any character
    with the separator, so no two namespaces produce overlapping prefixes and no named
    namespace produces a key starting with the separator.
    """

    def __init__(self, name: str = "", sep: str = ":") -> None:
        super().__init__()
        if not sep:
            msg = "sep must not be empty"
            raise ConfigurationError(msg)
        if not set(sep).isdisjoint(name):
            msg = "namespace must not contain separator characters"
            raise ConfigurationError(msg)

        self.name = name
        self.sep = sep
        self.prefix = f"{name}{sep}"

    def full_key(self, key: str) -> str:
        """Build the backend key for a caller key."""
        if not isinstance(key, str):
            msg = f"key must be a string, got {type(key).__name__}"
            raise TypeError(msg)
        if not key:
            msg = "key must not be empty"
            raise ValueError(msg)
        return self.prefix + key

    def matches(self, backend_key: str) -> bool:
        """Return True when a backend key belongs to this namespace."""
        return backend_key.startswith(self.prefix)

    def relative_key(self, backend_key: str) -> str:
        """Strip the namespace prefix from a backend key."""
        if not self.matches(backend_key):
            msg = f"key does not match namespace prefix: {backend_key}"
            raise ValueError(msg)
        return backend_key.removeprefix(self.prefix)

    def __repr__(self) -> str:
        return f"Namespace(name={self.name!r}, sep={self.sep!r})"
