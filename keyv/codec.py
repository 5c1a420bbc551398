"""Value codecs turning application values into backend-neutral text."""

from __future__ import annotations

import functools
import json
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from .errors import SerializationError


@runtime_checkable
class Codec(Protocol):
    """Encode values to text and decode them back."""

    def encode(self, value: Any) -> str: ...

    def decode(self, data: str) -> Any: ...


_strict_dumps = functools.partial(json.dumps, allow_nan=False, ensure_ascii=False, separators=(",", ":"))


def decode_text(value: str | bytes | None, key: str) -> str | None:
    """Return stored text, decoding UTF-8 bytes from clients that do not decode responses."""
    if value is None or isinstance(value, str):
        return value
    try:
        return value.decode()
    except UnicodeDecodeError as error:
        msg = f"value stored under {key!r} is not valid UTF-8"
        raise SerializationError(msg) from error


class JsonCodec:
    """JSON codec with injectable encoder/decoder callables.

    The default encoder refuses NaN and infinities so that every value it accepts
    decodes back to an equal value.
    """

    def __init__(
        self,
        encoder: Callable[[Any], str] = _strict_dumps,
        decoder: Callable[[str], Any] = json.loads,
    ) -> None:
        super().__init__()
        self._encoder = encoder
        self._decoder = decoder

    def encode(self, value: Any) -> str:
        try:
            return self._encoder(value)
        except (TypeError, ValueError, RecursionError) as error:
            msg = f"cannot encode value of type {type(value).__name__}: {error}"
            raise SerializationError(msg) from error

    def decode(self, data: str | bytes) -> Any:
        if isinstance(data, bytes):
            try:
                data = data.decode()
            except UnicodeDecodeError as error:
                msg = "stored value is not valid UTF-8"
                raise SerializationError(msg) from error
        try:
            return self._decoder(data)
        except (TypeError, ValueError) as error:
            msg = f"cannot decode stored value: {error}"
            raise SerializationError(msg) from error
