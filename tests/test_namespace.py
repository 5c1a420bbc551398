import pytest

from keyv.errors import ConfigurationError
from keyv.namespace import Namespace


def test_namespace_full_key_and_relative_key() -> None:
    namespace = Namespace("app", sep=":")
    assert namespace.prefix == "app:"
    assert namespace.full_key("session:42") == "app:session:42"
    assert namespace.relative_key("app:session:42") == "session:42"
    assert namespace.matches("app:x") is True
    assert namespace.matches("application:x") is False


def test_empty_namespace_prefix_is_the_separator() -> None:
    namespace = Namespace()
    assert namespace.prefix == ":"
    assert namespace.full_key("counter") == ":counter"
    assert namespace.full_key("app:x") == ":app:x"
    assert namespace.matches(":anything") is True
    assert namespace.matches("app:x") is False
    assert Namespace("app").matches(":app:x") is False


def test_namespace_rejects_invalid_inputs() -> None:
    with pytest.raises(ConfigurationError, match="sep must not be empty"):
        _ = Namespace("app", sep="")
    with pytest.raises(ConfigurationError, match="namespace must not contain separator"):
        _ = Namespace("a:b", sep=":")
    with pytest.raises(ConfigurationError, match="namespace must not contain separator"):
        _ = Namespace(":", sep="::")

    namespace = Namespace("app")
    with pytest.raises(ValueError, match="key must not be empty"):
        _ = namespace.full_key("")
    with pytest.raises(TypeError, match="key must be a string"):
        _ = namespace.full_key(42)  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="key does not match namespace prefix"):
        _ = namespace.relative_key("other:key")


def test_namespace_repr() -> None:
    assert repr(Namespace("app", sep="/")) == "Namespace(name='app', sep='/')"
