"""urlref.query
Encoding and decoding of structured query strings, using the bracket convention for nesting:
    decode("user[name]=Alice&tags[]=a&tags[]=b") == {"user": {"name": "Alice"}, "tags": ["a", "b"]}
"""

import logging
import re

from typing import Any, Callable, Iterator, Mapping, MutableMapping, Sequence

from .encoding import escape, unescape

logger = logging.getLogger(__name__)

# The maximum number of keys in a key path, e.g. a[b][c] has 3.
DEFAULT_MAXIMUM_DEPTH: int = 8

# name = 1*( not "[" ) / "[" *( any ) "]"
_KEY_PART_PAT: re.Pattern[str] = re.compile(r"([^\[]+)|\[(.*?)\]")


class QueryError(ValueError):
    pass


class InvalidKeyPathError(QueryError):
    pass


class KeyLengthExceededError(QueryError):
    pass


def encode(value: Any, prefix: str | None = None) -> str:
    """Renders value as a query string.
    Sequences use "prefix[]" keys and mappings use "prefix[key]" keys, recursively. None renders as a bare key.
    e.g. encode({"user": {"name": "Alice"}, "tags": ["a", "b"]}) == "user[name]=Alice&tags[]=a&tags[]=b"
    """
    if value is None:
        return prefix if prefix is not None else ""
    if isinstance(value, Mapping):
        return "&".join(
            rendering
            for rendering in (
                encode(v, f"{prefix}[{escape(str(k))}]" if prefix is not None else escape(str(k)))
                for k, v in value.items()
            )
            if len(rendering) > 0
        )
    if isinstance(value, Sequence) and not isinstance(value, str):
        return "&".join(encode(v, f"{prefix}[]") for v in value)
    if prefix is None:
        raise ValueError(f"a top-level query value must be a mapping, not {value!r}")
    return f"{prefix}={escape(str(value))}"


def scan(string: str) -> Iterator[tuple[str, str | None]]:
    """Yields the unescaped (key, value) pairs of string.
    The value is None for an assignment without "=".
    """
    for assignment in string.split("&"):
        if len(assignment) == 0:
            continue
        key, equals, value = assignment.partition("=")
        yield unescape(key), unescape(value) if len(equals) > 0 else None


def split_key(name: str) -> list[str]:
    """Splits a key into its parts.
    e.g. split_key("a[b][c]") == ["a", "b", "c"], split_key("a[]") == ["a", ""]
    """
    return [m[1] if m[1] is not None else m[2] for m in _KEY_PART_PAT.finditer(name)]


def _descend(parent: Any, key: Any, factory: type) -> Any:
    """Returns parent[key], setting it to factory() first if it is absent."""
    if isinstance(parent, list):
        if key == len(parent):
            parent.append(factory())
        child = parent[key]
    else:
        child = parent.get(key)
        if child is None:
            child = parent[key] = factory()
    if not isinstance(child, factory):
        raise InvalidKeyPathError(f"cannot use {key!r} as a {factory.__name__}: it already holds {child!r}")
    return child


def _store(parent: Any, key: Any, value: Any) -> None:
    if isinstance(parent, list) and key == len(parent):
        parent.append(value)
    else:
        parent[key] = value


def _is_array_key(key: Any) -> bool:
    return key is None or key == ""


def assign(keys: Sequence[Any], value: Any, parent: MutableMapping[Any, Any]) -> None:
    """Stores value in parent at the key path keys, creating the mappings and lists along the way.

    An empty key appends to a list. When it is followed by more keys, as in items[][name],
    the last element of the list is reused unless it already has the next key, so that
        items[][name]=a&items[][value]=1&items[][name]=b&items[][value]=2
    builds two objects rather than four.
    """
    top: Any = keys[0]
    middle: Sequence[Any] = keys[1:]
    container: Any = parent

    for i, key in enumerate(middle):
        if _is_array_key(key):
            container = _descend(container, top, list)
            top = len(container)

            nested: Any = middle[i + 1] if i + 1 < len(middle) else None
            if nested is not None and len(container) > 0:
                last: Any = container[-1]
                if isinstance(last, (dict, list)) and nested not in last:
                    top -= 1
        else:
            container = _descend(container, top, dict)
            top = key

    _store(container, top, value)


def decode(
    string: str,
    maximum: int = DEFAULT_MAXIMUM_DEPTH,
    key_factory: Callable[[str], Any] | None = None,
) -> dict[Any, Any]:
    """Decodes a query string into nested dicts and lists.
    key_factory, when given, is applied to every non-empty key part, e.g. to intern or convert keys.
    Raises InvalidKeyPathError for an empty key and KeyLengthExceededError for a key path longer than maximum.
    """
    parameters: dict[Any, Any] = {}
    count: int = 0

    for name, value in scan(string):
        keys: list[Any] = split_key(name)

        if len(keys) == 0:
            logger.debug("rejecting empty key path in query %r", string)
            raise InvalidKeyPathError(f"Invalid key path: {name!r}!")

        if len(keys) > maximum:
            logger.debug("rejecting key path %r: %d keys, limit is %d", name, len(keys), maximum)
            raise KeyLengthExceededError(f"Key length exceeded limit! ({len(keys)} > {maximum})")

        if key_factory is not None:
            keys = [key_factory(key) if len(key) > 0 else None for key in keys]

        assign(keys, value, parameters)
        count += 1

    logger.debug("decoded %d assignments from query", count)
    return parameters
