"""urlref.url
The three kinds of URL reference, and reference resolution between them (RFC 3986 section 5).

    Relative   path, query and fragment, stored as literal (already encoded) text
    Absolute   a Relative plus scheme and authority, also literal text
    Reference  path and fragment stored unescaped, a literal query, and structured parameters

All three are immutable. Every operation that "changes" one returns a new value.
The constructors trust their arguments and never validate them; use parse_url or Reference.parse for untrusted input.
"""

import dataclasses
import logging
import types

from typing import Any, Mapping, Self

from . import path as _path
from .encoding import escape_fragment, escape_path, unescape
from .grammar import Components, match_components
from .query import decode, encode

logger = logging.getLogger(__name__)

# Stands in for an argument that was not passed, since None is a meaningful value for most of them.
_KEEP: Any = object()


def _sort_key(fields: tuple[Any, ...]) -> tuple[tuple[bool, Any], ...]:
    # None sorts before everything else.
    return tuple((field is not None, field if field is not None else "") for field in fields)


def _sorted_parameters(value: Any) -> Any:
    """A copy of value with every mapping in key order, so that equal parameters encode identically."""
    if isinstance(value, Mapping):
        return {k: _sorted_parameters(v) for k, v in sorted(value.items(), key=lambda item: str(item[0]))}
    if isinstance(value, (list, tuple)):
        return [_sorted_parameters(v) for v in value]
    return value


def _format_path(path: str) -> str:
    """Encodes an unescaped path so that it can't be read back as a scheme or authority.
    path-noscheme (RFC 3986 section 4.2): the first segment of a path without a leading "/" may not contain ":".
    path-absolute (RFC 3986 section 3.3): a path may not begin with "//".
    e.g. _format_path("a:b") == "a%3Ab", _format_path("//host/x") == "/%2Fhost/x"
    """
    result: str = escape_path(path)
    if result.startswith("//"):
        return f"/%2F{result[2:]}"
    first, slash, rest = result.partition("/")
    if ":" in first:
        return f"{first.replace(':', '%3A')}{slash}{rest}"
    return result


class _Value:
    """Equality, ordering, hashing and formatting derived from a tuple of fields."""

    def _fields(self: Self) -> tuple[Any, ...]:
        raise NotImplementedError

    def _ordering_fields(self: Self) -> tuple[Any, ...]:
        return self._fields()

    def __eq__(self: Self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._fields() == other._fields()  # type: ignore[attr-defined]

    def __hash__(self: Self) -> int:
        return hash((type(self).__name__, self._ordering_fields()))

    def __lt__(self: Self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return _sort_key(self._ordering_fields()) < _sort_key(other._ordering_fields())  # type: ignore[attr-defined]

    def __le__(self: Self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return _sort_key(self._ordering_fields()) <= _sort_key(other._ordering_fields())  # type: ignore[attr-defined]

    def __gt__(self: Self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return _sort_key(self._ordering_fields()) > _sort_key(other._ordering_fields())  # type: ignore[attr-defined]

    def __ge__(self: Self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return _sort_key(self._ordering_fields()) >= _sort_key(other._ordering_fields())  # type: ignore[attr-defined]

    def __repr__(self: Self) -> str:
        return f"{self.__class__.__name__}({str(self)!r})"

    def __add__(self: Self, other: Any) -> "Relative | Absolute | Reference":
        return combine(self, other)

    def as_json(self: Self) -> str:
        return str(self)


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Relative(_Value):
    """A relative reference: a path with an optional query and fragment, all stored as literal encoded text."""

    path: str
    query: str | None = None
    fragment: str | None = None

    def _fields(self: Self) -> tuple[Any, ...]:
        return (self.path, self.query, self.fragment)

    @property
    def has_query(self: Self) -> bool:
        return self.query is not None and len(self.query) > 0

    @property
    def has_fragment(self: Self) -> bool:
        return self.fragment is not None and len(self.fragment) > 0

    def to_local_path(self: Self) -> str:
        return _path.to_local_path(self.path)

    def with_(self: Self, path: str | None = None, query: Any = _KEEP, fragment: Any = _KEEP, pop: bool = True) -> Self:
        """Returns a copy with path merged into the current path, and query and fragment replaced if given."""
        return dataclasses.replace(
            self,
            path=_path.expand(self.path, path, pop),
            query=self.query if query is _KEEP else query,
            fragment=self.fragment if fragment is _KEEP else fragment,
        )

    def normalize(self: Self) -> Self:
        """Returns a copy with "." and ".." segments resolved and repeated slashes collapsed."""
        return dataclasses.replace(self, path=_path.join(_path.simplify(_path.split(self.path))))

    def __str__(self: Self) -> str:
        """Translation of RFC 3986 section 5.3, without the scheme and authority"""
        result: str = self.path
        if self.query is not None:
            result += f"?{self.query}"
        if self.fragment is not None:
            result += f"#{self.fragment}"
        return result


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Absolute(_Value):
    """A URL with a scheme and/or an authority, e.g. "https://example.com/path" or "//cdn.example.com/lib.js".
    All components are stored as literal encoded text. The authority does not include the leading "//".
    """

    scheme: str | None
    authority: str | None
    path: str = "/"
    query: str | None = None
    fragment: str | None = None

    def _fields(self: Self) -> tuple[Any, ...]:
        return (self.path, self.query, self.fragment, self.scheme, self.authority)

    @property
    def has_scheme(self: Self) -> bool:
        return self.scheme is not None and len(self.scheme) > 0

    @property
    def has_authority(self: Self) -> bool:
        return self.authority is not None and len(self.authority) > 0

    @property
    def has_query(self: Self) -> bool:
        return self.query is not None and len(self.query) > 0

    @property
    def has_fragment(self: Self) -> bool:
        return self.fragment is not None and len(self.fragment) > 0

    def to_local_path(self: Self) -> str:
        return _path.to_local_path(self.path)

    def with_(
        self: Self,
        scheme: Any = _KEEP,
        authority: Any = _KEEP,
        path: str | None = None,
        query: Any = _KEEP,
        fragment: Any = _KEEP,
        pop: bool = True,
    ) -> Self:
        return dataclasses.replace(
            self,
            scheme=self.scheme if scheme is _KEEP else scheme,
            authority=self.authority if authority is _KEEP else authority,
            path=_path.expand(self.path, path, pop),
            query=self.query if query is _KEEP else query,
            fragment=self.fragment if fragment is _KEEP else fragment,
        )

    def normalize(self: Self) -> Self:
        return dataclasses.replace(self, path=_path.join(_path.simplify(_path.split(self.path))))

    def __str__(self: Self) -> str:
        """Direct translation of RFC 3986 section 5.3"""
        result: str = ""
        if self.scheme is not None:
            result += f"{self.scheme}:"
        if self.authority is not None:
            result += f"//{self.authority}"
        result += self.path
        if self.query is not None:
            result += f"?{self.query}"
        if self.fragment is not None:
            result += f"#{self.fragment}"
        return result


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Reference(_Value):
    """A "hypertext reference": a path, a query string, a fragment and user supplied parameters.

    The path and fragment are stored unescaped and are encoded when the reference is formatted.
    The query is an already formatted string ("a=1&b=2") and is passed through as-is.
    The parameters are a mapping that is safely encoded and appended to the query.

    Use Reference.parse for encoded or untrusted text, and the constructor for known good, unescaped values.
    Passing encoded text to the constructor encodes it a second time:
        str(Reference("a%20b")) == "a%2520b"
    """

    path: str = "/"
    query: str | None = None
    fragment: str | None = None
    parameters: Mapping[Any, Any] | None = None

    def __post_init__(self: Self) -> None:
        if self.parameters is not None and not isinstance(self.parameters, types.MappingProxyType):
            object.__setattr__(self, "parameters", types.MappingProxyType(dict(self.parameters)))

    @classmethod
    def _from_components(cls, components: Components, parameters: Mapping[Any, Any] | None = None) -> Self:
        # Path and fragment are unescaped for storage. The query keeps its "=" and "&" syntax, so it is left alone.
        fragment: str | None = components.fragment
        return cls(
            unescape(components.path),
            components.query or None,
            unescape(fragment) if fragment else None,
            parameters,
        )

    @classmethod
    def parse(cls, value: str = "/", parameters: Mapping[Any, Any] | None = None) -> Self:
        """Parses an encoded path with an optional query and fragment.
        Raises ValueError if value contains whitespace or control characters.
        e.g. Reference.parse("/search?query=ruby#results") == Reference("/search", "query=ruby", "results")
        """
        return cls._from_components(match_components(value), parameters)

    @classmethod
    def coerce(cls, value: Any, parameters: Mapping[Any, Any] | None = None) -> Self | None:
        """Converts a string, Relative, Absolute or Reference into a Reference. None is passed through."""
        if isinstance(value, str):
            return cls.parse(value, parameters)
        if isinstance(value, (Relative, Absolute)):
            # These store encoded text.
            return cls(
                unescape(value.path),
                value.query,
                unescape(value.fragment) if value.fragment is not None else None,
                parameters,
            )
        if isinstance(value, Reference):
            if parameters is None:
                return value
            return value.with_(parameters=parameters)
        if value is None:
            return None
        raise TypeError(f"Cannot coerce {value!r} to Reference!")

    def _fields(self: Self) -> tuple[Any, ...]:
        return (
            self.path,
            self.query,
            self.fragment,
            dict(self.parameters) if self.parameters is not None else None,
        )

    def _ordering_fields(self: Self) -> tuple[Any, ...]:
        return (
            self.path,
            self.query,
            self.fragment,
            encode(_sorted_parameters(self.parameters)) if self.parameters is not None else None,
        )

    @property
    def has_query(self: Self) -> bool:
        return self.query is not None and len(self.query) > 0

    @property
    def has_fragment(self: Self) -> bool:
        return self.fragment is not None and len(self.fragment) > 0

    @property
    def has_parameters(self: Self) -> bool:
        return self.parameters is not None and len(self.parameters) > 0

    def parse_query(self: Self) -> Self:
        """Returns a copy with the query string decoded into the parameters, and the query cleared.
        Parameters that were already set win over decoded ones with the same key.
        """
        if not self.has_query:
            return self

        parameters: dict[Any, Any] = dict(self.parameters) if self.parameters is not None else {}
        for key, value in decode(self.query).items():  # type: ignore[arg-type]
            parameters.setdefault(key, value)

        return dataclasses.replace(self, query=None, parameters=parameters)

    def base(self: Self) -> Self:
        """Just the path, without query, fragment or parameters"""
        return self.__class__(self.path)

    def with_(
        self: Self,
        path: str | None = None,
        query: Any = _KEEP,
        fragment: Any = _KEEP,
        parameters: Any = _KEEP,
        pop: bool = False,
        merge: bool = True,
    ) -> Self:
        """Returns an updated copy.

        path is merged into the current path, like expand(). With pop=True, a trailing file name is dropped first.
        With merge=True, parameters are merged over the existing ones and the query is kept.
        With merge=False, parameters replace the existing ones and the query is cleared.
        An explicitly passed query always takes precedence.
        """
        if fragment is _KEEP:
            fragment = self.fragment

        if merge:
            if query is _KEEP:
                query = self.query
            if parameters is _KEEP or parameters is None:
                parameters = self.parameters
            elif self.parameters is not None:
                parameters = {**self.parameters, **parameters}
        elif parameters is _KEEP:
            parameters = self.parameters
            if query is _KEEP:
                query = self.query
        elif query is _KEEP:
            query = None

        return self.__class__(_path.expand(self.path, path, pop), query, fragment, parameters)

    def normalize(self: Self) -> Self:
        return dataclasses.replace(self, path=_path.join(_path.simplify(_path.split(self.path))))

    def _query_string(self: Self) -> str | None:
        if self.has_query:
            if self.has_parameters:
                return f"{self.query}&{encode(self.parameters)}"
            return self.query
        if self.has_parameters:
            return encode(self.parameters)
        return None

    def to_relative(self: Self) -> Relative:
        """The encoded form of this reference, with the parameters folded into the query"""
        return Relative(
            _format_path(self.path),
            self._query_string(),
            escape_fragment(self.fragment) if self.has_fragment else None,  # type: ignore[arg-type]
        )

    def to_local_path(self: Self) -> str:
        """The path converted for the local filesystem.
        The path is stored unescaped, so an encoded separator that Reference.parse already decoded (e.g. "a%2Fb")
        is a real separator here. Use parse_url(...).to_local_path() for untrusted text, which keeps "%2F" and "%5C".
        """
        return _path.to_local_path(escape_path(self.path))

    def __str__(self: Self) -> str:
        result: str = _format_path(self.path)
        query: str | None = self._query_string()
        if query is not None:
            result += f"?{query}"
        if self.has_fragment:
            result += f"#{escape_fragment(self.fragment)}"  # type: ignore[arg-type]
        return result


def _url_from_components(components: Components) -> Relative | Absolute:
    if components.scheme is not None or components.authority is not None:
        return Absolute(
            components.scheme,
            components.authority,
            components.path,
            components.query,
            components.fragment,
        )
    return Relative(components.path, components.query, components.fragment)


def parse_url(value: Any) -> Relative | Absolute | None:
    """Converts value into an Absolute (if it has a scheme or authority) or a Relative.
    Strings are split into their components without decoding anything.
    Raises ValueError for a string containing whitespace or control characters.
    """
    if isinstance(value, str):
        url: Relative | Absolute = _url_from_components(match_components(value))
        logger.debug("parsed %r as %s", value, url.__class__.__name__)
        return url
    if isinstance(value, (Relative, Absolute)):
        return value
    if isinstance(value, Reference):
        return value.to_relative()
    if value is None:
        return None
    raise TypeError(f"Cannot coerce {value!r} to URL!")


def _combine_relative(base: Relative, other: Any) -> Relative | Absolute:
    if isinstance(other, Absolute):
        # Relative navigation can't be applied to something that already has a scheme or authority.
        return other
    if isinstance(other, Relative):
        return Relative(_path.expand(base.path, other.path, True), other.query, other.fragment)
    raise TypeError(f"Cannot combine Relative URL with {other!r}")


def _combine_absolute(base: Absolute, other: Any) -> Absolute:
    """Implementation of the "Transform References" algorithm from RFC 3986 section 5.2.2"""
    if isinstance(other, Absolute):
        if other.has_scheme:
            return other
        # Network-path reference ("//host/path"): keep the base scheme.
        return Absolute(base.scheme, other.authority, other.path, other.query, other.fragment)

    if not isinstance(other, Relative):
        raise TypeError(f"Cannot combine Absolute URL with {other!r}")

    if len(other.path) == 0:
        if other.query is not None:
            return Absolute(base.scheme, base.authority, base.path, other.query, other.fragment)
        # A fragment-only (or empty) reference must not discard the base query.
        return Absolute(
            base.scheme,
            base.authority,
            base.path,
            base.query,
            other.fragment if other.fragment is not None else base.fragment,
        )

    # RFC 3986 section 5.2.3: a base with an authority and an empty path merges as "/".
    base_path: str = base.path
    if len(base_path) == 0 and base.has_authority:
        base_path = "/"

    return Absolute(
        base.scheme,
        base.authority,
        _path.expand(base_path, other.path, True),
        other.query,
        other.fragment,
    )


def _combine_reference(base: Reference, other: Any) -> Reference | Absolute:
    if isinstance(other, str):
        components: Components = match_components(other)
        if components.scheme is not None or components.authority is not None:
            return _url_from_components(components)  # type: ignore[return-value]
        other = Reference._from_components(components)
    elif isinstance(other, Absolute):
        return other
    elif isinstance(other, Relative):
        other = Reference.coerce(other)
    elif not isinstance(other, Reference):
        raise TypeError(f"Cannot combine Reference with {other!r}")

    return Reference(
        _path.expand(base.path, other.path, True),
        other.query,
        other.fragment,
        other.parameters,
    )


def combine(base: Relative | Absolute | Reference, other: Any) -> Relative | Absolute | Reference:
    """Resolves other against base (RFC 3986 section 5.2). Also available as base + other.

    other may be a Relative, Absolute, Reference or string; strings are parsed first.
    Neither operand is modified.
    """
    if isinstance(base, Reference):
        return _combine_reference(base, other)

    if isinstance(other, str):
        other = parse_url(other)
    elif isinstance(other, Reference):
        other = other.to_relative()

    if isinstance(base, Absolute):
        return _combine_absolute(base, other)
    if isinstance(base, Relative):
        return _combine_relative(base, other)
    raise TypeError(f"Cannot combine {base!r} with {other!r}")
