"""urlref.grammar
Splits a URI-reference into its five components (RFC 3986 appendix B), rejecting whitespace and control characters.
This is intentionally looser than the full RFC 3986 grammar: components are not validated beyond their delimiters.
"""

import re

from typing import NamedTuple

# ALPHA = %x41-5A / %x61-7A
_ALPHA: str = r"[A-Za-z]"

# DIGIT = %x30-39
_DIGIT: str = r"[0-9]"

# Characters that may not appear anywhere in a URI: whitespace, C0 controls and DEL.
_FORBIDDEN: str = r"\s\x00-\x1f\x7f"

# scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME: str = rf"(?P<scheme>{_ALPHA}(?:{_ALPHA}|{_DIGIT}|[+\-.])*)"

# authority = everything after "//" up to the next "/", "?" or "#"
_AUTHORITY: str = rf"(?P<authority>[^/?#{_FORBIDDEN}]*)"

# path = everything up to the next "?" or "#"
_PATH: str = rf"(?P<path>[^?#{_FORBIDDEN}]*)"

# query = everything after "?" up to the next "#"
_QUERY: str = rf"(?P<query>[^#{_FORBIDDEN}]*)"

# fragment = everything after "#"
_FRAGMENT: str = rf"(?P<fragment>[^{_FORBIDDEN}]*)"

# URI-reference = [ scheme ":" ] [ "//" authority ] path [ "?" query ] [ "#" fragment ]
_URI_REFERENCE: str = rf"\A(?:{_SCHEME}:)?(?://{_AUTHORITY})?{_PATH}(?:\?{_QUERY})?(?:#{_FRAGMENT})?\Z"
PATTERN: re.Pattern[str] = re.compile(_URI_REFERENCE)


class Components(NamedTuple):
    """The components of a URI-reference, as literal (still encoded) text. Absent components are None."""

    scheme: str | None
    authority: str | None
    path: str
    query: str | None
    fragment: str | None


def match_components(value: str) -> Components:
    """Splits value into its components.
    Raises ValueError if value contains whitespace or control characters.
    """
    m: re.Match[str] | None = PATTERN.match(value)
    if m is None:
        raise ValueError(f"Invalid URL (contains whitespace or control characters): {value!r}")
    return Components(
        scheme=m["scheme"],
        authority=m["authority"],
        path=m["path"],
        query=m["query"],
        fragment=m["fragment"],
    )
