"""urlref.encoding
Percent-encoding primitives for URL components (RFC 3986 section 2.1)
"""

import re

# These already do the right thing, so there's no reason to reimplement them:
from urllib.parse import quote, unquote

# unreserved, minus "~", which escape() always encodes.
_NON_UNRESERVED_PAT: re.Pattern[bytes] = re.compile(rb"[^A-Za-z0-9_.\-]")

# sub-delims = "!" / "$" / "&" / "'" / "(" / ")" / "*" / "+" / "," / ";" / "="
_SUB_DELIMS: str = "!$&'()*+,;="

# pchar = unreserved / pct-encoded / sub-delims / ":" / "@", plus the "/" between segments.
# quote() never encodes the unreserved set, so only the extras are listed here.
PATH_SAFE: str = f"{_SUB_DELIMS}:@/"

# fragment = *( pchar / "/" / "?" )
FRAGMENT_SAFE: str = f"{PATH_SAFE}?"

# %2F and %5C, in either case
_ENCODED_SEPARATOR_PAT: re.Pattern[str] = re.compile(r"(%2[Ff]|%5[Cc])")


def _pct_encode(m: re.Match[bytes]) -> bytes:
    return b"%%%02X" % m[0][0]


def escape(string: str) -> str:
    """Percent-encodes every byte of the UTF-8 encoding of string that is not in [A-Za-z0-9_.-].
    e.g. escape("café") == "caf%C3%A9"
    """
    return _NON_UNRESERVED_PAT.sub(_pct_encode, string.encode("utf-8")).decode("ascii")


def unescape(string: str) -> str:
    """Replaces every %XX sequence in string with the byte it encodes.
    Malformed sequences are left alone.
    The decoded bytes are read as UTF-8, and bytes that aren't valid UTF-8 become U+FFFD:
        unescape("%FF") == "�"
    """
    return unquote(string)


def unescape_path(string: str) -> str:
    """Like unescape, but leaves %2F and %5C encoded.
    Decoding those would turn a single path segment into several, so they are kept as text.
    e.g. unescape_path("My%20File%2Fname") == "My File%2Fname"
    """
    parts: list[str] = _ENCODED_SEPARATOR_PAT.split(string)
    # re.split puts the captured separators at the odd indices.
    return "".join(part if i % 2 else unquote(part) for i, part in enumerate(parts))


def escape_path(path: str) -> str:
    """Percent-encodes the characters of path that are not allowed in a path (RFC 3986 section 3.3)"""
    return quote(path, safe=PATH_SAFE)


def escape_fragment(fragment: str) -> str:
    """Percent-encodes the characters of fragment that are not allowed in a fragment (RFC 3986 section 3.5)"""
    return quote(fragment, safe=FRAGMENT_SAFE)
