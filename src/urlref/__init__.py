__version__ = "0.1"

from .encoding import escape, escape_fragment, escape_path, unescape, unescape_path
from .grammar import PATTERN, Components, match_components
from .query import DEFAULT_MAXIMUM_DEPTH, InvalidKeyPathError, KeyLengthExceededError, QueryError
from .url import Absolute, Reference, Relative, combine, parse_url
