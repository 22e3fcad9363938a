"""urlref.path
Functions over path segment lists: splitting, joining, dot-segment removal and merging.
A path is split on "/" without discarding empty segments, so:
    split("/a/b/") == ["", "a", "b", ""]
A leading "" marks an absolute path and a trailing "" marks a trailing slash.
"""

import os

from typing import Sequence

from .encoding import unescape_path


def split(path: str) -> list[str]:
    """Splits path into its segments.
    e.g. split("") == [], split("/") == ["", ""], split("a//b") == ["a", "", "b"]
    """
    if len(path) == 0:
        return []
    return path.split("/")


def join(segments: Sequence[str]) -> str:
    """Inverse of split"""
    return "/".join(segments)


def simplify(segments: Sequence[str]) -> list[str]:
    """Resolves "." and ".." segments and collapses repeated slashes (RFC 3986 section 5.2.4).
    Leading ".." segments of a relative path are kept, and ".." never climbs above the root of an absolute path.
    """
    result: list[str] = []
    last: int = len(segments) - 1
    for i, segment in enumerate(segments):
        if i == 0 and segment == "":
            result.append("")
        elif segment == ".":
            # A trailing "." still names a directory.
            if i == last:
                result.append("")
        elif segment == "" and i != last:
            pass
        elif segment == ".." and len(result) > 0 and result[-1] != "..":
            if result[-1] != "":
                result.pop()
            if i == last:
                result.append("")
        else:
            result.append(segment)
    return result


def expand(base: str, relative: str | None, pop: bool = True) -> str:
    """Implementation of the "merge" routine from RFC 3986 section 5.2.3, followed by dot-segment removal.
    With pop=True, everything after the last "/" of base is discarded before merging.
    e.g. expand("/a/b/c", "d") == "/a/b/d", expand("/a/b/c", "d", pop=False) == "/a/b/c/d"
    """
    if relative is None or len(relative) == 0:
        return base

    segments: list[str] = split(base)
    if pop and (len(segments) == 0 or segments[-1] != ".."):
        if len(segments) > 0:
            segments.pop()
    elif len(segments) > 0 and segments[-1] == "":
        segments.pop()

    relative_segments: list[str] = split(relative)
    if relative_segments[0] == "":
        segments = relative_segments
    else:
        segments.extend(relative_segments)

    return join(simplify(segments))


def relative(target: str, from_: str) -> str:
    """Returns the shortest relative path that leads from the file at from_ to target.
    e.g. relative("/a/b/c", "/a/d/e") == "../b/c"
    """
    target_segments: list[str] = split(target)
    directory: list[str] = split(from_)[:-1]

    common: int = 0
    for t, d in zip(target_segments, directory):
        if t != d:
            break
        common += 1

    return join([".."] * (len(directory) - common) + target_segments[common:])


def to_local_path(path: str) -> str:
    """Converts a URL path into a path for the local filesystem.
    Encoded separators (%2F and %5C) are not decoded, so a segment can never become more than one directory.
    """
    segments: list[str] = [unescape_path(segment) for segment in split(path)]
    last: int = len(segments) - 1
    # Repeated slashes collapse, the way a filesystem join treats them.
    return os.sep.join(
        segment for i, segment in enumerate(segments) if len(segment) > 0 or i == 0 or i == last
    )
