#!/usr/bin/env python3
"""
Binary profile decoding for Lua statement profiles.

A profile is a flat stream of records, little-endian, no padding:

    [uint32 tag length][tag bytes][uint64 count]

The tag is "<path>:<line>", optionally prefixed with one or more '@'
characters. There is no header and no terminator; a truncated trailing
record (e.g. from a killed process) is dropped silently.
"""

import re
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from coverage_errors import ProfileFormatError, ProfileReadError

LENGTH_PREFIX = struct.Struct("<I")
COUNT_FIELD = struct.Struct("<Q")
LINE_PATTERN = re.compile(r'\+?[0-9]+')


@dataclass(frozen=True)
class ProfileRecord:
    tag: str
    path: str
    line: int
    count: int


def read_profile(profile_path) -> bytes:
    """Read the whole profile file into memory."""
    try:
        return Path(profile_path).read_bytes()
    except OSError as e:
        raise ProfileReadError(f"cannot read profile {profile_path}: {e}") from e


def split_tag(tag: str):
    """Split a tag into (path, line).

    Returns None when the tag is not attributable to a source line
    (zero or several ':' separators).
    """
    tag = tag.lstrip("@")
    if tag.count(":") != 1:
        return None
    path, line_str = tag.split(":")
    if not LINE_PATTERN.fullmatch(line_str):
        raise ProfileFormatError(f"bad line number in tag {tag!r}")
    return path, int(line_str)


def decode_profile(data: bytes) -> Iterator[ProfileRecord]:
    """Yield profile records in stream order."""
    size = len(data)
    offset = 0
    while offset + LENGTH_PREFIX.size <= size:
        (tag_len,) = LENGTH_PREFIX.unpack_from(data, offset)
        offset += LENGTH_PREFIX.size

        if offset + tag_len > size:
            break
        raw_tag = data[offset:offset + tag_len]
        offset += tag_len

        if offset + COUNT_FIELD.size > size:
            break
        (count,) = COUNT_FIELD.unpack_from(data, offset)
        offset += COUNT_FIELD.size

        tag = raw_tag.decode("utf-8", errors="replace").lstrip("@")
        parts = split_tag(tag)
        if parts is None:
            continue
        path, line = parts
        yield ProfileRecord(tag=tag, path=path, line=line, count=count)

