"""Exceptions shared by the profile coverage tools."""


class CoverageError(Exception):
    pass


class ProfileReadError(CoverageError):
    """The profile file itself could not be read."""


class ProfileFormatError(CoverageError):
    """A record is structurally corrupt (bad line number in a tag)."""


class SourceResolutionError(CoverageError):
    """A tag does not resolve to an existing regular file."""


class SourceParseError(CoverageError):
    """A source file could not be read or parsed; only that file is skipped."""
