"""
cygaz/core/errors.py
Error taxonomy.
  • FetchError          → network failure, non-2xx upstream, timeout
  • ParseError          → upstream page changed shape
  • InvalidPetroleumType → bad path segment, rendered as 404
Fetch and parse errors never leave the refresh coordinator.
"""


class CygazError(Exception):
    """Base class for every error raised by this package."""


class FetchError(CygazError):
    pass


class ParseError(FetchError):
    pass


class InvalidPetroleumType(CygazError, ValueError):
    def __init__(self, raw):
        self.raw = raw
        super().__init__(f"Unknown petroleum type {raw!r} (expected 1-5)")
