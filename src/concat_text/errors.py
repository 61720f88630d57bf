"""Error taxonomy.

"No work available" is not an error: `ProcessSession.get()` returns None.
"""

from __future__ import annotations


class ConcatTextError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(ConcatTextError):
    """Processor properties or run configuration are invalid."""


class ContentCodecError(ConcatTextError):
    """Flowfile content cannot be represented under the configured character set."""

    direction = "convert"

    def __init__(self, flowfile_uuid: str, charset: str, reason: str):
        self.flowfile_uuid = flowfile_uuid
        self.charset = charset
        self.reason = reason
        super().__init__(f"cannot {self.direction} flowfile {flowfile_uuid} as {charset}: {reason}")


class ContentDecodeError(ContentCodecError):
    direction = "decode"


class ContentEncodeError(ContentCodecError):
    direction = "encode"


class RoutingError(ConcatTextError):
    """A flowfile was transferred to a relationship the processor does not declare."""


class SessionError(ConcatTextError):
    """A session was used out of contract (e.g. committed with untransferred flowfiles)."""
