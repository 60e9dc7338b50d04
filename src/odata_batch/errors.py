"""
Error types raised by the batch codec.

Every error derives from BatchError so callers can catch the whole family
at the transport boundary.
"""

from typing import Optional


class BatchError(Exception):
    """Base class for batch encode/decode failures."""
    pass


class MissingParameterError(BatchError, ValueError):
    """Raised when decode is called without a body or boundary token."""
    pass


class MalformedMessageError(BatchError, ValueError):
    """Raised when a block of text does not parse as an HTTP message."""

    def __init__(self, message: str, fragment: Optional[str] = None):
        super().__init__(message)
        self.fragment = fragment


class BatchFormatError(BatchError, ValueError):
    """Raised when a request cannot be framed without corrupting the batch."""
    pass


class NestingTooDeepError(BatchError):
    """Raised when a response nests multipart sections beyond the configured limit."""

    def __init__(self, depth: int, limit: int):
        super().__init__(f"Multipart nesting depth {depth} exceeds limit {limit}")
        self.depth = depth
        self.limit = limit


class UnsupportedPartError(BatchError):
    """Raised in strict mode for a part whose content type the decoder does not handle."""

    def __init__(self, content_type: Optional[str]):
        super().__init__(f"Unsupported batch part content type: {content_type!r}")
        self.content_type = content_type
