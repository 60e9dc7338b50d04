"""
Response envelope model.

Wraps one parsed HTTP response taken out of a batch.
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from odata_batch.message import ParsedMessage, get_header, parse_response_message

_UNPARSED = object()


@dataclass(frozen=True)
class ResponseEnvelope:
    """
    One response extracted from a batch.
    
    The body is kept as raw text; ``text()`` returns it and ``json()``
    parses it on first call and caches the result. Fields are read-only
    once built.
    
    Attributes:
        status: Numeric HTTP status code
        status_text: Reason phrase from the status line
        headers: Header mapping in wire order
        body: Raw body text
    """
    
    status: int
    status_text: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = field(default="", repr=False)
    _json: Any = field(default=_UNPARSED, init=False, repr=False, compare=False)
    
    def __post_init__(self):
        """Freeze headers into a read-only copy."""
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))
    
    @classmethod
    def from_message(cls, message: ParsedMessage) -> "ResponseEnvelope":
        """Adapt a parsed single message into an envelope."""
        return cls(
            status=message.status_code,
            status_text=message.status_message,
            headers=dict(message.headers),
            body=message.body,
        )
    
    def text(self) -> str:
        """Raw body text."""
        return self.body
    
    def json(self) -> Any:
        """
        Body parsed as JSON.
        
        Raises:
            json.JSONDecodeError: If the body is not valid JSON
        """
        if self._json is _UNPARSED:
            object.__setattr__(self, "_json", json.loads(self.body))
        return self._json
    
    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        return get_header(self.headers, name)
    
    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status,
            "status_text": self.status_text,
            "headers": dict(self.headers),
            "body": self.body,
        }
    
    def __repr__(self) -> str:
        return f"ResponseEnvelope(status={self.status}, status_text={self.status_text!r})"


def build_envelope(text: str) -> ResponseEnvelope:
    """Parse raw single-response text into a ResponseEnvelope."""
    return ResponseEnvelope.from_message(parse_response_message(text))
