"""
Logical request model.

Represents one HTTP request to be bundled into a batch.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from odata_batch.errors import BatchFormatError

DEFAULT_METHOD = "GET"


@dataclass(frozen=True)
class LogicalRequest:
    """
    A single HTTP request destined for a batch.
    
    Position in the list handed to a formatter decides wire order and,
    through the server, response order.
    
    Attributes:
        url: Request target, normally a path relative to the service root
        method: HTTP method (upper-cased on construction, defaults to GET)
        headers: Header lines for the inner HTTP message
        body: Raw request body; required for any method other than GET
    """
    
    url: str
    method: str = DEFAULT_METHOD
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    
    def __post_init__(self):
        """Normalize method and freeze headers into a private copy."""
        object.__setattr__(self, "method", (self.method or DEFAULT_METHOD).upper())
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))
    
    @property
    def is_read(self) -> bool:
        """GET requests travel as plain parts; everything else as a changeset."""
        return self.method == DEFAULT_METHOD
    
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LogicalRequest":
        """
        Build a request from a plain mapping such as a decoded JSON object.
        
        Accepts either flat keys or a fetch-style ``init`` object
        holding method/headers/body.
        
        Raises:
            BatchFormatError: If the mapping has no url
        """
        if not data.get("url"):
            raise BatchFormatError(f"Request has no url: {dict(data)!r}")
        
        init = data.get("init") or {}
        return cls(
            url=data["url"],
            method=data.get("method") or init.get("method") or DEFAULT_METHOD,
            headers=data.get("headers") or init.get("headers") or {},
            body=data.get("body", init.get("body")),
        )
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "method": self.method,
            "headers": dict(self.headers),
            "body": self.body,
        }
