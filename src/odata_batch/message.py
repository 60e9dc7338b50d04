"""
Single HTTP message text handling.

Parses one raw HTTP response (status line, header block, body) and
serializes one HTTP request the way it is embedded in a batch part.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from odata_batch.errors import MalformedMessageError

HTTP_EOL = "\r\n"
HTTP_VERSION = "HTTP/1.1"

_LINE_SPLIT = re.compile(r"\r?\n")
_STATUS_LINE = re.compile(r"^(\S+) ([0-9]{3})(?: (.*))?$")


@dataclass(frozen=True)
class ParsedMessage:
    """Status line, headers and body of one HTTP response."""
    protocol: str
    status_code: int
    status_message: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""


def get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    if name in headers:
        return headers[name]
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def _parse_header_lines(lines, start: int) -> Tuple[Dict[str, str], int]:
    """Read header lines from ``start`` up to the first blank line.
    
    Returns the headers and the index of the first body line.
    """
    headers: Dict[str, str] = {}
    index = start
    while index < len(lines):
        line = lines[index]
        index += 1
        if line == "":
            break
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            raise MalformedMessageError(f"Invalid header line: {line!r}", fragment=line)
        headers[name.strip()] = value.strip()
    return headers, index


def parse_response_message(text: str) -> ParsedMessage:
    """
    Parse raw HTTP response text.
    
    Args:
        text: Response text starting with the status line
        
    Returns:
        The parsed message; the body keeps CRLF line endings
        
    Raises:
        MalformedMessageError: If the status line or a header line is invalid
    """
    lines = _LINE_SPLIT.split(text.lstrip("\r\n"))
    match = _STATUS_LINE.match(lines[0])
    if match is None:
        raise MalformedMessageError(f"Invalid status line: {lines[0]!r}", fragment=text)
    
    headers, body_start = _parse_header_lines(lines, 1)
    return ParsedMessage(
        protocol=match.group(1),
        status_code=int(match.group(2), 10),
        status_message=match.group(3) or "",
        headers=headers,
        body=HTTP_EOL.join(lines[body_start:]),
    )


def parse_part(text: str) -> Tuple[Dict[str, str], str]:
    """
    Split one multipart section into its MIME headers and its body.
    
    The rest of the delimiter line (transport padding and its line
    break) is dropped, as is the CRLF preceding the next delimiter,
    which belongs to that delimiter.
    """
    padding, newline, rest = text.partition("\n")
    if newline and not padding.strip():
        text = rest
    if text.endswith(HTTP_EOL):
        text = text[:-len(HTTP_EOL)]
    elif text.endswith("\n"):
        text = text[:-1]
    
    lines = _LINE_SPLIT.split(text)
    headers, body_start = _parse_header_lines(lines, 0)
    return headers, HTTP_EOL.join(lines[body_start:])


def format_request_message(
    url: str,
    method: str,
    headers: Mapping[str, str],
    body: Optional[str] = None,
) -> str:
    """Serialize a request: request line, header lines, blank line, optional body."""
    lines = [f"{method} {url} {HTTP_VERSION}"]
    lines.extend(f"{name}: {value}" for name, value in headers.items())
    lines.append("")
    message = HTTP_EOL.join(lines)
    if body:
        message += HTTP_EOL + body
    return message
