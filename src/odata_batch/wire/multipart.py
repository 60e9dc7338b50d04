"""
Multipart batch framing.

Encodes logical requests into a ``multipart/mixed`` batch body and decodes
a batched response body, following nested changesets, into an ordered
list of response envelopes.
"""

import asyncio
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

import structlog

from odata_batch.config import BatchConfig, get_config
from odata_batch.core.request import LogicalRequest
from odata_batch.core.response import ResponseEnvelope, build_envelope
from odata_batch.errors import (
    BatchFormatError,
    MissingParameterError,
    NestingTooDeepError,
    UnsupportedPartError,
)
from odata_batch.message import HTTP_EOL, format_request_message, get_header, parse_part

logger = structlog.get_logger(__name__)

MULTIPART_MIXED = "multipart/mixed"
APPLICATION_HTTP = "application/http"

TokenFactory = Callable[[], str]


def new_token() -> str:
    """Random token for a changeset boundary."""
    return str(uuid.uuid4())


def new_boundary(prefix: Optional[str] = None) -> str:
    """Random top-level boundary token, e.g. ``batch_<uuid4>``."""
    if prefix is None:
        prefix = get_config().boundary_prefix
    return f"{prefix}{uuid.uuid4()}"


def batch_content_type(boundary: str) -> str:
    """Content-Type header value for an outer batch request."""
    return f"{MULTIPART_MIXED}; boundary={boundary}"


def boundary_from_content_type(content_type: Optional[str]) -> str:
    """
    Extract the boundary parameter from a multipart Content-Type value.

    Args:
        content_type: Header value such as ``multipart/mixed; boundary=abc``

    Returns:
        The boundary token with surrounding quotes removed

    Raises:
        MissingParameterError: If the value carries no boundary parameter
    """
    for param in (content_type or "").split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "boundary" and value.strip():
            return value.strip().strip('"')
    raise MissingParameterError(f"No boundary parameter in content type: {content_type!r}")


# =============================================================================
# Encoding
# =============================================================================

def _collides(token: str, other: str) -> bool:
    """True if either delimiter line would also match the other token."""
    return f"--{token}" in f"--{other}" or f"--{other}" in f"--{token}"


def _http_part(request: LogicalRequest) -> List[str]:
    """Header block and payload of one ``application/http`` part."""
    return [
        f"Content-Type: {APPLICATION_HTTP}",
        "Content-Transfer-Encoding: binary",
        "",
        format_request_message(request.url, request.method, request.headers, request.body),
        "",
    ]


def _check_request(request: LogicalRequest, index: int) -> None:
    if not request.url:
        raise BatchFormatError(f"Request {index} has no url")
    if not request.is_read and request.body is None:
        raise BatchFormatError(
            f"Request {index} ({request.method} {request.url}) has no body"
        )


def format_batch_request(
    requests: Sequence[LogicalRequest],
    boundary: str,
    token_factory: Optional[TokenFactory] = None,
) -> str:
    """
    Format requests as one ``multipart/mixed`` batch body.

    GET requests become plain ``application/http`` parts. Every other
    request is wrapped in its own single-member changeset framed by a
    freshly generated boundary token.

    Args:
        requests: Requests in wire order
        boundary: Top-level boundary token
        token_factory: Source of changeset tokens (random UUIDs by default)

    Returns:
        CRLF-joined body terminated by ``--<boundary>--``

    Raises:
        BatchFormatError: On an empty boundary, a request that cannot be
            framed, or a changeset token that collides with another token
    """
    if not boundary:
        raise BatchFormatError("Batch boundary must not be empty")

    token_factory = token_factory or new_token
    used_tokens = [boundary]
    parts: List[str] = []

    for index, request in enumerate(requests):
        _check_request(request, index)

        if request.is_read:
            parts.append(HTTP_EOL.join([f"--{boundary}", *_http_part(request)]))
            continue

        changeset = token_factory()
        if not changeset or any(_collides(changeset, token) for token in used_tokens):
            raise BatchFormatError(f"Changeset boundary {changeset!r} collides with another boundary")
        used_tokens.append(changeset)

        parts.append(HTTP_EOL.join([
            f"--{boundary}",
            f"Content-Type: {batch_content_type(changeset)}",
            "",
            f"--{changeset}",
            *_http_part(request),
            f"--{changeset}--",
        ]))

    parts.append(f"--{boundary}--")

    logger.debug(
        "batch_encoded",
        boundary=boundary,
        requests=len(requests),
        changesets=len(used_tokens) - 1,
    )
    return HTTP_EOL.join(parts)


# =============================================================================
# Decoding
# =============================================================================

class PartKind(str, Enum):
    """What a multipart section holds."""
    LEAF = "leaf"                 # One application/http response
    NESTED = "nested"             # A changeset with its own boundary
    UNSUPPORTED = "unsupported"   # Any other content type


@dataclass(frozen=True)
class ClassifiedPart:
    """A multipart section tagged by kind, with the body to decode next."""
    kind: PartKind
    body: str
    content_type: Optional[str] = None
    boundary: Optional[str] = None


def classify_part(text: str) -> ClassifiedPart:
    """
    Inspect the MIME headers of one section and tag it.

    The nested boundary is the text after the last ``=`` of the
    Content-Type value, taken as-is.
    """
    headers, body = parse_part(text)
    content_type = get_header(headers, "Content-Type")
    normalized = (content_type or "").lower()

    if normalized.startswith(MULTIPART_MIXED):
        boundary = content_type.rsplit("=", 1)[-1] if "=" in content_type else ""
        return ClassifiedPart(PartKind.NESTED, body, content_type, boundary)
    if normalized == APPLICATION_HTTP:
        return ClassifiedPart(PartKind.LEAF, body, content_type)
    return ClassifiedPart(PartKind.UNSUPPORTED, body, content_type)


def split_parts(body: str, boundary: str) -> List[str]:
    """
    Split a multipart body on its delimiter, dropping preamble and epilogue.

    Whitespace-only sections are dropped as well, so a body holding just
    an opening delimiter and the terminator yields no parts.
    """
    segments = body.split(f"--{boundary}")
    return [segment for segment in segments[1:-1] if segment.strip()]


def _decode_level(
    body: str,
    boundary: str,
    depth: int,
    config: BatchConfig,
) -> List[ResponseEnvelope]:
    if not body or not boundary:
        raise MissingParameterError("Multipart body and boundary are both required")
    if depth > config.max_nesting_depth:
        raise NestingTooDeepError(depth, config.max_nesting_depth)

    responses: List[ResponseEnvelope] = []
    for position, text in enumerate(split_parts(body, boundary)):
        part = classify_part(text)

        if part.kind == PartKind.NESTED:
            responses.extend(_decode_level(part.body, part.boundary, depth + 1, config))
        elif part.kind == PartKind.LEAF:
            responses.append(build_envelope(part.body))
        else:
            if config.strict_content_types:
                raise UnsupportedPartError(part.content_type)
            logger.warning(
                "part_skipped",
                boundary=boundary,
                position=position,
                content_type=part.content_type,
            )

    return responses


def decode_multipart(
    body: str,
    boundary: str,
    config: Optional[BatchConfig] = None,
) -> List[ResponseEnvelope]:
    """
    Decode a batched ``multipart/mixed`` response body.

    Changesets are followed depth-first and flattened in place, so the
    result lists one envelope per leaf response in wire order.

    Args:
        body: Response body text
        boundary: Token framing the top level (from the outer Content-Type)
        config: Decoder settings; uses global config if not provided

    Returns:
        Response envelopes in request order

    Raises:
        MissingParameterError: If body or boundary is empty, at any level
        MalformedMessageError: If any part fails to parse; the whole decode aborts
        NestingTooDeepError: If changesets nest deeper than allowed
        UnsupportedPartError: On an unknown part content type in strict mode
    """
    config = config or get_config()
    responses = _decode_level(body, boundary, 1, config)
    logger.debug("batch_decoded", boundary=boundary, responses=len(responses))
    return responses


async def adecode_multipart(
    body: str,
    boundary: str,
    config: Optional[BatchConfig] = None,
) -> List[ResponseEnvelope]:
    """Run ``decode_multipart`` in a worker thread."""
    return await asyncio.to_thread(decode_multipart, body, boundary, config)
