"""
JSON batch framing.

Newer protocol revisions carry a batch as one JSON document: a
``requests`` array on the way out and a ``responses`` array on the way
back, correlated by ``id``.
"""

import json
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import structlog

from odata_batch.core.request import LogicalRequest
from odata_batch.core.response import ResponseEnvelope
from odata_batch.errors import BatchFormatError, MalformedMessageError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class JsonBatchOperation:
    """One entry of the ``requests`` array."""
    id: str
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "method": self.method,
            "url": self.url,
            "headers": dict(self.headers),
            "body": self.body,
        }


@dataclass(frozen=True)
class JsonBatchBundle:
    """A complete JSON batch request."""
    requests: Tuple[JsonBatchOperation, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire structure."""
        return {"requests": [operation.to_dict() for operation in self.requests]}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def format_json_bundle(requests: Sequence[LogicalRequest]) -> JsonBatchBundle:
    """
    Build a JSON batch bundle.

    The id of each operation is its zero-based position in ``requests``;
    methods are lower-cased and url, headers and body pass through.

    Raises:
        BatchFormatError: If a request has no url
    """
    operations = []
    for index, request in enumerate(requests):
        if not request.url:
            raise BatchFormatError(f"Request {index} has no url")
        operations.append(JsonBatchOperation(
            id=str(index),
            method=request.method.lower(),
            url=request.url,
            headers=dict(request.headers),
            body=request.body,
        ))

    logger.debug("json_bundle_encoded", requests=len(operations))
    return JsonBatchBundle(requests=tuple(operations))


def _status_text(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def _envelope(entry: Mapping[str, Any]) -> ResponseEnvelope:
    try:
        status = int(entry["status"])
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedMessageError(
            f"Batch response entry has no valid status: {entry!r}",
            fragment=json.dumps(entry, default=str),
        ) from e

    headers = entry.get("headers") or {}
    if not isinstance(headers, Mapping):
        raise MalformedMessageError(
            f"Batch response entry headers are not an object: {headers!r}",
            fragment=json.dumps(entry, default=str),
        )

    body = entry.get("body")
    if body is None:
        text = ""
    elif isinstance(body, str):
        text = body
    else:
        text = json.dumps(body)

    return ResponseEnvelope(
        status=status,
        status_text=_status_text(status),
        headers={str(k): str(v) for k, v in headers.items()},
        body=text,
    )


def _sort_key(entry: Mapping[str, Any]) -> int:
    return int(entry["id"])


def decode_json_bundle(payload: Union[str, bytes, Mapping[str, Any]]) -> List[ResponseEnvelope]:
    """
    Decode a JSON batch response into envelopes.

    Entries are ordered by their numeric ``id`` so the result lines up
    with the request list; if any id is missing or non-numeric the
    payload order is kept.

    Args:
        payload: Response document, raw or already parsed

    Returns:
        One envelope per entry of ``responses``

    Raises:
        MalformedMessageError: If the document is not JSON or lacks a
            ``responses`` array, or an entry has no valid status
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise MalformedMessageError(f"Batch response is not valid JSON: {e}") from e

    entries = payload.get("responses") if isinstance(payload, Mapping) else None
    if not isinstance(entries, list):
        raise MalformedMessageError("Batch response has no 'responses' array")

    try:
        entries = sorted(entries, key=_sort_key)
    except (KeyError, TypeError, ValueError):
        logger.debug("json_bundle_unordered_ids", responses=len(entries))

    responses = [_envelope(entry) for entry in entries]
    logger.debug("json_bundle_decoded", responses=len(responses))
    return responses
