"""
OData Batch Codec

Packs multiple HTTP requests into one OData ``$batch`` body and unpacks
batched responses, including nested changesets, into ordered envelopes.
Supports both the ``multipart/mixed`` framing and the JSON bundle framing.
"""

__version__ = "0.1.0"

from odata_batch.core.request import LogicalRequest
from odata_batch.core.response import ResponseEnvelope, build_envelope
from odata_batch.wire.json_bundle import JsonBatchBundle, decode_json_bundle, format_json_bundle
from odata_batch.wire.multipart import (
    adecode_multipart,
    boundary_from_content_type,
    decode_multipart,
    format_batch_request,
    new_boundary,
)

__all__ = [
    "LogicalRequest",
    "ResponseEnvelope",
    "build_envelope",
    "JsonBatchBundle",
    "format_json_bundle",
    "decode_json_bundle",
    "format_batch_request",
    "decode_multipart",
    "adecode_multipart",
    "boundary_from_content_type",
    "new_boundary",
]
