"""
Wire encodings for batches.

``multipart/mixed`` framing and JSON bundles.
"""

from odata_batch.wire.multipart import (
    batch_content_type,
    boundary_from_content_type,
    decode_multipart,
    format_batch_request,
    new_boundary,
)
from odata_batch.wire.json_bundle import JsonBatchBundle, decode_json_bundle, format_json_bundle

__all__ = [
    "batch_content_type",
    "boundary_from_content_type",
    "decode_multipart",
    "format_batch_request",
    "new_boundary",
    "JsonBatchBundle",
    "decode_json_bundle",
    "format_json_bundle",
]
