"""
Core batch data models.

Requests going into a batch and the response envelopes coming out of one.
"""

from odata_batch.core.request import LogicalRequest
from odata_batch.core.response import ResponseEnvelope, build_envelope

__all__ = [
    "LogicalRequest",
    "ResponseEnvelope",
    "build_envelope",
]
