"""
Pytest configuration and shared fixtures for the test suite.
"""

import json
from typing import Callable, List

import pytest

from odata_batch.config import BatchConfig, set_config
from odata_batch.core.request import LogicalRequest
from odata_batch.message import HTTP_EOL
from odata_batch.wire.multipart import PartKind, classify_part, split_parts


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_global_config():
    """Make sure no test leaks a global configuration into the next one."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def test_config() -> BatchConfig:
    """Create a test configuration."""
    return BatchConfig(
        max_nesting_depth=4,
        strict_content_types=False,
        log_level="DEBUG",
    )


@pytest.fixture
def strict_config() -> BatchConfig:
    """Configuration that rejects unknown part content types."""
    return BatchConfig(strict_content_types=True)


# ============================================================================
# Test Data Generators
# ============================================================================

def counting_token_factory(prefix: str = "changeset_") -> Callable[[], str]:
    """Deterministic changeset token source: changeset_0001, changeset_0002, ..."""
    counter = {"value": 0}

    def factory() -> str:
        counter["value"] += 1
        return f"{prefix}{counter['value']:04d}"

    return factory


@pytest.fixture
def token_factory() -> Callable[[], str]:
    """Deterministic changeset token factory."""
    return counting_token_factory()


@pytest.fixture
def sample_requests() -> List[LogicalRequest]:
    """A mix of reads and writes in a fixed order."""
    return [
        LogicalRequest(url="/Products", method="GET"),
        LogicalRequest(
            url="/Products",
            method="POST",
            headers={"Content-Type": "application/json"},
            body='{"Name": "Chai"}',
        ),
        LogicalRequest(url="/Categories(1)"),
        LogicalRequest(
            url="/Products(7)",
            method="PATCH",
            headers={"Content-Type": "application/json"},
            body='{"Price": 10}',
        ),
        LogicalRequest(url="/Products(9)", method="DELETE", body=""),
    ]


# ============================================================================
# Stub Batch Server
# ============================================================================

STATUS_BY_METHOD = {
    "GET": (200, "OK"),
    "POST": (201, "Created"),
    "PUT": (204, "No Content"),
    "PATCH": (204, "No Content"),
    "MERGE": (204, "No Content"),
    "DELETE": (204, "No Content"),
}


def http_part(lines: List[str]) -> List[str]:
    """Wrap response lines as one application/http section."""
    return [
        "Content-Type: application/http",
        "Content-Transfer-Encoding: binary",
        "",
        *lines,
    ]


class StubBatchServer:
    """
    Answers a multipart batch request the way an OData service would.

    Reads are answered with 200 and a JSON echo of the url, creates with
    201, other writes with 204. Changesets keep the token they came in with.
    """

    def __init__(self):
        self.seen: List[str] = []

    def respond_line(self, request_text: str) -> List[str]:
        request_line = request_text.split(HTTP_EOL, 1)[0]
        method, url, _ = request_line.split(" ")
        self.seen.append(f"{method} {url}")
        status, reason = STATUS_BY_METHOD[method]
        if status == 204:
            return [f"HTTP/1.1 {status} {reason}", ""]
        return [
            f"HTTP/1.1 {status} {reason}",
            "Content-Type: application/json;odata=verbose",
            f"X-Request: {method} {url}",
            "",
            json.dumps({"method": method, "url": url}),
        ]

    def handle(self, body: str, boundary: str, response_boundary: str = "batchresponse_1") -> str:
        lines: List[str] = []
        for text in split_parts(body, boundary):
            part = classify_part(text)
            lines.append(f"--{response_boundary}")
            if part.kind == PartKind.LEAF:
                lines.extend(http_part(self.respond_line(part.body)))
                continue
            lines.append(f"Content-Type: multipart/mixed; boundary={part.boundary}")
            lines.append("")
            for inner in split_parts(part.body, part.boundary):
                inner_part = classify_part(inner)
                lines.append(f"--{part.boundary}")
                lines.extend(http_part(self.respond_line(inner_part.body)))
            lines.append(f"--{part.boundary}--")
        lines.append(f"--{response_boundary}--")
        lines.append("")
        return HTTP_EOL.join(lines)


@pytest.fixture
def stub_server() -> StubBatchServer:
    """Create a stub batch server."""
    return StubBatchServer()


# ============================================================================
# Canned Responses
# ============================================================================

CHANGESET_RESPONSE = HTTP_EOL.join([
    "--batchresponse_abc",
    "Content-Type: application/http",
    "Content-Transfer-Encoding: binary",
    "",
    "HTTP/1.1 200 OK",
    "Content-Type: application/json",
    "",
    '{"value": [{"ID": 1}]}',
    "--batchresponse_abc",
    "Content-Type: multipart/mixed; boundary=changesetresponse_xyz",
    "",
    "--changesetresponse_xyz",
    "Content-Type: application/http",
    "Content-Transfer-Encoding: binary",
    "",
    "HTTP/1.1 201 Created",
    "Content-Type: application/json",
    "Location: /Products(11)",
    "",
    '{"ID": 11}',
    "--changesetresponse_xyz",
    "Content-Type: application/http",
    "Content-Transfer-Encoding: binary",
    "",
    "HTTP/1.1 204 No Content",
    "",
    "",
    "--changesetresponse_xyz--",
    "--batchresponse_abc--",
    "",
])


@pytest.fixture
def changeset_response() -> str:
    """One read followed by a changeset holding a create and an update."""
    return CHANGESET_RESPONSE
