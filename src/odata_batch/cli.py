"""
Command-line interface for the batch codec.

Provides commands for encoding request lists and decoding batch responses.
"""

import argparse
import json
import sys
from typing import List, Optional

import structlog

from odata_batch import __version__
from odata_batch.config import BatchConfig, get_config, set_config
from odata_batch.core.request import LogicalRequest
from odata_batch.errors import BatchError
from odata_batch.wire.json_bundle import decode_json_bundle, format_json_bundle
from odata_batch.wire.multipart import (
    batch_content_type,
    boundary_from_content_type,
    decode_multipart,
    format_batch_request,
    new_boundary,
)

logger = structlog.get_logger(__name__)


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    import logging
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="odata-batch",
        description="Encode and decode OData $batch payloads",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from ODATA_BATCH_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Encode command
    encode_parser = subparsers.add_parser("encode", help="Encode a JSON list of requests")
    encode_parser.add_argument(
        "requests_file",
        help="JSON file holding a list of requests (url, method, headers, body)",
    )
    encode_parser.add_argument(
        "--format",
        choices=["multipart", "json"],
        default="multipart",
        help="Batch framing (default: multipart)",
    )
    encode_parser.add_argument(
        "--boundary",
        help="Top-level boundary token (default: generated)",
    )

    # Decode command
    decode_parser = subparsers.add_parser("decode", help="Decode a batch response body")
    decode_parser.add_argument(
        "response_file",
        help="File holding the raw response body",
    )
    decode_parser.add_argument(
        "--format",
        choices=["multipart", "json"],
        default="multipart",
        help="Batch framing (default: multipart)",
    )
    boundary_group = decode_parser.add_mutually_exclusive_group()
    boundary_group.add_argument(
        "--boundary",
        help="Top-level boundary token",
    )
    boundary_group.add_argument(
        "--content-type",
        help="Outer response Content-Type to take the boundary from",
    )
    decode_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on parts with unsupported content types",
    )

    return parser


def _read_text(path: str) -> str:
    # newline="" keeps CRLF framing intact
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def load_requests(path: str) -> List[LogicalRequest]:
    """Load requests from a JSON list or a ``{"requests": [...]}`` document."""
    data = json.loads(_read_text(path))
    if isinstance(data, dict):
        data = data.get("requests", [])
    return [LogicalRequest.from_dict(item) for item in data]


def encode_command(args: argparse.Namespace) -> None:
    """Encode requests and write the batch body to stdout."""
    requests = load_requests(args.requests_file)

    if args.format == "json":
        sys.stdout.write(format_json_bundle(requests).to_json())
        sys.stdout.write("\n")
        return

    boundary = args.boundary or new_boundary()
    body = format_batch_request(requests, boundary)
    logger.info(
        "batch_request_ready",
        requests=len(requests),
        content_type=batch_content_type(boundary),
    )
    sys.stdout.write(body)


def decode_command(args: argparse.Namespace, config: BatchConfig) -> None:
    """Decode a response body and print one JSON line per response."""
    body = _read_text(args.response_file)

    if args.format == "json":
        responses = decode_json_bundle(body)
    else:
        boundary = args.boundary
        if not boundary:
            boundary = boundary_from_content_type(args.content_type)
        if args.strict:
            config = config.model_copy(update={"strict_content_types": True})
        responses = decode_multipart(body, boundary, config)

    for response in responses:
        print(json.dumps(response.to_dict()))


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = get_config()
    if args.log_level or args.log_json:
        config = config.model_copy(update={
            "log_level": args.log_level or config.log_level,
            "log_json": args.log_json or config.log_json,
        })
        set_config(config)

    # Setup logging
    setup_logging(config.log_level, config.log_json)

    # Run appropriate command
    try:
        if args.command == "encode":
            encode_command(args)
        elif args.command == "decode":
            decode_command(args, config)
    except BatchError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        sys.exit(2)


if __name__ == "__main__":
    main()
