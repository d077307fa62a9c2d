"""
Command-line interface for certinspect.
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from . import __version__
from .console import ConsoleOutput
from .errors import CertificateError, DecodeError, FormatError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_CERTIFICATE = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="certinspect",
        description="Decode X.509 certificates into a structured description",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show a certificate as text
  certinspect server.pem

  # Export as JSON, evaluating expiry at a fixed instant
  certinspect server.crt --format json --at 2025-01-01T00:00:00Z -o out.json

  # Read from stdin and search the decoded fields
  cat chain.pem | certinspect - --search "server auth"

  # Fetch metadata for a host from the remote lookup service
  certinspect --lookup example.com
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "input",
        nargs="?",
        metavar="FILE",
        help="Certificate file (.pem or .crt), or - for stdin",
    )
    parser.add_argument(
        "--lookup",
        metavar="HOST",
        help="Fetch certificate metadata for a hostname instead of parsing a file",
    )

    # Output options
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output",
        "-o",
        metavar="FILE",
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--search",
        metavar="TERM",
        help="Report sections and extensions matching TERM",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Include a summary of the original PEM text",
    )

    # Evaluation options
    parser.add_argument(
        "--at",
        metavar="TIMESTAMP",
        help="Evaluate validity at this ISO 8601 instant (default: now)",
    )
    parser.add_argument(
        "--expiring-days",
        type=int,
        default=30,
        metavar="DAYS",
        help="Days before expiry that count as expiring soon (default: 30)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=15.0,
        metavar="SECONDS",
        help="Lookup request timeout in seconds (default: 15)",
    )

    # Logging options
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="warning",
        help="Logging level (default: warning)",
    )
    parser.add_argument("--log-file", metavar="FILE", help="Write logs to file")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress status output")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    return parser


def parse_instant(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp; naive values are taken as UTC.

    Raises:
        ValueError: The value is not a valid timestamp
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_args(args: argparse.Namespace) -> Optional[str]:
    """
    Validate parsed arguments.

    Returns:
        Error message if validation fails, None otherwise
    """
    if not args.input and not args.lookup:
        return "Provide a certificate FILE (or - for stdin) or --lookup HOST"

    if args.input and args.lookup:
        return "FILE and --lookup cannot be combined"

    if args.expiring_days < 0:
        return f"Invalid expiring window: {args.expiring_days}. Must be non-negative."

    if args.timeout <= 0:
        return f"Invalid timeout: {args.timeout}. Must be positive."

    if args.at:
        try:
            parse_instant(args.at)
        except ValueError:
            return f"Invalid timestamp: {args.at}"

    return None


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    error = validate_args(args)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return EXIT_ERROR

    log_level = getattr(logging, args.log_level.upper())
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=args.log_file if args.log_file else None,
    )

    console = ConsoleOutput(quiet=args.quiet, use_colors=not args.no_color)

    try:
        if args.lookup:
            import asyncio

            return asyncio.run(run_lookup(args, console))
        return run_parse(args, console)
    except KeyboardInterrupt:
        console.error("\nInterrupted by user")
        return EXIT_INTERRUPTED
    except (FormatError, DecodeError) as e:
        console.error(f"Error [{e.error_code.value}]: {e}")
        return EXIT_INVALID_CERTIFICATE
    except (CertificateError, OSError, ValueError) as e:
        console.error(f"Error: {e}")
        logger.debug("Command failed", exc_info=True)
        return EXIT_ERROR
    except Exception as e:
        console.error(f"Fatal error: {e}")
        logger.exception("Fatal error")
        return EXIT_ERROR


def run_parse(args: argparse.Namespace, console: ConsoleOutput) -> int:
    """
    Parse the input certificates and write the report.

    Args:
        args: Parsed CLI arguments
        console: Console output handler

    Returns:
        Exit code
    """
    from .certificate import CertificateParser
    from .input_parser import InputParser
    from .output import OutputFormatter
    from .search import search_certificate

    now = parse_instant(args.at) if args.at else datetime.now(timezone.utc)
    cert_parser = CertificateParser(expiring_soon_days=args.expiring_days)

    blocks = InputParser.load(args.input)
    certificates = [cert_parser.parse_certificate(block, now=now) for block in blocks]
    logger.info(f"Parsed {len(certificates)} certificate(s)")

    formatter = OutputFormatter(args.output)
    # Status lines would corrupt JSON written to stdout
    show_status = args.format == "text" or args.output

    if args.format == "json":
        search: Optional[List[Dict[str, Any]]] = None
        if args.search is not None:
            search = [search_certificate(info, args.search) for info in certificates]
        data = formatter.create_output(certificates, now, search)
        if args.raw:
            data["raw"] = [formatter.raw_view(block) for block in blocks]
        formatter.write_json(data)
    else:
        sections = []
        for block, info in zip(blocks, certificates):
            text = formatter.render_text(info)
            if args.search is not None:
                result = search_certificate(info, args.search)
                matches = ", ".join(result["sections"]) or "none"
                text += f"\n    Search '{args.search}': sections {matches}"
                for ext in result["extensions"]:
                    text += f"\n        {ext['name']}: {ext['value']}"
            if args.raw:
                raw = formatter.raw_view(block)
                text += (
                    f"\n    Raw: {raw['lines']} lines, "
                    f"{raw['base64_length']} base64 characters\n{raw['text']}"
                )
            sections.append(text)
        formatter.write_text("\n\n".join(sections))

    if show_status:
        for info in certificates:
            console.print_validity_status(info)

    return EXIT_OK


async def run_lookup(args: argparse.Namespace, console: ConsoleOutput) -> int:
    """Fetch and print remote metadata for a hostname."""
    from .lookup import CertificateMetadataClient
    from .output import OutputFormatter

    async with CertificateMetadataClient(timeout=args.timeout) as client:
        result = await client.lookup(args.lookup)

    OutputFormatter(args.output).write_json(result.to_dict())
    if args.output:
        console.success(f"Metadata for {result.hostname} written to {args.output}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
