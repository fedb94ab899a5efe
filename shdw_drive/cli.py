"""Command-line interface for the shdw-drive client.

Provides argument parsing and the main entry point for uploading,
deleting and listing files from the command line.
"""

import argparse
import logging
import sys
from typing import Optional

import httpx
from rich.console import Console
from rich.logging import RichHandler

from shdw_drive.client import ShdwDriveClient
from shdw_drive.config import ConfigError, load_config, load_keypair
from shdw_drive.errors import ShdwDriveError
from shdw_drive.reporters import ConsoleReporter, JsonReporter, Reporter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


class CompositeReporter(Reporter):
    """Reporter that delegates to multiple reporters.

    Allows using both ConsoleReporter and JsonReporter simultaneously.
    """

    def __init__(self, reporters: list[Reporter]):
        self._reporters = reporters

    def on_command_start(self, command: str, bucket: str, target: str) -> None:
        for reporter in self._reporters:
            reporter.on_command_start(command, bucket, target)

    def on_progress(self, event) -> None:
        for reporter in self._reporters:
            reporter.on_progress(event)

    def on_upload_complete(self, outcome) -> None:
        for reporter in self._reporters:
            reporter.on_upload_complete(outcome)

    def on_delete_complete(self, result) -> None:
        for reporter in self._reporters:
            reporter.on_delete_complete(result)

    def on_list_complete(self, bucket: str, objects: list) -> None:
        for reporter in self._reporters:
            reporter.on_list_complete(bucket, objects)

    def on_error(self, command: str, error: Exception) -> None:
        for reporter in self._reporters:
            reporter.on_error(command, error)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-k", "--keypair",
        required=True,
        help="Path to keypair file",
    )
    parser.add_argument(
        "-b", "--bucket",
        required=True,
        help="Bucket identifier",
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="shdw-drive",
        description="CLI tool for Shadow Drive file operations",
    )

    parser.add_argument(
        "-e", "--endpoint",
        help="API endpoint (default: $SHDW_ENDPOINT or https://v2.shdwdrive.com)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output, show only results",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "-j", "--json-output",
        metavar="PATH",
        help="Write JSON results to file",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    upload = subparsers.add_parser("upload", help="Upload a file to Shadow Drive")
    _add_common_arguments(upload)
    upload.add_argument(
        "-f", "--file",
        required=True,
        help="Path to file to upload",
    )
    upload.add_argument(
        "-d", "--directory",
        default="",
        help="Directory inside the bucket (default: bucket root)",
    )
    upload.add_argument(
        "-t", "--mime-type",
        help="MIME type (default: guessed from the file name)",
    )

    delete = subparsers.add_parser("delete", help="Delete a file from Shadow Drive")
    _add_common_arguments(delete)
    delete.add_argument(
        "-f", "--file",
        required=True,
        help="File URL or path to delete",
    )

    listing = subparsers.add_parser("list", help="List all files in a Shadow Drive bucket")
    _add_common_arguments(listing)

    return parser.parse_args(argv)


def setup_logging(verbose: bool = False) -> None:
    """Route log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def create_reporters(args: argparse.Namespace) -> list[Reporter]:
    """Create reporters based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        List of configured reporters
    """
    reporters: list[Reporter] = [ConsoleReporter(quiet=args.quiet)]

    if args.json_output:
        reporters.append(JsonReporter(output_path=args.json_output))

    return reporters


def run_upload(client: ShdwDriveClient, args: argparse.Namespace, reporter: Reporter) -> int:
    reporter.on_command_start("upload", args.bucket, args.file)
    outcome = client.upload_path(
        args.bucket,
        args.file,
        mime_type=args.mime_type,
        directory=args.directory,
        on_progress=reporter.on_progress,
    )
    reporter.on_upload_complete(outcome)
    return EXIT_OK


def run_delete(client: ShdwDriveClient, args: argparse.Namespace, reporter: Reporter) -> int:
    reporter.on_command_start("delete", args.bucket, args.file)
    result = client.delete_file(args.bucket, args.file)
    reporter.on_delete_complete(result)
    return EXIT_OK if result.success else EXIT_FAILURE


def run_list(client: ShdwDriveClient, args: argparse.Namespace, reporter: Reporter) -> int:
    reporter.on_command_start("list", args.bucket, "")
    objects = client.list_files(args.bucket)
    reporter.on_list_complete(args.bucket, objects)
    return EXIT_OK


COMMANDS = {
    "upload": run_upload,
    "delete": run_delete,
    "list": run_list,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for operation failures, 2 for
        configuration errors
    """
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(args.endpoint)
        signer = load_keypair(args.keypair)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    reporters = create_reporters(args)
    if len(reporters) == 1:
        reporter = reporters[0]
    else:
        reporter = CompositeReporter(reporters)

    logger.debug("Using signer %s against %s", signer.identity(), config.endpoint)

    with ShdwDriveClient(config, signer) as client:
        try:
            return COMMANDS[args.command](client, args, reporter)
        except (ShdwDriveError, httpx.HTTPError, OSError) as e:
            logger.debug("%s failed", args.command, exc_info=True)
            reporter.on_error(args.command, e)
            return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
