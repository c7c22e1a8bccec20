"""Command-line interface for remoteshell.

Provides the ``remote`` entry point with two roles: ``server`` runs the
command executor, ``client`` runs the interactive session.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from None
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remote",
        description="Minimal remote command-execution session",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/remoteshell.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    server_parser = subparsers.add_parser("server", help="Run the command server")
    server_parser.add_argument("bind_address", help="Address to bind, e.g. 0.0.0.0")
    server_parser.add_argument("port", type=_port, help="TCP port to listen on")

    client_parser = subparsers.add_parser("client", help="Connect to a command server")
    client_parser.add_argument("server_address", help="Server host name or address")
    client_parser.add_argument("port", type=_port, help="Server TCP port")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the remote CLI; returns a process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_usage(sys.stderr)
        return 1

    from remoteshell.config.settings import load_settings
    from remoteshell.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "server":
        from remoteshell.server.listener import run_server

        return run_server(args.bind_address, args.port, settings.server)

    from remoteshell.client.session import run_client

    logger.debug("Connecting to %s:%s", args.server_address, args.port)
    return run_client(args.server_address, args.port, settings.client)


if __name__ == "__main__":
    sys.exit(main())
