"""Command-line interface for vmgateway.

Loads the configuration file, sets up logging, and serves the HTTP API
with uvicorn.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_LISTEN = ":10100"
DEFAULT_HOST = "0.0.0.0"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="vmgateway",
        description="HTTP API in front of the govc virtualization CLI",
    )
    parser.add_argument(
        "-l", "--listen",
        default=DEFAULT_LISTEN,
        help=f"HTTP API listen address host:port (default: {DEFAULT_LISTEN})",
    )
    parser.add_argument(
        "-c", "-cnf", "--cnf",
        dest="cnf",
        type=Path,
        default=Path("config.json"),
        help="Settings file with govc connection keys and vm-path (default: config.json)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def parse_listen_address(addr: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts. An empty host means all interfaces.

    Raises:
        ValueError: If the port is missing or not a valid port number.
    """
    host, sep, port_text = addr.rpartition(":")
    if not sep or not port_text.isdigit():
        raise ValueError(f"Invalid listen address {addr!r}, expected host:port")
    port = int(port_text)
    if not 0 < port < 65536:
        raise ValueError(f"Invalid port {port} in listen address {addr!r}")
    host = host.strip("[]") or DEFAULT_HOST
    return host, port


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the vmgateway CLI."""
    args = parse_args(argv)

    from vmgateway.config.settings import load_settings
    from vmgateway.errors import ConfigurationError
    from vmgateway.utils.logging import setup_logging

    try:
        host, port = parse_listen_address(args.listen)
    except ValueError as e:
        setup_logging(verbose=args.verbose)
        logger.error("%s", e)
        sys.exit(2)

    try:
        settings = load_settings(args.cnf)
    except ConfigurationError as e:
        setup_logging(verbose=args.verbose)
        logger.error(
            "%s\nThis application needs a config file with a vm-path key "
            "and the path to the VMs on the host", e,
        )
        sys.exit(1)

    setup_logging(settings.logging, verbose=args.verbose)

    from vmgateway.api.server import create_app
    import uvicorn

    app = create_app(settings)
    logger.info("Running HTTP API on %s:%d (vm-path=%s)", host, port, settings.vm_path)
    uvicorn.run(app, host=host, port=port, access_log=False, log_config=None)


if __name__ == "__main__":
    main()
