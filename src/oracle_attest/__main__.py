"""
Price oracle attestation aggregator CLI entry point.

Run the HTTP service that accepts signed price attestations from validators
and folds interval claims into per-claim aggregate BLS signatures.

Usage::

    python -m oracle_attest
    python -m oracle_attest --db /var/lib/oracle/attestations.db --port 5053
    python -m oracle_attest --config service.yaml -v

Options:
    --config          Path to a service YAML file (default: environment variables)
    --db              SQLite database path
    --host            Address to bind the API server to
    --port            Port to bind the API server to
    --verify-workers  Size of the signature verification pool
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from oracle_attest.config import ServiceConfig
from oracle_attest.subspecs.api import ApiServer, ApiServerConfig
from oracle_attest.subspecs.attestations import AttestationService
from oracle_attest.subspecs.storage import SQLiteDatabase

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{timestamp} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging for the service with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def resolve_config(args: argparse.Namespace) -> ServiceConfig:
    """
    Merge the configuration sources.

    A YAML file replaces the environment entirely when given; explicit CLI
    flags override whichever source was used.
    """
    if args.config is not None:
        config = ServiceConfig.from_yaml_file(args.config)
    else:
        config = ServiceConfig.from_env()

    overrides = {
        "db_path": args.db,
        "api_host": args.host,
        "api_port": args.port,
        "verify_workers": args.verify_workers,
    }
    update = {key: value for key, value in overrides.items() if value is not None}
    if not update:
        return config
    # model_copy skips validation, so rebuild to keep the field bounds enforced.
    return ServiceConfig.model_validate({**config.model_dump(), **update})


async def run_service(config: ServiceConfig) -> None:
    """
    Run the attestation service until interrupted.

    Args:
        config: Fully resolved service configuration.
    """
    logger.info("Opening attestation database at %s", config.db_path)
    database = SQLiteDatabase(config.db_path)
    service = AttestationService(database, verify_workers=config.verify_workers)
    server = ApiServer(
        config=ApiServerConfig(host=config.api_host, port=config.api_port),
        service=service,
    )

    logger.info("Starting attestation service with %d verify workers", config.verify_workers)
    try:
        await server.run()
    finally:
        service.close()
        database.close()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Price oracle attestation aggregator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to service YAML file (default: read ORACLE_* environment variables)",
    )
    parser.add_argument("--db", type=str, default=None, help="SQLite database path")
    parser.add_argument("--host", type=str, default=None, help="API bind address")
    parser.add_argument("--port", type=int, default=None, help="API bind port")
    parser.add_argument(
        "--verify-workers",
        type=int,
        default=None,
        help="Number of signature verification threads",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )

    args = parser.parse_args()

    setup_logging(args.verbose, args.no_color)

    config = resolve_config(args)

    try:
        asyncio.run(run_service(config))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
