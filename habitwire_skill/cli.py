"""``habitwire`` command line entry point.

Commands print compact JSON on stdout (CSV exports are printed as-is).
Failures are reported as ``{"error": "..."}`` on stderr with exit status 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import logging.config
import os
import sys
from typing import Any, List, NoReturn, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from habitwire_skill import __version__, keys, system
from habitwire_skill.client import ApiError, ConfigError, HabitWireClient, RequestFailed, UsageError

logger = logging.getLogger(__name__)

ENV_FILE_NAME = ".env"


def print_result(value: Any) -> None:
    if isinstance(value, str):
        print(value)
    else:
        print(json.dumps(value, separators=(",", ":"), ensure_ascii=False))


def print_error(message: str) -> None:
    print(json.dumps({"error": message}, ensure_ascii=False), file=sys.stderr)


class _JsonArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print_error(message)
        sys.exit(1)


def load_env_file() -> None:
    """Load ``.env`` from the directory holding the executable, if present."""
    dirs = []
    if getattr(sys, "frozen", False):
        dirs.append(os.path.dirname(os.path.realpath(sys.executable)))
    if sys.argv and sys.argv[0]:
        dirs.append(os.path.dirname(os.path.realpath(sys.argv[0])))
    for directory in dict.fromkeys(dirs):
        path = os.path.join(directory, ENV_FILE_NAME)
        if os.path.isfile(path):
            logger.debug("Loading environment from %s", path)
            load_dotenv(path, override=False)
            return


def _create_client() -> HabitWireClient:
    load_env_file()
    return HabitWireClient.from_env()


def _configure_logging(verbose: bool) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "stderr": {"format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s"},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "stderr",
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {
                "handlers": ["stderr"],
                "level": "DEBUG" if verbose else "CRITICAL",
            },
        }
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = _JsonArgumentParser(
        prog="habitwire",
        description="HabitWire CLI with lean JSON output",
    )
    parser.add_argument("--version", action="version", version=f"habitwire {__version__}")
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Log HTTP requests to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)
    keys.register(subparsers)
    system.register(subparsers)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        client = _create_client()
        try:
            result = args.handler(client, args)
        finally:
            client.close()
    except (ConfigError, UsageError, ApiError, RequestFailed) as exc:
        print_error(str(exc))
        sys.exit(1)
    except ValidationError as exc:
        print_error(f"unexpected response: {exc.error_count()} invalid field(s)")
        sys.exit(1)

    print_result(result)


if __name__ == "__main__":
    main()
