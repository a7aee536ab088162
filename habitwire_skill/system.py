"""``health`` and ``export`` commands."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from habitwire_skill.client import HabitWireClient

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")
_EXPORT_SECTIONS = ("habits", "categories", "checkins")


class Health(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str = ""
    version: Optional[str] = None

    def to_lean(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def health(client: HabitWireClient) -> Health:
    return Health.model_validate(client.get("/health"))


def export(client: HabitWireClient, fmt: str = "json") -> Any:
    """Fetch the data export.

    CSV exports and JSON that does not parse as an object come back as the
    raw response text; otherwise only the known sections are kept.
    """
    text = client.get_text("/export", params={"format": fmt})
    if fmt == "csv":
        return text
    try:
        data = json.loads(text)
    except ValueError:
        logger.debug("Export is not valid JSON, returning raw text")
        return text
    if not isinstance(data, dict):
        return text
    return {key: data[key] for key in _EXPORT_SECTIONS if data.get(key) is not None}


def _cmd_health(client: HabitWireClient, args: argparse.Namespace) -> Any:
    return health(client).to_lean()


def _cmd_export(client: HabitWireClient, args: argparse.Namespace) -> Any:
    return export(client, args.format)


def register(subparsers: Any) -> None:
    sp = subparsers.add_parser("health", help="Check API health status")
    sp.set_defaults(handler=_cmd_health)

    sp = subparsers.add_parser(
        "export",
        help="Export all data",
        description="Export all habits, categories and check-ins as JSON or CSV.",
    )
    sp.add_argument("--format", "-f", choices=EXPORT_FORMATS, default="json", help="Export format")
    sp.set_defaults(handler=_cmd_export)
