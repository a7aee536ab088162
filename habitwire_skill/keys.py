"""API key management and the ``keys`` command group."""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from habitwire_skill.client import HabitWireClient, UsageError


class ApiKey(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    # Only returned by the create call.
    key: Optional[str] = None
    created_at: Optional[str] = None
    last_used: Optional[str] = None

    def to_lean(self) -> Dict[str, Any]:
        lean: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.key:
            lean["key"] = self.key
        return lean


class KeyService:
    def __init__(self, client: HabitWireClient) -> None:
        self._client = client

    def list(self) -> List[ApiKey]:
        return [ApiKey.model_validate(item) for item in self._client.get("/keys") or []]

    def create(self, name: str) -> ApiKey:
        if not name:
            raise UsageError("--name is required")
        return ApiKey.model_validate(self._client.post("/keys", {"name": name}))

    def delete(self, key_id: str) -> None:
        self._client.delete(f"/keys/{key_id}")


def _cmd_list(client: HabitWireClient, args: argparse.Namespace) -> Any:
    return [key.to_lean() for key in KeyService(client).list()]


def _cmd_create(client: HabitWireClient, args: argparse.Namespace) -> Any:
    return KeyService(client).create(args.name).to_lean()


def _cmd_delete(client: HabitWireClient, args: argparse.Namespace) -> Any:
    KeyService(client).delete(args.id)
    return {"deleted": True}


def register(subparsers: Any) -> None:
    """Add the ``keys`` command group to *subparsers*."""
    parser = subparsers.add_parser("keys", help="Manage API keys")
    commands = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    sp = commands.add_parser("list", help="List all API keys")
    sp.set_defaults(handler=_cmd_list)

    sp = commands.add_parser(
        "create",
        help="Create an API key",
        description="Create a new API key. The key value is only shown once.",
    )
    sp.add_argument("--name", "-n", required=True, help="Key name")
    sp.set_defaults(handler=_cmd_create)

    sp = commands.add_parser("delete", help="Delete an API key")
    sp.add_argument("id")
    sp.set_defaults(handler=_cmd_delete)
