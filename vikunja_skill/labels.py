"""Label operations and the ``labels`` command group."""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Optional

from vikunja_skill.client import UsageError, VikunjaClient
from vikunja_skill.models import Label, lean_list, parse_id


class LabelService:
    def __init__(self, client: VikunjaClient) -> None:
        self._client = client

    def list(self) -> List[Label]:
        return [Label.model_validate(item) for item in self._client.get("/labels") or []]

    def get(self, label_id: int) -> Label:
        return Label.model_validate(self._client.get(f"/labels/{label_id}"))

    def create(self, title: str, hex_color: str = "", description: str = "") -> Label:
        if not title:
            raise UsageError("--title is required")
        body: Dict[str, Any] = {"title": title}
        if hex_color:
            body["hex_color"] = hex_color
        if description:
            body["description"] = description
        return Label.model_validate(self._client.put("/labels", body))

    def update(
        self,
        label_id: int,
        title: Optional[str] = None,
        hex_color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Label:
        body = {
            key: value
            for key, value in (
                ("title", title),
                ("hex_color", hex_color),
                ("description", description),
            )
            if value
        }
        return Label.model_validate(self._client.post(f"/labels/{label_id}", body))

    def delete(self, label_id: int) -> None:
        self._client.delete(f"/labels/{label_id}")


def _cmd_list(client: VikunjaClient, args: argparse.Namespace) -> Any:
    return lean_list(LabelService(client).list())


def _cmd_get(client: VikunjaClient, args: argparse.Namespace) -> Any:
    return LabelService(client).get(parse_id(args.id)).to_lean()


def _cmd_create(client: VikunjaClient, args: argparse.Namespace) -> Any:
    label = LabelService(client).create(args.title, args.color or "", args.description or "")
    return label.to_lean()


def _cmd_update(client: VikunjaClient, args: argparse.Namespace) -> Any:
    label = LabelService(client).update(
        parse_id(args.id), args.title, args.color, args.description
    )
    return label.to_lean()


def _cmd_delete(client: VikunjaClient, args: argparse.Namespace) -> Any:
    LabelService(client).delete(parse_id(args.id))
    return {"deleted": True}


def register(subparsers: Any) -> None:
    """Add the ``labels`` command group to *subparsers*."""
    parser = subparsers.add_parser("labels", help="Manage labels")
    commands = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    sp = commands.add_parser("list", help="List all labels")
    sp.set_defaults(handler=_cmd_list)

    sp = commands.add_parser("get", help="Get a label by ID")
    sp.add_argument("id")
    sp.set_defaults(handler=_cmd_get)

    sp = commands.add_parser("create", help="Create a label")
    sp.add_argument("--title", "-t", required=True, help="Label title")
    sp.add_argument("--color", help="Hex color (e.g. ff0000)")
    sp.add_argument("--description", "-d", help="Label description")
    sp.set_defaults(handler=_cmd_create)

    sp = commands.add_parser("update", help="Update a label")
    sp.add_argument("id")
    sp.add_argument("--title", "-t", help="New title")
    sp.add_argument("--color", help="New hex color")
    sp.add_argument("--description", "-d", help="New description")
    sp.set_defaults(handler=_cmd_update)

    sp = commands.add_parser("delete", help="Delete a label")
    sp.add_argument("id")
    sp.set_defaults(handler=_cmd_delete)
