"""Project operations and the ``projects`` command group."""

from __future__ import annotations

import argparse
from typing import Any, List

from vikunja_skill.client import VikunjaClient
from vikunja_skill.models import Project, lean_list, parse_id


class ProjectService:
    def __init__(self, client: VikunjaClient) -> None:
        self._client = client

    def list(self) -> List[Project]:
        return [Project.model_validate(item) for item in self._client.get("/projects") or []]

    def get(self, project_id: int) -> Project:
        return Project.model_validate(self._client.get(f"/projects/{project_id}"))


def _cmd_list(client: VikunjaClient, args: argparse.Namespace) -> Any:
    return lean_list(ProjectService(client).list())


def _cmd_get(client: VikunjaClient, args: argparse.Namespace) -> Any:
    return ProjectService(client).get(parse_id(args.id)).to_lean()


def register(subparsers: Any) -> None:
    """Add the ``projects`` command group to *subparsers*."""
    parser = subparsers.add_parser("projects", help="Browse projects")
    commands = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    sp = commands.add_parser("list", help="List all projects")
    sp.set_defaults(handler=_cmd_list)

    sp = commands.add_parser("get", help="Get a project by ID")
    sp.add_argument("id")
    sp.set_defaults(handler=_cmd_get)
