"""Task operations and the ``tasks`` command group."""

from __future__ import annotations

import argparse
import logging
import re
from typing import Any, Dict, List, Optional

from vikunja_skill.client import UsageError, VikunjaClient
from vikunja_skill.models import Task, TaskFields, lean_list, parse_id

logger = logging.getLogger(__name__)

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Vikunja pages list endpoints; ask for a page large enough for one call.
_PAGE_SIZE = 250


def normalize_date(value: Optional[str]) -> Optional[str]:
    """Expand ``YYYY-MM-DD`` to the RFC 3339 midnight UTC timestamp."""
    if value and _DATE_ONLY.match(value):
        return f"{value}T00:00:00Z"
    return value


class TaskService:
    """Task endpoints of the Vikunja API."""

    def __init__(self, client: VikunjaClient) -> None:
        self._client = client

    def list(
        self,
        project_id: Optional[int] = None,
        include_done: bool = False,
        search: str = "",
    ) -> List[Task]:
        filters = []
        if not include_done:
            filters.append("done = false")
        if project_id is not None:
            filters.append(f"project = {project_id}")

        params: Dict[str, Any] = {"per_page": _PAGE_SIZE}
        if filters:
            params["filter"] = " && ".join(filters)
        if search:
            params["s"] = search
        data = self._client.get("/tasks/all", params=params)
        return [Task.model_validate(item) for item in data or []]

    def get(self, task_id: int) -> Task:
        return Task.model_validate(self._client.get(f"/tasks/{task_id}"))

    def create(self, project_id: int, fields: TaskFields) -> Task:
        if not fields.title:
            raise UsageError("--title is required")
        data = self._client.put(f"/projects/{project_id}/tasks", fields.changes())
        return Task.model_validate(data)

    def update(self, task_id: int, fields: TaskFields) -> Task:
        """Apply *fields* to the stored task and send the whole object back.

        The API treats missing keys as zero values, so a partial body would
        clear everything not mentioned.
        """
        changes = fields.changes()
        if not changes:
            raise UsageError("no fields to update")
        current = self._client.get(f"/tasks/{task_id}")
        current.update(changes)
        logger.debug("Updating task %d: %s", task_id, sorted(changes))
        return Task.model_validate(self._client.post(f"/tasks/{task_id}", current))

    def mark_done(self, task_id: int) -> Task:
        return self.update(task_id, TaskFields(done=True))

    def move(self, task_id: int, project_id: int) -> Task:
        return self.update(task_id, TaskFields(project_id=project_id))

    def delete(self, task_id: int) -> None:
        self._client.delete(f"/tasks/{task_id}")

    def add_label(self, task_id: int, label_id: int) -> None:
        self._client.put(f"/tasks/{task_id}/labels", {"label_id": label_id})

    def remove_label(self, task_id: int, label_id: int) -> None:
        self._client.delete(f"/tasks/{task_id}/labels/{label_id}")


# ── Command handlers ─────────────────────────────────────────────────────


def _fields_from_args(args: argparse.Namespace) -> TaskFields:
    return TaskFields(
        title=args.title,
        description=args.description,
        priority=args.priority,
        due_date=normalize_date(args.due),
        start_date=normalize_date(args.start),
        end_date=normalize_date(args.end),
        hex_color=args.color,
        is_favorite=args.favorite,
        percent_done=args.percent,
        done=getattr(args, "done", None),
    )


def _cmd_list(client: VikunjaClient, args: argparse.Namespace) -> Any:
    project_id = parse_id(args.project) if args.project is not None else None
    tasks = TaskService(client).list(project_id, args.done, args.search or "")
    return lean_list(tasks)


def _cmd_get(client: VikunjaClient, args: argparse.Namespace) -> Any:
    return TaskService(client).get(parse_id(args.id)).to_lean()


def _cmd_create(client: VikunjaClient, args: argparse.Namespace) -> Any:
    project_id = parse_id(args.project)
    return TaskService(client).create(project_id, _fields_from_args(args)).to_lean()


def _cmd_update(client: VikunjaClient, args: argparse.Namespace) -> Any:
    return TaskService(client).update(parse_id(args.id), _fields_from_args(args)).to_lean()


def _cmd_done(client: VikunjaClient, args: argparse.Namespace) -> Any:
    return TaskService(client).mark_done(parse_id(args.id)).to_lean()


def _cmd_move(client: VikunjaClient, args: argparse.Namespace) -> Any:
    task_id = parse_id(args.id)
    return TaskService(client).move(task_id, parse_id(args.project)).to_lean()


def _cmd_delete(client: VikunjaClient, args: argparse.Namespace) -> Any:
    TaskService(client).delete(parse_id(args.id))
    return {"deleted": True}


def _cmd_add_label(client: VikunjaClient, args: argparse.Namespace) -> Any:
    task_id, label_id = parse_id(args.id), parse_id(args.label_id)
    TaskService(client).add_label(task_id, label_id)
    return {"task_id": task_id, "label_id": label_id, "added": True}


def _cmd_remove_label(client: VikunjaClient, args: argparse.Namespace) -> Any:
    task_id, label_id = parse_id(args.id), parse_id(args.label_id)
    TaskService(client).remove_label(task_id, label_id)
    return {"task_id": task_id, "label_id": label_id, "removed": True}


# ── Parser registration ──────────────────────────────────────────────────


def _add_field_options(parser: argparse.ArgumentParser, *, require_title: bool) -> None:
    parser.add_argument("--title", "-t", required=require_title, help="Task title")
    parser.add_argument("--description", "-d", help="Task description")
    parser.add_argument("--priority", "-p", type=int, help="Priority (0-5)")
    parser.add_argument("--due", help="Due date (YYYY-MM-DD or RFC 3339)")
    parser.add_argument("--start", help="Start date (YYYY-MM-DD or RFC 3339)")
    parser.add_argument("--end", help="End date (YYYY-MM-DD or RFC 3339)")
    parser.add_argument("--color", help="Hex color (e.g. ff0000)")
    parser.add_argument("--favorite", action=argparse.BooleanOptionalAction, default=None, help="Mark as favorite")
    parser.add_argument("--percent", type=float, help="Percent done (0.0-1.0)")


def register(subparsers: Any) -> None:
    """Add the ``tasks`` command group to *subparsers*."""
    parser = subparsers.add_parser("tasks", help="Manage tasks")
    commands = parser.add_subparsers(dest="action", metavar="ACTION", required=True)

    sp = commands.add_parser("list", help="List open tasks")
    sp.add_argument("--project", metavar="ID", help="Only tasks of this project")
    sp.add_argument("--done", action="store_true", default=False, help="Include done tasks")
    sp.add_argument("--search", "-s", metavar="TEXT", help="Search text")
    sp.set_defaults(handler=_cmd_list)

    sp = commands.add_parser("get", help="Get a task by ID")
    sp.add_argument("id")
    sp.set_defaults(handler=_cmd_get)

    sp = commands.add_parser("create", help="Create a task")
    sp.add_argument("--project", metavar="ID", required=True, help="Project ID")
    _add_field_options(sp, require_title=True)
    sp.set_defaults(handler=_cmd_create)

    sp = commands.add_parser("update", help="Update fields of a task")
    sp.add_argument("id")
    _add_field_options(sp, require_title=False)
    sp.add_argument(
        "--undone",
        dest="done",
        action="store_const",
        const=False,
        default=None,
        help="Mark the task as not done",
    )
    sp.set_defaults(handler=_cmd_update)

    sp = commands.add_parser("done", help="Mark a task as done")
    sp.add_argument("id")
    sp.set_defaults(handler=_cmd_done)

    sp = commands.add_parser("move", help="Move a task to another project")
    sp.add_argument("id")
    sp.add_argument("--project", metavar="ID", required=True, help="Target project ID")
    sp.set_defaults(handler=_cmd_move)

    sp = commands.add_parser("delete", help="Delete a task")
    sp.add_argument("id")
    sp.set_defaults(handler=_cmd_delete)

    sp = commands.add_parser("add-label", help="Attach a label to a task")
    sp.add_argument("id")
    sp.add_argument("label_id")
    sp.set_defaults(handler=_cmd_add_label)

    sp = commands.add_parser("remove-label", help="Detach a label from a task")
    sp.add_argument("id")
    sp.add_argument("label_id")
    sp.set_defaults(handler=_cmd_remove_label)
