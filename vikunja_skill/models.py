"""Pydantic models for Vikunja API objects and their lean CLI output."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from vikunja_skill.client import UsageError

# Vikunja reports unset dates as the Go zero time.
ZERO_DATE = "0001-01-01T00:00:00Z"


def _date_or_none(value: Optional[str]) -> Optional[str]:
    if not value or value == ZERO_DATE:
        return None
    return value


class TaskLabel(BaseModel):
    """Label as embedded in a task."""

    model_config = ConfigDict(extra="ignore")

    id: int = 0
    title: Optional[str] = ""
    hex_color: Optional[str] = ""


class Task(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = 0
    title: Optional[str] = ""
    description: Optional[str] = ""
    done: bool = False
    due_date: Optional[str] = ""
    start_date: Optional[str] = ""
    end_date: Optional[str] = ""
    priority: int = 0
    project_id: int = 0
    percent_done: float = 0
    is_favorite: bool = False
    hex_color: Optional[str] = ""
    # Vikunja sends ``null`` for tasks without labels.
    labels: Optional[List[TaskLabel]] = None

    def to_lean(self) -> Dict[str, Any]:
        """Minimal representation printed by the CLI.

        ``id``, ``title``, ``done``, ``priority`` and ``project_id`` are
        always present; dates, labels, description, percentage and the
        favourite flag only when set.
        """
        lean: Dict[str, Any] = {
            "id": self.id,
            "title": self.title or "",
            "done": self.done,
            "priority": self.priority,
        }
        for key in ("due_date", "start_date", "end_date"):
            date = _date_or_none(getattr(self, key))
            if date is not None:
                lean[key] = date
        lean["project_id"] = self.project_id
        if self.labels:
            lean["labels"] = [label.title or "" for label in self.labels]
        if self.description:
            lean["description"] = self.description
        if self.percent_done:
            lean["percent_done"] = self.percent_done
        if self.is_favorite:
            lean["is_favorite"] = True
        return lean


class Project(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = 0
    title: Optional[str] = ""
    description: Optional[str] = ""
    parent_project_id: int = 0
    is_archived: bool = False

    def to_lean(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title or ""}


class Label(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = 0
    title: Optional[str] = ""
    description: Optional[str] = ""
    hex_color: Optional[str] = ""

    def to_lean(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title or "", "hex_color": self.hex_color or ""}


class TaskFields(BaseModel):
    """Optional task fields supplied on the command line.

    Only fields that were explicitly given are sent or applied; see
    :meth:`changes`.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[int] = None
    due_date: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    hex_color: Optional[str] = None
    is_favorite: Optional[bool] = None
    percent_done: Optional[float] = None
    done: Optional[bool] = None
    project_id: Optional[int] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def lean_list(items: List[Any]) -> List[Dict[str, Any]]:
    return [item.to_lean() for item in items]


def parse_id(value: str) -> int:
    """Parse a numeric Vikunja ID given on the command line."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise UsageError(f"invalid ID: {value}") from None
