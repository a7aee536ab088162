"""Wizard state machine behind the TUI.

The wizard is a small linear state machine::

    SKILL_LIST ─► CONFIG ─► CONFIRM ─┬──────────────► BUILDING ─► DONE
        ▲           ▲  │      ▲  │   └─► OVERWRITE ──┘              │
        │           └──┘      └──────────┘ (n/esc)                  │
        └─────────────────────────────────────────────── (restart) ─┘

It holds no Textual objects so every transition can be exercised without
a terminal; the screens in :mod:`skillfactory.tui` only render it and
forward key presses.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from skillfactory.constants import (
    BIN_DIR_NAME,
    SKILL_NAME_CHAR_LIMIT,
    SKILLS_FOLDER_PLACEHOLDER,
    VARIABLE_CHAR_LIMIT,
)
from skillfactory.display.logging_config import secret_redaction_filter
from skillfactory.skill.discovery import SkillLoadError
from skillfactory.skill.manifest import Manifest, Variable

logger = logging.getLogger(__name__)

SKILLS_FOLDER_LABEL = "Skills Folder"
SKILL_NAME_LABEL = "Skill Name"
DEPLOY_SUCCESS_MSG = "Skill deployed successfully!"


class View(str, Enum):
    """Screens of the wizard."""

    SKILL_LIST = "skill_list"
    CONFIG = "config"
    CONFIRM = "confirm"
    OVERWRITE = "overwrite"
    BUILDING = "building"
    DONE = "done"


@dataclass
class InputField:
    """One editable field on the configure screen."""

    label: str
    value: str = ""
    placeholder: str = ""
    description: str = ""
    secret: bool = False
    required: bool = False
    char_limit: int = VARIABLE_CHAR_LIMIT
    variable: Optional[Variable] = None


@dataclass
class Wizard:
    """State of one SkillFactory session."""

    manifests: List[Manifest] = field(default_factory=list)
    skill_errors: List[SkillLoadError] = field(default_factory=list)

    view: View = View.SKILL_LIST
    cursor: int = 0
    selected_skill: Optional[Manifest] = None
    selected_error: Optional[SkillLoadError] = None

    fields: List[InputField] = field(default_factory=list)
    focus: int = 0

    skills_folder: str = ""
    skill_folder_name: str = ""
    config_values: Dict[str, str] = field(default_factory=dict)

    status_msg: str = ""
    error_msg: str = ""
    building: bool = False
    build_output: str = ""

    # ── Skill list ───────────────────────────────────────────────

    @property
    def total_items(self) -> int:
        return len(self.manifests) + len(self.skill_errors)

    def move_cursor(self, delta: int) -> None:
        if self.total_items == 0:
            self.cursor = 0
            return
        self.cursor = max(0, min(self.cursor + delta, self.total_items - 1))

    def select(self) -> bool:
        """Act on the item under the cursor.

        Returns *True* when a valid skill was selected and the wizard moved
        on to the configure view.
        """
        if self.cursor < len(self.manifests):
            self.selected_skill = self.manifests[self.cursor]
            self.selected_error = None
            self.error_msg = ""
            self.setup_fields()
            self.view = View.CONFIG
            logger.info("Selected skill '%s'", self.selected_skill.name)
            return True
        if self.cursor < self.total_items:
            self.selected_error = self.skill_errors[self.cursor - len(self.manifests)]
            self.selected_skill = None
            self.error_msg = self.selected_error.message
        return False

    # ── Configure ────────────────────────────────────────────────

    def setup_fields(self) -> None:
        """Create the input fields from the selected skill's variables.

        Defaults are only offered as placeholders, never pre-filled.
        """
        if self.selected_skill is None:
            return

        fields: List[InputField] = []
        for var in self.selected_skill.variables:
            fields.append(
                InputField(
                    label=var.display_label,
                    value=self.config_values.get(var.name, ""),
                    placeholder=var.placeholder or var.default,
                    description=var.description,
                    secret=var.is_secret,
                    required=var.required,
                    variable=var,
                )
            )

        fields.append(
            InputField(
                label=SKILLS_FOLDER_LABEL,
                value=self.skills_folder,
                placeholder=SKILLS_FOLDER_PLACEHOLDER,
                required=True,
            )
        )
        fields.append(
            InputField(
                label=SKILL_NAME_LABEL,
                value=self.skill_folder_name or self.selected_skill.name,
                placeholder=self.selected_skill.name,
                required=True,
                char_limit=SKILL_NAME_CHAR_LIMIT,
            )
        )
        self.fields = fields
        self.focus = 0

    def set_value(self, index: int, value: str) -> None:
        self.fields[index].value = value

    def focus_next(self) -> None:
        if self.fields:
            self.focus = (self.focus + 1) % len(self.fields)

    def focus_prev(self) -> None:
        if self.fields:
            self.focus = (self.focus - 1) % len(self.fields)

    def validate(self) -> bool:
        """Check the entered values, setting ``error_msg`` on the first problem."""
        if self.selected_skill is None:
            self.error_msg = "No skill selected"
            return False

        for fld in self.fields[:-2]:
            var = fld.variable
            if var is None:
                continue
            if var.required and not fld.value:
                self.error_msg = f"{var.display_label} is required"
                return False
            if var.type == "json" and fld.value:
                try:
                    json.loads(fld.value)
                except ValueError:
                    self.error_msg = f"{var.display_label} must be valid JSON"
                    return False

        if not self.fields[-2].value:
            self.error_msg = f"{SKILLS_FOLDER_LABEL} is required"
            return False
        if not self.fields[-1].value:
            self.error_msg = f"{SKILL_NAME_LABEL} is required"
            return False
        if os.path.isabs(self.fields[-1].value):
            self.error_msg = f"{SKILL_NAME_LABEL} must be a folder name, not an absolute path"
            return False

        self.error_msg = ""
        return True

    def save_config_values(self) -> None:
        if self.selected_skill is None:
            return
        for fld in self.fields[:-2]:
            if fld.variable is None:
                continue
            self.config_values[fld.variable.name] = fld.value
            if fld.secret:
                secret_redaction_filter.register(fld.value)
            logger.debug(
                "[%s] %s = %s", self.selected_skill.name, fld.variable.name, fld.value
            )
        self.skills_folder = self.fields[-2].value
        self.skill_folder_name = self.fields[-1].value

    def submit_config(self) -> bool:
        """Finish editing: validate, remember the values and go to confirm."""
        if not self.validate():
            return False
        self.save_config_values()
        self.view = View.CONFIRM
        return True

    def back_to_list(self) -> None:
        self.view = View.SKILL_LIST
        self.error_msg = ""

    # ── Confirm / overwrite ──────────────────────────────────────

    def back_to_config(self) -> None:
        self.view = View.CONFIG
        self.focus = 0

    def deploy_path(self) -> str:
        """Full deploy path: skills folder joined with the skill folder name."""
        # Keep the skills folder even when the name starts with a separator
        return os.path.join(self.skills_folder, self.skill_folder_name.lstrip(os.sep))

    def skill_exists(self) -> bool:
        """Whether the deploy path already holds this skill's binary."""
        if self.selected_skill is None or not self.skill_folder_name:
            return False
        binary = os.path.join(self.deploy_path(), BIN_DIR_NAME, self.selected_skill.binary_name)
        return os.path.exists(binary)

    def _start_building(self) -> None:
        self.view = View.BUILDING
        self.building = True
        self.error_msg = ""
        self.status_msg = ""

    def confirm(self) -> bool:
        """Confirm the deploy.

        Returns *True* when the build should start now, *False* when the
        wizard moved to the overwrite warning instead.
        """
        if self.skill_exists():
            self.view = View.OVERWRITE
            return False
        self._start_building()
        return True

    def confirm_overwrite(self) -> None:
        logger.info("Overwriting existing deployment at %s", self.deploy_path())
        self._start_building()

    def cancel_overwrite(self) -> None:
        self.view = View.CONFIRM

    # ── Build / deploy results ───────────────────────────────────

    def variable_values(self) -> Dict[str, str]:
        """Effective variable values for deploy: entered value, else default."""
        values: Dict[str, str] = {}
        if self.selected_skill is None:
            return values
        for var in self.selected_skill.variables:
            value = self.config_values.get(var.name, "") or var.default
            if value:
                values[var.name] = value
        return values

    def build_finished(self, output: str, error: Optional[str] = None) -> bool:
        """Record the build outcome. Returns *True* if deploy should follow."""
        self.building = False
        self.build_output = output
        if error:
            self.error_msg = error
            self.view = View.DONE
            return False
        return True

    def deploy_finished(self, error: Optional[str] = None) -> None:
        self.view = View.DONE
        if error:
            self.error_msg = error
        else:
            self.status_msg = DEPLOY_SUCCESS_MSG

    def restart(self) -> None:
        self.view = View.SKILL_LIST
        self.error_msg = ""
        self.status_msg = ""
        self.build_output = ""
