"""Wizard screens, one per :class:`~skillfactory.wizard.View`."""

from skillfactory.tui.screens.base import FactoryScreen
from skillfactory.tui.screens.configure import ConfigScreen
from skillfactory.tui.screens.confirm import ConfirmScreen
from skillfactory.tui.screens.overwrite import OverwriteModal
from skillfactory.tui.screens.progress import BuildingScreen, DoneScreen
from skillfactory.tui.screens.skill_list import SkillListScreen

__all__ = [
    "BuildingScreen",
    "ConfigScreen",
    "ConfirmScreen",
    "DoneScreen",
    "FactoryScreen",
    "OverwriteModal",
    "SkillListScreen",
]
