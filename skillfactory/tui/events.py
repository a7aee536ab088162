"""Custom Textual messages for the SkillFactory TUI."""

from __future__ import annotations

from typing import Optional

from textual.message import Message


class BuildComplete(Message):
    """Posted by the pipeline worker once the build step has finished."""

    def __init__(self, output: str = "", error: Optional[str] = None) -> None:
        self.output = output
        self.error = error
        super().__init__()


class DeployComplete(Message):
    """Posted by the pipeline worker once the deploy step has finished."""

    def __init__(self, deploy_path: str = "", error: Optional[str] = None) -> None:
        self.deploy_path = deploy_path
        self.error = error
        super().__init__()
