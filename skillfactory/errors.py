"""
Defines project-specific exception classes.
"""
from typing import Optional


class SkillFactoryError(Exception):
    """Base class for all custom exceptions in SkillFactory."""
    pass


class ConfigurationError(SkillFactoryError):
    """Raised when loading or saving the user configuration fails."""
    pass


class SkillManifestError(SkillFactoryError):
    """Raised when a skill.yaml cannot be read or is invalid."""
    pass


class SkillDiscoveryError(SkillFactoryError):
    """Raised when the skills directory itself cannot be scanned."""
    pass


class BuildError(SkillFactoryError):
    """
    Raised when the external build step of a skill fails.

    ``output`` carries whatever the build process printed so it can be
    shown to the user next to the error.
    """

    def __init__(self,
                 message: str,
                 skill_name: Optional[str] = None,
                 output: str = ""):
        self.skill_name = skill_name
        self.output = output

        full_msg = "Build failed"
        if skill_name:
            full_msg += f" (skill: {skill_name})"
        full_msg += f": {message}"
        super().__init__(full_msg)


class DeployError(SkillFactoryError):
    """Raised when copying a built skill into its deploy folder fails."""
    pass
