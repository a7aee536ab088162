"""
SkillFactory - Build and deploy skill packages from a terminal wizard.

SkillFactory discovers skill manifests (``skills/<name>/skill.yaml``),
collects their configuration variables, runs the optional build step and
copies the result into a target skills folder.
"""

from skillfactory.constants import APP_NAME, APP_VERSION

__version__ = APP_VERSION
__app_name__ = APP_NAME

__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "__version__",
    "__app_name__",
]
