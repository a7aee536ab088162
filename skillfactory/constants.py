"""Shared constants for SkillFactory."""

import os

APP_NAME = "SkillFactory"
APP_VERSION = "0.1.0"

# Skill layout
SKILLS_DIR_NAME = "skills"
MANIFEST_FILE = "skill.yaml"
BIN_DIR_NAME = "bin"
ENV_FILE_NAME = ".env"

# Project root detection
ROOT_MARKER_FILE = "pyproject.toml"
ROOT_SEARCH_DEPTH = 10
ROOT_ENV_VAR = "SKILLFACTORY_ROOT"

# Persistent user configuration
CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".skillfactory")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

# Logging defaults
LOG_DIR = os.path.join(CONFIG_DIR, "logs")
DEFAULT_LOG_LEVEL = "INFO"

# Build defaults
BUILD_TIMEOUT = 300  # seconds before an external build is killed
ZIPAPP_INTERPRETER = "/usr/bin/env python3"  # used when sys.executable is unknown

# Input limits
VARIABLE_CHAR_LIMIT = 200
SKILL_NAME_CHAR_LIMIT = 100
SKILLS_FOLDER_PLACEHOLDER = "/path/to/.claude/skills/"
