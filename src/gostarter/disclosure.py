"""
gostarter.disclosure - Progressive Disclosure
=============================================

Beginners should see six questions, not twenty. This module decides how
much of gostarter's surface to show:

- ``determine_disclosure_mode`` turns the ``--basic``/``--advanced``/
  ``--complexity`` controls into a ``DisclosureMode``
- ``filter_prompts`` and ``filter_flags`` list what each mode shows
- ``select_blueprint_variant`` maps (type, complexity) to a blueprint id,
  so a "simple" CLI gets a single-file layout instead of the Cobra tree

All functions are pure.
"""

from __future__ import annotations

from enum import Enum

from gostarter.errors import ValidationError
from gostarter.models import ComplexityLevel, DisclosureMode


# =============================================================================
# Keys
# =============================================================================

class PromptKey(str, Enum):
    """Questions the interactive builder can ask."""

    PROJECT_NAME = "project_name"
    MODULE_PATH = "module_path"
    PROJECT_TYPE = "project_type"
    GO_VERSION = "go_version"
    FRAMEWORK = "framework"
    LOGGER = "logger"
    ARCHITECTURE = "architecture"
    DATABASE = "database"
    DATABASE_ORM = "database_orm"
    AUTHENTICATION = "authentication"
    DEPLOYMENT = "deployment"
    TESTING = "testing"
    MONITORING = "monitoring"
    LOGGING = "logging"


class FlagKey(str, Enum):
    """Command-line flags of ``gostarter new``; values are the option names."""

    NAME = "--name"
    TYPE = "--type"
    MODULE = "--module"
    FRAMEWORK = "--framework"
    LOGGER = "--logger"
    GO_VERSION = "--go-version"
    OUTPUT = "--output"
    QUIET = "--quiet"
    DRY_RUN = "--dry-run"
    NO_GIT = "--no-git"
    BASIC = "--basic"
    ADVANCED = "--advanced"
    COMPLEXITY = "--complexity"
    ARCHITECTURE = "--architecture"
    DATABASE_DRIVER = "--database-driver"
    DATABASE_ORM = "--database-orm"
    AUTH_TYPE = "--auth-type"
    DEPLOYMENT_TARGET = "--deployment-target"


BASIC_PROMPTS = (
    PromptKey.PROJECT_NAME,
    PromptKey.MODULE_PATH,
    PromptKey.PROJECT_TYPE,
    PromptKey.GO_VERSION,
    PromptKey.FRAMEWORK,
    PromptKey.LOGGER,
    PromptKey.ARCHITECTURE,
)

ADVANCED_PROMPTS = BASIC_PROMPTS + (
    PromptKey.DATABASE,
    PromptKey.DATABASE_ORM,
    PromptKey.AUTHENTICATION,
    PromptKey.DEPLOYMENT,
    PromptKey.TESTING,
    PromptKey.MONITORING,
    PromptKey.LOGGING,
)

BASIC_FLAGS = (
    FlagKey.NAME,
    FlagKey.TYPE,
    FlagKey.MODULE,
    FlagKey.FRAMEWORK,
    FlagKey.LOGGER,
    FlagKey.GO_VERSION,
    FlagKey.OUTPUT,
    FlagKey.QUIET,
    FlagKey.DRY_RUN,
    FlagKey.NO_GIT,
    FlagKey.BASIC,
    FlagKey.ADVANCED,
    FlagKey.COMPLEXITY,
)

ADVANCED_FLAGS = BASIC_FLAGS + (
    FlagKey.ARCHITECTURE,
    FlagKey.DATABASE_DRIVER,
    FlagKey.DATABASE_ORM,
    FlagKey.AUTH_TYPE,
    FlagKey.DEPLOYMENT_TARGET,
)

# Project type -> {complexity -> blueprint id}; unlisted pairs keep the type
BLUEPRINT_VARIANTS: dict[str, dict[ComplexityLevel, str]] = {
    "cli": {ComplexityLevel.SIMPLE: "cli-simple"},
}


# =============================================================================
# Mode Selection
# =============================================================================

def parse_complexity(value: str) -> ComplexityLevel:
    """
    Parse a complexity level, ignoring case and surrounding whitespace.

    Raises
    ------
    ValidationError
        If the value names no level.

    Examples
    --------
    >>> parse_complexity("Advanced")
    <ComplexityLevel.ADVANCED: 'advanced'>
    """
    try:
        return ComplexityLevel(value.strip().lower())
    except ValueError:
        allowed = ", ".join(level.value for level in ComplexityLevel)
        raise ValidationError(
            f"invalid complexity level '{value}' (expected one of: {allowed})",
            field="complexity",
        ) from None


def determine_disclosure_mode(
    basic: bool = False,
    advanced: bool = False,
    complexity: ComplexityLevel | None = None,
) -> DisclosureMode:
    """
    Decide which disclosure mode applies.

    Precedence: an explicit ``--advanced`` wins over ``--basic``, which
    wins over ``--complexity``. Without any control the mode is basic.

    Parameters
    ----------
    basic : bool
        ``--basic`` was given.

    advanced : bool
        ``--advanced`` was given.

    complexity : ComplexityLevel, optional
        ``--complexity`` value; advanced and expert map to advanced mode.
    """
    if advanced:
        return DisclosureMode.ADVANCED
    if basic:
        return DisclosureMode.BASIC
    if complexity is not None and complexity >= ComplexityLevel.ADVANCED:
        return DisclosureMode.ADVANCED
    return DisclosureMode.BASIC


def select_blueprint_variant(project_type: str, complexity: ComplexityLevel | None) -> str:
    """
    Map a project type and complexity to a blueprint id.

    Examples
    --------
    >>> select_blueprint_variant("cli", ComplexityLevel.SIMPLE)
    'cli-simple'
    >>> select_blueprint_variant("cli", ComplexityLevel.EXPERT)
    'cli'
    >>> select_blueprint_variant("web-api", ComplexityLevel.SIMPLE)
    'web-api'
    """
    if complexity is None:
        return project_type
    return BLUEPRINT_VARIANTS.get(project_type, {}).get(complexity, project_type)


# =============================================================================
# Filters
# =============================================================================

def filter_prompts(mode: DisclosureMode) -> list[PromptKey]:
    """Questions shown in a mode; advanced is a strict superset of basic."""
    if mode is DisclosureMode.ADVANCED:
        return list(ADVANCED_PROMPTS)
    return list(BASIC_PROMPTS)


def filter_flags(mode: DisclosureMode) -> list[FlagKey]:
    """Flags listed by ``--help`` in a mode."""
    if mode is DisclosureMode.ADVANCED:
        return list(ADVANCED_FLAGS)
    return list(BASIC_FLAGS)


def advanced_only_flags() -> list[FlagKey]:
    """Flags hidden from basic help."""
    return [flag for flag in ADVANCED_FLAGS if flag not in BASIC_FLAGS]


# =============================================================================
# Guidance
# =============================================================================

def recommended_complexity(
    first_time: bool = False,
    experienced: bool = False,
    team_size: int = 1,
) -> ComplexityLevel:
    """
    Suggest a starting complexity level.

    Parameters
    ----------
    first_time : bool
        The user has never generated a Go project before.

    experienced : bool
        The user is comfortable with Go project layouts.

    team_size : int
        Number of people expected to work on the project.
    """
    if first_time:
        return ComplexityLevel.SIMPLE
    if experienced and team_size > 5:
        return ComplexityLevel.EXPERT
    if experienced:
        return ComplexityLevel.ADVANCED
    return ComplexityLevel.STANDARD


def describe_complexity(level: ComplexityLevel) -> str:
    """One-line description of a complexity level for help and prompts."""
    descriptions = {
        ComplexityLevel.SIMPLE: "Minimal structure, a handful of files",
        ComplexityLevel.STANDARD: "Conventional layout with the usual tooling",
        ComplexityLevel.ADVANCED: "Adds databases, auth and deployment options",
        ComplexityLevel.EXPERT: "Every option, for large team projects",
    }
    return descriptions[level]
