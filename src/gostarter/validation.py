"""
gostarter.validation - Input Validation Rules
=============================================

Validation runs twice: interactively, to re-ask a question with a useful
message, and once more in the generator before anything touches the disk.
Both paths use the functions below, which raise ``ValidationError`` naming
the offending field.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from gostarter.errors import ValidationError
from gostarter.models import (
    AUTH_TYPES,
    DATABASE_DRIVERS,
    DEPLOYMENT_TARGETS,
    IMPLEMENTED_ORMS,
    LOG_FORMATS,
    LOG_LEVELS,
    PLANNED_ORMS,
    TESTING_FRAMEWORKS,
    GoVersion,
)


if TYPE_CHECKING:
    from gostarter.catalog import Blueprint
    from gostarter.models import ProjectConfig


# =============================================================================
# Rules
# =============================================================================

PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]{1,49}$")
MODULE_PATH_PATTERN = re.compile(r"^[a-zA-Z0-9.-]+(/[a-zA-Z0-9._-]+)+$")

# Names that collide with Go tooling or directory conventions
RESERVED_NAMES = frozenset({"test", "main", "init", "vendor", "internal"})


def validate_project_name(name: str) -> str:
    """
    Check a project name.

    Names start with a letter, continue with letters, digits, ``-`` or
    ``_`` and are 2 to 50 characters long. Reserved names are rejected
    regardless of case.

    Examples
    --------
    >>> validate_project_name("ab")
    'ab'
    >>> validate_project_name("a")
    Traceback (most recent call last):
    ...
    gostarter.errors.ValidationError: [VALIDATION_ERROR] ...
    """
    if not name:
        raise ValidationError("project name is required", field="name")
    if not PROJECT_NAME_PATTERN.match(name):
        raise ValidationError(
            f"invalid project name '{name}': must start with a letter, contain only "
            "letters, digits, '-' or '_', and be 2-50 characters long",
            field="name",
        )
    if name.lower() in RESERVED_NAMES:
        raise ValidationError(f"project name '{name}' is reserved", field="name")
    return name


def validate_module_path(module_path: str) -> str:
    """
    Check a Go module path such as ``github.com/user/project``.

    At least two ``/``-separated segments are required.
    """
    if not module_path:
        raise ValidationError("module path is required", field="module_path")
    if not MODULE_PATH_PATTERN.match(module_path):
        raise ValidationError(
            f"invalid module path '{module_path}': expected something like "
            "github.com/user/project",
            field="module_path",
        )
    return module_path


def validate_go_version(version: str) -> GoVersion:
    """Parse a Go version, accepting only supported ones."""
    try:
        return GoVersion(version.strip().lower())
    except ValueError:
        allowed = ", ".join(v.value for v in GoVersion)
        raise ValidationError(
            f"unsupported Go version '{version}' (supported: {allowed})",
            field="go_version",
        ) from None


def validate_orm(orm: str) -> str:
    """
    Check an ORM choice against the implemented set.

    ORMs without templates are rejected with a clear message rather than
    silently generating raw SQL code.
    """
    if orm and orm not in IMPLEMENTED_ORMS:
        if orm in PLANNED_ORMS:
            message = f"ORM '{orm}' is not supported yet"
        else:
            message = f"unknown ORM '{orm}'"
        raise ValidationError(
            f"{message} (supported: {', '.join(IMPLEMENTED_ORMS)})", field="database_orm"
        )
    return orm


def _check_member(value: str, allowed: tuple[str, ...], field: str, label: str) -> None:
    if value and value not in allowed:
        raise ValidationError(
            f"unknown {label} '{value}' (expected one of: {', '.join(allowed)})",
            field=field,
        )


def as_prompt_validator(rule: Callable[[str], Any]) -> Callable[[str], str | None]:
    """
    Adapt a rule to the prompt convention: error message or ``None``.

    Examples
    --------
    >>> check = as_prompt_validator(validate_project_name)
    >>> check("demo") is None
    True
    """

    def check(value: str) -> str | None:
        try:
            rule(value.strip())
        except ValidationError as e:
            return e.message
        return None

    return check


# =============================================================================
# Whole-Config Validation
# =============================================================================

def validate_config(config: ProjectConfig) -> None:
    """
    Validate a complete configuration before generation.

    Raises
    ------
    ValidationError
        On the first rule violated, in field order.
    """
    validate_project_name(config.name)
    validate_module_path(config.module_path)
    if not config.type:
        raise ValidationError("project type is required", field="type")
    if config.go_version is not None:
        validate_go_version(config.go_version.value)

    features = config.features
    for driver in features.database.drivers:
        _check_member(driver, DATABASE_DRIVERS, "database_driver", "database driver")
    validate_orm(features.database.orm)
    _check_member(features.authentication.type, AUTH_TYPES, "auth_type", "auth type")
    for target in features.deployment.targets:
        _check_member(target, DEPLOYMENT_TARGETS, "deployment_target", "deployment target")
    _check_member(
        features.testing.framework, TESTING_FRAMEWORKS, "testing_framework", "testing framework"
    )
    _check_member(features.logging.level, LOG_LEVELS, "log_level", "log level")
    _check_member(features.logging.format, LOG_FORMATS, "log_format", "log format")


def validate_blueprint_variables(blueprint: Blueprint, context: Mapping[str, Any]) -> None:
    """
    Check a rendering context against a blueprint's variable schema.

    Required variables must resolve to a non-empty value; variables with
    ``choices`` must resolve to one of them (or be empty when optional).

    Raises
    ------
    ValidationError
        Naming the first offending variable.
    """
    for spec in blueprint.variables:
        value = context.get(spec.name, "")
        if spec.required and (value is None or value == "" or value == []):
            raise ValidationError(
                f"blueprint '{blueprint.id}' requires '{spec.name}'", field=spec.name
            )
        if spec.choices and value and str(value) not in spec.choices:
            raise ValidationError(
                f"'{value}' is not a valid {spec.name} for blueprint '{blueprint.id}' "
                f"(expected one of: {', '.join(spec.choices)})",
                field=spec.name,
            )
