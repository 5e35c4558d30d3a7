"""
gostarter.models - Pydantic Models for Project Configuration
============================================================

This module defines the data models shared by every stage of the pipeline.
We use Pydantic for the same reasons everywhere in gostarter:

1. **Coercion**: CLI strings like ``"zap"`` become closed enums exactly once
2. **Validation**: malformed values fail with a clear message at assignment
3. **Serialization**: settings files and templates see plain dicts

Architecture Notes
------------------
The models are organized in a hierarchy:

    ProjectConfig (main)
    ├── FrameworkKind (enum)
    ├── LoggerKind (enum)
    ├── GoVersion (enum)
    ├── FeaturesConfig
    │   ├── database: DatabaseConfig
    │   ├── authentication: AuthConfig
    │   ├── deployment: DeploymentConfig
    │   ├── testing: TestingConfig
    │   ├── monitoring: MonitoringConfig
    │   └── logging: LoggingConfig
    └── variables: dict[str, str]

A ``ProjectConfig`` starts out empty and is filled in stages (CLI flags,
then the interactive builder). Empty strings and ``None`` mean "not known
yet"; the generator rejects a config whose blueprint-required fields are
still empty.

Usage Example
-------------
>>> from gostarter.models import ProjectConfig
>>> config = ProjectConfig(name="demo", module_path="github.com/x/demo", type="library")
>>> config.logger is None
True
>>> config.logger = "zap"
>>> config.logger
<LoggerKind.ZAP: 'zap'>
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enumerations
# =============================================================================

class ComplexityLevel(str, Enum):
    """
    How much structure the user wants in the generated project.

    Levels are totally ordered by the amount of functionality they
    disclose: ``SIMPLE < STANDARD < ADVANCED < EXPERT``. Besides steering
    which questions are asked, a level can select a structurally different
    blueprint variant for the same project type (see
    ``gostarter.disclosure.select_blueprint_variant``).
    """

    SIMPLE = "simple"
    STANDARD = "standard"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @property
    def rank(self) -> int:
        """Position of the level in the total order (0 = simplest)."""
        return list(ComplexityLevel).index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ComplexityLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ComplexityLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ComplexityLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ComplexityLevel):
            return NotImplemented
        return self.rank >= other.rank


class DisclosureMode(str, Enum):
    """
    Which questions and flags are surfaced to the user.

    This is a coarser projection of ``ComplexityLevel`` that only affects
    presentation. It never changes what a ``ProjectConfig`` can hold.
    """

    BASIC = "basic"
    ADVANCED = "advanced"


class LoggerKind(str, Enum):
    """
    Logging libraries the generated Go code can be wired against.

    Templates never compare logger names; they receive one boolean per
    kind (``UseSlog``, ``UseZap``, ...) derived from this enum.
    """

    SLOG = "slog"
    ZAP = "zap"
    LOGRUS = "logrus"
    ZEROLOG = "zerolog"

    @property
    def description(self) -> str:
        """Human-readable description for prompts."""
        descriptions = {
            LoggerKind.SLOG: "Go built-in structured logging (recommended)",
            LoggerKind.ZAP: "High-performance, zero-allocation logging",
            LoggerKind.LOGRUS: "Feature-rich, popular logging library",
            LoggerKind.ZEROLOG: "Zero allocation, chainable API logging",
        }
        return descriptions[self]

    @property
    def context_flag(self) -> str:
        """Name of the boolean template variable enabled for this logger."""
        return "Use" + self.value.capitalize()


class FrameworkKind(str, Enum):
    """
    Web and CLI frameworks offered for the generated project.

    ``STDLIB`` means "no framework": net/http for services, the flag
    package for command-line tools.
    """

    GIN = "gin"
    ECHO = "echo"
    FIBER = "fiber"
    CHI = "chi"
    COBRA = "cobra"
    STDLIB = "stdlib"

    @property
    def description(self) -> str:
        """Human-readable description for prompts."""
        descriptions = {
            FrameworkKind.GIN: "Gin (recommended)",
            FrameworkKind.ECHO: "Echo",
            FrameworkKind.FIBER: "Fiber",
            FrameworkKind.CHI: "Chi",
            FrameworkKind.COBRA: "Cobra (recommended)",
            FrameworkKind.STDLIB: "Standard library",
        }
        return descriptions[self]

    @classmethod
    def for_project_type(cls, project_type: str) -> list[FrameworkKind]:
        """
        Frameworks that make sense for a project type.

        Returns an empty list for types that take no framework
        (libraries, lambdas).
        """
        if project_type in WEB_PROJECT_TYPES:
            return [cls.GIN, cls.ECHO, cls.FIBER, cls.CHI, cls.STDLIB]
        if project_type == "cli":
            return [cls.COBRA, cls.STDLIB]
        return []


class GoVersion(str, Enum):
    """
    Go versions a generated project may target.

    ``AUTO`` defers the choice; it resolves to ``DEFAULT_GO_VERSION`` when
    templates are rendered so that generation stays reproducible.
    """

    AUTO = "auto"
    GO123 = "1.23"
    GO122 = "1.22"
    GO121 = "1.21"

    @property
    def resolved(self) -> str:
        """The concrete version written into go.mod."""
        if self is GoVersion.AUTO:
            return DEFAULT_GO_VERSION
        return self.value

    @property
    def label(self) -> str:
        """Prompt label."""
        if self is GoVersion.AUTO:
            return "Auto-detect (recommended)"
        if self is GoVersion.GO123:
            return "Go 1.23 (latest)"
        return f"Go {self.value}"


# =============================================================================
# Constants
# =============================================================================

DEFAULT_GO_VERSION = "1.21"

# Project types that serve HTTP and therefore take a web framework
WEB_PROJECT_TYPES = frozenset({"web-api", "microservice"})

DATABASE_DRIVERS = ("postgresql", "mysql", "mongodb", "sqlite", "redis")
DRIVER_ALIASES = {"postgres": "postgresql", "mongo": "mongodb"}

# ORMs with working templates; anything else is rejected, never degraded
IMPLEMENTED_ORMS = ("gorm", "raw")
PLANNED_ORMS = ("sqlx", "sqlc", "ent", "xorm")

AUTH_TYPES = ("jwt", "oauth2", "session", "api-key")
DEPLOYMENT_TARGETS = ("docker", "kubernetes", "github-actions")
TESTING_FRAMEWORKS = ("testify", "stdlib")
LOG_LEVELS = ("debug", "info", "warn", "error")
LOG_FORMATS = ("json", "text", "console")


# =============================================================================
# Configuration Sub-Models
# =============================================================================

class DatabaseConfig(BaseModel):
    """
    Database support for the generated project.

    Attributes
    ----------
    drivers : list[str]
        Selected databases, primary first. ``postgres`` is normalized to
        ``postgresql`` and ``mongo`` to ``mongodb``.

    orm : str
        Data-access layer (``gorm`` or ``raw``). Empty means no preference;
        the blueprint default applies.
    """

    model_config = ConfigDict(validate_assignment=True)

    drivers: list[str] = Field(default_factory=list)
    orm: str = ""

    @field_validator("drivers")
    @classmethod
    def normalize_drivers(cls, v: list[str]) -> list[str]:
        """Lowercase, alias and de-duplicate while keeping order."""
        seen: list[str] = []
        for driver in v:
            name = driver.strip().lower()
            name = DRIVER_ALIASES.get(name, name)
            if name and name not in seen:
                seen.append(name)
        return seen

    @field_validator("orm")
    @classmethod
    def normalize_orm(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def primary_driver(self) -> str:
        return self.drivers[0] if self.drivers else ""


class AuthConfig(BaseModel):
    """Authentication scheme (``jwt``, ``oauth2``, ``session``, ``api-key``)."""

    model_config = ConfigDict(validate_assignment=True)

    type: str = ""

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        v = v.strip().lower()
        return "" if v == "none" else v


class DeploymentConfig(BaseModel):
    """Deployment targets that add extra files (Dockerfile, manifests, CI)."""

    model_config = ConfigDict(validate_assignment=True)

    targets: list[str] = Field(default_factory=list)

    @field_validator("targets")
    @classmethod
    def normalize_targets(cls, v: list[str]) -> list[str]:
        result: list[str] = []
        for target in v:
            name = target.strip().lower()
            if name and name not in result:
                result.append(name)
        return result


class TestingConfig(BaseModel):
    """Test tooling for the generated project."""

    model_config = ConfigDict(validate_assignment=True)

    framework: str = ""
    coverage: bool = False


class MonitoringConfig(BaseModel):
    """Observability hooks wired into generated services."""

    model_config = ConfigDict(validate_assignment=True)

    metrics: bool = False
    tracing: bool = False


class LoggingConfig(BaseModel):
    """
    Runtime logging defaults written into the generated config files.

    Attributes
    ----------
    level : str
        One of ``debug``, ``info``, ``warn``, ``error``.

    format : str
        One of ``json``, ``text``, ``console``.

    structured : bool
        Structured key/value logging. Always on for generated projects.
    """

    model_config = ConfigDict(validate_assignment=True)

    level: str = "info"
    format: str = "json"
    structured: bool = True

    @field_validator("level", "format")
    @classmethod
    def normalize(cls, v: str) -> str:
        return v.strip().lower()


class FeaturesConfig(BaseModel):
    """
    Optional features to include in the generated project.

    Every feature here is an *advanced* choice: in basic disclosure mode
    nobody is asked about them and the blueprint defaults apply.

    Examples
    --------
    >>> features = FeaturesConfig(database=DatabaseConfig(drivers=["postgres"]))
    >>> features.enabled_features
    ['database']
    """

    model_config = ConfigDict(validate_assignment=True)

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    authentication: AuthConfig = Field(default_factory=AuthConfig)
    deployment: DeploymentConfig = Field(default_factory=DeploymentConfig)
    testing: TestingConfig = Field(default_factory=TestingConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def enabled_features(self) -> list[str]:
        """
        Names of the features that add files to the project.

        Returns
        -------
        list[str]
            Subset of ``database``, ``authentication``, ``deployment``,
            ``monitoring`` in that order.
        """
        enabled = []
        if self.database.drivers:
            enabled.append("database")
        if self.authentication.type:
            enabled.append("authentication")
        if self.deployment.targets:
            enabled.append("deployment")
        if self.monitoring.metrics or self.monitoring.tracing:
            enabled.append("monitoring")
        return enabled


# =============================================================================
# Main Configuration Model
# =============================================================================

class ProjectConfig(BaseModel):
    """
    Complete description of the project to generate.

    The configuration is built progressively and may be incomplete while
    the CLI and the interactive builder work on it. Assignment is
    validated, so strings set by the CLI become enums on the spot.

    Attributes
    ----------
    name : str
        Project name; also the output directory name.

    module_path : str
        Go module path, e.g. ``github.com/user/project``.

    type : str
        Project type (``web-api``, ``cli``, ``library``, ``lambda``,
        ``microservice``). Types are defined by the blueprint catalog.

    architecture : str
        Architecture pattern (``standard``, ``clean``, ``hexagonal``...).

    framework : FrameworkKind | None
        Web or CLI framework.

    logger : LoggerKind | None
        Logging library.

    go_version : GoVersion | None
        Target Go version.

    author, email, license : str
        Project metadata, usually filled from the user settings file.

    features : FeaturesConfig
        Advanced feature selection.

    variables : dict[str, str]
        Blueprint-specific extras. Two keys are understood by the pipeline
        itself: ``blueprint_id`` (explicit blueprint override) and
        ``complexity`` (a ``ComplexityLevel`` value).

    Examples
    --------
    >>> config = ProjectConfig(name="my-api", type="web-api", framework="gin")
    >>> config.framework
    <FrameworkKind.GIN: 'gin'>
    >>> config.package_name
    'myapi'
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    module_path: str = ""
    type: str = ""
    architecture: str = ""
    framework: FrameworkKind | None = None
    logger: LoggerKind | None = None
    go_version: GoVersion | None = None
    author: str = ""
    email: str = ""
    license: str = "MIT"
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)
    variables: dict[str, str] = Field(default_factory=dict)

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator("name", "module_path", "author", "email", "license")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("type", "architecture")
    @classmethod
    def normalize_identifier(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("framework", "logger", "go_version", mode="before")
    @classmethod
    def empty_as_unset(cls, v: object) -> object:
        """
        Treat empty strings as "not chosen yet".

        Also accepts ``"standard"`` for the stdlib framework, the spelling
        used by the CLI help of earlier releases.
        """
        if isinstance(v, str):
            v = v.strip().lower()
            if not v:
                return None
            if v in {"standard", "standard-library", "net/http"}:
                return FrameworkKind.STDLIB.value
        return v

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def package_name(self) -> str:
        """
        Go package identifier derived from the project name.

        Go package names are lowercase with no separators, so ``my-api``
        becomes ``myapi``.
        """
        return re.sub(r"[^a-z0-9]", "", self.name.lower())

    @property
    def complexity(self) -> ComplexityLevel | None:
        """The complexity level recorded in ``variables``, if any."""
        value = self.variables.get("complexity", "")
        if not value:
            return None
        try:
            return ComplexityLevel(value.lower())
        except ValueError:
            return None

    @property
    def blueprint_override(self) -> str:
        """Explicit blueprint id requested through ``variables``."""
        return self.variables.get("blueprint_id", "").strip()

    @property
    def resolved_go_version(self) -> str:
        """Concrete Go version for templates."""
        if self.go_version is None:
            return DEFAULT_GO_VERSION
        return self.go_version.resolved


@dataclass(frozen=True)
class GenerationOptions:
    """
    Execution-time switches for one generation run.

    These are not part of the project's identity and are never written
    into the generated files.

    Attributes
    ----------
    output_path : Path
        Directory the project is materialized into (the project root).

    dry_run : bool
        Render everything but write nothing.

    no_git : bool
        Skip ``git init``.

    verbose : bool
        Print progress to the console.
    """

    output_path: Path
    dry_run: bool = False
    no_git: bool = False
    verbose: bool = False
