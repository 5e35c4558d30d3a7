"""
gostarter.builder - Interactive Configuration Builder
=====================================================

Completes a partial ``ProjectConfig`` by asking the user for whatever is
still missing. The builder never re-asks something the CLI already knows:
a question is asked only when its field is empty *and* the disclosure
mode shows that question. A fully populated config therefore goes
through without a single prompt.

Question order is fixed:

    name → module path → type → Go version → framework → logger
         → architecture (web APIs with several layouts)
         → advanced extras (database, auth, deployment, testing,
           monitoring, logging)

Usage Example
-------------
>>> builder = ConfigurationBuilder(create_prompter(), Catalog.load())
>>> config = builder.complete(ProjectConfig(name="demo"), DisclosureMode.BASIC)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel

from gostarter.disclosure import PromptKey, filter_prompts
from gostarter.errors import Cancelled
from gostarter.models import (
    AUTH_TYPES,
    DATABASE_DRIVERS,
    DEPLOYMENT_TARGETS,
    IMPLEMENTED_ORMS,
    LOG_FORMATS,
    LOG_LEVELS,
    WEB_PROJECT_TYPES,
    ComplexityLevel,
    DisclosureMode,
    FrameworkKind,
    GoVersion,
    LoggerKind,
    ProjectConfig,
)
from gostarter.prompts import Choice
from gostarter.settings import ProfileDefaults
from gostarter.validation import as_prompt_validator, validate_module_path, validate_project_name


if TYPE_CHECKING:
    from gostarter.catalog import Catalog
    from gostarter.prompts import Prompter


logger = logging.getLogger(__name__)

T = TypeVar("T")

DRIVER_TITLES = {
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "mongodb": "MongoDB",
    "sqlite": "SQLite",
    "redis": "Redis",
}

ORM_TITLES = {
    "gorm": "GORM (full-featured ORM)",
    "raw": "database/sql (no ORM)",
}

AUTH_TITLES = {
    "jwt": "JWT bearer tokens",
    "oauth2": "OAuth2",
    "session": "Server-side sessions",
    "api-key": "API keys",
}

DEPLOYMENT_TITLES = {
    "docker": "Docker",
    "kubernetes": "Kubernetes manifests",
    "github-actions": "GitHub Actions CI",
}

ARCHITECTURE_TITLES = {
    "standard": "Standard layout (recommended)",
    "clean": "Clean Architecture",
    "hexagonal": "Hexagonal (ports and adapters)",
}


def _untouched(model: BaseModel) -> bool:
    """True when no field of a sub-config was ever set explicitly."""
    return not model.model_fields_set


def _preferred(value: str, allowed: Sequence[str], fallback: str) -> str:
    """A profile default if it is one of the offered choices, else ``fallback``."""
    value = value.strip().lower()
    return value if value in allowed else fallback


class ConfigurationBuilder:
    """
    Fills the gaps of a partial configuration through a ``Prompter``.

    Parameters
    ----------
    prompter : Prompter
        Question backend.

    catalog : Catalog
        Source of project types and architectures offered in menus.

    cancel_event : threading.Event, optional
        Checked before every question; once set, ``complete`` raises
        ``Cancelled``.

    defaults : ProfileDefaults, optional
        Settings-file answers preselected in the Go version, framework,
        logger and architecture questions. Ignored where they do not
        fit the project type.
    """

    def __init__(
        self,
        prompter: Prompter,
        catalog: Catalog,
        cancel_event: threading.Event | None = None,
        defaults: ProfileDefaults | None = None,
    ) -> None:
        self.prompter = prompter
        self.catalog = catalog
        self.cancel_event = cancel_event or threading.Event()
        self.defaults = defaults

    # -------------------------------------------------------------------------
    # Entry Point
    # -------------------------------------------------------------------------

    def complete(
        self,
        initial: ProjectConfig,
        mode: DisclosureMode,
        complexity: ComplexityLevel | None = None,
    ) -> ProjectConfig:
        """
        Return a copy of ``initial`` with the missing answers filled in.

        Parameters
        ----------
        initial : ProjectConfig
            What is known so far (CLI flags, settings). Not modified.

        mode : DisclosureMode
            Decides which questions may be asked.

        complexity : ComplexityLevel, optional
            Recorded in ``variables`` and used for blueprint variants.

        Returns
        -------
        ProjectConfig
            The completed configuration.

        Raises
        ------
        Cancelled
            If the user aborts a question or the cancel event is set.
        """
        config = initial.model_copy(deep=True)
        shown = set(filter_prompts(mode))

        self._ask_essentials(config, shown)

        if complexity is not None:
            variables = dict(config.variables)
            variables.setdefault("complexity", complexity.value)
            if (
                config.type == "cli"
                and complexity is ComplexityLevel.SIMPLE
                and not config.blueprint_override
            ):
                variables["blueprint_id"] = "cli-simple"
            config.variables = variables

        self._ask_extras(config, shown)

        logger.debug("Configuration complete: %s", config.model_dump(exclude_defaults=True))
        return config

    # -------------------------------------------------------------------------
    # Question Helpers
    # -------------------------------------------------------------------------

    def _ask(self, question: Callable[[], T]) -> T:
        if self.cancel_event.is_set():
            raise Cancelled()
        try:
            return question()
        except KeyboardInterrupt:
            raise Cancelled() from None

    def _select(self, prompt: str, choices: Sequence[Choice], default: str | None = None) -> str:
        answer = self._ask(lambda: self.prompter.ask_select(prompt, choices, default))
        if answer is None:
            raise Cancelled()
        return answer

    def _text(self, prompt: str, default: str, rule: Callable[[str], object]) -> str:
        check = as_prompt_validator(rule)
        while True:
            answer = self._ask(lambda: self.prompter.ask_text(prompt, default, check))
            if answer is None:
                raise Cancelled()
            answer = answer.strip()
            if check(answer) is None:
                return answer
            logger.debug("Rejected answer %r for %r", answer, prompt)

    def _confirm(self, prompt: str, default: bool = False) -> bool:
        answer = self._ask(lambda: self.prompter.ask_confirm(prompt, default))
        if answer is None:
            raise Cancelled()
        return answer

    def _checkbox(
        self, prompt: str, choices: Sequence[Choice], defaults: Sequence[str] = ()
    ) -> list[str]:
        answer = self._ask(lambda: self.prompter.ask_checkbox(prompt, choices, defaults))
        if answer is None:
            raise Cancelled()
        return list(answer)

    # -------------------------------------------------------------------------
    # Essentials
    # -------------------------------------------------------------------------

    def _ask_essentials(self, config: ProjectConfig, shown: set[PromptKey]) -> None:
        if not config.name and PromptKey.PROJECT_NAME in shown:
            config.name = self._text("Project name:", "", validate_project_name)

        if not config.module_path and PromptKey.MODULE_PATH in shown:
            suggestion = f"github.com/username/{config.name}" if config.name else ""
            config.module_path = self._text("Go module path:", suggestion, validate_module_path)

        if not config.type and PromptKey.PROJECT_TYPE in shown:
            entries = self.catalog.type_entries()
            choices = [Choice(e.blueprint_id, e.label) for e in entries]
            default = "web-api" if any(c.value == "web-api" for c in choices) else None
            config.type = self._select("What type of project?", choices, default)

        preferred = self.defaults or ProfileDefaults()

        if config.go_version is None and PromptKey.GO_VERSION in shown:
            choices = [Choice(v.value, v.label) for v in GoVersion]
            default = _preferred(
                preferred.go_version, [v.value for v in GoVersion], GoVersion.AUTO.value
            )
            config.go_version = self._select("Go version:", choices, default)

        frameworks = FrameworkKind.for_project_type(config.type)
        if config.framework is None and frameworks and PromptKey.FRAMEWORK in shown:
            choices = [Choice(f.value, f.description) for f in frameworks]
            default = _preferred(
                preferred.framework, [f.value for f in frameworks], frameworks[0].value
            )
            config.framework = self._select("Framework:", choices, default)

        if config.logger is None:
            if config.type == "library":
                config.logger = LoggerKind.SLOG
            elif PromptKey.LOGGER in shown:
                choices = [Choice(k.value, f"{k.value} - {k.description}") for k in LoggerKind]
                default = _preferred(
                    preferred.logger, [k.value for k in LoggerKind], LoggerKind.SLOG.value
                )
                config.logger = self._select("Logger:", choices, default)

        if (
            config.type == "web-api"
            and not config.architecture
            and PromptKey.ARCHITECTURE in shown
        ):
            architectures = self.catalog.architectures_for("web-api")
            if len(architectures) > 1:
                choices = [Choice(a, ARCHITECTURE_TITLES.get(a, a)) for a in architectures]
                default = _preferred(preferred.architecture, architectures, architectures[0])
                config.architecture = self._select("Architecture:", choices, default)

    # -------------------------------------------------------------------------
    # Advanced Extras
    # -------------------------------------------------------------------------

    def _ask_extras(self, config: ProjectConfig, shown: set[PromptKey]) -> None:
        features = config.features
        is_service = config.type in WEB_PROJECT_TYPES
        has_runtime = config.type != "library"

        database = features.database
        if (
            PromptKey.DATABASE in shown
            and has_runtime
            and not database.drivers
            and _untouched(database)
        ):
            if self._confirm("Add database support?"):
                choices = [Choice(d, DRIVER_TITLES[d]) for d in DATABASE_DRIVERS]
                database.drivers = self._checkbox("Databases:", choices, ["postgresql"])
            else:
                database.drivers = []

        if PromptKey.DATABASE_ORM in shown and database.drivers and not database.orm:
            choices = [Choice(o, ORM_TITLES[o]) for o in IMPLEMENTED_ORMS]
            database.orm = self._select("Data access:", choices, IMPLEMENTED_ORMS[0])

        auth = features.authentication
        if PromptKey.AUTHENTICATION in shown and is_service and not auth.type and _untouched(auth):
            if self._confirm("Add authentication?"):
                choices = [Choice(a, AUTH_TITLES[a]) for a in AUTH_TYPES]
                auth.type = self._select("Authentication type:", choices, "jwt")
            else:
                auth.type = ""

        deployment = features.deployment
        if (
            PromptKey.DEPLOYMENT in shown
            and has_runtime
            and not deployment.targets
            and _untouched(deployment)
        ):
            choices = [Choice(t, DEPLOYMENT_TITLES[t]) for t in DEPLOYMENT_TARGETS]
            deployment.targets = self._checkbox("Deployment targets:", choices, ["docker"])

        testing = features.testing
        if PromptKey.TESTING in shown and not testing.framework and _untouched(testing):
            choices = [Choice("testify", "testify (assertions and mocks)"),
                       Choice("stdlib", "testing package only")]
            testing.framework = self._select("Testing framework:", choices, "testify")
            testing.coverage = self._confirm("Enforce coverage reports?", default=True)

        monitoring = features.monitoring
        if PromptKey.MONITORING in shown and is_service and _untouched(monitoring):
            monitoring.metrics = self._confirm("Expose Prometheus metrics?")
            monitoring.tracing = self._confirm("Add OpenTelemetry tracing?")

        logging_config = features.logging
        if PromptKey.LOGGING in shown and has_runtime and _untouched(logging_config):
            logging_config.level = self._select(
                "Default log level:", [Choice(v, v) for v in LOG_LEVELS], logging_config.level
            )
            logging_config.format = self._select(
                "Log format:", [Choice(v, v) for v in LOG_FORMATS], logging_config.format
            )
