"""
gostarter.settings - User Settings
==================================

Personal defaults live in ``~/.gostarter.toml``:

```toml
default_profile = "work"

[profiles.work]
author = "Jane Doe"
email = "jane@example.com"
license = "Apache-2.0"

[profiles.work.defaults]
go_version = "1.22"
framework = "chi"

[profiles.work.defaults.logging]
level = "debug"
format = "text"
```

Settings only ever supply metadata and logging defaults. They never fill
in answers that would make the interactive builder skip a question the
user expects to see.

Environment Overrides
---------------------
``GOSTARTER_CONFIG``   path of the settings file
``GOSTARTER_PROFILE``  profile to use instead of ``default_profile``
``GOSTARTER_AUTHOR``, ``GOSTARTER_EMAIL``, ``GOSTARTER_LICENSE``
                       override the active profile's metadata
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

import tomli
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from gostarter.errors import ConfigError


if TYPE_CHECKING:
    from gostarter.models import ProjectConfig


logger = logging.getLogger(__name__)

SETTINGS_FILENAME = ".gostarter.toml"


# =============================================================================
# Models
# =============================================================================

class LoggingDefaults(BaseModel):
    """Default log level and format written into generated configs."""

    level: str = "info"
    format: str = "json"


class ProfileDefaults(BaseModel):
    """
    Suggested answers for a profile.

    ``go_version``, ``framework``, ``architecture`` and ``logger`` are
    offered as the preselected choice in prompts and used by ``--yes``;
    they are not copied into the configuration up front.
    """

    go_version: str = ""
    framework: str = ""
    architecture: str = ""
    logger: str = ""
    logging: LoggingDefaults = Field(default_factory=LoggingDefaults)


class Profile(BaseModel):
    """Author metadata plus defaults."""

    author: str = ""
    email: str = ""
    license: str = "MIT"
    defaults: ProfileDefaults = Field(default_factory=ProfileDefaults)


class UserSettings(BaseModel):
    """
    Parsed settings file.

    Attributes
    ----------
    default_profile : str
        Profile used when ``GOSTARTER_PROFILE`` is unset.

    profiles : dict[str, Profile]
        Named profiles.
    """

    default_profile: str = "default"
    profiles: dict[str, Profile] = Field(default_factory=dict)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> UserSettings:
        """
        Load settings from a file.

        Parameters
        ----------
        path : Path, optional
            Settings file. Defaults to ``$GOSTARTER_CONFIG`` or
            ``~/.gostarter.toml``.

        environ : Mapping[str, str], optional
            Environment to read ``GOSTARTER_CONFIG`` from. Defaults to
            ``os.environ``.

        Returns
        -------
        UserSettings
            Parsed settings, or defaults when the file does not exist.

        Raises
        ------
        ConfigError
            If the file exists but is not valid TOML or has bad values.
        """
        env = os.environ if environ is None else environ
        if path is None:
            configured = env.get("GOSTARTER_CONFIG", "")
            path = Path(configured) if configured else Path.home() / SETTINGS_FILENAME

        if not path.is_file():
            logger.debug("No settings file at %s", path)
            return cls()

        try:
            with path.open("rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigError(f"invalid settings file {path}", cause=e) from e
        except OSError as e:
            raise ConfigError(f"cannot read settings file {path}", cause=e) from e

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ConfigError(f"invalid settings file {path}", cause=e) from e

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def active_profile(self, environ: Mapping[str, str] | None = None) -> Profile:
        """
        The profile in effect, with environment overrides applied.

        An unknown profile name yields an empty profile rather than an
        error, so a stale ``GOSTARTER_PROFILE`` does not block generation.
        """
        env = os.environ if environ is None else environ
        name = env.get("GOSTARTER_PROFILE") or self.default_profile
        profile = self.profiles.get(name)
        if profile is None:
            if name != self.default_profile or self.profiles:
                logger.warning("Settings profile '%s' not found, using defaults", name)
            profile = Profile()

        overrides = {
            key: env[var]
            for key, var in (
                ("author", "GOSTARTER_AUTHOR"),
                ("email", "GOSTARTER_EMAIL"),
                ("license", "GOSTARTER_LICENSE"),
            )
            if env.get(var)
        }
        return profile.model_copy(update=overrides)

    def apply_to(self, config: ProjectConfig, environ: Mapping[str, str] | None = None) -> None:
        """
        Fill metadata and logging defaults into a ``ProjectConfig``.

        Only empty fields are filled; explicit values always win.
        """
        profile = self.active_profile(environ)
        if not config.author and profile.author:
            config.author = profile.author
        if not config.email and profile.email:
            config.email = profile.email
        if profile.license and "license" not in config.model_fields_set:
            config.license = profile.license

        logging_config = config.features.logging
        if not logging_config.model_fields_set:
            logging_config.level = profile.defaults.logging.level
            logging_config.format = profile.defaults.logging.format
            # Not an explicit choice; the builder may still ask.
            logging_config.model_fields_set.clear()
