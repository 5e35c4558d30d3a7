"""
gostarter.errors - Error Taxonomy
=================================

Every failure the generation pipeline can report is one of the classes
below. They all carry a short machine-readable ``code`` so the CLI (and
tests) can tell them apart without matching on message text.

    GoStarterError
    ├── ValidationError         bad user input, generation never starts
    ├── BlueprintNotFoundError  no blueprint for the requested id/type
    ├── RenderError             defect in a blueprint asset
    ├── FileSystemError         write failure, triggers rollback
    └── ConfigError             unreadable user settings file

``Cancelled`` is deliberately *not* a ``GoStarterError``: the user pressing
Ctrl-C during the questions is an expected way out, not a failure.
"""

from __future__ import annotations

from pathlib import Path


class GoStarterError(Exception):
    """Base class for all gostarter errors."""

    code = "UNKNOWN"

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"[{self.code}] {self.message}: {self.cause}"
        return f"[{self.code}] {self.message}"


class ValidationError(GoStarterError, ValueError):
    """Malformed or disallowed input (name, module path, Go version, ORM...)."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class BlueprintNotFoundError(GoStarterError, LookupError):
    """The requested blueprint id or project type has no match in the catalog."""

    code = "TEMPLATE_NOT_FOUND"

    def __init__(self, key: str, *, available: list[str] | None = None) -> None:
        message = f"blueprint '{key}' not found"
        if available:
            message += f" (available: {', '.join(available)})"
        super().__init__(message)
        self.key = key
        self.available = available or []


class RenderError(GoStarterError):
    """A template or condition could not be rendered.

    Points at a broken blueprint asset rather than bad user input, so the
    offending source file is always attached.
    """

    code = "GENERATION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        if source:
            message = f"{source}: {message}"
        super().__init__(message, cause=cause)
        self.source = source


class FileSystemError(GoStarterError):
    """Filesystem failure while materializing a project."""

    code = "FILESYSTEM_ERROR"

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        cause: BaseException | None = None,
    ) -> None:
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message, cause=cause)
        self.path = path


class ConfigError(GoStarterError):
    """The user settings file exists but cannot be used."""

    code = "CONFIG_ERROR"


class Cancelled(Exception):
    """The user aborted while being asked questions, or generation was cancelled."""

    def __init__(self, message: str = "operation cancelled") -> None:
        super().__init__(message)
