"""
gostarter.generator - Project Generation
========================================

This module turns a completed ``ProjectConfig`` into a project on disk.

Architecture
------------
The generator follows a pipeline, tracked as a small state machine:

    VALIDATED → RESOLVED → RENDERING → WRITING → COMMITTED
                                          ↘
                                           ROLLED_BACK

    1. Validate the configuration (``gostarter.validation``)
    2. Resolve the blueprint (override, architecture, complexity variant)
    3. Render every included file in memory
    4. Write files to disk, recording each file and directory created
    5. Run post-generation hooks (``git init``, ``go mod tidy``, ``gofmt``)

The pipeline is designed to be:

- **All-or-nothing**: everything is rendered before the first write, and a
  failed or cancelled write removes every file and directory this run
  created
- **Deterministic**: the same config and blueprint give the same bytes
- **Forgiving about tooling**: a missing ``git`` or ``go`` binary only
  produces a warning; the project is usable without them

Usage Example
-------------
>>> from gostarter.catalog import Catalog
>>> generator = Generator(Catalog.load())
>>> result = generator.generate(config, GenerationOptions(Path("demo")))
>>> result.state
<GenerationState.COMMITTED: 'committed'>
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel

from gostarter.disclosure import select_blueprint_variant
from gostarter.errors import Cancelled, FileSystemError, ValidationError
from gostarter.renderer import Renderer
from gostarter.validation import validate_blueprint_variables, validate_config


if TYPE_CHECKING:
    from gostarter.catalog import Blueprint, Catalog, HookSpec
    from gostarter.models import GenerationOptions, ProjectConfig
    from gostarter.renderer import RenderedFile


logger = logging.getLogger(__name__)

# Seconds a single hook may run before it is abandoned
HOOK_TIMEOUT = 120


# =============================================================================
# Result Data Classes
# =============================================================================

class GenerationState(str, Enum):
    """Where a generation run currently is, or where it ended."""

    PENDING = "pending"
    VALIDATED = "validated"
    RESOLVED = "resolved"
    RENDERING = "rendering"
    WRITING = "writing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class GenerationResult:
    """
    Result of a project generation run.

    Attributes
    ----------
    success : bool
        Whether the project was committed (or, for a dry run, fully
        rendered).

    project_path : Path
        Project root.

    files_written : list[Path]
        Files created, in write order. For a dry run, the files that
        would have been created.

    errors : list[str]
        Errors that stopped the run.

    warnings : list[str]
        Non-fatal problems, mostly failed hooks.

    blueprint_id : str | None
        The blueprint that was resolved.

    state : GenerationState
        Final pipeline state.

    duration : float
        Wall-clock seconds spent in ``generate``.

    dry_run : bool
        Whether nothing was written on purpose.
    """

    success: bool
    project_path: Path
    files_written: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    blueprint_id: str | None = None
    state: GenerationState = GenerationState.PENDING
    duration: float = 0.0
    dry_run: bool = False


# =============================================================================
# Write Transaction
# =============================================================================

class WriteTransaction:
    """
    Records what a run creates so it can be undone.

    Parameters
    ----------
    root : Path
        Project root. Created by ``begin`` if it does not exist yet.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.created_root = False
        self.files: list[Path] = []
        self.directories: list[Path] = []

    def begin(self) -> None:
        if not self.root.exists():
            try:
                self.root.mkdir(parents=True)
            except OSError as e:
                raise FileSystemError("cannot create project directory", path=self.root, cause=e) from e
            self.created_root = True

    def _ensure_parent(self, path: Path) -> None:
        missing: list[Path] = []
        parent = path.parent
        while parent != self.root and not parent.exists():
            missing.append(parent)
            parent = parent.parent
        for directory in reversed(missing):
            directory.mkdir()
            self.directories.append(directory)

    def write(self, rendered: RenderedFile) -> Path:
        """Write one rendered file below the root."""
        path = self.root / rendered.destination
        try:
            self._ensure_parent(path)
            # Recorded first: a failed write may still leave an empty file.
            self.files.append(path)
            path.write_text(rendered.content, encoding="utf-8")
            if rendered.executable:
                path.chmod(0o755)
        except (OSError, UnicodeError) as e:
            raise FileSystemError("failed to write file", path=path, cause=e) from e
        return path

    def rollback(self) -> list[str]:
        """
        Remove everything this transaction created.

        Returns
        -------
        list[str]
            Paths that could not be removed. Empty on a clean rollback.
        """
        leftovers: list[str] = []
        if self.created_root:
            try:
                shutil.rmtree(self.root)
            except OSError as e:
                leftovers.append(f"{self.root}: {e}")
            return leftovers

        for path in reversed(self.files):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                leftovers.append(f"{path}: {e}")
        for directory in reversed(self.directories):
            try:
                directory.rmdir()
            except OSError as e:
                leftovers.append(f"{directory}: {e}")
        return leftovers


# =============================================================================
# Hooks
# =============================================================================

def init_git_repository(project_dir: Path) -> bool:
    """
    Run ``git init`` in the project directory.

    Returns
    -------
    bool
        True if the repository was initialized, False if git is missing
        or the command failed. Never raises.
    """
    if shutil.which("git") is None:
        return False
    try:
        subprocess.run(
            ["git", "init"],
            cwd=project_dir,
            capture_output=True,
            check=True,
            timeout=HOOK_TIMEOUT,
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
        return False
    return True


def run_hook(hook: HookSpec, project_dir: Path) -> str | None:
    """
    Run one blueprint hook.

    Returns
    -------
    str | None
        ``None`` on success, otherwise a warning message. Hooks whose
        executable is not installed are skipped with a warning.
    """
    executable = hook.command[0]
    if shutil.which(executable) is None:
        return f"Skipped '{hook.name}': {executable} not found on PATH"
    try:
        subprocess.run(
            list(hook.command),
            cwd=project_dir,
            capture_output=True,
            check=True,
            timeout=HOOK_TIMEOUT,
        )
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or b"").decode(errors="replace").strip()
        return f"Hook '{hook.name}' failed with exit code {e.returncode}" + (
            f": {detail}" if detail else ""
        )
    except subprocess.TimeoutExpired:
        return f"Hook '{hook.name}' timed out after {HOOK_TIMEOUT}s"
    except OSError as e:
        return f"Hook '{hook.name}' could not run: {e}"
    return None


# =============================================================================
# Generator
# =============================================================================

class Generator:
    """
    Materializes projects from a catalog.

    Parameters
    ----------
    catalog : Catalog
        Where blueprints are resolved.

    renderer : Renderer, optional
        Renderer bound to the same catalog. Created if omitted.

    cancel_event : threading.Event, optional
        Checked between file writes; once set the run rolls back and
        raises ``Cancelled``.

    console : Console, optional
        Progress output for verbose runs.
    """

    def __init__(
        self,
        catalog: Catalog,
        renderer: Renderer | None = None,
        cancel_event: threading.Event | None = None,
        console: Console | None = None,
    ) -> None:
        self.catalog = catalog
        self.renderer = renderer or Renderer(catalog)
        self.cancel_event = cancel_event or threading.Event()
        self.console = console or Console()

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(self, config: ProjectConfig) -> Blueprint:
        """
        Pick the blueprint for a configuration.

        Order: an explicit ``variables["blueprint_id"]``, then the
        architecture-specific blueprint when an architecture other than
        ``standard`` is set, then the complexity variant of the type.

        Raises
        ------
        BlueprintNotFoundError
            If nothing matches.
        ValidationError
            If the explicit blueprint is for another project type.
        """
        override = config.blueprint_override
        if override:
            blueprint = self.catalog.get_by_id(override)
            if config.type and blueprint.type != config.type:
                raise ValidationError(
                    f"blueprint '{override}' is for {blueprint.type} projects, not {config.type}",
                    field="blueprint_id",
                )
            return blueprint

        if config.architecture and config.architecture != "standard":
            return self.catalog.find(config.type, config.architecture)

        variant = select_blueprint_variant(config.type, config.complexity)
        if self.catalog.exists(variant):
            return self.catalog.get_by_id(variant)

        candidates = self.catalog.get_by_type(config.type)
        standard = [b for b in candidates if b.architecture == "standard"]
        return (standard or candidates)[0]

    def _prepare(self, config: ProjectConfig, result: GenerationResult) -> list[RenderedFile]:
        validate_config(config)
        result.state = GenerationState.VALIDATED

        blueprint = self.resolve(config)
        result.blueprint_id = blueprint.id
        validate_blueprint_variables(blueprint, self.renderer.build_context(config, blueprint))
        result.state = GenerationState.RESOLVED
        logger.debug("Resolved blueprint %s for type %s", blueprint.id, config.type)

        result.state = GenerationState.RENDERING
        return self.renderer.render_blueprint(blueprint, config)

    @staticmethod
    def _check_output_path(path: Path) -> None:
        if not path.exists():
            return
        if not path.is_dir():
            raise ValidationError(f"output path '{path}' is not a directory", field="output_path")
        if any(path.iterdir()):
            raise ValidationError(
                f"output directory '{path}' already exists and is not empty",
                field="output_path",
            )

    # -------------------------------------------------------------------------
    # Entry Points
    # -------------------------------------------------------------------------

    def generate(self, config: ProjectConfig, options: GenerationOptions) -> GenerationResult:
        """
        Generate a project.

        Parameters
        ----------
        config : ProjectConfig
            Completed configuration. A deep copy is used; the caller's
            instance is never modified.

        options : GenerationOptions
            Output path and run switches.

        Returns
        -------
        GenerationResult
            Outcome of a committed (or dry) run.

        Raises
        ------
        ValidationError
            Bad configuration or non-empty output directory.
        BlueprintNotFoundError
            No blueprint for the configuration.
        RenderError
            A blueprint template is broken. Nothing was written.
        FileSystemError
            A write failed. Everything written has been rolled back.
        Cancelled
            The cancel event was set while writing. Rolled back.

        Any other exception raised while writing, such as
        ``KeyboardInterrupt``, is re-raised after the same rollback.
        """
        started = time.perf_counter()
        config = config.model_copy(deep=True)
        project_path = Path(options.output_path)
        result = GenerationResult(
            success=False, project_path=project_path, dry_run=options.dry_run
        )

        try:
            rendered = self._prepare(config, result)
            self._check_output_path(project_path)
        except Exception as e:
            result.errors.append(str(e))
            raise

        if options.verbose:
            self.console.print(
                Panel(
                    f"[bold blue]Creating project:[/] [green]{config.name}[/]\n"
                    f"[dim]Blueprint: {result.blueprint_id} | "
                    f"Go: {config.resolved_go_version} | Files: {len(rendered)}[/]",
                    title="[bold]gostarter[/]",
                    border_style="blue",
                )
            )

        if options.dry_run:
            result.files_written = [project_path / f.destination for f in rendered]
            result.success = True
            result.duration = time.perf_counter() - started
            return result

        self._write(rendered, project_path, result, verbose=options.verbose)
        self._run_hooks(config, options, result)

        result.success = True
        result.duration = time.perf_counter() - started
        logger.debug(
            "Generated %d files in %s (%.2fs)",
            len(result.files_written),
            project_path,
            result.duration,
        )
        return result

    def _write(
        self,
        rendered: list[RenderedFile],
        project_path: Path,
        result: GenerationResult,
        *,
        verbose: bool,
    ) -> None:
        result.state = GenerationState.WRITING
        transaction = WriteTransaction(project_path)
        try:
            transaction.begin()
            for file in rendered:
                if self.cancel_event.is_set():
                    raise Cancelled("generation cancelled")
                transaction.write(file)
                if verbose:
                    self.console.print(f"  Created {file.destination}")
        except BaseException as e:
            # Includes KeyboardInterrupt; nothing partial may survive.
            result.errors.append(str(e) or type(e).__name__)
            leftovers = transaction.rollback()
            result.state = GenerationState.ROLLED_BACK
            result.files_written = []
            logger.warning("Generation rolled back: %s", e)
            for leftover in leftovers:
                result.warnings.append(f"Could not remove {leftover}")
                logger.warning("Rollback left %s behind", leftover)
            raise

        result.files_written = list(transaction.files)
        result.state = GenerationState.COMMITTED

    def _run_hooks(
        self,
        config: ProjectConfig,
        options: GenerationOptions,
        result: GenerationResult,
    ) -> None:
        project_path = result.project_path

        if not options.no_git:
            if init_git_repository(project_path):
                if options.verbose:
                    self.console.print("  [green]✓[/] Git repository initialized")
            else:
                message = "Git initialization failed (git may not be installed)"
                result.warnings.append(message)
                logger.warning(message)

        blueprint = self.catalog.get_by_id(result.blueprint_id)
        for hook in blueprint.hooks:
            warning = run_hook(hook, project_path)
            if warning is None:
                if options.verbose:
                    self.console.print(f"  [green]✓[/] {hook.name}")
                continue
            result.warnings.append(warning)
            logger.warning(warning)

    def preview(self, config: ProjectConfig, options: GenerationOptions) -> list[str]:
        """
        List the files a run would create, without writing anything.

        Returns
        -------
        list[str]
            Paths relative to the project root, in write order.
        """
        result = self.generate(
            config, replace(options, dry_run=True, no_git=True, verbose=False)
        )
        return [path.relative_to(result.project_path).as_posix() for path in result.files_written]

    def generate_in_memory(self, config: ProjectConfig) -> dict[str, str]:
        """
        Render a project into a ``{destination: content}`` mapping.

        Validation and resolution are the same as for ``generate``; the
        output directory is never consulted.
        """
        config = config.model_copy(deep=True)
        result = GenerationResult(success=False, project_path=Path(config.name))
        rendered = self._prepare(config, result)
        return {file.destination: file.content for file in rendered}
