"""
gostarter.cli - Command Line Interface
======================================

This module provides the main CLI entry point for gostarter using Typer.
It wires the pieces together: flags become a partial ``ProjectConfig``,
the disclosure engine decides how much to ask, the builder asks, and the
generator writes the project.

Commands
--------
new     Create a new Go project (interactive unless ``--yes``)
list    Show the available blueprints

Progressive Help
----------------
``gostarter new --help`` lists only the essential flags. Advanced flags
(``--architecture``, ``--database-driver``...) are accepted at any time
but only *listed* when ``--advanced`` or ``--complexity advanced|expert``
appears on the same command line.

Usage Examples
--------------
```bash
# Interactive mode
gostarter new

# Non-interactive
gostarter new my-api --type web-api --module github.com/me/my-api \\
    --framework gin --logger zap --yes

# Everything on the table
gostarter new --advanced --help
```
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import click
import typer
from pydantic import ValidationError as PydanticValidationError
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from typer.core import TyperCommand

from gostarter import __version__
from gostarter.builder import ConfigurationBuilder
from gostarter.catalog import Catalog
from gostarter.disclosure import (
    advanced_only_flags,
    describe_complexity,
    determine_disclosure_mode,
    parse_complexity,
    recommended_complexity,
)
from gostarter.errors import Cancelled, GoStarterError
from gostarter.generator import Generator
from gostarter.models import (
    ComplexityLevel,
    DisclosureMode,
    FrameworkKind,
    GenerationOptions,
    GoVersion,
    LoggerKind,
    ProjectConfig,
)
from gostarter.prompts import create_prompter
from gostarter.settings import Profile, UserSettings


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="gostarter",
    help="Generate production-ready Go projects from blueprints.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Console for rich output
console = Console()

_RAW_ARGS_KEY = "gostarter.raw_args"
_HELP_KEY = "gostarter.formatting_help"


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route library logging through rich on stderr."""
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# =============================================================================
# Progressive Help
# =============================================================================

def help_mode(args: list[str]) -> DisclosureMode:
    """
    Disclosure mode implied by a raw command line, for help output.

    Malformed ``--complexity`` values are ignored here; they are reported
    when the command actually runs.
    """
    complexity: ComplexityLevel | None = None
    for index, arg in enumerate(args):
        value = ""
        if arg == "--complexity" and index + 1 < len(args):
            value = args[index + 1]
        elif arg.startswith("--complexity="):
            value = arg.split("=", 1)[1]
        if value:
            try:
                complexity = parse_complexity(value)
            except GoStarterError:
                continue
    return determine_disclosure_mode(
        basic="--basic" in args,
        advanced="--advanced" in args,
        complexity=complexity,
    )


class ProgressiveCommand(TyperCommand):
    """
    A Typer command whose help hides advanced options in basic mode.

    Parsing always sees every option; only the help formatter gets the
    filtered list.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta[_RAW_ARGS_KEY] = list(args)
        return super().parse_args(ctx, args)

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        ctx.meta[_HELP_KEY] = True
        try:
            super().format_help(ctx, formatter)
        finally:
            ctx.meta.pop(_HELP_KEY, None)

    def get_params(self, ctx: click.Context) -> list[click.Parameter]:
        params = super().get_params(ctx)
        if not ctx.meta.get(_HELP_KEY):
            return params
        if help_mode(ctx.meta.get(_RAW_ARGS_KEY, [])) is DisclosureMode.ADVANCED:
            return params
        hidden = {flag.value for flag in advanced_only_flags()}
        return [p for p in params if not hidden.intersection(p.opts)]


# =============================================================================
# Version Callback
# =============================================================================

def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(Panel(
            f"[bold green]gostarter[/] version [cyan]{__version__}[/]\n\n"
            f"[dim]Go project generator[/]",
            border_style="green",
        ))
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    [bold]gostarter[/] - Go project generator.

    [bold]Quick Start:[/]

        gostarter new my-api

    [bold]Non-interactive:[/]

        gostarter new my-cli --type cli --module github.com/me/my-cli --yes
    """


# =============================================================================
# Non-Interactive Defaults
# =============================================================================

def apply_defaults(config: ProjectConfig, profile: Profile) -> ProjectConfig:
    """
    Fill whatever is still missing without asking, for ``--yes``.

    Profile defaults are used when they fit the project type; otherwise
    the first recommended choice is taken. Name and module path have no
    default and are left for validation to report.
    """
    config = config.model_copy(deep=True)
    defaults = profile.defaults

    if config.go_version is None:
        config.go_version = defaults.go_version or GoVersion.AUTO.value

    frameworks = FrameworkKind.for_project_type(config.type)
    if config.framework is None and frameworks:
        preferred = defaults.framework.lower()
        config.framework = preferred if preferred in {f.value for f in frameworks} else frameworks[0]

    if config.logger is None:
        if config.type != "library" and defaults.logger:
            config.logger = defaults.logger
        else:
            config.logger = LoggerKind.SLOG

    if config.type == "web-api" and not config.architecture and defaults.architecture:
        config.architecture = defaults.architecture

    return config


def print_summary(config: ProjectConfig, output_path: Path) -> None:
    """Show the configuration about to be generated."""
    table = Table(title="Project Configuration", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Name", config.name)
    table.add_row("Module", config.module_path)
    table.add_row("Type", config.type)
    if config.architecture:
        table.add_row("Architecture", config.architecture)
    if config.framework is not None:
        table.add_row("Framework", config.framework.value)
    if config.logger is not None:
        table.add_row("Logger", config.logger.value)
    table.add_row("Go", config.resolved_go_version)
    table.add_row("Features", ", ".join(config.features.enabled_features) or "none")
    table.add_row("Output", str(output_path))

    console.print()
    console.print(table)
    console.print()


# =============================================================================
# New Command - Create a New Project
# =============================================================================

@app.command(cls=ProgressiveCommand)
def new(
    project_name: Annotated[
        str | None,
        typer.Argument(metavar="NAME", help="Name of the project to create"),
    ] = None,
    # Essential options
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Project name (alternative to NAME)"),
    ] = None,
    project_type: Annotated[
        str | None,
        typer.Option("--type", "-t", help="Project type: web-api, cli, library, lambda, microservice"),
    ] = None,
    module: Annotated[
        str | None,
        typer.Option("--module", "-m", help="Go module path, e.g. github.com/user/project"),
    ] = None,
    framework: Annotated[
        str | None,
        typer.Option("--framework", "-f", help="Framework: gin, echo, fiber, chi, cobra, stdlib"),
    ] = None,
    logger_: Annotated[
        str | None,
        typer.Option("--logger", "-l", help="Logger: slog, zap, logrus, zerolog"),
    ] = None,
    go_version: Annotated[
        str | None,
        typer.Option("--go-version", help="Go version: auto, 1.23, 1.22, 1.21"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Directory to create the project in (default: current directory)"),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only print errors"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print debug logging"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be generated without writing anything"),
    ] = False,
    no_git: Annotated[
        bool,
        typer.Option("--no-git", help="Skip git initialization"),
    ] = False,
    # Disclosure controls
    basic: Annotated[
        bool,
        typer.Option("--basic", help="Only ask the essential questions"),
    ] = False,
    advanced: Annotated[
        bool,
        typer.Option("--advanced", help="Ask about databases, auth, deployment and more"),
    ] = False,
    complexity: Annotated[
        str | None,
        typer.Option("--complexity", help="Complexity: simple, standard, advanced, expert"),
    ] = None,
    # Advanced options
    architecture: Annotated[
        str | None,
        typer.Option("--architecture", help="Architecture: standard, clean, hexagonal"),
    ] = None,
    database_driver: Annotated[
        list[str] | None,
        typer.Option("--database-driver", help="Database: postgres, mysql, mongodb, sqlite, redis (repeatable)"),
    ] = None,
    database_orm: Annotated[
        str | None,
        typer.Option("--database-orm", help="Data access: gorm, raw"),
    ] = None,
    auth_type: Annotated[
        str | None,
        typer.Option("--auth-type", help="Authentication: jwt, oauth2, session, api-key"),
    ] = None,
    deployment_target: Annotated[
        list[str] | None,
        typer.Option("--deployment-target", help="Deployment: docker, kubernetes, github-actions (repeatable)"),
    ] = None,
    # Interaction control
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Never prompt; use defaults for anything missing"),
    ] = False,
    plain: Annotated[
        bool,
        typer.Option("--plain", help="Use simple line-based prompts"),
    ] = False,
    settings_file: Annotated[
        Path | None,
        typer.Option("--config", help="Settings file (default: ~/.gostarter.toml)"),
    ] = None,
) -> None:
    """
    Create a new Go project.

    [bold]Examples:[/]

        # Interactive mode (prompts for anything missing)
        gostarter new

        # Web API with Gin and zap, no questions asked
        gostarter new my-api --type web-api --module github.com/me/my-api --framework gin --logger zap --yes

        # Single-file CLI
        gostarter new tool --type cli --complexity simple

        # See every option
        gostarter new --advanced --help
    """
    configure_logging(verbose=verbose, quiet=quiet)

    try:
        level = parse_complexity(complexity) if complexity else None
        mode = determine_disclosure_mode(basic=basic, advanced=advanced, complexity=level)
        settings = UserSettings.load(settings_file)

        values = {
            "name": name or project_name,
            "type": project_type,
            "module_path": module,
            "framework": framework,
            "logger": logger_,
            "go_version": go_version,
            "architecture": architecture,
        }
        config = ProjectConfig(**{k: v for k, v in values.items() if v is not None})
        if database_driver:
            config.features.database.drivers = database_driver
        if database_orm:
            config.features.database.orm = database_orm
        if auth_type:
            config.features.authentication.type = auth_type
        if deployment_target:
            config.features.deployment.targets = deployment_target
        if level is not None:
            config.variables = {**config.variables, "complexity": level.value}
        settings.apply_to(config)

        catalog = Catalog.load()
        if yes:
            config = apply_defaults(config, settings.active_profile())
        else:
            if level is not None and not quiet:
                console.print(f"[dim]Complexity: {level.value} - {describe_complexity(level)}[/]")
            elif not (quiet or basic or advanced):
                # No settings file yet means a first run
                suggestion = recommended_complexity(first_time=not settings.profiles)
                console.print(
                    f"[dim]Suggested: --complexity {suggestion.value} "
                    f"({describe_complexity(suggestion)})[/]"
                )
            prompter = create_prompter(enhanced=not plain, console=console)
            builder = ConfigurationBuilder(
                prompter, catalog, defaults=settings.active_profile().defaults
            )
            config = builder.complete(config, mode, level)

        output_path = (output_dir or Path.cwd()) / config.name

        if not yes and not quiet:
            print_summary(config, output_path)
            if not prompter.ask_confirm("Create project with these settings?", default=True):
                raise Cancelled()

        generator = Generator(catalog, console=console)
        options = GenerationOptions(
            output_path=output_path,
            dry_run=dry_run,
            no_git=no_git,
            verbose=not quiet,
        )
        result = generator.generate(config, options)

    except Cancelled:
        rprint("[yellow]Cancelled.[/] Nothing was written.")
        raise typer.Exit(1)
    except PydanticValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            rprint(f"[red]Error:[/] invalid value for {field}: {error['msg']}")
        raise typer.Exit(1)
    except GoStarterError as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    for warning in result.warnings:
        if not quiet:
            console.print(f"[yellow]⚠[/] {warning}")

    if quiet:
        return

    if result.dry_run:
        console.print()
        console.print("[bold]Dry run[/], these files would be created:")
        for path in result.files_written:
            console.print(f"  {path.relative_to(result.project_path).as_posix()}")
        return

    console.print()
    console.print(
        Panel(
            f"[bold green]✨ Project created successfully![/]\n\n"
            f"[dim]Location:[/] {result.project_path}\n"
            f"[dim]Blueprint:[/] {result.blueprint_id}\n\n"
            f"[bold]Next steps:[/]\n"
            f"  cd {config.name}\n"
            f"  go mod tidy\n"
            f"  go test ./...",
            title="[bold green]Success[/]",
            border_style="green",
        )
    )


# =============================================================================
# List Command
# =============================================================================

@app.command("list")
def list_blueprints(
    project_type: Annotated[
        str | None,
        typer.Option("--type", "-t", help="Only show blueprints for this project type"),
    ] = None,
) -> None:
    """
    List the available blueprints.
    """
    try:
        catalog = Catalog.load()
        blueprints = catalog.get_by_type(project_type) if project_type else catalog.list()
    except GoStarterError as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    table = Table(title="Blueprints")
    table.add_column("Category", style="magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Architecture")
    table.add_column("Description", style="dim")

    for blueprint in blueprints:
        table.add_row(
            blueprint.category,
            blueprint.id,
            blueprint.type,
            blueprint.architecture,
            blueprint.description,
        )

    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    app()
