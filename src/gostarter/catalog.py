"""
gostarter.catalog - Blueprint Catalog
=====================================

A *blueprint* is a named, versionless description of one kind of Go
project: which template files it is made of, under which conditions each
file is included, which variables it understands and which post-generation
hooks it wants run.

Blueprints live on disk as one directory each:

    blueprints/
    ├── library/
    │   ├── blueprint.toml
    │   ├── go.mod.tmpl
    │   └── ...
    └── web-api/
        ├── blueprint.toml
        └── ...

The catalog reads every ``*/blueprint.toml`` under its root once, validates
it into an immutable ``Blueprint`` and answers lookups from memory. An
explicit ``Catalog`` instance is handed to the renderer and the generator;
there is no module-level registry.

Usage Example
-------------
>>> catalog = Catalog.load()
>>> catalog.get_by_id("library").type
'library'
>>> [b.id for b in catalog.get_by_type("cli")]
['cli', 'cli-simple']
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import NamedTuple

import tomli
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from gostarter.errors import BlueprintNotFoundError, ConfigError


logger = logging.getLogger(__name__)

# Packaged blueprint assets
DEFAULT_BLUEPRINT_ROOT = Path(__file__).parent / "blueprints"

BLUEPRINT_FILE = "blueprint.toml"

# Human-readable labels for project types, used by menus
TYPE_LABELS = {
    "web-api": "Web API",
    "cli": "CLI Application",
    "library": "Library",
    "lambda": "AWS Lambda",
    "microservice": "Microservice",
}


# =============================================================================
# Blueprint Data Models
# =============================================================================

class VariableSpec(BaseModel):
    """
    One variable a blueprint understands.

    Attributes
    ----------
    name : str
        Context key, e.g. ``ProjectName`` or ``DatabaseDriver``.

    type : str
        Informational type (``string``, ``bool``, ``list``).

    description : str
        Shown in ``gostarter list --verbose`` style output.

    default : str
        Value used when the configuration leaves the variable unset.

    choices : list[str]
        Allowed values. Empty means unrestricted.

    required : bool
        Generation fails when a required variable resolves to an empty value.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "string"
    description: str = ""
    default: str = ""
    choices: tuple[str, ...] = ()
    required: bool = False


class TemplateFileEntry(BaseModel):
    """
    One file of a blueprint.

    ``destination`` may contain placeholders (``{{ ProjectName }}.go``) and
    ``condition`` is a boolean expression over the rendering context, e.g.
    ``Logger == "zap"`` or ``"docker" in DeploymentTargets``. An empty
    condition means the file is always included.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    destination: str
    condition: str = ""
    executable: bool = False


class HookSpec(BaseModel):
    """A command run inside the generated project after all files are written."""

    model_config = ConfigDict(frozen=True)

    name: str
    command: tuple[str, ...]


class Blueprint(BaseModel):
    """
    Immutable, validated blueprint definition.

    Attributes
    ----------
    id : str
        Unique identifier (``web-api``, ``cli-simple``...).

    name : str
        Display name.

    description : str
        One-line summary.

    category : str
        Menu grouping.

    type : str
        Project type this blueprint produces.

    architecture : str
        Architecture pattern (``standard`` unless stated otherwise).

    variables : tuple[VariableSpec, ...]
        Declared variables, in declaration order.

    files : tuple[TemplateFileEntry, ...]
        Template files, in render order.

    hooks : tuple[HookSpec, ...]
        Post-generation hooks, in run order.

    root : Path
        Directory holding ``blueprint.toml`` and the template files.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category: str = "General"
    type: str
    architecture: str = "standard"
    variables: tuple[VariableSpec, ...] = ()
    files: tuple[TemplateFileEntry, ...] = Field(min_length=1)
    hooks: tuple[HookSpec, ...] = ()
    root: Path

    @property
    def defaults(self) -> dict[str, str]:
        """Declared variable defaults, skipping empty ones."""
        return {v.name: v.default for v in self.variables if v.default}

    @property
    def required_variables(self) -> list[str]:
        return [v.name for v in self.variables if v.required]

    def template_path(self, entry: TemplateFileEntry) -> str:
        """Loader-relative path of a file entry's template (always ``/``)."""
        return f"{self.root.name}/{entry.source}"


class MenuEntry(NamedTuple):
    """A selectable menu line; the value is the id, never the label."""

    category: str
    blueprint_id: str
    label: str


# =============================================================================
# Loading
# =============================================================================

def load_blueprint(directory: Path) -> Blueprint:
    """
    Read and validate one blueprint directory.

    Parameters
    ----------
    directory : Path
        Directory containing ``blueprint.toml``.

    Returns
    -------
    Blueprint
        The validated blueprint.

    Raises
    ------
    ConfigError
        If the definition is not valid TOML, fails validation, or refers
        to a template file that does not exist.
    """
    definition = directory / BLUEPRINT_FILE
    try:
        with definition.open("rb") as f:
            data = tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"invalid blueprint definition {definition}", cause=e) from e

    data["root"] = directory
    try:
        blueprint = Blueprint.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"invalid blueprint definition {definition}", cause=e) from e

    for entry in blueprint.files:
        if not (directory / entry.source).is_file():
            raise ConfigError(
                f"blueprint '{blueprint.id}' references missing template '{entry.source}'"
            )

    return blueprint


# =============================================================================
# Catalog
# =============================================================================

class Catalog:
    """
    Read-only registry of blueprints.

    Parameters
    ----------
    blueprints : list[Blueprint]
        Blueprints to register. Ids must be unique.

    root : Path
        Common asset root; the renderer loads templates relative to it.

    Raises
    ------
    ConfigError
        If two blueprints share an id.
    """

    def __init__(self, blueprints: list[Blueprint], root: Path) -> None:
        self.root = root
        self._by_id: dict[str, Blueprint] = {}
        for blueprint in blueprints:
            if blueprint.id in self._by_id:
                raise ConfigError(f"duplicate blueprint id '{blueprint.id}'")
            self._by_id[blueprint.id] = blueprint
        self._ordered = sorted(self._by_id.values(), key=lambda b: (b.type, b.id))

    @classmethod
    def load(cls, root: Path | None = None) -> Catalog:
        """
        Load every blueprint found directly under ``root``.

        Parameters
        ----------
        root : Path, optional
            Asset root. Defaults to the blueprints shipped with gostarter.
        """
        root = Path(root) if root is not None else DEFAULT_BLUEPRINT_ROOT
        blueprints = [
            load_blueprint(definition.parent)
            for definition in sorted(root.glob(f"*/{BLUEPRINT_FILE}"))
        ]
        logger.debug("Loaded %d blueprints from %s", len(blueprints), root)
        return cls(blueprints, root)

    def __iter__(self) -> Iterator[Blueprint]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def list(self) -> list[Blueprint]:
        """All blueprints, ordered by type then id."""
        return list(self._ordered)

    def exists(self, blueprint_id: str) -> bool:
        return blueprint_id in self._by_id

    def get_by_id(self, blueprint_id: str) -> Blueprint:
        """
        Look up a blueprint by id.

        Raises
        ------
        BlueprintNotFoundError
            If no blueprint has that id.
        """
        try:
            return self._by_id[blueprint_id]
        except KeyError:
            raise BlueprintNotFoundError(
                blueprint_id, available=sorted(self._by_id)
            ) from None

    def get_by_type(self, project_type: str) -> list[Blueprint]:
        """
        All blueprints producing a project type.

        Raises
        ------
        BlueprintNotFoundError
            If the type has no blueprint.
        """
        matches = [b for b in self._ordered if b.type == project_type]
        if not matches:
            raise BlueprintNotFoundError(project_type, available=self.types())
        return matches

    def types(self) -> list[str]:
        """Distinct project types, sorted."""
        return sorted({b.type for b in self._ordered})

    def architectures_for(self, project_type: str) -> list[str]:
        """
        Distinct architectures offered for a project type.

        ``standard`` comes first when present. Unknown types yield an
        empty list rather than an error, so menus can probe freely.
        """
        archs = {b.architecture for b in self._ordered if b.type == project_type}
        return sorted(archs, key=lambda a: (a != "standard", a))

    def find(self, project_type: str, architecture: str) -> Blueprint:
        """
        The blueprint for a (type, architecture) pair.

        When several blueprints match (variants such as ``cli`` and
        ``cli-simple``), the one whose id equals the type wins.

        Raises
        ------
        BlueprintNotFoundError
            If nothing matches.
        """
        matches = [
            b for b in self.get_by_type(project_type) if b.architecture == architecture
        ]
        if not matches:
            raise BlueprintNotFoundError(
                f"{project_type}/{architecture}",
                available=[f"{project_type}/{a}" for a in self.architectures_for(project_type)],
            )
        for blueprint in matches:
            if blueprint.id == project_type:
                return blueprint
        return matches[0]

    # -------------------------------------------------------------------------
    # Menus
    # -------------------------------------------------------------------------

    def menu_entries(self) -> list[MenuEntry]:
        """One entry per blueprint, grouped by category."""
        entries = [
            MenuEntry(b.category, b.id, f"{b.name} - {b.description}" if b.description else b.name)
            for b in self._ordered
        ]
        return sorted(entries, key=lambda e: (e.category, e.blueprint_id))

    def type_entries(self) -> list[MenuEntry]:
        """
        One entry per project type, for the "what are you building" menu.

        The entry's ``blueprint_id`` is the project type itself.
        """
        entries = []
        for project_type in self.types():
            blueprint = self._by_id.get(project_type) or self.get_by_type(project_type)[0]
            label = TYPE_LABELS.get(project_type, blueprint.name)
            if blueprint.description:
                label = f"{label} - {blueprint.description}"
            entries.append(MenuEntry(blueprint.category, project_type, label))
        return entries
