"""
gostarter - Go Project Generator
================================

A CLI tool and library that creates ready-to-build Go projects from
blueprints: web APIs, CLIs, libraries, microservices and AWS Lambda
functions.

Features
--------
- **Blueprints**: Each project type is a directory of Jinja2 templates
  described by a ``blueprint.toml``
- **Progressive Disclosure**: Six questions for beginners, the full set of
  database, auth and deployment options with ``--advanced``
- **Closed Choices**: Frameworks and loggers are enums, validated once
- **All-or-Nothing Writes**: A failed generation leaves nothing behind

Quick Start
-----------
```bash
# Create a new project interactively
gostarter new

# Or with options
gostarter new my-api --type web-api --module github.com/me/my-api --yes
```

Example
-------
>>> from pathlib import Path
>>> from gostarter import Catalog, Generator, GenerationOptions, ProjectConfig
>>> config = ProjectConfig(name="demo", module_path="github.com/x/demo", type="library")
>>> result = Generator(Catalog.load()).generate(config, GenerationOptions(Path("demo")))

Architecture
------------
The package is organized into these main modules:

- ``cli``: Typer-based command line interface
- ``catalog``: Blueprint loading and lookup
- ``models``: Pydantic models for configuration
- ``renderer``: Jinja2 rendering and file conditions
- ``disclosure``: Basic/advanced mode and blueprint variants
- ``builder``: Interactive completion of a configuration
- ``prompts``: questionary and line-based question backends
- ``validation``: Input rules shared by prompts and the generator
- ``generator``: Validation, rendering, writing, rollback and hooks
- ``settings``: ``~/.gostarter.toml`` user profiles
- ``errors``: Error taxonomy
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__license__ = "MIT"

# =============================================================================
# Public API Exports
# =============================================================================

from gostarter.catalog import Blueprint, Catalog
from gostarter.generator import GenerationResult, Generator
from gostarter.models import GenerationOptions, ProjectConfig


__all__ = [
    # Catalog
    "Blueprint",
    "Catalog",
    # Configuration models
    "GenerationOptions",
    "ProjectConfig",
    # Generation
    "GenerationResult",
    "Generator",
    # Version info
    "__version__",
]
