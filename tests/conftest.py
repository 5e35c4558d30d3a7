"""
pytest configuration and shared fixtures for gostarter tests.

Fixtures defined here are automatically available to all tests.

Fixtures
--------
catalog : Catalog
    The blueprints shipped with gostarter.

library_config : ProjectConfig
    A complete configuration for the ``library`` blueprint.

web_config : ProjectConfig
    A complete configuration for the ``web-api`` blueprint.

blueprint_tree : Path
    A small blueprint root written to a temporary directory, for edge
    cases the shipped blueprints do not exercise.

FakePrompter
    Scripted ``Prompter`` that records every question it is asked.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from gostarter.catalog import Catalog
from gostarter.errors import Cancelled
from gostarter.models import ProjectConfig
from gostarter.prompts import Choice


# =============================================================================
# Scripted Prompter
# =============================================================================

class FakePrompter:
    """
    Answers questions from a script and records what was asked.

    Parameters
    ----------
    answers : dict[str, object]
        Answers keyed by prompt text. A missing prompt falls back to the
        question's default (first choice for selects).

    cancel_on : str, optional
        Prompt text that raises ``Cancelled`` instead of answering.
    """

    def __init__(self, answers: dict[str, object] | None = None, cancel_on: str | None = None):
        self.answers = dict(answers or {})
        self.cancel_on = cancel_on
        self.asked: list[str] = []

    def _record(self, prompt: str) -> None:
        self.asked.append(prompt)
        if prompt == self.cancel_on:
            raise Cancelled()

    def ask_select(self, prompt: str, choices: Sequence[Choice], default: str | None = None) -> str:
        self._record(prompt)
        if prompt in self.answers:
            return self.answers[prompt]
        return default if default is not None else choices[0].value

    def ask_text(self, prompt: str, default: str = "", validate=None) -> str:
        self._record(prompt)
        answer = self.answers.get(prompt, default)
        if isinstance(answer, list):
            # Successive answers for a re-asked question
            return answer.pop(0)
        return answer

    def ask_confirm(self, prompt: str, default: bool = False) -> bool:
        self._record(prompt)
        return self.answers.get(prompt, default)

    def ask_checkbox(
        self, prompt: str, choices: Sequence[Choice], defaults: Sequence[str] = ()
    ) -> list[str]:
        self._record(prompt)
        return list(self.answers.get(prompt, defaults))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def catalog() -> Catalog:
    """Load the packaged blueprints."""
    return Catalog.load()


@pytest.fixture
def library_config() -> ProjectConfig:
    """A complete library configuration."""
    return ProjectConfig(
        name="demo",
        module_path="github.com/x/demo",
        type="library",
        go_version="1.21",
    )


@pytest.fixture
def web_config() -> ProjectConfig:
    """A complete web API configuration."""
    return ProjectConfig(
        name="my-api",
        module_path="github.com/x/my-api",
        type="web-api",
        architecture="standard",
        framework="gin",
        logger="zap",
        go_version="1.22",
    )


BLUEPRINT_TOML = '''
id = "tiny"
name = "Tiny"
description = "Two-file blueprint"
category = "Testing"
type = "tiny"

[[variables]]
name = "ProjectName"
required = true

[[variables]]
name = "Flavor"
default = "plain"
choices = ["plain", "spicy"]

[[files]]
source = "main.go.tmpl"
destination = "{{ ProjectName }}.go"

[[files]]
source = "zap.go.tmpl"
destination = "zap.go"
condition = "UseZap"

[[hooks]]
name = "echo"
command = ["echo", "done"]
'''


@pytest.fixture
def blueprint_tree(tmp_path: Path) -> Path:
    """
    Write a one-blueprint asset root.

    Returns
    -------
    Path
        The asset root; ``Catalog.load(root)`` reads it.
    """
    root = tmp_path / "blueprints"
    tiny = root / "tiny"
    tiny.mkdir(parents=True)
    (tiny / "blueprint.toml").write_text(BLUEPRINT_TOML)
    (tiny / "main.go.tmpl").write_text(
        "package {{ PackageName }}\n\n// Flavor: {{ Flavor }}\n"
    )
    (tiny / "zap.go.tmpl").write_text("package {{ PackageName }}\n\n// zap enabled\n")
    return root


# =============================================================================
# pytest Configuration
# =============================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
