"""
Tests for gostarter.generator
=============================

This module contains tests for project generation: blueprint resolution,
writing, rollback, hooks and the dry-run/in-memory entry points.

Test Organization
-----------------
- TestResolve: Tests for blueprint resolution
- TestGenerate: End-to-end generation tests
- TestOutputPath: Tests for output directory checks
- TestRollback: Tests for all-or-nothing writes
- TestHooks: Tests for git init and blueprint hooks
- TestPreview: Tests for dry runs, preview and in-memory rendering
"""

import io
import os
import subprocess
import threading
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console

from gostarter.catalog import Catalog, HookSpec
from gostarter.errors import (
    BlueprintNotFoundError,
    Cancelled,
    FileSystemError,
    ValidationError,
)
from gostarter.generator import (
    GenerationState,
    Generator,
    WriteTransaction,
    init_git_repository,
    run_hook,
)
from gostarter.models import GenerationOptions, ProjectConfig


LIBRARY_FILES = {
    "go.mod",
    "demo.go",
    "demo_test.go",
    "doc.go",
    "examples/basic/main.go",
    "README.md",
    "Makefile",
    ".gitignore",
    "LICENSE",
}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def generator(catalog: Catalog) -> Generator:
    """Generator with console output captured."""
    return Generator(catalog, console=Console(file=io.StringIO()))


@pytest.fixture
def no_hooks():
    """Make every hook succeed without running anything."""
    with patch("gostarter.generator.run_hook", return_value=None) as mock_hook:
        yield mock_hook


def _relative(paths: list[Path], root: Path) -> set[str]:
    return {p.relative_to(root).as_posix() for p in paths}


# =============================================================================
# Resolution Tests
# =============================================================================

class TestResolve:
    """Tests for Generator.resolve."""

    def test_standard(self, generator: Generator, web_config: ProjectConfig) -> None:
        """Test that the standard architecture picks the type's blueprint."""
        assert generator.resolve(web_config).id == "web-api"

    def test_no_architecture(self, generator: Generator, library_config: ProjectConfig) -> None:
        """Test that an unset architecture falls back to the standard blueprint."""
        assert generator.resolve(library_config).id == "library"

    def test_architecture(self, generator: Generator, web_config: ProjectConfig) -> None:
        """Test architecture-specific blueprints."""
        web_config.architecture = "hexagonal"
        assert generator.resolve(web_config).id == "web-api-hexagonal"

    def test_complexity_variant(self, generator: Generator) -> None:
        """Test that a simple CLI resolves to the single-file blueprint."""
        config = ProjectConfig(type="cli", variables={"complexity": "simple"})
        assert generator.resolve(config).id == "cli-simple"

    def test_override(self, generator: Generator, web_config: ProjectConfig) -> None:
        """Test that an explicit blueprint id wins."""
        web_config.variables = {"blueprint_id": "web-api-clean"}
        assert generator.resolve(web_config).id == "web-api-clean"

    def test_override_for_other_type(
        self, generator: Generator, web_config: ProjectConfig
    ) -> None:
        """Test that an explicit blueprint must match the project type."""
        web_config.variables = {"blueprint_id": "cli-simple"}

        with pytest.raises(ValidationError) as exc_info:
            generator.resolve(web_config)

        assert exc_info.value.field == "blueprint_id"

    def test_unknown_type(self, generator: Generator) -> None:
        """Test that an unknown type has no blueprint."""
        with pytest.raises(BlueprintNotFoundError):
            generator.resolve(ProjectConfig(type="desktop"))


# =============================================================================
# Generation Tests
# =============================================================================

class TestGenerate:
    """End-to-end generation tests."""

    def test_library_scenario(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path, no_hooks
    ) -> None:
        """Test that a library gets exactly its unconditional files."""
        project = tmp_path / "demo"
        result = generator.generate(library_config, GenerationOptions(project, no_git=True))

        assert result.success
        assert result.state is GenerationState.COMMITTED
        assert result.blueprint_id == "library"
        assert _relative(result.files_written, project) == LIBRARY_FILES
        assert (project / "go.mod").read_text() == "module github.com/x/demo\n\ngo 1.21\n"
        assert (project / "demo.go").read_text().startswith("package demo\n")
        assert 'demo "github.com/x/demo"' in (project / "examples/basic/main.go").read_text()

    def test_files_on_disk_match_result(
        self, generator: Generator, web_config: ProjectConfig, tmp_path: Path, no_hooks
    ) -> None:
        """Test that every reported file exists and nothing else was written."""
        project = tmp_path / "my-api"
        result = generator.generate(web_config, GenerationOptions(project, no_git=True))

        on_disk = {p for p in project.rglob("*") if p.is_file()}
        assert on_disk == set(result.files_written)

    def test_config_not_modified(
        self, generator: Generator, web_config: ProjectConfig, tmp_path: Path, no_hooks
    ) -> None:
        """Test that generation works on a copy of the config."""
        before = web_config.model_dump()
        generator.generate(web_config, GenerationOptions(tmp_path / "x", no_git=True))
        assert web_config.model_dump() == before

    def test_invalid_config(self, generator: Generator, tmp_path: Path) -> None:
        """Test that validation happens before anything is written."""
        config = ProjectConfig(name="a", module_path="github.com/x/a", type="library")

        with pytest.raises(ValidationError):
            generator.generate(config, GenerationOptions(tmp_path / "a"))

        assert not (tmp_path / "a").exists()

    def test_unsupported_orm(
        self, generator: Generator, web_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that a planned ORM is rejected instead of degraded."""
        web_config.features.database.drivers = ["postgresql"]
        web_config.features.database.orm = "ent"

        with pytest.raises(ValidationError, match="not supported yet"):
            generator.generate(web_config, GenerationOptions(tmp_path / "x"))

    def test_verbose_output(
        self, catalog: Catalog, library_config: ProjectConfig, tmp_path: Path, no_hooks
    ) -> None:
        """Test the progress output of a verbose run."""
        buffer = io.StringIO()
        generator = Generator(catalog, console=Console(file=buffer, width=120))

        generator.generate(
            library_config, GenerationOptions(tmp_path / "demo", no_git=True, verbose=True)
        )

        output = buffer.getvalue()
        assert "Creating project" in output
        assert "Created go.mod" in output

    def test_executable_flag(self, blueprint_tree: Path, tmp_path: Path, no_hooks) -> None:
        """Test that executable entries are chmod +x."""
        definition = blueprint_tree / "tiny" / "blueprint.toml"
        definition.write_text(
            definition.read_text().replace(
                'destination = "{{ ProjectName }}.go"',
                'destination = "{{ ProjectName }}.go"\nexecutable = true',
            )
        )
        generator = Generator(Catalog.load(blueprint_tree), console=Console(file=io.StringIO()))
        config = ProjectConfig(name="tool", module_path="example.com/tool", type="tiny")

        generator.generate(config, GenerationOptions(tmp_path / "tool", no_git=True))

        assert os.access(tmp_path / "tool" / "tool.go", os.X_OK)


# =============================================================================
# Output Path Tests
# =============================================================================

class TestOutputPath:
    """Tests for output directory checks."""

    def test_existing_empty_directory(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path, no_hooks
    ) -> None:
        """Test that an empty directory may be reused."""
        project = tmp_path / "demo"
        project.mkdir()

        result = generator.generate(library_config, GenerationOptions(project, no_git=True))

        assert result.success

    def test_non_empty_directory(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that a non-empty directory is refused and left alone."""
        project = tmp_path / "demo"
        project.mkdir()
        (project / "keep.txt").write_text("mine")

        with pytest.raises(ValidationError, match="not empty"):
            generator.generate(library_config, GenerationOptions(project))

        assert [p.name for p in project.iterdir()] == ["keep.txt"]

    def test_output_is_a_file(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that a file in the way is refused."""
        target = tmp_path / "demo"
        target.write_text("")

        with pytest.raises(ValidationError, match="not a directory"):
            generator.generate(library_config, GenerationOptions(target))


# =============================================================================
# Rollback Tests
# =============================================================================

class TestRollback:
    """Tests for all-or-nothing writes."""

    @pytest.mark.parametrize("fail_at", [1, 3, 9])
    def test_nth_write_failure(
        self,
        generator: Generator,
        library_config: ProjectConfig,
        tmp_path: Path,
        fail_at: int,
    ) -> None:
        """Test that a failed write removes the whole project directory."""
        project = tmp_path / "demo"
        original = WriteTransaction.write
        calls = []

        def flaky_write(self, rendered):
            calls.append(rendered.destination)
            if len(calls) == fail_at:
                raise FileSystemError("disk full", path=self.root / rendered.destination)
            return original(self, rendered)

        with patch.object(WriteTransaction, "write", flaky_write):
            with pytest.raises(FileSystemError):
                generator.generate(library_config, GenerationOptions(project, no_git=True))

        assert len(calls) == fail_at
        assert not project.exists()

    def test_unencodable_content(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that text that cannot be written as UTF-8 rolls back."""
        project = tmp_path / "demo"
        # Undecodable bytes from the environment arrive as lone surrogates
        library_config.author = "Jos\udce9"

        with pytest.raises(FileSystemError) as exc_info:
            generator.generate(library_config, GenerationOptions(project, no_git=True))

        assert isinstance(exc_info.value.cause, UnicodeEncodeError)
        assert not project.exists()

    def test_keyboard_interrupt(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that Ctrl-C in the middle of writing leaves nothing behind."""
        project = tmp_path / "demo"
        project.mkdir()
        original = Path.write_text
        calls = []

        def interrupted_write_text(self, *args, **kwargs):
            calls.append(self)
            if len(calls) == 3:
                raise KeyboardInterrupt
            return original(self, *args, **kwargs)

        with patch.object(Path, "write_text", interrupted_write_text):
            with pytest.raises(KeyboardInterrupt):
                generator.generate(library_config, GenerationOptions(project, no_git=True))

        assert list(project.iterdir()) == []

    def test_rollback_keeps_existing_root(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that a pre-existing empty root survives, emptied."""
        project = tmp_path / "demo"
        project.mkdir()

        with patch("pathlib.Path.write_text", side_effect=OSError("read-only")):
            with pytest.raises(FileSystemError, match="read-only"):
                generator.generate(library_config, GenerationOptions(project, no_git=True))

        assert project.is_dir()
        assert list(project.iterdir()) == []

    def test_transaction_removes_created_directories(self, tmp_path: Path) -> None:
        """Test rollback of files and nested directories."""
        from gostarter.renderer import RenderedFile

        root = tmp_path / "root"
        root.mkdir()
        transaction = WriteTransaction(root)
        transaction.begin()
        transaction.write(RenderedFile("a/b/c.txt", "x"))
        transaction.write(RenderedFile("top.txt", "y"))

        assert transaction.rollback() == []
        assert list(root.iterdir()) == []

    def test_cancel_event(
        self, catalog: Catalog, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that cancelling while writing rolls back."""
        event = threading.Event()
        event.set()
        generator = Generator(catalog, cancel_event=event, console=Console(file=io.StringIO()))

        with pytest.raises(Cancelled):
            generator.generate(library_config, GenerationOptions(tmp_path / "demo"))

        assert not (tmp_path / "demo").exists()


# =============================================================================
# Hook Tests
# =============================================================================

class TestHooks:
    """Tests for git init and blueprint hooks."""

    def test_missing_tools_are_warnings(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that a machine without git or go still gets a project."""
        with patch("gostarter.generator.shutil.which", return_value=None):
            result = generator.generate(library_config, GenerationOptions(tmp_path / "demo"))

        assert result.success
        assert result.state is GenerationState.COMMITTED
        assert any("Git initialization failed" in w for w in result.warnings)
        assert any("go not found" in w for w in result.warnings)

    def test_hooks_run_in_order(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path, no_hooks
    ) -> None:
        """Test that blueprint hooks run in declaration order."""
        generator.generate(library_config, GenerationOptions(tmp_path / "demo", no_git=True))

        names = [call.args[0].name for call in no_hooks.call_args_list]
        assert names == ["go mod tidy", "gofmt"]

    def test_no_git(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path, no_hooks
    ) -> None:
        """Test that --no-git skips git init."""
        with patch("gostarter.generator.init_git_repository") as mock_git:
            generator.generate(library_config, GenerationOptions(tmp_path / "demo", no_git=True))

        mock_git.assert_not_called()

    def test_failed_hook_message(self, tmp_path: Path) -> None:
        """Test the warning for a failing hook."""
        hook = HookSpec(name="go mod tidy", command=("go", "mod", "tidy"))
        error = subprocess.CalledProcessError(1, ["go"], stderr=b"no network")

        with patch("gostarter.generator.shutil.which", return_value="/usr/bin/go"), \
             patch("gostarter.generator.subprocess.run", side_effect=error):
            warning = run_hook(hook, tmp_path)

        assert warning == "Hook 'go mod tidy' failed with exit code 1: no network"

    def test_successful_hook(self, tmp_path: Path) -> None:
        """Test that a successful hook reports nothing."""
        hook = HookSpec(name="fmt", command=("gofmt", "-w", "."))

        with patch("gostarter.generator.shutil.which", return_value="/usr/bin/gofmt"), \
             patch("gostarter.generator.subprocess.run") as mock_run:
            assert run_hook(hook, tmp_path) is None

        assert mock_run.call_args.kwargs["cwd"] == tmp_path

    def test_git_init_failure(self, tmp_path: Path) -> None:
        """Test that git errors are swallowed into False."""
        with patch("gostarter.generator.shutil.which", return_value="/usr/bin/git"), \
             patch("gostarter.generator.subprocess.run", side_effect=OSError("boom")):
            assert init_git_repository(tmp_path) is False


# =============================================================================
# Preview Tests
# =============================================================================

class TestPreview:
    """Tests for dry runs, preview and in-memory rendering."""

    def test_dry_run_writes_nothing(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test that a dry run reports files without creating them."""
        project = tmp_path / "demo"
        result = generator.generate(library_config, GenerationOptions(project, dry_run=True))

        assert result.success
        assert result.dry_run
        assert _relative(result.files_written, project) == LIBRARY_FILES
        assert not project.exists()

    def test_preview(
        self, generator: Generator, library_config: ProjectConfig, tmp_path: Path
    ) -> None:
        """Test the relative file list of a preview."""
        files = generator.preview(library_config, GenerationOptions(tmp_path / "demo"))

        assert set(files) == LIBRARY_FILES
        assert files[0] == "go.mod"
        assert not (tmp_path / "demo").exists()

    def test_generate_in_memory(
        self, generator: Generator, web_config: ProjectConfig
    ) -> None:
        """Test rendering a project into a dict."""
        web_config.features.deployment.targets = ["docker"]
        files = generator.generate_in_memory(web_config)

        assert files["go.mod"].startswith("module github.com/x/my-api\n")
        assert "FROM golang:1.22-alpine" in files["Dockerfile"]
        assert "internal/database/database.go" not in files
