"""
gostarter.prompts - Interactive Question Backends
=================================================

The configuration builder asks its questions through a ``Prompter``. Two
implementations exist:

- ``QuestionaryPrompter``: arrow-key menus and checkboxes (questionary)
- ``ConsolePrompter``: numbered, line-based prompts (rich.prompt) for
  dumb terminals, CI logs and piped stdin

``create_prompter`` picks one. Every implementation turns a cancelled
question (Ctrl-C, EOF, questionary's ``None``) into ``Cancelled``.

Choices are always ``Choice(value, title)`` pairs; the value handed back
is the one attached to the picked entry, never parsed out of its label.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import Any, NamedTuple, Protocol

import questionary
from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt

from gostarter.errors import Cancelled


TextValidator = Callable[[str], "str | None"]


class Choice(NamedTuple):
    """A selectable option: the value returned and the title displayed."""

    value: str
    title: str


class Prompter(Protocol):
    """What the configuration builder needs from a question backend."""

    def ask_select(self, prompt: str, choices: Sequence[Choice], default: str | None = None) -> str:
        ...

    def ask_text(
        self, prompt: str, default: str = "", validate: TextValidator | None = None
    ) -> str:
        ...

    def ask_confirm(self, prompt: str, default: bool = False) -> bool:
        ...

    def ask_checkbox(
        self, prompt: str, choices: Sequence[Choice], defaults: Sequence[str] = ()
    ) -> list[str]:
        ...


def _answered(result: Any) -> Any:
    if result is None:
        raise Cancelled()
    return result


# =============================================================================
# questionary Backend
# =============================================================================

class QuestionaryPrompter:
    """Widget-style prompts for interactive terminals."""

    def ask_select(self, prompt: str, choices: Sequence[Choice], default: str | None = None) -> str:
        options = [questionary.Choice(title=c.title, value=c.value) for c in choices]
        return _answered(questionary.select(prompt, choices=options, default=default).ask())

    def ask_text(
        self, prompt: str, default: str = "", validate: TextValidator | None = None
    ) -> str:
        def check(value: str) -> bool | str:
            if validate is None:
                return True
            error = validate(value)
            return True if error is None else error

        answer = questionary.text(prompt, default=default, validate=check).ask()
        return _answered(answer).strip()

    def ask_confirm(self, prompt: str, default: bool = False) -> bool:
        return _answered(questionary.confirm(prompt, default=default).ask())

    def ask_checkbox(
        self, prompt: str, choices: Sequence[Choice], defaults: Sequence[str] = ()
    ) -> list[str]:
        options = [
            questionary.Choice(title=c.title, value=c.value, checked=c.value in defaults)
            for c in choices
        ]
        return list(_answered(questionary.checkbox(prompt, choices=options).ask()))


# =============================================================================
# Line-Based Backend
# =============================================================================

class ConsolePrompter:
    """
    Numbered prompts on a plain console.

    Parameters
    ----------
    console : Console, optional
        Where questions are printed. A fresh console is used by default.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def ask_select(self, prompt: str, choices: Sequence[Choice], default: str | None = None) -> str:
        self.console.print(f"[bold]{prompt}[/]")
        for index, choice in enumerate(choices, start=1):
            self.console.print(f"  {index}. {choice.title}")

        values = [c.value for c in choices]
        default_index = values.index(default) + 1 if default in values else 1
        try:
            picked = IntPrompt.ask(
                "Select",
                console=self.console,
                choices=[str(i) for i in range(1, len(choices) + 1)],
                default=default_index,
                show_choices=False,
            )
        except (KeyboardInterrupt, EOFError):
            raise Cancelled() from None
        return values[picked - 1]

    def ask_text(
        self, prompt: str, default: str = "", validate: TextValidator | None = None
    ) -> str:
        while True:
            try:
                answer = Prompt.ask(prompt, console=self.console, default=default or None)
            except (KeyboardInterrupt, EOFError):
                raise Cancelled() from None
            answer = (answer or "").strip()
            error = validate(answer) if validate is not None else None
            if error is None:
                return answer
            self.console.print(f"[red]{error}[/]")

    def ask_confirm(self, prompt: str, default: bool = False) -> bool:
        try:
            return Confirm.ask(prompt, console=self.console, default=default)
        except (KeyboardInterrupt, EOFError):
            raise Cancelled() from None

    def ask_checkbox(
        self, prompt: str, choices: Sequence[Choice], defaults: Sequence[str] = ()
    ) -> list[str]:
        self.console.print(f"[bold]{prompt}[/] [dim](comma-separated numbers, empty for none)[/]")
        for index, choice in enumerate(choices, start=1):
            self.console.print(f"  {index}. {choice.title}")

        values = [c.value for c in choices]
        preset = ",".join(str(values.index(d) + 1) for d in defaults if d in values)
        while True:
            try:
                answer = Prompt.ask("Select", console=self.console, default=preset)
            except (KeyboardInterrupt, EOFError):
                raise Cancelled() from None
            picked = _parse_indexes(answer, len(values))
            if picked is not None:
                return [values[i] for i in picked]
            self.console.print(f"[red]Enter numbers between 1 and {len(values)}[/]")


def _parse_indexes(answer: str, count: int) -> list[int] | None:
    """Parse ``"1, 3"`` into zero-based indexes; ``None`` when malformed."""
    indexes: list[int] = []
    for part in answer.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= count:
            return None
        if int(part) - 1 not in indexes:
            indexes.append(int(part) - 1)
    return indexes


# =============================================================================
# Factory
# =============================================================================

def create_prompter(enhanced: bool = True, console: Console | None = None) -> Prompter:
    """
    Choose a prompter for the current terminal.

    The widget UI is used only when ``enhanced`` is requested and both
    stdin and stdout are terminals; otherwise questions fall back to
    numbered lines.
    """
    if enhanced and sys.stdin.isatty() and sys.stdout.isatty():
        return QuestionaryPrompter()
    return ConsolePrompter(console)
