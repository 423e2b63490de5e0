"""Parsed command structures: redirections, commands and pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from minish.tokens import TokenType

_REDIRECTION_SYMBOLS = {
    TokenType.REDIR_IN: "<",
    TokenType.REDIR_OUT: ">",
    TokenType.REDIR_APPEND: ">>",
    TokenType.HEREDOC: "<<",
}

_RULE = "-------------------------"
_FOOTER = "==========================="


def heredoc_delimiter(raw: str) -> tuple[str, bool]:
    """Return the heredoc delimiter and whether the body is to be expanded.

    A delimiter wrapped in matching single or double quotes loses them and
    turns expansion off.
    """
    if raw and raw[0] in "'\"" and raw[-1] == raw[0]:
        return raw[1:-1], False
    return raw, True


@dataclass
class Redirection:
    """One redirection of a command; ``heredoc`` holds a collected heredoc body."""

    kind: TokenType
    target: str
    expand: bool = True
    heredoc: Optional[str] = None

    @classmethod
    def create(cls, kind: TokenType, target: str) -> "Redirection":
        """Build a redirection from its operator and the word that follows it."""
        if not kind.is_redirection:
            raise ValueError(f"not a redirection operator: {kind.value}")
        if kind is TokenType.HEREDOC:
            delimiter, expand = heredoc_delimiter(target)
            return cls(kind, delimiter, expand)
        return cls(kind, target)


@dataclass
class Command:
    """A simple command: its words, its redirections and its resolved path."""

    argv: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)
    path: Optional[str] = None

    @property
    def name(self) -> Optional[str]:
        return self.argv[0] if self.argv else None

    def add_arg(self, value: str) -> None:
        """Append a word to the argument list."""
        self.argv.append(value)

    def add_redirection(self, redirection: Redirection) -> None:
        """Append a redirection; they are applied in the order given."""
        self.redirections.append(redirection)


@dataclass
class Pipeline:
    """Commands joined by pipes, in the order they appear."""

    commands: list[Command] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands)

    def add(self, command: Command) -> None:
        """Append a command to the end of the pipeline."""
        self.commands.append(command)


def _format_command(command: Command, index: int) -> list[str]:
    if command.argv:
        lines = [f"-- CMD [{index}] -- {command.argv[0]}"]
    else:
        lines = [f"-- CMD [{index}] -- (no cmd)"]
    lines.extend(f"    argv: {arg}" for arg in command.argv)
    lines.extend(
        f"    redir : {_REDIRECTION_SYMBOLS[r.kind]} {r.target}" for r in command.redirections
    )
    lines.append(_RULE)
    return lines


def format_pipeline(pipeline: Pipeline) -> str:
    """Render a readable dump of ``pipeline`` for debugging."""
    lines = [f"=== PIPELINE ({pipeline.count} cmd(s)) ==="]
    last = pipeline.count - 1
    for index, command in enumerate(pipeline.commands):
        lines.extend(_format_command(command, index))
        if index < last:
            lines.append("          | PIPE")
    lines.append(_FOOTER)
    return "\n".join(lines) + "\n"