"""Collecting the body of a ``<<`` redirection."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional

from minish.env import Shell
from minish.expander import expand_word
from minish.model import Redirection
from minish.tokens import TokenType

_INTERRUPTED_STATUS = 130


class HeredocInterrupted(Exception):
    """Raised when reading a heredoc body is cut short by an interrupt."""


def _prompt_lines() -> Iterator[str]:
    while True:
        try:
            yield input("> ")
        except EOFError:
            return


def _strip_newline(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def read_heredoc(
    redirection: Redirection,
    shell: Shell,
    lines: Optional[Iterable[str]] = None,
) -> str:
    """Read lines up to the delimiter and store them as the heredoc body.

    Lines come from ``lines`` or, when it is None, from the terminal with a
    ``> `` prompt. Reading also stops when the input runs out. Unless the
    delimiter was quoted, every line is expanded. The body is stored on the
    redirection and returned.
    """
    if redirection.kind is not TokenType.HEREDOC:
        raise ValueError(f"not a heredoc: {redirection.kind.value}")
    source = _prompt_lines() if lines is None else lines
    body: list[str] = []
    try:
        for raw in source:
            line = _strip_newline(raw)
            if line == redirection.target:
                break
            if redirection.expand:
                line = expand_word(line, shell)
            body.append(line + "\n")
    except KeyboardInterrupt:
        shell.exit_status = _INTERRUPTED_STATUS
        raise HeredocInterrupted(redirection.target) from None
    redirection.heredoc = "".join(body)
    return redirection.heredoc