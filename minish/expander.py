"""Quote removal and variable expansion of words."""

from __future__ import annotations

import string

from minish.env import Shell
from minish.model import Pipeline
from minish.tokens import TokenType

_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def single_quoted(word: str, pos: int) -> tuple[str, int]:
    """Read the single-quoted run at ``pos``; return its text and the position after it."""
    start = pos + 1
    end = word.find("'", start)
    if end == -1:
        return word[start:], len(word)
    return word[start:end], end + 1


def variable_value(text: str, pos: int, shell: Shell) -> tuple[str, int]:
    """Expand the ``$`` reference at ``pos``; return its value and the position after it."""
    pos += 1
    if text.startswith("?", pos):
        return str(shell.exit_status), pos + 1
    end = pos
    while end < len(text) and text[end] in _NAME_CHARS:
        end += 1
    if end == pos:
        return "$", pos
    value = shell.get(text[pos:end])
    return (value if value is not None else ""), end


def _expand_run(text: str, pos: int, shell: Shell, stops: str) -> tuple[str, int]:
    parts: list[str] = []
    while pos < len(text) and text[pos] not in stops:
        if text[pos] == "$":
            value, pos = variable_value(text, pos, shell)
            parts.append(value)
        else:
            parts.append(text[pos])
            pos += 1
    return "".join(parts), pos


def _double_quoted(text: str, pos: int, shell: Shell) -> tuple[str, int]:
    value, pos = _expand_run(text, pos + 1, shell, '"')
    if pos < len(text):
        pos += 1
    return value, pos


def _segment(word: str, pos: int, shell: Shell) -> tuple[str, int]:
    if word[pos] == "'":
        return single_quoted(word, pos)
    if word[pos] == '"':
        return _double_quoted(word, pos, shell)
    return _expand_run(word, pos, shell, "'\"")


def expand_word(word: str, shell: Shell) -> str:
    """Expand variables in ``word`` and strip its quotes."""
    parts: list[str] = []
    pos = 0
    while pos < len(word):
        segment, pos = _segment(word, pos, shell)
        parts.append(segment)
    return "".join(parts)


def expand(pipeline: Pipeline, shell: Shell) -> None:
    """Expand every argument and every non-heredoc redirection target in place."""
    for command in pipeline:
        command.argv = [expand_word(arg, shell) for arg in command.argv]
        for redirection in command.redirections:
            if redirection.kind is not TokenType.HEREDOC:
                redirection.target = expand_word(redirection.target, shell)