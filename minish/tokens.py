"""Splitting a command line into tokens and checking their order."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_BLANKS = frozenset(" \t")
_OPERATOR_CHARS = frozenset("|<>")
_QUOTES = frozenset("'\"")


class TokenType(Enum):
    """Kinds of token the lexer produces."""

    WORD = "word"
    PIPE = "|"
    REDIR_APPEND = ">>"
    REDIR_OUT = ">"
    HEREDOC = "<<"
    REDIR_IN = "<"

    @property
    def is_redirection(self) -> bool:
        return self in _REDIRECTIONS


_REDIRECTIONS = frozenset(
    {TokenType.REDIR_APPEND, TokenType.REDIR_OUT, TokenType.HEREDOC, TokenType.REDIR_IN}
)


@dataclass(frozen=True)
class Token:
    """A single lexical unit; words keep their quotes untouched."""

    type: TokenType
    value: str


class ShellSyntaxError(Exception):
    """Raised when tokens do not form a valid command line."""

    def __init__(self, token: str) -> None:
        super().__init__(f"syntax error near unexpected token `{token}'")
        self.token = token


def _operator_at(line: str, pos: int) -> Token:
    pair = line[pos : pos + 2]
    if pair in (">>", "<<"):
        return Token(TokenType(pair), pair)
    return Token(TokenType(line[pos]), line[pos])


def _skip_quoted(line: str, pos: int) -> int:
    """Return the position just past the quoted run starting at ``pos``."""
    end = line.find(line[pos], pos + 1)
    return len(line) if end == -1 else end + 1


def _word_end(line: str, pos: int) -> int:
    length = len(line)
    while pos < length and line[pos] not in _BLANKS and line[pos] not in _OPERATOR_CHARS:
        if line[pos] in _QUOTES:
            pos = _skip_quoted(line, pos)
        else:
            pos += 1
    return pos


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into words and operators, keeping quoted text intact."""
    tokens: list[Token] = []
    pos = 0
    length = len(line)
    while pos < length:
        while pos < length and line[pos] in _BLANKS:
            pos += 1
        if pos >= length:
            break
        if line[pos] in _OPERATOR_CHARS:
            token = _operator_at(line, pos)
            tokens.append(token)
            pos += len(token.value)
        else:
            end = _word_end(line, pos)
            tokens.append(Token(TokenType.WORD, line[pos:end]))
            pos = end
    return tokens


def has_unclosed_quote(line: str) -> bool:
    """Tell whether a single or double quote in ``line`` is never closed."""
    pos = 0
    length = len(line)
    while pos < length:
        if line[pos] in _QUOTES:
            end = line.find(line[pos], pos + 1)
            if end == -1:
                return True
            pos = end + 1
        else:
            pos += 1
    return False


def validate_syntax(tokens: list[Token]) -> None:
    """Raise ShellSyntaxError if pipes or redirections are misplaced."""
    if not tokens:
        return
    if tokens[0].type is TokenType.PIPE:
        raise ShellSyntaxError("|")
    iterator = iter(enumerate(tokens))
    for index, token in iterator:
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        if token.type is TokenType.PIPE:
            if following is None or following.type is TokenType.PIPE:
                raise ShellSyntaxError("|")
        elif token.type.is_redirection:
            if following is None or following.type is not TokenType.WORD:
                raise ShellSyntaxError("newline")
            next(iterator, None)