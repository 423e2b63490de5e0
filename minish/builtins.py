"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import itertools
import os
import string
import sys
from typing import Callable, Optional, TextIO

from minish.env import Shell

_INT_MAX = 2**31 - 1
_SPACES = frozenset(" \t\n\v\f\r")
_DIGITS = frozenset(string.digits)
_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_CHARS = frozenset(string.ascii_letters + string.digits + "_")

BUILTINS = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})


def _stdout(out: Optional[TextIO]) -> TextIO:
    return sys.stdout if out is None else out


def _stderr(err: Optional[TextIO]) -> TextIO:
    return sys.stderr if err is None else err


def parse_int(text: str) -> int:
    """Read a leading decimal integer the way the shell's atoi does.

    Leading whitespace and one sign are accepted, reading stops at the first
    non-digit, and values past the 32-bit range collapse to -1 (positive) or
    0 (negative).
    """
    pos = 0
    length = len(text)
    while pos < length and text[pos] in _SPACES:
        pos += 1
    sign = 1
    if pos < length and text[pos] in "+-":
        if text[pos] == "-":
            sign = -1
        pos += 1
    number = 0
    while pos < length and text[pos] in _DIGITS:
        number = number * 10 + int(text[pos])
        pos += 1
        if number > _INT_MAX:
            if sign > 0:
                return -1
            if number > _INT_MAX + 1:
                return 0
            return -number
    return number * sign


def is_builtin(name: Optional[str]) -> bool:
    """Tell whether ``name`` is one of the shell's own commands."""
    return name in BUILTINS


def _is_n_flag(arg: str) -> bool:
    return len(arg) > 1 and arg[0] == "-" and set(arg[1:]) == {"n"}


def echo(argv: list[str], out: Optional[TextIO] = None) -> int:
    """Print the arguments separated by spaces; leading ``-n`` flags drop the newline."""
    out = _stdout(out)
    args = argv[1:]
    words = list(itertools.dropwhile(_is_n_flag, args))
    out.write(" ".join(words))
    if len(words) == len(args):
        out.write("\n")
    return 0


def cd(argv: list[str], shell: Shell, err: Optional[TextIO] = None) -> int:
    """Change directory to the argument, or to HOME, and update PWD and OLDPWD."""
    err = _stderr(err)
    if len(argv) <= 1:
        path = shell.get("HOME")
        if path is None:
            err.write("minishell: cd: HOME not set\n")
            return 1
    else:
        path = argv[1]
    try:
        old_pwd: Optional[str] = os.getcwd()
    except OSError:
        old_pwd = None
    try:
        os.chdir(path)
    except OSError as exc:
        err.write(f"minishell: cd: {path}: {exc.strerror}\n")
        return 1
    if old_pwd is not None:
        shell.set("OLDPWD", old_pwd)
    try:
        shell.set("PWD", os.getcwd())
    except OSError:
        pass
    return 0


def pwd(out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> int:
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        _stderr(err).write(f"minishell: pwd: {exc.strerror}\n")
        return 1
    _stdout(out).write(cwd + "\n")
    return 0


def _is_valid_identifier(name: str) -> bool:
    if not name or name[0] not in _IDENT_START:
        return False
    body = name[1:].split("=", 1)[0]
    return all(char in _IDENT_CHARS for char in body)


def _print_export_list(shell: Shell, out: TextIO) -> None:
    for name, value in shell.variables.items():
        if value is None:
            out.write(f"declare -x {name}\n")
        else:
            out.write(f'declare -x {name}="{value}"\n')


def export(
    argv: list[str],
    shell: Shell,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Set or mark variables for export; with no arguments list them all."""
    if len(argv) <= 1:
        _print_export_list(shell, _stdout(out))
        return 0
    err = _stderr(err)
    status = 0
    for arg in argv[1:]:
        name, sep, value = arg.partition("=")
        if not _is_valid_identifier(name):
            err.write(f"minishell: export: `{arg}': not a valid identifier\n")
            status = 1
        elif sep:
            shell.set(name, value)
        else:
            shell.export_name(name)
    return status


def unset(argv: list[str], shell: Shell) -> int:
    """Remove each named variable."""
    for name in argv[1:]:
        shell.unset(name)
    return 0


def env(shell: Shell, out: Optional[TextIO] = None) -> int:
    """Print every variable that has a value as ``NAME=value``."""
    out = _stdout(out)
    for name, value in shell.environ().items():
        out.write(f"{name}={value}\n")
    return 0


def _is_numeric(text: str) -> bool:
    digits = text[1:] if text[:1] in ("+", "-") else text
    return bool(digits) and all(char in _DIGITS for char in digits)


def exit_builtin(
    argv: list[str],
    shell: Shell,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Ask the shell to stop, with the given status or the last one."""
    _stdout(out).write("exit\n")
    err = _stderr(err)
    if len(argv) > 2:
        err.write("minishell: exit: too many arguments\n")
        return 1
    if len(argv) <= 1:
        shell.should_exit = True
        return shell.exit_status
    arg = argv[1]
    if not _is_numeric(arg):
        err.write(f"minishell: exit: {arg}: numeric argument required\n")
        shell.should_exit = True
        shell.exit_status = 255
        return 255
    code = parse_int(arg) % 256
    shell.should_exit = True
    shell.exit_status = code
    return code


def run_builtin(
    argv: list[str],
    shell: Shell,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Run the builtin named by ``argv[0]`` and return its status; 127 if unknown."""
    name = argv[0] if argv else None
    handlers: dict[str, Callable[[], int]] = {
        "echo": lambda: echo(argv, out),
        "cd": lambda: cd(argv, shell, err),
        "pwd": lambda: pwd(out, err),
        "export": lambda: export(argv, shell, out, err),
        "unset": lambda: unset(argv, shell),
        "env": lambda: env(shell, out),
        "exit": lambda: exit_builtin(argv, shell, out, err),
    }
    handler = handlers.get(name) if name is not None else None
    if handler is None:
        return 127
    return handler()