"""Running parsed pipelines: redirections, pipes, builtins and programs."""

from __future__ import annotations

import contextlib
import copy
import os
import subprocess
import sys
import tempfile
import threading
from collections.abc import Iterable, Iterator
from typing import Callable, Optional, TextIO

from minish.builtins import is_builtin, run_builtin
from minish.env import Shell
from minish.model import Command, Pipeline, Redirection
from minish.tokens import TokenType

_NOT_FOUND = 127
_EXEC_FAILED = 126
_SIGNAL_BASE = 128

Waiter = Callable[[], int]


class RedirectionError(Exception):
    """Raised when a redirection target cannot be opened."""

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(f"{target}: {reason}")
        self.target = target
        self.reason = reason


def _error(message: str) -> None:
    sys.stderr.write(f"minishell: {message}\n")
    sys.stderr.flush()


def resolve_path(name: str, shell: Shell) -> Optional[str]:
    """Find the executable for ``name``: as given if it holds a slash, else along PATH."""
    if "/" in name:
        return name if os.access(name, os.X_OK) else None
    search = shell.get("PATH")
    if search is None:
        return None
    for directory in filter(None, search.split(":")):
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def _open_target(redirection: Redirection) -> TextIO:
    if redirection.kind is TokenType.HEREDOC:
        body = tempfile.TemporaryFile("w+", encoding="utf-8")
        body.write(redirection.heredoc or "")
        body.seek(0)
        return body
    modes = {TokenType.REDIR_IN: "r", TokenType.REDIR_OUT: "w", TokenType.REDIR_APPEND: "a"}
    try:
        return open(redirection.target, modes[redirection.kind], encoding="utf-8")
    except OSError as exc:
        raise RedirectionError(redirection.target, exc.strerror or str(exc)) from exc


@contextlib.contextmanager
def open_redirections(
    redirections: Iterable[Redirection],
) -> Iterator[tuple[Optional[TextIO], Optional[TextIO]]]:
    """Open the redirections in order and yield the resulting (stdin, stdout).

    A later redirection of the same stream replaces an earlier one, which is
    still opened (so output files are created). Either element is None when
    that stream is not redirected. The first target that cannot be opened
    raises RedirectionError.
    """
    with contextlib.ExitStack() as stack:
        stdin: Optional[TextIO] = None
        stdout: Optional[TextIO] = None
        for redirection in redirections:
            handle = stack.enter_context(_open_target(redirection))
            if redirection.kind in (TokenType.REDIR_IN, TokenType.HEREDOC):
                stdin = handle
            else:
                stdout = handle
        yield stdin, stdout


def _status(returncode: int) -> int:
    return returncode if returncode >= 0 else _SIGNAL_BASE - returncode


def _done(status: int) -> Waiter:
    return lambda: status


def _run_builtin_here(command: Command, shell: Shell) -> int:
    try:
        with open_redirections(command.redirections) as (_stdin, stdout):
            status = run_builtin(command.argv, shell, stdout if stdout is not None else sys.stdout)
    except RedirectionError as exc:
        _error(str(exc))
        return 1
    sys.stdout.flush()
    return status


def _builtin_stage(command: Command, shell: Shell, stdout_fd: Optional[int]) -> Waiter:
    snapshot = copy.deepcopy(shell)
    out_fd = os.dup(stdout_fd) if stdout_fd is not None else None
    result = [0]

    def run() -> None:
        try:
            with contextlib.ExitStack() as stack:
                pipe_out: Optional[TextIO] = None
                if out_fd is not None:
                    pipe_out = stack.enter_context(os.fdopen(out_fd, "w", encoding="utf-8"))
                try:
                    _stdin, redirected = stack.enter_context(
                        open_redirections(command.redirections)
                    )
                except RedirectionError as exc:
                    _error(str(exc))
                    result[0] = 1
                    return
                out = redirected or pipe_out or sys.stdout
                result[0] = run_builtin(command.argv, snapshot, out)
                out.flush()
        except BrokenPipeError:
            pass

    worker = threading.Thread(target=run)
    worker.start()

    def wait() -> int:
        worker.join()
        return result[0]

    return wait


def _external_stage(
    command: Command,
    shell: Shell,
    stdin_fd: Optional[int],
    stdout_fd: Optional[int],
) -> Waiter:
    try:
        with open_redirections(command.redirections) as (redirected_in, redirected_out):
            if not command.argv:
                return _done(0)
            path = resolve_path(command.argv[0], shell)
            if path is None:
                _error(f"{command.argv[0]}: command not found")
                return _done(_NOT_FOUND)
            command.path = path
            try:
                process = subprocess.Popen(
                    command.argv,
                    executable=path,
                    env=shell.environ(),
                    stdin=redirected_in if redirected_in is not None else stdin_fd,
                    stdout=redirected_out if redirected_out is not None else stdout_fd,
                )
            except OSError:
                _error("execve failed")
                return _done(_EXEC_FAILED)
    except RedirectionError as exc:
        _error(str(exc))
        return _done(1)
    return lambda: _status(process.wait())


def _start(
    command: Command,
    shell: Shell,
    stdin_fd: Optional[int],
    stdout_fd: Optional[int],
) -> Waiter:
    if command.argv and is_builtin(command.argv[0]):
        return _builtin_stage(command, shell, stdout_fd)
    return _external_stage(command, shell, stdin_fd, stdout_fd)


def _run_pipeline(pipeline: Pipeline, shell: Shell) -> int:
    waiters: list[Waiter] = []
    previous: Optional[int] = None
    last = pipeline.count - 1
    for index, command in enumerate(pipeline):
        read_end, write_end = os.pipe() if index < last else (None, None)
        try:
            waiters.append(_start(command, shell, previous, write_end))
        finally:
            if previous is not None:
                os.close(previous)
            if write_end is not None:
                os.close(write_end)
        previous = read_end
    statuses = [wait() for wait in waiters]
    return statuses[-1] if statuses else 0


def execute(pipeline: Pipeline, shell: Shell) -> int:
    """Run ``pipeline`` and record the status of its last command on ``shell``.

    A lone builtin runs inside the shell so that it can change its state;
    builtins inside a longer pipeline work on a copy, like a forked child.
    """
    sys.stdout.flush()
    commands = pipeline.commands
    if len(commands) == 1 and is_builtin(commands[0].name):
        status = _run_builtin_here(commands[0], shell)
    else:
        status = _run_pipeline(pipeline, shell)
    shell.exit_status = status
    return status