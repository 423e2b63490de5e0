import os
import signal
import sys

import pytest

from minish.env import Shell
from minish.executor import RedirectionError, execute, open_redirections, resolve_path
from minish.model import Command, Pipeline, Redirection
from minish.tokens import TokenType


def _py(code):
    return [sys.executable, "-c", code]


def _out(path):
    return Redirection.create(TokenType.REDIR_OUT, str(path))


def _make_exec(path):
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


# resolve_path


def test_resolve_path_finds_executable(tmp_path):
    _make_exec(tmp_path / "tool")
    shell = Shell.from_environ({"PATH": str(tmp_path)})
    assert resolve_path("tool", shell) == f"{tmp_path}/tool"


def test_resolve_path_skips_empty_and_non_executable(tmp_path):
    first = tmp_path / "a"
    second = tmp_path / "b"
    first.mkdir()
    second.mkdir()
    (first / "tool").write_text("x")
    (first / "tool").chmod(0o644)
    _make_exec(second / "tool")
    shell = Shell.from_environ({"PATH": f"::{first}::{second}:"})
    assert resolve_path("tool", shell) == f"{second}/tool"


def test_resolve_path_without_path_variable():
    assert resolve_path("ls", Shell()) is None


def test_resolve_path_with_slash(tmp_path):
    tool = _make_exec(tmp_path / "tool")
    shell = Shell()
    assert resolve_path(str(tool), shell) == str(tool)
    assert resolve_path(str(tmp_path / "missing"), shell) is None


# open_redirections


def test_output_truncates_and_later_target_wins(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.write_text("old")
    with open_redirections([_out(first), _out(second)]) as (stdin, stdout):
        assert stdin is None
        stdout.write("data")
    assert first.read_text() == ""
    assert second.read_text() == "data"


def test_append_keeps_existing_content(tmp_path):
    target = tmp_path / "log"
    target.write_text("a\n")
    redirection = Redirection.create(TokenType.REDIR_APPEND, str(target))
    with open_redirections([redirection]) as (_stdin, stdout):
        stdout.write("b\n")
    assert target.read_text() == "a\nb\n"


def test_input_and_heredoc(tmp_path):
    source = tmp_path / "in"
    source.write_text("from file")
    heredoc = Redirection.create(TokenType.HEREDOC, "EOF")
    heredoc.heredoc = "from heredoc\n"
    with open_redirections([Redirection.create(TokenType.REDIR_IN, str(source))]) as (i, o):
        assert i.read() == "from file"
        assert o is None
    with open_redirections([heredoc]) as (i, _o):
        assert i.read() == "from heredoc\n"


def test_missing_input_raises(tmp_path):
    missing = str(tmp_path / "nope")
    with pytest.raises(RedirectionError) as info:
        with open_redirections([Redirection.create(TokenType.REDIR_IN, missing)]):
            pass
    assert info.value.target == missing
    assert str(info.value).startswith(missing + ": ")


# execute


def test_builtin_alone_writes_to_redirection(tmp_path):
    target = tmp_path / "out"
    shell = Shell()
    status = execute(Pipeline([Command(["echo", "hi", "there"], [_out(target)])]), shell)
    assert status == 0
    assert target.read_text() == "hi there\n"


def test_builtin_alone_changes_shell():
    shell = Shell()
    execute(Pipeline([Command(["export", "A=1"])]), shell)
    assert shell.get("A") == "1"
    execute(Pipeline([Command(["exit"])]), shell)
    assert shell.should_exit is True


def test_builtin_in_pipeline_works_on_copy(tmp_path):
    shell = Shell()
    pipeline = Pipeline(
        [Command(["export", "A=1"]), Command(["echo", "x"], [_out(tmp_path / "o")])]
    )
    assert execute(pipeline, shell) == 0
    assert shell.get("A") is None


def test_external_command_output(tmp_path):
    target = tmp_path / "out"
    shell = Shell()
    command = Command(_py("print('hello')"), [_out(target)])
    assert execute(Pipeline([command]), shell) == 0
    assert target.read_text() == "hello\n"
    assert command.path == sys.executable


def test_pipeline_connects_builtin_to_program(tmp_path):
    target = tmp_path / "out"
    shell = Shell()
    pipeline = Pipeline(
        [
            Command(["echo", "hello"]),
            Command(_py("import sys; sys.stdout.write(sys.stdin.read().upper())"), [_out(target)]),
        ]
    )
    assert execute(pipeline, shell) == 0
    assert target.read_text() == "HELLO\n"


def test_heredoc_feeds_program(tmp_path):
    target = tmp_path / "out"
    heredoc = Redirection.create(TokenType.HEREDOC, "EOF")
    heredoc.heredoc = "line one\nline two\n"
    command = Command(
        _py("import sys; sys.stdout.write(sys.stdin.read())"), [heredoc, _out(target)]
    )
    execute(Pipeline([command]), Shell())
    assert target.read_text() == "line one\nline two\n"


def test_status_of_last_command_is_kept():
    shell = Shell()
    pipeline = Pipeline([Command(_py("raise SystemExit(0)")), Command(_py("raise SystemExit(3)"))])
    assert execute(pipeline, shell) == 3
    assert shell.exit_status == 3


def test_killed_program_reports_signal_status():
    shell = Shell()
    code = "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"
    assert execute(Pipeline([Command(_py(code))]), shell) == 128 + signal.SIGTERM


def test_command_not_found(tmp_path, capsys):
    shell = Shell.from_environ({"PATH": str(tmp_path)})
    assert execute(Pipeline([Command(["nosuchtool"])]), shell) == 127
    assert "minishell: nosuchtool: command not found\n" in capsys.readouterr().err


def test_redirection_failure_sets_status_one(tmp_path, capsys):
    missing = str(tmp_path / "missing")
    shell = Shell()
    command = Command(["echo", "x"], [Redirection.create(TokenType.REDIR_IN, missing)])
    assert execute(Pipeline([command]), shell) == 1
    assert shell.exit_status == 1
    assert f"minishell: {missing}: " in capsys.readouterr().err


def test_command_without_words_still_creates_file(tmp_path):
    target = tmp_path / "created"
    shell = Shell()
    shell.exit_status = 5
    assert execute(Pipeline([Command([], [_out(target)])]), shell) == 0
    assert os.path.exists(target)


def test_empty_pipeline_succeeds():
    shell = Shell()
    shell.exit_status = 9
    assert execute(Pipeline(), shell) == 0
    assert shell.exit_status == 0