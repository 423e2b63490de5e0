# minish

`minish` is the core of a small POSIX-style shell as a Python library. It
tokenizes and checks command lines, expands words, runs the usual builtins,
collects heredoc bodies and runs pipelines of builtins and programs.

## Modules

- **`minish.tokens`** — `tokenize(line)` splits a line into `Token`s: words
  and the operators `|`, `<`, `>`, `>>` and `<<` (`TokenType`). Quoted text
  stays inside its word with the quotes kept. `has_unclosed_quote(line)`
  tells whether a single or double quote is never closed.
  `validate_syntax(tokens)` raises `ShellSyntaxError` when the line starts
  with a pipe, a pipe is followed by nothing or another pipe, or a
  redirection is not followed by a word.
- **`minish.env`** — `Shell` holds the variables in insertion order (a value
  of `None` marks a name exported without a value), `exit_status` and
  `should_exit`. It has `from_environ`, `get`, `set`, `add` (a raw
  `NAME=value` or bare `NAME`), `export_name`, `unset` and `environ()`, which
  returns only the variables that carry a value.
- **`minish.model`** — `Redirection` (built with `Redirection.create(kind,
  target)`), `Command` (`add_arg`, `add_redirection`) and `Pipeline` (`add`).
  A heredoc delimiter wrapped in matching quotes loses them and turns
  expansion off (`heredoc_delimiter`). `format_pipeline` renders a pipeline
  as a readable outline.
- **`minish.expander`** — `expand_word(word, shell)` removes quotes and
  expands `$NAME` and `$?`; single-quoted text is left as it is, and a `$`
  not followed by a name stays a literal `$`. `expand(pipeline, shell)` does
  this in place for every argument and every redirection target except
  heredoc delimiters.
- **`minish.builtins`** — `echo` (leading `-n`, `-nnn` flags drop the
  newline), `cd` (to `HOME` with no argument, updating `PWD` and `OLDPWD`),
  `pwd`, `export` (lists `declare -x` lines with no arguments, rejects
  invalid identifiers with status 1), `unset`, `env` and `exit_builtin`
  (status modulo 256, 255 for a non-numeric argument, refusal with status 1
  for more than one argument). `run_builtin` dispatches by name and returns
  127 for an unknown one; `is_builtin` tells whether a name is a builtin.
  Output goes to the `out` and `err` streams given, or to `sys.stdout` and
  `sys.stderr`.
- **`minish.heredoc`** — `read_heredoc(redirection, shell, lines=None)`
  reads lines up to the delimiter (from `lines`, or from the terminal with a
  `> ` prompt), expands them unless the delimiter was quoted, and stores the
  body on the redirection. A `KeyboardInterrupt` while reading sets the exit
  status to 130 and raises `HeredocInterrupted`.
- **`minish.executor`** — `execute(pipeline, shell)` runs a pipeline and
  records the status of its last command on the shell. A lone builtin runs
  in the shell itself, so `cd`, `export`, `unset` and `exit` take effect;
  in a longer pipeline builtins work on a copy of the shell. Other commands
  are started as processes joined by pipes. A command that cannot be found
  gives 127, one that cannot be started 126, one killed by a signal 128 plus
  the signal number, and a redirection target that cannot be opened 1.
  `resolve_path` looks a name up along `PATH` (or takes it as given if it
  contains a slash), and `open_redirections` opens a command's redirections
  in order, raising `RedirectionError` for the first one that fails.

## Example

```python
from minish.env import Shell
from minish.tokens import tokenize, validate_syntax, ShellSyntaxError
from minish.expander import expand_word

shell = Shell.from_environ({"HOME": "/home/user", "NAME": "world"})

tokens = tokenize("echo \"hello $NAME\" | cat > out.txt")
validate_syntax(tokens)

print(expand_word("'$NAME' is \"$NAME\"", shell))   # $NAME is world

try:
    validate_syntax(tokenize("| ls"))
except ShellSyntaxError as exc:
    print(exc)   # syntax error near unexpected token `|'
```

Variables go through the `Shell` object:

```python
shell.set("GREETING", "hi")
shell.export_name("EMPTY")      # listed by export, not by env
shell.unset("NAME")
print(shell.get("GREETING"))    # hi
print(shell.environ())          # only the variables that carry a value
```

A pipeline is built from `Command` objects and run with `execute`:

```python
from minish.model import Command, Pipeline, Redirection, format_pipeline
from minish.tokens import TokenType
from minish.executor import execute

first = Command()
first.add_arg("echo")
first.add_arg("hello")

second = Command()
second.add_arg("tr")
second.add_arg("a-z")
second.add_arg("A-Z")
second.add_redirection(Redirection.create(TokenType.REDIR_OUT, "shout.txt"))

pipeline = Pipeline()
pipeline.add(first)
pipeline.add(second)

print(format_pipeline(pipeline))
status = execute(pipeline, shell)
```

## What it does not do

- There is no interactive shell program: no prompt loop, line editing,
  history or signal handling, and no command to run.
- There is no parser from tokens to a `Pipeline`; the caller builds
  `Command` and `Pipeline` objects from the tokens itself.
- Only `|`, `<`, `>`, `>>` and `<<` are understood: no `;`, `&&`, `||`,
  subshells, globbing or background jobs.

## Requirements

Python 3.10 or later on a POSIX system. There are no third-party
dependencies; the tests use pytest (`pip install minish[test]`).