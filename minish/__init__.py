"""Core of a small POSIX-style shell: tokenizer, expander, builtins, heredocs and executor."""

__version__ = "0.1.0"