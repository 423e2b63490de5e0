"""Shell state: the variable table and the status of the last command."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass
class Shell:
    """Variables in insertion order; a value of None marks a name exported without a value."""

    variables: dict[str, Optional[str]] = field(default_factory=dict)
    exit_status: int = 0
    should_exit: bool = False

    @classmethod
    def from_environ(cls, environ: Union[Mapping[str, str], Iterable[str]]) -> "Shell":
        """Build a shell from a mapping or from ``NAME=value`` strings."""
        shell = cls()
        if isinstance(environ, Mapping):
            shell.variables.update(environ)
        else:
            for entry in environ:
                shell.add(entry)
        return shell

    def get(self, name: str) -> Optional[str]:
        """Return the value of ``name``, or None if it is unset or has no value."""
        return self.variables.get(name)

    def set(self, name: str, value: str) -> None:
        """Give ``name`` a value, keeping its place if it already exists."""
        self.variables[name] = value

    def add(self, entry: str) -> None:
        """Store a raw ``NAME=value`` or bare ``NAME`` entry."""
        name, sep, value = entry.partition("=")
        self.variables[name] = value if sep else None

    def export_name(self, name: str) -> None:
        """Mark ``name`` as exported without touching an existing entry."""
        self.variables.setdefault(name, None)

    def unset(self, name: str) -> bool:
        """Remove ``name``; return whether it was present."""
        return self.variables.pop(name, _MISSING) is not _MISSING

    def environ(self) -> dict[str, str]:
        """Return the variables that carry a value, for child processes."""
        return {name: value for name, value in self.variables.items() if value is not None}


_MISSING = object()