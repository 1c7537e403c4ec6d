"""The shell's own table of environment variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

_METACHARS = frozenset("!@#$%^&*()-+={}[]|\\:;'\"<>,./?~`")


def _is_metachar(ch: str) -> bool:
    return ch in _METACHARS


def env_name(entry: str) -> str | None:
    """Name part of a ``NAME=value`` entry, or None when it is empty."""
    name = entry.partition("=")[0]
    return name or None


def identifier_value(entry: str) -> str | None:
    """Value of an ``export``-style argument, or None if its name is invalid.

    An argument without ``=`` gives the empty string.  A name may not begin
    with a blank or ``=``, contain a blank or a shell metacharacter, and,
    unless it starts with a letter, may not contain the digits 1 to 8.
    """
    if not entry or entry[0] in " =":
        return "" if not entry else None
    starts_alpha = entry[0].isascii() and entry[0].isalpha()
    pos = 0
    while pos < len(entry) and entry[pos] not in " =":
        ch = entry[pos]
        if ("0" < ch < "9" and not starts_alpha) or _is_metachar(ch):
            return None
        pos += 1
    if pos == len(entry):
        return ""
    if entry[pos] == "=":
        return entry[pos + 1 :]
    return None


def is_valid_identifier(entry: str) -> bool:
    """True when ``entry`` is acceptable to ``export`` and ``unset``."""
    return identifier_value(entry) is not None


@dataclass
class _Variable:
    name: str
    content: str | None


class Environment:
    """Ordered variables; a variable may exist without any content."""

    def __init__(self) -> None:
        self._variables: list[_Variable] = []

    @classmethod
    def from_strings(cls, envp: Iterable[str]) -> Environment:
        """Build a table from ``NAME=value`` strings as a process receives them."""
        table = cls()
        for entry in envp:
            name, equal, content = entry.partition("=")
            table._variables.append(_Variable(name, content if equal else None))
        return table

    def _find(self, name: str | None) -> _Variable | None:
        if name is None:
            return None
        return next((var for var in self._variables if var.name == name), None)

    def get(self, name: str) -> str | None:
        """Content of ``name``; None when unset or set without content."""
        var = self._find(name)
        return var.content if var else None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._find(name) is not None

    def __len__(self) -> int:
        """Number of variables, with or without content."""
        return len(self._variables)

    def add(self, entry: str) -> None:
        """Append a ``NAME=value`` entry; an empty value leaves it without content."""
        name = env_name(entry)
        if name is None:
            raise ValueError(f"no variable name in {entry!r}")
        rest = entry[len(name) :]
        content = rest[1:] if rest.startswith("=") and len(rest) > 1 else None
        self._variables.append(_Variable(name, content))

    def update(self, name: str, content: str | None) -> bool:
        """Replace the content of an existing variable; False if there is none."""
        var = self._find(name)
        if var is None:
            return False
        var.content = content
        return True

    def set(self, name: str, content: str | None) -> bool:
        """Update ``name``, or append it if absent; True if it already existed."""
        if self.update(name, content):
            return True
        self.add(f"{name}={content or ''}")
        return False

    def delete(self, name: str) -> bool:
        """Remove the first variable called ``name``; False if there is none."""
        var = self._find(name)
        if var is None:
            return False
        self._variables.remove(var)
        return True

    def items(self) -> Iterator[tuple[str, str | None]]:
        """All variables in table order as ``(name, content)`` pairs."""
        return ((var.name, var.content) for var in self._variables)

    def to_envp(self) -> list[str]:
        """``NAME=value`` strings of variables with content, newest first."""
        return [
            f"{var.name}={var.content}"
            for var in reversed(self._variables)
            if var.content is not None
        ]

    def as_mapping(self) -> dict[str, str]:
        """Variables with content as a dict, later entries taking precedence."""
        return {
            var.name: var.content
            for var in self._variables
            if var.content is not None
        }