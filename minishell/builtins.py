"""The commands the shell runs itself: echo, cd, pwd, export, unset, env, exit."""

from __future__ import annotations

import enum
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TextIO

from minishell.environment import Environment, env_name, is_valid_identifier

_METACHARS = frozenset("!@#$%^&*()-+={}[]|\\:;'\"<>,./?~`")


class Builtin(enum.Enum):
    ECHO = 1
    CD = 2
    PWD = 3
    EXPORT = 4
    UNSET = 5
    ENV = 6
    EXIT = 7


_NAMES = {
    "echo": Builtin.ECHO,
    "cd": Builtin.CD,
    "pwd": Builtin.PWD,
    "export": Builtin.EXPORT,
    "unset": Builtin.UNSET,
    "env": Builtin.ENV,
    "exit": Builtin.EXIT,
}


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with ``code``."""

    def __init__(self, code: int) -> None:
        self.code = code % 256
        super().__init__(f"exit {self.code}")


@dataclass
class ShellState:
    """Variables and the last exit status shared by the builtins."""

    env: Environment = field(default_factory=Environment)
    exit_status: int = 0


def _error(*parts: str) -> None:
    sys.stderr.write("".join(parts))
    sys.stderr.flush()


def builtin_kind(name: str | None) -> Builtin | None:
    """The builtin called ``name``, or None for any other command."""
    if name is None:
        return None
    return _NAMES.get(name)


def is_all_numeric(text: str) -> bool:
    """True for an optional sign followed by at least one digit."""
    digits = text[1:] if text[:1] in ("-", "+") else text
    return bool(digits) and all("0" <= ch <= "9" for ch in digits)


def is_metachar(text: str | None) -> bool:
    """True when ``text`` begins with a shell metacharacter."""
    return bool(text) and text[0] in _METACHARS


def _is_n_flag(arg: str) -> bool:
    if len(arg) < 2 or arg[0] != "-":
        return False
    for ch in arg[1:]:
        if ch in " \t":
            break
        if ch != "n":
            return False
    return True


def echo(argv: Sequence[str], out: TextIO) -> int:
    """Write the arguments separated by spaces; ``-n`` drops the newline."""
    args = list(argv[1:])
    newline = True
    while args and _is_n_flag(args[0]):
        newline = False
        args.pop(0)
    out.write(" ".join(args))
    if newline:
        out.write("\n")
    return 0


def _current_dir() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def change_dir(state: ShellState, path: str) -> bool:
    """Change directory and update PWD and OLDPWD; False if it fails."""
    old = _current_dir()
    try:
        os.chdir(path)
    except OSError:
        return False
    if state.env.set("PWD", _current_dir()):
        state.env.set("OLDPWD", old)
    else:
        state.env.delete("OLDPWD")
    return True


def _cd_home(state: ShellState) -> int:
    if "HOME" not in state.env:
        _error("-bash: cd: HOME not set\n")
        state.exit_status |= 1
        return 1
    home = state.env.get("HOME")
    if home is not None:
        change_dir(state, home)
    return 0


def _cd_previous(state: ShellState, out: TextIO) -> int:
    previous = state.env.get("OLDPWD")
    if previous is None:
        _error("-bash: cd: OLDPWD not set\n")
        state.exit_status = 1
        return 1
    if change_dir(state, previous):
        out.write(f"{previous}\n")
    return 0


def cd(state: ShellState, argv: Sequence[str], out: TextIO) -> int:
    """Change directory to the argument, to HOME, or with ``-`` to OLDPWD."""
    if len(argv) > 2:
        state.exit_status = 1
        _error("-bash: cd: too many arguments\n")
        return 1
    if len(argv) < 2 or argv[1] == "~":
        return _cd_home(state)
    if argv[1] == "-":
        return _cd_previous(state, out)
    if not change_dir(state, argv[1]):
        _error("-bash: cd: ", argv[1], ": No such file or directory\n")
        state.exit_status = 1
        return 1
    return 0


def pwd(out: TextIO) -> int:
    """Write the current directory."""
    out.write(f"{os.getcwd()}\n")
    return 0


def env(state: ShellState, out: TextIO) -> int:
    """Write every variable that has content as ``NAME=value``."""
    for name, content in state.env.items():
        if content is not None:
            out.write(f"{name}={content}\n")
    return 0


def _export_one(state: ShellState, entry: str) -> None:
    name = env_name(entry)
    if name is None or not is_valid_identifier(entry):
        _error("-bash: export: `", entry, "': not a valid identifier\n")
        state.exit_status = 1
        return
    rest = entry[len(name):]
    if name in state.env:
        if rest.startswith("="):
            state.env.update(name, rest[1:])
        return
    state.env.add(entry)


def export(state: ShellState, argv: Sequence[str], out: TextIO) -> int:
    """Set variables, or list them all sorted by name when given none."""
    state.exit_status = 0
    if len(argv) > 1:
        for entry in argv[1:]:
            _export_one(state, entry)
        return state.exit_status
    for name, content in sorted(state.env.items(), key=lambda item: item[0]):
        if content is None:
            out.write(f"declare -x {name}\n")
        else:
            out.write(f'declare -x {name}="{content}"\n')
    return state.exit_status


def unset(state: ShellState, argv: Sequence[str]) -> int:
    """Remove the named variables, skipping invalid names."""
    status = 0
    for name in argv[1:]:
        if not is_valid_identifier(name):
            state.exit_status = 1
            status = 1
            continue
        state.env.delete(name)
    return status


def exit_builtin(state: ShellState, argv: Sequence[str], out: TextIO) -> int:
    """Raise ShellExit with the given code, or the last status by default."""
    if len(argv) > 2:
        _error("exit\n-bash: exit: too many arguments\n")
        state.exit_status = 1
        return 1
    out.write("exit\n")
    code = state.exit_status
    if len(argv) == 2:
        if is_all_numeric(argv[1]):
            code = int(argv[1])
        else:
            _error("-bash: exit: ", argv[1], ": numeric argument required\n")
            code = 2
    raise ShellExit(code)


def run_builtin(state: ShellState, argv: Sequence[str], out: TextIO) -> int:
    """Run the builtin named by ``argv[0]`` and return its status."""
    kind = builtin_kind(argv[0] if argv else None)
    if kind is Builtin.ECHO:
        return echo(argv, out)
    if kind is Builtin.CD:
        return cd(state, argv, out)
    if kind is Builtin.PWD:
        return pwd(out)
    if kind is Builtin.EXPORT:
        return export(state, argv, out)
    if kind is Builtin.UNSET:
        return unset(state, argv)
    if kind is Builtin.ENV:
        return env(state, out)
    if kind is Builtin.EXIT:
        return exit_builtin(state, argv, out)
    raise ValueError(f"not a builtin: {argv[0] if argv else ''!r}")