"""Running parsed commands: builtins in the shell, the rest as child processes."""

from __future__ import annotations

import copy
import io
import os
import signal
import subprocess
import sys
import tempfile
from collections.abc import Mapping, Sequence
from contextlib import ExitStack
from typing import IO, Any

from minishell.builtins import ShellExit, ShellState, builtin_kind, run_builtin
from minishell.commands import Command
from minishell.expand import get_var_value
from minishell.redirections import RedirectionError, apply_redirections


def _reset_child_signals() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


_PREEXEC = _reset_child_signals if os.name == "posix" else None


def _report(error: BaseException) -> None:
    if isinstance(error, OSError) and error.strerror:
        message = error.strerror
    else:
        message = str(error)
    sys.stderr.write(f"minishell: {message}\n")
    sys.stderr.flush()


def _not_found(name: str) -> int:
    print(f"minishell: {name}: command not found", flush=True)
    return 127


def _close(stream: Any) -> None:
    if hasattr(stream, "close"):
        stream.close()


def _current_dir() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def is_executable(path: str) -> bool:
    """True when ``path`` exists and may be executed."""
    return os.access(path, os.F_OK) and os.access(path, os.X_OK)


def find_in_path(cmd: str | None, env: Mapping[str, str] | None) -> str | None:
    """Locate ``cmd`` in the PATH directories; a name with ``/`` is used as is."""
    if not cmd or env is None:
        return None
    if "/" in cmd:
        return cmd
    for directory in filter(None, get_var_value("PATH", env, 0).split(":")):
        candidate = f"{directory}/{cmd}"
        if is_executable(candidate):
            return candidate
    return None


def _run_builtin_to(
    state: ShellState, argv: Sequence[str], sink: IO[bytes] | None
) -> int:
    if sink is None:
        try:
            return run_builtin(state, argv, sys.stdout)
        finally:
            sys.stdout.flush()
    out = io.TextIOWrapper(
        sink, encoding="utf-8", errors="surrogateescape", write_through=True
    )
    try:
        return run_builtin(state, argv, out)
    finally:
        out.flush()
        out.detach()


def _run_builtin_isolated(
    state: ShellState, argv: Sequence[str], sink: IO[bytes] | None
) -> int:
    """Run a builtin as a pipeline stage, leaving the shell's own state alone."""
    scratch = copy.deepcopy(state)
    cwd = _current_dir()
    try:
        return _run_builtin_to(scratch, argv, sink)
    except ShellExit as exc:
        return exc.code
    finally:
        if cwd is not None:
            try:
                os.chdir(cwd)
            except OSError:
                pass


def execute_builtin(state: ShellState, command: Command) -> int:
    """Run a builtin in the shell itself, honouring its redirections."""
    env = state.env.as_mapping()
    try:
        with apply_redirections(
            command.redirections, env, state.exit_status
        ) as (_, stdout):
            return _run_builtin_to(state, command.argv, stdout)
    except RedirectionError as err:
        _report(err)
        return 1


def execute_external(state: ShellState, command: Command) -> int:
    """Run an external program and wait for it; return its exit status."""
    if not command.argv:
        return 1
    env = state.env.as_mapping()
    path = find_in_path(command.argv[0], env)
    if path is None:
        return _not_found(command.argv[0])
    try:
        with apply_redirections(
            command.redirections, env, state.exit_status
        ) as (stdin, stdout):
            sys.stdout.flush()
            try:
                completed = subprocess.run(
                    command.argv,
                    executable=path,
                    stdin=stdin,
                    stdout=stdout,
                    env=env,
                    preexec_fn=_PREEXEC,
                )
            except OSError as exc:
                _report(exc)
                return 127
    except RedirectionError as err:
        _report(err)
        return 1
    return completed.returncode if completed.returncode >= 0 else 1


def execute_pipeline(state: ShellState, commands: Sequence[Command]) -> int:
    """Connect the commands with pipes; return the status of the last one."""
    commands = list(commands)
    if not commands:
        return 0
    env = state.env.as_mapping()
    statuses = [0] * len(commands)
    running: list[tuple[int, subprocess.Popen[bytes]]] = []
    last = len(commands) - 1
    with ExitStack() as stack:
        upstream: Any = None
        for index, command in enumerate(commands):
            is_last = index == last
            try:
                stdin, stdout = stack.enter_context(
                    apply_redirections(command.redirections, env, state.exit_status)
                )
            except RedirectionError as err:
                _report(err)
                statuses[index] = 1
                _close(upstream)
                upstream = subprocess.DEVNULL
                continue
            source = stdin if stdin is not None else upstream
            if not command.argv:
                _close(upstream)
                upstream = subprocess.DEVNULL
                continue
            if builtin_kind(command.argv[0]) is not None:
                _close(upstream)
                sink = stdout
                if sink is None and not is_last:
                    sink = stack.enter_context(tempfile.TemporaryFile())
                statuses[index] = _run_builtin_isolated(state, command.argv, sink)
                if sink is not None and sink is not stdout:
                    sink.seek(0)
                    upstream = sink
                else:
                    upstream = subprocess.DEVNULL
                continue
            path = find_in_path(command.argv[0], env)
            if path is None:
                statuses[index] = _not_found(command.argv[0])
                _close(upstream)
                upstream = subprocess.DEVNULL
                continue
            if stdout is not None:
                target: Any = stdout
            else:
                target = None if is_last else subprocess.PIPE
            sys.stdout.flush()
            try:
                proc = subprocess.Popen(
                    command.argv,
                    executable=path,
                    stdin=source,
                    stdout=target,
                    env=env,
                    preexec_fn=_PREEXEC,
                )
            except OSError as exc:
                _report(exc)
                statuses[index] = 127
                _close(upstream)
                upstream = subprocess.DEVNULL
                continue
            _close(upstream)
            running.append((index, proc))
            if proc.stdout is not None:
                upstream = stack.enter_context(proc.stdout)
            else:
                upstream = subprocess.DEVNULL
        _close(upstream)
        for index, proc in running:
            code = proc.wait()
            statuses[index] = code if code >= 0 else 128 - code
    return statuses[-1]


def execute(state: ShellState, commands: Sequence[Command]) -> int:
    """Run a parsed line and record its status as the last exit status."""
    commands = list(commands)
    if not commands:
        return 0
    if len(commands) > 1:
        status = execute_pipeline(state, commands)
    elif not commands[0].argv:
        status = 0
    elif builtin_kind(commands[0].argv[0]) is not None:
        status = execute_builtin(state, commands[0])
    else:
        status = execute_external(state, commands[0])
    state.exit_status = status
    return status