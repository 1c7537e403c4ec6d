"""Input and output redirections, including here-documents."""

from __future__ import annotations

import os
import re
import tempfile
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import ExitStack, contextmanager
from typing import IO

from minishell.commands import Redirection
from minishell.expand import get_var_value
from minishell.lexer import TokenType

Reader = Callable[[str], "str | None"]

_HEREDOC_NAME = re.compile(r"[A-Za-z0-9_?]*")
_HEREDOC_PROMPT = "> "
_FILE_MODE = 0o644

_OPEN_FLAGS = {
    TokenType.REDIR_IN: os.O_RDONLY,
    TokenType.REDIR_OUT: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    TokenType.REDIR_APPEND: os.O_WRONLY | os.O_CREAT | os.O_APPEND,
}


class RedirectionError(Exception):
    """A redirection target that could not be opened."""

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        super().__init__(reason)


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def expand_heredoc_line(
    line: str, env: Mapping[str, str] | None, exit_status: int
) -> str:
    """Expand ``$NAME`` and ``$?`` in one here-document line.

    A ``$`` at the end of the line is kept; any other ``$`` is replaced by
    the value of the name that follows it, which may be empty.
    """
    pieces: list[str] = []
    pos = 0
    length = len(line)
    while pos < length:
        if line[pos] == "$" and pos + 1 < length:
            match = _HEREDOC_NAME.match(line, pos + 1)
            pieces.append(get_var_value(match.group(), env, exit_status))
            pos = match.end()
        else:
            pieces.append(line[pos])
            pos += 1
    return "".join(pieces)


def read_heredoc(
    delimiter: str,
    env: Mapping[str, str] | None,
    exit_status: int,
    reader: Reader | None = None,
) -> str:
    """Read lines until ``delimiter`` or end of input, expanding variables."""
    read = reader or _read_line
    lines: list[str] = []
    while True:
        line = read(_HEREDOC_PROMPT)
        if line is None or line == delimiter:
            break
        lines.append(expand_heredoc_line(line, env, exit_status) + "\n")
    return "".join(lines)


def _open_target(redirection: Redirection) -> IO[bytes]:
    try:
        fd = os.open(redirection.target, _OPEN_FLAGS[redirection.kind], _FILE_MODE)
    except OSError as exc:
        raise RedirectionError(redirection.target, exc.strerror or str(exc)) from exc
    return os.fdopen(fd, "rb" if redirection.kind is TokenType.REDIR_IN else "wb")


@contextmanager
def apply_redirections(
    redirections: Iterable[Redirection],
    env: Mapping[str, str] | None,
    exit_status: int,
    reader: Reader | None = None,
) -> Iterator[tuple[IO[bytes] | None, IO[bytes] | None]]:
    """Open the redirections in order and yield the resulting stdin and stdout.

    Later redirections of the same stream take the place of earlier ones,
    though every output file is still created.  Raises RedirectionError on
    the first target that cannot be opened.
    """
    with ExitStack() as stack:
        stdin: IO[bytes] | None = None
        stdout: IO[bytes] | None = None
        for redirection in redirections:
            if redirection.kind is TokenType.HEREDOC:
                text = read_heredoc(redirection.target, env, exit_status, reader)
                handle = stack.enter_context(tempfile.TemporaryFile())
                handle.write(text.encode("utf-8", "surrogateescape"))
                handle.seek(0)
                stdin = handle
            elif redirection.kind in _OPEN_FLAGS:
                handle = stack.enter_context(_open_target(redirection))
                if redirection.kind is TokenType.REDIR_IN:
                    stdin = handle
                else:
                    stdout = handle
        yield stdin, stdout