"""Grouping of tokens into piped commands with their redirections."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from minishell.lexer import ShellSyntaxError, Token, TokenType


@dataclass(frozen=True)
class Redirection:
    kind: TokenType
    target: str


@dataclass
class Command:
    argv: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)


def commands_from_tokens(tokens: Iterable[Token]) -> list[Command]:
    """Build the pipeline of commands described by ``tokens``.

    Each pipe closes the current command; a redirection takes the next token
    as its target.
    """
    commands: list[Command] = []
    current: Command | None = None
    stream = iter(tokens)
    for token in stream:
        if current is None:
            current = Command()
        if token.kind is TokenType.PIPE:
            commands.append(current)
            current = None
        elif token.kind is TokenType.WORD:
            current.argv.append(token.value)
        else:
            target = next(stream, None)
            if target is None:
                raise ShellSyntaxError("newline")
            current.redirections.append(Redirection(token.kind, target.value))
    if current is not None:
        commands.append(current)
    return commands