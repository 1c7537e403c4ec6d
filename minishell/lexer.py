"""Input validation, word splitting and tokenization of command lines."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

_BLANKS = " \t"
_QUOTES = "'\""
_UNSUPPORTED = ";\\&"


class ShellSyntaxError(Exception):
    """A command line that the shell cannot parse."""

    def __init__(self, token: str = "newline", message: str | None = None) -> None:
        self.token = token
        if message is None:
            message = f"syntax error near unexpected token `{token}'"
        super().__init__(message)


class UnclosedQuoteError(ShellSyntaxError):
    """A quote opened on the command line was never closed."""

    def __init__(self, quote: str) -> None:
        self.quote = quote
        super().__init__(
            quote, f"unexpected EOF while looking for matching `{quote}'"
        )


class TokenType(enum.Enum):
    WORD = enum.auto()
    PIPE = enum.auto()
    REDIR_IN = enum.auto()
    REDIR_OUT = enum.auto()
    REDIR_APPEND = enum.auto()
    HEREDOC = enum.auto()

    def is_redirect(self) -> bool:
        """True for the four redirection operators."""
        return self in _REDIRECTS


_REDIRECTS = frozenset(
    {
        TokenType.REDIR_IN,
        TokenType.REDIR_OUT,
        TokenType.REDIR_APPEND,
        TokenType.HEREDOC,
    }
)

_OPERATORS = {
    "|": TokenType.PIPE,
    "<": TokenType.REDIR_IN,
    ">": TokenType.REDIR_OUT,
    ">>": TokenType.REDIR_APPEND,
    "<<": TokenType.HEREDOC,
}


@dataclass(frozen=True)
class Token:
    value: str
    kind: TokenType


def validate_input(line: str) -> str:
    """Reject ``;``, ``\\`` and ``&`` outside quotes; return the line unchanged."""
    quote: str | None = None
    for ch in line:
        if ch in _QUOTES and quote is None:
            quote = ch
        elif ch == quote:
            quote = None
        elif quote is None and ch in _UNSUPPORTED:
            raise ShellSyntaxError(ch)
    return line


def split_input(line: str) -> list[str]:
    """Split a line on blanks, keeping quoted sections inside their word."""
    parts: list[str] = []
    length = len(line)
    pos = 0
    while True:
        while pos < length and line[pos] in _BLANKS:
            pos += 1
        if pos >= length:
            break
        start = pos
        while pos < length and line[pos] not in _BLANKS:
            ch = line[pos]
            if ch in _QUOTES:
                closing = line.find(ch, pos + 1)
                if closing < 0:
                    raise UnclosedQuoteError(ch)
                pos = closing
            pos += 1
        parts.append(line[start:pos])
    return parts


def token_type(text: str) -> TokenType:
    """Classify one word as an operator or a plain word."""
    return _OPERATORS.get(text, TokenType.WORD)


def tokenize(parts: Sequence[str]) -> list[Token]:
    """Turn split words into tokens, checking pipe and redirection syntax."""
    parts = list(parts)
    tokens: list[Token] = []
    previous = TokenType.PIPE
    following_parts = parts[1:] + [None]
    for index, (part, following) in enumerate(zip(parts, following_parts)):
        kind = token_type(part)
        if kind is TokenType.PIPE:
            if (
                index == 0
                or following is None
                or previous is TokenType.PIPE
                or previous.is_redirect()
            ):
                raise ShellSyntaxError("|" if following is not None else "newline")
        elif kind.is_redirect():
            if following is None:
                raise ShellSyntaxError("newline")
            if token_type(following) is not TokenType.WORD:
                raise ShellSyntaxError(following)
        tokens.append(Token(part, kind))
        previous = kind
    return tokens