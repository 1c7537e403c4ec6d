"""Quote removal and ``$`` variable expansion of words."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Mapping
from dataclasses import replace

from minishell.lexer import Token, TokenType

_VARIABLE = re.compile(r"\$(\?|[A-Za-z_][A-Za-z0-9_]*)?")
_QUOTES = "'\""


class QuoteMode(enum.IntEnum):
    """The kind of the last quote opened in a word."""

    NONE = 0
    SINGLE = 1
    DOUBLE = 2


def get_var_value(
    name: str | None, env: Mapping[str, str] | None, exit_status: int
) -> str:
    """Value of a variable, ``$?`` giving the last exit status, unset giving ''."""
    if name is None:
        return ""
    if name == "?":
        return str(exit_status)
    if not env:
        return ""
    return env.get(name, "")


def extract_var_name(text: str) -> tuple[str, int]:
    """Name of the variable at the start of ``text`` and the characters it spans.

    A ``$`` not followed by a valid name gives an empty name spanning one
    character.
    """
    match = _VARIABLE.match(text)
    if match is None:
        raise ValueError(f"not a variable reference: {text!r}")
    return match.group(1) or "", match.end()


def remove_quotes(text: str) -> tuple[str, QuoteMode]:
    """Strip quote characters, returning the text and the last quote mode."""
    pieces: list[str] = []
    quote: str | None = None
    mode = QuoteMode.NONE
    for ch in text:
        if quote is None and ch in _QUOTES:
            quote = ch
            mode = QuoteMode.SINGLE if ch == "'" else QuoteMode.DOUBLE
        elif ch == quote:
            quote = None
        else:
            pieces.append(ch)
    return "".join(pieces), mode


def expand_variables(
    text: str,
    env: Mapping[str, str] | None,
    exit_status: int,
    mode: QuoteMode,
) -> str:
    """Replace ``$NAME`` and ``$?`` unless the word was single-quoted."""
    if mode == QuoteMode.SINGLE:
        return text

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        return get_var_value(name, env, exit_status) if name else ""

    return _VARIABLE.sub(substitute, text)


def expand_word(
    word: str, env: Mapping[str, str] | None, exit_status: int
) -> str:
    """Remove quotes from a word, then expand its variables."""
    unquoted, mode = remove_quotes(word)
    return expand_variables(unquoted, env, exit_status, mode)


def expand_tokens(
    tokens: Iterable[Token], env: Mapping[str, str] | None, exit_status: int
) -> list[Token]:
    """Expand every word token, leaving operators as they are."""
    return [
        replace(token, value=expand_word(token.value, env, exit_status))
        if token.kind is TokenType.WORD
        else token
        for token in tokens
    ]