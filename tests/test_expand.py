import pytest

from minishell.expand import (
    QuoteMode,
    expand_tokens,
    expand_variables,
    expand_word,
    extract_var_name,
    get_var_value,
    remove_quotes,
)
from minishell.lexer import Token, TokenType, tokenize

ENV = {"HOME": "/home/user", "USER_1": "alice", "PATH": "/bin:/usr/bin"}


def test_get_var_value_exit_status():
    assert get_var_value("?", {}, 42) == "42"


def test_get_var_value_from_env():
    assert get_var_value("HOME", ENV, 0) == ENV["HOME"]


def test_get_var_value_missing_is_empty():
    assert get_var_value("NOPE", ENV, 0) == ""
    assert get_var_value(None, ENV, 0) == ""
    assert get_var_value("HOME", None, 0) == ""


def test_get_var_value_no_prefix_match():
    assert get_var_value("HOM", ENV, 0) == ""


def test_extract_exit_status_name():
    name, length = extract_var_name("$?abc")
    assert name == "?"
    assert length == len("$?")


def test_extract_name_stops_at_non_name_char():
    name, length = extract_var_name("$USER_1 rest")
    assert name == "USER_1"
    assert length == len("$USER_1")


@pytest.mark.parametrize("text", ["$", "$1abc", "$ x", "$-"])
def test_extract_invalid_name(text):
    assert extract_var_name(text) == ("", 1)


def test_extract_requires_dollar():
    with pytest.raises(ValueError):
        extract_var_name("HOME")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("'hello'", ("hello", QuoteMode.SINGLE)),
        ('"a b"', ("a b", QuoteMode.DOUBLE)),
        ("plain", ("plain", QuoteMode.NONE)),
        ("\"it's\"", ("it's", QuoteMode.DOUBLE)),
        ("'a'\"b\"", ("ab", QuoteMode.DOUBLE)),
    ],
)
def test_remove_quotes(text, expected):
    assert remove_quotes(text) == expected


@pytest.mark.parametrize("text", ["abc", "a$b", "/usr/bin", ""])
def test_remove_quotes_leaves_unquoted_text(text):
    assert remove_quotes(text) == (text, QuoteMode.NONE)


def test_expand_variables_plain():
    result = expand_variables("$HOME/x", ENV, 0, QuoteMode.NONE)
    assert result == ENV["HOME"] + "/x"


def test_expand_variables_single_mode_is_literal():
    assert expand_variables("$HOME", ENV, 0, QuoteMode.SINGLE) == "$HOME"


def test_expand_variables_double_mode_expands():
    assert expand_variables("$USER_1", ENV, 0, QuoteMode.DOUBLE) == ENV["USER_1"]


def test_expand_variables_drops_lone_dollar():
    assert expand_variables("$", ENV, 0, QuoteMode.NONE) == ""
    assert expand_variables("cost $5", ENV, 0, QuoteMode.NONE) == "cost 5"


def test_expand_variables_unset_becomes_empty():
    assert expand_variables("a$NOPE.b", ENV, 0, QuoteMode.NONE) == "a.b"


def test_expand_word_single_quoted():
    assert expand_word("'$HOME'", ENV, 0) == "$HOME"


def test_expand_word_double_quoted():
    assert expand_word('"$HOME"', ENV, 0) == ENV["HOME"]


def test_expand_word_exit_status():
    assert expand_word("$?", {}, 127) == "127"


def test_expand_tokens_only_words():
    tokens = tokenize(["echo", "$HOME", "|", "cat"])
    expanded = expand_tokens(tokens, ENV, 0)
    assert [t.value for t in expanded] == ["echo", ENV["HOME"], "|", "cat"]
    assert [t.kind for t in expanded] == [t.kind for t in tokens]


def test_expand_tokens_leaves_operator_untouched():
    pipe = Token("|", TokenType.PIPE)
    assert expand_tokens([pipe], ENV, 0) == [pipe]