import pytest

from minishell.environment import (
    Environment,
    env_name,
    identifier_value,
    is_valid_identifier,
)


@pytest.fixture
def table():
    return Environment.from_strings(["HOME=/home/user", "PATH=/bin:/usr/bin", "EMPTY="])


def test_from_strings_splits_at_first_equal():
    env = Environment.from_strings(["A=b=c", "FLAG"])
    assert env.get("A") == "b=c"
    assert "FLAG" in env
    assert env.get("FLAG") is None


def test_from_strings_keeps_empty_content(table):
    assert table.get("EMPTY") == ""
    assert len(table) == 3


def test_add_with_empty_value_has_no_content():
    env = Environment()
    env.add("NAME=")
    env.add("OTHER")
    assert "NAME" in env
    assert env.get("NAME") is None
    assert env.get("OTHER") is None
    assert env.to_envp() == []


def test_add_appends_in_order():
    env = Environment()
    env.add("A=1")
    env.add("B=2")
    assert list(env.items()) == [("A", "1"), ("B", "2")]


def test_add_without_name_raises():
    with pytest.raises(ValueError):
        Environment().add("=value")


def test_to_envp_is_reversed_and_skips_missing_content():
    env = Environment.from_strings(["A=1", "B", "C=3"])
    assert env.to_envp() == ["C=3", "A=1"]


def test_update_existing_and_missing(table):
    assert table.update("HOME", "/tmp") is True
    assert table.get("HOME") == "/tmp"
    assert table.update("MISSING", "x") is False
    assert "MISSING" not in table


def test_update_to_none_clears_content(table):
    assert table.update("PATH", None) is True
    assert "PATH" in table
    assert table.get("PATH") is None


def test_set_adds_when_absent(table):
    assert table.set("PWD", "/srv") is False
    assert table.get("PWD") == "/srv"
    assert table.set("PWD", "/opt") is True
    assert table.get("PWD") == "/opt"
    assert len(table) == 4


def test_delete(table):
    assert table.delete("PATH") is True
    assert "PATH" not in table
    assert table.delete("PATH") is False
    assert len(table) == 2


def test_as_mapping_round_trip(table):
    mapping = table.as_mapping()
    assert mapping["HOME"] == "/home/user"
    rebuilt = Environment.from_strings(f"{k}={v}" for k, v in mapping.items())
    assert rebuilt.as_mapping() == mapping


def test_env_name():
    assert env_name("USER=me") == "USER"
    assert env_name("USER") == "USER"
    assert env_name("=x") is None


@pytest.mark.parametrize(
    "entry, value",
    [
        ("NAME=value", "value"),
        ("NAME", ""),
        ("A=1 2", "1 2"),
        ("_under=ok", "ok"),
        ("9abc=v", "v"),
        ("a1=v", "v"),
    ],
)
def test_identifier_value_valid(entry, value):
    assert identifier_value(entry) == value
    assert is_valid_identifier(entry)


@pytest.mark.parametrize(
    "entry",
    ["1abc", "=value", " lead", "a b", "na-me=x", "a.b", "x$y=1", "_5=1"],
)
def test_identifier_value_invalid(entry):
    assert identifier_value(entry) is None
    assert not is_valid_identifier(entry)