# minishell

A library for parsing and running shell command lines. It checks a line,
splits it into words and tokens, and expands variables. It then groups the
tokens into piped commands and runs them. Builtins run inside the Python
process. Other programs run as child processes.

## Features

- Single (`'...'`) and double (`"..."`) quotes. Variables are not expanded
  in a word whose last opened quote was a single quote.
- `$NAME` and `$?` expansion.
- Pipelines: `cmd1 | cmd2 | cmd3`. The status is that of the last command.
- Redirections: `<`, `>`, `>>`, and here-documents with `<<`. Variables are
  expanded inside here-document lines.
- Builtins: `echo` (with `-n`), `cd` (with `~` and `-`), `pwd`, `export`,
  `unset`, `env` and `exit`.
- External programs are looked up through `PATH`. A name containing `/` is
  used as given.
- Unquoted `;`, `\` and `&` are rejected as syntax errors.

## Installation

```
pip install .
```

## Running a line

```python
import os

from minishell.builtins import ShellExit, ShellState
from minishell.commands import commands_from_tokens
from minishell.environment import Environment
from minishell.executor import execute
from minishell.expand import expand_tokens
from minishell.lexer import ShellSyntaxError, split_input, tokenize, validate_input

state = ShellState(
    env=Environment.from_strings(f"{k}={v}" for k, v in os.environ.items())
)

line = 'echo "$HOME" | tr a-z A-Z'
try:
    tokens = tokenize(split_input(validate_input(line)))
    tokens = expand_tokens(tokens, state.env.as_mapping(), state.exit_status)
    status = execute(state, commands_from_tokens(tokens))
except ShellSyntaxError as err:
    print(f"minishell: {err}")
except ShellExit as done:
    print("exit code", done.code)
```

- `validate_input` raises `ShellSyntaxError` for an unquoted `;`, `\` or `&`.
- `split_input` raises `UnclosedQuoteError` when a quote is never closed.
- `tokenize` raises `ShellSyntaxError` when a pipe or redirection is misplaced.
- `execute` returns the status of the line and stores it in
  `state.exit_status`.
- A redirection that cannot be opened is reported on standard error, and the
  command's status is 1.
- An unknown command prints `minishell: NAME: command not found` and gives
  status 127.

When a builtin runs as a command on its own, it changes `state`: `cd`, `export`
and `unset` take effect for later lines. Inside a pipeline, a builtin runs on a
copy of the state and leaves the shell unchanged. The `exit` builtin raises
`ShellExit`. Its `code` is the argument modulo 256, or 2 if the argument is not
numeric.

Here-document lines are read from standard input with a `> ` prompt.
`minishell.redirections.read_heredoc` and `apply_redirections` also take a
`reader` callable, which is used in place of standard input.

## The parts

- `minishell.lexer`: `validate_input`, `split_input`, `token_type`, `tokenize`,
  `Token`, `TokenType`.
- `minishell.expand`: `remove_quotes`, `expand_variables`, `expand_word`,
  `expand_tokens`, `get_var_value`, `extract_var_name`.
- `minishell.commands`: `Command`, `Redirection`, `commands_from_tokens`.
- `minishell.environment`: `Environment`, an ordered variable table in which a
  variable may exist without content. It also holds `env_name`,
  `identifier_value` and `is_valid_identifier`.
- `minishell.builtins`: `ShellState`, `run_builtin`, and one function for each
  builtin.
- `minishell.redirections`: `apply_redirections` (a context manager that yields
  the redirected stdin and stdout), `read_heredoc`, `expand_heredoc_line`.
- `minishell.executor`: `execute`, `execute_builtin`, `execute_external`,
  `execute_pipeline`, `find_in_path`.

## What it does not do

The package has no interactive prompt and installs no command. It does not
read lines from a terminal, and it keeps no history. It installs no handlers
for Ctrl-C or Ctrl-\ in the calling process. On POSIX, child processes start
with SIGINT and SIGQUIT set back to their defaults. To get a working shell, a
program has to supply the read loop shown above.

## Running the tests

```
pip install .[test]
pytest
```