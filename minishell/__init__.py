"""Parsing and execution of shell command lines: lexing, expansion, pipelines, redirections and builtins."""

__version__ = "0.1.0"
__all__ = ["__version__"]