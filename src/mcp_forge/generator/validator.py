"""Validates generated files for syntax and format correctness."""

import ast
import json
import tomllib
from collections.abc import Callable

import yaml


def _check_python(filename: str, content: str) -> str | None:
    if not content.strip():
        return None
    try:
        ast.parse(content, filename=filename)
    except SyntaxError as e:
        return f"SyntaxError: {e.msg} (line {e.lineno})"
    return None


def _check_json(filename: str, content: str) -> str | None:
    try:
        json.loads(content)
    except json.JSONDecodeError as e:
        return f"JSONDecodeError: {e.msg} (line {e.lineno})"
    return None


def _check_toml(filename: str, content: str) -> str | None:
    try:
        tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        return f"TOMLDecodeError: {e}"
    return None


def _check_yaml(filename: str, content: str) -> str | None:
    try:
        yaml.safe_load(content)
    except yaml.YAMLError as e:
        return f"YAMLError: {e}"
    return None


Checker = Callable[[str, str], str | None]

# (file suffixes, checker) pairs run by validate_files.
CHECKERS: list[tuple[tuple[str, ...], Checker]] = [
    ((".py",), _check_python),
    ((".json",), _check_json),
    ((".toml",), _check_toml),
    ((".yaml", ".yml"), _check_yaml),
]


def _run(files: dict[str, str], suffixes: tuple[str, ...], check: Checker) -> dict[str, str]:
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(suffixes):
            continue
        message = check(filename, content)
        if message:
            errors[filename] = message
    return errors


def validate_python(files: dict[str, str]) -> dict[str, str]:
    """Check Python files for syntax errors. Empty files are skipped."""
    return _run(files, (".py",), _check_python)


def validate_json(files: dict[str, str]) -> dict[str, str]:
    return _run(files, (".json",), _check_json)


def validate_toml(files: dict[str, str]) -> dict[str, str]:
    return _run(files, (".toml",), _check_toml)


def validate_yaml(files: dict[str, str]) -> dict[str, str]:
    return _run(files, (".yaml", ".yml"), _check_yaml)


def validate_files(files: dict[str, str]) -> dict[str, str]:
    """Run every checker over the generated files.

    Returns dict of {filename: error_message} for all files with errors.
    """
    errors = {}
    for suffixes, check in CHECKERS:
        errors.update(_run(files, suffixes, check))
    return errors
