"""Checks generated test suites and documents before they are written out."""

import ast
import subprocess
import sys
import tempfile
from pathlib import Path

import yaml


def validate_python(files: dict[str, str]) -> dict[str, str]:
    """Check generated Python files for syntax errors.

    Returns dict of {filename: error_message} for files with errors.
    """
    errors = {}
    for filename, content in files.items():
        if not filename.endswith(".py") or not content.strip():
            continue
        try:
            ast.parse(content, filename=filename)
        except SyntaxError as e:
            errors[filename] = f"SyntaxError: {e.msg} (line {e.lineno})"
    return errors


def validate_yaml(files: dict[str, str]) -> dict[str, str]:
    """Check YAML test case documents for format errors."""
    errors = {}
    for filename, content in files.items():
        if not filename.endswith((".yaml", ".yml")):
            continue
        try:
            yaml.safe_load(content)
        except yaml.YAMLError as e:
            errors[filename] = f"YAMLError: {e}"
    return errors


def validate_collect(files: dict[str, str]) -> dict[str, str]:
    """Run `pytest --collect-only` over the generated suite in a temp directory.

    Returns dict of {filename: error_message}; collection errors that cannot
    be attributed to a file are reported under "_collect".
    """
    test_files = [f for f, c in files.items() if f.endswith(".py") and c.strip()]
    if not test_files:
        return {}

    errors = {}
    with tempfile.TemporaryDirectory() as tmpdir:
        tmppath = Path(tmpdir)
        for filename, content in files.items():
            filepath = tmppath / filename
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_text(content, encoding="utf-8")

        result = subprocess.run(
            [sys.executable, "-m", "pytest", "--collect-only", "-q", "-p", "no:cacheprovider", str(tmppath)],
            capture_output=True,
            text=True,
            cwd=tmpdir,
        )
        if result.returncode != 0:
            output = result.stderr + result.stdout
            for filename in test_files:
                if filename in output:
                    lines = [l for l in output.splitlines() if filename in l or "Error" in l]
                    errors[filename] = "\n".join(lines[:5])
            if not errors and output.strip():
                errors["_collect"] = output[:500]
    return errors


def validate_files(files: dict[str, str], collect: bool = False) -> dict[str, str]:
    """Run all validations on generated files.

    pytest collection only runs when requested and the syntax checks pass.
    """
    errors = {}
    errors.update(validate_python(files))
    errors.update(validate_yaml(files))

    if collect and not errors:
        errors.update(validate_collect(files))
    return errors
