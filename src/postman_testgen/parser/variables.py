"""Postman `{{variable}}` substitution."""

from typing import Any


def resolve_variables(
    text: str | None,
    collection_vars: dict[str, str],
    folder_vars: dict[str, str],
) -> str | None:
    """Replace `{{key}}` placeholders in a single pass.

    Folder variables are applied first, so they win over a collection
    variable of the same name. Values are inserted verbatim; a value that
    itself contains a placeholder is only filled if a later entry in the
    same pass happens to match it.
    """
    if not text:
        return text

    result = text
    for key, value in folder_vars.items():
        result = result.replace("{{" + key + "}}", value)
    for key, value in collection_vars.items():
        result = result.replace("{{" + key + "}}", value)
    return result


def extract_variables(variables: Any) -> dict[str, str]:
    """Read a Postman `variable` array into a key -> value dict."""
    result: dict[str, str] = {}
    if not isinstance(variables, list):
        return result
    for var in variables:
        if not isinstance(var, dict):
            continue
        key = as_text(var.get("key"))
        if key:
            result[key] = as_text(var.get("value"))
    return result


def as_text(value: Any, default: str = "") -> str:
    """Coerce a JSON scalar to text; containers and null give the default."""
    if value is None or isinstance(value, (dict, list)):
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
