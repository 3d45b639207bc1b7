"""Code generator: renders endpoints as a pytest + requests test suite."""

import json
import pprint
import re

from postman_testgen.errors import GenerationError
from postman_testgen.parser.base import ApiEndpoint

DEFAULT_BASE_URL_ENV = "API_BASE_URL"
DEFAULT_GROUP = "default"
SKIPPED_HEADERS = {"content-length"}
BODY_METHODS = ("POST", "PUT", "PATCH")


class CodeGenerator:
    """Generates a conftest plus one test module per top-level folder."""

    def __init__(self, base_url_env: str = DEFAULT_BASE_URL_ENV):
        self.base_url_env = base_url_env

    def generate(self, endpoints: list[ApiEndpoint]) -> dict[str, str]:
        """Returns a dict of {filename: code_content}."""
        if not endpoints:
            raise GenerationError("No API endpoints provided for code generation")

        files = {"conftest.py": self._render_conftest(derive_base_url(endpoints[0].url))}
        for group, group_endpoints in self._group_by_folder(endpoints).items():
            files[f"test_{group}.py"] = self._render_test_module(group_endpoints)
        return files

    def _group_by_folder(self, endpoints: list[ApiEndpoint]) -> dict[str, list[ApiEndpoint]]:
        """Group endpoints by their top-level folder, keeping document order."""
        groups: dict[str, list[ApiEndpoint]] = {}
        for ep in endpoints:
            top_folder = ep.folder_path.split("/")[0]
            group = _snake(top_folder) or DEFAULT_GROUP
            groups.setdefault(group, []).append(ep)
        return groups

    def _render_conftest(self, base_url: str) -> str:
        return f'''import os

import pytest
import requests

BASE_URL = os.getenv({self.base_url_env!r}, {base_url!r})


@pytest.fixture(scope="session")
def base_url():
    return BASE_URL.rstrip("/")


@pytest.fixture
def session():
    with requests.Session() as s:
        yield s
'''

    def _render_test_module(self, endpoints: list[ApiEndpoint]) -> str:
        used_names: set[str] = set()
        functions = []
        for ep in endpoints:
            name = _unique(f"test_{_snake(ep.short_name)}", used_names)
            functions.append(self._render_test_function(name, ep))
        header = f'"""Tests for {_escape(endpoints[0].collection_name)}."""\n'
        return header + "\n\n" + "\n\n".join(functions)

    def _render_test_function(self, name: str, ep: ApiEndpoint) -> str:
        lines = [
            f"def {name}(base_url, session):",
            f'    """{_escape(ep.name)}: {ep.method} {_escape(ep.url)}"""',
        ]
        if ep.test_script:
            lines.append("    # Postman test script:")
            lines += [f"    #   {line}" if line else "    #" for line in ep.test_script.splitlines()]

        lines.append("    resp = session.request(")
        lines.append(f"        {ep.method!r},")
        lines.append(f'        f"{{base_url}}{_fstring_safe(request_path(ep))}",')

        headers = {k: v for k, v in ep.headers.items() if k.lower() not in SKIPPED_HEADERS}
        if headers:
            lines.append(f"        headers={_literal(headers)},")
        if ep.query_params:
            lines.append(f"        params={_literal(dict(ep.query_params))},")
        if ep.method in BODY_METHODS:
            lines += self._render_body_args(ep)
        lines.append("    )")
        lines.append("")
        lines.append(f"    assert resp.status_code == {ep.expected_status_code}")

        fields = _example_fields(ep)
        if fields:
            lines.append(f"    # Example response fields: {', '.join(fields)}")
        return "\n".join(lines) + "\n"

    def _render_body_args(self, ep: ApiEndpoint) -> list[str]:
        if ep.request_body_type in ("formdata", "urlencoded"):
            return [f"        data={_literal(dict(ep.form_data))},"] if ep.form_data else []
        if not ep.request_body:
            return []
        if ep.request_body_type == "json":
            try:
                return [f"        json={_literal(json.loads(ep.request_body))},"]
            except ValueError:
                pass  # unresolved placeholders, send as text
        return [f"        data={ep.request_body!r},"]


def derive_base_url(url: str) -> str:
    """Scheme and host part of a URL (everything before the first path slash)."""
    scheme_end = url.find("//")
    start = scheme_end + 2 if scheme_end >= 0 else 0
    path_start = url.find("/", start)
    return url[:path_start] if path_start > 0 else url


def request_path(ep: ApiEndpoint) -> str:
    """Path to append to the base URL, without the query string.

    Taken from the resolved URL; `ep.path` keeps its raw placeholders.
    """
    if not ep.url:
        return ep.path
    return ep.url[len(derive_base_url(ep.url)):].split("?")[0]


def _example_fields(ep: ApiEndpoint) -> list[str]:
    for example in ep.example_responses:
        if example.code == ep.expected_status_code and isinstance(example.json_body, dict):
            return [str(key) for key in example.json_body]
    return []


def _literal(value: object) -> str:
    text = pprint.pformat(value, width=80, sort_dicts=False)
    return text.replace("\n", "\n        ")


def _snake(text: str) -> str:
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", text)
    return re.sub(r"[^a-zA-Z0-9]+", "_", text).strip("_").lower()


def _unique(name: str, used: set[str]) -> str:
    candidate, n = name, 2
    while candidate in used:
        candidate = f"{name}_{n}"
        n += 1
    used.add(candidate)
    return candidate


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", " ")


def _fstring_safe(text: str) -> str:
    return _escape(text).replace("{", "{{").replace("}", "}}")
