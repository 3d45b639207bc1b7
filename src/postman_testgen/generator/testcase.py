"""Test case generator: turns endpoints into manual API test cases."""

import re

import yaml

from postman_testgen.errors import GenerationError
from postman_testgen.generator.base import TestCase, TestType
from postman_testgen.parser.base import ApiEndpoint

SENSITIVE_HEADER_MARKERS = ("auth", "key", "token", "secret")
BODY_METHODS = ("POST", "PUT", "PATCH")
MAX_EXPECTED_BODY = 500

OUTPUT_FORMATS = ("jira", "markdown", "yaml")


class TestCaseGenerator:
    """Builds one API test case per endpoint."""

    def generate(self, endpoints: list[ApiEndpoint], collection_name: str | None = None) -> list[TestCase]:
        if not endpoints:
            raise GenerationError("No API endpoints provided for test case generation")
        return [self._generate_for_endpoint(ep, collection_name or ep.collection_name) for ep in endpoints]

    def _generate_for_endpoint(self, endpoint: ApiEndpoint, collection_name: str) -> TestCase:
        description = f"Test the API endpoint: {endpoint.method} {endpoint.url}"
        if endpoint.description:
            description += f"\n\nDescription: {endpoint.description}"

        preconditions = [
            "1. API service is available",
            "2. Required authentication tokens/credentials are available (if needed)",
        ]
        if "Authorization" in endpoint.headers:
            preconditions.append("3. User is authenticated with valid credentials")

        tags = ["api", endpoint.method.lower()]
        if collection_name:
            tags.append(_tag(collection_name))
        if endpoint.folder_path:
            tags.append(_tag(endpoint.folder_path))

        case = TestCase(
            name=f"API Test: {endpoint.name}",
            summary=endpoint.summary,
            description=description,
            type=TestType.API,
            source_url=endpoint.url,
            preconditions="\n".join(preconditions),
            tags=tags,
            metadata={
                "method": endpoint.method,
                "url": endpoint.url,
                "path": endpoint.path,
                "host": endpoint.host,
                "collectionName": collection_name,
                "folderPath": endpoint.folder_path,
                "expectedStatus": str(endpoint.expected_status_code),
                "contentType": endpoint.headers.get("Content-Type", ""),
            },
        )

        self._add_prepare_step(case, endpoint)
        self._add_body_step(case, endpoint)
        case.add_step(f"Send the {endpoint.method} request to {endpoint.path or endpoint.url}", "Request is sent successfully")

        expected = str(endpoint.expected_status_code)
        case.add_step("Verify response status code", f"Response has status code {expected}", expectedStatus=expected)

        if endpoint.example_responses:
            example = endpoint.example_responses[0]
            body = example.body
            if len(body) > MAX_EXPECTED_BODY:
                body = body[:MAX_EXPECTED_BODY] + "... (truncated)"
            case.add_step(
                "Verify response body",
                "Response body matches the expected format and contains expected data",
                expectedResponseBody=body,
            )
        return case

    def _add_prepare_step(self, case: TestCase, endpoint: ApiEndpoint) -> None:
        details = [
            "Request is prepared with the following details:",
            f"- Method: {endpoint.method}",
            f"- URL: {endpoint.url}",
        ]
        test_data: dict[str, str] = {}

        if endpoint.headers:
            details.append("- Headers:")
            for key, value in endpoint.headers.items():
                shown = "********" if _is_sensitive(key) else value
                details.append(f"  - {key}: {shown}")
                test_data[key] = value

        if endpoint.query_params:
            details.append("- Query Parameters:")
            for key, value in endpoint.query_params.items():
                details.append(f"  - {key}: {value}")
                test_data[f"query_{key}"] = value

        step = case.add_step(f"Prepare API request for {endpoint.method} {endpoint.path or endpoint.url}", "\n".join(details))
        step.test_data.update(test_data)

    def _add_body_step(self, case: TestCase, endpoint: ApiEndpoint) -> None:
        if endpoint.method not in BODY_METHODS:
            return
        if endpoint.request_body_type in ("formdata", "urlencoded"):
            if not endpoint.form_data:
                return
            details = ["Form data is set with the following parameters:"]
            details += [f"- {key}: {value}" for key, value in endpoint.form_data.items()]
            step = case.add_step("Set form data parameters", "\n".join(details))
            step.test_data.update(endpoint.form_data)
        elif endpoint.request_body:
            case.add_step(
                "Set request body",
                f"Request body is set to:\n{endpoint.request_body}",
                body=endpoint.request_body,
                bodyType=endpoint.request_body_type,
            )


def render_cases(cases: list[TestCase], fmt: str = "jira") -> str:
    """Render test cases as a single document in the given format."""
    if fmt == "jira":
        return render_jira(cases)
    if fmt == "markdown":
        return render_markdown(cases)
    if fmt == "yaml":
        return render_yaml(cases)
    raise ValueError(f"Unknown test case format: {fmt} (expected one of {', '.join(OUTPUT_FORMATS)})")


def render_jira(cases: list[TestCase]) -> str:
    return "\n----\n\n".join(case.to_jira_format() for case in cases)


def render_markdown(cases: list[TestCase]) -> str:
    sections = []
    for case in cases:
        lines = [f"## {case.name}", ""]
        if case.summary:
            lines += [f"> {case.summary}", ""]
        if case.description:
            lines += [case.description, ""]
        if case.preconditions:
            lines += ["**Preconditions**", "", case.preconditions, ""]
        lines += ["| Step | Action | Expected Result |", "|------|--------|-----------------|"]
        for step in case.steps:
            lines.append(f"| {step.step_number} | {_cell(step.action)} | {_cell(step.expected_result)} |")
        if case.tags:
            lines += ["", "Tags: " + ", ".join(f"`{tag}`" for tag in case.tags)]
        sections.append("\n".join(lines))
    return "\n\n".join(sections) + "\n"


def render_yaml(cases: list[TestCase]) -> str:
    data = [case.model_dump(mode="json") for case in cases]
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def _tag(text: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", text).lower()


def _is_sensitive(header: str) -> bool:
    return any(marker in header.lower() for marker in SENSITIVE_HEADER_MARKERS)


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", "<br>")
