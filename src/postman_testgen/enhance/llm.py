"""LLM-backed enhancement: asks a model for additional test cases."""

import json
import logging

from pydantic import ValidationError

from postman_testgen.generator.base import TestCase, TestType
from postman_testgen.llm import LlmClient, extract_json
from postman_testgen.parser.base import ApiEndpoint

SYSTEM_PROMPT = """You are a senior QA engineer reviewing API test coverage.
You receive a list of API endpoints and the names of the test cases that already exist.
Suggest additional test cases that are NOT already covered: boundary values, error handling,
security and performance scenarios.

Output a JSON array of test case objects. Each object must have these fields:
- name: short unique name
- description: one sentence
- type: one of API / SECURITY / PERFORMANCE / EDGE_CASE
- steps: array of {action, expected_result}

Output ONLY the JSON array, no other text."""

_logger = logging.getLogger(__name__)


class LlmEnhancer:
    """Enhancer that delegates the extra cases to an LLM via litellm."""

    def __init__(self, model: str | None = None, logger: logging.Logger | None = None):
        self.client = LlmClient(model=model)
        self.logger = logger or _logger

    def enhance(self, endpoints: list[ApiEndpoint], cases: list[TestCase]) -> list[TestCase]:
        user_prompt = (
            "Endpoints:\n"
            f"```json\n{json.dumps([_endpoint_brief(ep) for ep in endpoints], indent=2)}\n```\n\n"
            "Existing test cases:\n" + "\n".join(f"- {case.name}" for case in cases)
        )
        response = self.client.call(system=SYSTEM_PROMPT, user=user_prompt)

        try:
            suggested = self._parse_cases(response)
        except (ValueError, ValidationError) as e:
            self.logger.warning("Ignoring unusable LLM suggestions: %s", e)
            return list(cases)

        self.logger.info("LLM suggested %d additional test cases", len(suggested))
        return list(cases) + suggested

    def _parse_cases(self, response: str) -> list[TestCase]:
        data = json.loads(extract_json(response))
        if not isinstance(data, list):
            raise ValueError("expected a JSON array of test cases")

        suggested = []
        for item in data:
            if not isinstance(item, dict):
                raise ValueError("expected test case objects")
            name = str(item.get("name") or "")
            if not name:
                raise ValueError("test case without a name")
            description = str(item.get("description") or "")
            case = TestCase(
                name=name,
                summary=description,
                description=description,
                type=TestType(str(item.get("type") or "API").upper()),
                tags=["api", "llm"],
            )
            for step in item.get("steps") or []:
                if not isinstance(step, dict):
                    raise ValueError("expected step objects")
                case.add_step(str(step.get("action", "")), str(step.get("expected_result", "")))
            suggested.append(case)
        return suggested


def _endpoint_brief(ep: ApiEndpoint) -> dict:
    return {
        "name": ep.name,
        "method": ep.method,
        "url": ep.url,
        "folder": ep.folder_path,
        "body_type": ep.request_body_type,
        "expected_status": ep.expected_status_code,
        "description": ep.description or "",
    }
