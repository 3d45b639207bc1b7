import json
from unittest.mock import patch

import pytest

from postman_testgen.enhance.factory import create_enhancer
from postman_testgen.enhance.llm import LlmEnhancer
from postman_testgen.enhance.rules import RuleBasedEnhancer
from postman_testgen.generator.base import TestCase, TestType
from postman_testgen.generator.testcase import TestCaseGenerator
from postman_testgen.parser.base import ApiEndpoint

ENDPOINTS = [
    ApiEndpoint(name="List users", method="GET", url="https://api.example.com/users", path="/users"),
    ApiEndpoint(name="Create user", method="POST", url="https://api.example.com/users", path="/users"),
]


@pytest.fixture
def base_cases():
    return TestCaseGenerator().generate(ENDPOINTS)


def _count(cases, test_type):
    return sum(1 for c in cases if c.type == test_type)


class TestRuleBasedEnhancer:
    def test_keeps_base_cases_first(self, base_cases):
        enhanced = RuleBasedEnhancer().enhance(ENDPOINTS, base_cases)
        assert enhanced[:2] == base_cases

    def test_case_counts(self, base_cases):
        enhanced = RuleBasedEnhancer().enhance(ENDPOINTS, base_cases)
        # base + auth + load + 5 performance + 4 security + 4 edge per endpoint
        assert len(enhanced) == 2 + 1 + 1 + 5 + 4 + 8
        assert _count(enhanced, TestType.SECURITY) == 5
        assert _count(enhanced, TestType.PERFORMANCE) == 6
        assert _count(enhanced, TestType.EDGE_CASE) == 8

    def test_input_list_not_mutated(self, base_cases):
        RuleBasedEnhancer().enhance(ENDPOINTS, base_cases)
        assert len(base_cases) == 2

    def test_authentication_case_uses_first_endpoint(self):
        case = RuleBasedEnhancer().authentication_case(ENDPOINTS)
        assert case.name == "API Authentication Test"
        assert len(case.steps) == 4
        assert case.steps[1].action == "Send GET request to https://api.example.com/users with authentication token"

    def test_authentication_case_without_endpoints(self):
        assert len(RuleBasedEnhancer().authentication_case([]).steps) == 1

    def test_edge_case_names(self):
        cases = RuleBasedEnhancer().edge_cases(ENDPOINTS[1])
        assert [c.name for c in cases] == [
            "POST https://api.example.com/users - Missing Required Parameters",
            "POST https://api.example.com/users - Invalid Parameter Values",
            "POST https://api.example.com/users - Rate Limiting",
            "POST https://api.example.com/users - Large Payload",
        ]
        assert all(c.source_url == "https://api.example.com/users" for c in cases)


class TestCoverageGaps:
    def test_base_cases_need_everything(self, base_cases):
        report = RuleBasedEnhancer().analyze_coverage_gaps(base_cases)
        assert "- API tests: 2 test cases" in report
        assert "- Increase edge case coverage" in report
        assert "- Increase security test coverage" in report
        assert "- Increase performance test coverage" in report

    def test_enhanced_cases_cover_all(self, base_cases):
        enhancer = RuleBasedEnhancer()
        report = enhancer.analyze_coverage_gaps(enhancer.enhance(ENDPOINTS, base_cases))
        # "Missing Authentication Test" also counts as an edge case by name
        assert "- Edge cases: 9 test cases" in report
        assert "- Security tests: 5 test cases" in report
        assert report.rstrip().endswith("Recommendations:")

    def test_keywords_in_names_count(self, base_cases):
        extra = [TestCase(name=f"Invalid input {i}") for i in range(5)]
        report = RuleBasedEnhancer().analyze_coverage_gaps(base_cases + extra)
        assert "- Edge cases: 5 test cases" in report
        assert "Increase edge case coverage" not in report


LLM_RESPONSE = "```json\n" + json.dumps([
    {
        "name": "Create user with duplicate email",
        "description": "Duplicate emails are rejected",
        "type": "edge_case",
        "steps": [{"action": "POST the same email twice", "expected_result": "Second call returns 409"}],
    }
]) + "\n```"


class TestLlmEnhancer:
    @patch("postman_testgen.enhance.llm.LlmClient")
    def test_adds_suggested_cases(self, MockClient, base_cases):
        MockClient.return_value.call.return_value = LLM_RESPONSE

        enhanced = LlmEnhancer(model="gpt-4o").enhance(ENDPOINTS, base_cases)

        MockClient.assert_called_once_with(model="gpt-4o")
        assert len(enhanced) == 3
        case = enhanced[-1]
        assert case.type == TestType.EDGE_CASE
        assert case.tags == ["api", "llm"]
        assert case.steps[0].expected_result == "Second call returns 409"

    @patch("postman_testgen.enhance.llm.LlmClient")
    def test_prompt_lists_endpoints_and_existing_cases(self, MockClient, base_cases):
        MockClient.return_value.call.return_value = "[]"

        LlmEnhancer().enhance(ENDPOINTS, base_cases)

        user = MockClient.return_value.call.call_args[1]["user"]
        assert '"method": "POST"' in user
        assert "- API Test: List users" in user

    @pytest.mark.parametrize("response", ["not json", '{"name": "x"}', '[{"type": "API"}]', '[{"name": "x", "type": "SMOKE"}]'])
    @patch("postman_testgen.enhance.llm.LlmClient")
    def test_unusable_response_keeps_base_cases(self, MockClient, response, base_cases, caplog):
        MockClient.return_value.call.return_value = response

        enhanced = LlmEnhancer().enhance(ENDPOINTS, base_cases)

        assert enhanced == base_cases
        assert "Ignoring unusable LLM suggestions" in caplog.text


class TestFactory:
    def test_rules(self):
        assert isinstance(create_enhancer("rules"), RuleBasedEnhancer)

    @patch("postman_testgen.enhance.llm.LlmClient")
    def test_llm(self, MockClient):
        assert isinstance(create_enhancer("llm", model="gpt-4o"), LlmEnhancer)
        MockClient.assert_called_once_with(model="gpt-4o")

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown enhancer"):
            create_enhancer("magic")
