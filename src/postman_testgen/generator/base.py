"""Test case models shared by the test-case generator and the enhancers."""

import re
import uuid
from enum import Enum

from pydantic import BaseModel, Field


class TestType(str, Enum):
    __test__ = False

    API = "API"
    SECURITY = "SECURITY"
    PERFORMANCE = "PERFORMANCE"
    EDGE_CASE = "EDGE_CASE"


class TestStep(BaseModel):
    """A single action / expected-result row of a manual test case."""

    __test__ = False

    step_number: int
    action: str
    expected_result: str
    test_data: dict[str, str] = {}


def new_test_id() -> str:
    return "TC-" + uuid.uuid4().hex[:8].upper()


class TestCase(BaseModel):
    """A manual test case, renderable as Jira wiki markup."""

    __test__ = False

    id: str = Field(default_factory=new_test_id)
    name: str
    summary: str = ""
    description: str = ""
    type: TestType = TestType.API
    source_url: str = ""
    steps: list[TestStep] = []
    metadata: dict[str, str] = {}
    preconditions: str = ""
    tags: list[str] = []

    def add_step(self, action: str, expected_result: str, **test_data: str) -> TestStep:
        step = TestStep(
            step_number=len(self.steps) + 1,
            action=action,
            expected_result=expected_result,
            test_data=test_data,
        )
        self.steps.append(step)
        return step

    def to_jira_format(self) -> str:
        lines = [f"h1. {self.name}", ""]
        if self.description:
            lines += ["h2. Description", self.description, ""]
        if self.preconditions:
            lines += ["h2. Preconditions", self.preconditions, ""]

        lines += ["h2. Test Steps", "||Step||Action||Expected Result||"]
        for step in self.steps:
            lines.append(f"|{step.step_number}|{step.action}|{step.expected_result}|")

        if self.metadata:
            lines += ["", "h2. Metadata"]
            lines += [f"* {key}: {value}" for key, value in self.metadata.items()]
        if self.tags:
            lines += ["", "h2. Tags"]
            lines += [f"* {tag}" for tag in self.tags]
        return "\n".join(lines) + "\n"

    def to_method_name(self) -> str:
        """snake_case Python identifier for the test case."""
        method_name = re.sub(r"[^a-z0-9]", "_", self.name.lower())
        method_name = re.sub(r"_+", "_", method_name).strip("_")
        if not method_name or method_name[0].isdigit():
            method_name = "test_" + method_name
        return method_name
