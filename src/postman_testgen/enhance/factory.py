"""Selects the enhancer implementation."""

from typing import Protocol

from postman_testgen.enhance.llm import LlmEnhancer
from postman_testgen.enhance.rules import RuleBasedEnhancer
from postman_testgen.generator.base import TestCase
from postman_testgen.parser.base import ApiEndpoint

ENHANCERS = ("rules", "llm")


class Enhancer(Protocol):
    def enhance(self, endpoints: list[ApiEndpoint], cases: list[TestCase]) -> list[TestCase]: ...


def create_enhancer(kind: str = "rules", model: str | None = None) -> Enhancer:
    if kind == "rules":
        return RuleBasedEnhancer()
    if kind == "llm":
        return LlmEnhancer(model=model)
    raise ValueError(f"Unknown enhancer: {kind} (expected one of {', '.join(ENHANCERS)})")
