"""Generation settings, optionally loaded from a YAML file.

Example `testgen.yaml`:

    output_format: markdown
    enhance: true
    enhancer: rules
    base_url_env: API_BASE_URL
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from postman_testgen.errors import ConfigError


class TestGenConfig(BaseModel):
    __test__ = False

    model_config = ConfigDict(extra="forbid")

    output_format: Literal["jira", "markdown", "yaml"] = "jira"
    enhance: bool = False
    enhancer: Literal["rules", "llm"] = "rules"
    model: str | None = None
    base_url_env: str = "API_BASE_URL"
    validate_code: bool = False

    def merged(self, **overrides) -> "TestGenConfig":
        """Copy with the given values applied; None means "not set"."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return self.model_validate({**self.model_dump(), **values})


def load_config(path: Path | None) -> TestGenConfig:
    if path is None:
        return TestGenConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}", cause=e) from e

    if data is None:
        return TestGenConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    try:
        return TestGenConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}", cause=e) from e
