"""Normalized data models for parsed Postman collections.

The collection parser flattens every request of a collection into an
ApiEndpoint. Generators consume these records and never look at the raw
collection document.
"""

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer

DEFAULT_STATUS_BY_METHOD = {
    "GET": 200,
    "POST": 201,
    "PUT": 200,
    "PATCH": 200,
    "DELETE": 204,
}


def _freeze(value: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(value))


def _thaw(value: Mapping[str, str]) -> dict[str, str]:
    return dict(value)


# read-only after validation, dumped as a plain dict
StrMap = Annotated[Mapping[str, str], AfterValidator(_freeze), PlainSerializer(_thaw)]


class ExampleResponse(BaseModel):
    """A sample response saved alongside a request in the collection."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    name: str = "Example Response"
    code: int = 200
    body: str = ""
    json_body: Any = None  # only set when body parsed as JSON
    headers: StrMap = {}


class ApiEndpoint(BaseModel):
    """One HTTP request extracted from a collection."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    name: str = "Unnamed Request"
    method: str = "GET"
    url: str = ""
    host: str = ""
    path: str = ""
    query_params: StrMap = {}
    headers: StrMap = {}
    request_body: str = ""
    request_body_type: str = ""  # raw / json / urlencoded / formdata / <language>
    form_data: StrMap = {}
    folder_path: str = ""
    collection_name: str = "Unnamed Collection"
    example_responses: tuple[ExampleResponse, ...] = ()
    test_script: str | None = None
    description: str | None = None

    @property
    def full_path(self) -> str:
        """Folder breadcrumb plus the request name."""
        return f"{self.folder_path}/{self.name}" if self.folder_path else self.name

    @property
    def short_name(self) -> str:
        """camelCase identifier derived from the request name."""
        short = re.sub(r"_+", "_", re.sub(r"[^a-zA-Z0-9]", "_", self.name))
        if not re.search(r"[a-zA-Z0-9]", short):
            short = f"{self.method.lower()}_endpoint"
            last_segment = self.path.rstrip("/").split("/")[-1]
            if last_segment:
                short += "_" + re.sub(r"[^a-zA-Z0-9]", "_", last_segment)
        if not re.match(r"[a-zA-Z]", short):
            short = "endpoint_" + short
        return _camel_case(short)

    @property
    def expected_status_code(self) -> int:
        """Status of the first example response, else a per-method default."""
        if self.example_responses:
            return self.example_responses[0].code
        return DEFAULT_STATUS_BY_METHOD.get(self.method.upper(), 200)

    @property
    def summary(self) -> str:
        return f"{self.method.upper()} {self.path or self.url}"


def _camel_case(text: str) -> str:
    chars = []
    capitalize_next = False
    for i, c in enumerate(text):
        if c == "_":
            capitalize_next = True
        elif capitalize_next:
            chars.append(c.upper())
            capitalize_next = False
        elif i == 0:
            chars.append(c.lower())
        else:
            chars.append(c)
    return "".join(chars)
