"""Postman Collection v2.x parser.

Flattens a collection's folder tree into an ordered list of ApiEndpoint,
resolving `{{variables}}` from the collection and enclosing folders.

Document-level problems (missing or unsupported schema, unreadable input)
raise CollectionFormatError. Problems with a single request are logged and
that request is skipped, so one broken entry never loses the whole
collection.
"""

import json
import logging
from pathlib import Path
from typing import Any

from postman_testgen.errors import CollectionFormatError

from .base import ApiEndpoint, ExampleResponse
from .nodes import DEFAULT_REQUEST_NAME, FolderItem, MalformedItem, classify_item
from .variables import as_text, extract_variables, resolve_variables

DEFAULT_COLLECTION_NAME = "Unnamed Collection"
SUPPORTED_SCHEMA_MARKER = "v2"
TEST_EVENT = "test"

_logger = logging.getLogger(__name__)


class PostmanCollectionAnalyzer:
    """Loads a collection document and extracts its endpoints."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or _logger

    def analyze_collection(self, file_path: str | Path | None) -> list[ApiEndpoint]:
        """Parse a collection file."""
        if file_path is None or not str(file_path).strip():
            raise CollectionFormatError("Collection file path cannot be null or empty")

        self.logger.info("Analyzing Postman collection: %s", file_path)
        try:
            text = Path(file_path).read_text(encoding="utf-8")
            document = json.loads(text)
        except (OSError, ValueError, RecursionError) as e:
            self.logger.error("Failed to analyze Postman collection: %s", file_path)
            raise CollectionFormatError(
                f"Failed to analyze Postman collection {file_path}: {e}", cause=e
            ) from e
        return self.parse_collection(document)

    def analyze_collection_json(self, collection_json: str | None) -> list[ApiEndpoint]:
        """Parse a collection given as a JSON string."""
        if collection_json is None or not collection_json.strip():
            raise CollectionFormatError("Collection JSON cannot be null or empty")

        self.logger.info("Analyzing Postman collection from JSON")
        try:
            document = json.loads(collection_json)
        except (ValueError, RecursionError) as e:
            self.logger.error("Failed to analyze Postman collection from JSON")
            raise CollectionFormatError(
                f"Failed to analyze Postman collection from JSON: {e}", cause=e
            ) from e
        return self.parse_collection(document)

    def parse_collection(self, document: Any) -> list[ApiEndpoint]:
        """Validate the top-level shape and walk the item tree."""
        if not isinstance(document, dict):
            raise CollectionFormatError("Invalid Postman collection format: root is not an object")

        info = document.get("info")
        if not isinstance(info, dict) or "schema" not in info:
            raise CollectionFormatError("Invalid Postman collection format: missing info.schema")

        schema = as_text(info.get("schema"))
        if SUPPORTED_SCHEMA_MARKER not in schema:
            raise CollectionFormatError(
                f"Unsupported Postman collection version ({schema}). Only v2.x is supported."
            )

        collection_name = as_text(info.get("name"), DEFAULT_COLLECTION_NAME)
        collection_vars = extract_variables(document.get("variable"))

        if "item" not in document:
            self.logger.warning("No items found in collection '%s'", collection_name)
            return []

        endpoints = walk_items(
            document["item"], "", collection_name, collection_vars, {}, logger=self.logger
        )
        self.logger.info("Found %d endpoints in collection '%s'", len(endpoints), collection_name)
        return endpoints


def parse_postman(file_path: Path) -> list[ApiEndpoint]:
    """Parse a Postman Collection v2.x file into a list of ApiEndpoint."""
    return PostmanCollectionAnalyzer().analyze_collection(file_path)


def walk_items(
    items: Any,
    parent_path: str,
    collection_name: str,
    collection_vars: dict[str, str],
    folder_vars: dict[str, str],
    logger: logging.Logger | None = None,
) -> list[ApiEndpoint]:
    """Recursively collect endpoints from an `item` array in document order."""
    log = logger or _logger
    if not isinstance(items, list):
        log.warning("Items node under '%s' is not an array, skipping", parent_path or "<root>")
        return []

    endpoints: list[ApiEndpoint] = []
    for node in items:
        item = classify_item(node)

        if isinstance(item, FolderItem):
            folder_path = f"{parent_path}/{item.name}" if parent_path else item.name
            merged_vars = {**folder_vars, **item.variables}
            endpoints.extend(
                walk_items(item.items, folder_path, collection_name, collection_vars, merged_vars, logger=log)
            )
        elif isinstance(item, MalformedItem):
            log.warning("Skipping item under '%s': %s", parent_path or "<root>", item.reason)
        else:
            try:
                endpoint = parse_request(
                    item.node, parent_path, collection_name, collection_vars, folder_vars, logger=log
                )
            except Exception:
                log.warning("Error parsing request: %s", item.name, exc_info=True)
                continue
            if endpoint is not None:
                endpoints.append(endpoint)
    return endpoints


def parse_request(
    item: dict,
    folder_path: str,
    collection_name: str,
    collection_vars: dict[str, str],
    folder_vars: dict[str, str],
    logger: logging.Logger | None = None,
) -> ApiEndpoint | None:
    """Build an ApiEndpoint from one request item, or None if it has no request."""
    log = logger or _logger
    name = as_text(item.get("name"), DEFAULT_REQUEST_NAME)

    if "request" not in item:
        log.warning("Request node does not have 'request' field: %s", name)
        return None

    request = item["request"]
    if isinstance(request, str):
        request = {"url": request}
    if not isinstance(request, dict):
        raise ValueError(f"'request' of {name} must be an object or a URL string")

    method = as_text(request.get("method"), "GET").upper() or "GET"
    url, host, path, query_params = _parse_url(request.get("url"))
    url = resolve_variables(url, collection_vars, folder_vars)

    headers = {
        key: resolve_variables(value, collection_vars, folder_vars)
        for key, value in _parse_key_values(request.get("header")).items()
    }

    body, body_type, form_data = _parse_body(request.get("body"))
    body = resolve_variables(body, collection_vars, folder_vars)

    return ApiEndpoint(
        name=name,
        method=method,
        url=url,
        host=host,
        path=path,
        query_params=query_params,
        headers=headers,
        request_body=body,
        request_body_type=body_type,
        form_data=form_data,
        folder_path=folder_path,
        collection_name=collection_name,
        example_responses=_parse_responses(item.get("response"), name, log),
        test_script=_parse_test_script(item.get("event")),
        description=_parse_description(request.get("description")),
    )


def _parse_url(url_node: Any) -> tuple[str, str, str, dict[str, str]]:
    """Returns (url, host, path, query_params)."""
    if isinstance(url_node, str):
        return url_node, "", "", {}
    if not isinstance(url_node, dict):
        return "", "", "", {}

    url = as_text(url_node.get("raw"))

    host = ""
    host_segments = _segments(url_node.get("host"))
    if host_segments is not None:
        protocol = as_text(url_node.get("protocol"))
        host = (f"{protocol}://" if protocol else "") + ".".join(host_segments)

    path = ""
    path_segments = _segments(url_node.get("path"))
    if path_segments is not None:
        path = "".join("/" + segment for segment in path_segments)

    query_params = _parse_key_values(url_node.get("query"))

    if host and path:
        url = host + path
    return url, host, path, query_params


def _segments(value: Any) -> list[str] | None:
    """Host or path segments; a plain string counts as a single segment."""
    if isinstance(value, str):
        return [value.strip("/")] if value.strip("/") else []
    if not isinstance(value, list):
        return None
    segments = []
    for segment in value:
        # path segments may also be {"type": "string", "value": "users"}
        if isinstance(segment, dict):
            segment = segment.get("value")
        segments.append(as_text(segment))
    return segments


def _parse_key_values(entries: Any) -> dict[str, str]:
    """Read a `[{key, value, disabled?}]` array, skipping disabled and keyless entries."""
    result: dict[str, str] = {}
    if not isinstance(entries, list):
        return result
    for entry in entries:
        if not isinstance(entry, dict) or _is_disabled(entry):
            continue
        key = as_text(entry.get("key"))
        if key:
            result[key] = as_text(entry.get("value"))
    return result


def _is_disabled(entry: dict) -> bool:
    return entry.get("disabled") in (True, "true")


def _parse_body(body: Any) -> tuple[str, str, dict[str, str]]:
    """Returns (raw body, body type, form data)."""
    if not isinstance(body, dict):
        return "", "", {}

    mode = as_text(body.get("mode"))
    if mode == "raw":
        raw = as_text(body.get("raw"))
        language = _raw_language(body)
        if language:
            body_type = "json" if language.lower() == "json" else language.lower()
        elif raw.strip().startswith(("{", "[")):
            body_type = "json"
        else:
            body_type = "raw"
        return raw, body_type, {}
    if mode in ("urlencoded", "formdata"):
        return "", mode, _parse_key_values(body.get(mode))
    return "", "", {}


def _raw_language(body: dict) -> str:
    options = body.get("options")
    if not isinstance(options, dict) or not isinstance(options.get("raw"), dict):
        return ""
    return as_text(options["raw"].get("language"))


def _parse_responses(responses: Any, request_name: str, log: logging.Logger) -> list[ExampleResponse]:
    if not isinstance(responses, list):
        return []

    examples = []
    for response in responses:
        if not isinstance(response, dict):
            log.warning("Skipping non-object example response of %s", request_name)
            continue
        body = as_text(response.get("body"))
        examples.append(
            ExampleResponse(
                name=as_text(response.get("name"), "Example Response"),
                code=_status_code(response.get("code")),
                body=body,
                json_body=_try_parse_json(body, request_name, log),
                headers=_parse_key_values(response.get("header")),
            )
        )
    return examples


def _status_code(value: Any) -> int:
    if isinstance(value, bool):
        return 200
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 200


def _try_parse_json(body: str, request_name: str, log: logging.Logger) -> Any:
    if not body.strip().startswith(("{", "[")):
        return None
    try:
        return json.loads(body)
    except (ValueError, RecursionError):
        log.debug("Example response body of %s is not valid JSON", request_name)
        return None


def _parse_test_script(events: Any) -> str | None:
    """Script of the last `test` event; earlier ones are overwritten."""
    if not isinstance(events, list):
        return None

    script = None
    for event in events:
        if not isinstance(event, dict) or as_text(event.get("listen")) != TEST_EVENT:
            continue
        source = event.get("script")
        if not isinstance(source, dict) or "exec" not in source:
            continue
        lines = source["exec"]
        if isinstance(lines, list):
            script = "\n".join(as_text(line) for line in lines)
        elif isinstance(lines, str):
            script = lines
    return script


def _parse_description(description: Any) -> str | None:
    if isinstance(description, str):
        return description
    if isinstance(description, dict) and isinstance(description.get("content"), str):
        return description["content"]
    return None
