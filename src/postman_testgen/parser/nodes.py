"""Node kinds of a Postman collection item tree.

Every entry of an `item` array is one of:

- FolderItem: has a nested `item` key (even an empty or invalid one)
- RequestItem: any other object; may still lack its `request` field
- MalformedItem: not a JSON object at all
"""

from typing import Any

from pydantic import BaseModel

from .variables import as_text, extract_variables

DEFAULT_FOLDER_NAME = "Unnamed Folder"
DEFAULT_REQUEST_NAME = "Unnamed Request"


class FolderItem(BaseModel):
    name: str
    items: Any  # validated by the walker, may be a non-list
    variables: dict[str, str] = {}


class RequestItem(BaseModel):
    name: str
    node: dict


class MalformedItem(BaseModel):
    reason: str


def classify_item(node: Any) -> FolderItem | RequestItem | MalformedItem:
    if not isinstance(node, dict):
        return MalformedItem(reason=f"item is a {type(node).__name__}, not an object")
    if "item" in node:
        return FolderItem(
            name=as_text(node.get("name"), DEFAULT_FOLDER_NAME),
            items=node["item"],
            variables=extract_variables(node.get("variable")),
        )
    return RequestItem(name=as_text(node.get("name"), DEFAULT_REQUEST_NAME), node=node)
