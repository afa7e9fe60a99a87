"""
app/domain/nested_value.py

Tree of scalars and objects used to build nested JSON documents from
dotted column names such as ``contact.phone.mobile``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

PATH_SEPARATOR = "."


@dataclass(frozen=True)
class Scalar:
    """Leaf value; CSV cells are always strings."""

    value: str


@dataclass
class NestedObject:
    """Mapping node. Key order follows insertion order."""

    fields: dict[str, "NestedValue"] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.fields


NestedValue = Union[Scalar, NestedObject]


def set_at_path(root: NestedObject, path: str, value: str) -> None:
    """
    Place ``value`` at the dotted ``path`` below ``root``.

    Intermediate objects are created as needed. A scalar found where an
    object is required is replaced by a fresh object, and the leaf is
    always overwritten: last write wins, no conflict is raised.
    """

    parts = path.split(PATH_SEPARATOR)
    current = root
    for part in parts[:-1]:
        child = current.fields.get(part)
        if not isinstance(child, NestedObject):
            child = NestedObject()
            current.fields[part] = child
        current = child
    current.fields[parts[-1]] = Scalar(value)


def to_plain(value: NestedValue) -> Any:
    """
    Convert a nested value into plain ``dict``/``str`` data for JSON encoding.
    """

    if isinstance(value, Scalar):
        return value.value
    return {key: to_plain(child) for key, child in value.fields.items()}
