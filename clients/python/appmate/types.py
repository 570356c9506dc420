"""Type definitions for AppMate client."""

from dataclasses import dataclass, field
from typing import Any

_KNOWN_KEYS = ("type", "required", "read_only", "label")


@dataclass
class FieldSchema:
    """Metadata the server reports for one writable field."""

    name: str
    type: str
    required: bool = False
    read_only: bool = False
    label: str = ""
    constraints: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "FieldSchema":
        """Create FieldSchema from one entry of ``actions.POST``."""
        return cls(
            name=name,
            type=data.get("type", "string"),
            required=data.get("required", False),
            read_only=data.get("read_only", False),
            label=data.get("label", name),
            # max_length, choices, min_value...
            constraints={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    @classmethod
    def from_schema(cls, schema: dict[str, Any]) -> dict[str, "FieldSchema"]:
        """Create a field-name to FieldSchema mapping, keeping server order."""
        return {
            name: cls.from_dict(name, data)
            for name, data in schema.items()
            if isinstance(data, dict)
        }
