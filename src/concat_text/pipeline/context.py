"""Core flow data model.

FlowFile is the unit of work flowing between the host and a processor:
content bytes plus string attributes. FlowFiles are immutable; every change
made through a session produces a new FlowFile, so a processor can never
alter the unit it was handed.

Design goal:
- Keep FlowFile, Relationship and PropertyDescriptor stable so processors
  written against them do not churn when the host changes.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import uuid as uuid_mod

# set on flowfiles routed to failure, by processors and by the host on rollback
CONCAT_ERROR = "concat.error"


def _new_uuid() -> str:
    return str(uuid_mod.uuid4())


@dataclass(frozen=True)
class FlowFile:
    content: bytes = b""
    attributes: Mapping[str, str] = field(default_factory=dict)
    uuid: str = field(default_factory=_new_uuid)

    def __post_init__(self):
        # freeze the attribute map so callers cannot mutate it in place
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def size(self) -> int:
        return len(self.content)

    def get_attribute(self, key: str) -> Optional[str]:
        return self.attributes.get(key)

    def with_content(self, content: bytes) -> "FlowFile":
        return replace(self, content=bytes(content), attributes=dict(self.attributes))

    def with_attributes(self, updates: Mapping[str, str]) -> "FlowFile":
        merged = dict(self.attributes)
        merged.update({str(k): str(v) for k, v in updates.items()})
        return replace(self, attributes=merged)

    def to_dict(self, charset: str = "utf-8") -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "content": self.content.decode(charset, errors="replace"),
            "attributes": dict(self.attributes),
            "size": self.size,
        }


@dataclass(frozen=True)
class Relationship:
    name: str
    description: str = ""


@dataclass(frozen=True)
class ValidationResult:
    subject: str
    valid: bool
    explanation: str = ""


# validator: (subject, value) -> ValidationResult
Validator = Callable[[str, str], ValidationResult]


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    display_name: str
    description: str = ""
    required: bool = False
    default: Optional[str] = None
    validators: Tuple[Validator, ...] = ()

    def validate(self, value: Optional[str]) -> ValidationResult:
        if value is None:
            if self.required:
                return ValidationResult(self.display_name, False, f"{self.display_name} is required")
            return ValidationResult(self.display_name, True)
        for v in self.validators:
            res = v(self.display_name, value)
            if not res.valid:
                return res
        return ValidationResult(self.display_name, True)


class ProcessContext:
    """Read-only view of a processor's configured properties.

    Built once by the host when the processor is scheduled. Lookups fall
    back to the descriptor default when the property was not set.
    """

    def __init__(self, descriptors: Tuple[PropertyDescriptor, ...], properties: Mapping[str, str]):
        self._descriptors = {d.name: d for d in descriptors}
        self._properties = MappingProxyType(dict(properties))

    @property
    def properties(self) -> Mapping[str, str]:
        return self._properties

    def get_property(self, descriptor: PropertyDescriptor) -> Optional[str]:
        value = self._properties.get(descriptor.name)
        if value is None:
            return descriptor.default
        return value
