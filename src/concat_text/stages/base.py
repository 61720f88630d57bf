"""Processor plugin interface.

Processors must:
- declare their property descriptors and relationships (immutable, class level)
- implement `on_trigger(context, session)`: pull at most the work they need
  from the session and transfer every flowfile they pulled

The host drives the lifecycle:
  on_added -> on_scheduled -> on_trigger* -> on_unscheduled -> on_stopped -> on_removed

Processors hold no mutable state across triggers, so a single instance can
be triggered from several sessions at once.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, List, Mapping, Tuple
import logging

from ..errors import ConfigurationError
from ..pipeline.context import ProcessContext, PropertyDescriptor, Relationship, ValidationResult
from ..pipeline.session import ProcessSession


class Processor(ABC):
    name: str = "processor"
    description: str = ""
    tags: Tuple[str, ...] = ()
    reads_attributes: Mapping[str, str] = {}
    writes_attributes: Mapping[str, str] = {}
    property_descriptors: Tuple[PropertyDescriptor, ...] = ()
    relationship_set: FrozenSet[Relationship] = frozenset()

    def __init__(self):
        self.log = logging.getLogger(f"concat_text.stages.{self.name}")

    @property
    def supported_property_descriptors(self) -> Tuple[PropertyDescriptor, ...]:
        return self.property_descriptors

    @property
    def relationships(self) -> FrozenSet[Relationship]:
        return self.relationship_set

    def validate(self, properties: Mapping[str, str]) -> List[ValidationResult]:
        """Validate raw property values; returns only the invalid results."""
        known = {d.name for d in self.property_descriptors}
        problems = [
            ValidationResult(k, False, f"'{k}' is not a supported property")
            for k in properties if k not in known
        ]
        for d in self.property_descriptors:
            res = d.validate(properties.get(d.name))
            if not res.valid:
                problems.append(res)
        return problems

    def init(self, properties: Mapping[str, str]) -> ProcessContext:
        """Validate properties and build the immutable context for scheduling."""
        problems = self.validate(properties)
        if problems:
            detail = "; ".join(p.explanation for p in problems)
            raise ConfigurationError(f"{self.name}: invalid properties: {detail}")
        return ProcessContext(self.property_descriptors, properties)

    def on_added(self) -> None:
        self.log.info("on_added called")

    def on_scheduled(self, context: ProcessContext) -> None:
        self.log.info("on_scheduled called")

    def on_unscheduled(self) -> None:
        self.log.info("on_unscheduled called")

    def on_stopped(self) -> None:
        self.log.info("on_stopped called")

    def on_removed(self) -> None:
        self.log.info("on_removed called")

    @abstractmethod
    def on_trigger(self, context: ProcessContext, session: ProcessSession) -> None:
        ...

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "properties": [
                {
                    "name": d.name,
                    "display_name": d.display_name,
                    "description": d.description,
                    "required": d.required,
                    "default": d.default,
                }
                for d in self.property_descriptors
            ],
            "relationships": [
                {"name": r.name, "description": r.description}
                for r in sorted(self.relationship_set, key=lambda r: r.name)
            ],
            "reads_attributes": dict(self.reads_attributes),
            "writes_attributes": dict(self.writes_attributes),
        }
