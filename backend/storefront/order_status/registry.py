# Overview: Immutable, validated order status registry built once at import time.

"""
Order Status Registry

================================================================================
PURPOSE: Single read-only source of truth for order states and their edges
================================================================================

The registry is assembled from definitions.py, flow.py and legacy.py and
validated once when this module is imported:

1. Every OrderStatus member has exactly one definition (code, label,
   description, category, milestone flag).
2. The adjacency map has an entry for every code; no edge targets an
   unregistered code.
3. The codes with no outgoing edges are exactly TERMINAL_STATUSES.
4. The legacy mapping is total over registered codes, and every legacy value
   has a registered canonical seed code.

A failure raises RegistryError and the process does not start. After
construction everything is exposed through read-only views; unknown codes
raise UnknownStatusCode instead of falling back to a default.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from ..validation import InvalidTransition, UnknownStatusCode
from .categories import StatusCategory
from .definitions import OrderStatus, STATUS_DEFINITIONS
from .flow import STATUS_FLOW, TERMINAL_STATUSES
from .legacy import LegacyStatus, DETAILED_TO_LEGACY, LEGACY_TO_DETAILED


class RegistryError(RuntimeError):
    """Raised at construction when the status graph or mappings are inconsistent."""
    pass


@dataclass(frozen=True)
class StatusDefinition:
    code: OrderStatus
    label: str
    description: str
    category: StatusCategory
    is_milestone: bool

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "label": self.label,
            "description": self.description,
            "category": self.category.value,
            "is_milestone": self.is_milestone,
        }


class StatusRegistry:
    """Read-only view over definitions, transitions and legacy mappings."""

    def __init__(
        self,
        definitions: Mapping[OrderStatus, StatusDefinition],
        flow: Mapping[OrderStatus, frozenset],
        terminals: frozenset,
        to_legacy: Mapping[OrderStatus, LegacyStatus],
        from_legacy: Mapping[LegacyStatus, OrderStatus],
    ):
        self._definitions = MappingProxyType(dict(definitions))
        self._flow = MappingProxyType({k: frozenset(v) for k, v in flow.items()})
        self._terminals = frozenset(terminals)
        self._to_legacy = MappingProxyType(dict(to_legacy))
        self._from_legacy = MappingProxyType(dict(from_legacy))
        self._validate()

    @classmethod
    def build(cls) -> "StatusRegistry":
        definitions: dict[OrderStatus, StatusDefinition] = {}
        for category, entries in STATUS_DEFINITIONS.items():
            for code, label, description, is_milestone in entries:
                if code in definitions:
                    raise RegistryError(f"Status {code.value} is defined more than once")
                definitions[code] = StatusDefinition(code, label, description, category, is_milestone)
        return cls(definitions, STATUS_FLOW, TERMINAL_STATUSES, DETAILED_TO_LEGACY, LEGACY_TO_DETAILED)

    def _validate(self) -> None:
        registered = set(self._definitions)

        undefined = set(OrderStatus) - registered
        if undefined:
            raise RegistryError(f"Statuses without a definition: {_codes(undefined)}")

        missing_flow = registered - set(self._flow)
        if missing_flow:
            raise RegistryError(f"Statuses without a transition entry: {_codes(missing_flow)}")

        for source, targets in self._flow.items():
            if source not in registered:
                raise RegistryError(f"Transition source {source} is not registered")
            dangling = set(targets) - registered
            if dangling:
                raise RegistryError(f"{source.value} has edges to unregistered codes: {_codes(dangling)}")
            if source in targets:
                raise RegistryError(f"{source.value} has a self transition")

        sinks = {code for code, targets in self._flow.items() if not targets}
        if sinks != set(self._terminals):
            raise RegistryError(
                f"Sinks {_codes(sinks)} do not match terminal statuses {_codes(self._terminals)}"
            )

        unmapped = registered - set(self._to_legacy)
        if unmapped:
            raise RegistryError(f"Statuses without a legacy mapping: {_codes(unmapped)}")

        unseeded = set(LegacyStatus) - set(self._from_legacy)
        if unseeded:
            raise RegistryError(f"Legacy values without a canonical code: {_codes(unseeded)}")
        for legacy, code in self._from_legacy.items():
            if code not in registered:
                raise RegistryError(f"Legacy value {legacy.value} seeds unregistered code {code}")

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, code: str | OrderStatus) -> OrderStatus:
        """Resolve a raw code to a registered OrderStatus or raise UnknownStatusCode."""
        if isinstance(code, OrderStatus):
            return code
        if not isinstance(code, str):
            raise UnknownStatusCode(f"Unknown order status code: {code!r}")
        try:
            status = OrderStatus(code.strip())
        except ValueError:
            raise UnknownStatusCode(f"Unknown order status code: {code!r}")
        if status not in self._definitions:
            raise UnknownStatusCode(f"Unknown order status code: {code!r}")
        return status

    def parse_legacy(self, value: str | LegacyStatus) -> LegacyStatus:
        if isinstance(value, LegacyStatus):
            return value
        if not isinstance(value, str):
            raise UnknownStatusCode(f"Unknown legacy status: {value!r}")
        try:
            return LegacyStatus(value.strip())
        except ValueError:
            raise UnknownStatusCode(f"Unknown legacy status: {value!r}")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def codes(self) -> tuple[OrderStatus, ...]:
        return tuple(self._definitions)

    @property
    def terminal_statuses(self) -> frozenset:
        return self._terminals

    def definition(self, code: str | OrderStatus) -> StatusDefinition:
        return self._definitions[self.parse(code)]

    def next_statuses(self, code: str | OrderStatus) -> frozenset:
        return self._flow[self.parse(code)]

    def can_transition(self, from_code: str | OrderStatus, to_code: str | OrderStatus) -> bool:
        return self.parse(to_code) in self.next_statuses(from_code)

    def require_transition(self, from_code: str | OrderStatus, to_code: str | OrderStatus) -> OrderStatus:
        """Return the parsed target or raise InvalidTransition."""
        source = self.parse(from_code)
        target = self.parse(to_code)
        if target not in self._flow[source]:
            raise InvalidTransition(source.value, target.value)
        return target

    def is_milestone(self, code: str | OrderStatus) -> bool:
        return self.definition(code).is_milestone

    def category(self, code: str | OrderStatus) -> StatusCategory:
        return self.definition(code).category

    def is_terminal(self, code: str | OrderStatus) -> bool:
        return self.parse(code) in self._terminals

    def by_category(self, category: StatusCategory) -> list[StatusDefinition]:
        return [d for d in self._definitions.values() if d.category == category]

    def to_legacy(self, code: str | OrderStatus) -> LegacyStatus:
        return self._to_legacy[self.parse(code)]

    def from_legacy(self, value: str | LegacyStatus) -> OrderStatus:
        return self._from_legacy[self.parse_legacy(value)]

    def edges(self) -> Iterable[tuple[OrderStatus, OrderStatus]]:
        for source, targets in self._flow.items():
            for target in sorted(targets, key=lambda s: s.value):
                yield source, target

    def summary(self) -> dict:
        return {
            "statuses": len(self._definitions),
            "transitions": sum(len(t) for t in self._flow.values()),
            "milestones": sum(1 for d in self._definitions.values() if d.is_milestone),
            "terminal": sorted(s.value for s in self._terminals),
            "legacy_values": len(self._from_legacy),
        }


def _codes(codes: Iterable) -> str:
    return ", ".join(sorted(getattr(c, "value", str(c)) for c in codes))


REGISTRY = StatusRegistry.build()


def get_definition(code: str | OrderStatus) -> StatusDefinition:
    return REGISTRY.definition(code)


def get_next_statuses(code: str | OrderStatus) -> list[OrderStatus]:
    """Allowed next statuses, in declaration order of the enum."""
    allowed = REGISTRY.next_statuses(code)
    return [s for s in OrderStatus if s in allowed]


def can_transition_to(from_code: str | OrderStatus, to_code: str | OrderStatus) -> bool:
    return REGISTRY.can_transition(from_code, to_code)


def is_milestone(code: str | OrderStatus) -> bool:
    return REGISTRY.is_milestone(code)


def get_category(code: str | OrderStatus) -> StatusCategory:
    return REGISTRY.category(code)


def is_terminal(code: str | OrderStatus) -> bool:
    return REGISTRY.is_terminal(code)
