# Overview: Translation between detailed order statuses and the legacy vocabulary.

from __future__ import annotations

from .definitions import OrderStatus
from .legacy import LegacyStatus
from .registry import REGISTRY


def detailed_to_legacy(code: str | OrderStatus) -> LegacyStatus:
    """
    Collapse a detailed code onto its legacy value.

    Total over registered codes; an unregistered code raises UnknownStatusCode.
    """
    return REGISTRY.to_legacy(code)


def legacy_to_detailed(value: str | LegacyStatus) -> OrderStatus:
    """
    Canonical detailed code for one of the 8 legacy values.

    Used only to seed an order imported from the legacy vocabulary. Anything
    outside the 8 values raises UnknownStatusCode; there is no default.
    """
    return REGISTRY.from_legacy(value)
