# Overview: Order status package.
# Re-exports the registry, its lookups and the legacy translation layer.

from .categories import StatusCategory
from .definitions import OrderStatus, STATUS_DEFINITIONS
from .flow import STATUS_FLOW, TERMINAL_STATUSES
from .legacy import LegacyStatus, DETAILED_TO_LEGACY, LEGACY_TO_DETAILED
from .registry import (
    REGISTRY,
    RegistryError,
    StatusDefinition,
    StatusRegistry,
    can_transition_to,
    get_category,
    get_definition,
    get_next_statuses,
    is_milestone,
    is_terminal,
)
from .translation import detailed_to_legacy, legacy_to_detailed

__all__ = [
    "StatusCategory",
    "OrderStatus",
    "STATUS_DEFINITIONS",
    "STATUS_FLOW",
    "TERMINAL_STATUSES",
    "LegacyStatus",
    "DETAILED_TO_LEGACY",
    "LEGACY_TO_DETAILED",
    "REGISTRY",
    "RegistryError",
    "StatusDefinition",
    "StatusRegistry",
    "can_transition_to",
    "get_category",
    "get_definition",
    "get_next_statuses",
    "is_milestone",
    "is_terminal",
    "detailed_to_legacy",
    "legacy_to_detailed",
]
