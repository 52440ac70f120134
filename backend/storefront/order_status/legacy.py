# Overview: The 8-value legacy status vocabulary and its mappings to detailed codes.

from enum import Enum

from .definitions import OrderStatus as S


class LegacyStatus(str, Enum):
    """Simple status vocabulary kept for backward-compatible persistence and queries."""
    PENDING = "pending"
    WAITING_CONFIRMATION = "waiting_confirmation"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


L = LegacyStatus


# Many-to-one: every detailed code collapses onto one legacy value.
DETAILED_TO_LEGACY = {
    S.ORDER_RECEIVED: L.PENDING,
    S.PAYMENT_AUTHORIZED: L.CONFIRMED,
    S.ORDER_VERIFIED: L.WAITING_CONFIRMATION,
    S.INVENTORY_ALLOCATED: L.PROCESSING,
    S.ORDER_PROCESSING: L.PROCESSING,
    S.PICKING_STARTED: L.PROCESSING,
    S.PICKING_COMPLETED: L.PROCESSING,
    S.PACKING_STARTED: L.PROCESSING,
    S.PACKING_COMPLETED: L.PROCESSING,
    S.READY_TO_SHIP: L.PROCESSING,
    S.CARRIER_PICKUP_SCHEDULED: L.SHIPPED,
    S.PICKED_UP: L.SHIPPED,
    S.IN_TRANSIT: L.SHIPPED,
    S.ARRIVED_AT_ORIGIN: L.SHIPPED,
    S.DEPARTED_ORIGIN: L.SHIPPED,
    S.ARRIVED_AT_SORT: L.SHIPPED,
    S.PROCESSED_AT_SORT: L.SHIPPED,
    S.DEPARTED_SORT: L.SHIPPED,
    S.ARRIVED_AT_DESTINATION: L.SHIPPED,
    S.OUT_FOR_DELIVERY: L.SHIPPED,
    S.DELIVERY_ATTEMPTED: L.SHIPPED,
    S.DELIVERED: L.DELIVERED,
    S.DELIVERY_CONFIRMED: L.DELIVERED,
    S.ORDER_COMPLETED: L.COMPLETED,
    S.DELAYED: L.SHIPPED,
    S.WEATHER_DELAY: L.SHIPPED,
    S.MECHANICAL_DELAY: L.SHIPPED,
    S.ADDRESS_ISSUE: L.SHIPPED,
    S.CUSTOMER_UNAVAILABLE: L.SHIPPED,
    S.SECURITY_DELAY: L.SHIPPED,
    S.CUSTOMS_HOLD: L.SHIPPED,
    S.DAMAGED: L.CANCELLED,
    S.LOST: L.CANCELLED,
    S.CANCELLED: L.CANCELLED,
    S.RETURNED: L.CANCELLED,
}

# Canonical seed code per legacy value. Used only when importing legacy
# orders, never to pick a forward transition.
LEGACY_TO_DETAILED = {
    L.PENDING: S.ORDER_RECEIVED,
    L.WAITING_CONFIRMATION: S.ORDER_VERIFIED,
    L.CONFIRMED: S.ORDER_VERIFIED,
    L.PROCESSING: S.ORDER_PROCESSING,
    L.SHIPPED: S.IN_TRANSIT,
    L.DELIVERED: S.DELIVERED,
    L.COMPLETED: S.ORDER_COMPLETED,
    L.CANCELLED: S.CANCELLED,
}
