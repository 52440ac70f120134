# Overview: Status categories grouping order states by fulfillment phase.

from enum import Enum


class StatusCategory(str, Enum):
    """Fulfillment phase an order status belongs to."""
    PRE_SHIPMENT = "pre_shipment"
    FULFILLMENT = "fulfillment"
    SHIPPING = "shipping"
    DELIVERY = "delivery"
    COMPLETION = "completion"
    EXCEPTION = "exception"
