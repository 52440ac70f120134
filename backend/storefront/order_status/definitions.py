# Overview: All order status definitions organized by category.
# Each status is defined as: (code, label, description, is_milestone)

from enum import Enum

from .categories import StatusCategory


class OrderStatus(str, Enum):
    """Closed set of detailed order status codes."""
    # Pre-shipment
    ORDER_RECEIVED = "ORDER_RECEIVED"
    PAYMENT_AUTHORIZED = "PAYMENT_AUTHORIZED"
    ORDER_VERIFIED = "ORDER_VERIFIED"
    INVENTORY_ALLOCATED = "INVENTORY_ALLOCATED"
    # Fulfillment
    ORDER_PROCESSING = "ORDER_PROCESSING"
    PICKING_STARTED = "PICKING_STARTED"
    PICKING_COMPLETED = "PICKING_COMPLETED"
    PACKING_STARTED = "PACKING_STARTED"
    PACKING_COMPLETED = "PACKING_COMPLETED"
    READY_TO_SHIP = "READY_TO_SHIP"
    # Shipping
    CARRIER_PICKUP_SCHEDULED = "CARRIER_PICKUP_SCHEDULED"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    ARRIVED_AT_ORIGIN = "ARRIVED_AT_ORIGIN"
    DEPARTED_ORIGIN = "DEPARTED_ORIGIN"
    ARRIVED_AT_SORT = "ARRIVED_AT_SORT"
    PROCESSED_AT_SORT = "PROCESSED_AT_SORT"
    DEPARTED_SORT = "DEPARTED_SORT"
    ARRIVED_AT_DESTINATION = "ARRIVED_AT_DESTINATION"
    # Delivery
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERY_ATTEMPTED = "DELIVERY_ATTEMPTED"
    DELIVERED = "DELIVERED"
    # Completion
    DELIVERY_CONFIRMED = "DELIVERY_CONFIRMED"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    # Exceptions
    DELAYED = "DELAYED"
    WEATHER_DELAY = "WEATHER_DELAY"
    MECHANICAL_DELAY = "MECHANICAL_DELAY"
    ADDRESS_ISSUE = "ADDRESS_ISSUE"
    CUSTOMER_UNAVAILABLE = "CUSTOMER_UNAVAILABLE"
    SECURITY_DELAY = "SECURITY_DELAY"
    CUSTOMS_HOLD = "CUSTOMS_HOLD"
    DAMAGED = "DAMAGED"
    LOST = "LOST"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"


S = OrderStatus


# -- PRE-SHIPMENT --

PRE_SHIPMENT_STATUSES = [
    (S.ORDER_RECEIVED, "Order Received", "Order placed and received in system", True),
    (S.PAYMENT_AUTHORIZED, "Payment Authorized", "Payment processed successfully", True),
    (S.ORDER_VERIFIED, "Order Verified", "Customer and shipping details verified", True),
    (S.INVENTORY_ALLOCATED, "Inventory Allocated", "Items reserved from stock", False),
]


# -- FULFILLMENT --

FULFILLMENT_STATUSES = [
    (S.ORDER_PROCESSING, "Order Processing", "Starting fulfillment process", True),
    (S.PICKING_STARTED, "Picking Started", "Warehouse staff gathering items", False),
    (S.PICKING_COMPLETED, "Picking Completed", "All items collected", False),
    (S.PACKING_STARTED, "Packing Started", "Items being packaged", False),
    (S.PACKING_COMPLETED, "Packing Completed", "Package ready for shipping", True),
    (S.READY_TO_SHIP, "Ready to Ship", "Packaged, awaiting carrier pickup", True),
]


# -- SHIPPING --

SHIPPING_STATUSES = [
    (S.CARRIER_PICKUP_SCHEDULED, "Pickup Scheduled", "Carrier scheduled for pickup", False),
    (S.PICKED_UP, "Picked Up", "Carrier has collected package", True),
    (S.IN_TRANSIT, "In Transit", "Package moving through carrier network", False),
    (S.ARRIVED_AT_ORIGIN, "Arrived at Origin Facility", "At initial sorting center", False),
    (S.DEPARTED_ORIGIN, "Departed Origin Facility", "Left initial facility", False),
    (S.ARRIVED_AT_SORT, "Arrived at Sort Facility", "At regional sorting center", False),
    (S.PROCESSED_AT_SORT, "Processed at Sort Facility", "Sorted for destination", False),
    (S.DEPARTED_SORT, "Departed Sort Facility", "En route to destination", False),
    (S.ARRIVED_AT_DESTINATION, "Arrived at Destination", "At local delivery facility", False),
]


# -- DELIVERY --

DELIVERY_STATUSES = [
    (S.OUT_FOR_DELIVERY, "Out for Delivery", "On delivery vehicle today", True),
    (S.DELIVERY_ATTEMPTED, "Delivery Attempted", "Attempt made, may need retry", False),
    (S.DELIVERED, "Delivered", "Package successfully delivered", True),
]


# -- COMPLETION --

COMPLETION_STATUSES = [
    (S.DELIVERY_CONFIRMED, "Delivery Confirmed", "Customer confirmed receipt", False),
    (S.ORDER_COMPLETED, "Order Completed", "Order finalized, customer satisfied", True),
]


# -- EXCEPTIONS --

EXCEPTION_STATUSES = [
    (S.DELAYED, "Delayed", "Delivery delayed due to external factors", False),
    (S.WEATHER_DELAY, "Weather Delay", "Severe weather affecting delivery", False),
    (S.MECHANICAL_DELAY, "Mechanical Delay", "Vehicle/equipment issues", False),
    (S.ADDRESS_ISSUE, "Address Issue", "Incorrect or incomplete address", False),
    (S.CUSTOMER_UNAVAILABLE, "Customer Unavailable", "No one available to receive", False),
    (S.SECURITY_DELAY, "Security Delay", "Security screening required", False),
    (S.CUSTOMS_HOLD, "Customs Hold", "International customs clearance", False),
    (S.DAMAGED, "Package Damaged", "Package damaged in transit", False),
    (S.LOST, "Package Lost", "Package cannot be located", False),
    (S.CANCELLED, "Order Cancelled", "Order cancelled by customer or system", True),
    (S.RETURNED, "Returned to Sender", "Package returned to origin", False),
]


STATUS_DEFINITIONS = {
    StatusCategory.PRE_SHIPMENT: PRE_SHIPMENT_STATUSES,
    StatusCategory.FULFILLMENT: FULFILLMENT_STATUSES,
    StatusCategory.SHIPPING: SHIPPING_STATUSES,
    StatusCategory.DELIVERY: DELIVERY_STATUSES,
    StatusCategory.COMPLETION: COMPLETION_STATUSES,
    StatusCategory.EXCEPTION: EXCEPTION_STATUSES,
}
