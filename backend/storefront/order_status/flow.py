# Overview: Allowed order status transitions (adjacency map).
#
# Main line: pre_shipment -> fulfillment -> shipping -> delivery -> completion.
# Exception states are detours off shipping/delivery that re-enter the main line.
# ORDER_COMPLETED, CANCELLED and RETURNED are sinks.

from .definitions import OrderStatus as S


STATUS_FLOW = {
    # Pre-shipment (cancellable until fulfillment starts picking)
    S.ORDER_RECEIVED: frozenset({S.PAYMENT_AUTHORIZED, S.CANCELLED}),
    S.PAYMENT_AUTHORIZED: frozenset({S.ORDER_VERIFIED, S.CANCELLED}),
    S.ORDER_VERIFIED: frozenset({S.INVENTORY_ALLOCATED, S.CANCELLED}),
    S.INVENTORY_ALLOCATED: frozenset({S.ORDER_PROCESSING, S.CANCELLED}),

    # Fulfillment
    S.ORDER_PROCESSING: frozenset({S.PICKING_STARTED, S.CANCELLED}),
    S.PICKING_STARTED: frozenset({S.PICKING_COMPLETED}),
    S.PICKING_COMPLETED: frozenset({S.PACKING_STARTED}),
    S.PACKING_STARTED: frozenset({S.PACKING_COMPLETED}),
    S.PACKING_COMPLETED: frozenset({S.READY_TO_SHIP}),
    S.READY_TO_SHIP: frozenset({S.CARRIER_PICKUP_SCHEDULED}),

    # Shipping
    S.CARRIER_PICKUP_SCHEDULED: frozenset({S.PICKED_UP}),
    S.PICKED_UP: frozenset({S.IN_TRANSIT, S.DELAYED, S.LOST}),
    S.IN_TRANSIT: frozenset({
        S.ARRIVED_AT_ORIGIN,
        S.DEPARTED_ORIGIN,
        S.DELAYED,
        S.WEATHER_DELAY,
        S.MECHANICAL_DELAY,
        S.SECURITY_DELAY,
        S.CUSTOMS_HOLD,
        S.DAMAGED,
        S.LOST,
    }),
    S.ARRIVED_AT_ORIGIN: frozenset({S.DEPARTED_ORIGIN}),
    S.DEPARTED_ORIGIN: frozenset({S.ARRIVED_AT_SORT}),
    S.ARRIVED_AT_SORT: frozenset({S.PROCESSED_AT_SORT}),
    S.PROCESSED_AT_SORT: frozenset({S.DEPARTED_SORT}),
    S.DEPARTED_SORT: frozenset({S.ARRIVED_AT_DESTINATION}),
    S.ARRIVED_AT_DESTINATION: frozenset({S.OUT_FOR_DELIVERY}),

    # Delivery
    S.OUT_FOR_DELIVERY: frozenset({
        S.DELIVERED,
        S.DELIVERY_ATTEMPTED,
        S.ADDRESS_ISSUE,
        S.CUSTOMER_UNAVAILABLE,
        S.DELAYED,
    }),
    S.DELIVERY_ATTEMPTED: frozenset({S.DELIVERED, S.OUT_FOR_DELIVERY}),
    S.DELIVERED: frozenset({S.DELIVERY_CONFIRMED}),

    # Completion
    S.DELIVERY_CONFIRMED: frozenset({S.ORDER_COMPLETED}),
    S.ORDER_COMPLETED: frozenset(),

    # Exception detours
    S.DELAYED: frozenset({S.IN_TRANSIT, S.OUT_FOR_DELIVERY}),
    S.WEATHER_DELAY: frozenset({S.IN_TRANSIT, S.OUT_FOR_DELIVERY}),
    S.MECHANICAL_DELAY: frozenset({S.IN_TRANSIT, S.OUT_FOR_DELIVERY}),
    S.SECURITY_DELAY: frozenset({S.IN_TRANSIT}),
    S.CUSTOMS_HOLD: frozenset({S.IN_TRANSIT, S.RETURNED}),
    S.ADDRESS_ISSUE: frozenset({S.OUT_FOR_DELIVERY, S.RETURNED}),
    S.CUSTOMER_UNAVAILABLE: frozenset({S.OUT_FOR_DELIVERY}),
    S.DAMAGED: frozenset({S.CANCELLED}),
    S.LOST: frozenset({S.CANCELLED}),
    S.CANCELLED: frozenset(),
    S.RETURNED: frozenset(),
}

TERMINAL_STATUSES = frozenset({S.ORDER_COMPLETED, S.CANCELLED, S.RETURNED})
