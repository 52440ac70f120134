from .orders import Order, OrderStatusHistory
from .payments import PaymentAttempt, PaymentAttemptEvent

__all__ = [
    'Order', 'OrderStatusHistory',
    'PaymentAttempt', 'PaymentAttemptEvent',
]
