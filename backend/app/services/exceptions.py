"""
Service-layer exceptions

Raised by the services and mapped to HTTP status codes by the API layer.
"""


class OrderNotFoundError(LookupError):
    """No order with the given public id (or gateway reference)"""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class OrderValidationError(ValueError):
    """Order request rejected by a business rule (pricing, stock, minimum order)"""


class PaymentError(Exception):
    """Payment request that cannot be served for the order in its current state"""


class PaymentVerificationError(PaymentError):
    """Gateway signature or reference did not match"""
