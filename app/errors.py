# app/errors.py
"""Exceptions raised by the store logic and mapped to HTTP responses in main.py."""


class StoreError(Exception):
    """Base exception for all store errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class OrderValidationError(StoreError):
    """Raised when an order request body has the wrong shape."""

    status_code = 400


class NotFoundError(StoreError):
    """Raised when a product or order id does not resolve.

    Also used when an order exists but the supplied email does not match,
    so callers cannot tell the two cases apart.
    """

    status_code = 404


class DuplicateOrderError(StoreError):
    """Raised when an order id is already present in the store."""

    status_code = 409

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order already exists: {order_id}")
