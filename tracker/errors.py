from __future__ import annotations


class TrackerError(Exception):
    """Base class for errors raised by the tracker data layer."""


class ValidationError(TrackerError, ValueError):
    """Input rejected before it reaches the database."""


class ConstraintViolation(TrackerError):
    """A write broke a database constraint (e.g. sale for an unknown product)."""


class InsufficientStock(ConstraintViolation):
    """A sale would push stock below zero while negative stock is disallowed."""

    def __init__(self, product_id: int, on_hand: int, requested: int):
        self.product_id = product_id
        self.on_hand = on_hand
        self.requested = requested
        super().__init__(f"Not enough stock for product {product_id}: {on_hand} on hand, {requested} requested.")


class StorageUnavailable(TrackerError):
    """The database file could not be opened."""
