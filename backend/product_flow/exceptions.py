"""Error taxonomy shared by services, routes, and the MCP server."""

from __future__ import annotations

from typing import Dict, Optional


class ProductFlowError(Exception):
    """Base class for all Product Flow errors."""


class ValidationError(ProductFlowError):
    """Client-correctable input problem. Never reaches the store.

    ``errors`` maps each offending field to its message so a form can show
    every failing field at once.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid input: {fields}")


class NotFoundError(ProductFlowError):
    """The target record does not exist."""

    def __init__(self, entity: str, key: object, message: Optional[str] = None):
        self.entity = entity
        self.key = key
        super().__init__(message or f"{entity} {key} not found")


class StoreUnavailable(ProductFlowError):
    """The record store timed out or failed. Safe for the caller to retry."""

    retryable = True
