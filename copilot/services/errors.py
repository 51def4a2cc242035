"""Errors raised by the backend service clients.

Transport failures and unexpected HTTP statuses are left as ``httpx.HTTPError``;
only conditions callers handle specifically get their own type.
"""


class ServiceError(Exception):
    """Base class for backend service errors."""


class AuthenticationRequiredError(ServiceError):
    """The basket service requires a logged-in user."""


class ItemNotFoundError(ServiceError):
    """The catalog has no item with the requested id."""

    def __init__(self, item_id: int):
        super().__init__(f"Catalog item {item_id} not found")
        self.item_id = item_id
