"""Error taxonomy for the billing engine.

Every error carries the HTTP status the API layer reports it with, so a single
exception handler can surface any of them without crashing the session.
"""

from typing import Optional


class BillingError(Exception):
    """Base class for recoverable billing failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ItemNotFound(BillingError):
    """Item code (or menu id) matches no menu record."""

    status_code = 404

    def __init__(self, code):
        super().__init__(f"Item not found: '{code}'. Please enter a valid code.")
        self.code = code


class InvalidMenuData(BillingError):
    """Matched menu record has a missing or malformed rate."""

    status_code = 422

    def __init__(self, menu_id, field: str, value):
        super().__init__(f"Menu item {menu_id} has an invalid {field}: {value!r}")
        self.menu_id = menu_id
        self.field = field


class EmptyOrder(BillingError):
    status_code = 400

    def __init__(self):
        super().__init__("Cannot finalize an empty bill.")


class MissingTable(BillingError):
    status_code = 400

    def __init__(self):
        super().__init__("Please enter a Table Number before finalizing the bill.")


class CommitError(BillingError):
    """Storage rejected the bill; nothing was persisted."""

    status_code = 500

    def __init__(self, cause: Optional[BaseException] = None):
        reason = str(cause) if cause is not None else "unknown error"
        super().__init__(f"Could not save the bill to the database. Reason: {reason}")
        self.cause = cause
