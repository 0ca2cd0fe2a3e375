"""Tillman exceptions.

Error taxonomy for the point-of-sale engine:

    ValidationError  - fatal to the current checkout attempt, sale stays drafting
    NotFoundError    - unknown customer/product, handled by the caller's flows
    TransientError   - network/remote failure, always recovered via the outbox
    ReplayError      - a queued sale failed again during sync, stays queued
"""


class BaseError(Exception):
    """
    Structured exception with a stable code, a human message and extra data.

    Usage:
        try:
            terminal.confirm("cash", cash_received=Decimal("100"))
        except TillmanError as e:
            if e.code == "INSUFFICIENT_CASH":
                ask_for_more_cash(e.data["missing"])
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class TillmanError(BaseError):
    """Root of all Tillman errors."""

    _default_messages = {
        "INSUFFICIENT_CASH": "Cash received is less than the sale total",
        "INSUFFICIENT_POINTS": "Insufficient points for redemption",
        "EMPTY_CART": "Cart is empty",
        "INVALID_QUANTITY": "Quantity must be positive",
        "INVALID_PAYMENT_METHOD": "Unsupported payment method",
        "CHECKOUT_IN_PROGRESS": "Another sale is already frozen on this terminal",
        "NOT_FROZEN": "No frozen sale to confirm",
        "CUSTOMER_REQUIRED": "Identify the customer before checkout",
        "LEDGER_NEGATIVE_BALANCE": "Ledger balance cannot become negative",
        "INVALID_TIER": "Tier minimum is greater than its maximum",
        "OVERLAPPING_TIERS": "Tier ranges overlap",
        "CUSTOMER_NOT_FOUND": "Customer not found",
        "PRODUCT_NOT_FOUND": "Product not found",
        "REMOTE_UNAVAILABLE": "Remote store unavailable",
        "REMOTE_TIMEOUT": "Remote store timed out",
        "REMOTE_REJECTED": "Remote store rejected the request",
        "REPLAY_FAILED": "Queued sale could not be replayed",
    }


class ValidationError(TillmanError):
    """Checkout input is invalid; the operator must correct it."""


class NotFoundError(TillmanError):
    """Customer or product lookup came back empty."""


class TransientError(TillmanError):
    """Remote call failed; the sale is saved offline instead."""


class ReplayError(TillmanError):
    """Replay of a queued sale failed; it stays queued."""
