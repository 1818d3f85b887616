from __future__ import annotations


class DomainError(Exception):
    """Business-rule failure surfaced to the caller with a stable kind.

    Subclasses only pin ``kind``, ``status_code`` and a default message; the
    API layer renders them as ``{"error": kind, "message": message}``.
    """

    kind = "error"
    status_code = 400
    default_message = "Request could not be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class InvalidRequest(DomainError):
    kind = "InvalidRequest"
    default_message = "Invalid request."


class AuthenticationRequired(DomainError):
    kind = "AuthenticationRequired"
    status_code = 401
    default_message = "Not authenticated."


class Unauthorized(DomainError):
    kind = "Unauthorized"
    status_code = 403
    default_message = "You are not allowed to perform this action."


class NotFound(DomainError):
    kind = "NotFound"
    status_code = 404
    default_message = "Not found."


class ItemUnavailable(DomainError):
    kind = "ItemUnavailable"
    status_code = 409
    default_message = "One or more menu items are no longer available. Please refresh and try again."


class VariantUnavailable(DomainError):
    kind = "VariantUnavailable"
    status_code = 409
    default_message = "Selected variant is no longer available. Please refresh and try again."


class ChoiceUnavailable(DomainError):
    kind = "ChoiceUnavailable"
    status_code = 409
    default_message = "Selected choice is no longer available. Please refresh and try again."


class BundleItemUnavailable(DomainError):
    kind = "BundleItemUnavailable"
    status_code = 409
    default_message = "One or more bundle items are no longer available. Please refresh and try again."


class InvalidQuantity(DomainError):
    kind = "InvalidQuantity"
    default_message = "Invalid quantity. Please enter a positive whole number."


class InvalidVoucher(DomainError):
    kind = "InvalidVoucher"
    default_message = "Invalid voucher code."


class VoucherExpired(DomainError):
    kind = "VoucherExpired"
    default_message = "Voucher has expired."


class VoucherExhausted(DomainError):
    kind = "VoucherExhausted"
    status_code = 409
    default_message = "Voucher usage limit reached."


class MinOrderNotMet(DomainError):
    kind = "MinOrderNotMet"
    default_message = "Minimum order amount for this voucher was not reached."


class AmountMismatch(DomainError):
    kind = "AmountMismatch"
    status_code = 409
    default_message = "Order amounts are out of date. Please refresh and try again."


class OrderFinal(DomainError):
    kind = "OrderFinal"
    status_code = 409
    default_message = "This order is already closed and can no longer be modified."


class OrderNotEditable(DomainError):
    kind = "OrderNotEditable"
    status_code = 409
    default_message = "Order items cannot be modified in the current state."


class OrderingUnavailable(DomainError):
    kind = "OrderingUnavailable"
    status_code = 409
    default_message = "The restaurant is not accepting orders right now."


class InvalidSchedule(DomainError):
    kind = "InvalidSchedule"
    default_message = "Please choose a valid pre-order date and time."


class CancellationWindowClosed(DomainError):
    kind = "CancellationWindowClosed"
    status_code = 409
    default_message = "Pre-orders can only be cancelled at least 1 day before the scheduled order date."


class ChatDisabled(DomainError):
    kind = "ChatDisabled"
    status_code = 409
    default_message = "Chat is disabled for this order."


class RateLimitExceeded(DomainError):
    kind = "RateLimitExceeded"
    status_code = 429
    default_message = "Too many requests. Please try again later."

    def __init__(self, message: str | None = None, *, retry_after: int = 0):
        self.retry_after = max(0, int(retry_after))
        super().__init__(message)


class InvalidCoordinates(DomainError):
    kind = "InvalidCoordinates"
    default_message = "Invalid delivery coordinates."


class InvalidPaymentProof(DomainError):
    kind = "InvalidPaymentProof"
    default_message = "Invalid payment proof. Please upload a valid image."
