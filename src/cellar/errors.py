"""Operational errors raised by cellar commands and queries.

Each error knows the HTTP status and machine-readable code it is reported
with. The API boundary (``cellar.api.errors``) serialises them uniformly;
anything that is not a ``CellarError`` is treated as an unexpected failure.
"""


class CellarError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return error


class NotFoundError(CellarError):
    status_code = 404
    code = "NOT_FOUND"


class InvalidError(CellarError):
    status_code = 400
    code = "INVALID"


class ConflictError(CellarError):
    status_code = 409
    code = "CONFLICT"


class InsufficientInventoryError(CellarError):
    status_code = 409
    code = "INSUFFICIENT_INVENTORY"


class InsufficientCartValueError(CellarError):
    status_code = 400
    code = "INSUFFICIENT_CART_VALUE"


class PaymentError(CellarError):
    status_code = 402
    code = "PAYMENT_FAILED"


class UnauthorizedError(CellarError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(CellarError):
    status_code = 403
    code = "FORBIDDEN"
