"""
Error taxonomy for the order and payment core

Every error carries a stable machine-readable code and the HTTP status the
API layer renders it with.
"""

from typing import Optional


class POSError(Exception):
    """Base class for all errors raised by the core"""

    status_code: int = 500
    default_code: str = "internal_error"

    def __init__(self, code: Optional[str] = None, message: Optional[str] = None):
        self.code = code or self.default_code
        self.message = message or self.code.replace("_", " ").capitalize()
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "error": self.code}


class ValidationError(POSError):
    """Malformed or out-of-range input"""

    status_code = 400
    default_code = "validation_error"


class NotFoundError(POSError):
    """Missing order, product or table"""

    status_code = 404
    default_code = "not_found"


class ConflictError(POSError):
    """Operation not allowed in the current state (overpay, terminal order)"""

    status_code = 409
    default_code = "conflict"


class StoreError(POSError):
    """Connectivity or transaction failure in the relational store"""

    status_code = 500
    default_code = "store_error"
