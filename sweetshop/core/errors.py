"""Domain exceptions raised by the service layer.

Routers let these propagate; ``exception_handlers`` turns each one into a
JSON error body with the matching status code.
"""


class CatalogError(Exception):
    status_code = 400
    code = "catalog_error"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(CatalogError):
    """Malformed, missing or out-of-range input. Always caller-fixable."""
    status_code = 400
    code = "validation_error"


class NotFoundError(CatalogError):
    status_code = 404
    code = "not_found"


class ConflictError(CatalogError):
    """Insufficient stock at purchase time, or a duplicate account.

    Purchase folds the missing-record case into this error as well, since the
    conditional update cannot tell the two apart.
    """
    status_code = 400
    code = "insufficient_stock"


class StoreFailure(CatalogError):
    """The database failed (connectivity, timeout). Not retried here."""
    status_code = 500
    code = "store_failure"


class AuthError(CatalogError):
    status_code = 401
    code = "unauthorized"


class ForbiddenError(CatalogError):
    status_code = 403
    code = "forbidden"
