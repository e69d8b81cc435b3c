from typing import Dict, Optional


class CatalogError(Exception):
    """Base class for failures surfaced by the catalog service."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class RecordNotFound(CatalogError):
    status_code = 404
    default_message = "Movie/Show not found"


class NotAuthorized(CatalogError):
    status_code = 403
    default_message = "Not authorized"


class RecordValidationError(CatalogError):
    """
    Raised when a candidate record breaks one or more field rules.

    :param errors: mapping of field name to a human readable message
    """

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors


class InternalError(CatalogError):
    status_code = 500
