"""Numberman exceptions.

Every error raised by the services carries a stable ``code`` and a ``kind``.
Views translate the kind to an HTTP status; callers branch on the code.

Usage:
    try:
        transitions.assign(ids, client_name="")
    except NumbermanError as e:
        if e.code == "CLIENT_REQUIRED":
            ask_for_client()
"""


class BaseError(Exception):
    """
    Structured exception with a code, a human-readable message and extra data.

    Subclasses provide ``_default_messages`` keyed by code.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }

    def __repr__(self):
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"


class NumbermanError(BaseError):
    """Base for all inventory errors."""

    kind = "error"
    http_status = 500

    _default_messages = {
        # Validation
        "IDS_REQUIRED": "At least one phone number id is required",
        "INVALID_ID": "Malformed id",
        "CLIENT_REQUIRED": "Client name is required",
        "INVALID_ACTION": "Invalid action type",
        "DATE_REQUIRED": "A date is required",
        "INVALID_DATE": "Invalid date",
        "PREFIX_REQUIRED": "Prefix is required",
        "INVALID_PREFIX": "Prefix must contain digits only",
        "INVALID_RANGE": "Invalid range format. Use format: 02125617950 - 02125617999",
        "INVALID_RANGE_ORDER": "End number must be greater than or equal to start",
        "INVALID_ROLE": "Invalid role",
        "INVALID_STATUS": "Invalid status",
        "EMAIL_REQUIRED": "Email is required",
        "INVALID_JSON": "Request body must be a JSON object",
        "INVALID_PARAMETER": "Invalid query parameter",
        # Authorization
        "NOT_AUTHENTICATED": "Authentication required",
        "NOT_APPROVED": "Account is not approved",
        "ADMIN_REQUIRED": "Administrator role required",
        "SELF_MODIFICATION": "Cannot change your own account",
        # Lookup
        "PHONE_NOT_FOUND": "Phone number not found",
        "HISTORY_NOT_FOUND": "History entry not found",
        "BLOCK_NOT_FOUND": "No phones found in this block",
        "ACCOUNT_NOT_FOUND": "Account not found",
        # Conflicts and limits
        "DUPLICATE_NUMBER": "Phone number already exists",
        "CONFLICT": "Conflicting change",
        "RANGE_TOO_LARGE": "Maximum range is 10,000 numbers per request",
        # Store
        "STORE_FAILURE": "Storage failure",
    }


class ValidationError(NumbermanError):
    """Malformed or missing input. Caller must correct and retry."""

    kind = "validation"
    http_status = 400


class ForbiddenError(NumbermanError):
    """Authorization failure."""

    kind = "forbidden"
    http_status = 403

    def __init__(self, code: str, message: str | None = None, **data):
        super().__init__(code, message, **data)
        if code == "NOT_AUTHENTICATED":
            self.http_status = 401


class NotFoundError(NumbermanError):
    """Referenced entity does not exist."""

    kind = "not_found"
    http_status = 404


class ConflictError(NumbermanError):
    """Uniqueness violation."""

    kind = "conflict"
    http_status = 409


class CapacityError(NumbermanError):
    """Request exceeds a size cap."""

    kind = "capacity"
    http_status = 400


class StoreError(NumbermanError):
    """Underlying persistence failure. The cause is chained, never exposed."""

    kind = "store"
    http_status = 500
