class NotFoundError(LookupError):
    """Requested row does not exist."""


class ConflictError(Exception):
    """Write would violate a uniqueness rule."""


class AccountDisabledError(Exception):
    """Login attempted on a profile whose status is not active."""
