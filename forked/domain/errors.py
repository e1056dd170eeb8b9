# forked_api/forked/domain/errors.py
from __future__ import annotations


class ValidationError(ValueError):
    """Malformed or missing request fields. Reported to the caller, never retried."""


class NotFoundError(LookupError):
    """A requested document (recipe, comment, user) does not exist."""


class StoreUnavailable(RuntimeError):
    """The document store itself failed. Transient: callers may retry."""


class StoreDataError(RuntimeError):
    """A stored document cannot be read back. The store's fault, not the caller's."""
