"""Exception types raised by the content-preparation core."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a chunking or extraction policy is inconsistent.

    Subclasses :class:`ValueError` so callers validating user input with a
    plain ``except ValueError`` keep working.
    """
